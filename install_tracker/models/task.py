"""Modele Tache / Task model.

Une tache peut viser zero, un ou plusieurs vehicules et assignes (colonnes JSON).
A task may target zero, one or several vehicles and assignees (JSON columns).
"""

import enum
from typing import Any

from sqlalchemy import JSON, Boolean, Enum, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from install_tracker.database import Base
from install_tracker.models.vehicle import enum_values


class TaskStatus(str, enum.Enum):
    """Statut de tache / Task status."""
    PENDING = "Pending"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"
    BLOCKED = "Blocked"
    SCHEDULED = "Scheduled"


class TaskPriority(str, enum.Enum):
    """Priorite de tache / Task priority."""
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


class Task(Base):
    """Tache d'installation / Installation task."""
    __tablename__ = "tasks"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)

    # null = tache partagee (pause, trajet) / null = shared task (break, travel)
    vehicle_id: Mapped[Any] = mapped_column(JSON, nullable=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    status: Mapped[TaskStatus] = mapped_column(
        Enum(TaskStatus, values_callable=enum_values, native_enum=False, length=20),
        default=TaskStatus.PENDING,
    )
    assigned_to: Mapped[Any] = mapped_column(JSON, nullable=True)
    priority: Mapped[TaskPriority] = mapped_column(
        Enum(TaskPriority, values_callable=enum_values, native_enum=False, length=10),
        default=TaskPriority.MEDIUM,
    )

    # --- Durees (minutes) / Durations (minutes) ---
    estimated_duration: Mapped[int | None] = mapped_column(Integer)
    actual_duration: Mapped[int | None] = mapped_column(Integer)
    duration_days: Mapped[int | None] = mapped_column(Integer)

    # --- Planning ---
    start_time: Mapped[str | None] = mapped_column(String(5))  # HH:MM
    end_time: Mapped[str | None] = mapped_column(String(5))
    start_date: Mapped[str | None] = mapped_column(String(10))  # YYYY-MM-DD
    end_date: Mapped[str | None] = mapped_column(String(10))

    category: Mapped[str | None] = mapped_column(String(50))
    notes: Mapped[str | None] = mapped_column(Text)
    tags: Mapped[list[str] | None] = mapped_column(JSON)

    # --- Dependances / Dependencies ---
    dependencies: Mapped[list[str] | None] = mapped_column(JSON)
    blocked_by: Mapped[list[str] | None] = mapped_column(JSON)
    recurrence_pattern: Mapped[dict | None] = mapped_column(JSON)
    parent_task_id: Mapped[str | None] = mapped_column(String(64))
    completion_percentage: Mapped[int] = mapped_column(Integer, default=0)
    is_milestone: Mapped[bool] = mapped_column(Boolean, default=False)

    created_at: Mapped[str | None] = mapped_column(String(32))  # ISO 8601
    updated_at: Mapped[str | None] = mapped_column(String(32))

    comments: Mapped[list["Comment"]] = relationship(
        back_populates="task", cascade="all, delete-orphan"
    )

    @property
    def vehicle_ids(self) -> list[str]:
        """Liste normalisee des vehicules / Normalized vehicle id list."""
        return as_list(self.vehicle_id)

    @property
    def assignees(self) -> list[str]:
        """Liste normalisee des assignes / Normalized assignee list."""
        return as_list(self.assigned_to)

    def __repr__(self) -> str:
        return f"<Task {self.id} - {self.name}>"


def as_list(value: str | list[str] | None) -> list[str]:
    """Normaliser une valeur simple ou multiple / Normalize a single-or-multiple value."""
    if value is None or value == "":
        return []
    if isinstance(value, (list, tuple)):
        return [str(v) for v in value if v]
    return [str(value)]
