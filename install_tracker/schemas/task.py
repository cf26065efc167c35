"""Schémas Tâche / Task schemas."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from install_tracker.models.task import TaskPriority, TaskStatus
from install_tracker.services.time_calculator import HHMM_PATTERN, ISO_DATE_PATTERN


class TaskBase(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    description: str | None = None
    vehicle_id: str | list[str] | None = None
    assigned_to: str | list[str] | None = None
    priority: TaskPriority = TaskPriority.MEDIUM
    estimated_duration: int | None = None
    actual_duration: int | None = None
    duration_days: int | None = None
    start_time: str | None = None
    end_time: str | None = None
    start_date: str | None = None
    end_date: str | None = None
    category: str | None = None
    notes: str | None = None
    tags: list[str] | None = None
    dependencies: list[str] | None = None
    blocked_by: list[str] | None = None
    recurrence_pattern: dict[str, Any] | None = None
    parent_task_id: str | None = None
    completion_percentage: int = Field(default=0, ge=0, le=100)
    is_milestone: bool = False


class TaskCreate(TaskBase):
    id: str | None = None
    status: TaskStatus = TaskStatus.PENDING
    start_time: str | None = Field(default=None, pattern=HHMM_PATTERN)
    end_time: str | None = Field(default=None, pattern=HHMM_PATTERN)
    start_date: str | None = Field(default=None, pattern=ISO_DATE_PATTERN)
    end_date: str | None = Field(default=None, pattern=ISO_DATE_PATTERN)


class TaskUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    vehicle_id: str | list[str] | None = None
    assigned_to: str | list[str] | None = None
    status: TaskStatus | None = None
    priority: TaskPriority | None = None
    estimated_duration: int | None = None
    actual_duration: int | None = None
    duration_days: int | None = None
    start_time: str | None = Field(default=None, pattern=HHMM_PATTERN)
    end_time: str | None = Field(default=None, pattern=HHMM_PATTERN)
    start_date: str | None = Field(default=None, pattern=ISO_DATE_PATTERN)
    end_date: str | None = Field(default=None, pattern=ISO_DATE_PATTERN)
    category: str | None = None
    notes: str | None = None
    tags: list[str] | None = None
    dependencies: list[str] | None = None
    blocked_by: list[str] | None = None
    recurrence_pattern: dict[str, Any] | None = None
    parent_task_id: str | None = None
    completion_percentage: int | None = Field(default=None, ge=0, le=100)
    is_milestone: bool | None = None


class TaskRead(TaskBase):
    model_config = ConfigDict(from_attributes=True)
    id: str
    status: TaskStatus
    completion_percentage: int | None = 0
    is_milestone: bool | None = False
    created_at: str | None = None
    updated_at: str | None = None


class TaskStatusUpdate(BaseModel):
    status: TaskStatus


class TaskBulkStatusUpdate(BaseModel):
    task_ids: list[str]
    status: TaskStatus


class TaskDraft(BaseModel):
    """Tache non persistee a valider / Unsaved task to validate.

    Tous les champs sont libres pour que la validation rapporte les erreurs.
    All fields are loose so validation can report the errors itself.
    """
    id: str | None = None
    name: str | None = None
    vehicle_id: str | list[str] | None = None
    assigned_to: str | list[str] | None = None
    status: str | None = None
    priority: str | None = None
    estimated_duration: int | None = None
    actual_duration: int | None = None
    start_time: str | None = None
    end_time: str | None = None
    start_date: str | None = None
    end_date: str | None = None
    completion_percentage: int | None = None
    dependencies: list[str] | None = None
    notes: str | None = None
    description: str | None = None


class TaskStats(BaseModel):
    total: int
    completed: int
    in_progress: int
    pending: int
    blocked: int
    scheduled: int
    high_priority: int
    medium_priority: int
    low_priority: int
    assignee_breakdown: dict[str, dict[str, int]]


class StandardTasksRequest(BaseModel):
    assigned_to: str | list[str] | None = None
    start_date: str | None = Field(default=None, pattern=ISO_DATE_PATTERN)
