"""Modele Membre d'equipe / Team member model."""

from sqlalchemy import JSON, Float, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from install_tracker.database import Base


class TeamMember(Base):
    """Technicien et ses indicateurs / Technician and performance metrics."""
    __tablename__ = "team_members"

    id: Mapped[str] = mapped_column(String(20), primary_key=True)  # ex: TM001
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    role: Mapped[str] = mapped_column(String(100), nullable=False)
    specializations: Mapped[list[str] | None] = mapped_column(JSON)

    # --- Indicateurs recalcules depuis les taches / Metrics recomputed from tasks ---
    completion_rate: Mapped[float | None] = mapped_column(Float)
    average_task_time: Mapped[int | None] = mapped_column(Integer)  # minutes
    quality_score: Mapped[float | None] = mapped_column(Float)

    email: Mapped[str | None] = mapped_column(String(150))
    phone: Mapped[str | None] = mapped_column(String(30))
    created_at: Mapped[str | None] = mapped_column(String(32))

    def __repr__(self) -> str:
        return f"<TeamMember {self.id} - {self.name}>"
