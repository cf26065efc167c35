"""Parametres projet (ligne unique id='default') / Project settings (singleton row id='default')."""

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from install_tracker.database import Base

DEFAULT_SETTINGS_ID = "default"


class ProjectSettings(Base):
    """Ancre calendaire du projet / Project calendar anchor."""
    __tablename__ = "project_settings"

    id: Mapped[str] = mapped_column(String(20), primary_key=True, default=DEFAULT_SETTINGS_ID)
    project_start_date: Mapped[str] = mapped_column(String(10), nullable=False)  # YYYY-MM-DD
    project_end_date: Mapped[str | None] = mapped_column(String(10))
    total_days: Mapped[int | None] = mapped_column(Integer)
    created_at: Mapped[str | None] = mapped_column(String(32))
    updated_at: Mapped[str | None] = mapped_column(String(32))

    def __repr__(self) -> str:
        return f"<ProjectSettings start={self.project_start_date} days={self.total_days}>"
