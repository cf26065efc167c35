"""Schémas Paramètres projet / Project settings schemas."""

from datetime import date

from pydantic import BaseModel, ConfigDict, Field


class ProjectSettingsRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: str
    project_start_date: str
    project_end_date: str | None = None
    total_days: int | None = None
    created_at: str | None = None
    updated_at: str | None = None


class ProjectSettingsUpdate(BaseModel):
    project_start_date: date | None = None
    project_end_date: date | None = None
    total_days: int | None = Field(default=None, ge=1)


class ProjectStats(BaseModel):
    total_vehicles: int
    completed_vehicles: int
    in_progress_vehicles: int
    pending_vehicles: int
    total_tasks: int
    completed_tasks: int
    team_size: int
    progress: int
    project_status: str
    project_phase: str
    current_day: int | None = None
    start_date: str | None = None
