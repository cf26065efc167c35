"""Schémas Membre d'équipe / Team member schemas."""

from pydantic import BaseModel, ConfigDict, Field


class TeamMemberBase(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    role: str
    specializations: list[str] | None = None
    completion_rate: float | None = Field(default=None, ge=0, le=100)
    average_task_time: int | None = Field(default=None, ge=0)
    quality_score: float | None = Field(default=None, ge=0, le=100)
    email: str | None = None
    phone: str | None = None


class TeamMemberCreate(TeamMemberBase):
    id: str = Field(min_length=1, max_length=20)


class TeamMemberUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=100)
    role: str | None = None
    specializations: list[str] | None = None
    completion_rate: float | None = Field(default=None, ge=0, le=100)
    average_task_time: int | None = Field(default=None, ge=0)
    quality_score: float | None = Field(default=None, ge=0, le=100)
    email: str | None = None
    phone: str | None = None


class TeamMemberRead(TeamMemberBase):
    model_config = ConfigDict(from_attributes=True)
    id: str
    created_at: str | None = None


class TeamMemberStats(BaseModel):
    id: str
    name: str
    role: str
    total_tasks: int
    completed_tasks: int
    in_progress_tasks: int
    pending_tasks: int
    blocked_tasks: int
    completion_rate: int


class TeamMemberWorkload(BaseModel):
    id: str
    name: str
    total: int
    completed: int
    in_progress: int
    pending: int
    blocked: int
    scheduled_minutes: int
    task_ids: list[str]
