"""Schémas Planning (Gantt, estimations, conflits) / Planning schemas (Gantt, estimations, conflicts)."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict


class GanttTaskRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: str
    name: str
    start: datetime
    end: datetime
    duration: float                 # heures / hours
    progress: int
    status: str
    priority: str
    assigned_to: str
    type: str
    category: str | None = None
    color: str
    text_color: str
    vehicle_id: str | None = None
    vehicle_type: str | None = None
    location: str | None = None
    dependencies: list[str] = []
    resources: dict[str, int] | None = None


class GanttGroup(BaseModel):
    name: str
    color: str
    tasks: list[GanttTaskRead]


class GanttResponse(BaseModel):
    project_start_date: str
    total: int
    tasks: list[GanttTaskRead]
    groups: dict[str, GanttGroup] | None = None


class BreakdownPhaseRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    phase: str
    duration: float
    description: str


class EstimationRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    estimated_end_date: str
    total_days: int
    method: str
    confidence: str
    details: str
    breakdown: list[BreakdownPhaseRead] = []


class EstimationsResponse(BaseModel):
    project_start_date: str
    estimations: list[EstimationRead]
    recommended: EstimationRead


class ConflictRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: str
    type: str
    severity: str
    description: str
    conflicting_tasks: list[str | None]
    auto_resolvable: bool
    suggested_resolution: dict[str, Any] | None = None


class ConflictReportRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    conflicts: list[ConflictRead]
    suggestions: list[str]
