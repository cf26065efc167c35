"""Routes Parametres projet / Project settings API routes."""

import logging
from datetime import timedelta

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from install_tracker.api.ws_changes import queue_change
from install_tracker.config import settings
from install_tracker.database import get_db
from install_tracker.models.comment import Comment
from install_tracker.models.task import Task, TaskStatus
from install_tracker.models.vehicle import Vehicle, VehicleStatus
from install_tracker.schemas.project_settings import ProjectSettingsRead, ProjectSettingsUpdate, ProjectStats
from install_tracker.services.data_service import (
    get_or_create_settings,
    load_tasks,
    load_team_members,
    load_vehicles,
    utc_now,
)
from install_tracker.services.stats_service import StatsService
from install_tracker.services.time_calculator import TimeCalculatorService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/", response_model=ProjectSettingsRead)
async def get_project_settings(db: AsyncSession = Depends(get_db)):
    """Parametres projet / Project settings."""
    return await get_or_create_settings(db)


@router.put("/", response_model=ProjectSettingsRead)
async def update_project_settings(data: ProjectSettingsUpdate, db: AsyncSession = Depends(get_db)):
    """
    Modifier les dates du projet / Update project dates.
    La date de fin est deduite de total_days si absente, et inversement. Sans l'une
    ni l'autre, la duree enregistree est conservee et la fin suit le debut.
    The end date is derived from total_days when missing, and the other way round.
    With neither, the stored duration is kept and the end follows the start.
    """
    project = await get_or_create_settings(db)
    updates = data.model_dump(exclude_unset=True)

    start = updates.get("project_start_date") or TimeCalculatorService.parse_date(project.project_start_date)
    end = updates.get("project_end_date")
    total_days = updates.get("total_days")
    if end is None and total_days is None:
        total_days = project.total_days
        if total_days is None:
            end = TimeCalculatorService.parse_date(project.project_end_date)
    if end is None and total_days is not None:
        end = start + timedelta(days=total_days - 1)
    if end is not None:
        if end < start:
            raise HTTPException(status_code=400, detail="Project end date must be after start date")
        if total_days is None:
            total_days = (end - start).days + 1

    project.project_start_date = start.isoformat()
    if end is not None:
        project.project_end_date = end.isoformat()
        project.total_days = total_days
    project.updated_at = utc_now()

    await db.flush()
    await db.refresh(project)
    logger.info("Project dates set to %s .. %s", project.project_start_date, project.project_end_date)
    queue_change(db, "project_settings", "UPDATE", project.id)
    return project


@router.post("/reset")
async def reset_project(db: AsyncSession = Depends(get_db)):
    """Remettre vehicules et taches en attente / Reset vehicles and tasks to Pending, drop comments."""
    now = utc_now()
    comments = await db.scalar(select(func.count()).select_from(Comment))
    await db.execute(delete(Comment))
    vehicles = await db.execute(
        update(Vehicle).values(status=VehicleStatus.PENDING, updated_at=now)
    )
    tasks = await db.execute(
        update(Task).values(status=TaskStatus.PENDING, completion_percentage=0, actual_duration=None, updated_at=now)
    )
    logger.info(
        "Project reset: %d vehicles, %d tasks, %d comments", vehicles.rowcount, tasks.rowcount, comments
    )
    queue_change(db, "vehicles", "UPDATE")
    queue_change(db, "tasks", "UPDATE")
    queue_change(db, "comments", "DELETE")
    return {
        "vehicles_reset": vehicles.rowcount,
        "tasks_reset": tasks.rowcount,
        "comments_deleted": comments,
    }


@router.get("/stats", response_model=ProjectStats)
async def project_stats(db: AsyncSession = Depends(get_db)):
    """Indicateurs globaux du projet / Overall project indicators."""
    project = await get_or_create_settings(db)
    vehicles = StatsService.vehicle_stats(await load_vehicles(db))
    tasks = StatsService.task_stats(await load_tasks(db))
    team = await load_team_members(db)
    phase = TimeCalculatorService.project_phase(
        project.project_start_date, total_days=project.total_days or settings.DEFAULT_PROJECT_DAYS
    )
    status = TimeCalculatorService.project_status(project.project_start_date, project.project_end_date)
    return {
        "total_vehicles": vehicles["total"],
        "completed_vehicles": vehicles["completed"],
        "in_progress_vehicles": vehicles["in_progress"],
        "pending_vehicles": vehicles["pending"],
        "total_tasks": tasks["total"],
        "completed_tasks": tasks["completed"],
        "team_size": len(team),
        "progress": StatsService.percentage(vehicles["completed"], vehicles["total"]),
        "project_status": status["status"],
        "project_phase": phase["phase"],
        "current_day": TimeCalculatorService.current_project_day(project.project_start_date),
        "start_date": project.project_start_date,
    }
