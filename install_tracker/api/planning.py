"""Routes Planning (Gantt, planning, estimations, tableau de bord) / Planning API routes."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from install_tracker.database import get_db
from install_tracker.schemas.planning import EstimationsResponse, GanttResponse
from install_tracker.services.data_service import (
    get_or_create_settings,
    load_locations,
    load_tasks,
    load_team_members,
    load_vehicles,
)
from install_tracker.services.estimation import EstimationService
from install_tracker.services.schedule_service import ScheduleService
from install_tracker.services.stats_service import StatsService
from install_tracker.services.task_generator import TaskGeneratorService
from install_tracker.services.time_calculator import TimeCalculatorService

router = APIRouter()


@router.get("/gantt", response_model=GanttResponse)
async def gantt(
    source: str = Query("generated", pattern="^(generated|stored)$"),
    day: int | None = Query(None, ge=1),
    location: str | None = None,
    status: str | None = None,
    vehicle_id: str | None = None,
    type: str | None = None,
    category: str | None = None,
    search: str | None = None,
    group_by: str | None = Query(None, pattern="^(vehicle|location|type|category|assignee)$"),
    db: AsyncSession = Depends(get_db),
):
    """
    Taches du Gantt / Gantt tasks.
    source=generated : modeles par vehicule ; source=stored : taches enregistrees.
    source=generated: per-vehicle templates; source=stored: saved tasks.
    """
    project = await get_or_create_settings(db)
    vehicles = await load_vehicles(db)
    if source == "stored":
        tasks = TaskGeneratorService.stored_tasks_to_gantt(
            await load_tasks(db), vehicles, project.project_start_date
        )
    else:
        tasks = TaskGeneratorService.generate_all(vehicles, project.project_start_date)

    day_date = TimeCalculatorService.date_for_day(project.project_start_date, day) if day else None
    tasks = TaskGeneratorService.filter_tasks(
        tasks,
        day=day_date,
        location=location,
        status=status,
        vehicle_id=vehicle_id,
        type=type,
        category=category,
        search=search,
    )
    return {
        "project_start_date": project.project_start_date,
        "total": len(tasks),
        "tasks": tasks,
        "groups": TaskGeneratorService.group_tasks(tasks, group_by) if group_by else None,
    }


@router.get("/schedule")
async def schedule(
    location: str | None = None,
    day: int | None = None,
    status: str | None = None,
    search: str | None = None,
    sort_by: str = Query("day", pattern="^(day|location|status|type)$"),
    sort_order: str = Query("asc", pattern="^(asc|desc)$"),
    db: AsyncSession = Depends(get_db),
):
    """Planning des vehicules / Vehicle schedule view."""
    project = await get_or_create_settings(db)
    vehicles = await load_vehicles(db)
    filtered = ScheduleService.filter_vehicles(vehicles, location=location, day=day, status=status, search=search)
    filtered = ScheduleService.sort_vehicles(filtered, sort_by, sort_order)
    return ScheduleService.schedule_view(vehicles, project.project_start_date, filtered)


@router.get("/estimations", response_model=EstimationsResponse)
async def estimations(db: AsyncSession = Depends(get_db)):
    """Les cinq estimations et la recommandee / All five estimations plus the recommended one."""
    project = await get_or_create_settings(db)
    args = (project.project_start_date, await load_vehicles(db), await load_tasks(db), await load_team_members(db))
    return {
        "project_start_date": project.project_start_date,
        "estimations": EstimationService.all(*args),
        "recommended": EstimationService.recommended(*args),
    }


@router.get("/dashboard")
async def dashboard(db: AsyncSession = Depends(get_db)):
    """Vue d'ensemble en une requete / Overview in a single request."""
    project = await get_or_create_settings(db)
    vehicles = await load_vehicles(db)
    tasks = await load_tasks(db)
    team = await load_team_members(db)
    status = TimeCalculatorService.project_status(project.project_start_date, project.project_end_date)
    return {
        "project": {
            "start_date": project.project_start_date,
            "end_date": project.project_end_date,
            "total_days": project.total_days,
            "status": status["status"],
            "message": status["message"],
            "current_day": TimeCalculatorService.current_project_day(project.project_start_date),
        },
        "vehicles": StatsService.vehicle_stats(vehicles),
        "tasks": StatsService.task_stats(tasks),
        "locations": StatsService.location_stats(await load_locations(db), vehicles),
        "team": [StatsService.member_stats(m, tasks) for m in team],
        "recommended_estimation": EstimationService.recommended(
            project.project_start_date, vehicles, tasks, team
        ).to_dict(),
    }
