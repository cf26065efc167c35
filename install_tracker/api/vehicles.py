"""Routes Vehicules / Vehicle API routes."""

import uuid

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from install_tracker.api.ws_changes import queue_change
from install_tracker.database import get_db
from install_tracker.models.task import Task, TaskPriority, TaskStatus
from install_tracker.models.vehicle import Vehicle, VehicleStatus
from install_tracker.schemas.planning import GanttTaskRead
from install_tracker.schemas.task import StandardTasksRequest, TaskRead
from install_tracker.schemas.vehicle import (
    VehicleBulkStatusUpdate,
    VehicleCreate,
    VehicleRead,
    VehicleStats,
    VehicleStatusUpdate,
    VehicleUpdate,
)
from install_tracker.services.data_service import get_or_create_settings, load_vehicles, utc_now
from install_tracker.services.stats_service import StatsService
from install_tracker.services.task_generator import TaskGeneratorService

router = APIRouter()


@router.get("/", response_model=list[VehicleRead])
async def list_vehicles(
    location: str | None = None,
    status: str | None = None,
    day: int | None = None,
    search: str | None = None,
    db: AsyncSession = Depends(get_db),
):
    """Lister les vehicules / List vehicles."""
    query = select(Vehicle).order_by(Vehicle.day, Vehicle.id)
    if location and location != "All":
        query = query.where(Vehicle.location == location)
    if status and status != "All":
        try:
            query = query.where(Vehicle.status == VehicleStatus(status))
        except ValueError:
            raise HTTPException(status_code=400, detail=f"Invalid status: {status}")
    if day is not None:
        query = query.where(Vehicle.day == day)
    if search and search.strip():
        term = f"%{search.strip()}%"
        query = query.where(or_(Vehicle.id.ilike(term), Vehicle.type.ilike(term), Vehicle.location.ilike(term)))
    result = await db.execute(query)
    return result.scalars().all()


@router.get("/stats", response_model=VehicleStats)
async def vehicle_stats(db: AsyncSession = Depends(get_db)):
    """Statistiques des vehicules / Vehicle statistics."""
    return StatsService.vehicle_stats(await load_vehicles(db))


@router.post("/bulk-status", response_model=list[VehicleRead])
async def bulk_update_status(data: VehicleBulkStatusUpdate, db: AsyncSession = Depends(get_db)):
    """Changer le statut de plusieurs vehicules / Update status of several vehicles."""
    if not data.vehicle_ids:
        return []
    result = await db.execute(select(Vehicle).where(Vehicle.id.in_(data.vehicle_ids)))
    vehicles = result.scalars().all()
    now = utc_now()
    for vehicle in vehicles:
        vehicle.status = data.status
        vehicle.updated_at = now
    await db.flush()
    for vehicle in vehicles:
        queue_change(db, "vehicles", "UPDATE", vehicle.id)
    return vehicles


@router.get("/{vehicle_id}", response_model=VehicleRead)
async def get_vehicle(vehicle_id: str, db: AsyncSession = Depends(get_db)):
    """Voir un vehicule / Get vehicle detail."""
    vehicle = await db.get(Vehicle, vehicle_id)
    if not vehicle:
        raise HTTPException(status_code=404, detail="Vehicle not found")
    return vehicle


@router.post("/", response_model=VehicleRead, status_code=201)
async def create_vehicle(data: VehicleCreate, db: AsyncSession = Depends(get_db)):
    """Creer un vehicule (statut Pending) / Create vehicle (Pending status)."""
    if await db.get(Vehicle, data.id):
        raise HTTPException(status_code=409, detail=f"Vehicle {data.id} already exists")
    now = utc_now()
    vehicle = Vehicle(**data.model_dump(), status=VehicleStatus.PENDING, created_at=now, updated_at=now)
    db.add(vehicle)
    await db.flush()
    await db.refresh(vehicle)
    queue_change(db, "vehicles", "INSERT", vehicle.id)
    return vehicle


@router.put("/{vehicle_id}", response_model=VehicleRead)
async def update_vehicle(vehicle_id: str, data: VehicleUpdate, db: AsyncSession = Depends(get_db)):
    """Modifier un vehicule / Update vehicle."""
    vehicle = await db.get(Vehicle, vehicle_id)
    if not vehicle:
        raise HTTPException(status_code=404, detail="Vehicle not found")

    for key, value in data.model_dump(exclude_unset=True).items():
        setattr(vehicle, key, value)
    vehicle.updated_at = utc_now()

    await db.flush()
    await db.refresh(vehicle)
    queue_change(db, "vehicles", "UPDATE", vehicle.id)
    return vehicle


@router.patch("/{vehicle_id}/status", response_model=VehicleRead)
async def update_vehicle_status(vehicle_id: str, data: VehicleStatusUpdate, db: AsyncSession = Depends(get_db)):
    """Changer le statut / Update vehicle status."""
    vehicle = await db.get(Vehicle, vehicle_id)
    if not vehicle:
        raise HTTPException(status_code=404, detail="Vehicle not found")
    vehicle.status = data.status
    vehicle.updated_at = utc_now()
    await db.flush()
    await db.refresh(vehicle)
    queue_change(db, "vehicles", "UPDATE", vehicle.id)
    return vehicle


@router.delete("/{vehicle_id}", status_code=204)
async def delete_vehicle(vehicle_id: str, db: AsyncSession = Depends(get_db)):
    """Supprimer un vehicule / Delete vehicle."""
    vehicle = await db.get(Vehicle, vehicle_id)
    if not vehicle:
        raise HTTPException(status_code=404, detail="Vehicle not found")
    await db.delete(vehicle)
    await db.flush()
    queue_change(db, "vehicles", "DELETE", vehicle_id)


@router.get("/{vehicle_id}/generated-tasks", response_model=list[GanttTaskRead])
async def generated_tasks(vehicle_id: str, db: AsyncSession = Depends(get_db)):
    """Taches generees pour le Gantt / Generated Gantt tasks for a vehicle."""
    vehicle = await db.get(Vehicle, vehicle_id)
    if not vehicle:
        raise HTTPException(status_code=404, detail="Vehicle not found")
    project = await get_or_create_settings(db)
    return TaskGeneratorService.generate_vehicle_tasks(vehicle, project.project_start_date)


@router.post("/{vehicle_id}/standard-tasks", response_model=list[TaskRead], status_code=201)
async def create_standard_tasks(
    vehicle_id: str,
    data: StandardTasksRequest,
    db: AsyncSession = Depends(get_db),
):
    """Creer les 7 taches standard / Persist the seven standard tasks for a vehicle."""
    vehicle = await db.get(Vehicle, vehicle_id)
    if not vehicle:
        raise HTTPException(status_code=404, detail="Vehicle not found")

    start_date = data.start_date
    if not start_date:
        project = await get_or_create_settings(db)
        start_date = project.project_start_date

    now = utc_now()
    tasks = []
    for row in TaskGeneratorService.standard_tasks(vehicle_id, data.assigned_to, start_date):
        task = Task(
            id=uuid.uuid4().hex,
            status=TaskStatus.PENDING,
            created_at=now,
            updated_at=now,
            **{**row, "priority": TaskPriority(row["priority"])},
        )
        db.add(task)
        tasks.append(task)
    await db.flush()
    for task in tasks:
        await db.refresh(task)
        queue_change(db, "tasks", "INSERT", task.id)
    return tasks
