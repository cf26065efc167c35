"""
Routes d'administration de la base / Database administration routes.
Erreurs au format {error, details} / Errors use the {error, details} envelope.
"""

import logging

from fastapi import APIRouter, Depends, Request
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from install_tracker.api.deps import require_admin_token
from install_tracker.api.ws_changes import manager, queue_change
from install_tracker.config import settings
from install_tracker.database import get_db
from install_tracker.errors import ApiError
from install_tracker.models.task import Task
from install_tracker.models.vehicle import Vehicle, VehicleStatus
from install_tracker.rate_limit import limiter
from install_tracker.schemas.admin import (
    AdminRequest,
    CleanupTaskNamesRequest,
    ResetSeedRequest,
    VehicleStatusTestRequest,
)
from install_tracker.services.admin_service import AdminService
from install_tracker.services.data_service import load_tasks, load_team_members, load_vehicles, utc_now
from install_tracker.services.task_names import TaskNameService
from install_tracker.services.task_validation import TaskValidationService
from install_tracker.utils.seed import apply_seed_data as seed_database

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/reset-database")
@limiter.limit(settings.RATE_LIMIT_ADMIN)
async def reset_database(request: Request, data: AdminRequest, db: AsyncSession = Depends(get_db)):
    """Vider toutes les tables / Clear every table (empty database)."""
    require_admin_token(data)
    logger.warning("Database reset requested from %s", request.client.host if request.client else "unknown")
    results = await AdminService.reset_database(db)
    for row in results:
        if row["success"]:
            queue_change(db, row["table"], "DELETE")
    failed = [r for r in results if not r["success"]]
    return {
        "success": not failed,
        "message": "Database successfully cleared (empty database created)" if not failed
        else f"Database cleared with {len(failed)} error(s)",
        "details": {
            "tables_cleared": len(results) - len(failed),
            "execution_log": results,
        },
    }


@router.post("/apply-seed-data")
@limiter.limit(settings.RATE_LIMIT_ADMIN)
async def apply_seed_data(request: Request, data: AdminRequest, db: AsyncSession = Depends(get_db)):
    """Charger les donnees de reference / Load the seed data."""
    require_admin_token(data)
    results = await seed_database(db)
    successful = sum(1 for r in results if r["success"])
    failed = len(results) - successful
    for row in results:
        if row["success"]:
            queue_change(db, row["table"], "INSERT")
    return {
        "success": failed == 0,
        "message": f"Seed data application complete: {successful} success, {failed} errors",
        "results": results,
        "summary": {"total_operations": len(results), "successful": successful, "failed": failed},
    }


@router.post("/database-status")
@limiter.limit(settings.RATE_LIMIT_ADMIN)
async def database_status(request: Request, data: AdminRequest, db: AsyncSession = Depends(get_db)):
    """Nombre de lignes par table / Row count per table."""
    require_admin_token(data)
    return {
        "success": True,
        "message": "Database status retrieved",
        "timestamp": utc_now(),
        "tables": await AdminService.database_status(db),
    }


@router.post("/reset-seed")
@limiter.limit(settings.RATE_LIMIT_ADMIN)
async def reset_seed(request: Request, data: ResetSeedRequest, db: AsyncSession = Depends(get_db)):
    """Executer un script SQL requete par requete / Run an SQL script statement by statement."""
    require_admin_token(data)
    if not data.sql.strip():
        raise ApiError(400, "SQL query is required")
    results = await AdminService.execute_sql(db, data.sql)
    failed = [r for r in results if not r["success"]]
    if failed:
        raise ApiError(500, f"{len(failed)} SQL statements failed execution", details=failed)
    logger.info("Executed %d SQL statements", len(results))
    return {"success": True, "message": "Seed data reset successful", "executed": len(results)}


@router.post("/clear-cache")
async def clear_cache(data: AdminRequest):
    """Signal de vidage du cache client / Client cache-clear signal."""
    require_admin_token(data)
    timestamp = utc_now()
    await manager.broadcast({"table": None, "event": "cache_clear", "id": None, "timestamp": timestamp})
    logger.info("Cache clear signal sent to %d clients", len(manager.active_connections))
    return {
        "success": True,
        "message": "Cache clear signal sent",
        "timestamp": timestamp,
        "instructions": [
            "Clear cached queries",
            "Force revalidation of all data",
            "Reset component states",
        ],
    }


@router.post("/update-vehicle-status")
async def update_vehicle_status(data: VehicleStatusTestRequest, db: AsyncSession = Depends(get_db)):
    """Changer un statut pour tester le flux temps reel / Change a status to exercise the change feed."""
    require_admin_token(data)
    try:
        status = VehicleStatus(data.status)
    except ValueError:
        raise ApiError(400, "Invalid vehicle status", details=[s.value for s in VehicleStatus])
    vehicle = await db.get(Vehicle, data.vehicle_id)
    if vehicle is None:
        raise ApiError(404, "Vehicle not found", details=data.vehicle_id)
    vehicle.status = status
    vehicle.updated_at = utc_now()
    await db.flush()
    queue_change(db, "vehicles", "UPDATE", vehicle.id)
    return {
        "success": True,
        "message": f"Vehicle status updated to {status.value}",
        "data": {"vehicle_id": vehicle.id, "new_status": status.value, "updated_at": vehicle.updated_at},
    }


@router.post("/cleanup-task-names")
async def cleanup_task_names(data: CleanupTaskNamesRequest, db: AsyncSession = Depends(get_db)):
    """
    Retirer les identifiants vehicule des noms / Strip vehicle ids from task names.
    dryRun : rapport des noms a nettoyer, rien n'est modifie.
    dryRun: report the names to clean, nothing is changed.
    """
    require_admin_token(data)
    if data.dry_run:
        report = [
            row for row in TaskNameService.needing_cleanup(await load_tasks(db))
            if row["needs_cleanup"] and row["vehicle_id_from_field"]
        ]
        return {
            "success": True,
            "dry_run": True,
            "to_update": len(report),
            "conflicts": sum(1 for row in report if row["has_conflict"]),
            "tasks": report,
        }
    changed = await AdminService.cleanup_task_names(db)
    for row in changed:
        queue_change(db, "tasks", "UPDATE", row["id"])
    return {"success": True, "updated": len(changed), "tasks": changed}


@router.get("/diagnose-locations")
async def diagnose_locations(db: AsyncSession = Depends(get_db)):
    """Coherence vehicules / sites / Vehicle and location consistency."""
    return await AdminService.diagnose_locations(db)


@router.get("/integrity")
async def integrity(db: AsyncSession = Depends(get_db)):
    """Controles d'integrite / Integrity checks."""
    report = TaskValidationService.integrity_checks(
        await load_tasks(db), await load_vehicles(db), await load_team_members(db)
    )
    return {"passed": report.passed, "failed": report.failed, "issues": report.issues, "healthy": report.failed == 0}


@router.get("/health")
async def health(db: AsyncSession = Depends(get_db)):
    """Presence de la configuration et etat de la base / Configuration presence and database state."""
    environment = {
        "DATABASE_URL": bool(settings.DATABASE_URL),
        "ANON_KEY": bool(settings.ANON_KEY),
        "SERVICE_ROLE_KEY": bool(settings.SERVICE_ROLE_KEY),
        "ADMIN_RESET_TOKEN": bool(settings.ADMIN_RESET_TOKEN),
    }
    try:
        vehicles = await db.scalar(select(func.count()).select_from(Vehicle))
        result = await db.execute(select(Task.status, func.count()).group_by(Task.status))
        task_status = {status.value: count for status, count in result.all()}
    except Exception as e:
        logger.exception("Health check query failed")
        raise ApiError(500, "Database health check failed", details=str(e))
    return {
        "status": "ok" if all(environment.values()) else "degraded",
        "environment": environment,
        "database": {
            "connected": True,
            "vehicles": vehicles,
            "tasks": sum(task_status.values()),
            "task_status": task_status,
        },
    }
