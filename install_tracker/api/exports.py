"""Routes Export CSV/Excel / Export API routes."""

import io

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import StreamingResponse
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from install_tracker.database import get_db
from install_tracker.models.location import Location
from install_tracker.models.task import Task
from install_tracker.models.team_member import TeamMember
from install_tracker.models.vehicle import Vehicle
from install_tracker.services.export_service import ExportService

router = APIRouter()

# Mapping entité -> (modèle, tri) / Entity to (model, ordering) mapping
ENTITY_MODEL_MAP = {
    "vehicles": (Vehicle, (Vehicle.day, Vehicle.id)),
    "tasks": (Task, (Task.created_at, Task.id)),
    "locations": (Location, (Location.name,)),
    "team-members": (TeamMember, (TeamMember.id,)),
}


@router.get("/{entity_type}")
async def export_data(
    entity_type: str,
    format: str = Query("xlsx", pattern="^(csv|xlsx)$"),
    db: AsyncSession = Depends(get_db),
):
    """Exporter les données d'une entité / Export entity data to CSV or XLSX."""
    if entity_type not in ENTITY_MODEL_MAP:
        raise HTTPException(
            status_code=400,
            detail=f"Invalid entity type. Allowed: {list(ENTITY_MODEL_MAP.keys())}",
        )

    model_class, ordering = ENTITY_MODEL_MAP[entity_type]
    result = await db.execute(select(model_class).order_by(*ordering))
    export = ExportService.render(result.scalars().all(), entity_type, format)

    return StreamingResponse(
        io.BytesIO(export.content),
        media_type=export.media_type,
        headers={"Content-Disposition": f'attachment; filename="{export.filename}"'},
    )
