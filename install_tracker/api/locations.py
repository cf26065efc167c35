"""Routes Sites / Location API routes."""

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from install_tracker.api.ws_changes import queue_change
from install_tracker.database import get_db
from install_tracker.models.location import Location
from install_tracker.schemas.location import LocationCreate, LocationRead, LocationStats, LocationUpdate
from install_tracker.services.data_service import load_locations, load_vehicles, utc_now
from install_tracker.services.stats_service import StatsService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/", response_model=list[LocationRead])
async def list_locations(db: AsyncSession = Depends(get_db)):
    """Lister les sites / List locations."""
    result = await db.execute(select(Location).order_by(Location.name))
    return result.scalars().all()


@router.get("/stats", response_model=list[LocationStats])
async def location_stats(db: AsyncSession = Depends(get_db)):
    """Avancement par site / Progress per location."""
    return StatsService.location_stats(await load_locations(db), await load_vehicles(db))


@router.post("/sync-counts", response_model=list[LocationRead])
async def sync_location_counts(db: AsyncSession = Depends(get_db)):
    """Recalculer les compteurs depuis les vehicules / Recompute counters from vehicle rows."""
    locations = await load_locations(db)
    vehicles = await load_vehicles(db)
    for location in locations:
        for key, value in StatsService.location_counts(location.name, vehicles).items():
            setattr(location, key, value)
    await db.flush()
    logger.info("Synced counters for %d locations", len(locations))
    for location in locations:
        queue_change(db, "locations", "UPDATE", location.name)
    return locations


@router.get("/{name}", response_model=LocationRead)
async def get_location(name: str, db: AsyncSession = Depends(get_db)):
    """Voir un site / Get location detail."""
    location = await db.get(Location, name)
    if not location:
        raise HTTPException(status_code=404, detail="Location not found")
    return location


@router.post("/", response_model=LocationRead, status_code=201)
async def create_location(data: LocationCreate, db: AsyncSession = Depends(get_db)):
    """Creer un site / Create location."""
    if await db.get(Location, data.name):
        raise HTTPException(status_code=409, detail=f"Location {data.name} already exists")
    location = Location(**data.model_dump(), created_at=utc_now())
    db.add(location)
    await db.flush()
    await db.refresh(location)
    queue_change(db, "locations", "INSERT", location.name)
    return location


@router.put("/{name}", response_model=LocationRead)
async def update_location(name: str, data: LocationUpdate, db: AsyncSession = Depends(get_db)):
    """Modifier un site / Update location."""
    location = await db.get(Location, name)
    if not location:
        raise HTTPException(status_code=404, detail="Location not found")
    for key, value in data.model_dump(exclude_unset=True).items():
        setattr(location, key, value)
    await db.flush()
    await db.refresh(location)
    queue_change(db, "locations", "UPDATE", location.name)
    return location


@router.delete("/{name}", status_code=204)
async def delete_location(name: str, db: AsyncSession = Depends(get_db)):
    """Supprimer un site / Delete location."""
    location = await db.get(Location, name)
    if not location:
        raise HTTPException(status_code=404, detail="Location not found")
    await db.delete(location)
    await db.flush()
    queue_change(db, "locations", "DELETE", name)
