"""
Acces aux donnees partage / Shared data access.
Chargeurs de lignes utilises par toutes les routes / Row loaders used by every router.
"""

import logging
from datetime import date, datetime, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from install_tracker.models.location import Location
from install_tracker.models.project_settings import DEFAULT_SETTINGS_ID, ProjectSettings
from install_tracker.models.task import Task
from install_tracker.models.team_member import TeamMember
from install_tracker.models.vehicle import Vehicle

logger = logging.getLogger(__name__)


def utc_now() -> str:
    """Horodatage ISO 8601 / ISO 8601 timestamp."""
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


async def load_vehicles(db: AsyncSession) -> list[Vehicle]:
    result = await db.execute(select(Vehicle).order_by(Vehicle.day, Vehicle.id))
    return list(result.scalars().all())


async def load_tasks(db: AsyncSession) -> list[Task]:
    result = await db.execute(select(Task).order_by(Task.created_at.desc(), Task.id))
    return list(result.scalars().all())


async def load_team_members(db: AsyncSession) -> list[TeamMember]:
    result = await db.execute(select(TeamMember).order_by(TeamMember.name))
    return list(result.scalars().all())


async def load_locations(db: AsyncSession) -> list[Location]:
    result = await db.execute(select(Location).order_by(Location.name))
    return list(result.scalars().all())


async def get_or_create_settings(db: AsyncSession) -> ProjectSettings:
    """Parametres projet, crees avec la date du jour si absents / Project settings, created with today's date if missing."""
    settings_row = await db.get(ProjectSettings, DEFAULT_SETTINGS_ID)
    if settings_row is None:
        now = utc_now()
        settings_row = ProjectSettings(
            id=DEFAULT_SETTINGS_ID,
            project_start_date=date.today().isoformat(),
            created_at=now,
            updated_at=now,
        )
        db.add(settings_row)
        await db.flush()
        logger.info("Created default project settings starting %s", settings_row.project_start_date)
    return settings_row
