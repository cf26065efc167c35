"""
Operations d'administration de la base / Database administration operations.
Chaque table ou requete est tentee et rapportee a part, sans arret sur erreur.
Each table or statement is attempted and reported on its own, errors never stop the run.
"""

import logging
import re
from typing import Any

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from install_tracker.models.comment import Comment
from install_tracker.models.location import Location
from install_tracker.models.project_settings import ProjectSettings
from install_tracker.models.task import Task
from install_tracker.models.team_member import TeamMember
from install_tracker.models.vehicle import Vehicle
from install_tracker.services.data_service import load_locations, load_tasks, load_vehicles, utc_now
from install_tracker.services.task_names import TaskNameService

logger = logging.getLogger(__name__)

# Ordre de vidage / Clearing order
RESET_ORDER = [Task, Comment, Vehicle, TeamMember, Location, ProjectSettings]
STATUS_TABLES = [Task, Vehicle, TeamMember, Location, ProjectSettings, Comment]
SAMPLE_SIZE = 3

_LINE_COMMENT_RE = re.compile(r"--[^\n]*")


def split_sql(sql: str) -> list[str]:
    """Decouper un script sur ';' / Split a script on ';' (line comments dropped, blanks skipped)."""
    cleaned = _LINE_COMMENT_RE.sub("", sql)
    return [s.strip() for s in cleaned.split(";") if s.strip()]


def _json_safe(value: Any) -> Any:
    return getattr(value, "value", value)


class AdminService:
    """Reset, etat et scripts SQL / Reset, status and SQL scripts."""

    @staticmethod
    async def reset_database(db: AsyncSession) -> list[dict[str, Any]]:
        """Vider toutes les tables / Clear every table, one result per table."""
        results = []
        for model in RESET_ORDER:
            table = model.__tablename__
            try:
                count = await db.scalar(select(func.count()).select_from(model))
                await db.execute(delete(model))
                await db.commit()
                logger.info("Cleared %s (%d rows)", table, count)
                results.append({"table": table, "success": True, "deleted": count, "error": None})
            except Exception as e:
                await db.rollback()
                logger.exception("Could not clear %s", table)
                results.append({"table": table, "success": False, "deleted": 0, "error": str(e)})
        return results

    @staticmethod
    async def database_status(db: AsyncSession) -> dict[str, dict[str, Any]]:
        """Nombre de lignes et echantillon par table / Row count and sample per table."""
        tables: dict[str, dict[str, Any]] = {}
        for model in STATUS_TABLES:
            table = model.__table__
            try:
                count = await db.scalar(select(func.count()).select_from(table))
                result = await db.execute(select(table).limit(SAMPLE_SIZE))
                sample = [{k: _json_safe(v) for k, v in row._mapping.items()} for row in result]
                tables[table.name] = {"count": count, "sample_data": sample or None}
            except Exception as e:
                logger.warning("Status query on %s failed: %s", table.name, e)
                tables[table.name] = {"count": None, "error": str(e)}
        return tables

    @staticmethod
    async def execute_sql(db: AsyncSession, sql: str) -> list[dict[str, Any]]:
        """
        Executer un script requete par requete / Run a script statement by statement.
        Chaque requete est validee seule ; un echec n'empeche pas les suivantes.
        Each statement is committed alone; a failure does not prevent the next ones.
        """
        results = []
        for statement in split_sql(sql):
            try:
                conn = await db.connection()
                await conn.exec_driver_sql(statement)
                await db.commit()
                results.append({"statement": statement, "success": True, "error": None})
            except Exception as e:
                await db.rollback()
                logger.warning("SQL statement failed: %s (%s)", statement[:80], e)
                results.append({"statement": statement, "success": False, "error": str(e)})
        return results

    @staticmethod
    async def diagnose_locations(db: AsyncSession) -> dict[str, Any]:
        """Sites references par les vehicules sans ligne site / Vehicle locations missing a location row."""
        locations = await load_locations(db)
        vehicles = await load_vehicles(db)
        known = {loc.name for loc in locations}
        used = sorted({v.location for v in vehicles})
        missing = [name for name in used if name not in known]
        orphaned = [v.id for v in vehicles if v.location not in known]
        return {
            "locations": sorted(known),
            "vehicle_locations": used,
            "missing_locations": missing,
            "orphaned_vehicles": orphaned,
            "unused_locations": sorted(known.difference(used)),
            "healthy": not missing,
        }

    @staticmethod
    async def cleanup_task_names(db: AsyncSession) -> list[dict[str, Any]]:
        """Nettoyer les noms des taches liees a un vehicule / Clean names of tasks linked to a vehicle."""
        now = utc_now()
        changed = []
        for task in await load_tasks(db):
            if not task.vehicle_ids:
                continue
            cleaned = TaskNameService.clean(task.name)
            if cleaned != task.name:
                changed.append({"id": task.id, "old_name": task.name, "new_name": cleaned})
                task.name = cleaned
                task.updated_at = now
        await db.flush()
        logger.info("Cleaned %d task names", len(changed))
        return changed
