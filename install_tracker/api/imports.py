"""Routes Import CSV/Excel / Import API routes."""

import logging
import uuid

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from install_tracker.api.ws_changes import queue_change
from install_tracker.database import get_db
from install_tracker.models.location import Location
from install_tracker.models.task import Task, TaskPriority, TaskStatus
from install_tracker.models.team_member import TeamMember
from install_tracker.models.vehicle import Vehicle, VehicleStatus
from install_tracker.services.data_service import utc_now
from install_tracker.services.import_service import ImportService

logger = logging.getLogger(__name__)

router = APIRouter()

# Mapping entité -> modèle SQLAlchemy / Entity to model mapping
ENTITY_MODEL_MAP = {
    "vehicles": Vehicle,
    "tasks": Task,
    "locations": Location,
    "team-members": TeamMember,
}

# Champs enum par entité / Enum fields per entity
ENUM_FIELDS = {
    "vehicles": {"status": VehicleStatus},
    "tasks": {"status": TaskStatus, "priority": TaskPriority},
}

# Tables du flux de modifications / Change feed table names
FEED_TABLES = {
    "vehicles": "vehicles",
    "tasks": "tasks",
    "locations": "locations",
    "team-members": "team_members",
}


@router.post("/{entity_type}")
async def import_data(
    entity_type: str,
    file: UploadFile = File(...),
    db: AsyncSession = Depends(get_db),
):
    """
    Importer des données depuis un fichier CSV ou Excel (upsert par clé primaire).
    Import data from a CSV or Excel file (upsert on primary key).
    """
    if entity_type not in ENTITY_MODEL_MAP:
        raise HTTPException(status_code=400, detail=f"Invalid entity type. Allowed: {list(ENTITY_MODEL_MAP.keys())}")

    if not file.filename:
        raise HTTPException(status_code=400, detail="No file provided")

    ext = file.filename.rsplit(".", 1)[-1].lower()
    if ext not in ("csv", "xlsx", "xls"):
        raise HTTPException(status_code=400, detail="Only CSV and Excel files are supported")

    content = await file.read()
    try:
        rows = ImportService.parse_file(content, file.filename)
    except Exception as e:
        raise HTTPException(status_code=400, detail=f"Error parsing file: {e}")

    if not rows:
        raise HTTPException(status_code=400, detail="No data found in file")

    model_class = ENTITY_MODEL_MAP[entity_type]
    key_field = ImportService.PRIMARY_KEYS[entity_type]
    required = ImportService.REQUIRED_FIELDS[entity_type]
    enums = ENUM_FIELDS.get(entity_type, {})
    now = utc_now()
    created = 0
    updated = 0
    skipped = 0
    errors = []
    touched: list[tuple[str, str]] = []

    for i, row in enumerate(rows):
        try:
            data = ImportService.normalize_row(row, entity_type)
            if not data:
                skipped += 1
                continue

            if entity_type == "tasks" and not data.get("id"):
                data["id"] = uuid.uuid4().hex

            missing = [f for f in required if f not in data or data[f] is None]
            if missing:
                errors.append(f"Row {i + 2}: missing required fields: {', '.join(sorted(missing))}")
                skipped += 1
                continue

            for field_name, enum_cls in enums.items():
                if data.get(field_name) is not None:
                    data[field_name] = enum_cls(data[field_name])

            existing = await db.get(model_class, data[key_field])
            if existing:
                for k, v in data.items():
                    if k != key_field:
                        setattr(existing, k, v)
                if hasattr(existing, "updated_at"):
                    existing.updated_at = now
                updated += 1
                touched.append(("UPDATE", data[key_field]))
            else:
                obj = model_class(**data, created_at=now)
                if hasattr(obj, "updated_at"):
                    obj.updated_at = now
                db.add(obj)
                created += 1
                touched.append(("INSERT", data[key_field]))
        except Exception as e:
            errors.append(f"Row {i + 2}: {e}")
            skipped += 1

    if created > 0 or updated > 0:
        try:
            await db.flush()
        except Exception as e:
            await db.rollback()
            logger.exception("Import of %s failed", entity_type)
            raise HTTPException(status_code=400, detail=f"Database error during import: {e}")

    logger.info("Imported %s: %d created, %d updated, %d skipped", entity_type, created, updated, skipped)
    for event, row_id in touched:
        queue_change(db, FEED_TABLES[entity_type], event, row_id)

    return {
        "status": "success",
        "created": created,
        "updated": updated,
        "skipped": skipped,
        "total_rows": len(rows),
        "errors": errors[:20],
        "message": f"{created} created, {updated} updated, {skipped} skipped (out of {len(rows)} rows)",
    }
