"""Routes fichiers SQL (texte brut) / SQL file routes (plain text)."""

import logging

from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

from install_tracker.config import settings
from install_tracker.errors import ApiError

logger = logging.getLogger(__name__)

router = APIRouter()


def _read_sql(filename: str, missing_error: str) -> PlainTextResponse:
    path = settings.SQL_DIR / filename
    if not path.is_file():
        logger.warning("SQL file missing: %s", path)
        raise ApiError(404, missing_error)
    try:
        return PlainTextResponse(path.read_text(encoding="utf-8"))
    except OSError as e:
        logger.exception("Could not read %s", path)
        raise ApiError(500, f"Failed to serve {filename}", details=str(e))


@router.get("/schema", response_class=PlainTextResponse)
async def schema_sql():
    """Schema de la base / Database schema."""
    return _read_sql("schema.sql", "Schema file not found")


@router.get("/seeddata", response_class=PlainTextResponse)
async def seed_data_sql():
    """Donnees de reference en SQL / Seed data as SQL."""
    return _read_sql("seed_data.sql", "Seed data file not found")
