"""Fixtures de test / Test fixtures.

Base SQLite temporaire, recreee pour chaque test / Temporary SQLite database, rebuilt for each test.
"""

import os
import tempfile

_DB_DIR = tempfile.mkdtemp(prefix="install_tracker_tests_")

# Avant tout import du package / Before any package import
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{os.path.join(_DB_DIR, 'test.db')}"
os.environ["ADMIN_RESET_TOKEN"] = "test-admin-token"
os.environ["RATE_LIMIT_ADMIN"] = "1000/minute"
os.environ["DEBUG"] = "true"

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from install_tracker.database import Base, engine, init_db  # noqa: E402
from install_tracker.main import app  # noqa: E402

ADMIN_TOKEN = "test-admin-token"


@pytest.fixture
async def client():
    await init_db()
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
def admin_body():
    return {"adminToken": ADMIN_TOKEN}
