"""Shared test fixtures and configuration."""
import os

# Required settings for module imports. Defaults only, so a developer's
# environment still wins.
os.environ.setdefault("SECRET_KEY", "test-secret")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("SATELLITE_ID", "test-satellite")
os.environ.setdefault("HEALTH_MONITOR_ENABLED", "false")

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from core import cache  # noqa: E402
from core.config import settings  # noqa: E402
from core.constants import SYSTEM_CALLER  # noqa: E402
from core.database import Satellite  # noqa: E402
from core.roles import AdminRole  # noqa: E402
from core.security import create_access_token  # noqa: E402
from services.admin_service import AdminService  # noqa: E402

SUPER_ADMIN_ID = "root"
SUPER_ADMIN_EMAIL = "root@example.com"


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture(autouse=True)
def reset_cache():
    cache._cache.clear()
    yield
    cache._cache.clear()


@pytest.fixture(autouse=True)
def storage_dir(tmp_path, monkeypatch):
    path = tmp_path / "uploads"
    monkeypatch.setattr(settings, "FILE_STORAGE_PATH", str(path))
    return path


@pytest.fixture
async def satellite():
    """A fresh in-memory satellite per test."""
    sat = Satellite("sqlite+aiosqlite://", satellite_id="test-satellite")
    await sat.open()
    yield sat
    await sat.close()


@pytest.fixture
async def db(satellite):
    async with satellite.session() as session:
        yield session


@pytest.fixture
async def super_admin(satellite):
    async with satellite.session() as session:
        return await AdminService(session).add_admin(
            SUPER_ADMIN_ID,
            SYSTEM_CALLER,
            role=AdminRole.SUPER_ADMIN,
            email=SUPER_ADMIN_EMAIL,
            name="Root",
        )


@pytest.fixture
async def client(satellite):
    from main import create_app

    app = create_app(satellite)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


def auth_headers(principal: str) -> dict:
    return {"Authorization": f"Bearer {create_access_token(principal)}"}
