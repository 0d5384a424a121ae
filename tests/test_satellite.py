from unittest.mock import patch

import pytest
from sqlalchemy.exc import OperationalError

from core.config import Settings
from core.database import Satellite
from core.exceptions import SatelliteConfigError, SatelliteInitError


class TestSatellite:
    @pytest.mark.anyio
    async def test_missing_satellite_id(self):
        satellite = Satellite("sqlite+aiosqlite://")
        with pytest.raises(SatelliteConfigError):
            await satellite.open()
        assert not satellite.is_open

    @pytest.mark.anyio
    async def test_optional_mode(self):
        satellite = Satellite("sqlite+aiosqlite://")
        await satellite.open(optional=True)
        try:
            assert satellite.is_open
        finally:
            await satellite.close()

    @pytest.mark.anyio
    async def test_open_is_idempotent_and_close_resets(self):
        satellite = Satellite("sqlite+aiosqlite://", satellite_id="sat")
        await satellite.open()
        engine = satellite.engine
        await satellite.open()
        assert satellite.engine is engine

        await satellite.close()
        assert not satellite.is_open
        with pytest.raises(SatelliteInitError):
            async with satellite.session():
                pass

    @pytest.mark.anyio
    async def test_retries_then_fails(self):
        satellite = Satellite("sqlite+aiosqlite://", satellite_id="sat", max_retries=3, retry_delay=0)
        error = OperationalError("connect", {}, Exception("unreachable"))

        with patch("core.database.Base.metadata.create_all", side_effect=error) as create_all:
            with pytest.raises(SatelliteInitError) as exc_info:
                await satellite.open()

        assert create_all.call_count == 3
        assert "after 3 attempts" in str(exc_info.value)
        assert not satellite.is_open

    @pytest.mark.anyio
    async def test_recovers_after_transient_failure(self):
        satellite = Satellite("sqlite+aiosqlite://", satellite_id="sat", max_retries=3, retry_delay=0)
        error = OperationalError("connect", {}, Exception("unreachable"))

        with patch("core.database.Base.metadata.create_all", side_effect=[error, None]) as create_all:
            await satellite.open()

        try:
            assert satellite.is_open
            assert create_all.call_count == 2
        finally:
            await satellite.close()

    def test_from_settings(self):
        config = Settings(
            SECRET_KEY="x",
            DATABASE_URL="sqlite+aiosqlite://",
            SATELLITE_ID="prod-1",
            INIT_MAX_RETRIES=5,
            INIT_RETRY_DELAY_SECONDS=0.5,
        )
        satellite = Satellite.from_settings(config)
        assert satellite.satellite_id == "prod-1"
        assert satellite.max_retries == 5
        assert satellite.retry_delay == 0.5
        assert not satellite.is_open
