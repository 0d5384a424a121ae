# app/core/database.py
import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import Depends, Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    create_async_engine,
)
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from core.config import Settings, settings
from core.exceptions import SatelliteConfigError, SatelliteInitError
from models import Base

logger = logging.getLogger(__name__)


class Satellite:
    """Connection to the backend deployment.

    Built once at process start and handed to every request through
    ``get_db``. Nothing is connected until ``open()`` is awaited.
    """

    def __init__(
            self,
            database_url: str,
            satellite_id: Optional[str] = None,
            echo: bool = False,
            max_retries: int = 3,
            retry_delay: float = 2.0,
    ):
        self.database_url = database_url
        self.satellite_id = satellite_id
        self.echo = echo
        self.max_retries = max(1, max_retries)
        self.retry_delay = retry_delay

        self.engine: Optional[AsyncEngine] = None
        self._sessionmaker: Optional[sessionmaker] = None

    @classmethod
    def from_settings(cls, config: Settings = settings) -> "Satellite":
        return cls(
            database_url=config.DATABASE_URL,
            satellite_id=config.SATELLITE_ID,
            echo=config.DEBUG,
            max_retries=config.INIT_MAX_RETRIES,
            retry_delay=config.INIT_RETRY_DELAY_SECONDS,
        )

    @property
    def is_open(self) -> bool:
        return self.engine is not None

    def _create_engine(self) -> AsyncEngine:
        kwargs = {"echo": self.echo, "future": True}
        if self.database_url.startswith("sqlite") and (
                ":memory:" in self.database_url or self.database_url.endswith("://")
        ):
            # one shared connection, otherwise every session sees an empty database
            kwargs["poolclass"] = StaticPool
            kwargs["connect_args"] = {"check_same_thread": False}
        return create_async_engine(self.database_url, **kwargs)

    async def open(self, optional: bool = False) -> None:
        if self.is_open:
            return

        if not self.satellite_id:
            if not optional:
                raise SatelliteConfigError("Missing SATELLITE_ID environment variable")
            logger.warning("SATELLITE_ID is not set, continuing in optional mode")

        attempt = 0
        while True:
            attempt += 1
            engine = self._create_engine()
            try:
                async with engine.begin() as conn:
                    await conn.run_sync(Base.metadata.create_all)
                break
            except (SQLAlchemyError, OSError) as e:
                await engine.dispose()
                logger.error(f"Satellite initialization attempt {attempt}/{self.max_retries} failed: {str(e)}")
                if attempt >= self.max_retries:
                    raise SatelliteInitError(
                        f"Satellite initialization failed after {attempt} attempts: {str(e)}"
                    ) from e
                await asyncio.sleep(self.retry_delay)

        self.engine = engine
        self._sessionmaker = sessionmaker(
            bind=engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )
        logger.info(f"Satellite {self.satellite_id or '<optional>'} initialized")

    async def close(self) -> None:
        if self.engine is not None:
            await self.engine.dispose()
            logger.info(f"Satellite {self.satellite_id or '<optional>'} closed")
        self.engine = None
        self._sessionmaker = None

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        if self._sessionmaker is None:
            raise SatelliteInitError("Satellite is not open")
        async with self._sessionmaker() as session:
            yield session


def get_satellite(request: Request) -> Satellite:
    return request.app.state.satellite


async def get_db(satellite: Satellite = Depends(get_satellite)) -> AsyncSession:
    async with satellite.session() as session:
        yield session
