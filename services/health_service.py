# app/services/health_service.py
import asyncio
import logging
import time
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from core.constants import ADMIN_COLLECTION, AUDIT_COLLECTION, HEALTH_CHECK_KEY, SYSTEM_CALLER
from schemas.audit import AuditAction
from schemas.health import HealthDashboard, HealthStatus
from services.document_store import DocumentStore
from utils.timestamps import ms_to_iso, now_ms

logger = logging.getLogger(__name__)

PROCESS_STARTED_AT = time.monotonic()


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 2)


async def _test_storage_write(store: DocumentStore) -> bool:
    try:
        await store.set_doc(
            AUDIT_COLLECTION,
            HEALTH_CHECK_KEY,
            {
                "action": AuditAction.HEALTH_CHECK.value,
                "target_user_id": HEALTH_CHECK_KEY,
                "performed_by": SYSTEM_CALLER,
                "timestamp": now_ms(),
            },
            caller=SYSTEM_CALLER,
        )
        return True
    except Exception as e:
        logger.warning(f"Health check write failed: {str(e)}")
        return False


async def check_admin_health(db: AsyncSession) -> HealthStatus:
    """Exercise the read and write paths of the admin collections."""
    store = DocumentStore(db)
    status = HealthStatus(timestamp=now_ms())
    components = status.components

    try:
        # 1. connectivity
        started = time.perf_counter()
        await store.get_doc(ADMIN_COLLECTION, HEALTH_CHECK_KEY)
        components.satellite.connected = True
        components.satellite.latency_ms = _elapsed_ms(started)

        # 2. write capability
        started = time.perf_counter()
        components.storage.writeable = await _test_storage_write(store)
        components.storage.write_latency_ms = _elapsed_ms(started)

        # 3. missing keys read as empty, written keys read back
        components.admin.read = await store.get_doc(ADMIN_COLLECTION, "non_existent_key") is None
        components.admin.audit_log = await store.get_doc(AUDIT_COLLECTION, HEALTH_CHECK_KEY) is not None

        status.ok = all([
            components.satellite.connected,
            components.storage.writeable,
            components.admin.read,
            components.admin.audit_log,
        ])
    except Exception as e:
        logger.error(f"Health check failed: {str(e)}")

    return status


def build_dashboard(health: HealthStatus) -> HealthDashboard:
    return HealthDashboard(
        status="healthy" if health.ok else "degraded",
        last_checked=ms_to_iso(health.timestamp),
        components=health.components,
        uptime_seconds=round(time.monotonic() - PROCESS_STARTED_AT, 1),
    )


async def get_health_dashboard(db: AsyncSession) -> HealthDashboard:
    return build_dashboard(await check_admin_health(db))


class HealthMonitor:
    """Runs the admin health check on a fixed interval.

    A liveness probe only: failures are logged and the next tick runs as
    scheduled.
    """

    def __init__(self, satellite, interval: float = 30.0):
        self.satellite = satellite
        self.interval = interval
        self.last_status: Optional[HealthStatus] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def check(self) -> HealthStatus:
        async with self.satellite.session() as db:
            status = await check_admin_health(db)
        self.last_status = status
        if not status.ok:
            logger.error(f"CRITICAL: Admin health check failed: {status.model_dump()}")
        return status

    async def _run(self):
        while True:
            try:
                await self.check()
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.error(f"Health monitor tick failed: {str(e)}")
            await asyncio.sleep(self.interval)

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._run())
        logger.info(f"Health monitor started (every {self.interval}s)")

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Health monitor stopped")
