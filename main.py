import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates

from api.v1.api_router import api_router
from core.config import settings
from core.database import Satellite
from core.events import create_auth_dispatcher
from routers.pages import router as pages_router
from services.health_service import HealthMonitor

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s"
)
logger = logging.getLogger(__name__)

BASE_DIR = Path(__file__).resolve().parent


@asynccontextmanager
async def lifespan(app: FastAPI):
    satellite: Satellite = app.state.satellite
    if not satellite.is_open:
        await satellite.open()

    monitor: Optional[HealthMonitor] = None
    if settings.HEALTH_MONITOR_ENABLED:
        monitor = HealthMonitor(satellite, interval=settings.HEALTH_CHECK_INTERVAL_SECONDS)
        monitor.start()
    app.state.health_monitor = monitor
    logger.info(f"🚀 {settings.APP_NAME} started")

    yield

    if monitor is not None:
        await monitor.stop()
    await satellite.close()
    logger.info(f"👋 {settings.APP_NAME} stopped")


def create_app(satellite: Optional[Satellite] = None) -> FastAPI:
    app = FastAPI(
        title=settings.APP_NAME,
        description="Waqf management: admins, causes, waqfs and donations",
        version="1.0.0",
        lifespan=lifespan
    )

    app.state.satellite = satellite or Satellite.from_settings()
    app.state.health_monitor = None
    app.state.auth_events = create_auth_dispatcher()
    app.state.templates = Jinja2Templates(directory=BASE_DIR / "templates")

    app.mount("/static", StaticFiles(directory=BASE_DIR / "static"), name="static")
    app.include_router(api_router, prefix="/api/v1")
    app.include_router(pages_router)

    @app.get("/health")
    async def health_check(request: Request):
        """Liveness plus the result of the last background health check"""
        monitor: Optional[HealthMonitor] = request.app.state.health_monitor
        last = monitor.last_status if monitor is not None else None
        return {
            "status": "healthy",
            "version": "1.0.0",
            "satellite_open": request.app.state.satellite.is_open,
            "admin_health": last.model_dump() if last is not None else None,
        }

    return app


app = create_app()
