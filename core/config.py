# app/core/config.py
from typing import *

from pydantic_settings import BaseSettings, SettingsConfigDict



class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    APP_NAME: str = "Waqf Platform"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Security
    SECRET_KEY: str
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24
    ALGORITHM: str = "HS256"

    # Satellite (backend deployment)
    SATELLITE_ID: Optional[str] = None
    INIT_MAX_RETRIES: int = 3
    INIT_RETRY_DELAY_SECONDS: float = 2.0

    # Health monitor
    HEALTH_MONITOR_ENABLED: bool = True
    HEALTH_CHECK_INTERVAL_SECONDS: float = 30.0

    # Admin permission lookups
    PERMISSION_CACHE_TTL: int = 300

    FILE_STORAGE_PATH: str = "./uploads"
    MAX_FILE_SIZE: int = 10 * 1024 * 1024  # 10MB
    ALLOWED_FILE_TYPES: List[str] = [
        "image/jpeg", "image/png", "image/gif", "image/webp", "image/svg+xml",
        "application/pdf",
        "text/plain",
    ]
    ASSET_COLLECTIONS: List[str] = ["cause_images", "waqf_documents"]

    # Database
    DATABASE_URL: str


settings = Settings()
