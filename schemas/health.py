# app/schemas/health.py
from pydantic import BaseModel, Field
from typing import Optional


class ConnectionHealth(BaseModel):
    connected: bool = False
    latency_ms: float = 0.0


class StorageHealth(BaseModel):
    writeable: bool = False
    write_latency_ms: Optional[float] = None


class AdminHealth(BaseModel):
    read: bool = False
    audit_log: bool = False


class HealthComponents(BaseModel):
    satellite: ConnectionHealth = Field(default_factory=ConnectionHealth)
    storage: StorageHealth = Field(default_factory=StorageHealth)
    admin: AdminHealth = Field(default_factory=AdminHealth)


class HealthStatus(BaseModel):
    ok: bool = False
    timestamp: int  # epoch ms
    components: HealthComponents = Field(default_factory=HealthComponents)


class HealthDashboard(BaseModel):
    status: str  # healthy, degraded
    last_checked: str
    components: HealthComponents
    uptime_seconds: float
