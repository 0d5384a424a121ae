# app/api/v1/router.py
from fastapi import APIRouter
from api.v1.endpoints import (
    # Authentication & Admins
    auth,
    admins,

    # Causes & Waqfs
    causes,
    waqfs,

    # Files
    files,

    # Dashboard & Health
    dashboard,
    health,
)

api_router = APIRouter()

# ========== 1️⃣ Authentication & Admins ==========
api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
api_router.include_router(admins.router, prefix="/admins", tags=["Admins"])

# ========== 2️⃣ Causes & Waqfs ==========
api_router.include_router(causes.router, prefix="/causes", tags=["Causes"])
api_router.include_router(waqfs.router, prefix="/waqfs", tags=["Waqfs"])

# ========== 3️⃣ Files ==========
api_router.include_router(files.router, prefix="/files", tags=["Files"])

# ========== 4️⃣ Dashboard & Health ==========
api_router.include_router(dashboard.router, prefix="/dashboard", tags=["Dashboard"])
api_router.include_router(health.router, prefix="/health", tags=["Health"])
