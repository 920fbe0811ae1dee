"""Routes API / API routes."""

from fastapi import APIRouter

from inspection_pro.api import (
    backups,
    inspections,
    preferences,
    profile,
    reports,
)

api_router = APIRouter(prefix="/api")

api_router.include_router(inspections.router, prefix="/inspections", tags=["inspections"])
api_router.include_router(reports.router, prefix="/reports", tags=["reports"])
api_router.include_router(profile.router, prefix="/profile", tags=["profile"])
api_router.include_router(preferences.router, prefix="/settings", tags=["settings"])
api_router.include_router(backups.router, prefix="/backups", tags=["backups"])
