"""
Main API router that includes all route modules.
"""
from fastapi import APIRouter
from app.api.routes import (
    auth, users, standbys, settlements,
    views, roster, calendar
)

api_router = APIRouter()

# Include all route modules
api_router.include_router(auth.router)
api_router.include_router(users.router)
api_router.include_router(standbys.router)
api_router.include_router(settlements.router)
api_router.include_router(views.router)
api_router.include_router(roster.router)
api_router.include_router(calendar.router)
