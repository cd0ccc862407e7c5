"""
Central API router that aggregates all route modules.
"""

from fastapi import APIRouter
from tablebook.api.routes import auth, reservations, settings, venues

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(auth.router)
api_router.include_router(venues.router)
api_router.include_router(reservations.router)
api_router.include_router(settings.router)
