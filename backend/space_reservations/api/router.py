"""
Central API router that aggregates all route modules.
"""

from fastapi import APIRouter

from space_reservations.api.routes import auth, reservations, spaces

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(auth.router)
api_router.include_router(spaces.router)
api_router.include_router(reservations.router)
