"""Versioned API router."""

from fastapi import APIRouter

from . import admin, auth, availability, health, reservations, services

router = APIRouter()
router.include_router(health.router, prefix="/health", tags=["health"])
router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(
    availability.router, prefix="/availability", tags=["availability"]
)
router.include_router(
    reservations.router, prefix="/reservations", tags=["reservations"]
)
router.include_router(services.router, prefix="/services", tags=["services"])
router.include_router(
    admin.router, prefix="/admin/reservations", tags=["admin"]
)
router.include_router(
    services.admin_router, prefix="/admin/services", tags=["admin"]
)

__all__ = ["router"]
