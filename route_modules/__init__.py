"""
Routes package - organized API routes.

Import the combined router for use in main.py.
"""
from fastapi import APIRouter

from .auth_routes import router as auth_router
from .trainer_routes import router as trainer_router
from .booking_routes import router as booking_router
from .payment_routes import router as payment_router
from .class_routes import router as class_router
from .admin_routes import router as admin_router

# Combined router that includes all sub-routers
combined_router = APIRouter()
combined_router.include_router(auth_router, tags=["auth"])
combined_router.include_router(trainer_router, tags=["trainers"])
combined_router.include_router(booking_router, tags=["bookings"])
combined_router.include_router(payment_router, tags=["payments"])
combined_router.include_router(class_router, tags=["classes"])
combined_router.include_router(admin_router, tags=["admin"])

__all__ = ['combined_router', 'auth_router', 'trainer_router', 'booking_router', 'payment_router', 'class_router', 'admin_router']
