"""API routes."""

from .jobs import router as jobs_router
from .notifications import router as notifications_router

__all__ = [
    "jobs_router",
    "notifications_router",
]
