"""API routers package."""

from .applications import router as applications_router
from .panel import router as panel_router

__all__ = ["applications_router", "panel_router"]
