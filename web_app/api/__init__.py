"""API routers for BrandLink."""

from .routes import router as open_router
from .teams import router as teams_router

__all__ = ["open_router", "teams_router"]
