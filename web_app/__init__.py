"""FastAPI web application for BrandLink."""

from .app_factory import create_app

__all__ = ["create_app"]
