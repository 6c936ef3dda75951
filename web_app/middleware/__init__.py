"""Middleware for BrandLink web app."""

from .headers import ClientHeadersMiddleware
from .logging import LoggingMiddleware

__all__ = ["ClientHeadersMiddleware", "LoggingMiddleware"]
