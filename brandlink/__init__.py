"""Core business logic for BrandLink."""

from .identifier import parse_identifier, parse_request_url
from .service import BrandLinkService

__all__ = ["parse_identifier", "parse_request_url", "BrandLinkService"]
