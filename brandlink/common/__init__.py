"""Common utilities for BrandLink."""

from .validators import is_valid_url, is_valid_team_name
from .headers import extract_client_headers
from .logging_config import setup_logging

__all__ = [
    "is_valid_url",
    "is_valid_team_name",
    "extract_client_headers",
    "setup_logging",
]
