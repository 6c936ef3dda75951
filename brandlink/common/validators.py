"""Validation utilities for BrandLink."""

from urllib.parse import urlparse
from typing import Tuple


def is_valid_url(url: str) -> Tuple[bool, str]:
    """Validate a link target URL.
    
    Args:
        url: The URL to validate
        
    Returns:
        Tuple of (is_valid, error_message)
    """
    if not url or not isinstance(url, str):
        return False, "A valid target URL is required"
    
    if len(url) > 2048:
        return False, "URL is too long (max 2048 characters)"
    
    try:
        result = urlparse(url)
        # Raises ValueError for an out-of-range port
        result.port
    except ValueError as e:
        return False, f"Invalid URL format: {e}"
    
    if result.scheme not in ["http", "https"]:
        return False, "URL must use http or https protocol"
    
    if not result.netloc:
        return False, "URL must have a valid domain"
    
    return True, ""


def is_valid_team_name(name: str) -> Tuple[bool, str]:
    """Validate a team display name.
    
    Dashes are rejected because ``{slug}-{shortId}`` splits on the last dash.
    
    Args:
        name: Trimmed team name
        
    Returns:
        Tuple of (is_valid, error_message)
    """
    if not name or not isinstance(name, str):
        return False, "Team name is required"
    
    if "-" in name:
        return False, "Team name cannot include dashes"
    
    if len(name) > 100:
        return False, "Team name is too long (max 100 characters)"
    
    return True, ""
