"""Header parsing utilities for BrandLink."""

from typing import Dict, Optional


def extract_client_headers(headers: Dict[str, str]) -> Dict[str, Optional[str]]:
    """Extract the client details recorded with a click.
    
    Args:
        headers: Request headers dictionary
        
    Returns:
        Dictionary with user_agent, referrer, forwarded_for
    """
    headers_lower = {k.lower(): v for k, v in headers.items()}
    
    forwarded_for = headers_lower.get("x-forwarded-for")
    if forwarded_for:
        forwarded_for = forwarded_for.split(",")[0].strip() or None
    
    return {
        "user_agent": headers_lower.get("user-agent") or None,
        "referrer": headers_lower.get("referer") or headers_lower.get("referrer") or None,
        "forwarded_for": forwarded_for,
    }
