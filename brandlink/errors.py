"""Error taxonomy for link resolution and team link management."""

from typing import Optional


class BrandLinkError(Exception):
    """Base error carrying the HTTP status the web layer should return."""
    
    status_code: int = 500
    default_message: str = "Unexpected error"
    
    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidRequestError(BrandLinkError):
    """Malformed or missing identifier, URL or request body."""
    
    status_code = 400
    default_message = "Invalid request"


class UnauthorizedError(BrandLinkError):
    status_code = 401
    default_message = "Unauthorized"


class ForbiddenError(BrandLinkError):
    status_code = 403
    default_message = "Insufficient permissions"


class LinkLimitError(ForbiddenError):
    """Team already holds as many links as its plan allows."""
    
    def __init__(self, limit: int):
        self.limit = limit
        super().__init__(f"Free plan allows up to {limit} links. Upgrade to add more.")


class NotFoundError(BrandLinkError):
    """Team, link or non-empty listing could not be resolved."""
    
    status_code = 404
    default_message = "Link not found"


class ConflictError(BrandLinkError):
    status_code = 409
    default_message = "Resource already exists"


class StorageFailureError(BrandLinkError):
    """Unexpected error during a storage operation."""
    
    status_code = 500
    default_message = "Failed to resolve link"


class StorageUnavailableError(BrandLinkError):
    """Database is not configured or cannot be reached."""
    
    status_code = 503
    default_message = "Database not configured"
