"""Request-scoped helpers shared by the API routers."""

import logging
from typing import Optional

from fastapi import Header, HTTPException, Request, status

from brandlink.errors import BrandLinkError, StorageUnavailableError
from brandlink.service import BrandLinkService

logger = logging.getLogger("brandlink.web")


def get_service(request: Request) -> BrandLinkService:
    """Service from app state; 503 when no database is configured."""
    service = getattr(request.app.state, "service", None)
    if service is None:
        error = StorageUnavailableError()
        raise HTTPException(status_code=error.status_code, detail=error.message)
    return service


def get_customer_id(x_customer_id: Optional[str] = Header(None)) -> Optional[str]:
    """Authenticated customer id, set by the upstream auth proxy."""
    if x_customer_id is None:
        return None
    return x_customer_id.strip() or None


def http_error(error: BrandLinkError) -> HTTPException:
    """Map a taxonomy error to the HTTP response the caller sees."""
    return HTTPException(status_code=error.status_code, detail=error.message)


def internal_error(action: str, error: Exception) -> HTTPException:
    logger.error(f"Unexpected error while trying to {action}: {error}", exc_info=True)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"Failed to {action}",
    )
