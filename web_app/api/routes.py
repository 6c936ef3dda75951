"""Link resolution and health routes."""

from datetime import datetime, timezone
from typing import List, Optional, Union

from fastapi import APIRouter, Query, Request

from brandlink.errors import BrandLinkError
from brandlink.identifier import ParsedIdentifier, parse_identifier, parse_request_url

from .deps import get_service, http_error, internal_error
from .schemas import (
    ErrorResponse,
    HealthResponse,
    LegacyLinkResponse,
    LinkListResponse,
    ResolveRequest,
    SingleLinkResponse,
)

router = APIRouter()

OPEN_RESPONSES = {
    200: {
        "model": Union[SingleLinkResponse, LinkListResponse, LegacyLinkResponse],
        "description": (
            "`type: single` with the resolved link, `type: list` with `links` for a bare "
            "team slug, or the legacy single-link shape when LEGACY_RESPONSE_SHAPE is set"
        ),
    },
    400: {"model": ErrorResponse, "description": "Missing or invalid identifier"},
    404: {"model": ErrorResponse, "description": "Team or link not found"},
    500: {"model": ErrorResponse, "description": "Storage failure"},
    503: {"model": ErrorResponse, "description": "Database not configured or unreachable"},
}


async def _open(request: Request, parsed: ParsedIdentifier) -> dict:
    service = get_service(request)

    try:
        return await service.open_link(
            parsed,
            user_agent=getattr(request.state, "user_agent", None),
            referrer=getattr(request.state, "referrer", None),
        )
    except BrandLinkError as e:
        raise http_error(e)
    except Exception as e:
        raise internal_error("resolve link", e)


@router.post(
    "/open/resolve",
    responses=OPEN_RESPONSES,
    summary="Resolve short-link URL",
    description="Resolve an absolute short-link URL; same semantics as GET /open/{identifier}.",
)
async def resolve_url(request: Request, body: ResolveRequest):
    """Resolve the identifier and ``id`` query parameter of a full URL."""
    try:
        parsed = parse_request_url(body.url)
    except BrandLinkError as e:
        raise http_error(e)

    return await _open(request, parsed)


@router.get(
    "/open/{identifier}",
    responses=OPEN_RESPONSES,
    summary="Resolve short link",
    description=(
        "Resolve `{slug}-{shortId}`, `{slug}?id={shortId}`, `?id={linkId}`, "
        "a bare team slug (listing) or a bare link id."
    ),
)
async def open_link(
    request: Request,
    identifier: str,
    query_id: Optional[List[str]] = Query(None, alias="id"),
):
    """Resolve a short-link identifier from the path."""
    try:
        parsed = parse_identifier(identifier, query_id)
    except BrandLinkError as e:
        raise http_error(e)

    return await _open(request, parsed)


@router.get(
    "/api/health",
    response_model=HealthResponse,
    summary="Health check",
    description="Check if the service and its database are healthy.",
)
async def health_check(request: Request):
    """Health check endpoint for load balancers and monitoring."""
    service = getattr(request.app.state, "service", None)
    healthy = False
    if service is not None:
        health = await service.health_check()
        healthy = health["overall"]

    return HealthResponse(
        status="healthy" if healthy else "unhealthy",
        database="healthy" if healthy else "unhealthy",
        timestamp=datetime.now(timezone.utc),
    )
