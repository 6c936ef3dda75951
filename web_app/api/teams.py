"""Team link management and analytics routes.

Authentication happens upstream; the authenticated customer id arrives in
the ``X-Customer-Id`` header.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request, status

from brandlink.errors import BrandLinkError

from .deps import get_customer_id, get_service, http_error, internal_error
from .schemas import (
    AnalyticsResponse,
    CreateLinkRequest,
    CreateTeamRequest,
    DeleteResponse,
    ErrorResponse,
    LinkResponse,
    TeamResponse,
    UpdateLinkRequest,
)

router = APIRouter(prefix="/teams")

ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Invalid request"},
    401: {"model": ErrorResponse, "description": "Not authenticated"},
    403: {"model": ErrorResponse, "description": "Insufficient permissions or plan limit"},
    404: {"model": ErrorResponse, "description": "Team or link not found"},
    409: {"model": ErrorResponse, "description": "Conflicting short id or slug"},
    500: {"model": ErrorResponse, "description": "Storage failure"},
    503: {"model": ErrorResponse, "description": "Database not configured or unreachable"},
}


@router.post(
    "",
    response_model=TeamResponse,
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES,
    summary="Create team",
)
async def create_team(
    request: Request,
    body: CreateTeamRequest,
    customer_id: Optional[str] = Depends(get_customer_id),
):
    """Create a team with a unique slug; the caller becomes its owner."""
    service = get_service(request)

    try:
        team = await service.create_team(body.name, customer_id)
    except BrandLinkError as e:
        raise http_error(e)
    except Exception as e:
        raise internal_error("create team", e)

    return TeamResponse(
        id=team.id,
        name=team.name,
        slug=team.slug,
        logo_url=team.logo_url,
        background_color=team.background_color,
        text_color=team.text_color,
        highlight_color=team.highlight_color,
    )


@router.get(
    "/{team_id}/links",
    response_model=List[LinkResponse],
    responses=ERROR_RESPONSES,
    summary="List team links",
    description="List the team's links, newest first. Links without a short id get one assigned.",
)
async def list_links(
    request: Request,
    team_id: str,
    customer_id: Optional[str] = Depends(get_customer_id),
):
    service = get_service(request)

    try:
        links = await service.list_team_links(team_id, customer_id)
    except BrandLinkError as e:
        raise http_error(e)
    except Exception as e:
        raise internal_error("load links", e)

    return [
        LinkResponse(
            id=link.id,
            short_id=link.short_id,
            title=link.title,
            target_url=link.target_url,
            created_at=link.created_at,
        )
        for link in links
    ]


@router.post(
    "/{team_id}/links",
    response_model=LinkResponse,
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES,
    summary="Create link",
)
async def create_link(
    request: Request,
    team_id: str,
    body: CreateLinkRequest,
    customer_id: Optional[str] = Depends(get_customer_id),
):
    """Create a link with the team's next short id."""
    service = get_service(request)

    try:
        link = await service.create_link(team_id, customer_id, body.target_url, body.title)
    except BrandLinkError as e:
        raise http_error(e)
    except Exception as e:
        raise internal_error("create link", e)

    return LinkResponse(
        id=link.id,
        short_id=link.short_id,
        title=link.title,
        target_url=link.target_url,
        created_at=link.created_at,
    )


@router.patch(
    "/{team_id}/links/{link_id}",
    response_model=LinkResponse,
    responses=ERROR_RESPONSES,
    summary="Update link",
    description="Change a link's target URL and/or title. The short id is kept.",
)
async def update_link(
    request: Request,
    team_id: str,
    link_id: str,
    body: UpdateLinkRequest,
    customer_id: Optional[str] = Depends(get_customer_id),
):
    service = get_service(request)

    try:
        link = await service.update_link(
            team_id, link_id, customer_id, body.model_dump(exclude_unset=True)
        )
    except BrandLinkError as e:
        raise http_error(e)
    except Exception as e:
        raise internal_error("update link", e)

    return LinkResponse(
        id=link.id,
        short_id=link.short_id,
        title=link.title,
        target_url=link.target_url,
        created_at=link.created_at,
    )


@router.delete(
    "/{team_id}/links/{link_id}",
    response_model=DeleteResponse,
    responses=ERROR_RESPONSES,
    summary="Delete link",
)
async def delete_link(
    request: Request,
    team_id: str,
    link_id: str,
    customer_id: Optional[str] = Depends(get_customer_id),
):
    service = get_service(request)

    try:
        await service.delete_link(team_id, link_id, customer_id)
    except BrandLinkError as e:
        raise http_error(e)
    except Exception as e:
        raise internal_error("delete link", e)

    return DeleteResponse(success=True)


@router.get(
    "/{team_id}/analytics",
    response_model=AnalyticsResponse,
    responses=ERROR_RESPONSES,
    summary="Team click analytics",
    description="Daily clicks per device type over the last `days` days (default 14, max 90).",
)
async def team_analytics(
    request: Request,
    team_id: str,
    days: Optional[str] = Query(None),
    customer_id: Optional[str] = Depends(get_customer_id),
):
    service = get_service(request)

    try:
        report = await service.team_analytics(team_id, customer_id, days)
    except BrandLinkError as e:
        raise http_error(e)
    except Exception as e:
        raise internal_error("load analytics", e)

    return AnalyticsResponse(**report)
