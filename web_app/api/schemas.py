"""Pydantic schemas for API requests and responses."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Accepts and emits camelCase keys; snake_case is accepted on input too."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ResolveRequest(BaseModel):
    """Request to resolve a full short-link URL."""

    url: Optional[str] = Field(None, description="Absolute short-link URL", max_length=4096)

    model_config = {
        "json_schema_extra": {
            "examples": [
                {"url": "https://example.com/open/acme-42"},
                {"url": "https://example.com/open/acme?id=7"},
            ]
        }
    }


class PublicLink(CamelModel):
    id: str
    short_id: Optional[int] = None
    title: Optional[str] = None
    target_url: str


class TeamTheme(CamelModel):
    logo_url: Optional[str] = None
    team_name: Optional[str] = None
    team_slug: Optional[str] = None
    background_color: Optional[str] = None
    text_color: Optional[str] = None
    highlight_color: Optional[str] = None


class SingleLinkResponse(TeamTheme):
    """A single resolved link with team branding."""

    type: str = "single"
    link: PublicLink


class LinkListResponse(TeamTheme):
    """All of a team's links with team branding, for a bare team slug."""

    type: str = "list"
    links: List[PublicLink]


class LegacyLinkResponse(CamelModel):
    """Minimal single-link shape served when LEGACY_RESPONSE_SHAPE is set."""

    target_url: str
    logo_url: Optional[str] = None
    team_name: Optional[str] = None
    background_color: Optional[str] = None
    text_color: Optional[str] = None
    highlight_color: Optional[str] = None


class CreateTeamRequest(BaseModel):
    name: Optional[str] = Field(None, description="Team display name (no dashes)")


class TeamResponse(CamelModel):
    id: str
    name: str
    slug: Optional[str] = None
    logo_url: Optional[str] = None
    background_color: Optional[str] = None
    text_color: Optional[str] = None
    highlight_color: Optional[str] = None


class CreateLinkRequest(CamelModel):
    target_url: Optional[str] = Field(None, description="Absolute http(s) URL the link opens")
    title: Optional[str] = Field(None, max_length=200)


class UpdateLinkRequest(CamelModel):
    target_url: Optional[str] = Field(None, description="New absolute http(s) URL")
    title: Optional[str] = Field(None, max_length=200, description="New title; null or blank clears it")


class LinkResponse(CamelModel):
    id: str
    short_id: Optional[int] = None
    title: Optional[str] = None
    target_url: str
    created_at: datetime


class DeleteResponse(BaseModel):
    success: bool = True


class DeviceCounts(BaseModel):
    desktop: int
    mobile: int
    bot: int


class AnalyticsTotals(DeviceCounts):
    total: int


class AnalyticsDay(DeviceCounts):
    date: str


class AnalyticsResponse(BaseModel):
    """Daily click counts per device type."""

    days: int
    totals: AnalyticsTotals
    series: List[AnalyticsDay]


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(..., description="Overall status")
    database: str = Field(..., description="Database status")
    timestamp: datetime = Field(..., description="Check timestamp")


class ErrorResponse(BaseModel):
    """Error response."""

    detail: str = Field(..., description="Short error message")
