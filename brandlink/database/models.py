"""Data models for teams, links and click analytics."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Mapping, Optional


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TeamRole(str, Enum):
    OWNER = "OWNER"
    ADMIN = "ADMIN"
    MEMBER = "MEMBER"


class DeviceType(str, Enum):
    DESKTOP = "DESKTOP"
    MOBILE = "MOBILE"
    BOT = "BOT"


@dataclass
class Team:
    """A team owning links and carrying the branding shown on resolution."""
    
    id: str
    name: str
    slug: Optional[str] = None
    logo_url: Optional[str] = None
    background_color: Optional[str] = None
    text_color: Optional[str] = None
    highlight_color: Optional[str] = None
    font: Optional[str] = None
    customer_id: Optional[str] = None
    stripe_subscription_id: Optional[str] = None
    stripe_price_id: Optional[str] = None
    stripe_current_period_end: Optional[datetime] = None
    stripe_cancel_at_period_end: bool = False
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)
    
    @classmethod
    def from_record(cls, row: Mapping[str, Any]) -> "Team":
        """Create from a database row."""
        return cls(
            id=row["id"],
            name=row["name"],
            slug=row["slug"],
            logo_url=row["logo_url"],
            background_color=row["background_color"],
            text_color=row["text_color"],
            highlight_color=row["highlight_color"],
            font=row["font"],
            customer_id=row["customer_id"],
            stripe_subscription_id=row["stripe_subscription_id"],
            stripe_price_id=row["stripe_price_id"],
            stripe_current_period_end=row["stripe_current_period_end"],
            stripe_cancel_at_period_end=bool(row["stripe_cancel_at_period_end"]),
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )


@dataclass
class Link:
    """A team-owned short link.
    
    ``short_id`` is unique within the owning team only and may be ``None``
    until the team's listing backfills it.
    """
    
    id: str
    team_id: str
    target_url: str
    short_id: Optional[int] = None
    title: Optional[str] = None
    click_count: int = 0
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)
    
    @classmethod
    def from_record(cls, row: Mapping[str, Any]) -> "Link":
        """Create from a database row."""
        return cls(
            id=row["id"],
            team_id=row["team_id"],
            target_url=row["target_url"],
            short_id=row["short_id"],
            title=row["title"],
            click_count=row["click_count"] or 0,
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )


@dataclass
class LinkAnalytics:
    """Append-only click event."""
    
    link_id: str
    team_id: str
    device: DeviceType
    user_agent: Optional[str] = None
    referrer: Optional[str] = None
    created_at: datetime = field(default_factory=utcnow)
    id: Optional[int] = None
    
    @classmethod
    def from_record(cls, row: Mapping[str, Any]) -> "LinkAnalytics":
        """Create from a database row."""
        return cls(
            id=row["id"],
            link_id=row["link_id"],
            team_id=row["team_id"],
            device=DeviceType(row["device"]),
            user_agent=row["user_agent"],
            referrer=row["referrer"],
            created_at=row["created_at"],
        )


@dataclass
class TeamMember:
    team_id: str
    customer_id: str
    role: TeamRole = TeamRole.MEMBER
    created_at: datetime = field(default_factory=utcnow)
    
    @classmethod
    def from_record(cls, row: Mapping[str, Any]) -> "TeamMember":
        return cls(
            team_id=row["team_id"],
            customer_id=row["customer_id"],
            role=TeamRole(row["role"]),
            created_at=row["created_at"],
        )
