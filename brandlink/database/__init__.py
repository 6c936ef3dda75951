"""Database layer for BrandLink."""

from .base import BrandLinkDBBase
from .postgres import BrandLinkPostgres
from .models import DeviceType, Link, LinkAnalytics, Team, TeamMember, TeamRole

__all__ = [
    "BrandLinkDBBase",
    "BrandLinkPostgres",
    "DeviceType",
    "Link",
    "LinkAnalytics",
    "Team",
    "TeamMember",
    "TeamRole",
]
