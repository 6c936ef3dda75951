"""Click analytics: device classification, event recording and reporting."""

import logging
import re
from datetime import date, datetime, timedelta, timezone
from typing import Any, Dict, Iterable, Optional

from .database.base import BrandLinkDBBase
from .database.models import DeviceType, LinkAnalytics

MAX_TEXT_LENGTH = 500
DEFAULT_WINDOW_DAYS = 14
MAX_WINDOW_DAYS = 90

BOT_INDICATORS = (
    "facebookexternalhit",
    "googlebot",
    "adsbot-google",
    "google-inspectiontool",
    "bingbot",
    "baiduspider",
    "yandexbot",
    "duckduckbot",
    "applebot",
    "slackbot",
    "discordbot",
    "twitterbot",
    "linkedinbot",
    "pinterestbot",
    "petalbot",
    "semrushbot",
    "ahrefsbot",
)

_MOBILE_PATTERN = re.compile(
    r"(mobile|iphone|ipod|android|blackberry|iemobile|opera mini|phone)",
    re.IGNORECASE,
)


def detect_device_type(user_agent: Optional[str]) -> DeviceType:
    """Classify the requesting agent.

    Args:
        user_agent: Raw ``User-Agent`` header, possibly missing

    Returns:
        BOT for known crawlers and link-preview fetchers, MOBILE for
        mobile-device tokens, DESKTOP otherwise (including no agent)
    """
    if not user_agent:
        return DeviceType.DESKTOP
    normalized = user_agent.lower()

    if any(indicator in normalized for indicator in BOT_INDICATORS):
        return DeviceType.BOT

    if _MOBILE_PATTERN.search(normalized):
        return DeviceType.MOBILE
    return DeviceType.DESKTOP


def truncate_text(value: Optional[str], max_length: int = MAX_TEXT_LENGTH) -> Optional[str]:
    """Cap header text before persisting it; empty values become None."""
    if not value:
        return None
    return value[:max_length] if len(value) > max_length else value


class ClickRecorder:
    """Persists one analytics event per resolved link.

    Recording never fails the caller: any storage error is logged and
    dropped.
    """

    def __init__(self, db: BrandLinkDBBase, logger: Optional[logging.Logger] = None):
        self.db = db
        self.logger = logger or logging.getLogger(__name__)

    async def record(
        self,
        link_id: str,
        team_id: str,
        user_agent: Optional[str] = None,
        referrer: Optional[str] = None,
    ) -> None:
        """Record a click on ``link_id``.

        Args:
            link_id: Resolved link primary key
            team_id: Owning team
            user_agent: ``User-Agent`` header
            referrer: ``Referer`` header
        """
        try:
            event = LinkAnalytics(
                link_id=link_id,
                team_id=team_id,
                device=detect_device_type(user_agent),
                user_agent=truncate_text(user_agent),
                referrer=truncate_text(referrer),
            )
            await self.db.insert_analytics(event)
            self.logger.debug(f"Recorded {event.device.value} click on link {link_id}")
        except Exception as e:
            self.logger.error(
                f"Failed to record link analytics (link_id={link_id}, team_id={team_id}): {e}"
            )


def normalize_days(
    value: Optional[str],
    default: int = DEFAULT_WINDOW_DAYS,
    maximum: int = MAX_WINDOW_DAYS,
) -> int:
    """Parse the reporting window, falling back to ``default`` and capping at ``maximum``."""
    try:
        days = int(str(value).strip()) if value is not None else 0
    except ValueError:
        days = 0
    if days <= 0:
        return default
    return min(days, maximum)


def window_start(days: int, today: Optional[date] = None) -> datetime:
    """First instant (UTC midnight) of a ``days``-long window ending today."""
    today = today or datetime.now(timezone.utc).date()
    start = today - timedelta(days=days - 1)
    return datetime(start.year, start.month, start.day, tzinfo=timezone.utc)


def build_daily_series(
    events: Iterable[LinkAnalytics],
    days: int,
    today: Optional[date] = None,
) -> Dict[str, Any]:
    """Bucket click events per UTC day and device type.

    Args:
        events: Click events (events outside the window are ignored)
        days: Window length in days, ending with ``today``
        today: Last day of the window (defaults to the current UTC date)

    Returns:
        Dictionary with ``days``, ``totals`` and the ordered daily ``series``
    """
    today = today or datetime.now(timezone.utc).date()

    ordered_dates = [
        (today - timedelta(days=offset)).isoformat()
        for offset in range(days - 1, -1, -1)
    ]
    buckets = {key: {"desktop": 0, "mobile": 0, "bot": 0} for key in ordered_dates}

    for event in events:
        created_at = event.created_at
        if created_at.tzinfo is not None:
            created_at = created_at.astimezone(timezone.utc)
        bucket = buckets.get(created_at.date().isoformat())
        if bucket is None:
            continue
        if event.device == DeviceType.BOT:
            bucket["bot"] += 1
        elif event.device == DeviceType.MOBILE:
            bucket["mobile"] += 1
        else:
            bucket["desktop"] += 1

    series = [{"date": key, **buckets[key]} for key in ordered_dates]
    totals = {
        "desktop": sum(item["desktop"] for item in series),
        "mobile": sum(item["mobile"] for item in series),
        "bot": sum(item["bot"] for item in series),
    }
    totals["total"] = totals["desktop"] + totals["mobile"] + totals["bot"]

    return {"days": days, "totals": totals, "series": series}
