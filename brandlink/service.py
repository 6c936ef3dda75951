"""Business logic service for BrandLink."""

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Union

from .analytics import (
    DEFAULT_WINDOW_DAYS,
    MAX_WINDOW_DAYS,
    ClickRecorder,
    build_daily_series,
    normalize_days,
    window_start,
)
from .common.validators import is_valid_team_name, is_valid_url
from .composer import compose_legacy, compose_list, compose_single
from .database.base import BrandLinkDBBase
from .database.models import Link, Team, TeamMember, TeamRole
from .errors import (
    BrandLinkError,
    ForbiddenError,
    InvalidRequestError,
    NotFoundError,
    StorageFailureError,
    UnauthorizedError,
)
from .identifier import (
    ByQueryId,
    ByRawId,
    BySlugAndShortId,
    BySlugListing,
    ParsedIdentifier,
)
from .ids import IdGenerator
from .slug import matches_team_name, unique_team_slug


@dataclass
class ResolvedLink:
    team: Team
    link: Link


@dataclass
class ResolvedListing:
    team: Team
    links: List[Link] = field(default_factory=list)


Resolution = Union[ResolvedLink, ResolvedListing]


class BrandLinkService:
    """Service layer for link resolution and team link management."""

    def __init__(
        self,
        db: BrandLinkDBBase,
        logger: Optional[logging.Logger] = None,
        id_generator: Optional[IdGenerator] = None,
        legacy_response_shape: bool = False,
        pro_price_ids: Iterable[str] = (),
        free_plan_link_limit: int = 2,
        analytics_default_days: int = DEFAULT_WINDOW_DAYS,
        analytics_max_days: int = MAX_WINDOW_DAYS,
    ):
        """Initialize BrandLink service.

        Args:
            db: Database instance
            logger: Optional logger
            id_generator: Optional primary key generator
            legacy_response_shape: Serve single links in the minimal legacy shape
            pro_price_ids: Subscription price ids that lift the free-plan link limit
            free_plan_link_limit: Maximum links for teams without a pro price
            analytics_default_days: Reporting window when none is requested
            analytics_max_days: Largest reporting window
        """
        self.db = db
        self.logger = logger or logging.getLogger(__name__)
        self.ids = id_generator or IdGenerator()
        self.recorder = ClickRecorder(db, logger=self.logger)
        self.legacy_response_shape = legacy_response_shape
        self.pro_price_ids = frozenset(pro_price_ids)
        self.free_plan_link_limit = free_plan_link_limit
        self.analytics_default_days = analytics_default_days
        self.analytics_max_days = analytics_max_days

    @contextmanager
    def _storage_errors(self, action: str, **context: Any):
        """Translate unexpected storage errors into ``StorageFailureError``.

        Taxonomy errors pass through untouched; anything else is logged with
        ``context`` and replaced so raw storage details never reach callers.
        """
        try:
            yield
        except BrandLinkError:
            raise
        except Exception as e:
            details = ", ".join(f"{key}={value!r}" for key, value in context.items())
            self.logger.error(f"Failed to {action} ({details}): {e}", exc_info=True)
            raise StorageFailureError(f"Failed to {action}") from e

    # Team resolution

    async def find_team(self, slug: str) -> Optional[Team]:
        """Find the team addressed by ``slug``.

        Persisted slugs are matched exactly. Only when none matches are
        teams without a persisted slug scanned, comparing both the current
        and the legacy derivation of their names.

        Args:
            slug: Lowercased slug part of the identifier

        Returns:
            The team, or None
        """
        team = await self.db.get_team_by_slug(slug)
        if team:
            return team

        for candidate in await self.db.list_unslugged_teams():
            if matches_team_name(slug, candidate.name):
                self.logger.info(f"Resolved slug '{slug}' to unslugged team {candidate.id} by name")
                return candidate

        return None

    async def resolve_team(self, slug: str) -> Team:
        """Resolve ``slug`` to a team or raise ``NotFoundError``."""
        team = await self.find_team(slug)
        if team is None:
            raise NotFoundError("Team not found")
        return team

    # Link resolution

    async def _team_of(self, link: Optional[Link]) -> ResolvedLink:
        if link is None:
            raise NotFoundError("Link not found")
        team = await self.db.get_team(link.team_id)
        if team is None:
            raise NotFoundError("Link not found")
        return ResolvedLink(team=team, link=link)

    async def _lookup(self, parsed: ParsedIdentifier) -> Resolution:
        if isinstance(parsed, BySlugAndShortId):
            team = await self.resolve_team(parsed.slug)
            link = await self.db.get_link_by_short_id(team.id, parsed.short_id)
            if link is None:
                raise NotFoundError("Link not found")
            return ResolvedLink(team=team, link=link)

        if isinstance(parsed, ByQueryId):
            return await self._team_of(await self.db.get_link(parsed.link_id))

        if isinstance(parsed, BySlugListing):
            team = await self.find_team(parsed.slug)
            if team is not None:
                links = await self.db.list_team_links(team.id)
                if not links:
                    raise NotFoundError("No links found for this team")
                return ResolvedListing(team=team, links=links)
            return await self._team_of(await self.db.get_link(parsed.raw_identifier))

        if isinstance(parsed, ByRawId):
            return await self._team_of(await self.db.get_link(parsed.link_id))

        raise TypeError(f"Unsupported identifier: {parsed!r}")

    async def resolve(self, parsed: ParsedIdentifier) -> Resolution:
        """Find the link or team listing an identifier addresses.

        Precedence is fixed by the identifier type: team slug plus short id,
        then query id, then bare slug as team listing, then raw link id.
        A miss in the first two is final; a bare slug that names no team
        is retried as a raw link id.

        Args:
            parsed: Result of ``parse_identifier``

        Returns:
            ResolvedLink or ResolvedListing

        Raises:
            NotFoundError: Team, link or listing not found
            StorageUnavailableError: Database unreachable
            StorageFailureError: Any other storage error
        """
        with self._storage_errors("resolve link", identifier=parsed):
            return await self._lookup(parsed)

    async def open_link(
        self,
        parsed: ParsedIdentifier,
        user_agent: Optional[str] = None,
        referrer: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Resolve an identifier and build the public payload.

        A single-link result records one click event after the payload is
        composed; listings record nothing. Recording failures never
        affect the returned payload.

        Returns:
            Single-link or list payload with team theme fields
        """
        result = await self.resolve(parsed)

        if isinstance(result, ResolvedListing):
            self.logger.debug(f"Resolved {parsed!r} to {len(result.links)} links of team {result.team.id}")
            return compose_list(result.team, result.links)

        if self.legacy_response_shape:
            payload = compose_legacy(result.team, result.link)
        else:
            payload = compose_single(result.team, result.link)

        await self.recorder.record(
            link_id=result.link.id,
            team_id=result.team.id,
            user_agent=user_agent,
            referrer=referrer,
        )
        self.logger.debug(f"Resolved {parsed!r} -> {result.link.target_url}")
        return payload

    # Team link management

    async def _require_membership(
        self,
        team_id: str,
        customer_id: Optional[str],
        manage: bool = False,
    ) -> TeamMember:
        if not customer_id:
            raise UnauthorizedError()
        if not team_id:
            raise InvalidRequestError("Team ID is required")

        membership = await self.db.get_membership(team_id, customer_id)
        if membership is None:
            raise NotFoundError("Team not found")
        if manage and membership.role == TeamRole.MEMBER:
            raise ForbiddenError("Insufficient permissions")
        return membership

    async def list_team_links(self, team_id: str, customer_id: Optional[str]) -> List[Link]:
        """List a team's links, newest first, backfilling missing short ids.

        Any link without a short id gets the next free one in a single
        transaction, so after one listing every link of the team is
        addressable as ``{slug}-{shortId}``.

        Args:
            team_id: Team to list
            customer_id: Authenticated customer (must be a member)

        Returns:
            Links with short ids assigned
        """
        with self._storage_errors("load links", team_id=team_id):
            await self._require_membership(team_id, customer_id)

            links = await self.db.list_team_links(team_id)
            if any(link.short_id is None for link in links):
                links = await self.db.backfill_short_ids(team_id)
            return links

    async def create_link(
        self,
        team_id: str,
        customer_id: Optional[str],
        target_url: Optional[str],
        title: Optional[str] = None,
    ) -> Link:
        """Create a link with the team's next short id.

        Raises:
            ForbiddenError: Member role
            LinkLimitError: Free-plan limit reached
            InvalidRequestError: Target URL missing or not http(s)
            ConflictError: Short id taken concurrently
        """
        with self._storage_errors("create link", team_id=team_id):
            await self._require_membership(team_id, customer_id, manage=True)

            target_url = (target_url or "").strip()
            is_valid, error = is_valid_url(target_url)
            if not is_valid:
                raise InvalidRequestError(error)

            team = await self.db.get_team(team_id)
            if team is None:
                raise NotFoundError("Team not found")

            max_links = None
            if team.stripe_price_id not in self.pro_price_ids:
                max_links = self.free_plan_link_limit

            now = datetime.now(timezone.utc)
            link = await self.db.create_link(
                Link(
                    id=self.ids.link_id(),
                    team_id=team_id,
                    target_url=target_url,
                    title=(title or "").strip() or None,
                    created_at=now,
                    updated_at=now,
                ),
                max_links=max_links,
            )

        self.logger.info(f"Created link {link.id} (short id {link.short_id}) for team {team_id}")
        return link

    async def update_link(
        self,
        team_id: str,
        link_id: str,
        customer_id: Optional[str],
        changes: Dict[str, Any],
    ) -> Link:
        """Change a link's target URL and/or title; the short id never changes.

        ``changes`` holds only the fields the caller sent. A ``None`` or blank
        title clears it.

        Raises:
            ForbiddenError: Member role
            NotFoundError: Link missing or owned by another team
            InvalidRequestError: Nothing to update, or target URL not http(s)
        """
        with self._storage_errors("update link", team_id=team_id, link_id=link_id):
            await self._require_membership(team_id, customer_id, manage=True)

            existing = await self.db.get_link(link_id)
            if existing is None or existing.team_id != team_id:
                raise NotFoundError("Link not found")

            updates: Dict[str, Any] = {}
            if "target_url" in changes:
                target_url = (changes["target_url"] or "").strip()
                is_valid, error = is_valid_url(target_url)
                if not is_valid:
                    raise InvalidRequestError(error)
                updates["target_url"] = target_url
            if "title" in changes:
                updates["title"] = (changes["title"] or "").strip() or None

            if not updates:
                raise InvalidRequestError("No updates provided")

            link = await self.db.update_link(link_id, updates)
            if link is None:
                raise NotFoundError("Link not found")

        self.logger.info(f"Updated link {link_id} for team {team_id}: {sorted(updates)}")
        return link

    async def delete_link(self, team_id: str, link_id: str, customer_id: Optional[str]) -> None:
        """Delete one of the team's links together with its analytics."""
        with self._storage_errors("delete link", team_id=team_id, link_id=link_id):
            await self._require_membership(team_id, customer_id, manage=True)

            existing = await self.db.get_link(link_id)
            if existing is None or existing.team_id != team_id:
                raise NotFoundError("Link not found")

            await self.db.delete_link(link_id)

    async def team_analytics(
        self,
        team_id: str,
        customer_id: Optional[str],
        days: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Daily click counts per device type for the team's links.

        Args:
            team_id: Team to report on
            customer_id: Authenticated customer (must be a member)
            days: Requested window as received; defaulted and capped

        Returns:
            Dictionary with ``days``, ``totals`` and ``series``
        """
        window = normalize_days(days, self.analytics_default_days, self.analytics_max_days)
        today = datetime.now(timezone.utc).date()

        with self._storage_errors("load analytics", team_id=team_id):
            await self._require_membership(team_id, customer_id)
            events = await self.db.list_team_analytics(team_id, window_start(window, today))

        return build_daily_series(events, window, today)

    async def create_team(self, name: Optional[str], customer_id: Optional[str]) -> Team:
        """Create a team with a unique slug and make the caller its owner."""
        if not customer_id:
            raise UnauthorizedError()

        name = (name or "").strip()
        is_valid, error = is_valid_team_name(name)
        if not is_valid:
            raise InvalidRequestError(error)

        with self._storage_errors("create team", name=name):
            slug = await unique_team_slug(name, self.db.slug_taken)
            now = datetime.now(timezone.utc)
            team = await self.db.create_team(
                Team(
                    id=self.ids.team_id(),
                    name=name,
                    slug=slug,
                    customer_id=customer_id,
                    created_at=now,
                    updated_at=now,
                ),
                owner_customer_id=customer_id,
            )

        self.logger.info(f"Created team {team.id} ({team.slug}) for customer {customer_id}")
        return team

    async def health_check(self) -> Dict[str, bool]:
        """Perform health check.

        Returns:
            Dictionary with health status
        """
        db_healthy = await self.db.health_check()
        return {
            "database": db_healthy,
            "overall": db_healthy,
        }

    async def close(self) -> None:
        """Close service connections."""
        await self.db.close()
