"""Pytest configuration and fixtures."""

import asyncio
import copy
from collections import defaultdict
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional

import pytest
from httpx import ASGITransport, AsyncClient

from brandlink.database.base import BrandLinkDBBase
from brandlink.database.models import Link, LinkAnalytics, Team, TeamMember, TeamRole
from brandlink.errors import ConflictError, LinkLimitError
from brandlink.service import BrandLinkService
from brandlink.common.logging_config import setup_logging
from config import Config
from web_app import create_app

OWNER = "cus_owner"
MEMBER = "cus_member"
OUTSIDER = "cus_outsider"

BASE_TIME = datetime(2024, 1, 1, tzinfo=timezone.utc)


class InMemoryDB(BrandLinkDBBase):
    """Dict-backed storage with the same per-team serialization as PostgreSQL."""

    def __init__(self):
        super().__init__("memory://")
        self.teams: Dict[str, Team] = {}
        self.members: Dict[tuple, TeamMember] = {}
        self.links: Dict[str, Link] = {}
        self.events: List[LinkAnalytics] = []
        self.fail_analytics = False
        self.closed = False
        self._team_locks = defaultdict(asyncio.Lock)

    # Seeding helpers

    def add_team(self, team: Team, members: Optional[Dict[str, TeamRole]] = None) -> Team:
        self.teams[team.id] = team
        for customer_id, role in (members or {}).items():
            self.members[(team.id, customer_id)] = TeamMember(team.id, customer_id, role)
        return team

    def add_link(self, link: Link) -> Link:
        self.links[link.id] = link
        return link

    def snapshot(self):
        return copy.deepcopy((self.teams, self.members, self.links, self.events))

    # Teams

    async def get_team(self, team_id):
        return self.teams.get(team_id)

    async def get_team_by_slug(self, slug):
        for team in self.teams.values():
            if team.slug == slug:
                return team
        return None

    async def list_unslugged_teams(self):
        unslugged = [team for team in self.teams.values() if team.slug is None]
        return sorted(unslugged, key=lambda team: (team.created_at, team.id))

    async def slug_taken(self, slug):
        return any(team.slug == slug for team in self.teams.values())

    async def create_team(self, team, owner_customer_id, owner_role=TeamRole.OWNER):
        if team.slug is not None and await self.slug_taken(team.slug):
            raise ConflictError("A team with this slug already exists")
        return self.add_team(team, {owner_customer_id: owner_role})

    async def get_membership(self, team_id, customer_id):
        return self.members.get((team_id, customer_id))

    # Links

    async def get_link(self, link_id):
        return self.links.get(link_id)

    async def get_link_by_short_id(self, team_id, short_id):
        if not 0 < short_id <= 2**31 - 1:
            raise OverflowError("value out of int32 range")
        for link in self.links.values():
            if link.team_id == team_id and link.short_id == short_id:
                return link
        return None

    def _team_links(self, team_id):
        links = [link for link in self.links.values() if link.team_id == team_id]
        return sorted(links, key=lambda link: (link.created_at, link.id), reverse=True)

    async def list_team_links(self, team_id):
        return self._team_links(team_id)

    def _max_short_id(self, team_id):
        return max(
            (link.short_id for link in self._team_links(team_id) if link.short_id is not None),
            default=0,
        )

    async def backfill_short_ids(self, team_id):
        async with self._team_locks[team_id]:
            missing = [link for link in reversed(self._team_links(team_id)) if link.short_id is None]
            next_short_id = self._max_short_id(team_id) + 1
            for link in missing:
                # Yield so concurrent callers interleave here if unserialized
                await asyncio.sleep(0)
                link.short_id = next_short_id
                next_short_id += 1
            return self._team_links(team_id)

    async def create_link(self, link, max_links=None):
        async with self._team_locks[link.team_id]:
            if max_links is not None and len(self._team_links(link.team_id)) >= max_links:
                raise LinkLimitError(max_links)
            if link.short_id is None:
                link.short_id = self._max_short_id(link.team_id) + 1
            elif await self.get_link_by_short_id(link.team_id, link.short_id):
                raise ConflictError("A short link already exists for this team")
            await asyncio.sleep(0)
            return self.add_link(link)

    async def update_link(self, link_id, changes):
        link = self.links.get(link_id)
        if link is None:
            return None
        for key, value in changes.items():
            setattr(link, key, value)
        link.updated_at = datetime.now(timezone.utc)
        return link

    async def delete_link(self, link_id):
        if self.links.pop(link_id, None) is None:
            return False
        self.events = [event for event in self.events if event.link_id != link_id]
        return True

    # Analytics

    async def insert_analytics(self, event):
        if self.fail_analytics:
            raise RuntimeError("analytics table unavailable")
        self.events.append(event)

    async def list_team_analytics(self, team_id, since):
        return [
            event for event in self.events
            if event.team_id == team_id and event.created_at >= since
        ]

    async def close(self):
        self.closed = True

    async def health_check(self):
        return not self.closed


@pytest.fixture
def logger():
    """Create test logger."""
    return setup_logging(level="DEBUG")


@pytest.fixture
def test_db():
    """Empty in-memory database."""
    return InMemoryDB()


@pytest.fixture
def seeded_db(test_db):
    """Database with a slugged team "Acme" and an unslugged legacy team.

    Acme holds links with short ids 1, 2 and 42 (42 newest); the legacy
    team "Old Co" holds one link with short id 42 and one without.
    """
    acme = test_db.add_team(
        Team(
            id="team_acme",
            name="Acme",
            slug="acme",
            logo_url="https://cdn.example.com/acme.png",
            background_color="#000000",
            text_color="#ffffff",
            highlight_color="#ff0000",
            created_at=BASE_TIME,
        ),
        {OWNER: TeamRole.OWNER, MEMBER: TeamRole.MEMBER},
    )
    for offset, short_id in enumerate((1, 2, 42)):
        test_db.add_link(
            Link(
                id=f"acme{short_id}",
                team_id=acme.id,
                short_id=short_id,
                title=f"Acme {short_id}",
                target_url=f"https://acme.example.com/{short_id}",
                created_at=BASE_TIME + timedelta(days=offset),
            )
        )

    legacy = test_db.add_team(
        Team(id="team_oldco", name="Old Co", slug=None, created_at=BASE_TIME),
        {OWNER: TeamRole.OWNER},
    )
    test_db.add_link(
        Link(
            id="xk3fa9",
            team_id=legacy.id,
            short_id=42,
            target_url="https://old.example.com/42",
            created_at=BASE_TIME,
        )
    )
    test_db.add_link(
        Link(
            id="oldnoshort",
            team_id=legacy.id,
            short_id=None,
            target_url="https://old.example.com/unnumbered",
            created_at=BASE_TIME + timedelta(days=1),
        )
    )
    return test_db


@pytest.fixture
def service(seeded_db, logger) -> BrandLinkService:
    """Create service instance."""
    return BrandLinkService(
        db=seeded_db,
        logger=logger,
        pro_price_ids=["price_pro"],
        free_plan_link_limit=5,
    )


@pytest.fixture
def config():
    return Config(database_url="postgresql://postgres@localhost/brandlink_test")


@pytest.fixture
def app(seeded_db, service, config):
    """Create test FastAPI app."""
    return create_app(
        db_instance=seeded_db,
        service_instance=service,
        config=config,
    )


@pytest.fixture
async def client(app):
    """Create test client."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac
