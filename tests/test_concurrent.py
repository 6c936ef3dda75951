"""Tests that concurrent requests keep short ids unique per team.

The app is async (FastAPI + asyncpg pool). Short id assignment for a team
is serialized by storage, so simultaneous listings and link creations
must never hand out the same short id twice.
"""

import asyncio
from datetime import timedelta

import pytest
from brandlink.database.models import Link, Team, TeamRole
from brandlink.errors import LinkLimitError

from conftest import BASE_TIME, OWNER


@pytest.fixture
def unnumbered_team(seeded_db):
    """Team with one numbered link and twenty links without short ids."""
    team = seeded_db.add_team(
        Team(id="team_bulk", name="Bulk", slug="bulk", stripe_price_id="price_pro"),
        {OWNER: TeamRole.OWNER},
    )
    seeded_db.add_link(Link(id="bulk5", team_id=team.id, short_id=5, target_url="https://bulk.example.com/5"))
    for i in range(20):
        seeded_db.add_link(
            Link(
                id=f"bulk_unnumbered_{i:02d}",
                team_id=team.id,
                short_id=None,
                target_url=f"https://bulk.example.com/u/{i}",
                created_at=BASE_TIME + timedelta(minutes=i),
            )
        )
    return team


def _short_ids(db, team_id):
    return [link.short_id for link in db.links.values() if link.team_id == team_id]


@pytest.mark.asyncio
class TestConcurrentShortIds:
    """Prove short ids stay unique under simultaneous requests."""

    async def test_concurrent_backfill(self, seeded_db, service, unnumbered_team):
        """Many simultaneous listings assign each missing short id exactly once."""
        concurrency = 10
        tasks = [service.list_team_links(unnumbered_team.id, OWNER) for _ in range(concurrency)]
        results = await asyncio.gather(*tasks)

        short_ids = _short_ids(seeded_db, unnumbered_team.id)
        assert None not in short_ids
        assert len(short_ids) == len(set(short_ids)), "Short ids must be unique under concurrency"
        assert sorted(short_ids) == [5] + list(range(6, 26))

        # Oldest unnumbered link gets the lowest new short id
        assert seeded_db.links["bulk_unnumbered_00"].short_id == 6
        for links in results:
            assert [link.short_id for link in links] == [link.short_id for link in results[0]]

    async def test_backfill_idempotent(self, seeded_db, service, unnumbered_team):
        """Listing again never changes assigned short ids."""
        first = await service.list_team_links(unnumbered_team.id, OWNER)
        second = await service.list_team_links(unnumbered_team.id, OWNER)

        assert [(link.id, link.short_id) for link in first] == [(link.id, link.short_id) for link in second]

    async def test_concurrent_listing_and_creation(self, client, seeded_db, unnumbered_team):
        """Simultaneous listings and link creations over HTTP never collide."""
        headers = {"X-Customer-Id": OWNER}
        creates = [
            client.post(
                f"/teams/{unnumbered_team.id}/links",
                json={"targetUrl": f"https://bulk.example.com/new/{i}"},
                headers=headers,
            )
            for i in range(10)
        ]
        listings = [client.get(f"/teams/{unnumbered_team.id}/links", headers=headers) for _ in range(10)]

        responses = await asyncio.gather(*(creates + listings), return_exceptions=True)

        for i, r in enumerate(responses):
            if isinstance(r, Exception):
                pytest.fail(f"Request {i} raised: {r}")
            assert r.status_code in (200, 201), f"Request {i}: status {r.status_code} body={r.text}"

        short_ids = _short_ids(seeded_db, unnumbered_team.id)
        assert len(short_ids) == 31
        assert None not in short_ids
        assert len(short_ids) == len(set(short_ids)), "Short ids must be unique under concurrency"

    async def test_concurrent_resolution(self, client, seeded_db):
        """Many concurrent GET /open requests all resolve and each records one click."""
        concurrency = 40
        tasks = [client.get("/open/acme-42") for _ in range(concurrency)]
        responses = await asyncio.gather(*tasks, return_exceptions=True)

        for i, r in enumerate(responses):
            if isinstance(r, Exception):
                pytest.fail(f"Request {i} raised: {r}")
            assert r.status_code == 200, f"Request {i}: status {r.status_code}"
            assert r.json()["link"]["targetUrl"] == "https://acme.example.com/42"

        assert len(seeded_db.events) == concurrency


@pytest.mark.asyncio
class TestConcurrentPlanLimit:
    """Prove the free-plan link limit holds under simultaneous creations."""

    async def test_concurrent_creation_stops_at_limit(self, seeded_db, service):
        """Acme holds 3 of 5 free links; of 5 simultaneous creations exactly 2 succeed."""
        tasks = [
            service.create_link("team_acme", OWNER, f"https://acme.example.com/burst/{i}")
            for i in range(5)
        ]
        results = await asyncio.gather(*tasks, return_exceptions=True)

        created = [r for r in results if isinstance(r, Link)]
        refused = [r for r in results if isinstance(r, LinkLimitError)]
        assert len(created) == 2
        assert len(refused) == 3
        assert sorted(link.short_id for link in created) == [43, 44]
        assert len(_short_ids(seeded_db, "team_acme")) == 5

    async def test_concurrent_creation_over_http(self, client, seeded_db):
        headers = {"X-Customer-Id": OWNER}
        responses = await asyncio.gather(*[
            client.post(
                "/teams/team_acme/links",
                json={"targetUrl": f"https://acme.example.com/burst/{i}"},
                headers=headers,
            )
            for i in range(6)
        ])

        assert sorted(r.status_code for r in responses) == [201, 201, 403, 403, 403, 403]
        assert len(_short_ids(seeded_db, "team_acme")) == 5
