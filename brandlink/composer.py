"""Public payloads returned for resolved links."""

from typing import Any, Dict, Iterable

from .database.models import Link, Team


def team_theme(team: Team) -> Dict[str, Any]:
    """Branding fields shown alongside a resolved link."""
    return {
        "logoUrl": team.logo_url,
        "teamName": team.name,
        "teamSlug": team.slug,
        "backgroundColor": team.background_color,
        "textColor": team.text_color,
        "highlightColor": team.highlight_color,
    }


def public_link(link: Link) -> Dict[str, Any]:
    return {
        "id": link.id,
        "shortId": link.short_id,
        "title": link.title,
        "targetUrl": link.target_url,
    }


def compose_single(team: Team, link: Link) -> Dict[str, Any]:
    return {"type": "single", "link": public_link(link), **team_theme(team)}


def compose_list(team: Team, links: Iterable[Link]) -> Dict[str, Any]:
    return {"type": "list", "links": [public_link(link) for link in links], **team_theme(team)}


def compose_legacy(team: Team, link: Link) -> Dict[str, Any]:
    """Minimal shape served before listings existed: target URL plus theme, no slug."""
    return {
        "targetUrl": link.target_url,
        "logoUrl": team.logo_url,
        "teamName": team.name,
        "backgroundColor": team.background_color,
        "textColor": team.text_color,
        "highlightColor": team.highlight_color,
    }
