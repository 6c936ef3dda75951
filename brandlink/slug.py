"""Team slug derivation.

Two derivations coexist. ``normalize_slug`` is the current one and is what
gets persisted; ``legacy_slug`` is the older dash-separated form, kept only
so teams created before slugs were persisted can still be matched.
"""

import re
from typing import Awaitable, Callable

MAX_SLUG_LENGTH = 32
FALLBACK_SLUG = "team"

_NON_ALNUM = re.compile(r"[^a-z0-9]")
_NON_ALNUM_RUNS = re.compile(r"[^a-z0-9]+")


def normalize_slug(name: str) -> str:
    """Turn a team name into its alphanumeric-only slug.
    
    Args:
        name: Team display name (or any user input)
        
    Returns:
        Lowercase ``[a-z0-9]`` string, or ``"team"`` if nothing survives
    """
    cleaned = _NON_ALNUM.sub("", name.strip().lower()).strip()
    return cleaned or FALLBACK_SLUG


def legacy_slug(name: str) -> str:
    """Derive the legacy dash-separated slug of a team name.
    
    Args:
        name: Team display name
        
    Returns:
        Lowercase slug with non-alphanumeric runs collapsed to ``-``,
        or ``"team"`` if nothing survives
    """
    cleaned = _NON_ALNUM_RUNS.sub("-", name.strip().lower()).strip("-")
    return cleaned or FALLBACK_SLUG


def matches_team_name(slug: str, name: str) -> bool:
    """Check whether ``slug`` equals either derivation of ``name``."""
    return normalize_slug(name) == slug or legacy_slug(name) == slug


async def unique_team_slug(
    name: str,
    slug_taken: Callable[[str], Awaitable[bool]],
) -> str:
    """Pick a persisted slug for a team that no other team holds.
    
    Starts from the normalized name and appends ``2``, ``3``, ... on
    collision, shortening the base so the result stays within
    ``MAX_SLUG_LENGTH``.
    
    Args:
        name: Team display name
        slug_taken: Storage predicate ``(slug) -> bool``
        
    Returns:
        Unique slug
    """
    base = normalize_slug(name)[:MAX_SLUG_LENGTH]
    candidate = base
    suffix = 2
    
    while await slug_taken(candidate):
        tail = str(suffix)
        candidate = f"{base[:MAX_SLUG_LENGTH - len(tail)]}{tail}"
        suffix += 1
    
    return candidate
