"""Parsing of inbound short-link identifiers.

A link can be addressed four ways, which evolved over time:

- ``{slug}-{shortId}`` (or ``{slug}?id={shortId}``): a team slug plus the
  team-scoped numeric short id.
- ``?id={linkId}``: a link primary key passed as query parameter.
- ``{slug}``: a bare team slug, resolving to the team's whole listing.
- ``{linkId}``: a bare link primary key as the path segment.

``parse_identifier`` decides once which of these a request means; the
lookup side only dispatches on the resulting type.
"""

import re
from dataclasses import dataclass
from typing import List, Optional, Union
from urllib.parse import parse_qs, unquote, urlparse

from .errors import InvalidRequestError

_DIGITS = re.compile(r"[0-9]+")
# links.short_id is a 32-bit INTEGER column.
MAX_SHORT_ID = 2**31 - 1
# Characters any slug derivation (current or legacy) can produce.
_SLUG_CHARS = re.compile(r"[a-z0-9-]+")


@dataclass(frozen=True)
class BySlugAndShortId:
    slug: str
    short_id: int


@dataclass(frozen=True)
class ByQueryId:
    link_id: str


@dataclass(frozen=True)
class BySlugListing:
    """Bare slug. Falls back to ``raw_identifier`` as a link id when no team matches."""

    slug: str
    raw_identifier: str


@dataclass(frozen=True)
class ByRawId:
    link_id: str


ParsedIdentifier = Union[BySlugAndShortId, ByQueryId, BySlugListing, ByRawId]


def parse_positive_int(value: Optional[str]) -> Optional[int]:
    """Parse a base-10 positive integer, or return None.

    Args:
        value: Candidate string (ASCII digits only, no sign)

    Returns:
        The integer if ``value`` is all digits and within 1..MAX_SHORT_ID
    """
    if not value or not _DIGITS.fullmatch(value):
        return None
    number = int(value)
    return number if 0 < number <= MAX_SHORT_ID else None


def split_short_id(identifier: str) -> tuple:
    """Split ``identifier`` at its last inner dash into slug and short id.

    The split only applies when the suffix is a positive integer; otherwise
    the whole identifier is the slug part and no short id is returned.

    Returns:
        Tuple of (slug_part, short_id or None)
    """
    last_dash = identifier.rfind("-")
    if 0 < last_dash < len(identifier) - 1:
        short_id = parse_positive_int(identifier[last_dash + 1:])
        if short_id is not None:
            return identifier[:last_dash], short_id
    return identifier, None


def _first_value(value: Union[str, List[str], None]) -> Optional[str]:
    if isinstance(value, (list, tuple)):
        value = value[0] if value else None
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def parse_identifier(
    identifier: Optional[str],
    query_id: Union[str, List[str], None] = None,
) -> ParsedIdentifier:
    """Parse a raw path identifier and optional ``id`` query parameter.

    Args:
        identifier: Path segment as received
        query_id: ``id`` query parameter; if a list, its first element

    Returns:
        The addressing scheme the request means

    Raises:
        InvalidRequestError: If the identifier is missing or blank
    """
    identifier = (identifier or "").strip()
    if not identifier:
        raise InvalidRequestError("Link identifier is required")

    raw_query_id = _first_value(query_id)
    query_short_id = parse_positive_int(raw_query_id)

    slug_part, path_short_id = split_short_id(identifier)
    short_id = path_short_id if path_short_id is not None else query_short_id
    slug = slug_part.lower()

    if short_id is not None:
        return BySlugAndShortId(slug=slug, short_id=short_id)

    if raw_query_id:
        return ByQueryId(link_id=raw_query_id)

    if _SLUG_CHARS.fullmatch(slug):
        return BySlugListing(slug=slug, raw_identifier=identifier)

    return ByRawId(link_id=identifier)


def parse_request_url(url: Optional[str]) -> ParsedIdentifier:
    """Parse a full short-link URL into the addressing scheme it means.

    The identifier is the last non-empty path segment (percent-decoded) and
    the query id is the first ``id`` query parameter, so the result matches
    what ``parse_identifier`` gives for the equivalent path request.

    Args:
        url: Absolute URL such as ``https://example.com/open/acme-42?id=7``

    Raises:
        InvalidRequestError: If the URL is missing, not absolute, or has no
            identifier segment
    """
    url = (url or "").strip()
    if not url:
        raise InvalidRequestError("Request URL is required")

    try:
        parsed = urlparse(url)
        # Accessing the port validates it.
        parsed.port
    except ValueError:
        raise InvalidRequestError("Invalid request URL")

    if not parsed.scheme or not parsed.netloc:
        raise InvalidRequestError("Invalid request URL")

    segments = [segment for segment in parsed.path.split("/") if segment]
    identifier = unquote(segments[-1]) if segments else ""
    query_ids = parse_qs(parsed.query).get("id")

    return parse_identifier(identifier, query_ids)
