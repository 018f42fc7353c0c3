"""
Cookie-synchronisation heuristic.

Third-party requests are checked for query parameters that carry one
of the page's cookie names or values, or whose name looks like an
identifier (session, user, device, click, or advertising ids).

This is deliberately approximate: long opaque parameters that are not
identifiers produce false positives, and hashed or re-encoded ids are
missed.
"""

from __future__ import annotations

import dataclasses
import re
from collections.abc import Iterable
from datetime import UTC, datetime
from urllib import parse

from privacy_guard.models import events, session as session_models

# Values shorter than this are too generic (booleans, small counters)
# to indicate a shared identifier.
MIN_ID_VALUE_LENGTH = 8

# Hits kept per event.
MAX_HITS_PER_EVENT = 3

SUSPICIOUS_PARAM_RE = re.compile(
    r"(sid|session|uid|userid|user_id|guid|cid|clientid|deviceid|did|aid|adid|ga|_ga|fbp|fbc)",
    re.IGNORECASE,
)


@dataclasses.dataclass(frozen=True)
class KnownCookies:
    """Cookie names and identifier-length values visible to the current page."""

    names: frozenset[str] = frozenset()
    values: frozenset[str] = frozenset()

    @classmethod
    def from_pairs(
        cls,
        cookies: Iterable[events.CookiePair],
        min_value_length: int = MIN_ID_VALUE_LENGTH,
    ) -> KnownCookies:
        names = frozenset(c.name for c in cookies if c.name)
        values = frozenset(c.value for c in cookies if c.value and len(c.value) >= min_value_length)
        return cls(names=names, values=values)


def extract_query_params(request_url: str) -> list[tuple[str, str]]:
    """Return the decoded query parameters of *request_url*, or ``[]``."""
    try:
        query = parse.urlsplit(request_url).query
        return parse.parse_qsl(query, keep_blank_values=True)
    except ValueError:
        return []


def find_sync_hits(
    known: KnownCookies,
    params: Iterable[tuple[str, str]],
    min_value_length: int = MIN_ID_VALUE_LENGTH,
) -> list[session_models.CookieSyncHit]:
    """Collect every identifier-like hit among *params*, in order."""
    hits: list[session_models.CookieSyncHit] = []
    for key, value in params:
        if len(value) < min_value_length:
            continue
        if key in known.names:
            hits.append(session_models.CookieSyncHit(type="name-match", key=key, value=value))
        if value in known.values:
            hits.append(session_models.CookieSyncHit(type="value-match", key=key, value=value))
        if SUSPICIOUS_PARAM_RE.search(key):
            hits.append(session_models.CookieSyncHit(type="suspicious-param", key=key, value=value))
    return hits


def detect_cookie_sync(
    known: KnownCookies,
    request_url: str,
    min_value_length: int = MIN_ID_VALUE_LENGTH,
) -> session_models.CookieSyncEvent | None:
    """Inspect a third-party request URL for likely identifier sharing.

    Returns:
        An event holding the first three hits, or ``None`` when the URL
        has no identifier-like parameters or cannot be parsed.
    """
    hits = find_sync_hits(known, extract_query_params(request_url), min_value_length)
    if not hits:
        return None
    return session_models.CookieSyncEvent(
        url=request_url,
        matches=tuple(hits[:MAX_HITS_PER_EVENT]),
        time=datetime.now(UTC).isoformat(),
    )
