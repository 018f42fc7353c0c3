"""Set-Cookie and Cookie header inspection."""

from __future__ import annotations

import dataclasses
from collections.abc import Iterable

from privacy_guard.models import events

_EXPIRY_ATTRIBUTES = frozenset(["max-age", "expires"])


def set_cookie_values(headers: Iterable[events.HttpHeader]) -> list[str]:
    """Values of every ``Set-Cookie`` header (name matched case-insensitively)."""
    return [h.value for h in headers if h.name.lower() == "set-cookie"]


def has_cookie_header(headers: Iterable[events.HttpHeader]) -> bool:
    """True if a non-empty ``Cookie`` request header is present."""
    return any(h.name.lower() == "cookie" and h.value for h in headers)


def is_persistent(set_cookie: str) -> bool:
    """A cookie is persistent if it carries ``Max-Age=`` or ``Expires=``.

    The first ``;``-separated segment is the cookie pair itself and is
    never treated as an attribute.
    """
    for attribute in set_cookie.split(";")[1:]:
        name, sep, _ = attribute.partition("=")
        if sep and name.strip().lower() in _EXPIRY_ATTRIBUTES:
            return True
    return False


@dataclasses.dataclass(frozen=True)
class CookieSetCounts:
    """Set-Cookie tallies for one response."""

    total: int = 0
    persistent: int = 0
    session: int = 0


def count_cookie_sets(set_cookies: Iterable[str]) -> CookieSetCounts:
    values = list(set_cookies)
    persistent = sum(1 for v in values if is_persistent(v))
    return CookieSetCounts(total=len(values), persistent=persistent, session=len(values) - persistent)
