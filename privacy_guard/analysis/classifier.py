"""
Request classification: first/third-party status and tracker status.

Tracker status is resolved with a fixed precedence, first match wins:

1. user allowlist (host or any parent): never a tracker
2. user blocklist (host or any parent)
3. catalog entry for the exact host
4. catalog entry for the closest parent domain (the bare TLD is never
   checked)

Third-party status is independent of the tracker verdict.
"""

from __future__ import annotations

import dataclasses
from typing import Literal

from privacy_guard.catalog import tracker_catalog
from privacy_guard.utils import url

MatchRule = Literal["allowlist", "blocklist", "catalog", "catalog-parent", "none"]


@dataclasses.dataclass(frozen=True)
class Classification:
    """Outcome of classifying one request."""

    is_tracker: bool
    is_third_party: bool
    matched_domain: str = ""
    rule: MatchRule = "none"


def _first_containing(hostname: str, entries: frozenset[str]) -> str | None:
    """Return the most specific list entry that *hostname* equals or sits below."""
    for entry in sorted(entries, key=len, reverse=True):
        if url.is_subdomain_of(hostname, entry):
            return entry
    return None


def _catalog_parent(hostname: str, tracker_domains: frozenset[str]) -> str | None:
    """Find the closest ancestor of *hostname* present in the catalog."""
    labels = hostname.split(".")
    for i in range(1, len(labels) - 1):
        candidate = ".".join(labels[i:])
        if candidate in tracker_domains:
            return candidate
    return None


def match_tracker(hostname: str, catalog: tracker_catalog.CatalogSnapshot) -> tuple[bool, str, MatchRule]:
    """Resolve tracker status for *hostname* against one catalog snapshot.

    Returns:
        ``(is_tracker, matched_domain, rule)``.
    """
    if not hostname:
        return False, "", "none"

    allowed = _first_containing(hostname, catalog.user_allowlist)
    if allowed is not None:
        return False, allowed, "allowlist"

    blocked = _first_containing(hostname, catalog.user_blocklist)
    if blocked is not None:
        return True, blocked, "blocklist"

    if hostname in catalog.tracker_domains:
        return True, hostname, "catalog"

    parent = _catalog_parent(hostname, catalog.tracker_domains)
    if parent is not None:
        return True, parent, "catalog-parent"

    return False, "", "none"


def classify_request(
    hostname: str,
    request_base: str,
    top_domain: str,
    catalog: tracker_catalog.CatalogSnapshot,
) -> Classification:
    """Classify a request by its hostname and the page's base domain.

    An empty *hostname* (unparsable URL) carries no signal: the request
    is neither third-party nor a tracker.
    """
    hostname = hostname.lower()
    is_tracker, matched, rule = match_tracker(hostname, catalog)
    return Classification(
        is_tracker=is_tracker,
        is_third_party=url.is_third_party(request_base, top_domain),
        matched_domain=matched,
        rule=rule,
    )


def counter_key(classification: Classification, hostname: str, request_base: str) -> str:
    """Key under which a blocked request is counted; never empty."""
    return request_base or hostname or classification.matched_domain or "unknown"
