"""
URL and domain utility functions for request classification.

Registrable domains are approximated with a small fixed table of
two-label public suffixes rather than the full public suffix list.
"""

from __future__ import annotations

import re
from urllib import parse

_TWO_PART_TLDS = frozenset([
    "co.uk", "com.br", "com.au", "com.ar",
    "co.jp", "co.kr", "co.in",
])

_HOSTNAME_RE = re.compile(r"^[a-z0-9.-]+$")


def extract_hostname(url: str) -> str:
    """Extract the lower-cased hostname from a URL string.

    Returns an empty string when the URL cannot be parsed or
    has no host component.
    """
    try:
        return (parse.urlsplit(url).hostname or "").lower()
    except ValueError:
        return ""


def base_domain(hostname: str) -> str:
    """Extract the registrable base domain from a hostname.

    Args:
        hostname: A hostname like ``"a.b.example.co.uk"``.

    Returns:
        The base domain, e.g. ``"example.co.uk"``; an empty string
        for empty input. Hosts with unknown suffixes fall back to
        their last two labels.
    """
    if not hostname:
        return ""
    parts = [p for p in hostname.lower().split(".") if p]
    if len(parts) <= 2:
        return ".".join(parts)
    if ".".join(parts[-2:]) in _TWO_PART_TLDS:
        return ".".join(parts[-3:])
    if ".".join(parts[-3:]) in _TWO_PART_TLDS:
        return ".".join(parts[-4:])
    return ".".join(parts[-2:])


def is_subdomain_of(host: str, domain: str) -> bool:
    """True if *host* equals *domain* or sits below it on a label boundary."""
    host = host.lower()
    domain = domain.lower()
    return host == domain or host.endswith("." + domain)


def is_third_party(request_base: str, top_domain: str) -> bool:
    """A request is third-party when both base domains are known and differ."""
    return bool(request_base) and bool(top_domain) and request_base != top_domain


def is_valid_hostname(text: str) -> bool:
    """Check that *text* looks like a bare hostname (``[a-z0-9.-]`` with a dot).

    Labels may not be empty or start or end with a hyphen.
    """
    if len(text) < 3 or "." not in text:
        return False
    if not _HOSTNAME_RE.match(text):
        return False
    return all(label and not label.startswith("-") and not label.endswith("-") for label in text.split("."))
