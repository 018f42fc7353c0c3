"""
Tracker catalog: known tracker hostnames plus user overrides.

The catalog is built from the host-anchored rules (``||host^``) of an
Adblock-style filter list; every other rule form is ignored.  Users
can add their own blocklist and allowlist entries on top.

All three sets live in one immutable :class:`CatalogSnapshot`.
:class:`CatalogStore` replaces the snapshot reference wholesale on
every write, so a classifier holding a snapshot never observes a
partially updated list.
"""

from __future__ import annotations

import asyncio
import dataclasses
import pathlib
import re
import threading
from collections.abc import Iterable

from privacy_guard.data import loader
from privacy_guard.utils import errors, logger, url

log = logger.create_logger("TrackerCatalog")

# ``||host^`` at the start of a line; the host part stops at the first
# caret, slash, or wildcard, so rules with paths or wildcards never match.
_HOST_ANCHOR_RE = re.compile(r"^\|\|([^\^/*]+)\^")
_CATALOG_HOST_RE = re.compile(r"^[a-z0-9.-]+$")


@dataclasses.dataclass(frozen=True)
class CatalogSnapshot:
    """An immutable view of the tracker catalog and user lists."""

    tracker_domains: frozenset[str] = frozenset()
    user_blocklist: frozenset[str] = frozenset()
    user_allowlist: frozenset[str] = frozenset()


def parse_filter_list(source_text: str) -> frozenset[str]:
    """Extract tracker hostnames from filter-list text.

    Comments (``!``), section headers (``[``), and any rule that is
    not a bare host anchor are skipped.  Extracted hosts must consist
    of ``[a-z0-9.-]`` and contain at least one dot.
    """
    domains: set[str] = set()
    for line in source_text.splitlines():
        if not line or line.startswith(("!", "[")):
            continue
        match = _HOST_ANCHOR_RE.match(line)
        if not match:
            continue
        host = match.group(1).lower()
        if _CATALOG_HOST_RE.match(host) and "." in host:
            domains.add(host)
    return frozenset(domains)


def normalize_user_list(entries: Iterable[object] | None) -> frozenset[str]:
    """Normalise user-supplied domains: lower-case, trimmed, de-duplicated.

    Empty entries are dropped.

    Raises:
        InvalidDomainError: If any remaining entry is not a valid
            hostname.  Nothing is stored in that case.
    """
    normalized = {str(entry or "").strip().lower() for entry in entries or ()}
    normalized.discard("")
    rejected = sorted(entry for entry in normalized if not url.is_valid_hostname(entry))
    if rejected:
        raise errors.InvalidDomainError(rejected)
    return frozenset(normalized)


class CatalogStore:
    """Process-wide holder of the current :class:`CatalogSnapshot`.

    Reads are lock-free: ``snapshot`` returns whatever reference is
    current.  Writes build a new snapshot and swap it in under a lock.
    """

    def __init__(
        self,
        catalog_path: pathlib.Path | str = loader.DEFAULT_CATALOG_PATH,
        catalog_url: str = "",
        catalog_timeout: float = 10.0,
    ) -> None:
        self._catalog_path = pathlib.Path(catalog_path)
        self._catalog_url = catalog_url
        self._catalog_timeout = catalog_timeout
        self._write_lock = threading.Lock()
        self._snapshot = CatalogSnapshot()

    @property
    def snapshot(self) -> CatalogSnapshot:
        return self._snapshot

    def _swap(self, **changes: frozenset[str]) -> CatalogSnapshot:
        with self._write_lock:
            self._snapshot = dataclasses.replace(self._snapshot, **changes)
            return self._snapshot

    # ── Tracker domains ─────────────────────────────────────────

    def load_text(self, source_text: str) -> int:
        """Parse *source_text* and install it as the tracker set."""
        domains = parse_filter_list(source_text)
        self._swap(tracker_domains=domains)
        log.info("Tracker catalog loaded", {"trackerDomains": len(domains)})
        return len(domains)

    def load_file(self, path: pathlib.Path | str | None = None) -> int:
        """Load the catalog from disk; failures install an empty catalog."""
        try:
            text = loader.read_catalog_file(path or self._catalog_path)
        except errors.CatalogLoadError as exc:
            return self._fail(exc)
        return self.load_text(text)

    async def load_url(self, source_url: str | None = None) -> int:
        """Fetch and load a remote catalog; failures install an empty catalog."""
        try:
            text = await loader.fetch_catalog_text(source_url or self._catalog_url, self._catalog_timeout)
        except errors.CatalogLoadError as exc:
            return self._fail(exc)
        return self.load_text(text)

    async def reload(self) -> int:
        """Re-read the configured source and swap in the result.

        Returns:
            The number of tracker domains now installed.
        """
        if self._catalog_url:
            return await self.load_url()
        return await asyncio.to_thread(self.load_file)

    def _fail(self, exc: Exception) -> int:
        log.error(
            "Failed to load tracker catalog, continuing with user lists only",
            {"error": errors.get_error_message(exc)},
        )
        self._swap(tracker_domains=frozenset())
        return 0

    # ── User lists ──────────────────────────────────────────────

    def set_user_lists(
        self,
        blocklist: Iterable[object] | None,
        allowlist: Iterable[object] | None,
    ) -> CatalogSnapshot:
        """Replace both user lists in a single swap.

        Raises:
            InvalidDomainError: If either list holds an invalid entry;
                the previous lists stay in place.
        """
        blocked = normalize_user_list(blocklist)
        allowed = normalize_user_list(allowlist)
        snapshot = self._swap(user_blocklist=blocked, user_allowlist=allowed)
        log.info("User lists updated", {"blocklist": len(blocked), "allowlist": len(allowed)})
        return snapshot
