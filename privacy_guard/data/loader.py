"""
Loader for tracker filter-list sources.

The bundled list lives alongside this module as ``easylist.txt``.
A remote list can be fetched over HTTP instead; both return raw text
and leave parsing to :mod:`privacy_guard.catalog.tracker_catalog`.
"""

from __future__ import annotations

import pathlib

import aiohttp

from privacy_guard.utils import errors, logger

log = logger.create_logger("Catalog-Loader")

# Resolve path to the data directory (same directory as this module)
_DATA_DIR = pathlib.Path(__file__).resolve().parent

DEFAULT_CATALOG_PATH = _DATA_DIR / "easylist.txt"

_FETCH_HEADERS = {"User-Agent": "Mozilla/5.0 (compatible; PrivacyGuard/1.0)"}


def read_catalog_file(path: pathlib.Path | str = DEFAULT_CATALOG_PATH) -> str:
    """Read a filter list from disk.

    Raises:
        CatalogLoadError: If the file is missing or unreadable.
    """
    full_path = pathlib.Path(path)
    try:
        return full_path.read_text(encoding="utf-8", errors="replace")
    except OSError as exc:
        raise errors.CatalogLoadError(f"Cannot read filter list {full_path}: {exc}") from exc


async def fetch_catalog_text(
    url: str,
    timeout: float = 10.0,
    http_session: aiohttp.ClientSession | None = None,
) -> str:
    """Download a filter list.

    Accepts an optional shared ``aiohttp.ClientSession``; a short-lived
    one is created otherwise.

    Raises:
        CatalogLoadError: On HTTP errors, timeouts, connection failures,
            or a body that cannot be decoded.
    """
    if http_session is None:
        async with aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=timeout)) as session:
            return await fetch_catalog_text(url, timeout, session)

    try:
        async with http_session.get(url, headers=_FETCH_HEADERS) as response:
            if response.status >= 400:
                raise errors.CatalogLoadError(f"Filter list fetch failed with HTTP {response.status}")
            text = await response.text(errors="replace")
    except (aiohttp.ClientError, TimeoutError, ValueError, LookupError) as exc:
        raise errors.CatalogLoadError(f"Filter list fetch failed: {errors.get_error_message(exc)}") from exc

    log.debug("Fetched filter list", {"url": url, "bytes": len(text)})
    return text
