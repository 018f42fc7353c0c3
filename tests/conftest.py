"""Shared fixtures for the test suite."""

from __future__ import annotations

import pathlib

import pytest

from privacy_guard import config, engine
from privacy_guard.catalog import tracker_catalog
from privacy_guard.session import aggregator

SAMPLE_FILTER_LIST = """\
[Adblock Plus 2.0]
! Title: test list
||tracker.net^
||doubleclick.net^$third-party
||stats.example.org^
||*.wild.example^
||paths.example.com/ads^
##.banner
"""


# ── Catalog ─────────────────────────────────────────────────────


@pytest.fixture()
def filter_list_text() -> str:
    """Raw text of the sample filter list."""
    return SAMPLE_FILTER_LIST


@pytest.fixture()
def catalog_file(tmp_path: pathlib.Path) -> pathlib.Path:
    """A small filter list written to disk."""
    path = tmp_path / "list.txt"
    path.write_text(SAMPLE_FILTER_LIST, encoding="utf-8")
    return path


@pytest.fixture()
def catalog_store(catalog_file: pathlib.Path) -> tracker_catalog.CatalogStore:
    """A catalog store loaded from ``SAMPLE_FILTER_LIST``."""
    store = tracker_catalog.CatalogStore(catalog_path=catalog_file)
    store.load_file()
    return store


@pytest.fixture()
def snapshot() -> tracker_catalog.CatalogSnapshot:
    """A catalog snapshot with one tracker and no user lists."""
    return tracker_catalog.CatalogSnapshot(tracker_domains=frozenset({"tracker.net"}))


# ── Engine ──────────────────────────────────────────────────────


@pytest.fixture()
def settings(catalog_file: pathlib.Path) -> config.Settings:
    """Settings isolated from the environment and ``.env``."""
    return config.Settings(_env_file=None, catalog_path=catalog_file)


@pytest.fixture()
def privacy_engine(
    catalog_store: tracker_catalog.CatalogStore,
    settings: config.Settings,
) -> engine.PrivacyEngine:
    """An engine with the sample catalog loaded and no sessions."""
    return engine.PrivacyEngine(catalog=catalog_store, settings=settings)


@pytest.fixture()
def shop_session(privacy_engine: engine.PrivacyEngine) -> str:
    """Session id of a tab that has navigated to ``https://www.shop.example/``."""
    privacy_engine.on_navigate("tab-1", "https://www.shop.example/")
    return "tab-1"


# ── Sessions ────────────────────────────────────────────────────


@pytest.fixture()
def session_aggregator() -> aggregator.SessionAggregator:
    return aggregator.SessionAggregator()


@pytest.fixture()
def shop_state(session_aggregator: aggregator.SessionAggregator) -> aggregator.Session:
    """A bare session on ``shop.example``."""
    session = aggregator.Session("tab-1")
    session_aggregator.on_navigate(session, "https://shop.example/cart")
    return session

