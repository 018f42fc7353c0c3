"""Pydantic models for per-session statistics, cookie-sync events, and scoring."""

from __future__ import annotations

from typing import Literal

import pydantic

from privacy_guard.utils.serialization import CAMEL_CONFIG

RequestAction = Literal["blocked", "allowed", "allowed-3p"]
SyncMatchType = Literal["name-match", "value-match", "suspicious-param"]
ScoreBand = Literal["good", "ok", "bad"]


class StorageArea(pydantic.BaseModel):
    """Key count and approximate size of a Web Storage area."""

    keys: int = pydantic.Field(default=0, ge=0)
    bytes: int = pydantic.Field(default=0, ge=0)


class IndexedDbInfo(pydantic.BaseModel):
    """Number of IndexedDB databases visible to the page."""

    dbs: int = pydantic.Field(default=0, ge=0)


class StorageReport(pydantic.BaseModel):
    """Storage footprint snapshot delivered by the page probe."""

    local: StorageArea = pydantic.Field(default_factory=StorageArea)
    session: StorageArea = pydantic.Field(default_factory=StorageArea)
    idb: IndexedDbInfo = pydantic.Field(default_factory=IndexedDbInfo)


class CookieSyncHit(pydantic.BaseModel):
    """One query parameter that looked like a shared identifier."""

    model_config = pydantic.ConfigDict(frozen=True)

    type: SyncMatchType
    key: str
    value: str


class CookieSyncEvent(pydantic.BaseModel):
    """A request that appeared to pass an identifier to a third party."""

    model_config = pydantic.ConfigDict(frozen=True)

    url: str
    matches: tuple[CookieSyncHit, ...]
    time: str


class RequestLogEntry(pydantic.BaseModel):
    """Entry in the bounded recent-request log."""

    model_config = pydantic.ConfigDict(frozen=True)

    url: str
    type: str
    action: RequestAction


class CategoryPenalty(pydantic.BaseModel):
    """Points deducted by one scoring category."""

    model_config = CAMEL_CONFIG

    points: int = 0
    max_points: int = 0


class ScoreBreakdown(pydantic.BaseModel):
    """Per-category penalties and the resulting score."""

    model_config = CAMEL_CONFIG

    total_score: int = 100
    blocked_trackers: CategoryPenalty = pydantic.Field(default_factory=CategoryPenalty)
    third_party_connections: CategoryPenalty = pydantic.Field(default_factory=CategoryPenalty)
    cookies_set: CategoryPenalty = pydantic.Field(default_factory=CategoryPenalty)
    storage: CategoryPenalty = pydantic.Field(default_factory=CategoryPenalty)
    canvas_fingerprinting: CategoryPenalty = pydantic.Field(default_factory=CategoryPenalty)
    hook_risk: CategoryPenalty = pydantic.Field(default_factory=CategoryPenalty)
    cookie_sync: CategoryPenalty = pydantic.Field(default_factory=CategoryPenalty)


class SessionStats(pydantic.BaseModel):
    """Read-only snapshot of a session served to the UI."""

    model_config = CAMEL_CONFIG

    session_id: str
    top_url: str = ""
    top_domain: str = ""
    third_party_connections: dict[str, int] = pydantic.Field(default_factory=dict)
    requests: list[RequestLogEntry] = pydantic.Field(default_factory=list)
    blocked_trackers: dict[str, int] = pydantic.Field(default_factory=dict)
    blocked_trackers_first: dict[str, int] = pydantic.Field(default_factory=dict)
    blocked_trackers_third: dict[str, int] = pydantic.Field(default_factory=dict)
    set_cookie_count: int = 0
    session_cookie_sets: int = 0
    persistent_cookie_sets: int = 0
    cookie_header_count: int = 0
    first_party_cookie_sets: int = 0
    third_party_cookie_sets: int = 0
    hook_risk_events: int = 0
    cookie_sync_events: list[CookieSyncEvent] = pydantic.Field(default_factory=list)
    cookie_sync_total: int = 0
    canvas_fingerprint_events: int = 0
    storage: StorageReport = pydantic.Field(default_factory=StorageReport)
    privacy_score: int = 100
    updated_at: str = ""


class DomainCount(pydantic.BaseModel):
    """A domain with its request or block count."""

    domain: str
    count: int


class SessionSummary(pydantic.BaseModel):
    """Condensed view of a session for the popup dashboard."""

    model_config = CAMEL_CONFIG

    session_id: str
    top_domain: str
    privacy_score: int
    score_band: ScoreBand
    blocked_total: int
    third_party_total: int
    top_blocked: list[DomainCount]
    top_connections: list[DomainCount]
    recent_sync_events: list[CookieSyncEvent]
    breakdown: ScoreBreakdown
