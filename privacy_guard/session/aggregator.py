"""
Per-session counters and the mutators that update them.

A :class:`Session` holds everything observed for one browsing context
since its last top-level navigation.  :class:`SessionAggregator`
applies events to a session; every mutator recomputes
``privacy_score`` before returning, even if the update itself fails,
so the score is never stale by more than the event in flight.

Callers must serialise mutations of the same session (see
:mod:`privacy_guard.session.table`).
"""

from __future__ import annotations

import dataclasses
import functools
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Concatenate, ParamSpec, TypeVar

from privacy_guard.analysis import classifier, cookie_headers, cookie_sync, scoring
from privacy_guard.models import session as session_models
from privacy_guard.utils import url

P = ParamSpec("P")
R = TypeVar("R")


def _now() -> str:
    return datetime.now(UTC).isoformat()


@dataclasses.dataclass
class Session:
    """Mutable tracking state for one browsing context."""

    session_id: str
    top_url: str = ""
    top_domain: str = ""
    third_party_connections: dict[str, int] = dataclasses.field(default_factory=dict)
    requests: list[session_models.RequestLogEntry] = dataclasses.field(default_factory=list)
    blocked_trackers: dict[str, int] = dataclasses.field(default_factory=dict)
    blocked_trackers_first: dict[str, int] = dataclasses.field(default_factory=dict)
    blocked_trackers_third: dict[str, int] = dataclasses.field(default_factory=dict)
    set_cookie_count: int = 0
    session_cookie_sets: int = 0
    persistent_cookie_sets: int = 0
    cookie_header_count: int = 0
    first_party_cookie_sets: int = 0
    third_party_cookie_sets: int = 0
    hook_risk_events: int = 0
    cookie_sync_events: list[session_models.CookieSyncEvent] = dataclasses.field(default_factory=list)
    cookie_sync_total: int = 0
    canvas_fingerprint_events: int = 0
    storage: session_models.StorageReport = dataclasses.field(default_factory=session_models.StorageReport)
    known_cookies: cookie_sync.KnownCookies = dataclasses.field(default_factory=cookie_sync.KnownCookies)
    privacy_score: int = 100
    updated_at: str = dataclasses.field(default_factory=_now)

    def reset(self, top_url: str = "") -> None:
        """Clear all state and start over for a new top-level page."""
        fresh = Session(self.session_id, top_url=top_url, top_domain=url.base_domain(url.extract_hostname(top_url)))
        for field in dataclasses.fields(self):
            setattr(self, field.name, getattr(fresh, field.name))

    def score_inputs(self) -> scoring.ScoreInputs:
        return scoring.ScoreInputs(
            blocked_trackers=sum(self.blocked_trackers.values()),
            third_party_connections=sum(self.third_party_connections.values()),
            set_cookie_count=self.set_cookie_count,
            storage_keys=self.storage.local.keys + self.storage.session.keys,
            canvas_fingerprint_events=self.canvas_fingerprint_events,
            hook_risk_events=self.hook_risk_events,
            cookie_sync_events=len(self.cookie_sync_events),
        )

    def to_stats(self) -> session_models.SessionStats:
        """Copy the session into an immutable-by-convention API snapshot."""
        return session_models.SessionStats(
            session_id=self.session_id,
            top_url=self.top_url,
            top_domain=self.top_domain,
            third_party_connections=dict(self.third_party_connections),
            requests=list(self.requests),
            blocked_trackers=dict(self.blocked_trackers),
            blocked_trackers_first=dict(self.blocked_trackers_first),
            blocked_trackers_third=dict(self.blocked_trackers_third),
            set_cookie_count=self.set_cookie_count,
            session_cookie_sets=self.session_cookie_sets,
            persistent_cookie_sets=self.persistent_cookie_sets,
            cookie_header_count=self.cookie_header_count,
            first_party_cookie_sets=self.first_party_cookie_sets,
            third_party_cookie_sets=self.third_party_cookie_sets,
            hook_risk_events=self.hook_risk_events,
            cookie_sync_events=list(self.cookie_sync_events),
            cookie_sync_total=self.cookie_sync_total,
            canvas_fingerprint_events=self.canvas_fingerprint_events,
            storage=self.storage.model_copy(deep=True),
            privacy_score=self.privacy_score,
            updated_at=self.updated_at,
        )


def _increment(counter: dict[str, int], key: str) -> None:
    counter[key] = counter.get(key, 0) + 1


def _rescoring(
    method: Callable[Concatenate[SessionAggregator, Session, P], R],
) -> Callable[Concatenate[SessionAggregator, Session, P], R]:
    """Recompute the session's score after *method*, whether or not it raised."""

    @functools.wraps(method)
    def wrapper(self: SessionAggregator, session: Session, *args: P.args, **kwargs: P.kwargs) -> R:
        try:
            return method(self, session, *args, **kwargs)
        finally:
            session.privacy_score = scoring.calculate_privacy_score(session.score_inputs())
            session.updated_at = _now()

    return wrapper


class SessionAggregator:
    """Applies host events to :class:`Session` objects."""

    def __init__(
        self,
        recent_request_limit: int = 50,
        cookie_sync_history: int = 50,
        min_id_value_length: int = cookie_sync.MIN_ID_VALUE_LENGTH,
    ) -> None:
        self.recent_request_limit = recent_request_limit
        self.cookie_sync_history = cookie_sync_history
        self.min_id_value_length = min_id_value_length

    @_rescoring
    def on_navigate(self, session: Session, top_url: str) -> None:
        session.reset(top_url)

    @_rescoring
    def on_cookie_snapshot(self, session: Session, known: cookie_sync.KnownCookies) -> None:
        session.known_cookies = known

    @_rescoring
    def on_request_classified(
        self,
        session: Session,
        request_url: str,
        resource_type: str,
        hostname: str,
        request_base: str,
        classification: classifier.Classification,
    ) -> session_models.RequestAction:
        """Record a classified request and return the logged action."""
        if classification.is_third_party:
            _increment(session.third_party_connections, request_base)
            self._detect_cookie_sync(session, request_url)

        if classification.is_tracker:
            key = classifier.counter_key(classification, hostname, request_base)
            _increment(session.blocked_trackers, key)
            if classification.is_third_party:
                _increment(session.blocked_trackers_third, key)
            else:
                _increment(session.blocked_trackers_first, key)
            action: session_models.RequestAction = "blocked"
        else:
            # Unblocked third-party scripts are a rough proxy for code we cannot vet.
            if classification.is_third_party and resource_type == "script":
                session.hook_risk_events += 1
            action = "allowed-3p" if classification.is_third_party else "allowed"

        self._log_request(session, session_models.RequestLogEntry(url=request_url, type=resource_type, action=action))
        return action

    @_rescoring
    def on_response_headers(self, session: Session, response_url: str, set_cookies: list[str]) -> None:
        """Tally ``Set-Cookie`` headers by lifetime and party.

        Responses whose URL has no usable host count toward the totals
        but toward neither party.
        """
        counts = cookie_headers.count_cookie_sets(set_cookies)
        if not counts.total:
            return
        session.set_cookie_count += counts.total
        session.persistent_cookie_sets += counts.persistent
        session.session_cookie_sets += counts.session

        response_base = url.base_domain(url.extract_hostname(response_url))
        if not response_base:
            return
        if session.top_domain and response_base == session.top_domain:
            session.first_party_cookie_sets += counts.total
        else:
            session.third_party_cookie_sets += counts.total

    @_rescoring
    def on_request_headers(self, session: Session, has_cookie_header: bool) -> None:
        if has_cookie_header:
            session.cookie_header_count += 1

    @_rescoring
    def on_storage_report(self, session: Session, report: session_models.StorageReport) -> None:
        session.storage = report.model_copy(deep=True)

    @_rescoring
    def on_canvas_fingerprint_event(self, session: Session) -> None:
        session.canvas_fingerprint_events += 1

    # ── Internals ───────────────────────────────────────────────

    def _detect_cookie_sync(self, session: Session, request_url: str) -> None:
        event = cookie_sync.detect_cookie_sync(session.known_cookies, request_url, self.min_id_value_length)
        if event is None:
            return
        session.cookie_sync_events.append(event)
        session.cookie_sync_total += 1
        overflow = len(session.cookie_sync_events) - self.cookie_sync_history
        if overflow > 0:
            del session.cookie_sync_events[:overflow]

    def _log_request(self, session: Session, entry: session_models.RequestLogEntry) -> None:
        session.requests.append(entry)
        overflow = len(session.requests) - self.recent_request_limit
        if overflow > 0:
            del session.requests[:overflow]

