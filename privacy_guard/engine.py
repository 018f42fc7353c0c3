"""
Tracking engine: the call boundary between the core and its collaborators.

:class:`PrivacyEngine` owns the two pieces of process-wide state, the
tracker catalog and the session table, and translates host events
(request about to be sent, headers received, storage reports, canvas
readouts, navigations) into classifier calls and session updates.

Request classification returns its block/allow decision synchronously.
Every other notification is fire-and-forget: events for unknown
sessions are ignored rather than reported as errors.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable

from privacy_guard import config
from privacy_guard.analysis import classifier, cookie_headers, cookie_sync, scoring, session_summary
from privacy_guard.catalog import tracker_catalog
from privacy_guard.models import events, session as session_models
from privacy_guard.session import aggregator, table
from privacy_guard.utils import logger, url

log = logger.create_logger("Engine")


class PrivacyEngine:
    """Classifies traffic and maintains per-session privacy statistics."""

    def __init__(
        self,
        catalog: tracker_catalog.CatalogStore | None = None,
        settings: config.Settings | None = None,
    ) -> None:
        self.settings = settings or config.get_settings()
        self.catalog = catalog or tracker_catalog.CatalogStore(
            catalog_path=self.settings.catalog_path,
            catalog_url=self.settings.catalog_url,
            catalog_timeout=self.settings.catalog_timeout,
        )
        self.sessions = table.SessionTable()
        self.aggregator = aggregator.SessionAggregator(
            recent_request_limit=self.settings.recent_request_limit,
            cookie_sync_history=self.settings.cookie_sync_history,
            min_id_value_length=self.settings.min_id_value_length,
        )

    # ==========================================================================
    # Administration
    # ==========================================================================

    async def reload_catalog(self) -> int:
        """Reload the tracker catalog from its configured source."""
        log.start_timer("catalog-reload")
        count = await self.catalog.reload()
        log.end_timer("catalog-reload", "Tracker catalog reloaded")
        return count

    def apply_user_lists(self, blocklist: Iterable[object] | None, allowlist: Iterable[object] | None) -> None:
        """Install new personalisation lists.

        Raises:
            InvalidDomainError: If any entry is not a valid hostname.
        """
        self.catalog.set_user_lists(blocklist, allowlist)

    # ==========================================================================
    # Session lifecycle
    # ==========================================================================

    def on_navigate(self, session_id: str, top_url: str) -> session_models.SessionStats:
        """Start a fresh session for a new top-level page."""

        def navigate(session: aggregator.Session) -> session_models.SessionStats:
            self.aggregator.on_navigate(session, top_url)
            return session.to_stats()

        stats = self.sessions.get_or_create(session_id, navigate)
        log.debug("Session reset", {"sessionId": session_id, "topDomain": stats.top_domain})
        return stats

    def on_cookie_snapshot(self, session_id: str, cookies: Iterable[events.CookiePair]) -> bool:
        """Replace the known-cookie snapshot used for cookie-sync detection."""
        known = cookie_sync.KnownCookies.from_pairs(list(cookies), self.settings.min_id_value_length)
        return self._notify(session_id, lambda s: self.aggregator.on_cookie_snapshot(s, known))

    def close_session(self, session_id: str) -> bool:
        removed = self.sessions.remove(session_id)
        if removed:
            log.debug("Session closed", {"sessionId": session_id})
        return removed

    # ==========================================================================
    # Network events
    # ==========================================================================

    def on_before_request(self, event: events.RequestEvent) -> events.Decision:
        """Classify a request and decide whether it may proceed.

        Unknown sessions still receive a decision, with the page's
        base domain taken from ``document_url``; nothing is recorded.
        """
        hostname = url.extract_hostname(event.url)
        request_base = url.base_domain(hostname)
        document_domain = url.base_domain(url.extract_hostname(event.document_url)) if event.document_url else ""
        snapshot = self.catalog.snapshot

        def record(session: aggregator.Session) -> classifier.Classification:
            result = classifier.classify_request(
                hostname, request_base, session.top_domain or document_domain, snapshot
            )
            self.aggregator.on_request_classified(
                session, event.url, event.resource_type, hostname, request_base, result
            )
            return result

        result = self.sessions.apply(event.session_id, record)
        if result is None:
            result = classifier.classify_request(hostname, request_base, document_domain, snapshot)

        if result.is_tracker:
            log.debug(
                "Blocked tracker request",
                {"host": hostname, "matched": result.matched_domain, "rule": result.rule},
            )
        return events.Decision(
            action="block" if result.is_tracker else "allow",
            is_tracker=result.is_tracker,
            is_third_party=result.is_third_party,
            matched_domain=result.matched_domain,
            rule=result.rule,
        )

    def on_headers_received(self, event: events.ResponseHeadersEvent) -> bool:
        set_cookies = cookie_headers.set_cookie_values(event.response_headers)
        return self._notify(
            event.session_id, lambda s: self.aggregator.on_response_headers(s, event.url, set_cookies)
        )

    def on_before_send_headers(self, event: events.RequestHeadersEvent) -> bool:
        has_cookie = cookie_headers.has_cookie_header(event.request_headers)
        return self._notify(event.session_id, lambda s: self.aggregator.on_request_headers(s, has_cookie))

    # ==========================================================================
    # Page probe events
    # ==========================================================================

    def on_storage_report(self, session_id: str, report: session_models.StorageReport) -> bool:
        return self._notify(session_id, lambda s: self.aggregator.on_storage_report(s, report))

    def on_canvas_fingerprint(self, session_id: str) -> bool:
        return self._notify(session_id, self.aggregator.on_canvas_fingerprint_event)

    # ==========================================================================
    # Queries
    # ==========================================================================

    def get_stats(self, session_id: str) -> session_models.SessionStats | None:
        """Snapshot of a session, or ``None`` if it does not exist."""
        return self.sessions.apply(session_id, aggregator.Session.to_stats)

    def get_summary(self, session_id: str) -> session_models.SessionSummary | None:
        return self.sessions.apply(
            session_id,
            lambda s: session_summary.build_session_summary(s.to_stats(), scoring.score_breakdown(s.score_inputs())),
        )

    def get_breakdown(self, session_id: str) -> session_models.ScoreBreakdown | None:
        return self.sessions.apply(session_id, lambda s: scoring.score_breakdown(s.score_inputs()))

    # ==========================================================================
    # Helpers
    # ==========================================================================

    def _notify(self, session_id: str, apply: Callable[[aggregator.Session], object]) -> bool:
        """Apply a fire-and-forget update; ``False`` if the session is unknown."""

        def run(session: aggregator.Session) -> bool:
            apply(session)
            return True

        applied = self.sessions.apply(session_id, run)
        if applied is None:
            log.debug("Ignoring event for unknown session", {"sessionId": session_id})
            return False
        return True
