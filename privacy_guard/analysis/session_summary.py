"""
Dashboard summary of a session.

Condenses a :class:`SessionStats` snapshot into the handful of figures
the popup shows: score and colour band, totals, the busiest blocked
and third-party domains, and the latest cookie-sync events.
"""

from __future__ import annotations

from privacy_guard.analysis import scoring
from privacy_guard.models import session as session_models

TOP_DOMAINS_LIMIT = 50
RECENT_SYNC_LIMIT = 10


def top_domains(counts: dict[str, int], limit: int = TOP_DOMAINS_LIMIT) -> list[session_models.DomainCount]:
    """Domains ordered by count (descending), ties broken alphabetically."""
    ordered = sorted(counts.items(), key=lambda item: (-item[1], item[0]))
    return [session_models.DomainCount(domain=d, count=c) for d, c in ordered[:limit]]


def build_session_summary(
    stats: session_models.SessionStats,
    breakdown: session_models.ScoreBreakdown,
) -> session_models.SessionSummary:
    """Build the dashboard view; recent sync events are newest first."""
    return session_models.SessionSummary(
        session_id=stats.session_id,
        top_domain=stats.top_domain,
        privacy_score=stats.privacy_score,
        score_band=scoring.score_band(stats.privacy_score),
        blocked_total=sum(stats.blocked_trackers.values()),
        third_party_total=sum(stats.third_party_connections.values()),
        top_blocked=top_domains(stats.blocked_trackers),
        top_connections=top_domains(stats.third_party_connections),
        recent_sync_events=list(reversed(stats.cookie_sync_events[-RECENT_SYNC_LIMIT:])),
        breakdown=breakdown,
    )
