"""
Privacy score: a capped penalty accumulator over session counters.

Starting from 100, each category subtracts a bounded number of
points:

=====================  ==================================  ====
Category               Penalty                             Cap
=====================  ==================================  ====
Blocked trackers       2 per blocked request               40
Third-party requests   1 per 5 connections                 20
Cookies set            1 per 5 ``Set-Cookie`` headers      10
Web Storage keys       1 per 10 local + session keys       10
Canvas fingerprinting  15 once any readout is seen         15
Third-party scripts    5 per 5 unblocked scripts           15
Cookie sync            15 once any sync event is seen      15
=====================  ==================================  ====

All arithmetic is integer (floor division before scaling), so the
score is exactly reproducible from the counters.  The result is
clamped to ``[0, 100]``; higher is better.
"""

from __future__ import annotations

import dataclasses

from privacy_guard.models import session as session_models

BLOCKED_TRACKER_CAP = 40
THIRD_PARTY_CAP = 20
COOKIE_SET_CAP = 10
STORAGE_CAP = 10
CANVAS_PENALTY = 15
HOOK_RISK_CAP = 15
COOKIE_SYNC_PENALTY = 15


@dataclasses.dataclass(frozen=True)
class ScoreInputs:
    """Aggregate counters the score depends on."""

    blocked_trackers: int = 0
    third_party_connections: int = 0
    set_cookie_count: int = 0
    storage_keys: int = 0
    canvas_fingerprint_events: int = 0
    hook_risk_events: int = 0
    cookie_sync_events: int = 0


def score_breakdown(inputs: ScoreInputs) -> session_models.ScoreBreakdown:
    """Compute each category's penalty and the clamped total."""

    def penalty(points: int, cap: int) -> session_models.CategoryPenalty:
        return session_models.CategoryPenalty(points=max(0, min(cap, points)), max_points=cap)

    breakdown = session_models.ScoreBreakdown(
        blocked_trackers=penalty(inputs.blocked_trackers * 2, BLOCKED_TRACKER_CAP),
        third_party_connections=penalty(inputs.third_party_connections // 5, THIRD_PARTY_CAP),
        cookies_set=penalty(inputs.set_cookie_count // 5, COOKIE_SET_CAP),
        storage=penalty(inputs.storage_keys // 10, STORAGE_CAP),
        canvas_fingerprinting=penalty(CANVAS_PENALTY if inputs.canvas_fingerprint_events > 0 else 0, CANVAS_PENALTY),
        hook_risk=penalty((inputs.hook_risk_events // 5) * 5, HOOK_RISK_CAP),
        cookie_sync=penalty(COOKIE_SYNC_PENALTY if inputs.cookie_sync_events > 0 else 0, COOKIE_SYNC_PENALTY),
    )
    deducted = sum(
        category.points
        for category in (
            breakdown.blocked_trackers,
            breakdown.third_party_connections,
            breakdown.cookies_set,
            breakdown.storage,
            breakdown.canvas_fingerprinting,
            breakdown.hook_risk,
            breakdown.cookie_sync,
        )
    )
    breakdown.total_score = max(0, min(100, 100 - deducted))
    return breakdown


def calculate_privacy_score(inputs: ScoreInputs) -> int:
    """Return the 0–100 privacy score for *inputs*."""
    return score_breakdown(inputs).total_score


def score_band(score: int) -> session_models.ScoreBand:
    """Map a score to the dashboard colour band."""
    if score >= 80:
        return "good"
    if score >= 50:
        return "ok"
    return "bad"
