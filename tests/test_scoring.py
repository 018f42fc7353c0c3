"""Tests for the privacy score function and its category penalties."""

from __future__ import annotations

import dataclasses

import pytest

from privacy_guard.analysis import scoring


def _score(**counters: int) -> int:
    return scoring.calculate_privacy_score(scoring.ScoreInputs(**counters))


class TestCalculatePrivacyScore:
    """Tests for calculate_privacy_score()."""

    def test_clean_session(self) -> None:
        assert _score() == 100

    def test_blocked_trackers_two_points_each(self) -> None:
        assert _score(blocked_trackers=3) == 94

    def test_blocked_trackers_capped(self) -> None:
        assert _score(blocked_trackers=20) == 60
        assert _score(blocked_trackers=21) == 60

    @pytest.mark.parametrize(("connections", "expected"), [(4, 100), (5, 99), (14, 98), (100, 80), (500, 80)])
    def test_third_party_floor_and_cap(self, connections: int, expected: int) -> None:
        assert _score(third_party_connections=connections) == expected

    @pytest.mark.parametrize(("cookies", "expected"), [(4, 100), (9, 99), (50, 90), (999, 90)])
    def test_cookie_sets(self, cookies: int, expected: int) -> None:
        assert _score(set_cookie_count=cookies) == expected

    @pytest.mark.parametrize(("keys", "expected"), [(9, 100), (10, 99), (250, 90)])
    def test_storage_keys(self, keys: int, expected: int) -> None:
        assert _score(storage_keys=keys) == expected

    def test_canvas_flat_penalty(self) -> None:
        assert _score(canvas_fingerprint_events=1) == 85
        assert _score(canvas_fingerprint_events=40) == 85

    @pytest.mark.parametrize(
        ("events", "expected"),
        [(1, 100), (4, 100), (5, 95), (9, 95), (10, 90), (15, 85), (99, 85)],
    )
    def test_hook_risk_steps(self, events: int, expected: int) -> None:
        assert _score(hook_risk_events=events) == expected

    def test_cookie_sync_flat_penalty(self) -> None:
        assert _score(cookie_sync_events=1) == 85
        assert _score(cookie_sync_events=12) == 85

    def test_clamped_at_zero(self) -> None:
        worst = _score(
            blocked_trackers=100,
            third_party_connections=1000,
            set_cookie_count=1000,
            storage_keys=1000,
            canvas_fingerprint_events=1,
            hook_risk_events=1000,
            cookie_sync_events=1,
        )
        assert worst == 0

    def test_exact_formula(self) -> None:
        # 100 - 14 - 2 - 1 - 3 - 15 - 5 - 0 = 60
        assert _score(
            blocked_trackers=7,
            third_party_connections=12,
            set_cookie_count=7,
            storage_keys=35,
            canvas_fingerprint_events=2,
            hook_risk_events=6,
        ) == 60

    @pytest.mark.parametrize("field", [f.name for f in dataclasses.fields(scoring.ScoreInputs)])
    def test_monotone_in_each_counter(self, field: str) -> None:
        base = scoring.ScoreInputs(blocked_trackers=3, third_party_connections=7, set_cookie_count=6)
        previous = scoring.calculate_privacy_score(base)
        for value in range(0, 60):
            bumped = dataclasses.replace(base, **{field: getattr(base, field) + value})
            current = scoring.calculate_privacy_score(bumped)
            assert 0 <= current <= previous
            previous = current


class TestScoreBreakdown:
    """Tests for score_breakdown()."""

    def test_categories_report_caps(self) -> None:
        breakdown = scoring.score_breakdown(scoring.ScoreInputs())
        assert breakdown.blocked_trackers.max_points == 40
        assert breakdown.third_party_connections.max_points == 20
        assert breakdown.hook_risk.max_points == 15
        assert breakdown.total_score == 100

    def test_points_match_total(self) -> None:
        breakdown = scoring.score_breakdown(scoring.ScoreInputs(blocked_trackers=5, cookie_sync_events=1))
        assert breakdown.blocked_trackers.points == 10
        assert breakdown.cookie_sync.points == 15
        assert breakdown.total_score == 75

    def test_camel_case_dump(self) -> None:
        dumped = scoring.score_breakdown(scoring.ScoreInputs()).model_dump(by_alias=True)
        assert dumped["totalScore"] == 100
        assert dumped["blockedTrackers"] == {"points": 0, "maxPoints": 40}


class TestScoreBand:
    """Tests for score_band()."""

    @pytest.mark.parametrize(
        ("score", "band"),
        [(100, "good"), (80, "good"), (79, "ok"), (50, "ok"), (49, "bad"), (0, "bad")],
    )
    def test_thresholds(self, score: int, band: str) -> None:
        assert scoring.score_band(score) == band
