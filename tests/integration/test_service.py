"""Integration tests for WellnessService flows over in-memory SQLite."""
from datetime import datetime, time, timedelta
from unittest.mock import patch

import pytest

from conftest import NOW, OWNER, TODAY
from wellness.analysis.dismissal import HIGH_DISMISSAL_RATE
from wellness.analysis.trend import IMPROVING
from wellness.errors import DataUnavailable, PersistenceFailure, ValidationFailure
from wellness.services.wellness_service import WellnessService


def seed_metrics(store, days, end=TODAY, **fields):
    for i in range(days):
        day = end - timedelta(days=i)
        store.upsert_daily_metric(
            OWNER,
            day,
            mood=fields.get("mood", 3),
            stress=fields.get("stress", 3),
            energy=fields.get("energy", 3),
            sleep_hours=7.5,
            steps=6000,
            sleep_time="23:00",
            wake_time="07:00",
            created_at=datetime.combine(day, time(9, 0)),
        )


class TestAdviceResponse:
    def test_unknown_action_rejected(self, service):
        with pytest.raises(ValidationFailure):
            service.record_advice_response(OWNER, "s1", "ignored", now=NOW)

    def test_rating_out_of_range_rejected(self, service):
        with pytest.raises(ValidationFailure):
            service.record_advice_response(OWNER, "s1", "completed", rating=7, now=NOW)

    def test_completion_updates_streak_and_celebrates_first(self, service):
        outcome = service.record_advice_response(OWNER, "s1", "completed", rating=5, now=NOW)
        assert outcome.recorded
        assert outcome.streak.current_count == 1
        assert outcome.celebration.kind == "milestone"
        assert outcome.celebration.count == 1
        assert outcome.celebration.level == "minor"

    def test_resubmission_does_not_change_streak(self, service, store):
        service.record_advice_response(OWNER, "s1", "completed", now=NOW)
        before = store.get_streaks(OWNER)[0]
        again = service.record_advice_response(OWNER, "s1", "completed", now=NOW + timedelta(minutes=1))
        after = store.get_streaks(OWNER)[0]
        assert not again.recorded
        assert again.streak is None
        assert (after.current_count, after.best_count, after.last_activity_date) == (
            before.current_count, before.best_count, before.last_activity_date,
        )
        assert store.completion_timestamps(OWNER) == [NOW]

    def test_consecutive_days_build_streak(self, service):
        for offset in (2, 1, 0):
            day = NOW - timedelta(days=offset)
            outcome = service.record_advice_response(OWNER, f"s{offset}", "completed", now=day)
        assert outcome.streak.current_count == 3
        assert outcome.streak.best_count == 3
        assert outcome.celebration.count == 3

    def test_streak_write_failure_is_swallowed(self, service):
        with patch.object(service.store, "upsert_streak", side_effect=PersistenceFailure("down")):
            outcome = service.record_advice_response(OWNER, "s1", "completed", now=NOW)
        assert outcome.recorded
        assert outcome.streak.current_count == 1

    def test_dismissal_reports_rate_and_burnout(self, service):
        outcome = None
        for i in range(3):
            outcome = service.record_advice_response(
                OWNER, f"d{i}", "dismissed", responded_at=NOW - timedelta(hours=3 - i), now=NOW
            )
        assert outcome.dismissal.dismissal_rate == 1.0
        assert outcome.burnout.risk_level == "medium"


class TestActiveStreaks:
    def test_current_count_recomputed_for_today(self, service, store):
        for offset in (7, 6, 5):
            service.record_advice_response(
                OWNER, f"s{offset}", "completed", now=NOW - timedelta(days=offset)
            )
        assert store.get_streaks(OWNER)[0].current_count == 3

        assert service.active_streaks(OWNER, today=TODAY) == []
        (record,) = store.get_streaks(OWNER)
        assert record.current_count == 0
        assert record.best_count == 3

    def test_running_streak_listed(self, service):
        for offset in (1, 0):
            service.record_advice_response(
                OWNER, f"s{offset}", "completed", now=NOW - timedelta(days=offset)
            )
        (record,) = service.active_streaks(OWNER, today=TODAY)
        assert record.current_count == 2

    def test_no_streaks_for_new_owner(self, service):
        assert service.active_streaks(OWNER, today=TODAY) == []


class TestDismissalFlag:
    def _respond(self, service, actions):
        for i, action in enumerate(actions):
            service.record_advice_response(
                OWNER, f"{action}-{i}", action,
                responded_at=NOW - timedelta(hours=len(actions) - i), now=NOW,
            )

    def test_flag_raised_above_threshold(self, service):
        self._respond(service, ["completed"] * 3 + ["dismissed"] * 7)
        (flag,) = service.flags(OWNER)
        assert flag.flag_type == HIGH_DISMISSAL_RATE
        assert flag.flag_value == pytest.approx(0.7)
        assert flag.flag_metadata == {"recent_dismissals": 7, "total_sessions": 10}

    def test_flag_not_raised_at_threshold(self, service):
        self._respond(service, ["completed"] * 4 + ["dismissed"] * 6)
        assert service.flags(OWNER) == []

    def test_flag_cleared_when_rate_drops(self, service):
        self._respond(service, ["completed"] * 3 + ["dismissed"] * 7)
        service.record_advice_response(OWNER, "late-1", "completed", now=NOW)
        service.record_advice_response(OWNER, "late-2", "completed", now=NOW)
        assessment = service.check_dismissals(OWNER, now=NOW)
        assert not assessment.flag_raised
        assert service.flags(OWNER) == []

    def test_flag_kept_when_window_empty(self, service):
        self._respond(service, ["dismissed"] * 4)
        assessment = service.check_dismissals(OWNER, now=NOW + timedelta(days=30))
        assert assessment.total_sessions == 0
        assert len(service.flags(OWNER)) == 1


class TestCircadianProfile:
    def test_default_profile_not_persisted(self, service, store):
        seed_metrics(store, 3)
        profile = service.get_circadian_profile(OWNER, now=NOW)
        assert profile.is_default
        assert profile.confidence_score == 0.3
        assert store.get_circadian_profile(OWNER) is None

    def test_inferred_profile_persisted_and_reused(self, service, store):
        seed_metrics(store, 10)
        first = service.get_circadian_profile(OWNER, now=NOW)
        assert not first.is_default
        assert store.get_circadian_profile(OWNER).last_updated == NOW
        again = service.get_circadian_profile(OWNER, now=NOW + timedelta(days=2))
        assert again.last_updated == NOW

    def test_stale_profile_regenerated(self, service, store):
        seed_metrics(store, 10)
        service.get_circadian_profile(OWNER, now=NOW)
        later = NOW + timedelta(days=8)
        assert service.get_circadian_profile(OWNER, now=later).last_updated == later

    def test_force_regenerates_fresh_profile(self, service, store):
        seed_metrics(store, 10)
        service.get_circadian_profile(OWNER, now=NOW)
        later = NOW + timedelta(hours=1)
        profile = service.get_circadian_profile(OWNER, force=True, now=later)
        assert profile.last_updated == later
        assert store.get_circadian_profile(OWNER).last_updated == later

    def test_read_failure_falls_back_to_default(self, service):
        with patch.object(service.store, "metrics_between", side_effect=DataUnavailable("down")):
            profile = service.get_circadian_profile(OWNER, now=NOW)
        assert profile.is_default


class TestEmotionalState:
    def test_analysis_appended(self, service, store):
        seed_metrics(store, 5, stress=5, energy=2)
        store.upsert_life_score(OWNER, TODAY, stress=8, energy=3, sleep=4, overall=4)
        result = service.analyze_emotional_state(OWNER, now=NOW)
        assert result.current_state == "stressed"
        assert not result.is_fallback
        (record,) = store.emotional_history(OWNER)
        assert record.emotional_state == "stressed"
        assert record.analyzed_at == NOW

    def test_injected_classifier_used(self, engine, settings):
        service = WellnessService(engine, settings=settings, classify=lambda s, m: "motivated")
        assert service.analyze_emotional_state(OWNER, now=NOW).current_state == "motivated"

    def test_read_failure_uses_defaults(self, service):
        with patch.object(service.store, "recent_metrics", side_effect=DataUnavailable("down")):
            result = service.analyze_emotional_state(OWNER, now=NOW)
        assert result.used_default_metrics
        assert result.current_state == "balanced"

    def test_strict_read_failure_propagates(self, service):
        with patch.object(service.store, "recent_metrics", side_effect=DataUnavailable("down")):
            with pytest.raises(DataUnavailable):
                service.analyze_emotional_state(OWNER, now=NOW, strict=True)

    def test_write_failure_still_returns_result(self, service):
        with patch.object(service.store, "append_emotional_analysis", side_effect=PersistenceFailure("x")):
            result = service.analyze_emotional_state(OWNER, now=NOW)
        assert result.current_state == "balanced"


class TestStatistics:
    def test_completion_stats(self, service):
        for offset in range(7):
            service.record_advice_response(OWNER, f"c{offset}", "completed", now=NOW - timedelta(days=offset))
        stats = service.completion_stats(OWNER, today=TODAY)
        assert stats.weekly == 7
        assert stats.daily_average == 1.0

    def test_lifescore_trends(self, service, store):
        for i in range(14):
            overall = 6.0 if i < 7 else 5.0
            store.upsert_life_score(
                OWNER, TODAY - timedelta(days=i), stress=4, energy=5, sleep=6, overall=overall
            )
        trends = service.lifescore_trends(OWNER, today=TODAY)
        assert len(trends.history) == 14
        assert trends.history[0].record_date == TODAY - timedelta(days=13)
        assert trends.trend == IMPROVING
        assert trends.improvement_rate == 20.0
