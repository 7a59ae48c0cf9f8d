"""Integration tests for the composed dashboard read model."""
import json
from datetime import timedelta
from unittest.mock import patch

from conftest import NOW, OWNER, TODAY
from wellness.errors import DataUnavailable
from wellness.services.dashboard import compose_dashboard

TOP_LEVEL_KEYS = {
    "owner_id", "generated_at", "current_life_score", "trends", "statistics",
    "circadian_profile", "emotional_state", "active_streaks", "wellness_flags",
    "burnout_risk", "wellness_insights", "fallbacks", "degraded",
}


def assert_unit_interval(value):
    assert 0.0 <= value <= 1.0


class TestEmptyOwner:
    def test_shape_and_defaults(self, service):
        dashboard = compose_dashboard(service, OWNER, now=NOW)
        assert set(dashboard) == TOP_LEVEL_KEYS
        assert dashboard["degraded"] is False
        assert {"current_life_score", "circadian_profile", "emotional_state"} <= set(dashboard["fallbacks"])
        assert dashboard["current_life_score"]["overall"] == 5.0
        assert dashboard["circadian_profile"]["confidence_score"] == 0.3
        assert dashboard["statistics"]["total_completions"] == 0
        assert dashboard["active_streaks"] == []
        assert 1 <= len(dashboard["wellness_insights"]) <= 5

    def test_json_serialisable(self, service):
        json.dumps(compose_dashboard(service, OWNER, now=NOW))


class TestPopulatedOwner:
    def test_parts_reflect_history(self, service, store):
        for i in range(10):
            day = TODAY - timedelta(days=i)
            store.upsert_daily_metric(
                OWNER, day, mood=4, stress=2, energy=4, sleep_hours=8, steps=9000,
                sleep_time="22:30", wake_time="06:30",
            )
            store.upsert_life_score(OWNER, day, stress=3, energy=8, sleep=8, overall=8)
        for offset in (2, 1, 0):
            service.record_advice_response(
                OWNER, f"s{offset}", "completed", now=NOW - timedelta(days=offset)
            )

        dashboard = compose_dashboard(service, OWNER, now=NOW)

        assert dashboard["degraded"] is False
        assert dashboard["fallbacks"] == []
        assert dashboard["current_life_score"]["overall"] == 8
        assert dashboard["circadian_profile"]["chronotype"] == "early_bird"
        assert dashboard["emotional_state"]["current_state"] == "energetic"
        assert dashboard["active_streaks"][0]["current_count"] == 3
        assert dashboard["statistics"]["best_streak"] == 3
        assert len(dashboard["trends"]["lifescore_history"]) == 10
        assert_unit_interval(dashboard["circadian_profile"]["confidence_score"])
        assert_unit_interval(dashboard["emotional_state"]["confidence"])
        assert_unit_interval(dashboard["statistics"]["active_day_rate"])

    def test_flags_included(self, service):
        for i in range(4):
            service.record_advice_response(
                OWNER, f"d{i}", "dismissed", responded_at=NOW - timedelta(hours=i + 1), now=NOW
            )
        dashboard = compose_dashboard(service, OWNER, now=NOW)
        (flag,) = dashboard["wellness_flags"]
        assert flag["flag_type"] == "high_dismissal_rate"
        assert_unit_interval(flag["flag_value"])
        assert dashboard["burnout_risk"]["risk_level"] == "medium"


class TestDegradedParts:
    def test_failing_part_uses_default(self, service):
        with patch.object(service, "completion_stats", side_effect=RuntimeError("boom")):
            dashboard = compose_dashboard(service, OWNER, now=NOW)
        assert dashboard["degraded"] is True
        assert "statistics" in dashboard["fallbacks"]
        assert dashboard["statistics"]["total_completions"] == 0
        assert dashboard["emotional_state"]["current_state"] == "balanced"

    def test_failing_profile_uses_default_profile(self, service):
        with patch.object(service, "get_circadian_profile", side_effect=RuntimeError("boom")):
            dashboard = compose_dashboard(service, OWNER, now=NOW)
        assert dashboard["degraded"] is True
        assert dashboard["fallbacks"].count("circadian_profile") == 1
        assert dashboard["circadian_profile"]["is_default"] is True

    def test_life_score_outage_degrades(self, service):
        with patch.object(service.store, "latest_life_score", side_effect=DataUnavailable("down")):
            dashboard = compose_dashboard(service, OWNER, now=NOW)
        assert dashboard["degraded"] is True
        assert dashboard["fallbacks"].count("current_life_score") == 1
        assert dashboard["current_life_score"]["overall"] == 5.0

    def test_metrics_outage_degrades_profile(self, service):
        with patch.object(service.store, "metrics_between", side_effect=DataUnavailable("down")):
            dashboard = compose_dashboard(service, OWNER, now=NOW)
        assert dashboard["degraded"] is True
        assert dashboard["fallbacks"].count("circadian_profile") == 1
        assert dashboard["circadian_profile"]["is_default"] is True


class TestEndedStreak:
    def test_run_that_ended_days_ago_is_not_active(self, service):
        for offset in (7, 6, 5):
            service.record_advice_response(
                OWNER, f"s{offset}", "completed", now=NOW - timedelta(days=offset)
            )

        dashboard = compose_dashboard(service, OWNER, now=NOW)

        assert dashboard["active_streaks"] == []
        assert dashboard["statistics"]["best_streak"] == 3
        assert not any("in a row" in line for line in dashboard["wellness_insights"])
