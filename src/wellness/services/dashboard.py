"""
WellnessDashboardComposer: one JSON-shaped read model per owner.

Every part is computed independently. A part that raises, including a store
read the service would otherwise answer from defaults, is replaced by its
documented default, its name is added to `fallbacks` and the dashboard is
marked `degraded`; the remaining parts are unaffected. Parts answered from
defaults without an error (no LifeScore yet, too little history for a
circadian profile) are listed in `fallbacks` but do not degrade the result.

Confidences and rates are in [0, 1]; percentages are rounded to one decimal.
"""
import logging
from dataclasses import asdict
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from wellness.analysis.completions import CompletionStats
from wellness.analysis.dismissal import BurnoutRisk
from wellness.analysis.emotion import analyze_emotional_state
from wellness.analysis.insights import longest_active_streak, wellness_insights
from wellness.analysis.samples import LifeScoreSample
from wellness.defaults import default_circadian_profile, default_life_score
from wellness.services.wellness_service import LifeScoreTrends, WellnessService

logger = logging.getLogger(__name__)


def _life_score_dict(score: LifeScoreSample) -> Dict[str, Any]:
    return {
        "date": score.record_date.isoformat(),
        "stress": score.stress,
        "energy": score.energy,
        "sleep": score.sleep,
        "overall": score.overall,
    }


def _stats_dict(stats: CompletionStats, best_streak: int) -> Dict[str, Any]:
    return {
        "total_completions": stats.total,
        "weekly_completions": stats.weekly,
        "daily_average": stats.daily_average,
        "best_day": stats.best_day,
        "best_week": stats.best_week,
        "active_day_rate": stats.active_day_rate,
        "trend_pct": stats.trend_pct,
        "engagement_trend": stats.engagement_trend,
        "best_streak": best_streak,
    }


def _trends_dict(trends: LifeScoreTrends) -> Dict[str, Any]:
    return {
        "lifescore_history": [_life_score_dict(s) for s in trends.history],
        "trend": trends.trend,
        "improvement_rate": trends.improvement_rate,
    }


class DashboardComposer:
    """Builds the dashboard read model from a WellnessService."""

    def __init__(self, service: WellnessService):
        self.service = service

    def compose(self, owner_id: str, now: Optional[datetime] = None) -> Dict[str, Any]:
        now = now or datetime.utcnow()
        today = now.date()
        fallbacks: List[str] = []
        errors: List[str] = []

        def part(name: str, build: Callable[[], Any], default: Callable[[], Any]) -> Any:
            try:
                return build()
            except Exception:
                logger.warning("Dashboard part %s failed for %s", name, owner_id, exc_info=True)
                errors.append(name)
                fallbacks.append(name)
                return default()

        life_score = part(
            "current_life_score",
            lambda: self.service.current_life_score(owner_id, strict=True),
            lambda: None,
        )
        if life_score is None:
            if "current_life_score" not in fallbacks:
                fallbacks.append("current_life_score")
            life_score = default_life_score(today)

        trends = part(
            "trends",
            lambda: self.service.lifescore_trends(owner_id, today=today),
            LifeScoreTrends,
        )
        stats = part(
            "statistics",
            lambda: self.service.completion_stats(owner_id, today=today),
            lambda: CompletionStats(0, 0, 0.0, 0, 0, 0.0, 0.0),
        )
        streaks = part(
            "active_streaks",
            lambda: self.service.active_streaks(owner_id, today=today),
            list,
        )
        all_streaks = part(
            "best_streak",
            lambda: self.service.streaks(owner_id),
            list,
        )
        profile = part(
            "circadian_profile",
            lambda: self.service.get_circadian_profile(owner_id, now=now, strict=True),
            lambda: default_circadian_profile(now),
        )
        if profile.is_default and "circadian_profile" not in fallbacks:
            fallbacks.append("circadian_profile")

        emotional = part(
            "emotional_state",
            lambda: self.service.analyze_emotional_state(owner_id, now=now, strict=True),
            lambda: analyze_emotional_state([], None, now),
        )
        if emotional.is_fallback and "emotional_state" not in fallbacks:
            fallbacks.append("emotional_state")

        flags = part("wellness_flags", lambda: self.service.flags(owner_id), list)
        burnout = part(
            "burnout_risk",
            lambda: self.service.burnout_risk(owner_id, now=now),
            lambda: BurnoutRisk("low", 0, 0.0, False),
        )

        active_streak = longest_active_streak([s.current_count for s in streaks])
        best_streak = max((s.best_count for s in all_streaks), default=0)

        return {
            "owner_id": owner_id,
            "generated_at": now.isoformat(),
            "current_life_score": _life_score_dict(life_score),
            "trends": _trends_dict(trends),
            "statistics": _stats_dict(stats, best_streak),
            "circadian_profile": profile.to_dict(),
            "emotional_state": emotional.to_dict(),
            "active_streaks": [
                {
                    "streak_type": s.streak_type,
                    "current_count": s.current_count,
                    "best_count": s.best_count,
                    "last_activity_date": (
                        s.last_activity_date.isoformat() if s.last_activity_date else None
                    ),
                }
                for s in streaks
            ],
            "wellness_flags": [
                {
                    "flag_type": f.flag_type,
                    "flag_value": f.flag_value,
                    "metadata": f.flag_metadata or {},
                    "updated_at": f.updated_at.isoformat(),
                }
                for f in flags
            ],
            "burnout_risk": asdict(burnout),
            "wellness_insights": wellness_insights(
                overall_score=life_score.overall,
                active_streak=active_streak,
                active_day_rate=stats.active_day_rate,
                improvement_rate=trends.improvement_rate,
                hour=now.hour,
            ),
            "fallbacks": fallbacks,
            "degraded": bool(errors),
        }


def compose_dashboard(
    service: WellnessService, owner_id: str, now: Optional[datetime] = None
) -> Dict[str, Any]:
    return DashboardComposer(service).compose(owner_id, now=now)
