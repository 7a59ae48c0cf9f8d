"""
Dismissal-pattern monitoring and intervention burnout risk.

Two views over the same advice-session history:

  assess_dismissals     rolling-window dismissal rate; a rate strictly above
                        RATE_THRESHOLD with at least MIN_DISMISSALS dismissals
                        raises the "high_dismissal_rate" flag.
  assess_burnout_risk   consecutive dismissals at the end of the history,
                        mapped to a risk level and a cooldown before the next
                        intervention.
"""
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import List, Optional, Sequence

from wellness.analysis.samples import AdviceResponse

HIGH_DISMISSAL_RATE = "high_dismissal_rate"

WINDOW_DAYS = 7
RATE_THRESHOLD = 0.6
MIN_DISMISSALS = 3


@dataclass
class DismissalAssessment:
    dismissal_rate: float  # 0-1
    dismissed_count: int
    total_sessions: int
    flag_raised: bool

    @property
    def flag_metadata(self) -> dict:
        return {
            "recent_dismissals": self.dismissed_count,
            "total_sessions": self.total_sessions,
        }


@dataclass
class BurnoutRisk:
    risk_level: str  # low | medium | high
    consecutive_dismissals: int
    fatigue_score: float  # 0-1
    declining_engagement: bool
    recommendations: List[str] = field(default_factory=list)
    cooldown_hours: Optional[int] = None


def sessions_in_window(
    sessions: Sequence[AdviceResponse],
    now: datetime,
    window_days: int = WINDOW_DAYS,
) -> List[AdviceResponse]:
    since = now - timedelta(days=window_days)
    return [s for s in sessions if since <= s.created_at <= now]


def assess_dismissals(
    sessions: Sequence[AdviceResponse],
    now: datetime,
    window_days: int = WINDOW_DAYS,
    rate_threshold: float = RATE_THRESHOLD,
    min_dismissals: int = MIN_DISMISSALS,
) -> DismissalAssessment:
    """
    Dismissal rate over the sessions created in the last `window_days`.

    Every session in the window counts toward the total, answered or not.
    The threshold is exclusive: exactly 0.6 does not raise the flag.
    """
    window = sessions_in_window(sessions, now, window_days)
    total = len(window)
    dismissed = sum(1 for s in window if s.action == "dismissed")
    rate = dismissed / total if total else 0.0
    return DismissalAssessment(
        dismissal_rate=round(rate, 3),
        dismissed_count=dismissed,
        total_sessions=total,
        flag_raised=rate > rate_threshold and dismissed >= min_dismissals,
    )


def consecutive_dismissals(sessions: Sequence[AdviceResponse]) -> int:
    """Dismissals answered in a row, counting back from the newest response."""
    answered = sorted(
        (s for s in sessions if s.action is not None),
        key=lambda s: s.responded_at or s.created_at,
    )
    count = 0
    for s in reversed(answered):
        if s.action != "dismissed":
            break
        count += 1
    return count


def assess_burnout_risk(sessions: Sequence[AdviceResponse]) -> BurnoutRisk:
    """
    Map the current dismissal run to a burnout risk level.

      >= 5 in a row      high, 24h cooldown
      >= 3 in a row      medium, 8h cooldown; engagement counted as declining
      fatigue > 0.8      high, 48h cooldown (fatigue = (run - 2) * 0.2, capped at 1)
    """
    run = consecutive_dismissals(sessions)
    fatigue = min(1.0, (run - 2) * 0.2) if run >= 3 else 0.0
    declining = run >= 3

    risk = "low"
    recommendations: List[str] = []
    cooldown: Optional[int] = None

    if run >= 5:
        risk = "high"
        recommendations.append("Reduce intervention frequency significantly")
        cooldown = 24
    elif run >= 3:
        risk = "medium"
        recommendations.append("Space out interventions more")
        cooldown = 8

    if declining:
        recommendations.append("Switch to passive observation mode")
        recommendations.append("Focus on celebration and positive reinforcement")

    if fatigue > 0.8:
        risk = "high"
        recommendations.append("Take an extended break from interventions")
        cooldown = max(cooldown or 0, 48)

    return BurnoutRisk(
        risk_level=risk,
        consecutive_dismissals=run,
        fatigue_score=round(fatigue, 1),
        declining_engagement=declining,
        recommendations=recommendations,
        cooldown_hours=cooldown,
    )
