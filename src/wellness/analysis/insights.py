"""
Short English insight lines and milestone celebrations for the dashboard.

Both are plain lookups over already-computed statistics; nothing here
touches the store.
"""
from dataclasses import dataclass
from typing import List, Optional, Sequence

MAX_INSIGHTS = 5
MILESTONES = (1, 3, 5, 7, 10, 14, 21, 30, 50, 100)

GENERIC_INSIGHT = "Keep tracking your progress to unlock personalised insights"


@dataclass
class Celebration:
    kind: str   # "milestone" (total completions) | "streak" (consecutive days)
    count: int
    level: str  # minor | medium | major
    message: str

    def to_dict(self) -> dict:
        return {
            "type": self.kind,
            "count": self.count,
            "celebration_level": self.level,
            "message": self.message,
        }


def celebration_level(count: int) -> str:
    if count >= 30:
        return "major"
    if count >= 7:
        return "medium"
    return "minor"


def check_celebration(total_completions: int, current_streak: int) -> Optional[Celebration]:
    """
    Celebration for the completion that was just recorded, if any.

    A total-completion milestone wins over a streak milestone. Streak
    milestones are always "major".
    """
    if total_completions in MILESTONES:
        return Celebration(
            kind="milestone",
            count=total_completions,
            level=celebration_level(total_completions),
            message=f"Fantastic! You have completed {total_completions} pieces of advice!",
        )
    if current_streak in MILESTONES:
        return Celebration(
            kind="streak",
            count=current_streak,
            level="major",
            message=f"Incredible! {current_streak} days in a row!",
        )
    return None


def wellness_insights(
    overall_score: float,
    active_streak: int,
    active_day_rate: float,
    improvement_rate: float,
    hour: int,
) -> List[str]:
    """
    Up to MAX_INSIGHTS lines, most important first.

    Args:
        overall_score: current LifeScore overall, 1-10.
        active_streak: longest current streak across streak types.
        active_day_rate: share of recent days with a completion, 0-1.
        improvement_rate: LifeScore percent change, week over week.
        hour: local hour of the request.
    """
    insights: List[str] = []

    if overall_score >= 8:
        insights.append("Excellent! Your overall wellbeing is very high")
    elif overall_score >= 6:
        insights.append("Good overall wellbeing, keep it up")
    elif overall_score <= 4:
        insights.append("Your levels could improve, consider more self-care activities")

    if active_streak >= 7:
        insights.append(f"Fantastic! You are on a {active_streak}-day streak")
    elif active_streak >= 3:
        insights.append(f"You are building a good habit: {active_streak} days in a row")

    if active_day_rate >= 0.8:
        insights.append("You have a great completion rate")
    elif active_day_rate >= 0.5:
        insights.append("Good consistency, try stepping it up slightly")
    elif active_day_rate < 0.3:
        insights.append("Consider starting with smaller, more achievable goals")

    if improvement_rate > 10:
        insights.append("Your scores are improving significantly")
    elif improvement_rate < -10:
        insights.append("Your levels are dropping, more frequent check-ins may help")

    if 6 <= hour <= 10:
        insights.append("Great moment to set your intentions for the day")
    elif 15 <= hour <= 17:
        insights.append("Perfect afternoon for a restorative break")
    elif 19 <= hour <= 22:
        insights.append("An ideal evening for relaxing activities")

    if not insights:
        insights.append(GENERIC_INSIGHT)
    return insights[:MAX_INSIGHTS]


def longest_active_streak(counts: Sequence[int]) -> int:
    return max((c for c in counts if c > 0), default=0)
