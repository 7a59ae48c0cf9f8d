"""Emotional state prompt builder: one-word classification by Claude."""
from wellness.analysis.emotion import EMOTIONAL_STATES
from wellness.analysis.samples import LifeScoreSample, MetricSample


def _fmt(value, unit: str = "") -> str:
    if value is None:
        return "n/a"
    if isinstance(value, float):
        return f"{value:.1f}{unit}"
    return f"{value}{unit}"


def build_emotion_prompt(score: LifeScoreSample, metrics: MetricSample) -> str:
    """
    Build a prompt asking for a single emotional state label.

    Args:
        score: current LifeScore (1-10 sub-scores).
        metrics: latest daily check-in (1-5 mood/stress/energy).

    Returns:
        Formatted markdown for Claude.
    """
    lines = [f"## Check-in for {metrics.record_date.isoformat()}\n"]

    lines.append("| LifeScore | Value (1-10) |")
    lines.append("|-----------|--------------|")
    lines.append(f"| Stress | {score.stress:.1f} |")
    lines.append(f"| Energy | {score.energy:.1f} |")
    lines.append(f"| Sleep | {score.sleep:.1f} |")
    lines.append(f"| Overall | {score.overall:.1f} |")
    lines.append("")

    lines.append(
        f"Sleep: {_fmt(metrics.sleep_hours, 'h')} | Steps: {_fmt(metrics.steps)} "
        f"| Mood: {_fmt(metrics.mood)}/5 | Stress: {_fmt(metrics.stress)}/5 "
        f"| Energy: {_fmt(metrics.energy)}/5"
    )
    if metrics.heart_rate:
        lines.append(f"Resting HR: {metrics.heart_rate} bpm")
    lines.append("")

    lines.append(
        "_Classify the person's current emotional state. "
        f"Answer with exactly one word from: {', '.join(EMOTIONAL_STATES)}._"
    )
    return "\n".join(lines)


def build_emotion_system_prompt() -> str:
    """System prompt constraining Claude to a bare state label."""
    return (
        "You are a wellness analyst. You read daily check-in data and classify "
        "the person's emotional state. Reply with a single lowercase word and "
        "nothing else."
    )
