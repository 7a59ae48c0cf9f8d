"""
WellnessService: per-owner orchestration: read from the store, run an
analyzer, persist the derived record.

Flow for an advice response:
  1. Validate the action (completed | dismissed | snoozed)
  2. Record it on the session (first response wins)
  3. completed → recompute the daily_completions streak, check milestones
     dismissed → re-assess the dismissal rate and burnout risk
  4. Return an AdviceOutcome describing what happened

Failure policy:
  - Derived-record writes (streaks, profiles, analyses, flags) that fail are
    logged with the owner id and swallowed; the computed result is returned.
  - Reads feeding the LifeScore, the circadian profile and the emotional
    state fall back to the defaults in wellness.defaults when the store is
    unavailable. strict=True lets DataUnavailable propagate instead, so a
    caller can tell an outage from an owner with no history.
  - Other read failures surface as DataUnavailable for the caller to map.
"""
import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import List, Optional

from wellness.analysis.circadian import build_circadian_profile, is_stale
from wellness.analysis.completions import CompletionStats, aggregate_completions
from wellness.analysis.dismissal import (
    HIGH_DISMISSAL_RATE,
    BurnoutRisk,
    DismissalAssessment,
    assess_burnout_risk,
    assess_dismissals,
)
from wellness.analysis.emotion import (
    Classifier,
    EmotionalStateResult,
    analyze_emotional_state,
    classify_by_rules,
)
from wellness.analysis.insights import Celebration, check_celebration
from wellness.analysis.samples import (
    ADVICE_ACTIONS,
    CircadianProfile,
    LifeScoreSample,
    MetricSample,
)
from wellness.analysis.streaks import DAILY_COMPLETIONS, StreakSummary, compute_streaks
from wellness.analysis.trend import SCORE_TREND_THRESHOLD, classify_trend, improvement_rate
from wellness.config import Settings, get_settings
from wellness.errors import DataUnavailable, PersistenceFailure, ValidationFailure
from wellness.models.derived import StreakRecord, WellnessFlag
from wellness.store.repository import WellnessStore

logger = logging.getLogger(__name__)

BURNOUT_HISTORY_DAYS = 30
LIFESCORE_HISTORY_DAYS = 30


@dataclass
class AdviceOutcome:
    session_id: str
    action: str
    recorded: bool  # False when the session already had a response
    streak: Optional[StreakSummary] = None
    celebration: Optional[Celebration] = None
    dismissal: Optional[DismissalAssessment] = None
    burnout: Optional[BurnoutRisk] = None


@dataclass
class LifeScoreTrends:
    history: List[LifeScoreSample] = field(default_factory=list)  # oldest first
    trend: str = "stable"
    improvement_rate: float = 0.0  # percent


class WellnessService:
    """Runs the wellness analyzers for one owner at a time."""

    def __init__(
        self,
        engine,
        settings: Optional[Settings] = None,
        classify: Optional[Classifier] = None,
    ):
        """
        Args:
            engine: SQLAlchemy engine (SQLModel create_engine result).
            settings: defaults to get_settings().
            classify: emotional state classifier; defaults to the rule engine.
        """
        self.store = WellnessStore(engine)
        self.settings = settings or get_settings()
        self.classify = classify or classify_by_rules

    # ─── Advice responses ─────────────────────────────────────────────────────

    def record_advice_response(
        self,
        owner_id: str,
        session_id: str,
        action: str,
        rating: Optional[int] = None,
        responded_at: Optional[datetime] = None,
        now: Optional[datetime] = None,
    ) -> AdviceOutcome:
        """
        Record the response to an advice session and update derived state.

        Raises:
            ValidationFailure: unknown action, rating outside 1-5, or the
                session belongs to another owner.
            PersistenceFailure: the response itself could not be stored.
        """
        if action not in ADVICE_ACTIONS:
            raise ValidationFailure(f"unknown action {action!r}")
        if rating is not None and not 1 <= rating <= 5:
            raise ValidationFailure(f"rating {rating} outside 1-5")

        now = now or datetime.utcnow()
        _, recorded = self.store.record_advice_response(
            owner_id,
            session_id,
            action=action,
            responded_at=responded_at or now,
            rating=rating,
        )
        outcome = AdviceOutcome(session_id=session_id, action=action, recorded=recorded)
        if not recorded:
            logger.info("Session %s already answered; ignoring %s", session_id, action)
            return outcome

        if action == "completed":
            outcome.streak = self.refresh_streak(owner_id, today=now.date())
            try:
                total = len(self.store.completion_timestamps(owner_id))
            except DataUnavailable as exc:
                logger.warning("Completion count unavailable for %s: %s", owner_id, exc)
            else:
                outcome.celebration = check_celebration(total, outcome.streak.current_count)
        elif action == "dismissed":
            try:
                outcome.dismissal = self.check_dismissals(owner_id, now=now)
                outcome.burnout = self.burnout_risk(owner_id, now=now)
            except DataUnavailable as exc:
                logger.warning("Dismissal history unavailable for %s: %s", owner_id, exc)
        return outcome

    # ─── Streaks ──────────────────────────────────────────────────────────────

    def refresh_streak(self, owner_id: str, today: Optional[date] = None) -> StreakSummary:
        """
        Recompute the daily_completions streak from every completion date.

        Raises:
            DataUnavailable: completions could not be read.
        """
        today = today or datetime.utcnow().date()
        dates = {ts.date() for ts in self.store.completion_timestamps(owner_id)}
        summary = compute_streaks(dates, today, DAILY_COMPLETIONS)
        try:
            record = self.store.upsert_streak(
                owner_id,
                summary.streak_type,
                current_count=summary.current_count,
                best_count=summary.best_count,
                last_activity_date=summary.last_activity_date,
            )
        except PersistenceFailure as exc:
            logger.warning("Streak write failed for %s: %s", owner_id, exc)
            return summary
        if record is not None:
            summary.best_count = record.best_count
        return summary

    def streaks(self, owner_id: str, active_only: bool = False) -> List[StreakRecord]:
        return self.store.get_streaks(owner_id, active_only=active_only)

    def active_streaks(self, owner_id: str, today: Optional[date] = None) -> List[StreakRecord]:
        """
        Streaks still running on `today`.

        Stored counts only change when a completion arrives, so the
        daily_completions count is recomputed for `today` first; a run
        with no completion today drops out.
        """
        today = today or datetime.utcnow().date()
        records = self.streaks(owner_id)
        for record in records:
            if record.streak_type == DAILY_COMPLETIONS:
                record.current_count = self.refresh_streak(owner_id, today=today).current_count
        return [r for r in records if r.current_count > 0]

    # ─── Completions ──────────────────────────────────────────────────────────

    def completion_stats(self, owner_id: str, today: Optional[date] = None) -> CompletionStats:
        today = today or datetime.utcnow().date()
        long_days = self.settings.completion_long_window_days
        since = datetime.combine(today - timedelta(days=long_days - 1), datetime.min.time())
        completions = self.store.completion_timestamps(owner_id, since=since)
        sessions = self.store.sessions_since(owner_id, since)
        return aggregate_completions(
            completions,
            today,
            long_window_days=long_days,
            short_window_days=self.settings.completion_short_window_days,
            session_actions=[s.action for s in sessions],
        )

    # ─── LifeScore ────────────────────────────────────────────────────────────

    def current_life_score(
        self, owner_id: str, strict: bool = False
    ) -> Optional[LifeScoreSample]:
        """Latest LifeScore, or None when there is none or it cannot be read."""
        try:
            return self.store.latest_life_score(owner_id)
        except DataUnavailable as exc:
            if strict:
                raise
            logger.warning("LifeScore unavailable for %s: %s", owner_id, exc)
            return None

    def lifescore_trends(self, owner_id: str, today: Optional[date] = None) -> LifeScoreTrends:
        today = today or datetime.utcnow().date()
        history = self.store.life_scores_between(
            owner_id, today - timedelta(days=LIFESCORE_HISTORY_DAYS - 1), today
        )
        overall = [s.overall for s in history]
        return LifeScoreTrends(
            history=history,
            trend=classify_trend(overall, SCORE_TREND_THRESHOLD),
            improvement_rate=improvement_rate(overall),
        )

    # ─── Circadian profile ────────────────────────────────────────────────────

    def get_circadian_profile(
        self,
        owner_id: str,
        force: bool = False,
        now: Optional[datetime] = None,
        strict: bool = False,
    ) -> CircadianProfile:
        """
        Stored profile while fresh; otherwise regenerate from history.

        force=True backdates the stored profile so the regular staleness
        check regenerates it. A default profile (too little history) is
        returned but never stored.
        """
        now = now or datetime.utcnow()
        if force:
            try:
                self.store.mark_circadian_profile_stale(owner_id, now)
            except PersistenceFailure as exc:
                logger.warning("Could not mark profile stale for %s: %s", owner_id, exc)

        try:
            existing = self.store.get_circadian_profile(owner_id)
        except DataUnavailable as exc:
            if strict:
                raise
            logger.warning("Stored profile unavailable for %s: %s", owner_id, exc)
            existing = None
        if not force and not is_stale(existing, now, self.settings.circadian_max_age_days):
            return existing

        samples = self._metrics_or_empty(
            owner_id,
            now.date() - timedelta(days=self.settings.circadian_history_days),
            now.date(),
            strict=strict,
        )
        profile = build_circadian_profile(samples, now, min_days=self.settings.circadian_min_days)
        if profile.is_default:
            return profile

        try:
            self.store.upsert_circadian_profile(owner_id, profile)
            logger.info(
                "Circadian profile regenerated for %s: %s (confidence %.2f)",
                owner_id, profile.chronotype, profile.confidence_score,
            )
        except PersistenceFailure as exc:
            logger.warning("Profile write failed for %s: %s", owner_id, exc)
        return profile

    # ─── Emotional state ──────────────────────────────────────────────────────

    def analyze_emotional_state(
        self, owner_id: str, now: Optional[datetime] = None, strict: bool = False
    ) -> EmotionalStateResult:
        """Classify the current state and append it to the analysis log."""
        now = now or datetime.utcnow()
        try:
            recent = self.store.recent_metrics(owner_id, self.settings.emotion_history_days)
        except DataUnavailable as exc:
            if strict:
                raise
            logger.warning("Metrics unavailable for %s, using defaults: %s", owner_id, exc)
            recent = []
        life_score = self.current_life_score(owner_id, strict=strict)

        result = analyze_emotional_state(recent, life_score, now, classify=self.classify)
        try:
            self.store.append_emotional_analysis(
                owner_id,
                emotional_state=result.current_state,
                confidence_score=result.confidence,
                contributing_factors=result.factors,
                trend=result.trend,
                recommendations=result.recommendations,
                analyzed_at=now,
            )
        except PersistenceFailure as exc:
            logger.warning("Emotional analysis write failed for %s: %s", owner_id, exc)
        return result

    # ─── Dismissals ───────────────────────────────────────────────────────────

    def check_dismissals(
        self, owner_id: str, now: Optional[datetime] = None
    ) -> DismissalAssessment:
        """
        Assess the rolling dismissal rate and sync the high_dismissal_rate flag.

        Above threshold the flag is upserted with the current rate. At or
        below threshold, with at least one session in the window, an existing
        flag is cleared. An empty window leaves the flag as it is.
        """
        now = now or datetime.utcnow()
        window = self.settings.dismissal_window_days
        sessions = self.store.sessions_since(owner_id, now - timedelta(days=window))
        assessment = assess_dismissals(
            sessions,
            now,
            window_days=window,
            rate_threshold=self.settings.dismissal_rate_threshold,
            min_dismissals=self.settings.dismissal_min_count,
        )
        try:
            if assessment.flag_raised:
                self.store.upsert_wellness_flag(
                    owner_id,
                    HIGH_DISMISSAL_RATE,
                    flag_value=assessment.dismissal_rate,
                    metadata=assessment.flag_metadata,
                    now=now,
                )
                logger.info(
                    "High dismissal rate for %s: %.2f (%d/%d)",
                    owner_id, assessment.dismissal_rate,
                    assessment.dismissed_count, assessment.total_sessions,
                )
            elif assessment.total_sessions:
                if self.store.clear_wellness_flag(owner_id, HIGH_DISMISSAL_RATE):
                    logger.info("Cleared high dismissal rate flag for %s", owner_id)
        except PersistenceFailure as exc:
            logger.warning("Dismissal flag write failed for %s: %s", owner_id, exc)
        return assessment

    def burnout_risk(self, owner_id: str, now: Optional[datetime] = None) -> BurnoutRisk:
        now = now or datetime.utcnow()
        sessions = self.store.sessions_since(
            owner_id, now - timedelta(days=BURNOUT_HISTORY_DAYS)
        )
        return assess_burnout_risk(sessions)

    def flags(self, owner_id: str) -> List[WellnessFlag]:
        return self.store.get_wellness_flags(owner_id)

    # ─── Internal helpers ─────────────────────────────────────────────────────

    def _metrics_or_empty(
        self, owner_id: str, start: date, end: date, strict: bool = False
    ) -> List[MetricSample]:
        try:
            return self.store.metrics_between(owner_id, start, end)
        except DataUnavailable as exc:
            if strict:
                raise
            logger.warning("Metrics unavailable for %s, using defaults: %s", owner_id, exc)
            return []
