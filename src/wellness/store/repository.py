"""
WellnessStore: owner-scoped reads and idempotent writes over the SQLModel tables.

This is the only module that talks to the database. Every read returns the
validated dataclasses from wellness.analysis.samples (rows that fail
validation are dropped here), so analyzers never see raw rows.

Writes that must be serialized per key use the dialect's native
INSERT .. ON CONFLICT DO UPDATE keyed by the table's unique constraint:

  DailyMetric             (owner_id, record_date)
  LifeScore               (owner_id, record_date)
  StreakRecord            (owner_id, streak_type)
  CircadianProfileRecord  (owner_id)
  WellnessFlag            (owner_id, flag_type)

Failures surface as DataUnavailable (reads) or PersistenceFailure (writes);
the service layer decides how to degrade. No retries happen here.
"""
from dataclasses import asdict
from datetime import date, datetime, timedelta
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from wellness.analysis.samples import (
    AdviceResponse,
    CircadianProfile,
    InterventionWindow,
    LifeScoreSample,
    MetricSample,
    life_scores_to_samples,
    metrics_to_samples,
    sessions_to_responses,
)
from wellness.errors import DataUnavailable, PersistenceFailure, ValidationFailure
from wellness.models.advice import AdviceSession
from wellness.models.derived import (
    CircadianProfileRecord,
    EmotionalAnalysis,
    StreakRecord,
    WellnessFlag,
)
from wellness.models.metrics import DailyMetric, LifeScore


class WellnessStore:
    """Repository over the wellness tables for a single engine."""

    def __init__(self, engine):
        """
        Args:
            engine: SQLAlchemy engine (SQLModel create_engine result).
        """
        self.engine = engine

    # ─── Daily metrics ────────────────────────────────────────────────────────

    def recent_metrics(self, owner_id: str, limit: int) -> List[MetricSample]:
        """Most recent `limit` metric days, newest first."""
        rows = self._read(
            select(DailyMetric)
            .where(DailyMetric.owner_id == owner_id)
            .order_by(DailyMetric.record_date.desc())
            .limit(limit)
        )
        return metrics_to_samples(rows)

    def metrics_between(self, owner_id: str, start: date, end: date) -> List[MetricSample]:
        """Metric days with start <= record_date <= end, oldest first."""
        rows = self._read(
            select(DailyMetric)
            .where(DailyMetric.owner_id == owner_id)
            .where(DailyMetric.record_date >= start)
            .where(DailyMetric.record_date <= end)
            .order_by(DailyMetric.record_date)
        )
        return metrics_to_samples(rows)

    def upsert_daily_metric(
        self, owner_id: str, record_date: date, **fields: Any
    ) -> DailyMetric:
        """
        Insert or update the metric row for (owner_id, record_date).

        `created_at` may be passed to backdate the check-in time, whose hour
        feeds the circadian rhythm.
        """
        now = datetime.utcnow()
        values = {"owner_id": owner_id, "record_date": record_date, **fields}
        self._upsert(
            DailyMetric,
            values={"created_at": now, "updated_at": now, **values},
            conflict=("owner_id", "record_date"),
            update_values={**fields, "updated_at": now},
        )
        return self._read_one(
            select(DailyMetric)
            .where(DailyMetric.owner_id == owner_id)
            .where(DailyMetric.record_date == record_date)
        )

    # ─── LifeScores ───────────────────────────────────────────────────────────

    def latest_life_score(self, owner_id: str) -> Optional[LifeScoreSample]:
        """Newest valid LifeScore, or None when the owner has none."""
        rows = self._read(
            select(LifeScore)
            .where(LifeScore.owner_id == owner_id)
            .order_by(LifeScore.record_date.desc())
            .limit(5)
        )
        samples = life_scores_to_samples(rows)
        return samples[0] if samples else None

    def life_scores_between(
        self, owner_id: str, start: date, end: date
    ) -> List[LifeScoreSample]:
        rows = self._read(
            select(LifeScore)
            .where(LifeScore.owner_id == owner_id)
            .where(LifeScore.record_date >= start)
            .where(LifeScore.record_date <= end)
            .order_by(LifeScore.record_date)
        )
        return life_scores_to_samples(rows)

    def upsert_life_score(
        self,
        owner_id: str,
        record_date: date,
        *,
        stress: float,
        energy: float,
        sleep: float,
        overall: float,
    ) -> LifeScore:
        now = datetime.utcnow()
        scores = {
            "stress_score": stress,
            "energy_score": energy,
            "sleep_score": sleep,
            "overall_score": overall,
        }
        self._upsert(
            LifeScore,
            values={
                "owner_id": owner_id,
                "record_date": record_date,
                **scores,
                "created_at": now,
                "updated_at": now,
            },
            conflict=("owner_id", "record_date"),
            update_values={**scores, "updated_at": now},
        )
        return self._read_one(
            select(LifeScore)
            .where(LifeScore.owner_id == owner_id)
            .where(LifeScore.record_date == record_date)
        )

    # ─── Advice sessions ──────────────────────────────────────────────────────

    def record_advice_response(
        self,
        owner_id: str,
        session_id: str,
        *,
        action: str,
        responded_at: datetime,
        rating: Optional[int] = None,
    ) -> Tuple[AdviceSession, bool]:
        """
        Attach a response to an advice session, creating the session if needed.

        The response is written once: the UPDATE only matches while
        action IS NULL, so concurrent or repeated submissions cannot
        overwrite the first one.

        Returns:
            (session row, True if this call recorded the response)

        Raises:
            ValidationFailure: the session id belongs to another owner.
            PersistenceFailure: the write failed.
        """
        completed_at = responded_at if action == "completed" else None
        try:
            with Session(self.engine) as s:
                s.execute(
                    self._insert(AdviceSession)
                    .values(
                        id=session_id,
                        owner_id=owner_id,
                        created_at=responded_at,
                        updated_at=responded_at,
                    )
                    .on_conflict_do_nothing(index_elements=["id"])
                )
                result = s.execute(
                    update(AdviceSession)
                    .where(AdviceSession.id == session_id)
                    .where(AdviceSession.owner_id == owner_id)
                    .where(AdviceSession.action.is_(None))
                    .values(
                        action=action,
                        responded_at=responded_at,
                        rating=rating,
                        completed_at=completed_at,
                        updated_at=datetime.utcnow(),
                    )
                )
                s.commit()
                recorded = result.rowcount == 1
                row = s.get(AdviceSession, session_id)
        except SQLAlchemyError as exc:
            raise PersistenceFailure(f"advice response for {session_id}: {exc}") from exc

        if row is None or row.owner_id != owner_id:
            raise ValidationFailure(f"advice session {session_id} not found for owner")
        return row, recorded

    def sessions_since(self, owner_id: str, since: datetime) -> List[AdviceResponse]:
        """Advice sessions created at or after `since`, oldest first."""
        rows = self._read(
            select(AdviceSession)
            .where(AdviceSession.owner_id == owner_id)
            .where(AdviceSession.created_at >= since)
            .order_by(AdviceSession.created_at)
        )
        return sessions_to_responses(rows)

    def completion_timestamps(
        self, owner_id: str, since: Optional[datetime] = None
    ) -> List[datetime]:
        """completed_at of every completed session (optionally since a cutoff)."""
        query = (
            select(AdviceSession)
            .where(AdviceSession.owner_id == owner_id)
            .where(AdviceSession.action == "completed")
            .where(AdviceSession.completed_at.is_not(None))
        )
        if since is not None:
            query = query.where(AdviceSession.completed_at >= since)
        responses = sessions_to_responses(self._read(query))
        return sorted(r.completed_at for r in responses if r.completed_at)

    # ─── Streaks ──────────────────────────────────────────────────────────────

    def upsert_streak(
        self,
        owner_id: str,
        streak_type: str,
        *,
        current_count: int,
        best_count: int,
        last_activity_date: Optional[date],
    ) -> StreakRecord:
        """
        Write the streak for (owner_id, streak_type).

        best_count never decreases: the stored value is the max of the
        existing and the incoming best.
        """
        now = datetime.utcnow()
        best = max(best_count, current_count)
        greatest = func.greatest if self._dialect() == "postgresql" else func.max
        insert_stmt = self._insert(StreakRecord).values(
            owner_id=owner_id,
            streak_type=streak_type,
            current_count=current_count,
            best_count=best,
            last_activity_date=last_activity_date,
            updated_at=now,
        )
        stmt = insert_stmt.on_conflict_do_update(
            index_elements=["owner_id", "streak_type"],
            set_={
                "current_count": current_count,
                "best_count": greatest(StreakRecord.best_count, best),
                "last_activity_date": last_activity_date,
                "updated_at": now,
            },
        )
        self._write(stmt)
        return self._read_one(
            select(StreakRecord)
            .where(StreakRecord.owner_id == owner_id)
            .where(StreakRecord.streak_type == streak_type)
        )

    def get_streaks(self, owner_id: str, active_only: bool = False) -> List[StreakRecord]:
        query = select(StreakRecord).where(StreakRecord.owner_id == owner_id)
        if active_only:
            query = query.where(StreakRecord.current_count > 0)
        return self._read(query.order_by(StreakRecord.streak_type))

    # ─── Circadian profile ────────────────────────────────────────────────────

    def get_circadian_profile(self, owner_id: str) -> Optional[CircadianProfile]:
        rows = self._read(
            select(CircadianProfileRecord).where(
                CircadianProfileRecord.owner_id == owner_id
            )
        )
        if not rows:
            return None
        record = rows[0]
        return CircadianProfile(
            chronotype=record.chronotype,
            natural_wake_time=record.natural_wake_time,
            natural_sleep_time=record.natural_sleep_time,
            peak_energy_hours=list(record.peak_energy_hours or []),
            low_energy_hours=list(record.low_energy_hours or []),
            stress_peak_hours=list(record.stress_peak_hours or []),
            optimal_intervention_windows=[
                InterventionWindow(**w) for w in (record.intervention_windows or [])
            ],
            confidence_score=record.confidence_score,
            last_updated=record.last_updated,
        )

    def upsert_circadian_profile(self, owner_id: str, profile: CircadianProfile) -> None:
        fields = {
            "chronotype": profile.chronotype,
            "natural_wake_time": profile.natural_wake_time,
            "natural_sleep_time": profile.natural_sleep_time,
            "peak_energy_hours": list(profile.peak_energy_hours),
            "low_energy_hours": list(profile.low_energy_hours),
            "stress_peak_hours": list(profile.stress_peak_hours),
            "intervention_windows": [
                asdict(w) for w in profile.optimal_intervention_windows
            ],
            "confidence_score": profile.confidence_score,
            "last_updated": profile.last_updated,
        }
        self._upsert(
            CircadianProfileRecord,
            values={"owner_id": owner_id, **fields},
            conflict=("owner_id",),
            update_values=fields,
        )

    def mark_circadian_profile_stale(
        self, owner_id: str, now: datetime, age_days: int = 8
    ) -> None:
        """Backdate last_updated so the next read regenerates the profile."""
        self._write(
            update(CircadianProfileRecord)
            .where(CircadianProfileRecord.owner_id == owner_id)
            .values(last_updated=now - timedelta(days=age_days))
        )

    # ─── Emotional analyses ───────────────────────────────────────────────────

    def append_emotional_analysis(
        self,
        owner_id: str,
        *,
        emotional_state: str,
        confidence_score: float,
        contributing_factors: List[str],
        trend: str,
        recommendations: Dict[str, List[str]],
        analyzed_at: datetime,
    ) -> None:
        row = EmotionalAnalysis(
            owner_id=owner_id,
            emotional_state=emotional_state,
            confidence_score=confidence_score,
            contributing_factors=list(contributing_factors),
            trend=trend,
            recommendations=dict(recommendations),
            analyzed_at=analyzed_at,
        )
        try:
            with Session(self.engine) as s:
                s.add(row)
                s.commit()
        except SQLAlchemyError as exc:
            raise PersistenceFailure(f"emotional analysis for {owner_id}: {exc}") from exc

    def emotional_history(self, owner_id: str, limit: int = 20) -> List[EmotionalAnalysis]:
        return self._read(
            select(EmotionalAnalysis)
            .where(EmotionalAnalysis.owner_id == owner_id)
            .order_by(EmotionalAnalysis.analyzed_at.desc())
            .limit(limit)
        )

    # ─── Wellness flags ───────────────────────────────────────────────────────

    def upsert_wellness_flag(
        self,
        owner_id: str,
        flag_type: str,
        *,
        flag_value: float,
        metadata: Dict[str, Any],
        now: datetime,
    ) -> None:
        self._upsert(
            WellnessFlag,
            values={
                "owner_id": owner_id,
                "flag_type": flag_type,
                "flag_value": flag_value,
                "flag_metadata": metadata,
                "created_at": now,
                "updated_at": now,
            },
            conflict=("owner_id", "flag_type"),
            update_values={
                "flag_value": flag_value,
                "flag_metadata": metadata,
                "updated_at": now,
            },
        )

    def clear_wellness_flag(self, owner_id: str, flag_type: str) -> bool:
        """Delete the flag if present. Returns True if a row was removed."""
        try:
            with Session(self.engine) as s:
                flag = s.exec(
                    select(WellnessFlag)
                    .where(WellnessFlag.owner_id == owner_id)
                    .where(WellnessFlag.flag_type == flag_type)
                ).first()
                if flag is None:
                    return False
                s.delete(flag)
                s.commit()
                return True
        except SQLAlchemyError as exc:
            raise PersistenceFailure(f"clearing {flag_type} for {owner_id}: {exc}") from exc

    def get_wellness_flags(self, owner_id: str) -> List[WellnessFlag]:
        return self._read(
            select(WellnessFlag)
            .where(WellnessFlag.owner_id == owner_id)
            .order_by(WellnessFlag.flag_type)
        )

    # ─── Internal helpers ─────────────────────────────────────────────────────

    def _dialect(self) -> str:
        return self.engine.dialect.name

    def _insert(self, model):
        if self._dialect() == "postgresql":
            return postgresql.insert(model)
        return sqlite.insert(model)

    def _upsert(
        self,
        model,
        *,
        values: Dict[str, Any],
        conflict: Tuple[str, ...],
        update_values: Dict[str, Any],
    ) -> None:
        stmt = (
            self._insert(model)
            .values(**values)
            .on_conflict_do_update(index_elements=list(conflict), set_=update_values)
        )
        self._write(stmt)

    def _write(self, stmt) -> None:
        try:
            with Session(self.engine) as s:
                s.execute(stmt)
                s.commit()
        except SQLAlchemyError as exc:
            raise PersistenceFailure(str(exc)) from exc

    def _read(self, query) -> list:
        try:
            with Session(self.engine) as s:
                return list(s.exec(query).all())
        except SQLAlchemyError as exc:
            raise DataUnavailable(str(exc)) from exc

    def _read_one(self, query):
        rows = self._read(query)
        return rows[0] if rows else None
