"""
Seed synthetic check-ins, LifeScores and advice responses for local runs.

    python scripts/seed_demo.py --owner demo --days 30

Rows are upserted per owner and day, so re-running the script overwrites the
same days instead of duplicating them. Advice session ids are derived from
the owner and date, so their responses are only recorded once.
"""
import argparse
import logging
import random
import sys
from datetime import datetime, timedelta
from pathlib import Path

# Allow running from repo root without installing the package
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(name)s %(levelname)s %(message)s",
)
logger = logging.getLogger(__name__)

ACTION_WEIGHTS = {"completed": 0.6, "dismissed": 0.25, "snoozed": 0.15}


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def seed(owner_id: str, days: int, seed_value: int) -> None:
    from wellness.config import get_settings
    from wellness.db.engine import get_engine
    from wellness.services.wellness_service import WellnessService

    rng = random.Random(seed_value)
    service = WellnessService(get_engine(), settings=get_settings())
    store = service.store
    today = datetime.utcnow().replace(second=0, microsecond=0)

    for offset in range(days - 1, -1, -1):
        day = today - timedelta(days=offset)
        stress = rng.randint(1, 5)
        energy = rng.randint(1, 5)
        bedtime = rng.choice(["22:30", "23:00", "23:15", "23:45", "00:10"])
        store.upsert_daily_metric(
            owner_id,
            day.date(),
            sleep_hours=round(rng.uniform(5.0, 9.0), 1),
            steps=rng.randint(1500, 12000),
            mood=rng.randint(1, 5),
            stress=stress,
            energy=energy,
            heart_rate=float(rng.randint(52, 75)),
            sleep_time=bedtime,
            wake_time=rng.choice(["06:45", "07:00", "07:20", "07:40"]),
            source="demo",
            created_at=day.replace(hour=rng.choice([8, 11, 14, 17, 20])),
        )
        store.upsert_life_score(
            owner_id,
            day.date(),
            stress=_clamp(stress * 2 + rng.uniform(-1, 1), 1, 10),
            energy=_clamp(energy * 2 + rng.uniform(-1, 1), 1, 10),
            sleep=_clamp(rng.uniform(4, 9), 1, 10),
            overall=_clamp(rng.uniform(4, 9), 1, 10),
        )

        action = rng.choices(list(ACTION_WEIGHTS), weights=list(ACTION_WEIGHTS.values()))[0]
        service.record_advice_response(
            owner_id,
            f"{owner_id}-{day.date().isoformat()}",
            action,
            rating=rng.randint(3, 5) if action == "completed" else None,
            responded_at=day.replace(hour=rng.choice([9, 13, 16, 20])),
            now=day,
        )

    logger.info("Seeded %d days for %s", days, owner_id)


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed synthetic wellness data")
    parser.add_argument("--owner", default="demo", help="Owner id to seed (default: demo)")
    parser.add_argument("--days", type=int, default=30, help="Days of history (default: 30)")
    parser.add_argument("--seed", type=int, default=7, help="Random seed (default: 7)")
    args = parser.parse_args()
    if args.days < 1:
        parser.error("--days must be at least 1")
    seed(args.owner, args.days, args.seed)


if __name__ == "__main__":
    main()
