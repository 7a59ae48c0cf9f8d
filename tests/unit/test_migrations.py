"""Tests for database migration helpers."""
from datetime import date

import pytest
from sqlalchemy import inspect, text
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine, select

from wellness.db.migrations import run_migrations
from wellness.models.metrics import DailyMetric


@pytest.fixture(name="migration_engine")
def migration_engine_fixture():
    """In-memory SQLite engine with full schema, for testing migrations."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture(name="legacy_engine")
def legacy_engine_fixture():
    """Tables as they looked before sleep/wake times, source and ratings existed."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    with engine.connect() as conn:
        conn.execute(text(
            "CREATE TABLE dailymetric (id INTEGER PRIMARY KEY, owner_id VARCHAR, record_date DATE)"
        ))
        conn.execute(text(
            "CREATE TABLE advicesession (id VARCHAR PRIMARY KEY, owner_id VARCHAR, created_at DATETIME)"
        ))
        conn.commit()
    yield engine
    engine.dispose()


def columns(engine, table):
    return {col["name"] for col in inspect(engine).get_columns(table)}


class TestRunMigrations:
    def test_run_migrations_does_not_raise(self, migration_engine):
        """Migration should complete without errors on a fresh DB."""
        run_migrations(migration_engine)

    def test_run_migrations_is_idempotent(self, migration_engine):
        """Running migrations twice must not raise (columns already exist)."""
        run_migrations(migration_engine)
        run_migrations(migration_engine)  # second call must be safe

    def test_adds_missing_columns_to_legacy_tables(self, legacy_engine):
        run_migrations(legacy_engine)
        assert {"sleep_time", "wake_time", "source"} <= columns(legacy_engine, "dailymetric")
        assert "rating" in columns(legacy_engine, "advicesession")

    def test_sleep_time_queryable_after_migration(self, migration_engine):
        run_migrations(migration_engine)
        with Session(migration_engine) as s:
            s.add(DailyMetric(
                owner_id="o", record_date=date(2025, 3, 14), sleep_time="23:30", wake_time="07:15",
            ))
            s.commit()
            row = s.exec(select(DailyMetric)).first()
            assert row.sleep_time == "23:30"
            assert row.source == "manual"
