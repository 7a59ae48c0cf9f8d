"""
Database migrations for the wellness store.

Uses ALTER TABLE ADD COLUMN for incremental schema evolution of databases
created before a column existed. Each migration is idempotent: columns are
only added if absent.

Called automatically from get_engine() after create_all() so both fresh
installs and existing DBs are handled without manual steps.
"""
from sqlalchemy import inspect, text


def run_migrations(engine) -> None:
    """Apply all pending schema migrations.

    Safe to call multiple times; checks column existence before altering.

    Args:
        engine: SQLAlchemy engine (SQLModel create_engine result).
    """
    with engine.connect() as conn:
        # DailyMetric: bed/wake clock times used for chronotype inference
        _add_column_if_missing(conn, "dailymetric", "sleep_time", "VARCHAR")
        _add_column_if_missing(conn, "dailymetric", "wake_time", "VARCHAR")

        # DailyMetric: provenance tag for imported rows
        _add_column_if_missing(conn, "dailymetric", "source", "VARCHAR DEFAULT 'manual'")

        # AdviceSession: optional 1-5 rating given with the response
        _add_column_if_missing(conn, "advicesession", "rating", "INTEGER")

        conn.commit()


def _add_column_if_missing(conn, table: str, column: str, col_type: str) -> None:
    """Add a column to a table if it doesn't already exist.

    Args:
        conn: SQLAlchemy connection.
        table: Table name (lowercase, as SQLModel names it).
        column: Column name to add.
        col_type: SQL type string, e.g. "INTEGER", "REAL", "VARCHAR".
    """
    existing_columns = {col["name"] for col in inspect(conn).get_columns(table)}
    if column not in existing_columns:
        conn.execute(text(f"ALTER TABLE {table} ADD COLUMN {column} {col_type}"))
