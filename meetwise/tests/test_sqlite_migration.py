import sqlite3
from pathlib import Path

from sqlalchemy import create_engine

from meetwise.db.migrations.sqlite import ensure_sqlite_schema


def test_sqlite_migration_adds_columns(tmp_path: Path) -> None:
    db_path = tmp_path / "test.db"
    conn = sqlite3.connect(db_path)
    conn.execute(
        "CREATE TABLE events (id TEXT PRIMARY KEY, calendar_id TEXT, title TEXT, "
        "start_time DATETIME, end_time DATETIME, last_modified DATETIME)"
    )
    conn.execute("CREATE TABLE calendars (id TEXT PRIMARY KEY, name TEXT)")
    conn.commit()
    conn.close()

    engine = create_engine(f"sqlite:///{db_path}", future=True)
    ensure_sqlite_schema(engine)
    ensure_sqlite_schema(engine)

    conn = sqlite3.connect(db_path)
    event_cols = [row[1] for row in conn.execute("PRAGMA table_info(events)").fetchall()]
    calendar_cols = [row[1] for row in conn.execute("PRAGMA table_info(calendars)").fetchall()]
    tables = {row[0] for row in conn.execute("SELECT name FROM sqlite_master WHERE type='table'").fetchall()}
    conn.close()

    assert "recurrence_json" in event_cols
    assert "metadata_json" in event_cols
    assert "organizer" in event_cols
    assert "account_name" in calendar_cols
    assert {"attendees", "reminders", "attachments", "calendar_syncs"} <= tables


def test_sqlite_migration_on_empty_database(tmp_path: Path) -> None:
    engine = create_engine(f"sqlite:///{tmp_path / 'fresh.db'}", future=True)

    ensure_sqlite_schema(engine)

    conn = sqlite3.connect(tmp_path / "fresh.db")
    event_cols = [row[1] for row in conn.execute("PRAGMA table_info(events)").fetchall()]
    conn.close()
    assert "metadata_json" in event_cols
