from __future__ import annotations

import logging

from sqlalchemy import text
from sqlalchemy.engine import Engine

from meetwise.db.base import Base
from meetwise.db import models  # noqa: F401

logger = logging.getLogger(__name__)

# columns added after the first released schema: table -> (column, DDL type)
_ADDED_COLUMNS: dict[str, list[tuple[str, str]]] = {
    "events": [
        ("recurrence_json", "TEXT"),
        ("metadata_json", "TEXT"),
        ("organizer", "VARCHAR(255)"),
        ("color", "VARCHAR(20)"),
    ],
    "attendees": [("comment", "TEXT")],
    "calendars": [("metadata_json", "TEXT"), ("account_name", "VARCHAR(255)")],
    "calendar_syncs": [("remote_event_id", "VARCHAR(1024)")],
}


def _get_columns(conn, table: str) -> set[str]:
    rows = conn.execute(text(f"PRAGMA table_info({table})")).fetchall()
    return {row[1] for row in rows}


def ensure_sqlite_schema(engine: Engine) -> None:
    with engine.begin() as conn:
        for table, columns in _ADDED_COLUMNS.items():
            existing = _get_columns(conn, table)
            if not existing:
                continue
            for column, ddl_type in columns:
                if column not in existing:
                    logger.info("Adding column %s.%s", table, column)
                    conn.execute(text(f"ALTER TABLE {table} ADD COLUMN {column} {ddl_type}"))

    Base.metadata.create_all(engine)
