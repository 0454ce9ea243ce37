from __future__ import annotations

from datetime import datetime, timezone

from meetwise.config import settings
from meetwise.core.env import load_env
from meetwise.db.migrations.sqlite import ensure_sqlite_schema
from meetwise.db.session import make_engine
from meetwise.logging import configure_logging


def main() -> None:
    load_env()
    configure_logging()
    engine = make_engine(settings.DATABASE_URL, create_schema=False)
    ensure_sqlite_schema(engine)
    print(f"Migration completed at {datetime.now(tz=timezone.utc).isoformat()}")


if __name__ == "__main__":
    main()
