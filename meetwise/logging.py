import logging
import os

from meetwise.core.env import env_flag

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
QUIET_LOGGERS = ("urllib3", "googleapiclient", "google.auth", "google_auth_httplib2")


def configure_logging(level: str | None = None) -> int:
    """Set up root logging once for a script run and return the level used.

    ``LOG_SQL=1`` lets SQLAlchemy statement logging through at INFO.
    """
    chosen = (level or os.getenv("LOG_LEVEL") or "INFO").upper()
    numeric = logging.getLevelName(chosen)
    if not isinstance(numeric, int):
        numeric = logging.INFO
    logging.basicConfig(level=numeric, format=LOG_FORMAT)
    logging.getLogger("meetwise").setLevel(numeric)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    sql_level = logging.INFO if env_flag("LOG_SQL") else logging.WARNING
    logging.getLogger("sqlalchemy.engine").setLevel(sql_level)
    return numeric
