import os
from pathlib import Path

from dotenv import load_dotenv

_TRUTHY = {"true", "1", "yes", "on"}


def load_env(path: str | Path | None = None) -> bool:
    # real environment variables win over the .env file
    return load_dotenv(dotenv_path=path, override=False)


def get_required_env(name: str) -> str:
    value = os.getenv(name, "").strip()
    if not value:
        raise ValueError(f"Missing required environment variable: {name}")
    return value


def env_flag(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return value.strip().lower() in _TRUTHY


def is_remote_sync_enabled() -> bool:
    return env_flag("MEETWISE_REMOTE_SYNC", default=True)
