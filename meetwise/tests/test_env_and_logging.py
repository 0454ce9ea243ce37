import logging
import os

import pytest

from meetwise.config import Settings
from meetwise.core.emails import is_valid_email, normalize_email
from meetwise.core.env import env_flag, get_required_env, is_remote_sync_enabled, load_env
from meetwise.logging import configure_logging


def test_load_env_does_not_fail_when_missing(tmp_path) -> None:
    assert load_env(tmp_path / "missing.env") is False


def test_load_env_keeps_real_environment(tmp_path, monkeypatch) -> None:
    env_file = tmp_path / ".env"
    env_file.write_text("MEETWISE_TEST_A=from-file\nMEETWISE_TEST_B=from-file\n")
    monkeypatch.setenv("MEETWISE_TEST_A", "from-env")
    monkeypatch.delenv("MEETWISE_TEST_B", raising=False)

    load_env(env_file)

    assert os.environ["MEETWISE_TEST_A"] == "from-env"
    assert os.environ["MEETWISE_TEST_B"] == "from-file"
    monkeypatch.delenv("MEETWISE_TEST_B")


def test_get_required_env(monkeypatch) -> None:
    monkeypatch.setenv("MEETWISE_TEST_VALUE", "x")
    assert get_required_env("MEETWISE_TEST_VALUE") == "x"

    monkeypatch.delenv("MEETWISE_TEST_VALUE")
    with pytest.raises(ValueError):
        get_required_env("MEETWISE_TEST_VALUE")


def test_remote_sync_toggle(monkeypatch) -> None:
    monkeypatch.delenv("MEETWISE_REMOTE_SYNC", raising=False)
    assert is_remote_sync_enabled() is True

    monkeypatch.setenv("MEETWISE_REMOTE_SYNC", "off")
    assert is_remote_sync_enabled() is False


def test_env_flag_default_for_blank(monkeypatch) -> None:
    monkeypatch.setenv("MEETWISE_TEST_FLAG", "  ")
    assert env_flag("MEETWISE_TEST_FLAG", default=True) is True
    monkeypatch.setenv("MEETWISE_TEST_FLAG", "On")
    assert env_flag("MEETWISE_TEST_FLAG") is True


def test_configure_logging_quiets_client_libraries(monkeypatch) -> None:
    monkeypatch.setenv("LOG_LEVEL", "debug")
    monkeypatch.delenv("LOG_SQL", raising=False)

    assert configure_logging() == logging.DEBUG
    assert logging.getLogger("meetwise").level == logging.DEBUG
    assert logging.getLogger("googleapiclient").level == logging.WARNING
    assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING


def test_configure_logging_sql_and_unknown_level(monkeypatch) -> None:
    monkeypatch.setenv("LOG_SQL", "1")

    assert configure_logging("chatty") == logging.INFO
    assert logging.getLogger("sqlalchemy.engine").level == logging.INFO
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


def test_settings_expose_scoring_weights(monkeypatch) -> None:
    monkeypatch.setenv("SCORE_BASE", "25")
    monkeypatch.setenv("SCORE_CONFLICT_PENALTY", "0.5")

    weights = Settings().scoring_weights()

    assert weights.base == 25.0
    assert weights.conflict_penalty == 0.5
    assert weights.availability == 40.0


def test_email_helpers() -> None:
    assert normalize_email("  Alice@Example.COM ") == "alice@example.com"
    assert is_valid_email("a@x.com")
    assert not is_valid_email("a@x")
    assert not is_valid_email("   ")
