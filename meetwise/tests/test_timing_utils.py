import logging

import pytest

from meetwise.utils.timing import Timer, format_duration


def test_format_duration_formats_components() -> None:
    assert format_duration(0.25) == "250ms"
    assert format_duration(5) == "5.0s"
    assert format_duration(61) == "1m01s"
    assert format_duration(3723) == "1h02m"


def test_timer_measures_elapsed(monkeypatch) -> None:
    now = [0.0]
    monkeypatch.setattr("meetwise.utils.timing.perf_counter", lambda: now[0])

    with Timer() as t:
        assert t.running
        now[0] = 5.0

    assert t.elapsed == 5.0
    assert not t.running


def test_timer_logs_label_and_failure(monkeypatch, caplog) -> None:
    now = [0.0]
    monkeypatch.setattr("meetwise.utils.timing.perf_counter", lambda: now[0])
    logger = logging.getLogger("meetwise.tests.timing")

    with caplog.at_level(logging.DEBUG, logger="meetwise.tests.timing"):
        with pytest.raises(RuntimeError):
            with Timer("fan-out", logger):
                now[0] = 2.0
                raise RuntimeError("boom")

    assert "fan-out failed in 2.0s" in caplog.text
