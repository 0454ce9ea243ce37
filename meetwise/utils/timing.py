from __future__ import annotations

import logging
from time import perf_counter


def format_duration(seconds: float) -> str:
    """Compact duration text: ``850ms``, ``12.4s``, ``3m05s``, ``1h02m``."""
    if seconds < 1:
        return f"{int(seconds * 1000)}ms"
    if seconds < 60:
        return f"{seconds:.1f}s"
    minutes, secs = divmod(int(seconds), 60)
    if minutes < 60:
        return f"{minutes}m{secs:02d}s"
    hours, minutes = divmod(minutes, 60)
    return f"{hours}h{minutes:02d}m"


class Timer:
    """Context manager measuring wall time of a block.

    With a logger attached, the elapsed time is logged at DEBUG on exit.
    """

    def __init__(self, label: str = "", logger: logging.Logger | None = None) -> None:
        self.label = label
        self.logger = logger
        self.started_at: float | None = None
        self.elapsed = 0.0

    @property
    def running(self) -> bool:
        return self.started_at is not None

    def __enter__(self) -> "Timer":
        self.started_at = perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self.started_at is not None:
            self.elapsed = perf_counter() - self.started_at
        self.started_at = None
        if self.logger is not None:
            status = "failed" if exc_type else "done"
            self.logger.debug("%s %s in %s", self.label or "block", status, format_duration(self.elapsed))
