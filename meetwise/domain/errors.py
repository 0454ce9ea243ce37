from __future__ import annotations

from typing import Any


class MeetwiseError(Exception):
    pass


class ValidationError(MeetwiseError, ValueError):
    """Malformed input, rejected before anything is persisted."""


class RemoteUnavailableError(MeetwiseError):
    def __init__(self, message: str, provider: str | None = None) -> None:
        super().__init__(message)
        self.provider = provider


class PartialBatchFailure(MeetwiseError):
    def __init__(self, index: int, error: Exception, completed: list[Any]) -> None:
        super().__init__(f"Batch item {index} failed: {error}")
        self.index = index
        self.error = error
        self.completed = completed
