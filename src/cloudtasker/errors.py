"""Error taxonomy for worker encoding, decoding and execution."""

from __future__ import annotations

from enum import Enum


class FailureKind(str, Enum):
    """Normalized failure kinds surfaced to transports."""

    RETRYABLE = "retryable"
    TERMINAL = "terminal"


class CloudtaskerError(Exception):
    """Base class for all runtime errors raised by this package."""


class DeadWorkerError(CloudtaskerError):
    """Raised when a worker fails after exhausting its retry budget."""

    kind = FailureKind.TERMINAL

    def __init__(self, original: BaseException) -> None:
        super().__init__(f"{type(original).__name__}: {original}")
        self.original = original


class InvalidWorkerError(CloudtaskerError):
    """Raised when a delivered payload does not resolve to a worker."""


class JobEncodeError(CloudtaskerError, TypeError):
    """Raised when a worker descriptor cannot be represented as JSON."""


class MissingDispatcherError(CloudtaskerError):
    """Raised when scheduling is attempted without a configured dispatcher."""


def failure_kind(error: BaseException) -> FailureKind:
    """Classify an exception raised by ``Worker.execute``."""

    if isinstance(error, DeadWorkerError):
        return FailureKind.TERMINAL
    return FailureKind.RETRYABLE
