"""
Exception hierarchy for uci-bridge.

Every error raised by the session machinery derives from UciBridgeError so
callers can catch the whole family with a single except clause.
"""

from __future__ import annotations


class UciBridgeError(Exception):
    """Base exception for all uci-bridge errors."""


# =============================================================================
# Session State Exceptions
# =============================================================================


class AlreadyInitializedError(UciBridgeError):
    """initialize() was called on a session that is already running."""


class NotInitializedError(UciBridgeError):
    """An operation was attempted on a session that is not running."""


# =============================================================================
# Process / Pipe Exceptions
# =============================================================================


class SpawnError(UciBridgeError):
    """The engine process could not be launched.

    There is no separate "redirect" stage: subprocess reports a failed dup2
    of stdin/stdout the same way as a failed fork, so both surface as
    "spawn".

    Attributes:
        stage: Which step failed: "pipe", "spawn" or "exec".
        errno: The underlying OS error code, if any.
    """

    def __init__(self, message: str, stage: str, errno: int | None = None) -> None:
        super().__init__(message)
        self.stage = stage
        self.errno = errno


class EngineIOError(UciBridgeError):
    """A read or write on the engine pipes failed.

    End-of-stream is not an error; this is only raised when the system call
    itself fails.
    """

    def __init__(self, message: str, errno: int | None = None) -> None:
        super().__init__(message)
        self.errno = errno


class EngineTimeoutError(UciBridgeError, TimeoutError):
    """An expected line did not arrive before the deadline.

    Raised only after the engine process has been killed.
    """

    def __init__(self, message: str, expected: str = "", timeout_ms: int = 0) -> None:
        super().__init__(message)
        self.expected = expected
        self.timeout_ms = timeout_ms
