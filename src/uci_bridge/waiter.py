"""
Deadline-bounded wait for an expected engine line.

A line is considered a match if it begins with the expected token. This means
that expecting "id name" will match "id name Stockfish 16" but not
"id author ...". Lines that do not match are dropped, which is only suitable
for handshake-style exchanges where the caller cares about one reply.
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Callable

from .exceptions import EngineTimeoutError

if TYPE_CHECKING:
    from .framing import LineFramer
    from .transport import PipeTransport

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL_MS = 10


def line_matches(line: str, expected_prefix: str) -> bool:
    """Exact prefix match on the raw line."""
    return line.startswith(expected_prefix)


def wait_for_line(
    framer: LineFramer,
    transport: PipeTransport,
    expected_prefix: str,
    timeout_ms: int,
    *,
    ensure_live: Callable[[], object],
    on_timeout: Callable[[], None],
    on_unmatched: Callable[[str], None] | None = None,
    poll_interval_ms: int = DEFAULT_POLL_INTERVAL_MS,
) -> str:
    """Block until a line starting with ``expected_prefix`` arrives.

    Args:
        framer: Source of buffered lines.
        transport: Used to pull more bytes when the buffer has no full line.
        expected_prefix: Token the wanted line starts with.
        timeout_ms: Maximum number of milliseconds to wait.
        ensure_live: Called every iteration; raises if the session has died.
        on_timeout: Called once the deadline passes, before the error is
            raised. The session uses it to kill the engine.
        on_unmatched: Receives each discarded line.
        poll_interval_ms: Upper bound on a single readiness wait, and the
            back-off after end-of-stream.

    Returns:
        The full matching line.

    Raises:
        EngineTimeoutError: If no matching line arrives in time.
    """
    deadline = time.monotonic() + timeout_ms / 1000
    poll_interval = poll_interval_ms / 1000

    while True:
        ensure_live()

        line = framer.extract_line()
        if line is not None:
            if line_matches(line, expected_prefix):
                return line
            logger.debug(f"Discarding while waiting for {expected_prefix!r}: {line}")
            if on_unmatched is not None:
                on_unmatched(line)
            continue

        remaining = deadline - time.monotonic()
        if remaining <= 0:
            break

        if transport.wait_readable(min(remaining, poll_interval)):
            received = transport.recv_available(framer.buffer)
            if not received and transport.at_eof:
                # Dead peer: EOF stays readable, so back off until the
                # lifecycle monitor catches up or the deadline passes.
                time.sleep(min(poll_interval, max(deadline - time.monotonic(), 0.0)))

    logger.warning(f"Timed out after {timeout_ms} ms waiting for {expected_prefix!r}")
    on_timeout()
    raise EngineTimeoutError(
        f"Timeout waiting for engine process (expected {expected_prefix!r})",
        expected=expected_prefix,
        timeout_ms=timeout_ms,
    )
