"""
Raw byte transport over the engine pipes.

PipeTransport owns the parent-side file descriptors. Reads are non-blocking
and may return nothing; writes loop until the whole message is flushed.
"""

from __future__ import annotations

import logging
import os
import selectors

from .exceptions import EngineIOError, NotInitializedError

logger = logging.getLogger(__name__)

READ_CHUNK_SIZE = 1024


class PipeTransport:
    """
    Parent-side ends of the engine pipes.

    The read descriptor must be in non-blocking mode (launch_engine sets it).
    This class is NOT thread-safe.
    """

    def __init__(self, read_fd: int, write_fd: int, chunk_size: int = READ_CHUNK_SIZE) -> None:
        self._read_fd = read_fd
        self._write_fd = write_fd
        self._chunk_size = chunk_size
        self._closed = False
        self._at_eof = False
        self._selector = selectors.DefaultSelector()
        self._selector.register(read_fd, selectors.EVENT_READ)

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def at_eof(self) -> bool:
        """Whether the engine closed its end of the output pipe."""
        return self._at_eof

    def _check_open(self) -> None:
        if self._closed:
            raise NotInitializedError("Engine transport is closed")

    def recv_available(self, buffer: bytearray) -> bool:
        """Append whatever the engine has written to ``buffer``.

        Keeps reading while full chunks come back, so a burst larger than
        one chunk is drained in a single call.

        Returns:
            True if at least one byte was read. End-of-stream and an empty
            pipe both return False.

        Raises:
            NotInitializedError: If the transport has been closed.
            EngineIOError: If the read system call fails.
        """
        self._check_open()

        total = 0
        while True:
            try:
                chunk = os.read(self._read_fd, self._chunk_size)
            except BlockingIOError:
                break
            except OSError as e:
                raise EngineIOError(
                    f"Error reading from engine process: {e.errno}", e.errno
                ) from e

            if not chunk:
                self._at_eof = True
                break

            buffer.extend(chunk)
            total += len(chunk)
            if len(chunk) < self._chunk_size:
                break

        return total > 0

    def wait_readable(self, timeout: float) -> bool:
        """Block until the read end is readable (data or EOF) or timeout seconds pass."""
        self._check_open()
        return bool(self._selector.select(max(timeout, 0.0)))

    def send_all(self, message: str | bytes) -> None:
        """Write ``message`` and a trailing newline, retrying partial writes.

        Raises:
            NotInitializedError: If the transport has been closed.
            EngineIOError: If the write system call fails.
        """
        self._check_open()

        data = message.encode("utf-8") if isinstance(message, str) else bytes(message)
        if not data.endswith(b"\n"):
            data += b"\n"

        view = memoryview(data)
        while view:
            try:
                written = os.write(self._write_fd, view)
            except OSError as e:
                raise EngineIOError(
                    f"Error writing to engine process: {e.errno}", e.errno
                ) from e
            view = view[written:]

    def close(self) -> None:
        """Close both descriptors. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        self._selector.close()
        for fd in (self._read_fd, self._write_fd):
            try:
                os.close(fd)
            except OSError as e:
                logger.warning(f"Error closing engine pipe {fd}: {e}")
