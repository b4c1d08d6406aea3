"""
Line framing over the engine byte stream.

Lines are terminated by a single ``\\n``. A ``\\r`` before it is part of the
line; engines that emit CRLF are expected to be tolerated by the caller.
"""

from __future__ import annotations

LINE_TERMINATOR = b"\n"


class LineFramer:
    """Accumulates raw bytes and splits off complete lines on demand."""

    def __init__(self) -> None:
        self._buffer = bytearray()

    @property
    def buffer(self) -> bytearray:
        """The live pending buffer. Transports append to it directly."""
        return self._buffer

    @property
    def pending(self) -> bytes:
        return bytes(self._buffer)

    def __len__(self) -> int:
        return len(self._buffer)

    def feed(self, data: bytes) -> None:
        self._buffer.extend(data)

    def extract_line(self) -> str | None:
        """Pop the first complete line, without its terminator.

        Returns None (consuming nothing) if no terminator is buffered yet.
        """
        end = self._buffer.find(LINE_TERMINATOR)
        if end == -1:
            return None

        line = bytes(self._buffer[:end])
        del self._buffer[: end + 1]
        return line.decode("utf-8", errors="replace")

    def clear(self) -> None:
        self._buffer.clear()
