"""
Unit tests for line framing.
"""

from uci_bridge.framing import LineFramer


class TestLineFramerExtract:
    """Tests for extracting complete lines."""

    def test_single_line(self) -> None:
        """A terminated line comes back once and empties the buffer."""
        framer = LineFramer()
        framer.feed(b"uciok\n")

        assert framer.extract_line() == "uciok"
        assert framer.extract_line() is None
        assert len(framer) == 0

    def test_no_terminator(self) -> None:
        """Without a terminator nothing is consumed."""
        framer = LineFramer()
        framer.feed(b"id name Fo")

        assert framer.extract_line() is None
        assert framer.pending == b"id name Fo"

    def test_split_across_feeds(self) -> None:
        """A line arriving in two pieces is reassembled."""
        framer = LineFramer()
        framer.feed(b"inf")
        assert framer.extract_line() is None

        framer.feed(b"o string done\n")
        assert framer.extract_line() == "info string done"

    def test_multiple_lines_in_order(self) -> None:
        """Lines come out in arrival order and the tail stays buffered."""
        framer = LineFramer()
        framer.feed(b"id name Foo\nid author Bar\nuci")

        assert framer.extract_line() == "id name Foo"
        assert framer.extract_line() == "id author Bar"
        assert framer.extract_line() is None
        assert framer.pending == b"uci"

    def test_empty_line(self) -> None:
        """A bare terminator yields an empty message."""
        framer = LineFramer()
        framer.feed(b"\nreadyok\n")

        assert framer.extract_line() == ""
        assert framer.extract_line() == "readyok"

    def test_carriage_return_kept(self) -> None:
        """CRLF input is not normalized."""
        framer = LineFramer()
        framer.feed(b"uciok\r\n")

        assert framer.extract_line() == "uciok\r"

    def test_invalid_utf8_replaced(self) -> None:
        """Undecodable bytes do not raise."""
        framer = LineFramer()
        framer.feed(b"id name \xff\n")

        assert framer.extract_line() == "id name \ufffd"

    def test_buffer_is_shared(self) -> None:
        """Bytes appended to the live buffer are visible to extract_line."""
        framer = LineFramer()
        framer.buffer.extend(b"readyok\n")

        assert framer.extract_line() == "readyok"


class TestLineFramerClear:
    """Tests for discarding pending bytes."""

    def test_clear(self) -> None:
        """clear() drops partial data."""
        framer = LineFramer()
        framer.feed(b"partial")
        framer.clear()

        assert len(framer) == 0
        assert framer.extract_line() is None
