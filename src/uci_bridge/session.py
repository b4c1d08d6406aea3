"""
UCI engine session.

Supervises one engine process and exchanges lines with it over a pair of
pipes. Each EngineSession owns its process, pipes and pending buffer, so any
number of sessions can coexist.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable

from .config import SessionConfig
from .exceptions import (
    AlreadyInitializedError,
    EngineIOError,
    NotInitializedError,
    UciBridgeError,
)
from .framing import LINE_TERMINATOR, LineFramer
from .launcher import LaunchedProcess, launch_engine
from .monitor import LifecycleMonitor
from .transport import PipeTransport
from .waiter import wait_for_line

if TYPE_CHECKING:
    from pathlib import Path
    from types import TracebackType

logger = logging.getLogger(__name__)

# Seconds to wait for the reaper after SIGKILL.
KILL_WAIT_TIMEOUT = 5.0
# Seconds to wait for an exit notification after a broken pipe.
EXIT_CONFIRM_TIMEOUT = 0.5


@dataclass
class EngineIdentity:
    """Values reported on ``id`` lines during the handshake."""

    name: str = ""
    author: str = ""


class EngineSession:
    """
    A live connection to one UCI engine process.

    This class is NOT thread-safe. All operations must come from a single
    control thread; only the exit notification arrives from elsewhere.

    Usage:
        session = EngineSession(config)
        session.initialize("/usr/bin/stockfish")
        try:
            session.send("isready")
            session.wait_for("readyok")
        finally:
            session.close()
    """

    def __init__(self, config: SessionConfig | None = None) -> None:
        """Initialize an unconnected session.

        Args:
            config: Session configuration. Uses defaults if not provided.
        """
        self._config = config or SessionConfig()
        self._framer = LineFramer()
        self._launched: LaunchedProcess | None = None
        self._transport: PipeTransport | None = None
        self._monitor: LifecycleMonitor | None = None
        self._identity = EngineIdentity()
        self._returncode: int | None = None

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def config(self) -> SessionConfig:
        return self._config

    @property
    def is_initialized(self) -> bool:
        """Whether the session is running. Picks up pending exit notifications."""
        self._sync_lifecycle()
        return self._transport is not None

    @property
    def pid(self) -> int | None:
        """Process id of the engine, or None when not running."""
        self._sync_lifecycle()
        return self._launched.pid if self._launched is not None else None

    @property
    def returncode(self) -> int | None:
        """Exit status of the most recently terminated engine."""
        self._sync_lifecycle()
        return self._returncode

    @property
    def identity(self) -> EngineIdentity:
        return self._identity

    @property
    def version(self) -> str:
        """Get the engine name reported during the handshake."""
        return self._identity.name or "not started"

    def _sync_lifecycle(self) -> None:
        if self._monitor is not None and self._monitor.exited:
            logger.debug("Engine exit observed, resetting session")
            self._reset()

    def _ensure_initialized(self) -> PipeTransport:
        self._sync_lifecycle()
        if self._transport is None:
            raise NotInitializedError("UCI session not initialized")
        return self._transport

    def _ensure_live_draining(self) -> PipeTransport:
        """Liveness check for waits: output written before the exit is still delivered."""
        if (
            self._monitor is not None
            and self._monitor.exited
            and self._transport is not None
        ):
            received = self._transport.recv_available(self._framer.buffer)
            if received or LINE_TERMINATOR in self._framer.buffer:
                return self._transport
        return self._ensure_initialized()

    def _reset(self) -> None:
        """Release the pipes and reap the process. Control thread only."""
        if self._transport is not None:
            self._transport.close()
        if self._launched is not None:
            self._returncode = self._launched.process.wait()
            logger.info(f"Engine process {self._launched.pid} exited with code {self._returncode}")
        if self._monitor is not None:
            self._monitor.stop()

        self._transport = None
        self._launched = None
        self._monitor = None
        self._framer.clear()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def initialize(
        self,
        engine_path: str | Path | None = None,
        argv: Sequence[str] | None = None,
        *,
        timeout_ms: int | None = None,
    ) -> str:
        """Start the engine and perform the UCI handshake.

        Args:
            engine_path: Engine executable. Defaults to the configured path.
            argv: Argument vector in execv form (argv[0] is the program name).
            timeout_ms: Handshake deadline. Defaults to the configured value.

        Returns:
            The ``uciok`` line.

        Raises:
            AlreadyInitializedError: If the session is already running.
            SpawnError: If the engine cannot be launched.
            EngineTimeoutError: If ``uciok`` does not arrive in time. The
                engine has been killed by then.
        """
        if self.is_initialized:
            raise AlreadyInitializedError("UCI session already initialized")

        path = engine_path if engine_path is not None else self._config.engine_path
        timeout_ms = timeout_ms if timeout_ms is not None else self._config.handshake_timeout_ms

        logger.info(f"Starting engine from {path}")
        launched = launch_engine(path, argv)

        self._launched = launched
        self._transport = PipeTransport(
            launched.read_fd, launched.write_fd, self._config.read_chunk_size
        )
        self._monitor = LifecycleMonitor(launched.process)
        self._monitor.start()
        self._identity = EngineIdentity()
        self._returncode = None

        try:
            self.send("uci")
            line = self.wait_for("uciok", timeout_ms, on_unmatched=self._record_identity)
        except UciBridgeError:
            if self._transport is not None:
                self.kill()
            raise

        logger.info(f"Engine started: {self.version} (pid {launched.pid})")
        return line

    def _record_identity(self, line: str) -> None:
        tokens = line.split(None, 2)
        if len(tokens) < 3 or tokens[0] != "id":
            return
        if tokens[1] == "name":
            self._identity.name = tokens[2].strip()
        elif tokens[1] == "author":
            self._identity.author = tokens[2].strip()

    def kill(self) -> None:
        """Forcibly terminate the engine with SIGKILL and reset the session."""
        if self._launched is None:
            return

        pid = self._launched.pid
        if not (self._monitor is not None and self._monitor.exited):
            logger.warning(f"Killing engine process {pid}")
            self._launched.process.kill()
            if self._monitor is not None and not self._monitor.wait(KILL_WAIT_TIMEOUT):
                logger.warning(f"Engine process {pid} did not report exit after SIGKILL")
        self._reset()

    def close(self, timeout: float | None = None) -> None:
        """Stop the engine gracefully, killing it if it does not quit in time.

        Safe to call on a session that is not running.
        """
        self._sync_lifecycle()
        if self._launched is None:
            return

        timeout = timeout if timeout is not None else self._config.quit_timeout
        try:
            self.send("quit")
        except UciBridgeError as e:
            logger.warning(f"Error sending quit to engine: {e}")

        if self._monitor is not None and self._monitor.wait(timeout):
            self._reset()
            logger.info("Engine stopped")
        else:
            self.kill()

    def __enter__(self) -> EngineSession:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Messaging
    # ------------------------------------------------------------------

    def send(self, message: str) -> None:
        """Send one line to the engine. A trailing newline is added if missing.

        Raises:
            NotInitializedError: If the session is not running, including when
                the write failed because the engine has exited.
            EngineIOError: If the write fails for any other reason.
        """
        transport = self._ensure_initialized()
        try:
            transport.send_all(message)
        except EngineIOError as e:
            self._raise_if_exited(e)
            raise
        logger.debug(f"Sent: {message.rstrip()}")

    def recv_available(self) -> bool:
        """Pull any bytes the engine has written into the pending buffer.

        Returns:
            Whether any bytes were read.
        """
        transport = self._ensure_initialized()
        return transport.recv_available(self._framer.buffer)

    def read_line(self) -> str | None:
        """Pop one complete line from the pending buffer, if any."""
        self._ensure_initialized()
        line = self._framer.extract_line()
        if line is not None:
            logger.debug(f"Recv: {line}")
        return line

    def wait_for(
        self,
        expected_prefix: str,
        timeout_ms: int | None = None,
        *,
        on_unmatched: Callable[[str], None] | None = None,
    ) -> str:
        """Wait for a line starting with ``expected_prefix``.

        Non-matching lines read in the meantime are discarded (or passed to
        ``on_unmatched``). On timeout the engine is killed before the error
        is raised.

        Args:
            expected_prefix: Token the wanted line starts with.
            timeout_ms: Deadline in milliseconds. Defaults to the configured
                handshake timeout.
            on_unmatched: Optional callable receiving each discarded line.

        Returns:
            The full matching line.

        Raises:
            NotInitializedError: If the session is not running or the engine
                exits while waiting.
            EngineTimeoutError: If no matching line arrives in time.
        """
        transport = self._ensure_live_draining()
        timeout_ms = timeout_ms if timeout_ms is not None else self._config.handshake_timeout_ms

        line = wait_for_line(
            self._framer,
            transport,
            expected_prefix,
            timeout_ms,
            ensure_live=self._ensure_live_draining,
            on_timeout=self.kill,
            on_unmatched=on_unmatched,
            poll_interval_ms=self._config.poll_interval_ms,
        )
        logger.debug(f"Recv: {line}")
        return line

    def ping(self, timeout_ms: int | None = None) -> None:
        """Send ``isready`` and wait for ``readyok``."""
        self.send("isready")
        self.wait_for("readyok", timeout_ms)

    def _raise_if_exited(self, error: EngineIOError) -> None:
        if self._monitor is not None and self._monitor.wait(EXIT_CONFIRM_TIMEOUT):
            self._reset()
            raise NotInitializedError("UCI session not initialized (engine exited)") from error


def initialize(
    engine_path: str | Path | None = None,
    argv: Sequence[str] | None = None,
    config: SessionConfig | None = None,
) -> EngineSession:
    """Create an EngineSession and run the handshake.

    Returns:
        A running EngineSession.
    """
    session = EngineSession(config)
    session.initialize(engine_path, argv)
    return session
