"""
Engine exit detection.

A reaper thread waits for the child with WNOWAIT, so the process stays
reapable by the owning session, and then flags the exit. Session state is
only ever mutated by the session's control thread when it notices the flag.
"""

from __future__ import annotations

import logging
import os
import threading
from typing import TYPE_CHECKING, Callable

if TYPE_CHECKING:
    import subprocess

logger = logging.getLogger(__name__)


class LifecycleMonitor:
    """
    Watches one engine process and records when it terminates.

    Usage:
        monitor = LifecycleMonitor(process)
        monitor.start()
        ...
        if monitor.exited:
            session_reset()
    """

    def __init__(
        self,
        process: subprocess.Popen[bytes],
        on_exit: Callable[[int], None] | None = None,
    ) -> None:
        """Initialize the monitor.

        Args:
            process: The engine child process.
            on_exit: Optional callback run on the reaper thread with the pid.
                It must not touch session state.
        """
        self._process = process
        self._pid = process.pid
        self._on_exit = on_exit
        self._exited = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def pid(self) -> int:
        return self._pid

    @property
    def exited(self) -> bool:
        """Whether the engine process has terminated."""
        return self._exited.is_set()

    def start(self) -> None:
        if self._thread is not None:
            return
        self._thread = threading.Thread(
            target=self._reap,
            name=f"uci-reaper-{self._pid}",
            daemon=True,
        )
        self._thread.start()

    def wait(self, timeout: float | None = None) -> bool:
        """Wait for the engine to terminate. Returns whether it did."""
        return self._exited.wait(timeout)

    def stop(self) -> None:
        """Join the reaper thread once the process is known to be gone."""
        if self._thread is not None and self._exited.is_set():
            self._thread.join()

    def _reap(self) -> None:
        try:
            os.waitid(os.P_PID, self._pid, os.WEXITED | os.WNOWAIT)
        except ChildProcessError:
            # Already reaped elsewhere (e.g. Popen.wait on the control thread).
            pass
        except OSError as e:
            logger.warning(f"Error waiting on engine process {self._pid}: {e}")

        logger.info(f"Engine process {self._pid} exited")
        self._exited.set()

        if self._on_exit is not None:
            try:
                self._on_exit(self._pid)
            except Exception as e:
                logger.exception(f"Error in engine exit callback: {e}")
