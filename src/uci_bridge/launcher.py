"""
Engine process launcher.

Creates the two pipes that carry the UCI conversation and spawns the engine
with its stdin/stdout bound to them. stderr is inherited from the caller.
"""

from __future__ import annotations

import contextlib
import logging
import os
import subprocess
from collections.abc import Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING

from .exceptions import SpawnError

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)


@dataclass
class LaunchedProcess:
    """A freshly spawned engine and the parent-side ends of its pipes."""

    process: subprocess.Popen[bytes]
    read_fd: int  # engine -> caller
    write_fd: int  # caller -> engine

    @property
    def pid(self) -> int:
        return self.process.pid


def _close_all(*fds: int) -> None:
    for fd in fds:
        with contextlib.suppress(OSError):
            os.close(fd)


def launch_engine(
    engine_path: str | Path,
    argv: Sequence[str] | None = None,
) -> LaunchedProcess:
    """Spawn the engine executable on a fresh pair of pipes.

    Args:
        engine_path: Path to the engine executable.
        argv: Argument vector in execv form (argv[0] is the program name).
            Defaults to ``[engine_path]``.

    Returns:
        LaunchedProcess with the child and the caller-side pipe ends.

    Raises:
        SpawnError: If the pipes cannot be created, the child cannot be
            created or redirected, or the executable cannot be run.
    """
    engine_path = os.fspath(engine_path)
    args = list(argv) if argv else [engine_path]

    try:
        from_engine_r, from_engine_w = os.pipe()
    except OSError as e:
        raise SpawnError(f"Failed to create engine pipe: {e}", "pipe", e.errno) from e
    try:
        to_engine_r, to_engine_w = os.pipe()
    except OSError as e:
        _close_all(from_engine_r, from_engine_w)
        raise SpawnError(f"Failed to create engine pipe: {e}", "pipe", e.errno) from e

    try:
        process = subprocess.Popen(
            args,
            executable=engine_path,
            stdin=to_engine_r,
            stdout=from_engine_w,
            close_fds=True,
        )
    except OSError as e:
        _close_all(from_engine_r, from_engine_w, to_engine_r, to_engine_w)
        # subprocess attaches the filename only when exec itself failed.
        if e.filename is not None:
            raise SpawnError(
                f"Failed to execute engine {engine_path}: {e.strerror}", "exec", e.errno
            ) from e
        raise SpawnError(f"Failed to spawn engine process: {e}", "spawn", e.errno) from e
    except subprocess.SubprocessError as e:
        _close_all(from_engine_r, from_engine_w, to_engine_r, to_engine_w)
        raise SpawnError(f"Failed to spawn engine process: {e}", "spawn") from e

    # The child holds its own copies now.
    _close_all(to_engine_r, from_engine_w)
    os.set_blocking(from_engine_r, False)

    logger.info(f"Spawned engine {engine_path} (pid {process.pid})")
    return LaunchedProcess(process=process, read_fd=from_engine_r, write_fd=to_engine_w)
