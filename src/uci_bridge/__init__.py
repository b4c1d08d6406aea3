"""
uci-bridge

Supervises a UCI chess engine process and exchanges line messages with it
over a pair of pipes, with deadline-bounded waits and crash detection.
"""

from .config import SessionConfig
from .exceptions import (
    AlreadyInitializedError,
    EngineIOError,
    EngineTimeoutError,
    NotInitializedError,
    SpawnError,
    UciBridgeError,
)
from .framing import LINE_TERMINATOR, LineFramer
from .launcher import LaunchedProcess, launch_engine
from .monitor import LifecycleMonitor
from .options import OptionDescriptor, OptionType, from_chess_option, to_chess_option
from .session import EngineIdentity, EngineSession, initialize
from .transport import READ_CHUNK_SIZE, PipeTransport
from .waiter import line_matches, wait_for_line

__version__ = "0.1.0"

__all__ = [
    # Version
    "__version__",
    # Config
    "SessionConfig",
    # Exceptions
    "UciBridgeError",
    "AlreadyInitializedError",
    "NotInitializedError",
    "SpawnError",
    "EngineIOError",
    "EngineTimeoutError",
    # Process / pipes
    "LaunchedProcess",
    "launch_engine",
    "PipeTransport",
    "READ_CHUNK_SIZE",
    "LineFramer",
    "LINE_TERMINATOR",
    "wait_for_line",
    "line_matches",
    "LifecycleMonitor",
    # Session
    "EngineSession",
    "EngineIdentity",
    "initialize",
    # Options
    "OptionType",
    "OptionDescriptor",
    "to_chess_option",
    "from_chess_option",
]
