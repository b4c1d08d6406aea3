"""
Configuration for uci-bridge sessions.

All configuration can be set via environment variables with sensible defaults.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path


@dataclass
class SessionConfig:
    """Configuration for a single engine session."""

    engine_path: Path = field(
        default_factory=lambda: Path(os.environ.get("UCI_ENGINE_PATH", "stockfish"))
    )
    handshake_timeout_ms: int = field(
        default_factory=lambda: int(os.environ.get("UCI_HANDSHAKE_TIMEOUT_MS", "1000"))
    )
    poll_interval_ms: int = field(
        default_factory=lambda: int(os.environ.get("UCI_POLL_INTERVAL_MS", "10"))
    )
    read_chunk_size: int = 1024  # bytes per read() call
    quit_timeout: float = 2.0  # seconds to wait for exit after "quit"
