"""Pytest configuration for uci-bridge tests."""

import os
import shutil
import sys
import time
from collections.abc import Callable
from pathlib import Path

import pytest

# Add the src directory to the Python path
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

FAKE_ENGINE = Path(__file__).parent / "engines" / "fake_engine.py"


def fake_engine_argv(*args: str) -> list[str]:
    """argv (execv form) for running the fake engine under this interpreter."""
    return [sys.executable, "-S", str(FAKE_ENGINE), *args]


def wait_until(predicate: Callable[[], bool], timeout: float = 5.0) -> bool:
    """Poll ``predicate`` until it holds or ``timeout`` seconds pass."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


def pytest_addoption(parser: pytest.Parser) -> None:
    parser.addoption(
        "--integration",
        action="store_true",
        default=False,
        help="also run tests against a real UCI engine (UCI_ENGINE_PATH)",
    )


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line(
        "markers", "integration: needs a real UCI engine binary, skipped by default"
    )


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Integration tests only run with --integration."""
    if config.getoption("--integration"):
        return
    skip = pytest.mark.skip(reason="real engine tests need --integration")
    for item in items:
        if item.get_closest_marker("integration") is not None:
            item.add_marker(skip)


def pid_running(pid: int) -> bool:
    try:
        os.kill(pid, 0)
    except ProcessLookupError:
        return False
    return True


@pytest.fixture
def engine_available() -> bool:
    """Check if a real UCI engine binary is available."""
    engine_path = os.environ.get("UCI_ENGINE_PATH", "stockfish")
    return shutil.which(engine_path) is not None


@pytest.fixture
def session_config():
    """Session configuration with generous deadlines for slow CI machines."""
    from uci_bridge.config import SessionConfig

    return SessionConfig(
        engine_path=Path(sys.executable),
        handshake_timeout_ms=5000,
        poll_interval_ms=10,
        quit_timeout=2.0,
    )


@pytest.fixture
def make_session(session_config):
    """Factory for sessions running the fake engine; all are closed afterwards."""
    from uci_bridge.session import EngineSession

    sessions = []

    def factory(*args: str, timeout_ms: int | None = None):
        session = EngineSession(session_config)
        sessions.append(session)
        session.initialize(sys.executable, fake_engine_argv(*args), timeout_ms=timeout_ms)
        return session

    yield factory

    for session in sessions:
        session.close()


@pytest.fixture
def loopback():
    """A PipeTransport whose write end feeds its own read end."""
    from uci_bridge.transport import PipeTransport

    read_fd, write_fd = os.pipe()
    os.set_blocking(read_fd, False)
    transport = PipeTransport(read_fd, write_fd)
    yield transport, read_fd, write_fd
    transport.close()
