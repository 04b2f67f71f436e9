"""
pytest configuration and fixtures.
"""

import dataclasses
import socket
import threading
import time
from typing import Callable, Generator, Optional
import pytest

# Add src to path for imports
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from lineserver import LineServer, ServerConfig


@pytest.fixture
def free_port() -> int:
    """Get a free port for testing."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(('127.0.0.1', 0))
        return s.getsockname()[1]


@pytest.fixture
def config(free_port: int) -> ServerConfig:
    """Test server configuration: localhost, quick shutdown, quiet logs."""
    return ServerConfig(
        host="127.0.0.1",
        port=free_port,
        accept_timeout=0.1,
        shutdown_timeout=1.0,
        log_level="WARNING",
    )


class ServerThread:
    """Runs a LineServer in a background thread."""

    def __init__(self, server: LineServer):
        self.server = server
        self.error: Optional[BaseException] = None
        self._thread: Optional[threading.Thread] = None

    @property
    def port(self) -> int:
        return self.server.address[1]

    @property
    def supervisor(self):
        return self.server.supervisor

    def _run(self):
        try:
            self.server.run()
        except BaseException as e:
            self.error = e

    def start(self) -> "ServerThread":
        """Start the server and wait until it is listening."""
        self._thread = threading.Thread(target=self._run, daemon=True)
        self._thread.start()

        if not self.server.wait_until_listening(timeout=5.0):
            raise RuntimeError(f"Server failed to start: {self.error}")
        return self

    def connect(self, timeout: float = 5.0) -> socket.socket:
        """Open a client connection to the server."""
        sock = socket.create_connection(("127.0.0.1", self.port), timeout=timeout)
        return sock

    def stop(self):
        """Stop the server."""
        self.server.shutdown()

        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5.0)


@pytest.fixture
def server_factory(config: ServerConfig) -> Generator[Callable[..., ServerThread], None, None]:
    """Start servers with per-test config overrides; all stopped on teardown."""
    started = []

    def factory(handler=None, **overrides) -> ServerThread:
        srv = ServerThread(LineServer(dataclasses.replace(config, **overrides), handler=handler))
        started.append(srv)
        return srv.start()

    yield factory

    for srv in started:
        srv.stop()


@pytest.fixture
def running_server(server_factory) -> ServerThread:
    """A default server on a free localhost port."""
    return server_factory()


def recv_exactly(sock: socket.socket, size: int) -> bytes:
    """Read exactly `size` bytes, or fewer if the peer closes first."""
    data = b""
    while len(data) < size:
        chunk = sock.recv(size - len(data))
        if not chunk:
            break
        data += chunk
    return data


def wait_for(predicate: Callable[[], bool], timeout: float = 5.0) -> bool:
    """Poll until predicate() is true or the timeout expires."""
    deadline = time.time() + timeout
    while time.time() < deadline:
        if predicate():
            return True
        time.sleep(0.02)
    return predicate()
