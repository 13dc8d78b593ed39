"""
pytest configuration and fixtures.
"""

import socket
import threading
from pathlib import Path
from typing import Generator, Optional

import pytest

# Add src to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from minihttpd import HTTPServer, ServerConfig
from minihttpd.storage import FileStore


@pytest.fixture
def sample_get_request() -> bytes:
    """Sample HTTP GET request."""
    return (
        b"GET /user-agent HTTP/1.1\r\n"
        b"Host: localhost:4221\r\n"
        b"User-Agent: pytest\r\n"
        b"Accept: */*\r\n"
        b"\r\n"
    )


@pytest.fixture
def sample_post_request() -> bytes:
    """Sample HTTP POST request with a body."""
    body = b"hello world"
    return (
        b"POST /files/report.txt HTTP/1.1\r\n"
        b"Host: localhost:4221\r\n"
        b"Content-Type: application/octet-stream\r\n"
        b"Content-Length: 11\r\n"
        b"\r\n"
    ) + body


@pytest.fixture
def storage_dir(tmp_path: Path) -> Path:
    directory = tmp_path / "files"
    directory.mkdir()
    return directory


@pytest.fixture
def store(storage_dir: Path) -> FileStore:
    """FileStore rooted in a fresh temporary directory."""
    return FileStore(storage_dir)


class RunningServer:
    """Test server helper that runs in a background thread."""

    def __init__(self, server: HTTPServer):
        self.server = server
        self._thread: Optional[threading.Thread] = None

    @property
    def port(self) -> int:
        return self.server.address[1]

    def start(self):
        self._thread = threading.Thread(target=self.server.run, daemon=True)
        self._thread.start()
        if not self.server.wait_until_ready(5.0):
            raise RuntimeError("Server failed to start")

    def stop(self):
        self.server.shutdown()
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5.0)

    def request(self, raw: bytes, half_close: bool = False) -> bytes:
        """
        Send raw bytes and read until the server closes the connection.

        half_close=True shuts down our write side after sending, for
        requests that rely on EOF.
        """
        with socket.create_connection(("127.0.0.1", self.port), timeout=5.0) as sock:
            sock.sendall(raw)
            if half_close:
                sock.shutdown(socket.SHUT_WR)
            chunks = []
            while True:
                chunk = sock.recv(4096)
                if not chunk:
                    break
                chunks.append(chunk)
        return b"".join(chunks)


def _run(config: ServerConfig) -> Generator[RunningServer, None, None]:
    running = RunningServer(HTTPServer(config))
    running.start()
    yield running
    running.stop()


@pytest.fixture
def test_server(storage_dir: Path) -> Generator[RunningServer, None, None]:
    """Server on an ephemeral port with file storage enabled."""
    yield from _run(ServerConfig(
        host="127.0.0.1",
        port=0,
        directory=str(storage_dir),
        log_level="WARNING",
    ))


@pytest.fixture
def bare_server() -> Generator[RunningServer, None, None]:
    """Server on an ephemeral port without file storage."""
    yield from _run(ServerConfig(host="127.0.0.1", port=0, log_level="WARNING"))
