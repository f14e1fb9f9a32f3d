"""
pytest configuration and fixtures.
"""

import socket
import threading
from pathlib import Path
from typing import Generator
import pytest

# Add src to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from simplehttp import HTTPServer, ServerConfig


@pytest.fixture
def sample_get_request() -> bytes:
    """Sample HTTP GET request."""
    return (
        b"GET /docs/read%20me.txt HTTP/1.1\r\n"
        b"Host: localhost:5500\r\n"
        b"User-Agent: pytest\r\n"
        b"Accept: */*\r\n"
        b"\r\n"
    )


@pytest.fixture
def sample_post_request() -> bytes:
    """Sample HTTP POST request with a body."""
    body = b"name=John&email=john%40example.com"
    return (
        b"POST /forms/submit HTTP/1.1\r\n"
        b"Host: localhost:5500\r\n"
        b"Content-Type: application/x-www-form-urlencoded\r\n"
        + f"Content-Length: {len(body)}\r\n".encode()
        + b"\r\n"
        + body
    )


@pytest.fixture
def serve_root(tmp_path: Path) -> Path:
    """
    A small tree to serve:

        root/
        ├── readme.txt        "hello"
        ├── image.gif         GIF signature
        └── subdir/
            ├── a.txt
            └── nested/
    """
    root = tmp_path / "root"
    root.mkdir()
    (root / "readme.txt").write_bytes(b"hello")
    (root / "image.gif").write_bytes(b"GIF89a" + b"\x00" * 16)

    subdir = root / "subdir"
    subdir.mkdir()
    (subdir / "a.txt").write_text("inside")
    (subdir / "nested").mkdir()

    return root


@pytest.fixture
def free_port() -> int:
    """Get a free port for testing."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]


class TestServer:
    """Test server helper that runs in a background thread."""

    __test__ = False  # Not a test class

    def __init__(self, server: HTTPServer, port: int):
        self.server = server
        self.port = port
        self._thread: threading.Thread = None

    def start(self):
        """Start server in background thread."""
        self._thread = threading.Thread(target=self.server.run, daemon=True)
        self._thread.start()

        if not self.server.wait_until_ready(timeout=5.0):
            raise RuntimeError("Server failed to start")

    def request(self, raw: bytes, timeout: float = 5.0) -> bytes:
        """Send raw bytes, return everything the server writes back."""
        with socket.create_connection(("127.0.0.1", self.port), timeout=timeout) as s:
            s.sendall(raw)
            s.shutdown(socket.SHUT_WR)
            chunks = []
            while True:
                chunk = s.recv(4096)
                if not chunk:
                    break
                chunks.append(chunk)
        return b"".join(chunks)

    def stop(self):
        """Stop the server."""
        self.server.shutdown()

        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5.0)


def _make_test_server(root: Path, port: int, concurrency: str) -> TestServer:
    server = HTTPServer(ServerConfig(
        host="127.0.0.1",
        port=port,
        root=str(root),
        concurrency=concurrency,
        min_workers=2,
        max_workers=4,
        timeout=5.0,
        log_level="WARNING",
    ))
    return TestServer(server, port)


@pytest.fixture(params=["pool", "serial"])
def test_server(request, serve_root: Path, free_port: int) -> Generator[TestServer, None, None]:
    """A running server over serve_root, once per concurrency mode."""
    test_srv = _make_test_server(serve_root, free_port, request.param)
    test_srv.start()

    yield test_srv

    test_srv.stop()
