"""
End-to-end tests against a running server, once per concurrency mode.
"""

import socket
import threading
from pathlib import Path

import pytest

from simplehttp import HTTPServer, ServerConfig


class TestServing:

    def test_serves_file(self, test_server):
        data = test_server.request(b"GET /readme.txt HTTP/1.1\r\nHost: localhost\r\n\r\n")

        assert data == (
            b"HTTP/1.1 200 OK\r\n"
            b"accept-ranges: bytes\r\n"
            b"content-length: 5\r\n"
            b"content-type: text/plain\r\n\r\n"
            b"hello"
        )

    def test_sniffed_content_type(self, test_server):
        data = test_server.request(b"GET /image.gif HTTP/2\r\n\r\n")
        assert b"content-type: image/gif" in data

    def test_directory_listing(self, test_server):
        data = test_server.request(b"GET /subdir HTTP/1.1\r\n\r\n")
        head, _, body = data.partition(b"\r\n\r\n")

        assert head.startswith(b"HTTP/1.1 200 OK")
        assert f"content-length: {len(body)}".encode() in head
        assert b'<a href="subdir%2Fa%2Etxt">a.txt</a>' in body

    def test_missing_file_writes_nothing(self, test_server):
        assert test_server.request(b"GET /missing.txt HTTP/1.1\r\n\r\n") == b""

    def test_unknown_version_writes_nothing(self, test_server):
        assert test_server.request(b"GET /readme.txt HTTP/1.0\r\n\r\n") == b""

    def test_traversal_serves_root(self, test_server):
        data = test_server.request(b"GET /../../etc/passwd HTTP/1.1\r\n\r\n")

        assert b"Currently in:" in data
        assert b"readme.txt" in data

    def test_server_survives_bad_requests(self, test_server):
        test_server.request(b"garbage\r\n\r\n")
        assert test_server.request(b"GET /%00 HTTP/1.1\r\n\r\n") == b""
        test_server.request(b"")

        data = test_server.request(b"GET /readme.txt HTTP/1.1\r\n\r\n")
        assert data.endswith(b"hello")

    def test_sequential_requests_counted(self, test_server):
        for _ in range(3):
            assert test_server.request(b"GET /readme.txt HTTP/1.1\r\n\r\n").endswith(b"hello")

        assert test_server.server.connections_handled == 3


class TestConcurrency:

    def test_parallel_clients(self, test_server):
        results = []
        lock = threading.Lock()

        def client():
            data = test_server.request(b"GET /subdir/a.txt HTTP/1.1\r\n\r\n")
            with lock:
                results.append(data)

        threads = [threading.Thread(target=client) for _ in range(10)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=10.0)

        assert len(results) == 10
        assert all(r.endswith(b"inside") for r in results)


class TestServerLifecycle:

    def test_port_zero_binds_ephemeral(self, serve_root: Path):
        server = HTTPServer(ServerConfig(port=0, root=str(serve_root), log_level="WARNING"))
        thread = threading.Thread(target=server.run, daemon=True)
        thread.start()

        try:
            assert server.wait_until_ready(timeout=5.0)
            host, port = server.address
            assert port != 0

            with socket.create_connection((host, port), timeout=5.0) as s:
                s.sendall(b"GET /readme.txt HTTP/1.1\r\n\r\n")
                s.shutdown(socket.SHUT_WR)
                assert s.recv(4096).startswith(b"HTTP/1.1 200 OK")
        finally:
            server.shutdown()
            thread.join(timeout=5.0)

        assert not thread.is_alive()

    def test_invalid_config_fails_fast(self, tmp_path: Path):
        with pytest.raises(ValueError):
            HTTPServer(ServerConfig(root=str(tmp_path / "gone")))
