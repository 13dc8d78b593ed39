"""
Integration tests: a real server on an ephemeral port, real sockets.
"""

import socket
import threading
from pathlib import Path
from typing import Dict, Tuple

import pytest

from minihttpd import HTTPServer, ServerConfig

from conftest import RunningServer


def parse_response(data: bytes) -> Tuple[str, Dict[str, str], bytes]:
    """Split a raw response into status line, headers and body."""
    head, sep, body = data.partition(b"\r\n\r\n")
    assert sep, f"incomplete response: {data!r}"
    lines = head.decode("utf-8").split("\r\n")
    headers = {}
    for line in lines[1:]:
        name, value = line.split(": ", 1)
        headers[name.lower()] = value
    assert int(headers["content-length"]) == len(body)
    return lines[0], headers, body


class TestRoutesOverTheWire:

    def test_root(self, test_server: RunningServer):
        data = test_server.request(b"GET / HTTP/1.1\r\nHost: localhost\r\n\r\n")

        assert data == (
            b"HTTP/1.1 200 OK\r\n"
            b"Content-Type: text/plain\r\n"
            b"Content-Length: 0\r\n"
            b"\r\n"
        )

    def test_echo(self, test_server: RunningServer):
        status, headers, body = parse_response(
            test_server.request(b"GET /echo/abc HTTP/1.1\r\n\r\n")
        )

        assert status == "HTTP/1.1 200 OK"
        assert headers["content-type"] == "text/plain"
        assert body == b"abc"

    def test_echo_non_utf8_verbatim(self, test_server: RunningServer):
        """Bytes that are not valid UTF-8 come back exactly as sent."""
        _, headers, body = parse_response(
            test_server.request(b"GET /echo/caf\xe9 HTTP/1.1\r\n\r\n")
        )

        assert body == b"caf\xe9"
        assert headers["content-length"] == "4"

    def test_user_agent_non_utf8_verbatim(self, test_server: RunningServer):
        raw = b"GET /user-agent HTTP/1.1\r\nUser-Agent: \xff\xfebot\r\n\r\n"
        _, _, body = parse_response(test_server.request(raw))

        assert body == b"\xff\xfebot"

    def test_handler_exception_is_500(self, test_server: RunningServer):
        def explode(request, params):
            raise RuntimeError("handler bug")

        test_server.server.router.add_route("/boom", explode)

        status, _, body = parse_response(test_server.request(b"GET /boom HTTP/1.1\r\n\r\n"))

        assert status == "HTTP/1.1 500 Internal Server Error"
        assert body == b""

    def test_user_agent(self, test_server: RunningServer):
        raw = b"GET /user-agent HTTP/1.1\r\nUser-Agent: foobar/1.2.3\r\n\r\n"
        _, _, body = parse_response(test_server.request(raw))

        assert body == b"foobar/1.2.3"

    def test_not_found(self, test_server: RunningServer):
        status, _, body = parse_response(test_server.request(b"GET /nope HTTP/1.1\r\n\r\n"))

        assert status == "HTTP/1.1 404 Not Found"
        assert body == b""

    def test_file_roundtrip(self, test_server: RunningServer, storage_dir: Path):
        body = b"hello world"
        post = test_server.request(
            b"POST /files/report.txt HTTP/1.1\r\n"
            b"Content-Length: 11\r\n"
            b"\r\n" + body
        )
        status, _, _ = parse_response(post)
        assert status == "HTTP/1.1 201 Created"
        assert (storage_dir / "report.txt").read_bytes() == body

        status, headers, got = parse_response(
            test_server.request(b"GET /files/report.txt HTTP/1.1\r\n\r\n")
        )
        assert status == "HTTP/1.1 200 OK"
        assert headers["content-type"] == "application/octet-stream"
        assert got == body

    def test_file_method_not_allowed(self, test_server: RunningServer):
        status, headers, _ = parse_response(
            test_server.request(b"DELETE /files/report.txt HTTP/1.1\r\n\r\n")
        )

        assert status == "HTTP/1.1 405 Method Not Allowed"
        assert headers["allow"] == "GET, POST"

    def test_files_disabled_without_directory(self, bare_server: RunningServer):
        status, _, _ = parse_response(bare_server.request(b"GET /files/a HTTP/1.1\r\n\r\n"))
        assert status == "HTTP/1.1 404 Not Found"


class TestConnectionHandling:

    def test_malformed_request_gets_no_response(self, test_server: RunningServer):
        """The server closes the connection without writing anything."""
        assert test_server.request(b"GARBAGE\r\n\r\n") == b""

    def test_truncated_body_gets_no_response(self, test_server: RunningServer, storage_dir: Path):
        raw = b"POST /files/partial HTTP/1.1\r\nContent-Length: 100\r\n\r\nshort"

        assert test_server.request(raw, half_close=True) == b""
        assert not (storage_dir / "partial").exists()

    def test_eof_after_headers(self, test_server: RunningServer):
        """A client that half-closes before the blank line is still answered."""
        raw = b"GET /user-agent HTTP/1.1\r\nUser-Agent: eager\r\n"
        _, _, body = parse_response(test_server.request(raw, half_close=True))

        assert body == b"eager"

    def test_one_request_per_connection(self, test_server: RunningServer):
        """Anything after the first request is ignored."""
        raw = b"GET /echo/one HTTP/1.1\r\n\r\nGET /echo/two HTTP/1.1\r\n\r\n"
        data = test_server.request(raw)

        _, _, body = parse_response(data)
        assert body == b"one"
        assert data.count(b"HTTP/1.1") == 1

    def test_concurrent_connections(self, test_server: RunningServer):
        """A stalled client does not block other clients."""
        stalled = socket.create_connection(("127.0.0.1", test_server.port), timeout=5.0)
        try:
            stalled.sendall(b"GET /echo/slow HTTP/1.1\r\n")

            results = {}

            def fetch(i: int):
                raw = f"GET /echo/client-{i} HTTP/1.1\r\n\r\n".encode()
                results[i] = parse_response(test_server.request(raw))[2]

            threads = [threading.Thread(target=fetch, args=(i,)) for i in range(10)]
            for t in threads:
                t.start()
            for t in threads:
                t.join(timeout=10.0)

            assert results == {i: f"client-{i}".encode() for i in range(10)}

            stalled.sendall(b"\r\n")
            chunks = []
            while True:
                chunk = stalled.recv(4096)
                if not chunk:
                    break
                chunks.append(chunk)
            assert parse_response(b"".join(chunks))[2] == b"slow"
        finally:
            stalled.close()


@pytest.fixture
def timeout_server():
    running = RunningServer(HTTPServer(ServerConfig(
        host="127.0.0.1", port=0, timeout=0.3, log_level="WARNING",
    )))
    running.start()
    yield running
    running.stop()


def test_idle_client_times_out(timeout_server: RunningServer):
    """With a socket timeout configured, a silent client is dropped."""
    with socket.create_connection(("127.0.0.1", timeout_server.port), timeout=5.0) as sock:
        sock.sendall(b"GET / HTTP/1.1\r\n")
        assert sock.recv(4096) == b""


def test_shutdown_stops_server():
    running = RunningServer(HTTPServer(ServerConfig(host="127.0.0.1", port=0)))
    running.start()
    assert running.server.is_running

    running.stop()

    assert not running.server.is_running
