"""
End-to-end tests against a running FileServer over real TCP sockets.
"""

import socket
import threading
import time
from pathlib import Path

import pytest

from fileserver import FileServer, ServerConfig
from fileserver.http.response import NOT_FOUND_PAGE


def split_response(raw: bytes):
    """Split raw response bytes into (status line, headers dict, body)."""
    head, sep, body = raw.partition(b"\r\n\r\n")
    assert sep, f"no header terminator in {raw[:80]!r}"
    lines = head.decode("utf-8").split("\r\n")
    headers = {}
    for line in lines[1:]:
        name, _, value = line.partition(": ")
        headers[name] = value
    return lines[0], headers, body


class TestRedirects:
    """Alias paths answer 301."""

    @pytest.mark.parametrize("target", ["/", "/index.htm", "/index"])
    def test_alias_redirects(self, test_server, target):
        raw = test_server.exchange(f"GET {target} HTTP/1.1\r\nHost: localhost\r\n\r\n".encode())
        status_line, headers, body = split_response(raw)

        assert status_line == "HTTP/1.1 301 Moved Permanently"
        assert headers["Location"] == "/index.html"
        assert body == b""

    def test_redirect_ends_with_blank_line(self, test_server):
        raw = test_server.exchange(b"GET / HTTP/1.1\r\n\r\n")
        assert raw.endswith(b"\r\n\r\n")


class TestFiles:
    """Files under the document root are served unchanged."""

    def test_serve_html(self, test_server, docroot: Path):
        raw = test_server.exchange(b"GET /index.html HTTP/1.1\r\nHost: localhost\r\n\r\n")
        status_line, headers, body = split_response(raw)

        assert status_line == "HTTP/1.1 200 OK"
        assert headers["Content-Type"] == "text/html"
        assert headers["Content-Length"] == str(len(body))
        assert headers["Connection"] == "close"
        assert body == (docroot / "index.html").read_bytes()

    def test_serve_binary(self, test_server, docroot: Path):
        raw = test_server.exchange(b"GET /images/logo.png HTTP/1.1\r\n\r\n")
        status_line, headers, body = split_response(raw)

        assert status_line == "HTTP/1.1 200 OK"
        assert headers["Content-Type"] == "image/png"
        assert body == (docroot / "images" / "logo.png").read_bytes()

    def test_serve_sniffed(self, test_server):
        _, headers, _ = split_response(test_server.exchange(b"GET /blob HTTP/1.1\r\n\r\n"))
        assert headers["Content-Type"] == "image/png"

    def test_serve_empty_file(self, test_server):
        status_line, headers, body = split_response(
            test_server.exchange(b"GET /empty.txt HTTP/1.1\r\n\r\n")
        )

        assert status_line == "HTTP/1.1 200 OK"
        assert headers["Content-Length"] == "0"
        assert body == b""

    def test_repeat_requests_identical(self, test_server):
        request = b"GET /style.css HTTP/1.1\r\n\r\n"
        assert test_server.exchange(request) == test_server.exchange(request)

    def test_large_file(self, test_server, docroot: Path):
        payload = bytes(range(256)) * 4096
        (docroot / "big.bin").write_bytes(payload)

        _, headers, body = split_response(test_server.exchange(b"GET /big.bin HTTP/1.1\r\n\r\n"))

        assert headers["Content-Type"] == "application/octet-stream"
        assert body == payload

    def test_file_added_after_start(self, test_server, docroot: Path):
        (docroot / "late.txt").write_bytes(b"late")

        _, _, body = split_response(test_server.exchange(b"GET /late.txt HTTP/1.1\r\n\r\n"))
        assert body == b"late"


class TestNotFound:
    """Everything else answers 404 with the fixed page."""

    @pytest.mark.parametrize("target", [
        "/missing.html",
        "/sub",
        "/../secret.txt",
        "/sub/../../secret.txt",
        "/index.html?query=1",
    ])
    def test_not_found(self, test_server, target):
        raw = test_server.exchange(f"GET {target} HTTP/1.1\r\n\r\n".encode())
        status_line, headers, body = split_response(raw)

        assert status_line == "HTTP/1.1 404 Not Found"
        assert headers["Content-Type"] == "text/html"
        assert body == NOT_FOUND_PAGE


class TestBadInput:
    """Connections that never form a request are closed without a reply."""

    def test_empty_connection(self, test_server):
        assert test_server.exchange(b"") == b""

    def test_malformed_request_line(self, test_server):
        assert test_server.exchange(b"HELLO\r\n\r\n") == b""

    def test_malformed_header(self, test_server):
        assert test_server.exchange(b"GET / HTTP/1.1\r\nbroken header\r\n\r\n") == b""

    def test_server_survives_bad_input(self, test_server):
        test_server.exchange(b"\x00\x01\x02\r\n\r\n")
        test_server.exchange(b"")

        status_line, _, _ = split_response(test_server.exchange(b"GET / HTTP/1.1\r\n\r\n"))
        assert status_line == "HTTP/1.1 301 Moved Permanently"

    def test_reject_malformed(self, docroot: Path):
        server = FileServer(ServerConfig(
            port=0, document_root=str(docroot), timeout=5.0, reject_malformed=True,
        ))
        thread = threading.Thread(target=server.run, kwargs={"setup_logging": False}, daemon=True)
        thread.start()
        assert server.wait_until_ready(5.0)

        try:
            with socket.create_connection(server.address, timeout=5.0) as sock:
                sock.sendall(b"HELLO\r\n\r\n")
                sock.shutdown(socket.SHUT_WR)
                data = b""
                while True:
                    chunk = sock.recv(65536)
                    if not chunk:
                        break
                    data += chunk
        finally:
            server.shutdown()
            thread.join(timeout=5.0)

        assert data.startswith(b"HTTP/1.1 400 Bad Request\r\n")


class TestConcurrency:
    """Slow or many clients do not block each other."""

    def test_silent_client_does_not_block_others(self, test_server):
        with test_server.connect():
            # Connected but says nothing; another client is still served
            status_line, _, _ = split_response(
                test_server.exchange(b"GET /index.html HTTP/1.1\r\n\r\n")
            )
            assert status_line == "HTTP/1.1 200 OK"

    def test_parallel_clients(self, test_server, docroot: Path):
        expected = (docroot / "style.css").read_bytes()
        results = []
        errors = []

        def client():
            try:
                _, _, body = split_response(test_server.exchange(b"GET /style.css HTTP/1.1\r\n\r\n"))
                results.append(body)
            except Exception as e:
                errors.append(e)

        threads = [threading.Thread(target=client) for _ in range(20)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=10.0)

        assert not errors
        assert results == [expected] * 20

    def test_request_split_across_packets(self, test_server):
        with test_server.connect() as sock:
            for piece in (b"GET /ind", b"ex.html HT", b"TP/1.1\r\nHo", b"st: x\r\n", b"\r\n"):
                sock.sendall(piece)
                time.sleep(0.02)

            data = b""
            while True:
                chunk = sock.recv(65536)
                if not chunk:
                    break
                data += chunk

        assert data.startswith(b"HTTP/1.1 200 OK\r\n")


class TestLifecycle:
    """Start and stop."""

    def test_address_reports_bound_port(self, test_server):
        host, port = test_server.server.address

        assert host == "127.0.0.1"
        assert port != 0
        assert test_server.server.is_running

    def test_shutdown_stops_accepting(self, docroot: Path):
        server = FileServer(ServerConfig(port=0, document_root=str(docroot), timeout=5.0))
        thread = threading.Thread(target=server.run, kwargs={"setup_logging": False}, daemon=True)
        thread.start()
        assert server.wait_until_ready(5.0)
        address = server.address

        server.shutdown()
        thread.join(timeout=5.0)

        assert not thread.is_alive()
        assert not server.is_running
        with pytest.raises(OSError):
            socket.create_connection(address, timeout=1.0)
