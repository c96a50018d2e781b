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

from fileserver import FileServer, ServerConfig


PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00\x00\x00\rIHDR" + bytes(range(64))
INDEX_HTML = b"<!DOCTYPE html>\n<html><body><h1>Home</h1></body></html>\n"


@pytest.fixture
def docroot(tmp_path: Path) -> Path:
    """
    A small document root:

        index.html        HTML page
        index.htm         also on disk, but shadowed by the redirect table
        style.css
        images/logo.png
        blob              PNG content, no extension
        empty.txt         zero bytes
        sub/              directory
    """
    root = tmp_path / "www"
    root.mkdir()
    (root / "index.html").write_bytes(INDEX_HTML)
    (root / "index.htm").write_bytes(b"<html>legacy</html>")
    (root / "style.css").write_bytes(b"body { color: red; }\n")
    (root / "images").mkdir()
    (root / "images" / "logo.png").write_bytes(PNG_BYTES)
    (root / "blob").write_bytes(PNG_BYTES)
    (root / "empty.txt").write_bytes(b"")
    (root / "sub").mkdir()

    # Outside the document root, must never be served
    (tmp_path / "secret.txt").write_bytes(b"top secret")
    return root


@pytest.fixture
def sample_get_request() -> bytes:
    """Sample HTTP GET request."""
    return (
        b"GET /index.html HTTP/1.1\r\n"
        b"Host: localhost:6789\r\n"
        b"User-Agent: pytest\r\n"
        b"Accept: text/html\r\n"
        b"\r\n"
    )


class TestServer:
    """Test server helper that runs in a background thread."""

    __test__ = False  # not a test class

    def __init__(self, server: FileServer):
        self.server = server
        self._thread: threading.Thread = None

    @property
    def port(self) -> int:
        return self.server.address[1]

    def start(self):
        """Start server in background thread and wait until it listens."""
        self._thread = threading.Thread(
            target=self.server.run,
            kwargs={"setup_logging": False},
            daemon=True,
        )
        self._thread.start()

        if not self.server.wait_until_ready(5.0):
            raise RuntimeError("Server failed to start")

    def stop(self):
        """Stop the server."""
        self.server.shutdown()
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5.0)

    def connect(self) -> socket.socket:
        sock = socket.create_connection(("127.0.0.1", self.port), timeout=5.0)
        return sock

    def exchange(self, raw: bytes) -> bytes:
        """Send raw bytes, half-close, and read the whole response."""
        with self.connect() as sock:
            if raw:
                sock.sendall(raw)
            sock.shutdown(socket.SHUT_WR)
            return recv_all(sock)


def recv_all(sock: socket.socket) -> bytes:
    """Read until the server closes the connection."""
    chunks = []
    while True:
        chunk = sock.recv(65536)
        if not chunk:
            break
        chunks.append(chunk)
    return b"".join(chunks)


@pytest.fixture
def test_server(docroot: Path) -> Generator[TestServer, None, None]:
    """A running FileServer on an OS-assigned port serving `docroot`."""
    server = FileServer(ServerConfig(
        host="127.0.0.1",
        port=0,  # Let OS pick a free port
        document_root=str(docroot),
        timeout=5.0,
        log_level="WARNING",
    ))

    test_srv = TestServer(server)
    test_srv.start()

    yield test_srv

    test_srv.stop()
