"""
=============================================================================
HTTP REQUEST PARSER
=============================================================================

Reads an HTTP/1.1 request head from a byte stream and turns it into an
immutable Request object.

=============================================================================
WHAT WE READ
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     HTTP REQUEST HEAD                               │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │    GET /index.html HTTP/1.1\r\n        ← request line               │
    │    ─┬─ ─────┬───── ────┬───                                         │
    │   method  target    version                                         │
    │                                                                      │
    │    Host: localhost:6789\r\n           ← header lines                │
    │    Accept: text/html\r\n                                            │
    │    \r\n                                ← blank line = end of head   │
    │                                                                      │
    │    (body, if any, is never read)                                    │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

The parser is deliberately small:

- The request line is split on single spaces into exactly three
  non-empty tokens. Trailing spaces are dropped first.
  Method and version are passed through as-is, no validation.
- The target is kept raw: no percent-decoding, no query splitting.
- Header names keep the case they arrived in. A repeated header
  overwrites the earlier value.
- Exactly one space after the colon is dropped from the value, so
  "Name:  x" keeps the value " x" and "Name:" gives "".

=============================================================================
FAILURE MODES
=============================================================================

    EmptyRequest       Stream hit EOF before the first byte. The client
                       connected and went away (browser preconnects do
                       this all the time). Nothing should be sent back.

    MalformedRequest   Bytes arrived but do not form a request head:
                       wrong token count or an empty token, header line without a colon,
                       EOF in the middle of the headers, a line that is
                       too long, or too many headers.

=============================================================================
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import BinaryIO, Dict, Mapping


class RequestError(Exception):
    """Base class for failures to read a request from a connection."""


class EmptyRequest(RequestError):
    """The client closed the connection without sending anything."""


class MalformedRequest(RequestError):
    """The request line or a header line violates the request grammar."""


@dataclass(frozen=True)
class Request:
    """
    A parsed HTTP request head.

    Attributes:
        method:  Request method token, e.g. "GET".
        target:  Requested path exactly as received, e.g. "/a%20b.html".
        version: Protocol version token, e.g. "HTTP/1.1".
        headers: Header name -> value, names case-sensitive as received.
                 Read-only, like the rest of the request.
    """

    method: str
    target: str
    version: str
    headers: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))

    def get_header(self, name: str, default: str = "") -> str:
        """
        Get a header value by exact name.

        Lookup is case-sensitive because the names are stored as sent.
        """
        return self.headers.get(name, default)


class RequestParser:
    """
    Parses a request head from a readable binary stream.

    Usage:
        parser = RequestParser()
        request = parser.parse(conn.rfile)

    The stream only needs readline(limit). After a successful parse it is
    positioned right after the blank line that ends the headers.
    """

    def __init__(self, max_line_size: int = 64 * 1024, max_headers: int = 100):
        """
        Args:
            max_line_size: Longest accepted line in bytes, terminator included.
            max_headers: Most header lines accepted in one request.
        """
        self.max_line_size = max_line_size
        self.max_headers = max_headers

    def parse(self, stream: BinaryIO) -> Request:
        """
        Read one request head from the stream.

        Raises:
            EmptyRequest: The stream was already at EOF.
            MalformedRequest: The head is not a valid request.
            OSError: Reading the stream failed (reset, timeout, ...).
        """
        raw_line = self._read_line(stream)
        if not raw_line:
            raise EmptyRequest("Connection closed before request line")

        method, target, version = self._parse_request_line(self._decode(raw_line))
        headers = self._parse_headers(stream)

        return Request(
            method=method,
            target=target,
            version=version,
            headers=MappingProxyType(headers),
        )

    def _read_line(self, stream: BinaryIO) -> bytes:
        """
        Read one raw line, terminator included.

        readline(limit) stops at the limit even without a newline, so a
        result that long with no terminator means the line is oversized.
        """
        line = stream.readline(self.max_line_size + 1)
        if len(line) > self.max_line_size:
            raise MalformedRequest(f"Line exceeds {self.max_line_size} bytes")
        return line

    @staticmethod
    def _decode(raw_line: bytes) -> str:
        """Strip the line terminator (\\n or \\r\\n) and decode."""
        if raw_line.endswith(b"\n"):
            raw_line = raw_line[:-1]
        if raw_line.endswith(b"\r"):
            raw_line = raw_line[:-1]
        return raw_line.decode("utf-8", errors="replace")

    @staticmethod
    def _parse_request_line(line: str) -> tuple[str, str, str]:
        """
        Split "METHOD SP TARGET SP VERSION" on single spaces.

        Trailing spaces are ignored, so "GET / HTTP/1.1 " is accepted. Any
        other empty token (from a double space) makes the line malformed.
        """
        parts = line.rstrip(" ").split(" ")
        if len(parts) != 3 or "" in parts:
            raise MalformedRequest(f"Invalid request line: {line!r}")

        method, target, version = parts
        return method, target, version

    def _parse_headers(self, stream: BinaryIO) -> Dict[str, str]:
        """
        Read header lines up to and including the blank line.

        Raises:
            MalformedRequest: Line without a colon, EOF before the blank
                line, or more than max_headers lines.
        """
        headers: Dict[str, str] = {}
        count = 0

        while True:
            raw_line = self._read_line(stream)
            if not raw_line:
                raise MalformedRequest("Connection closed inside request headers")

            line = self._decode(raw_line)
            if line == "":
                return headers

            count += 1
            if count > self.max_headers:
                raise MalformedRequest(f"More than {self.max_headers} headers")

            name, sep, value = line.partition(":")
            if not sep:
                raise MalformedRequest(f"Invalid header line: {line!r}")

            # Only the single space after the colon is separator
            if value.startswith(" "):
                value = value[1:]

            headers[name] = value


def parse_request(stream: BinaryIO) -> Request:
    """
    Parse a request head with default limits.

    Convenience function for quick parsing:
        request = parse_request(io.BytesIO(b"GET / HTTP/1.1\\r\\n\\r\\n"))
    """
    return RequestParser().parse(stream)
