"""
=============================================================================
HTTP RESPONSE WRITER
=============================================================================

Turns a resolution outcome into HTTP/1.1 response bytes and writes them
to the connection.

=============================================================================
THE THREE RESPONSES
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │  Redirect("/index.html")                                            │
    │  ─────────────────────────────────────────────────────────────────  │
    │  HTTP/1.1 301 Moved Permanently\r\n                                 │
    │  Location: /index.html\r\n                                          │
    │  Content-Length: 0\r\n                                              │
    │  Connection: close\r\n                                              │
    │  Server: PyFileServer/1.0\r\n                                       │
    │  \r\n                              ← always present, even with no   │
    │                                      body after it                  │
    ├─────────────────────────────────────────────────────────────────────┤
    │  NotFound()                                                         │
    │  ─────────────────────────────────────────────────────────────────  │
    │  HTTP/1.1 404 Not Found\r\n                                         │
    │  Content-Type: text/html\r\n                                        │
    │  ...                                                                │
    │  \r\n                                                                │
    │  <!DOCTYPE html> ... 404 Error: Page Not Found ...                  │
    ├─────────────────────────────────────────────────────────────────────┤
    │  Serve(path, "image/png", b"...")                                   │
    │  ─────────────────────────────────────────────────────────────────  │
    │  HTTP/1.1 200 OK\r\n                                                │
    │  Content-Type: image/png\r\n                                        │
    │  ...                                                                │
    │  \r\n                                                                │
    │  <exact file bytes>                                                 │
    └─────────────────────────────────────────────────────────────────────┘

No Date header is sent: two requests for an unchanged file produce the
same bytes, which keeps responses easy to compare in tests and caches.

=============================================================================
"""

from dataclasses import dataclass, field
from typing import BinaryIO, Dict, Union

from .status_codes import HTTPStatus
from .outcomes import NotFound, Redirect, ResolutionOutcome, Serve


# =============================================================================
# FIXED PAGES
# =============================================================================
#
# The 404 page is part of the observable contract: clients and
# compatibility tests compare it byte for byte. Do not reformat it.
#
# =============================================================================

NOT_FOUND_PAGE = (
    b"<!DOCTYPE html>\n"
    b"<html>\n"
    b"\n"
    b"<head>\n"
    b"    <title>Maurice Harris - Network Project 1</title>\n"
    b"</head>\n"
    b"\n"
    b"<body><h1>\n"
    b"404 Error: Page Not Found\n"
    b"</h1></body>\n"
    b"\n"
    b"</html>"
)

BAD_REQUEST_PAGE = (
    b"<!DOCTYPE html>\n"
    b"<html>\n"
    b"<head><title>400 Bad Request</title></head>\n"
    b"<body><h1>400 Error: Bad Request</h1></body>\n"
    b"</html>"
)


@dataclass
class HTTPResponse:
    """
    An HTTP response ready to be serialized.

    Use the factory functions below (redirect, not_found, file_response,
    bad_request) rather than building one by hand.
    """

    status: HTTPStatus = HTTPStatus.OK
    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""
    version: str = "HTTP/1.1"

    @property
    def status_line(self) -> str:
        """
        Format: HTTP-VERSION SP STATUS-CODE SP REASON-PHRASE
        Example: "HTTP/1.1 301 Moved Permanently"
        """
        return f"{self.version} {int(self.status)} {self.status.phrase}"

    def to_bytes(self, server_name: str = "PyFileServer/1.0") -> bytes:
        """
        Serialize the response.

        =====================================================================
        SERIALIZATION FORMAT
        =====================================================================

            HTTP/1.1 200 OK\\r\\n            ← status line
            Content-Type: text/html\\r\\n    ← handler-set headers
            Content-Length: 1234\\r\\n       ← auto-added
            Connection: close\\r\\n          ← auto-added
            Server: PyFileServer/1.0\\r\\n   ← auto-added
            \\r\\n                           ← header terminator
            <body bytes>

        =====================================================================
        """
        response_headers = dict(self.headers)

        # One request per connection: the body ends where the connection
        # ends, but Content-Length lets clients stop reading earlier.
        response_headers.setdefault("Content-Length", str(len(self.body)))
        response_headers.setdefault("Connection", "close")
        if server_name:
            response_headers.setdefault("Server", server_name)

        lines = [self.status_line]
        for name, value in response_headers.items():
            lines.append(f"{name}: {value}")

        head = "\r\n".join(lines) + "\r\n\r\n"
        return head.encode("utf-8") + self.body


# =============================================================================
# FACTORY FUNCTIONS
# =============================================================================

def redirect(location: str) -> HTTPResponse:
    """301 Moved Permanently pointing at `location`, no body."""
    return HTTPResponse(
        status=HTTPStatus.MOVED_PERMANENTLY,
        headers={"Location": location},
    )


def not_found() -> HTTPResponse:
    """404 Not Found with the fixed error page."""
    return HTTPResponse(
        status=HTTPStatus.NOT_FOUND,
        headers={"Content-Type": "text/html"},
        body=NOT_FOUND_PAGE,
    )


def file_response(content_type: str, body: bytes) -> HTTPResponse:
    """200 OK carrying a file's bytes unchanged."""
    return HTTPResponse(
        status=HTTPStatus.OK,
        headers={"Content-Type": content_type},
        body=body,
    )


def bad_request() -> HTTPResponse:
    """400 Bad Request, sent for malformed requests when configured to."""
    return HTTPResponse(
        status=HTTPStatus.BAD_REQUEST,
        headers={"Content-Type": "text/html"},
        body=BAD_REQUEST_PAGE,
    )


def build_response(outcome: ResolutionOutcome) -> HTTPResponse:
    """
    Map a resolution outcome to its response.

    The outcome types are closed: anything else is a programming error.
    """
    if isinstance(outcome, Redirect):
        return redirect(outcome.destination)
    if isinstance(outcome, NotFound):
        return not_found()
    if isinstance(outcome, Serve):
        return file_response(outcome.content_type, outcome.body)
    raise TypeError(f"Unknown resolution outcome: {outcome!r}")


class ResponseWriter:
    """
    Writes complete responses to a connection's output stream.

    Usage:
        writer = ResponseWriter(server_name="PyFileServer/1.0")
        writer.write(outcome, conn.wfile)
    """

    def __init__(self, server_name: str = "PyFileServer/1.0"):
        self.server_name = server_name

    def write(self, outcome: ResolutionOutcome, stream: BinaryIO) -> HTTPResponse:
        """
        Serialize `outcome` to `stream` and flush.

        Returns:
            The response that was written (for access logging).

        Raises:
            OSError: The stream could not be written (client went away).
        """
        response = build_response(outcome)
        self.write_response(response, stream)
        return response

    def write_response(self, response: HTTPResponse, stream: BinaryIO) -> None:
        """Write an already-built response in one pass, then flush."""
        stream.write(response.to_bytes(self.server_name))
        stream.flush()


def to_bytes(outcome: Union[ResolutionOutcome, HTTPResponse], server_name: str = "PyFileServer/1.0") -> bytes:
    """Serialize an outcome or response without a stream (handy in tests)."""
    if not isinstance(outcome, HTTPResponse):
        outcome = build_response(outcome)
    return outcome.to_bytes(server_name)
