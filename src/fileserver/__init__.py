"""
=============================================================================
FILESERVER - Minimal HTTP/1.1 Static File Server
=============================================================================

Accepts TCP connections, reads one request per connection, and answers
with a file from the document root, a redirect, or a 404 page.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    ONE CONNECTION, ONE EXCHANGE                     │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   GET /index HTTP/1.1        →  301 Moved Permanently               │
    │                                  Location: /index.html               │
    │                                                                      │
    │   GET /index.html HTTP/1.1   →  200 OK                               │
    │                                  Content-Type: text/html             │
    │                                  <file bytes>                        │
    │                                                                      │
    │   GET /nope.html HTTP/1.1    →  404 Not Found                        │
    │                                  <fixed error page>                  │
    │                                                                      │
    │   (connect, send nothing)    →  connection closed, no response      │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
PACKAGE STRUCTURE
=============================================================================

    fileserver/
    ├── __init__.py          # This file - package exports
    ├── __main__.py          # CLI entry point (python -m fileserver)
    ├── server.py            # FileServer orchestrator
    ├── config.py            # ServerConfig dataclass
    ├── access_log.py        # Per-request access log records
    ├── core/
    │   ├── socket_server.py # Listening socket, thread per connection
    │   └── connection.py    # Client socket wrapper
    ├── http/
    │   ├── request.py       # Request head parsing
    │   ├── outcomes.py      # Redirect / NotFound / Serve
    │   ├── response.py      # Response framing and writing
    │   ├── status_codes.py  # HTTP status enum
    │   └── mime_types.py    # Content-Type detection
    └── handlers/
        ├── static.py        # Redirect table + document root resolution
        └── connection.py    # Per-connection request/response cycle

=============================================================================
QUICK START
=============================================================================

    from fileserver import FileServer, ServerConfig

    server = FileServer(ServerConfig(port=6789, document_root="./public"))
    server.run()

=============================================================================
"""

__version__ = "1.0.0"

from .server import FileServer
from .config import ServerConfig

__all__ = ["FileServer", "ServerConfig", "__version__"]
