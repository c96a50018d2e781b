"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

Centralized configuration for the file server.

=============================================================================
CONFIGURATION SOURCES
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    CONFIGURATION HIERARCHY                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   Priority (highest to lowest):                                     │
    │                                                                      │
    │   1. Command-line arguments                                         │
    │      └── python -m fileserver --port 8000 --root ./public          │
    │                                                                      │
    │   2. Environment variables                                          │
    │      └── FILESERVER_PORT=8000 python -m fileserver                 │
    │                                                                      │
    │   3. Default values (in this dataclass)                            │
    │      └── port 6789, document root "."                              │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

The defaults reproduce the classic behavior: listen on port 6789 and
serve files relative to the process's working directory.

=============================================================================
"""

import os
from dataclasses import dataclass, field
from typing import Dict, Optional


LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
LOG_FORMATS = ("text", "json")


@dataclass
class ServerConfig:
    """
    Configuration for the file server.

    =========================================================================
    CONFIGURATION GROUPS
    =========================================================================

    NETWORK SETTINGS
    - host, port, backlog, timeout

    HTTP SETTINGS
    - max_line_size, max_headers, reject_malformed

    CONTENT
    - document_root, redirects

    LOGGING
    - log_level, log_format

    =========================================================================
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    host: str = "127.0.0.1"
    """
    The IP address to bind to.
    - "127.0.0.1" - Localhost only
    - "0.0.0.0" - All network interfaces (containers)
    """

    port: int = 6789
    """
    The port number to listen on. 0 lets the OS pick a free port.
    """

    backlog: int = 128
    """
    Maximum number of queued connections before the OS refuses new ones.
    """

    timeout: Optional[float] = 30.0
    """
    Per-connection socket timeout in seconds.
    None = block forever on a silent client.
    """

    # ─────────────────────────────────────────────────────────────────────
    # HTTP SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    max_line_size: int = 64 * 1024
    """
    Longest request line or header line accepted, in bytes.
    """

    max_headers: int = 100
    """
    Maximum number of header lines in one request.
    """

    reject_malformed: bool = False
    """
    Answer malformed requests with 400 Bad Request instead of just
    closing the connection.
    """

    # ─────────────────────────────────────────────────────────────────────
    # CONTENT
    # ─────────────────────────────────────────────────────────────────────

    document_root: str = "."
    """
    Directory that request targets are resolved against.
    """

    redirects: Dict[str, str] = field(default_factory=dict)
    """
    Extra redirect entries (path -> destination) merged over the
    built-in aliases for /index.html.
    """

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    """
    Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
    """

    log_format: str = "text"
    """
    Access log format: 'text' (Apache style) or 'json'.
    """

    server_name: str = "PyFileServer/1.0"
    """
    Value of the Server response header.
    """

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """
        Create configuration from environment variables.

        =====================================================================
        ENVIRONMENT VARIABLES
        =====================================================================

        FILESERVER_HOST       Server host (default: 127.0.0.1)
        FILESERVER_PORT       Server port (default: 6789)
        FILESERVER_ROOT       Document root (default: .)
        FILESERVER_TIMEOUT    Socket timeout in seconds, 0 = none (default: 30)
        FILESERVER_LOG_LEVEL  Logging level (default: INFO)

        =====================================================================
        """
        timeout = float(os.getenv("FILESERVER_TIMEOUT", "30"))
        return cls(
            host=os.getenv("FILESERVER_HOST", "127.0.0.1"),
            port=int(os.getenv("FILESERVER_PORT", "6789")),
            document_root=os.getenv("FILESERVER_ROOT", "."),
            timeout=timeout or None,
            log_level=os.getenv("FILESERVER_LOG_LEVEL", "INFO"),
        )

    def validate(self) -> None:
        """
        Validate configuration values.

        Called once at startup so a bad value stops the server before
        it binds a socket, not halfway through serving a request.
        """
        if not 0 <= self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")

        if not os.path.isdir(self.document_root):
            raise ValueError(f"Document root is not a directory: {self.document_root}")

        if self.backlog < 1:
            raise ValueError("backlog must be >= 1")

        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("timeout must be > 0")

        if self.max_line_size < 1024:
            raise ValueError("max_line_size must be >= 1024")

        if self.max_headers < 1:
            raise ValueError("max_headers must be >= 1")

        if self.log_level.upper() not in LOG_LEVELS:
            raise ValueError(f"Unknown log level: {self.log_level}")

        if self.log_format not in LOG_FORMATS:
            raise ValueError(f"Unknown log format: {self.log_format}")

        for path, destination in self.redirects.items():
            if not path.startswith("/") or not destination:
                raise ValueError(f"Invalid redirect: {path!r} -> {destination!r}")
