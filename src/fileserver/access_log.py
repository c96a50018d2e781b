"""
=============================================================================
ACCESS LOGGING
=============================================================================

One log record per answered request, written to the "fileserver.access"
logger so it can be routed separately from diagnostic logs:

    logging.getLogger("fileserver.access").addHandler(file_handler)

Two formats:

    text   127.0.0.1 - - [2026-10-19T12:00:00+00:00] "GET /index.html HTTP/1.1" 200 5120 0.84ms
    json   {"client_ip": "127.0.0.1", "method": "GET", "target": "/index.html", ...}

Requests that were never answered (empty or malformed without a 400)
are not access-logged; the connection handler logs those itself.

=============================================================================
"""

import json
import logging
from dataclasses import dataclass, asdict
from datetime import datetime, timezone


logger = logging.getLogger("fileserver.access")


@dataclass
class RequestLog:
    """Structured log entry for one request/response exchange."""

    connection_id: str
    client_ip: str
    method: str
    target: str
    version: str
    status_code: int
    content_length: int
    duration_ms: float
    timestamp: str

    def to_dict(self) -> dict:
        data = asdict(self)
        data["duration_ms"] = round(self.duration_ms, 2)
        return data

    def to_text(self) -> str:
        """Apache common-log style line."""
        return (
            f'{self.client_ip or "-"} - - [{self.timestamp}] '
            f'"{self.method} {self.target} {self.version}" {self.status_code} '
            f'{self.content_length} {self.duration_ms:.2f}ms'
        )


class AccessLogger:
    """
    Emits RequestLog records.

    Error responses (4xx) are logged at WARNING so they stand out,
    everything else at INFO.
    """

    def __init__(self, log_format: str = "text"):
        if log_format not in ("text", "json"):
            raise ValueError(f"Unknown access log format: {log_format}")
        self.log_format = log_format

    def log(
        self,
        *,
        connection_id: str,
        client_ip: str,
        method: str,
        target: str,
        version: str,
        status_code: int,
        content_length: int,
        duration_ms: float,
    ) -> RequestLog:
        entry = RequestLog(
            connection_id=connection_id,
            client_ip=client_ip,
            method=method,
            target=target,
            version=version,
            status_code=status_code,
            content_length=content_length,
            duration_ms=duration_ms,
            timestamp=datetime.now(timezone.utc).isoformat(timespec="seconds"),
        )

        if self.log_format == "json":
            message = json.dumps(entry.to_dict())
        else:
            message = entry.to_text()

        level = logging.WARNING if status_code >= 400 else logging.INFO
        logger.log(level, message)
        return entry
