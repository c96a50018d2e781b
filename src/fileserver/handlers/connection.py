"""
=============================================================================
CONNECTION HANDLER
=============================================================================

Runs the single request/response exchange of one connection.

=============================================================================
PIPELINE
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                  ConnectionHandler.handle(conn)                      │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   with conn:                          ← closed on EVERY path        │
    │       │                                                              │
    │       ├──► RequestParser.parse(rfile)                               │
    │       │       ├── EmptyRequest      → close, say nothing            │
    │       │       └── MalformedRequest  → close (or 400 first)          │
    │       │                                                              │
    │       ├──► ResourceResolver.resolve(target)                         │
    │       │       └── Redirect | NotFound | Serve                       │
    │       │                                                              │
    │       ├──► ResponseWriter.write(outcome, wfile)                     │
    │       │                                                              │
    │       └──► AccessLogger.log(...)                                    │
    │                                                                      │
    │   OSError anywhere (IOFailure, reset, timeout) → log, close         │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Nothing raised while serving one connection ever reaches the accept loop
or another connection's thread.

=============================================================================
"""

import time
import logging
from typing import BinaryIO, Optional

from ..access_log import AccessLogger
from ..core.connection import Connection, ConnectionState
from ..http.request import EmptyRequest, MalformedRequest, RequestParser
from ..http.response import HTTPResponse, ResponseWriter, bad_request
from .static import ResourceResolver


logger = logging.getLogger(__name__)


class ConnectionHandler:
    """
    Serves one request per connection.

    A handler is stateless between connections: every piece of state
    it creates (Request, outcome, response bytes) lives on the calling
    thread's stack. One instance is shared by all connection threads.

    Usage:
        handler = ConnectionHandler(resolver)
        socket_server.start(handler.handle)
    """

    def __init__(
        self,
        resolver: ResourceResolver,
        parser: Optional[RequestParser] = None,
        writer: Optional[ResponseWriter] = None,
        access_logger: Optional[AccessLogger] = None,
        reject_malformed: bool = False,
    ):
        """
        Args:
            resolver: Maps targets to outcomes.
            parser: Request parser; default limits if omitted.
            writer: Response writer; default Server header if omitted.
            access_logger: Access log sink; text format if omitted.
            reject_malformed: Send 400 Bad Request before closing on a
                              malformed request instead of closing silently.
        """
        self.resolver = resolver
        self.parser = parser or RequestParser()
        self.writer = writer or ResponseWriter()
        self.access_logger = access_logger or AccessLogger()
        self.reject_malformed = reject_malformed

    def handle(self, conn: Connection) -> None:
        """
        Serve `conn` and close it.

        Runs on the connection's own thread. Never raises.
        """
        with conn:
            conn.state = ConnectionState.READING
            try:
                self.serve(conn.rfile, conn.wfile, connection_id=conn.id, client_ip=conn.client_ip)
            except OSError as e:
                # IOFailure, resets, broken pipes, socket timeouts
                logger.error(f"[{conn.id}] I/O failure: {e}")
            except Exception as e:
                logger.exception(f"[{conn.id}] Unexpected error: {e}")

    def serve(
        self,
        rfile: BinaryIO,
        wfile: BinaryIO,
        connection_id: str = "-",
        client_ip: str = "",
    ) -> Optional[HTTPResponse]:
        """
        Run the exchange over a pair of binary streams.

        Returns:
            The response written, or None if nothing was sent.

        Raises:
            OSError: Reading, resolving (IOFailure) or writing failed.
        """
        started = time.perf_counter()

        # ─────────────────────────────────────────────────────────────────
        # PARSE
        # ─────────────────────────────────────────────────────────────────
        try:
            request = self.parser.parse(rfile)
        except EmptyRequest:
            logger.debug(f"[{connection_id}] Empty request, closing")
            return None
        except MalformedRequest as e:
            logger.info(f"[{connection_id}] Malformed request from {client_ip or '-'}: {e}")
            if not self.reject_malformed:
                return None
            response = bad_request()
            self.writer.write_response(response, wfile)
            self._log_access(connection_id, client_ip, "-", "-", "-", response, started)
            return response

        # ─────────────────────────────────────────────────────────────────
        # RESOLVE + WRITE
        # ─────────────────────────────────────────────────────────────────
        outcome = self.resolver.resolve(request.target)
        response = self.writer.write(outcome, wfile)

        self._log_access(
            connection_id, client_ip,
            request.method, request.target, request.version,
            response, started,
        )
        return response

    def _log_access(self, connection_id, client_ip, method, target, version, response, started):
        self.access_logger.log(
            connection_id=connection_id,
            client_ip=client_ip,
            method=method,
            target=target,
            version=version,
            status_code=int(response.status),
            content_length=len(response.body),
            duration_ms=(time.perf_counter() - started) * 1000,
        )
