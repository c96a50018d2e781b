"""
=============================================================================
CONNECTION MANAGEMENT
=============================================================================

Wraps one accepted client socket with buffered byte streams and a close
that runs exactly once.

=============================================================================
TCP IS A BYTE STREAM, NOT A MESSAGE PROTOCOL
=============================================================================

A single recv() may return half a request line, or the request line and
all the headers at once. Rather than buffering by hand we let the socket
hand out file objects:

    rfile = sock.makefile("rb")     # buffered reader, has readline()
    wfile = sock.makefile("wb")     # buffered writer, needs flush()

The request parser reads line by line from rfile; the response writer
writes into wfile and flushes.

=============================================================================
LIFECYCLE
=============================================================================

    NEW ──► READING ──────────────► CLOSED
               (parse, resolve, write; or bail out on an empty
                request, a malformed request, an I/O error)

Whatever path a connection takes, close() is reached through the context
manager and releases the two file objects and the socket once.

=============================================================================
"""

import socket
import time
import logging
import threading
from enum import Enum
from dataclasses import dataclass, field
from typing import BinaryIO, Optional
import uuid


logger = logging.getLogger(__name__)


class ConnectionState(Enum):
    """Where a connection is in its single request/response exchange."""
    NEW = "new"
    READING = "reading"
    CLOSED = "closed"


@dataclass
class Connection:
    """
    Represents a client connection.

    Attributes:
        socket: The client socket.
        address: Client's (ip, port) tuple.
        id: Short unique identifier for log lines.
        state: Current connection state.
        created_at: Timestamp when the connection was accepted.
        rfile: Buffered binary reader over the socket.
        wfile: Buffered binary writer over the socket.
    """

    socket: socket.socket
    address: tuple[str, int]

    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.NEW
    created_at: float = field(default_factory=time.time)

    timeout: Optional[float] = 30.0

    rfile: Optional[BinaryIO] = field(default=None, repr=False)
    wfile: Optional[BinaryIO] = field(default=None, repr=False)
    _close_lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def __post_init__(self):
        """
        Configure the socket and open its streams.

        A timeout of None leaves the socket fully blocking.
        """
        self.socket.settimeout(self.timeout)

        if self.rfile is None:
            self.rfile = self.socket.makefile("rb")
        if self.wfile is None:
            self.wfile = self.socket.makefile("wb")

    @property
    def client_ip(self) -> str:
        return self.address[0] if self.address else ""

    @property
    def age(self) -> float:
        """Connection age in seconds."""
        return time.time() - self.created_at

    @property
    def is_closed(self) -> bool:
        return self.state == ConnectionState.CLOSED

    def close(self):
        """
        Close the connection gracefully.

        ┌─────────────────────────────────────────────────────────────────┐
        │                    Close Sequence                                │
        ├─────────────────────────────────────────────────────────────────┤
        │                                                                  │
        │   1. flush + close wfile      anything still buffered goes out  │
        │   2. close rfile              drop read buffer                  │
        │   3. shutdown(SHUT_RDWR)      send FIN to the client            │
        │   4. close()                  release the file descriptor       │
        │                                                                  │
        └─────────────────────────────────────────────────────────────────┘

        Safe to call more than once and from more than one thread; only
        the first call does anything.
        """
        with self._close_lock:
            if self.state == ConnectionState.CLOSED:
                return
            self.state = ConnectionState.CLOSED

        for stream in (self.wfile, self.rfile):
            if stream is None:
                continue
            try:
                stream.close()
            except OSError as e:
                # Flushing into a reset connection; nothing left to do
                logger.debug(f"[{self.id}] Stream close failed: {e}")

        try:
            self.socket.shutdown(socket.SHUT_RDWR)
        except OSError:
            pass  # Peer already gone

        try:
            self.socket.close()
        except OSError:
            pass

        logger.debug(f"[{self.id}] Connection closed after {self.age:.3f}s")

    # =========================================================================
    # CONTEXT MANAGER: For use with 'with' statement
    # =========================================================================

    def __enter__(self):
        """
        Allows automatic cleanup:

            with conn:
                request = parser.parse(conn.rfile)
                writer.write(outcome, conn.wfile)
            # Connection closed here, on every exit path
        """
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False  # Don't suppress exceptions
