"""
=============================================================================
CORE NETWORKING COMPONENTS
=============================================================================

Socket-level building blocks, independent of HTTP:

    SocketServer   Listening socket, accept loop, one thread per client
    Connection     Accepted client socket with rfile/wfile streams and a
                   close that runs exactly once

=============================================================================
"""

from .socket_server import SocketServer
from .connection import Connection, ConnectionState

__all__ = [
    "SocketServer",     # Accepts connections, spawns a thread for each
    "Connection",       # Wrapper for client socket - streams and close
    "ConnectionState",  # Enum for connection lifecycle states
]
