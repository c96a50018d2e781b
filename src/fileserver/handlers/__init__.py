"""
=============================================================================
HANDLERS
=============================================================================

1. ResourceResolver / RedirectTable  (static.py)
   - Redirect table lookup, then document-root lookup
   - Path traversal protection
   - Whole-file reads with content-type sniffing

2. ConnectionHandler  (connection.py)
   - One request/response exchange per connection
   - Closes the connection on every path, logs failures

=============================================================================
USAGE
=============================================================================

    from fileserver.handlers import ConnectionHandler, ResourceResolver, RedirectTable

    resolver = ResourceResolver("./public", RedirectTable({"/home": "/index.html"}))
    handler = ConnectionHandler(resolver)
    socket_server.start(handler.handle)

=============================================================================
"""

from .static import ResourceResolver, RedirectTable, IOFailure, DEFAULT_REDIRECTS
from .connection import ConnectionHandler

__all__ = [
    "ResourceResolver",
    "RedirectTable",
    "IOFailure",
    "DEFAULT_REDIRECTS",
    "ConnectionHandler",
]
