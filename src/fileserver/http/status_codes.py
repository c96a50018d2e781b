"""
=============================================================================
HTTP STATUS CODES
=============================================================================

The handful of status codes this server can answer with.

    ┌───────────┬──────────────────────────────────────────────────────────┐
    │   Code    │  When                                                    │
    ├───────────┼──────────────────────────────────────────────────────────┤
    │  200      │  Target is a regular file under the document root       │
    │  301      │  Target is a key of the redirect table                  │
    │  400      │  Malformed request (only with reject_malformed)         │
    │  404      │  Anything else                                          │
    └───────────┴──────────────────────────────────────────────────────────┘

=============================================================================
"""

from enum import IntEnum


class HTTPStatus(IntEnum):
    """
    HTTP status codes and reason phrases.

    Extends IntEnum, so members compare equal to plain integers:

        >>> HTTPStatus.OK == 200
        True
        >>> HTTPStatus.MOVED_PERMANENTLY.phrase
        'Moved Permanently'
    """

    OK = 200
    MOVED_PERMANENTLY = 301
    BAD_REQUEST = 400
    NOT_FOUND = 404

    @property
    def phrase(self) -> str:
        """Reason phrase used in the status line."""
        return _PHRASES.get(self, "Unknown")


_PHRASES = {
    HTTPStatus.OK: "OK",
    HTTPStatus.MOVED_PERMANENTLY: "Moved Permanently",
    HTTPStatus.BAD_REQUEST: "Bad Request",
    HTTPStatus.NOT_FOUND: "Not Found",
}
