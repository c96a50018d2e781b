"""
=============================================================================
HTTP PROTOCOL COMPONENTS
=============================================================================

    request.py       Request head parsing (RequestParser, Request)
    outcomes.py      Redirect / NotFound / Serve resolution outcomes
    response.py      Response framing and writing (ResponseWriter)
    status_codes.py  HTTPStatus enum
    mime_types.py    Content-Type detection

=============================================================================
"""

from .request import (
    Request,
    RequestParser,
    RequestError,
    EmptyRequest,
    MalformedRequest,
    parse_request,
)
from .outcomes import Redirect, NotFound, Serve, ResolutionOutcome
from .response import (
    HTTPResponse,
    ResponseWriter,
    NOT_FOUND_PAGE,
    build_response,
    redirect,
    not_found,
    file_response,
    bad_request,
)
from .status_codes import HTTPStatus
from .mime_types import get_mime_type, sniff_content_type

__all__ = [
    # Request parsing
    "Request",
    "RequestParser",
    "RequestError",
    "EmptyRequest",
    "MalformedRequest",
    "parse_request",

    # Resolution outcomes
    "Redirect",
    "NotFound",
    "Serve",
    "ResolutionOutcome",

    # Response writing
    "HTTPResponse",
    "ResponseWriter",
    "NOT_FOUND_PAGE",
    "build_response",
    "redirect",
    "not_found",
    "file_response",
    "bad_request",

    # Status codes
    "HTTPStatus",

    # Content types
    "get_mime_type",
    "sniff_content_type",
]
