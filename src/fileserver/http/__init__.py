"""
=============================================================================
HTTP PROTOCOL LAYER
=============================================================================

Everything that knows about HTTP message syntax, and nothing that knows
about sockets or the filesystem:

    request.py       raw bytes → HTTPRequest
    response.py      HTTPResponse → raw bytes
    status_codes.py  HTTPStatus enum
    mime_types.py    Content-Type classification
    router.py        method → handler dispatch

=============================================================================
"""

from .request import HTTPRequest, RequestParser, HTTPParseError, Method, Version, parse_request
from .response import (
    HTTPResponse,
    error_response,
    bad_request,    # 400 Bad Request
    forbidden,      # 403 Forbidden
    not_found,      # 404 Not Found
    internal_error, # 500 Internal Server Error
)
from .router import Router, reject_method
from .status_codes import HTTPStatus
from .mime_types import (
    ContentTypeClassifier,
    ExtensionClassifier,
    SniffingClassifier,
    get_mime_type,
)

__all__ = [
    # Request parsing
    "HTTPRequest",
    "RequestParser",
    "HTTPParseError",
    "Method",
    "Version",
    "parse_request",

    # Response building
    "HTTPResponse",
    "error_response",
    "bad_request",
    "forbidden",
    "not_found",
    "internal_error",

    # Routing
    "Router",
    "reject_method",

    # Status codes
    "HTTPStatus",

    # Content types
    "ContentTypeClassifier",
    "ExtensionClassifier",
    "SniffingClassifier",
    "get_mime_type",
]
