"""
=============================================================================
HTTP STATUS CODES
=============================================================================

The small set of status codes this server can produce.

A file server has very few outcomes, so we do not carry the whole IANA
registry. Every code listed here is reachable from some code path:

    ┌────────┬────────────────────────────────┬──────────────────────────────┐
    │  Code  │  Phrase                        │  Produced by                 │
    ├────────┼────────────────────────────────┼──────────────────────────────┤
    │  200   │  OK                            │  file, listing, POST echo    │
    │  400   │  Bad Request                   │  parse failure, bad method   │
    │  403   │  Forbidden                     │  traversal, EACCES           │
    │  404   │  Not Found                     │  missing path                │
    │  408   │  Request Timeout               │  client stalled mid-request  │
    │  413   │  Payload Too Large             │  request over the limit      │
    │  431   │  Request Header Fields Too ... │  header block over the limit │
    │  500   │  Internal Server Error         │  other I/O errors            │
    │  503   │  Service Unavailable           │  worker queue is full        │
    └────────┴────────────────────────────────┴──────────────────────────────┘

The status line is always rendered as:

    HTTP/1.1 404 Not Found
    ──┬───── ─┬─ ────┬────
      │       │      └── phrase (fixed per code)
      │       └───────── code
      └───────────────── version echoed from the request

=============================================================================
"""

from enum import IntEnum


class HTTPStatus(IntEnum):
    """
    HTTP status codes used by the file server.

    IntEnum lets a member compare equal to its number:

        >>> HTTPStatus.NOT_FOUND == 404
        True
        >>> HTTPStatus.NOT_FOUND.phrase
        'Not Found'
    """

    # 2xx SUCCESS
    OK = 200

    # 4xx CLIENT ERRORS
    BAD_REQUEST = 400
    FORBIDDEN = 403
    NOT_FOUND = 404
    REQUEST_TIMEOUT = 408
    PAYLOAD_TOO_LARGE = 413
    REQUEST_HEADER_FIELDS_TOO_LARGE = 431

    # 5xx SERVER ERRORS
    INTERNAL_SERVER_ERROR = 500
    SERVICE_UNAVAILABLE = 503

    @property
    def phrase(self) -> str:
        """Reason phrase that follows the code in the status line."""
        return _STATUS_PHRASES[self]

    @property
    def is_success(self) -> bool:
        return 200 <= self < 300

    @property
    def is_client_error(self) -> bool:
        return 400 <= self < 500

    @property
    def is_server_error(self) -> bool:
        return 500 <= self < 600

    @property
    def is_error(self) -> bool:
        return self >= 400


_STATUS_PHRASES = {
    HTTPStatus.OK: "OK",
    HTTPStatus.BAD_REQUEST: "Bad Request",
    HTTPStatus.FORBIDDEN: "Forbidden",
    HTTPStatus.NOT_FOUND: "Not Found",
    HTTPStatus.REQUEST_TIMEOUT: "Request Timeout",
    HTTPStatus.PAYLOAD_TOO_LARGE: "Payload Too Large",
    HTTPStatus.REQUEST_HEADER_FIELDS_TOO_LARGE: "Request Header Fields Too Large",
    HTTPStatus.INTERNAL_SERVER_ERROR: "Internal Server Error",
    HTTPStatus.SERVICE_UNAVAILABLE: "Service Unavailable",
}
