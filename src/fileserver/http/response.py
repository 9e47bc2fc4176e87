"""
=============================================================================
HTTP RESPONSE BUILDER
=============================================================================

Accumulates a status, headers and a body, then serializes them to the
bytes written back to the client.

=============================================================================
RESPONSE LIFECYCLE
=============================================================================

    Handler                         HTTPResponse                  Socket
    ───────                         ────────────                  ──────

    HTTPResponse(version,     ──►   accept-ranges: bytes
                 status, path)      (set on construction)
         │
    .add_header("Content-Type",──►  content-type: text/html
                "text/html")        (name lowercased, overwrites)
         │
    .set_body(b"<html>...")    ──►  content-length: 13
                                    (recomputed on every set_body)
         │
    .to_bytes()                ─────────────────────────────────►  sendall()

=============================================================================
INVARIANTS
=============================================================================

    1. Header names are stored lowercase. add_header("X-A", ..) followed
       by add_header("x-a", ..) leaves ONE entry.
    2. content-length always equals len(body) after set_body().
    3. accept-ranges: bytes is present on every response, even though
       range requests are never honoured.

Header order in the serialized output follows insertion order, but
clients must not rely on it.

=============================================================================
"""

from dataclasses import dataclass, field
from typing import Dict, Union

from .request import Version
from .status_codes import HTTPStatus


@dataclass
class HTTPResponse:
    """
    An HTTP response under construction.

    Handlers mutate it while building (add headers, set the body), the
    server serializes it once with to_bytes() and then discards it.

    Attributes:
        version: Echoed from the request (HTTP/1.1 when the request
                 could not be parsed).
        status:  HTTPStatus member.
        path:    Filesystem or route path the response was built for.
                 Diagnostic only, never sent to the client.
        headers: Lowercase header name → value.
        body:    Raw body bytes.
    """

    version: Version = Version.HTTP_1_1
    status: HTTPStatus = HTTPStatus.OK
    path: str = ""
    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""

    def __post_init__(self):
        self.path = self.path.lstrip("/")

        # Normalize anything passed to the constructor
        given = self.headers
        self.headers = {}
        for name, value in given.items():
            self.add_header(name, value)

        self.add_header("Accept-Ranges", "bytes")

    @property
    def status_line(self) -> str:
        """
        Format: VERSION SP CODE SP PHRASE
        Example: "HTTP/1.1 404 Not Found"
        """
        return f"{self.version} {int(self.status)} {self.status.phrase}"

    @property
    def content_length(self) -> int:
        return int(self.headers.get("content-length", "0"))

    def add_header(self, name: str, value: str) -> "HTTPResponse":
        """
        Set a header, replacing any earlier value with the same name.

        Args:
            name: Header name, any case. Stored lowercase.
            value: Header value.

        Returns:
            Self for method chaining
        """
        self.headers[name.lower()] = value
        return self

    def set_body(self, body: Union[str, bytes]) -> "HTTPResponse":
        """
        Replace the body and recompute content-length.

        Strings are encoded as UTF-8 first, so the header counts bytes,
        not characters.

        Returns:
            Self for method chaining
        """
        if isinstance(body, str):
            body = body.encode("utf-8")
        self.body = bytes(body)
        self.add_header("Content-Length", str(len(self.body)))
        return self

    def to_bytes(self) -> bytes:
        """
        Serialize the response for the wire.

            HTTP/1.1 200 OK\\r\\n              ← status line
            accept-ranges: bytes\\r\\n
            content-type: text/html\\r\\n
            content-length: 13\\r\\n
            \\r\\n                             ← blank line
            <html>...</html>                  ← body, no terminator added

        Returns:
            Complete response bytes ready for socket.sendall()
        """
        lines = [self.status_line]
        for name, value in self.headers.items():
            lines.append(f"{name}: {value}")

        head = ("\r\n".join(lines) + "\r\n\r\n").encode("utf-8")
        return head + self.body

    def describe(self) -> str:
        """One-line summary for debug logging."""
        return (
            f"HTTPResponse(version={self.version}, status={int(self.status)}, "
            f"content_length={self.headers.get('content-length', '0')}, "
            f"accept_ranges={self.headers.get('accept-ranges', 'none')}, "
            f"body=<{len(self.body)} bytes>, path={self.path!r})"
        )


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================
#
# Error responses share a shape: plain-text body, content-type set, the
# status phrase as a fallback message.
#
#     return not_found("File not found", request.version, path)
#
# =============================================================================

def error_response(
    status: HTTPStatus,
    message: str = "",
    version: Version = Version.HTTP_1_1,
    path: str = "",
) -> HTTPResponse:
    """
    Build an error response with a plain-text body.

    Args:
        status: Error status.
        message: Body text. Empty string → empty body.
        version: Version to echo.
        path: Diagnostic path.
    """
    response = HTTPResponse(version=version, status=status, path=path)
    if message:
        response.add_header("Content-Type", "text/plain")
    response.set_body(message)
    return response


def bad_request(version: Version = Version.HTTP_1_1, path: str = "") -> HTTPResponse:
    """400 with an empty body. Parse failures never explain themselves."""
    return error_response(HTTPStatus.BAD_REQUEST, "", version, path)


def forbidden(
    message: str = "Forbidden",
    version: Version = Version.HTTP_1_1,
    path: str = "",
) -> HTTPResponse:
    return error_response(HTTPStatus.FORBIDDEN, message, version, path)


def not_found(
    message: str = "Not Found",
    version: Version = Version.HTTP_1_1,
    path: str = "",
) -> HTTPResponse:
    return error_response(HTTPStatus.NOT_FOUND, message, version, path)


def internal_error(
    message: str = "Internal Server Error",
    version: Version = Version.HTTP_1_1,
    path: str = "",
) -> HTTPResponse:
    return error_response(HTTPStatus.INTERNAL_SERVER_ERROR, message, version, path)
