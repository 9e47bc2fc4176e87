"""
=============================================================================
HTTP REQUEST PARSER
=============================================================================

Turns the raw bytes read from a client socket into an HTTPRequest.

=============================================================================
WHAT WE ACCEPT
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     REQUEST AS THE PARSER SEES IT                   │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   GET /docs/a%20b.txt HTTP/1.1\r\n     ◄── request line             │
    │   ─┬─ ───────┬─────── ────┬───                                      │
    │    │         │            └── exactly "HTTP/1.1" or "HTTP/2.0"       │
    │    │         └── target, ONE leading "/" stripped → route            │
    │    └── any case, must be a known method                              │
    │                                                                      │
    │   Host: localhost:5500\r\n             ◄── "Name: Value" lines       │
    │   User-Agent: curl/8.0\r\n                 (colon required!)         │
    │   \r\n                                 ◄── blank line ends headers   │
    │   name=value                           ◄── body: everything after   │
    │                                            the first \r\n\r\n        │
    └─────────────────────────────────────────────────────────────────────┘

Header names are kept exactly as the client sent them. When the same name
appears twice, the later value replaces the earlier one.

=============================================================================
WHAT WE REJECT
=============================================================================

Every failure raises HTTPParseError and the server answers 400. We never
guess: one bad header line rejects the whole request rather than being
skipped.

    - request line without exactly three whitespace-separated tokens
    - unknown method token          ("FOOBAR / HTTP/1.1")
    - unknown version token         ("GET / HTTP/1.0", "GET / http/1.1")
    - no CRLF anywhere in the input (header section cannot be located)
    - header line without a colon   ("X-Broken-Header\r\n")

=============================================================================
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional, Union


class HTTPParseError(Exception):
    """
    Raised when a request cannot be parsed.

    Carries the HTTP status the client should receive. Every parse
    failure in this server maps to 400 Bad Request.
    """

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.status_code = status_code


class Method(Enum):
    """HTTP request methods recognised by the parser."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"
    TRACE = "TRACE"
    CONNECT = "CONNECT"
    PATCH = "PATCH"

    @classmethod
    def from_token(cls, token: str) -> "Method":
        """
        Look up a method token, ignoring case.

        "get", "Get" and "GET" all map to Method.GET.

        Raises:
            HTTPParseError: If the token is not a known method.
        """
        try:
            return cls(token.upper())
        except ValueError:
            raise HTTPParseError(f"Invalid method: {token}") from None

    def __str__(self) -> str:
        return self.value


class Version(Enum):
    """Protocol version tokens. Only echoed back in the status line."""

    HTTP_1_1 = "HTTP/1.1"
    HTTP_2_0 = "HTTP/2.0"

    @classmethod
    def from_token(cls, token: str) -> "Version":
        """
        Look up a version token. The match is exact and case-sensitive.

        Raises:
            HTTPParseError: If the token is not "HTTP/1.1" or "HTTP/2.0".
        """
        try:
            return cls(token)
        except ValueError:
            raise HTTPParseError(f"Unsupported HTTP version: {token}") from None

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class HTTPRequest:
    """
    A parsed HTTP request.

    Created once per connection and never modified afterwards.

    Attributes:
        method:         Parsed Method enum member.
        route:          Request target with one leading "/" removed.
                        Still percent-encoded; the path resolver decodes it.
        version:        Version token from the request line.
        headers:        Header name → value, names as received.
        body:           Everything after the first blank line.
        client_address: (ip, port) of the peer, for logging only.
    """

    method: Method
    route: str
    version: Version = Version.HTTP_1_1
    headers: Dict[str, str] = field(default_factory=dict)
    body: str = ""
    client_address: tuple[str, int] = ("", 0)

    @property
    def path(self) -> str:
        """The route with its leading slash restored, for logs and links."""
        return "/" + self.route

    @property
    def user_agent(self) -> str:
        return self.get_header("User-Agent")

    def get_header(self, name: str, default: str = "") -> str:
        """
        Get a header value by name, ignoring case.

        Header names are stored as the client sent them, so the lookup
        walks the mapping. The last matching entry wins, mirroring how
        duplicates were stored.
        """
        wanted = name.lower()
        value: Optional[str] = None
        for key, candidate in self.headers.items():
            if key.lower() == wanted:
                value = candidate
        return default if value is None else value


class RequestParser:
    """
    Parses raw request data into HTTPRequest objects.

    The parser is stateless; one instance can be shared by every worker
    thread.

        Raw bytes
            │
            ▼  decode UTF-8 (invalid sequences become U+FFFD)
        Text
            │
            ├──► first line   → method, route, version
            ├──► after CRLF   → header lines until the blank line
            └──► after CRLFCRLF → body
            │
            ▼
        HTTPRequest
    """

    def parse(
        self,
        data: Union[bytes, str],
        client_address: tuple[str, int] = ("", 0),
    ) -> HTTPRequest:
        """
        Parse a complete request.

        Args:
            data: Raw request bytes (or already-decoded text).
            client_address: Peer (ip, port), stored for logging.

        Returns:
            The parsed HTTPRequest.

        Raises:
            HTTPParseError: If the request is malformed.
        """
        if isinstance(data, bytes):
            text = data.decode("utf-8", errors="replace")
        else:
            text = data

        if not text:
            raise HTTPParseError("Empty request")

        method, route, version = self._parse_request_line(text)
        headers = self._parse_headers(text)

        # ─────────────────────────────────────────────────────────────────
        # BODY
        # ─────────────────────────────────────────────────────────────────
        # Everything after the first CRLFCRLF. No separator means the body
        # starts at end-of-buffer, i.e. it is empty.
        body_start = text.find("\r\n\r\n")
        body = text[body_start + 4:] if body_start != -1 else ""

        return HTTPRequest(
            method=method,
            route=route,
            version=version,
            headers=headers,
            body=body,
            client_address=client_address,
        )

    def _parse_request_line(self, text: str) -> tuple[Method, str, Version]:
        """
        Parse "METHOD TARGET VERSION" from the first line.

        The first line ends at the first LF; a trailing CR is dropped.
        """
        first_line = text.split("\n", 1)[0]
        if first_line.endswith("\r"):
            first_line = first_line[:-1]

        parts = first_line.split()
        if len(parts) != 3:
            raise HTTPParseError(f"Invalid request line: {first_line!r}")

        method_token, target, version_token = parts

        method = Method.from_token(method_token)
        # Exactly one slash: "//etc" keeps its second slash for the resolver
        route = target[1:] if target.startswith("/") else target
        version = Version.from_token(version_token)

        return method, route, version

    def _parse_headers(self, text: str) -> Dict[str, str]:
        """
        Parse header lines into a dictionary.

        Headers start after the first CRLF and run until the first empty
        line (or the end of the input).

        Raises:
            HTTPParseError: If there is no CRLF at all, or a header line
                            has no colon.
        """
        if "\r\n" not in text:
            raise HTTPParseError("Incomplete request: no line terminator")

        header_section = text.split("\r\n", 1)[1]
        headers: Dict[str, str] = {}

        for line in header_section.split("\r\n"):
            if not line:
                break
            if ":" not in line:
                raise HTTPParseError(f"Malformed header line: {line!r}")

            name, value = line.split(":", 1)
            headers[name.strip()] = value.strip()

        return headers


def parse_request(
    data: Union[bytes, str],
    client_address: tuple[str, int] = ("", 0),
) -> HTTPRequest:
    """
    Parse a request in one call.

    Convenience wrapper around RequestParser for tests and one-off use.
    """
    return RequestParser().parse(data, client_address)
