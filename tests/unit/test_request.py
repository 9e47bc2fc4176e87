"""
Unit tests for HTTP request parsing.
"""

import pytest

from fileserver.http.request import (
    HTTPRequest,
    RequestParser,
    HTTPParseError,
    Method,
    Version,
    parse_request,
)


class TestRequestParser:
    """Tests for RequestParser class."""

    def test_parse_simple_get(self, sample_get_request: bytes):
        parser = RequestParser()
        request = parser.parse(sample_get_request, ("127.0.0.1", 12345))

        assert request.method is Method.GET
        assert request.route == "docs/guide.txt"
        assert request.path == "/docs/guide.txt"
        assert request.version is Version.HTTP_1_1
        assert request.client_address == ("127.0.0.1", 12345)

    def test_parse_headers(self, sample_get_request: bytes):
        request = parse_request(sample_get_request)

        assert request.headers["Host"] == "localhost:5500"
        assert request.user_agent == "pytest"
        assert request.headers["Accept"] == "*/*"

    def test_parse_post_with_body(self, sample_post_request: bytes):
        request = parse_request(sample_post_request)

        assert request.method is Method.POST
        assert request.route == "submit"
        assert request.body == "name=John&note=hi"

    def test_root_route_is_empty(self):
        request = parse_request(b"GET / HTTP/1.1\r\n\r\n")

        assert request.route == ""
        assert request.path == "/"
        assert request.headers == {}
        assert request.body == ""

    def test_duplicate_header_last_wins(self):
        request = parse_request(b"GET / HTTP/1.1\r\nA: 1\r\nA: 2\r\n\r\n")

        assert request.headers == {"A": "2"}
        assert request.get_header("a") == "2"

    def test_no_blank_line_means_empty_body(self):
        request = parse_request(b"GET / HTTP/1.1\r\nA: 1")

        assert request.headers == {"A": "1"}
        assert request.body == ""

    def test_only_one_leading_slash_stripped(self):
        request = parse_request(b"GET //etc/passwd HTTP/1.1\r\n\r\n")
        assert request.route == "/etc/passwd"

    def test_route_kept_percent_encoded(self):
        request = parse_request(b"GET /a%20b/%2e%2e HTTP/1.1\r\n\r\n")
        assert request.route == "a%20b/%2e%2e"

    def test_method_is_case_insensitive(self):
        assert parse_request(b"get / HTTP/1.1\r\n\r\n").method is Method.GET
        assert parse_request(b"Post / HTTP/1.1\r\n\r\n").method is Method.POST

    @pytest.mark.parametrize("token", ["PUT", "DELETE", "HEAD", "OPTIONS", "TRACE", "CONNECT", "PATCH"])
    def test_other_methods_parse(self, token: str):
        request = parse_request(f"{token} / HTTP/1.1\r\n\r\n".encode())
        assert request.method is Method(token)

    def test_parse_http2_version(self):
        request = parse_request(b"GET / HTTP/2.0\r\n\r\n")
        assert request.version is Version.HTTP_2_0

    def test_parse_invalid_method(self):
        with pytest.raises(HTTPParseError) as exc_info:
            parse_request(b"FOOBAR / HTTP/1.1\r\n\r\n")

        assert exc_info.value.status_code == 400

    @pytest.mark.parametrize("version", [b"HTTP/1.0", b"http/1.1", b"HTTP/3"])
    def test_parse_unsupported_version(self, version: bytes):
        with pytest.raises(HTTPParseError):
            parse_request(b"GET / " + version + b"\r\n\r\n")

    @pytest.mark.parametrize("raw", [
        b"GET\r\n\r\n",
        b"GET /\r\n\r\n",
        b"GET / HTTP/1.1 extra\r\n\r\n",
        b"\r\n\r\n",
    ])
    def test_parse_invalid_request_line(self, raw: bytes):
        with pytest.raises(HTTPParseError):
            parse_request(raw)

    def test_parse_empty_request(self):
        with pytest.raises(HTTPParseError):
            parse_request(b"")

    def test_request_line_without_crlf_is_rejected(self):
        with pytest.raises(HTTPParseError):
            parse_request(b"GET / HTTP/1.1")

    def test_header_without_colon_is_rejected(self):
        with pytest.raises(HTTPParseError):
            parse_request(b"GET / HTTP/1.1\r\nNoColonHere\r\n\r\n")

    def test_header_value_keeps_later_colons(self):
        request = parse_request(b"GET / HTTP/1.1\r\nHost: localhost:5500\r\n\r\n")
        assert request.headers["Host"] == "localhost:5500"

    def test_header_whitespace_trimmed(self):
        request = parse_request(b"GET / HTTP/1.1\r\n  X-Thing :   value  \r\n\r\n")
        assert request.headers["X-Thing"] == "value"

    def test_headers_stop_at_blank_line(self):
        raw = b"POST / HTTP/1.1\r\nA: 1\r\n\r\nnot-a-header\r\nB: 2"
        request = parse_request(raw)

        assert request.headers == {"A": "1"}
        assert request.body == "not-a-header\r\nB: 2"

    def test_invalid_utf8_is_replaced(self):
        request = parse_request(b"POST / HTTP/1.1\r\n\r\n\xff\xfe")
        assert request.body == "\ufffd\ufffd"

    def test_parse_accepts_text(self):
        request = parse_request("GET /x HTTP/1.1\r\n\r\n")
        assert request.route == "x"


class TestHTTPRequest:
    """Tests for HTTPRequest dataclass."""

    def test_get_header_case_insensitive(self):
        request = HTTPRequest(method=Method.GET, route="", headers={"CONTENT-TYPE": "text/html"})

        assert request.get_header("Content-Type") == "text/html"
        assert request.get_header("content-type") == "text/html"

    def test_get_header_default(self):
        request = HTTPRequest(method=Method.GET, route="")

        assert request.get_header("X-Missing") == ""
        assert request.get_header("X-Missing", "default") == "default"

    def test_request_is_immutable(self):
        request = HTTPRequest(method=Method.GET, route="")

        with pytest.raises(AttributeError):
            request.route = "elsewhere"

    def test_method_and_version_render_as_tokens(self):
        assert str(Method.GET) == "GET"
        assert str(Version.HTTP_1_1) == "HTTP/1.1"
