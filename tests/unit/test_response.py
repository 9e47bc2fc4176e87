"""
Unit tests for HTTP response building.
"""

import pytest

from fileserver.http.request import Version, parse_request
from fileserver.http.response import (
    HTTPResponse,
    error_response,
    bad_request,
    forbidden,
    not_found,
    internal_error,
)
from fileserver.http.status_codes import HTTPStatus


class TestHTTPResponse:
    """Tests for HTTPResponse class."""

    def test_status_line(self):
        assert HTTPResponse(status=HTTPStatus.OK).status_line == "HTTP/1.1 200 OK"
        assert HTTPResponse(status=HTTPStatus.NOT_FOUND).status_line == "HTTP/1.1 404 Not Found"

    def test_status_line_echoes_version(self):
        response = HTTPResponse(version=Version.HTTP_2_0, status=HTTPStatus.FORBIDDEN)
        assert response.status_line == "HTTP/2.0 403 Forbidden"

    def test_new_response_advertises_ranges(self):
        response = HTTPResponse()

        assert response.headers == {"accept-ranges": "bytes"}
        assert response.body == b""

    def test_path_leading_slashes_removed(self):
        assert HTTPResponse(path="///srv/www/a.txt").path == "srv/www/a.txt"

    def test_add_header_lowercases_and_chains(self):
        response = (HTTPResponse()
            .add_header("X-One", "1")
            .add_header("X-Two", "2"))

        assert response.headers["x-one"] == "1"
        assert response.headers["x-two"] == "2"

    def test_add_header_replaces_same_name(self):
        response = HTTPResponse()
        response.add_header("Content-Type", "text/plain")
        response.add_header("content-type", "text/html")

        assert response.headers["content-type"] == "text/html"
        assert list(response.headers).count("content-type") == 1

    def test_add_header_is_idempotent(self):
        once = HTTPResponse().add_header("X-A", "v")
        twice = HTTPResponse().add_header("X-A", "v").add_header("X-A", "v")
        assert once.headers == twice.headers

    def test_constructor_headers_are_normalized(self):
        response = HTTPResponse(headers={"X-Custom": "value"})

        assert response.headers["x-custom"] == "value"
        assert response.headers["accept-ranges"] == "bytes"

    def test_set_body_sets_content_length(self):
        response = HTTPResponse().set_body("hello world")

        assert response.body == b"hello world"
        assert response.headers["content-length"] == "11"
        assert response.content_length == 11

    def test_content_length_counts_bytes(self):
        response = HTTPResponse().set_body("héllo")
        assert response.headers["content-length"] == "6"

    def test_set_body_replaces(self):
        response = HTTPResponse().set_body("long body").set_body(b"x")

        assert response.body == b"x"
        assert response.headers["content-length"] == "1"

    def test_to_bytes_layout(self):
        response = HTTPResponse(status=HTTPStatus.OK)
        response.add_header("Content-Type", "text/plain")
        response.set_body("test")

        assert response.to_bytes() == (
            b"HTTP/1.1 200 OK\r\n"
            b"accept-ranges: bytes\r\n"
            b"content-type: text/plain\r\n"
            b"content-length: 4\r\n"
            b"\r\n"
            b"test"
        )

    def test_to_bytes_without_body(self):
        assert HTTPResponse().to_bytes() == b"HTTP/1.1 200 OK\r\naccept-ranges: bytes\r\n\r\n"

    def test_serialized_response_reparses(self):
        # Same framing as a request: the body follows the first blank line
        response = HTTPResponse().set_body("payload\r\nwith lines")
        raw = response.to_bytes().replace(b"HTTP/1.1 200 OK", b"POST / HTTP/1.1", 1)

        request = parse_request(raw)

        assert request.body == "payload\r\nwith lines"
        assert request.get_header("Content-Length") == str(len(request.body))

    def test_describe_mentions_status_and_path(self):
        summary = HTTPResponse(status=HTTPStatus.NOT_FOUND, path="/tmp/x").set_body("abc").describe()

        assert "status=404" in summary
        assert "content_length=3" in summary
        assert "'tmp/x'" in summary


class TestErrorHelpers:
    """Tests for the error response shortcuts."""

    def test_bad_request_has_empty_body(self):
        response = bad_request(path="Invalid Request")

        assert response.status == HTTPStatus.BAD_REQUEST
        assert response.body == b""
        assert response.headers["content-length"] == "0"
        assert "content-type" not in response.headers
        assert response.path == "Invalid Request"

    def test_not_found_default_message(self):
        response = not_found()

        assert response.status == HTTPStatus.NOT_FOUND
        assert response.body == b"Not Found"
        assert response.headers["content-type"] == "text/plain"

    def test_forbidden_custom_message(self):
        response = forbidden("Access denied", Version.HTTP_2_0, "/srv/secret")

        assert response.status_line == "HTTP/2.0 403 Forbidden"
        assert response.body == b"Access denied"
        assert response.path == "srv/secret"

    def test_internal_error(self):
        response = internal_error()

        assert response.status == HTTPStatus.INTERNAL_SERVER_ERROR
        assert response.body == b"Internal Server Error"

    @pytest.mark.parametrize("status", [
        HTTPStatus.REQUEST_TIMEOUT,
        HTTPStatus.PAYLOAD_TOO_LARGE,
        HTTPStatus.REQUEST_HEADER_FIELDS_TOO_LARGE,
        HTTPStatus.SERVICE_UNAVAILABLE,
    ])
    def test_error_response_statuses(self, status: HTTPStatus):
        response = error_response(status, "nope")

        assert response.to_bytes().startswith(f"HTTP/1.1 {int(status)} {status.phrase}\r\n".encode())
        assert response.headers["accept-ranges"] == "bytes"
        assert response.headers["content-length"] == "4"


class TestHTTPStatus:
    """Tests for the status enum."""

    def test_phrases(self):
        assert HTTPStatus.OK.phrase == "OK"
        assert HTTPStatus.REQUEST_HEADER_FIELDS_TOO_LARGE.phrase == "Request Header Fields Too Large"
        assert HTTPStatus.PAYLOAD_TOO_LARGE.phrase == "Payload Too Large"

    def test_categories(self):
        assert HTTPStatus.OK.is_success
        assert HTTPStatus.NOT_FOUND.is_client_error
        assert HTTPStatus.SERVICE_UNAVAILABLE.is_server_error
        assert HTTPStatus.BAD_REQUEST.is_error
        assert not HTTPStatus.OK.is_error

    def test_compares_as_int(self):
        assert HTTPStatus.FORBIDDEN == 403
        assert HTTPStatus(431) is HTTPStatus.REQUEST_HEADER_FIELDS_TOO_LARGE
