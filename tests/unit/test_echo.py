"""
Unit tests for the POST echo handler.
"""

from fileserver.handlers.echo import EchoHandler, echo_post
from fileserver.http.request import Version, parse_request
from fileserver.http.status_codes import HTTPStatus


def post(body: str, version: str = "HTTP/1.1"):
    raw = f"POST /form HTTP/{version.split('/')[1]}\r\nContent-Length: {len(body)}\r\n\r\n{body}"
    return EchoHandler().handle(parse_request(raw))


class TestEchoHandler:

    def test_echoes_body(self):
        response = post("name=John")

        assert response.status == HTTPStatus.OK
        assert response.headers["content-type"] == "text/html"
        assert response.body == (
            b"<html><body><h1>Received POST request</h1>"
            b"<p>Body: name=John</p></body></html>"
        )

    def test_empty_body(self):
        assert b"<p>Body: </p>" in post("").body

    def test_body_is_escaped(self):
        response = post("<script>alert('x')</script>")

        assert b"<script>" not in response.body
        assert b"&lt;script&gt;alert(&#x27;x&#x27;)&lt;/script&gt;" in response.body

    def test_content_length_matches(self):
        response = post("héllo")
        assert response.headers["content-length"] == str(len(response.body))

    def test_version_is_echoed(self):
        assert post("x", "HTTP/2.0").version is Version.HTTP_2_0

    def test_factory(self):
        assert isinstance(echo_post(), EchoHandler)
