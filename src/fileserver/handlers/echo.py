"""
POST echo handler.

Returns the request body wrapped in a small HTML page. The body is
HTML-escaped, so a client cannot inject markup into the page it gets back.
"""

import html
import logging

from ..http.request import HTTPRequest
from ..http.response import HTTPResponse
from ..http.status_codes import HTTPStatus


logger = logging.getLogger(__name__)


ECHO_TEMPLATE = (
    "<html><body><h1>Received POST request</h1>"
    "<p>Body: {body}</p></body></html>"
)


class EchoHandler:
    """Echoes POST bodies back as text/html."""

    def handle(self, request: HTTPRequest) -> HTTPResponse:
        logger.debug(f"Echoing {len(request.body)} characters for {request.path}")

        response = HTTPResponse(request.version, HTTPStatus.OK, request.route)
        response.add_header("Content-Type", "text/html")
        response.set_body(ECHO_TEMPLATE.format(body=html.escape(request.body)))
        return response


def echo_post() -> EchoHandler:
    """Create an echo handler."""
    return EchoHandler()
