"""
=============================================================================
METHOD ROUTER
=============================================================================

Picks the handler for a parsed request.

A static file server has one resource space (the served root), so routing
is by METHOD only, not by path:

    ┌──────────────┬──────────────────────────────────────────────────────┐
    │  Method      │  Handler                                             │
    ├──────────────┼──────────────────────────────────────────────────────┤
    │  GET         │  StaticFileHandler.handle  (file or directory)       │
    │  POST        │  EchoHandler.handle        (echo body as HTML)       │
    │  anything    │  reject_method             (400, empty body)         │
    │  else        │                                                      │
    └──────────────┴──────────────────────────────────────────────────────┘

Handlers are registered with decorators:

    router = Router()

    @router.get
    def serve(request):
        ...

=============================================================================
"""

import logging
from typing import Callable, Dict, Optional

from .request import HTTPRequest, Method
from .response import HTTPResponse, bad_request


logger = logging.getLogger(__name__)

# Handler: a function that takes a request and returns a response
Handler = Callable[[HTTPRequest], HTTPResponse]


def reject_method(request: HTTPRequest) -> HTTPResponse:
    """
    Default handler for methods nobody registered.

    400 with an empty body; the unmodified route is kept as the
    diagnostic path.
    """
    logger.info(f"Unsupported method: {request.method}")
    return bad_request(request.version, request.route)


class Router:
    """
    Method → handler table with a fallback.

    Each method has at most one handler. Registering a second handler
    for the same method replaces the first.
    """

    def __init__(self, fallback: Optional[Handler] = None):
        self._handlers: Dict[Method, Handler] = {}
        self.fallback: Handler = fallback or reject_method

    # =========================================================================
    # REGISTRATION
    # =========================================================================

    def add_route(self, method: Method, handler: Handler) -> Handler:
        """
        Register a handler for a method.

        Returns:
            The handler, so this can back a decorator.
        """
        if method in self._handlers:
            logger.debug(f"Replacing handler for {method}")
        self._handlers[method] = handler
        return handler

    def route(self, method: Method) -> Callable[[Handler], Handler]:
        """Decorator form of add_route()."""
        def decorator(handler: Handler) -> Handler:
            return self.add_route(method, handler)
        return decorator

    def get(self, handler: Handler) -> Handler:
        return self.add_route(Method.GET, handler)

    def post(self, handler: Handler) -> Handler:
        return self.add_route(Method.POST, handler)

    # =========================================================================
    # DISPATCH
    # =========================================================================

    def match(self, method: Method) -> Optional[Handler]:
        """Return the registered handler for a method, or None."""
        return self._handlers.get(method)

    def handle(self, request: HTTPRequest) -> HTTPResponse:
        """
        Dispatch a request to its handler.

        This is the innermost handler the middleware pipeline wraps.
        """
        handler = self.match(request.method) or self.fallback
        return handler(request)

    @property
    def methods(self) -> list[Method]:
        """Methods with a registered handler, in registration order."""
        return list(self._handlers)
