"""
=============================================================================
MIDDLEWARE
=============================================================================

A middleware sits between the server and the router and sees every parsed
request and the response that comes back for it:

    handle_raw(data)
        │
        ▼
    AccessLogMiddleware ──► (added with FileServer.use) ──► Router.handle
        │   start clock              │                       GET  → static
        │                            │                       POST → echo
        ◄────────────── response ◄───┴───────────────────────────┘
        │   write access line
        ▼

The first middleware added is the outermost. Returning a response without
calling `next` ends the chain early.

=============================================================================
"""

import logging
from abc import ABC, abstractmethod
from functools import partial
from typing import Callable, Iterator, List

from ..http.request import HTTPRequest
from ..http.response import HTTPResponse


logger = logging.getLogger(__name__)


NextHandler = Callable[[HTTPRequest], HTTPResponse]


class Middleware(ABC):
    """
    Something that runs around the router.

        class ServerHeader(Middleware):
            def __call__(self, request, next):
                response = next(request)
                response.add_header("Server", "pyfileserver")
                return response
    """

    @abstractmethod
    def __call__(self, request: HTTPRequest, next: NextHandler) -> HTTPResponse:
        """Return next(request), possibly altered, or a response of its own."""

    @property
    def name(self) -> str:
        return type(self).__name__


class MiddlewarePipeline:
    """
    Ordered list of middleware that can be folded around a handler.

        handler = MiddlewarePipeline().add(AccessLogMiddleware()).wrap(router.handle)
    """

    def __init__(self):
        self._chain: List[Middleware] = []

    def add(self, middleware: Middleware) -> "MiddlewarePipeline":
        self._chain.append(middleware)
        logger.debug(f"Middleware added: {middleware.name} (position {len(self._chain)})")
        return self

    def use(self, *middleware: Middleware) -> "MiddlewarePipeline":
        """add() for several middleware at once, in order."""
        for item in middleware:
            self.add(item)
        return self

    def wrap(self, handler: NextHandler) -> NextHandler:
        """
        Build the call chain ending in `handler`.

        Folding from the innermost end means the first middleware added
        is the first one called. With no middleware the handler itself is
        returned.
        """
        for middleware in reversed(self._chain):
            handler = partial(middleware, next=handler)
        return handler

    def __len__(self) -> int:
        return len(self._chain)

    def __iter__(self) -> Iterator[Middleware]:
        return iter(self._chain)
