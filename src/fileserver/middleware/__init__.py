"""
=============================================================================
MIDDLEWARE MODULE
=============================================================================

Middleware runs around the router for every parsed request:

    Middleware / MiddlewarePipeline   (base.py)
        The interface and the chain that wraps router.handle.

    AccessLogMiddleware               (logging.py)
        One access line per request on the "fileserver.access" logger.

=============================================================================
"""

from .base import Middleware, MiddlewarePipeline, NextHandler
from .logging import AccessLogMiddleware, RequestLog

__all__ = [
    "Middleware",
    "MiddlewarePipeline",
    "NextHandler",
    "AccessLogMiddleware",
    "RequestLog",
]
