"""
=============================================================================
HANDLERS MODULE
=============================================================================

Request handlers. Each one is a class whose `handle(request)` method takes
a parsed HTTPRequest and returns an HTTPResponse:

    ┌──────────────────────┬─────────────────────────────────────────────┐
    │ Handler              │ Serves                                      │
    ├──────────────────────┼─────────────────────────────────────────────┤
    │ StaticFileHandler    │ GET: files and directory listings           │
    │ EchoHandler          │ POST: request body echoed back as HTML      │
    └──────────────────────┴─────────────────────────────────────────────┘

Path mapping and traversal checks live in paths.py and are shared by
anything that touches the served root.

=============================================================================
USAGE
=============================================================================

    from fileserver.handlers import serve_static, echo_post

    router.get(serve_static("/srv/www").handle)
    router.post(echo_post().handle)

=============================================================================
"""

from .paths import PathResolver, PathResolution, PathSafety, is_within
from .static import StaticFileHandler, serve_static
from .echo import EchoHandler, echo_post

__all__ = [
    "PathResolver",
    "PathResolution",
    "PathSafety",
    "is_within",
    "StaticFileHandler",
    "serve_static",
    "EchoHandler",
    "echo_post",
]
