"""
=============================================================================
STATIC FILE HANDLER
=============================================================================

Serves GET requests: regular files are returned whole, directories are
rendered as an HTML listing.

=============================================================================
DECISION TABLE
=============================================================================

    ┌──────────────────────┬─────────────────────┬─────────────────────────┐
    │  Path resolution     │  What is there      │  Response               │
    ├──────────────────────┼─────────────────────┼─────────────────────────┤
    │  SAFE                │  directory          │  200 listing (text/html)│
    │  SAFE                │  regular file       │  200 file bytes         │
    │  SAFE                │  nothing            │  404 "File not found"   │
    │  UNSAFE              │  (not checked)      │  403 "Forbidden"        │
    │  ERROR               │  (not checked)      │  404 "Not Found"        │
    └──────────────────────┴─────────────────────┴─────────────────────────┘

    Reading a file can still fail after the checks pass:

        PermissionError    → 403 "Access denied"
        FileNotFoundError  → 404 "File not found"   (deleted in between)
        other OSError      → 500 "An error occurred"

    Listing a directory that cannot be enumerated still returns the page,
    downgraded to 403 (PermissionError) or 500 (other OSError).

=============================================================================
ERROR DETAILS
=============================================================================

OS error text ("[Errno 13] Permission denied: '/srv/secret'") names real
filesystem paths. It is always logged, but only sent to the client when
the handler is created with verbose_errors=True.

=============================================================================
"""

import html
import logging
import os
from pathlib import Path
from typing import Optional, Union
from urllib.parse import quote, unquote

from ..http.request import HTTPRequest
from ..http.response import HTTPResponse, forbidden, not_found
from ..http.status_codes import HTTPStatus
from ..http.mime_types import ContentTypeClassifier, SniffingClassifier
from .paths import PathResolver, PathSafety


logger = logging.getLogger(__name__)


LISTING_STYLE = """
    body { font-family: Arial, sans-serif; max-width: 800px; margin: 0 auto;
           padding: 20px; color: #333; background-color: #f4f4f4; }
    h1 { border-bottom: 2px solid #3498db; padding-bottom: 10px; }
    ul { list-style: none; padding: 0; }
    li { margin-bottom: 8px; background: #fff; border-radius: 4px; }
    li a { display: block; padding: 8px 12px; color: #2980b9; text-decoration: none; }
    li a:hover { background-color: #ecf0f1; }
    .parent-dir { font-weight: bold; }
    .file-icon, .folder-icon { margin-right: 10px; }
    .file-icon::before { content: "\\1F4C4"; }
    .folder-icon::before { content: "\\1F4C1"; }
"""


class StaticFileHandler:
    """
    Handler for GET requests against a served root.

    Usage:
        static = StaticFileHandler("/srv/www")
        router.get(static.handle)
    """

    def __init__(
        self,
        root: Union[str, Path],
        classifier: Optional[ContentTypeClassifier] = None,
        verbose_errors: bool = False,
    ):
        """
        Args:
            root: Directory to serve. Every served path must resolve
                  inside it.
            classifier: Content-Type classifier for files. Defaults to
                        content sniffing with an extension fallback.
            verbose_errors: Append OS error text to 403/500 bodies.
        """
        self.resolver = PathResolver(root)
        self.classifier = classifier or SniffingClassifier()
        self.verbose_errors = verbose_errors

    @property
    def root(self) -> Path:
        return self.resolver.root

    def handle(self, request: HTTPRequest) -> HTTPResponse:
        """Serve a GET request."""
        resolution = self.resolver.resolve(request.route)
        path = resolution.path

        if resolution.safety is PathSafety.UNSAFE:
            logger.warning(f"Path traversal attempt: {request.path!r} -> {path}")
            return forbidden("Forbidden", request.version, str(path))

        if resolution.safety is PathSafety.ERROR:
            logger.info(f"Could not resolve {request.path!r}: {resolution.error}")
            return not_found("Not Found", request.version, str(path))

        # os.path checks return False instead of raising on EACCES
        if os.path.isdir(path):
            logger.debug(f"Serving directory: {path}")
            return self._directory_listing(request, path)

        if os.path.isfile(path):
            logger.debug(f"Serving file: {path}")
            return self._serve_file(request, path)

        logger.debug(f"Path not found: {path}")
        return not_found("File not found", request.version, str(path))

    # =========================================================================
    # FILES
    # =========================================================================

    def _serve_file(self, request: HTTPRequest, path: Path) -> HTTPResponse:
        """
        Read a file into memory and return it.

        The whole file is read at once; there is no streaming.
        """
        response = HTTPResponse(request.version, HTTPStatus.OK, str(path))

        try:
            content = path.read_bytes()
        except PermissionError as e:
            logger.warning(f"Permission denied reading {path}: {e}")
            return self._file_error(response, HTTPStatus.FORBIDDEN, "Access denied", e)
        except FileNotFoundError:
            response.status = HTTPStatus.NOT_FOUND
            response.add_header("Content-Type", "text/plain")
            return response.set_body("File not found")
        except OSError as e:
            logger.error(f"Error reading {path}: {e}")
            return self._file_error(
                response, HTTPStatus.INTERNAL_SERVER_ERROR, "An error occurred", e
            )

        response.add_header("Content-Type", self.classifier.classify(content, path))
        response.set_body(content)
        return response

    def _file_error(
        self,
        response: HTTPResponse,
        status: HTTPStatus,
        message: str,
        error: OSError,
    ) -> HTTPResponse:
        response.status = status
        response.add_header("Content-Type", "text/plain")
        return response.set_body(self._error_text(message, error))

    def _error_text(self, message: str, error: OSError) -> str:
        if self.verbose_errors:
            return f"{message}: {error}"
        return message

    # =========================================================================
    # DIRECTORIES
    # =========================================================================

    def _directory_listing(self, request: HTTPRequest, path: Path) -> HTTPResponse:
        """
        Render a directory as an HTML page.

        Links are absolute URL paths built from the request route, with
        every name percent-quoted for the href and HTML-escaped for the
        text, so odd file names cannot break the page.
        """
        response = HTTPResponse(request.version, HTTPStatus.OK, str(path))
        url_path = "/" + unquote(request.route).strip("/")

        items = []
        if not self.resolver.is_root(path):
            parent = url_path.rsplit("/", 1)[0] or "/"
            items.append(
                f'<li><a href="{_href(parent)}" class="parent-dir">'
                f'<span class="folder-icon"></span>Parent Directory</a></li>'
            )

        failure = ""
        try:
            with os.scandir(path) as it:
                entries = sorted(it, key=lambda entry: entry.name)
        except PermissionError as e:
            logger.warning(f"Permission denied listing {path}: {e}")
            response.status = HTTPStatus.FORBIDDEN
            failure = f"<p>{html.escape(self._error_text('Access denied', e))}</p>"
            entries = []
        except OSError as e:
            logger.error(f"Error listing {path}: {e}")
            response.status = HTTPStatus.INTERNAL_SERVER_ERROR
            failure = f"<p>{html.escape(self._error_text('An error occurred', e))}</p>"
            entries = []

        for entry in entries:
            icon = "folder-icon" if _is_dir(entry) else "file-icon"
            link = url_path.rstrip("/") + "/" + entry.name
            items.append(
                f'<li><a href="{_href(link)}"><span class="{icon}"></span>'
                f'{html.escape(entry.name)}</a></li>'
            )

        title = html.escape(url_path)
        page = (
            "<!DOCTYPE html>\n"
            '<html lang="en">\n<head>\n'
            '<meta charset="utf-8">\n'
            '<meta name="viewport" content="width=device-width, initial-scale=1.0">\n'
            f"<title>Directory listing for {title}</title>\n"
            f"<style>{LISTING_STYLE}</style>\n"
            "</head>\n<body>\n"
            f"<h1>Directory listing for {title}</h1>\n"
            f"<ul>{''.join(items)}</ul>\n"
            f"{failure}"
            "</body>\n</html>\n"
        )

        response.add_header("Content-Type", "text/html")
        response.set_body(page)
        return response


def _href(url_path: str) -> str:
    """Percent-quote a URL path and escape it for an attribute value."""
    return html.escape(quote(url_path, safe="/"), quote=True)


def _is_dir(entry: os.DirEntry) -> bool:
    # Follows symlinks; a dangling link is listed as a file
    try:
        return entry.is_dir()
    except OSError:
        return False


def serve_static(root: Union[str, Path], **kwargs) -> StaticFileHandler:
    """
    Create a static file handler.

    Example:
        router.get(serve_static("/srv/www").handle)
    """
    return StaticFileHandler(root, **kwargs)
