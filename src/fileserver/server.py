"""
=============================================================================
FILE SERVER
=============================================================================

Ties the layers together:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   SocketServer ──accept──► FileServer._handle_connection             │
    │                                   │ submit (503 if queue full)       │
    │                                   ▼                                  │
    │                         ThreadPool worker                            │
    │                                   │                                  │
    │                         _process_connection                          │
    │                           │  conn.read_request()   (408/413/431)     │
    │                           │  handle_raw()                            │
    │                           │     parse  ──fail──► 400 Invalid Request │
    │                           │     AccessLogMiddleware                  │
    │                           │       Router                             │
    │                           │         GET  → StaticFileHandler         │
    │                           │         POST → EchoHandler               │
    │                           │         else → 400                       │
    │                           │  connection: close                       │
    │                           ▼  conn.send_response() → conn.close()     │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

One request per connection. The only state shared between workers is the
config and the served root, neither of which changes after startup.

=============================================================================
"""

import logging
from typing import Optional, Callable

from .config import ServerConfig
from .core import SocketServer, Connection, ConnectionState, ThreadPool, RequestTooLarge
from .handlers import StaticFileHandler, EchoHandler
from .http import (
    HTTPRequest, RequestParser, HTTPParseError,
    HTTPResponse, HTTPStatus, Router,
    bad_request, error_response, internal_error,
)
from .middleware import MiddlewarePipeline, Middleware, AccessLogMiddleware


logger = logging.getLogger(__name__)


class FileServer:
    """
    Static file and directory listing server.

    Usage:
        server = FileServer(ServerConfig(root="site"))
        server.run()            # Blocks until SIGINT/SIGTERM

    From another thread (tests):
        thread = threading.Thread(target=server.run, daemon=True)
        thread.start()
        server.wait_until_ready(5)
        host, port = server.address
        ...
        server.shutdown()
    """

    def __init__(self, config: Optional[ServerConfig] = None):
        """
        Args:
            config: Server configuration. Defaults serve the current
                    directory on 127.0.0.1:5500.

        Raises:
            ValueError: The configuration is invalid.
        """
        self.config = config or ServerConfig()
        self.config.validate()

        self._socket_server = SocketServer(self.config)
        self._thread_pool = ThreadPool(
            min_workers=self.config.min_workers,
            max_workers=self.config.max_workers,
            queue_size=self.config.queue_size,
        )
        self._parser = RequestParser()

        self.static = StaticFileHandler(
            self.config.root,
            verbose_errors=self.config.verbose_errors,
        )
        self.echo = EchoHandler()

        self._router = Router()
        self._router.get(self.static.handle)
        self._router.post(self.echo.handle)

        self._middleware = MiddlewarePipeline()
        self._middleware.add(AccessLogMiddleware(log_format=self.config.log_format))
        self._handler: Callable[[HTTPRequest], HTTPResponse] = self._middleware.wrap(
            self._router.handle
        )

    def use(self, middleware: Middleware) -> "FileServer":
        """Add middleware inside the access logger. Returns self for chaining."""
        self._middleware.add(middleware)
        self._handler = self._middleware.wrap(self._router.handle)
        return self

    @property
    def router(self) -> Router:
        return self._router

    @property
    def address(self) -> tuple[str, int]:
        """The listening (host, port); the real port once bound."""
        return self._socket_server.address

    # =========================================================================
    # REQUEST HANDLING
    # =========================================================================

    def handle_raw(
        self,
        data: bytes,
        client_address: tuple[str, int] = ("", 0),
    ) -> HTTPResponse:
        """
        Turn raw request bytes into a response. No sockets involved.

        Never raises: parse failures become 400 with diagnostic path
        "Invalid Request", and handler crashes become 500.
        """
        try:
            request = self._parser.parse(data, client_address)
        except HTTPParseError as e:
            logger.info(f"Invalid request from {client_address[0] or '-'}: {e}")
            return bad_request(path="Invalid Request")

        try:
            return self._handler(request)
        except Exception as e:
            logger.exception(f"Handler error for {request.method} {request.path}: {e}")
            return internal_error(version=request.version, path=request.route)

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    def run(self):
        """
        Start the server (blocking).

        Returns after shutdown() or SIGINT/SIGTERM, once queued
        connections have been answered.

        Raises:
            OSError: The address could not be bound.
        """
        self._setup_logging()
        self._thread_pool.start()

        logger.info(
            f"Starting {self.config.server_name}: serving {self.config.root_path.resolve()} "
            f"with {self.config.min_workers}-{self.config.max_workers} workers"
        )

        try:
            self._socket_server.start(self._handle_connection)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            self._shutdown()

    def shutdown(self):
        """Ask the server to stop. Safe from any thread."""
        self._socket_server.shutdown()

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """Block until the server is accepting connections."""
        return self._socket_server.wait_until_ready(timeout)

    def _setup_logging(self):
        level = getattr(logging, self.config.log_level.upper(), logging.INFO)
        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        logging.getLogger("fileserver").setLevel(level)

    def _shutdown(self):
        """
        Graceful shutdown: the accept loop has already stopped, so let
        the pool answer what is queued, then stop the workers.
        """
        logger.info("Shutting down server...")
        self._thread_pool.shutdown(wait=True, timeout=self.config.timeout)
        logger.info("Server stopped")

    # =========================================================================
    # CONNECTIONS
    # =========================================================================

    def _handle_connection(self, conn: Connection):
        """Queue a connection for a worker (runs on the accept thread)."""
        try:
            submitted = self._thread_pool.submit(
                self._process_connection,
                args=(conn,),
                block=False,
            )
        except RuntimeError as e:
            logger.warning(f"[{conn.id}] Rejecting connection: {e}")
            conn.close()
            return

        if not submitted:
            logger.warning(f"[{conn.id}] Thread pool full, rejecting connection")
            self._send_error(conn, HTTPStatus.SERVICE_UNAVAILABLE, "Server overloaded")
            conn.close()

    def _process_connection(self, conn: Connection):
        """Read one request, answer it, close (runs on a worker thread)."""
        with conn:
            try:
                raw_request = conn.read_request()
            except RequestTooLarge as e:
                logger.warning(f"[{conn.id}] {e.message}")
                self._send_error(conn, HTTPStatus(e.status_code), e.message)
                return
            except TimeoutError as e:
                logger.info(f"[{conn.id}] {e}")
                self._send_error(conn, HTTPStatus.REQUEST_TIMEOUT, "Request timeout")
                return
            except OSError as e:
                logger.warning(f"[{conn.id}] Read failed: {e}")
                return

            if raw_request is None:
                return

            conn.state = ConnectionState.PROCESSING
            response = self.handle_raw(raw_request, conn.address)
            response.add_header("Connection", "close")
            logger.debug(f"[{conn.id}] {response.describe()}")

            conn.send_response(response.to_bytes())

    def _send_error(self, conn: Connection, status: HTTPStatus, message: str):
        """Send an error produced before any request was parsed."""
        response = error_response(status, message)
        response.add_header("Connection", "close")
        conn.send_response(response.to_bytes())


def create_server(config: Optional[ServerConfig] = None) -> FileServer:
    """
    Create a file server.

    Example:
        create_server(ServerConfig(root="site", port=8000)).run()
    """
    return FileServer(config)
