"""
=============================================================================
SOCKET SERVER
=============================================================================

Owns the listening socket. Every accepted client is wrapped in a
Connection and passed to a callback; nothing here parses HTTP.

    start(on_connection)
        │
        ├── _listen()          socket(), SO_REUSEADDR, TCP_NODELAY,
        │                      bind(host, port), listen(backlog)
        ├── _install_signals() SIGINT / SIGTERM → shutdown()
        │
        ├── loop while running:
        │       accept()  ── 1s timeout ──► re-check running flag
        │           │
        │           └──► Connection(limits, timeout) ──► on_connection()
        │
        └── finally: restore signals, close listener

Binding to port 0 lets the OS pick a free port; `address` reports the
real one once bound.

=============================================================================
"""

import logging
import signal
import socket
import threading
from typing import Callable, Optional, Tuple

from ..config import ServerConfig
from .connection import Connection


logger = logging.getLogger(__name__)

ACCEPT_POLL_INTERVAL = 1.0


class SocketServer:
    """
    Accept loop for one listening address.

    Usage:
        listener = SocketServer(config)
        listener.start(pool_submit)     # Blocks until shutdown()
    """

    def __init__(self, config: ServerConfig):
        self.config = config
        self._listener: Optional[socket.socket] = None
        self._bound: Optional[Tuple[str, int]] = None
        self._running = threading.Event()
        self._ready = threading.Event()
        self._previous_signals: dict = {}

    @property
    def address(self) -> Tuple[str, int]:
        """(host, port) actually bound, or the configured pair before that."""
        if self._bound is not None:
            return self._bound
        return (self.config.host, self.config.port)

    def start(self, on_connection: Callable[[Connection], None]):
        """
        Listen and accept until shutdown() is called.

        Args:
            on_connection: Receives each accepted Connection on the
                           accept thread, so it should only enqueue.

        Raises:
            OSError: bind() or listen() failed.
        """
        self._listener = self._listen()
        self._running.set()
        self._install_signals()

        logger.info(f"Server listening on {self.address[0]}:{self.address[1]}")
        self._ready.set()

        try:
            while self._running.is_set():
                client = self._accept()
                if client is None:
                    continue
                on_connection(self._wrap(*client))
        finally:
            self._close()

    def _listen(self) -> socket.socket:
        host, port = self.config.host, self.config.port
        listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        listener.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        listener.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)
        listener.settimeout(ACCEPT_POLL_INTERVAL)

        try:
            listener.bind((host, port))
            listener.listen(self.config.backlog)
        except OSError as e:
            logger.error(f"Cannot listen on {host}:{port}: {e}")
            listener.close()
            raise

        self._bound = listener.getsockname()[:2]
        return listener

    def _accept(self) -> Optional[Tuple[socket.socket, Tuple[str, int]]]:
        """One accept() attempt. None on poll timeout or after shutdown."""
        try:
            return self._listener.accept()
        except socket.timeout:
            return None
        except OSError as e:
            if self._running.is_set():
                logger.error(f"accept() failed, stopping: {e}")
                self._running.clear()
            return None

    def _wrap(self, client: socket.socket, address: Tuple[str, int]) -> Connection:
        conn = Connection(
            socket=client,
            address=address,
            buffer_size=self.config.buffer_size,
            timeout=self.config.timeout,
            max_header_size=self.config.max_header_size,
            max_request_size=self.config.max_request_size,
        )
        logger.debug(f"[{conn.id}] Accepted {address[0]}:{address[1]}")
        return conn

    # =========================================================================
    # SIGNALS
    # =========================================================================

    def _install_signals(self):
        # signal.signal() raises ValueError off the main thread
        if threading.current_thread() is not threading.main_thread():
            logger.debug("Started off the main thread; signal handlers not installed")
            return

        def on_signal(signum, frame):
            logger.info(f"Received {signal.Signals(signum).name}, shutting down")
            self.shutdown()

        for sig in (signal.SIGINT, signal.SIGTERM):
            self._previous_signals[sig] = signal.signal(sig, on_signal)

    def _restore_signals(self):
        while self._previous_signals:
            sig, handler = self._previous_signals.popitem()
            signal.signal(sig, handler)

    # =========================================================================
    # STOPPING
    # =========================================================================

    def shutdown(self):
        """
        Stop the accept loop within one poll interval. Callable from any
        thread or a signal handler, any number of times.
        """
        self._running.clear()

    def _close(self):
        self._restore_signals()
        if self._listener is not None:
            self._listener.close()
            self._listener = None
        self._ready.clear()
        logger.info("Stopped accepting connections")

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """Block until listening. False if `timeout` passes first."""
        return self._ready.wait(timeout)
