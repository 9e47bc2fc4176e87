"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

All server settings in one immutable-by-convention dataclass. The server
reads it at startup and shares it, unmodified, with every worker thread.

    Development (defaults):
        ServerConfig(root=".")                    # 127.0.0.1:5500

    Tests:
        ServerConfig(root=tmp_path, port=0, timeout=2.0)

    Loud debugging:
        ServerConfig(root="site", log_level="DEBUG", verbose_errors=True)

=============================================================================
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Union


@dataclass
class ServerConfig:
    """
    Configuration for the file server.

    Call validate() before use; FileServer does this for you.
    """

    # ─────────────────────────────────────────────────────────────────────
    # CONTENT
    # ─────────────────────────────────────────────────────────────────────

    root: Union[str, Path] = "."
    """
    Directory to serve. Every response is confined to it.
    Defaults to the current working directory.
    """

    verbose_errors: bool = False
    """
    Append OS error text (which names filesystem paths) to 403/500
    bodies. Errors are always logged in full either way.
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    host: str = "127.0.0.1"
    """The IP address to bind to. Loopback only by default."""

    port: int = 5500
    """
    The port number to listen on.
    0 lets the OS pick a free port (handy in tests).
    """

    backlog: int = 128
    """Maximum number of connections queued in the kernel before accept()."""

    buffer_size: int = 1024
    """Bytes requested per recv() call. The request buffer grows in these steps."""

    timeout: float = 30.0
    """
    Per-connection socket timeout in seconds. A client that sends nothing
    for this long is dropped; one that stalls mid-request gets 408.
    """

    # ─────────────────────────────────────────────────────────────────────
    # REQUEST LIMITS
    # ─────────────────────────────────────────────────────────────────────

    max_header_size: int = 8192
    """Largest request line + header section accepted. Larger → 431."""

    max_request_size: int = 1024 * 1024  # 1 MB
    """Largest whole request (headers + body) accepted. Larger → 413."""

    # ─────────────────────────────────────────────────────────────────────
    # THREAD POOL SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    min_workers: int = 4
    """Worker threads started up front."""

    max_workers: int = 16
    """Upper bound on worker threads."""

    queue_size: int = 100
    """Accepted connections waiting for a worker. Beyond this → 503."""

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    """Logging level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)."""

    log_format: str = "text"
    """Access log format: 'text' (Apache-style) or 'json'."""

    # ─────────────────────────────────────────────────────────────────────
    # SERVER IDENTITY
    # ─────────────────────────────────────────────────────────────────────

    server_name: str = "pyfileserver"
    """Name used in startup log lines."""

    @property
    def root_path(self) -> Path:
        return Path(self.root)

    def validate(self) -> None:
        """
        Check every value, failing fast with ValueError.

        Runs at startup so a bad setting is reported before the socket
        is bound, not on the first request.
        """
        if not 0 <= self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")

        if self.backlog < 1:
            raise ValueError("backlog must be >= 1")

        if self.min_workers < 1:
            raise ValueError("min_workers must be >= 1")

        if self.max_workers < self.min_workers:
            raise ValueError("max_workers must be >= min_workers")

        if self.queue_size < 1:
            raise ValueError("queue_size must be >= 1")

        if self.buffer_size < 1:
            raise ValueError("buffer_size must be >= 1")

        if self.max_header_size < 1:
            raise ValueError("max_header_size must be >= 1")

        if self.max_request_size < self.max_header_size:
            raise ValueError("max_request_size must be >= max_header_size")

        if self.timeout <= 0:
            raise ValueError("timeout must be > 0")

        if not isinstance(logging.getLevelName(self.log_level.upper()), int):
            raise ValueError(f"Unknown log level: {self.log_level}")

        if self.log_format not in ("text", "json"):
            raise ValueError(f"Unknown log format: {self.log_format}")

        if not os.path.isdir(self.root):
            raise ValueError(f"Root is not a directory: {self.root}")
