"""
=============================================================================
CONNECTION MANAGEMENT
=============================================================================

Wraps one accepted client socket: reads exactly one HTTP request into a
bounded buffer, writes one response, then closes.

=============================================================================
TCP IS A BYTE STREAM
=============================================================================

    Client sends:                      Server may receive:
        "GET /docs HTTP/1.1\r\n"           recv() → "GET /do"
        "Host: x\r\n\r\n"                  recv() → "cs HTTP/1.1\r\nHost: x\r\n\r\n"

A single recv() is never "the request". We accumulate chunks until the
blank line that ends the headers, then read Content-Length more bytes for
the body.

=============================================================================
BOUNDED BUFFERING
=============================================================================

    ┌─────────────────────────────────────────────────────────────────┐
    │  REQUEST LINE + HEADERS           ≤ max_header_size   else 431  │
    │  \r\n\r\n                                                       │
    │  BODY (Content-Length bytes)                                    │
    │  ───────────────────────────────────────────────────────────    │
    │  whole request                    ≤ max_request_size  else 413  │
    └─────────────────────────────────────────────────────────────────┘

The buffer grows in `buffer_size` steps and never past these limits, so a
client cannot make the server hold unbounded data. A Content-Length that
would overflow max_request_size is rejected before the body is read.
Without a Content-Length header, the body is whatever arrived along with
the headers.

=============================================================================
TIMEOUTS
=============================================================================

Every socket operation uses `timeout` seconds:

    nothing received yet, timeout   → read_request() returns None
                                      (idle connection, close silently)
    some bytes received, timeout    → TimeoutError (server answers 408)
    peer closes before any bytes    → None
    peer closes mid-request         → whatever arrived is returned and the
                                      parser decides if it is usable

=============================================================================
"""

import socket
import time
import logging
from enum import Enum
from dataclasses import dataclass, field
from typing import Optional
import uuid


logger = logging.getLogger(__name__)

HEADER_TERMINATOR = b"\r\n\r\n"

# Bounds on reading leftover client data while closing
DRAIN_TIMEOUT = 0.5
DRAIN_LIMIT = 64 * 1024


class RequestTooLarge(Exception):
    """
    The request exceeded a buffering limit.

    Attributes:
        status_code: 431 when the header section is too large,
                     413 when the whole request is.
    """

    def __init__(self, message: str, status_code: int = 413):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class ConnectionState(Enum):
    """Connection lifecycle states, for logging and cleanup."""
    NEW = "new"
    READING = "reading"
    PROCESSING = "processing"
    WRITING = "writing"
    CLOSING = "closing"
    CLOSED = "closed"


@dataclass
class Connection:
    """
    Represents a client connection.

    Attributes:
        socket: The client socket.
        address: Client's (ip, port) tuple.
        id: Short identifier used in log lines.
        state: Current connection state.
        created_at: Timestamp when connection was accepted.
    """

    socket: socket.socket
    address: tuple[str, int]

    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.NEW
    created_at: float = field(default_factory=time.time)

    buffer_size: int = 1024               # recv() chunk size
    timeout: Optional[float] = 30.0       # Per-operation socket timeout
    max_header_size: int = 8192           # Request line + headers
    max_request_size: int = 1024 * 1024   # Headers + body

    _buffer: bytearray = field(default_factory=bytearray, repr=False)

    def __post_init__(self):
        self.socket.setblocking(True)
        self.socket.settimeout(self.timeout)

    @property
    def client_ip(self) -> str:
        return self.address[0]

    @property
    def age(self) -> float:
        """Seconds since the connection was accepted."""
        return time.time() - self.created_at

    # =========================================================================
    # READING
    # =========================================================================

    def read_request(self) -> Optional[bytes]:
        """
        Read one complete HTTP request from the socket.

        ┌─────────────────────────────────────────────────────────────────┐
        │   while no \\r\\n\\r\\n:    recv() → buffer    (check 431 limit)   │
        │   parse Content-Length                     (check 413 limit)   │
        │   while body incomplete:  recv() → buffer                      │
        │   return buffer[:headers + body]                               │
        └─────────────────────────────────────────────────────────────────┘

        Returns:
            The raw request bytes, or None if the client sent nothing
            before closing or going idle.

        Raises:
            RequestTooLarge: A buffering limit was exceeded.
            TimeoutError: The client stalled part-way through a request.
        """
        self.state = ConnectionState.READING

        try:
            # ─────────────────────────────────────────────────────────────
            # HEADERS
            # ─────────────────────────────────────────────────────────────
            while HEADER_TERMINATOR not in self._buffer:
                if len(self._buffer) > self.max_header_size:
                    raise RequestTooLarge(
                        f"Header section exceeds {self.max_header_size} bytes",
                        status_code=431,
                    )
                if not self._fill():
                    return self._take_partial()

            header_end = self._buffer.find(HEADER_TERMINATOR)
            if header_end > self.max_header_size:
                raise RequestTooLarge(
                    f"Header section exceeds {self.max_header_size} bytes",
                    status_code=431,
                )

            # ─────────────────────────────────────────────────────────────
            # BODY
            # ─────────────────────────────────────────────────────────────
            body_start = header_end + len(HEADER_TERMINATOR)
            content_length = parse_content_length(bytes(self._buffer[:header_end]))
            if content_length is None:
                # No declared length: the body is whatever already arrived
                request_end = len(self._buffer)
            else:
                request_end = body_start + content_length

            if request_end > self.max_request_size:
                raise RequestTooLarge(
                    f"Request of {request_end} bytes exceeds "
                    f"{self.max_request_size} bytes",
                    status_code=413,
                )

            while len(self._buffer) < request_end:
                if not self._fill():
                    logger.debug(f"[{self.id}] Peer closed before body completed")
                    break

            request_data = bytes(self._buffer[:request_end])
            del self._buffer[:request_end]
            return request_data

        except socket.timeout:
            if not self._buffer:
                logger.debug(f"[{self.id}] Idle timeout, closing")
                return None
            raise TimeoutError(
                f"Request read timed out after {len(self._buffer)} bytes"
            ) from None

    def _fill(self) -> bool:
        """
        Receive one chunk into the buffer.

        Returns:
            False when the peer has closed its side.
        """
        try:
            chunk = self.socket.recv(self.buffer_size)
        except (ConnectionResetError, BrokenPipeError):
            return False
        if not chunk:
            return False
        self._buffer += chunk
        return True

    def _take_partial(self) -> Optional[bytes]:
        """Hand back whatever arrived before the peer closed, if anything."""
        if not self._buffer:
            return None
        data = bytes(self._buffer)
        self._buffer.clear()
        return data

    # =========================================================================
    # WRITING
    # =========================================================================

    def send_response(self, data: bytes) -> bool:
        """
        Send response bytes to the client.

        Returns:
            True if everything was sent, False if the connection was lost.
        """
        self.state = ConnectionState.WRITING

        try:
            self.socket.sendall(data)
            return True
        except OSError as e:
            logger.warning(f"[{self.id}] Send failed: {e}")
            return False

    # =========================================================================
    # CLOSING
    # =========================================================================

    def close(self):
        """
        Close the connection gracefully.

        shutdown(SHUT_WR) sends FIN so the client sees end-of-response,
        then unread request bytes are drained before the descriptor is
        released. Closing with unread data would make the kernel send
        RST, which can discard the response on the client.

        The drain stops after DRAIN_TIMEOUT seconds in total or
        DRAIN_LIMIT bytes, whichever comes first, so a client that keeps
        writing cannot hold the worker.
        """
        if self.state == ConnectionState.CLOSED:
            return

        self.state = ConnectionState.CLOSING

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # Peer already gone

        self._drain()

        self.socket.close()
        self.state = ConnectionState.CLOSED
        logger.debug(f"[{self.id}] Connection closed after {self.age:.3f}s")

    def _drain(self):
        deadline = time.monotonic() + DRAIN_TIMEOUT
        drained = 0

        try:
            while drained < DRAIN_LIMIT:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    break
                self.socket.settimeout(remaining)
                chunk = self.socket.recv(self.buffer_size)
                if not chunk:
                    return
                drained += len(chunk)
        except OSError:
            return  # Includes socket.timeout

        logger.debug(f"[{self.id}] Stopped draining after {drained} bytes")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


def parse_content_length(header_section: bytes) -> Optional[int]:
    """
    Find Content-Length in a raw header section.

    Runs before the request is parsed, so it does a plain line scan.

    Returns:
        The declared length, 0 for a non-numeric or negative value, or
        None when there is no Content-Length header.
    """
    text = header_section.decode("utf-8", errors="replace")
    for line in text.split("\r\n")[1:]:
        name, sep, value = line.partition(":")
        if sep and name.strip().lower() == "content-length":
            try:
                return max(int(value.strip()), 0)
            except ValueError:
                return 0
    return None
