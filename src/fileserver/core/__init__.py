"""
=============================================================================
CORE MODULE
=============================================================================

The transport layer under the HTTP logic:

    socket_server.py   bind / listen / accept loop, signal handling
    connection.py      one client: bounded request read, send, close
    thread_pool.py     worker threads that run one connection each

=============================================================================
"""

from .socket_server import SocketServer
from .connection import Connection, ConnectionState, RequestTooLarge
from .thread_pool import ThreadPool

__all__ = [
    "SocketServer",     # Accepts connections
    "Connection",       # Wrapper for client socket - handles I/O
    "ConnectionState",  # Enum for connection lifecycle states
    "RequestTooLarge",  # Buffering limit exceeded (413/431)
    "ThreadPool",       # Manages worker threads for concurrency
]
