"""
=============================================================================
PYFILESERVER
=============================================================================

A small HTTP/1.1 server for one directory: files are served as-is,
directories as HTML listings, and POST bodies are echoed back.

    from fileserver import FileServer, ServerConfig

    FileServer(ServerConfig(root="site")).run()

Or from the shell:

    python -m fileserver site

=============================================================================
"""

__version__ = "1.0.0"

from .server import FileServer, create_server
from .config import ServerConfig

__all__ = ["FileServer", "create_server", "ServerConfig", "__version__"]
