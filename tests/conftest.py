"""
pytest configuration and fixtures.
"""

import socket
import threading
from pathlib import Path
from typing import Generator
import pytest

# Add src to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from fileserver import FileServer, ServerConfig


PNG_HEADER = b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR\x00\x00\x00\x01\x00\x00\x00\x01"


@pytest.fixture
def site(tmp_path: Path) -> Path:
    """
    A small served root:

        site/
            index.html
            notes.txt
            logo.png          (real PNG signature)
            docs/
                guide.txt
    """
    root = tmp_path / "site"
    root.mkdir()
    (root / "index.html").write_text("<h1>Home</h1>")
    (root / "notes.txt").write_text("hello notes")
    (root / "logo.png").write_bytes(PNG_HEADER)
    (root / "docs").mkdir()
    (root / "docs" / "guide.txt").write_text("read me")
    return root


@pytest.fixture
def sample_get_request() -> bytes:
    """Sample HTTP GET request."""
    return (
        b"GET /docs/guide.txt HTTP/1.1\r\n"
        b"Host: localhost:5500\r\n"
        b"User-Agent: pytest\r\n"
        b"Accept: */*\r\n"
        b"\r\n"
    )


@pytest.fixture
def sample_post_request() -> bytes:
    """Sample HTTP POST request with a form body."""
    body = b"name=John&note=hi"
    head = (
        b"POST /submit HTTP/1.1\r\n"
        b"Host: localhost:5500\r\n"
        b"Content-Type: application/x-www-form-urlencoded\r\n"
        b"Content-Length: %d\r\n"
        b"\r\n"
    ) % len(body)
    return head + body


@pytest.fixture
def config(site: Path) -> ServerConfig:
    """Test server configuration on a free port."""
    return ServerConfig(
        root=site,
        host="127.0.0.1",
        port=0,  # Let OS pick a free port
        min_workers=2,
        max_workers=4,
        timeout=2.0,
        log_level="WARNING",
    )


class BackgroundServer:
    """Runs a FileServer in a daemon thread for integration tests."""

    def __init__(self, server: FileServer):
        self.server = server
        self._thread: threading.Thread = None

    @property
    def address(self) -> tuple[str, int]:
        return self.server.address

    def start(self):
        self._thread = threading.Thread(target=self.server.run, daemon=True)
        self._thread.start()

        if not self.server.wait_until_ready(timeout=5.0):
            raise RuntimeError("Server failed to start")

    def stop(self):
        self.server.shutdown()
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=10.0)

    def request(self, data: bytes, timeout: float = 5.0) -> bytes:
        return send_raw(self.address, data, timeout)


@pytest.fixture
def running_server(config: ServerConfig) -> Generator[BackgroundServer, None, None]:
    """A FileServer serving the `site` fixture."""
    background = BackgroundServer(FileServer(config))
    background.start()

    yield background

    background.stop()


# =============================================================================
# RAW CLIENT HELPERS
# =============================================================================

def send_raw(address: tuple[str, int], data: bytes, timeout: float = 5.0) -> bytes:
    """Send raw bytes and read until the server closes the connection."""
    with socket.create_connection(address, timeout=timeout) as sock:
        sock.sendall(data)
        return read_all(sock)


def read_all(sock: socket.socket) -> bytes:
    chunks = []
    while True:
        chunk = sock.recv(65536)
        if not chunk:
            break
        chunks.append(chunk)
    return b"".join(chunks)


def split_response(raw: bytes) -> tuple[int, dict, bytes]:
    """Split raw response bytes into (status code, headers, body)."""
    head, _, body = raw.partition(b"\r\n\r\n")
    lines = head.decode("utf-8").split("\r\n")
    status_code = int(lines[0].split(" ")[1])

    headers = {}
    for line in lines[1:]:
        name, _, value = line.partition(":")
        headers[name.strip().lower()] = value.strip()

    return status_code, headers, body
