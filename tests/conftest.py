"""
pytest configuration and fixtures.
"""

import gzip
import socket
import threading
from typing import Callable, Generator, List, Tuple
import pytest

# Add src to path for imports
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from webserver import HTTPServer, ServerConfig
from webserver.handler import RequestHandler
from webserver.resources import FileSystemStore


INDEX_HTML = b"<html><body><h1>It works!</h1></body></html>\n"
STYLE_CSS = b"body { color: #333; }\n" * 50
LOGO_PNG = b"\x89PNG\r\n\x1a\n" + bytes(range(256)) * 40  # > one 8 KiB chunk


@pytest.fixture
def sample_get_request() -> bytes:
    """Sample HTTP GET request."""
    return (
        b"GET /index.html HTTP/1.1\r\n"
        b"Host: localhost:8080\r\n"
        b"User-Agent: pytest\r\n"
        b"Accept-Encoding: gzip, deflate\r\n"
        b"\r\n"
    )


@pytest.fixture
def sample_post_request() -> bytes:
    """Sample HTTP POST request with a body the server never reads."""
    body = b'{"name": "John"}'
    return (
        b"POST /form HTTP/1.1\r\n"
        b"Host: localhost:8080\r\n"
        b"Content-Type: application/json\r\n"
        + f"Content-Length: {len(body)}\r\n".encode()
        + b"\r\n"
    ) + body


@pytest.fixture
def www_root(tmp_path: Path) -> Path:
    """
    A small server root:

        index.html  style.css  app.js  data.xml  notes.txt  README
        images/logo.png
        docs/        (directory)
    """
    (tmp_path / "index.html").write_bytes(INDEX_HTML)
    (tmp_path / "style.css").write_bytes(STYLE_CSS)
    (tmp_path / "app.js").write_bytes(b"console.log('hi');\n")
    (tmp_path / "data.xml").write_bytes(b"<data/>\n")
    (tmp_path / "notes.txt").write_bytes(b"plain text is not served\n")
    (tmp_path / "README").write_bytes(b"no extension\n")
    (tmp_path / "images").mkdir()
    (tmp_path / "images" / "logo.png").write_bytes(LOGO_PNG)
    (tmp_path / "docs").mkdir()
    return tmp_path


@pytest.fixture
def handler(www_root: Path) -> RequestHandler:
    """Request handler serving the www_root fixture."""
    return RequestHandler(FileSystemStore(www_root))


@pytest.fixture
def free_port() -> int:
    """Get a free port for testing."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(('127.0.0.1', 0))
        return s.getsockname()[1]


def decode_chunked(data: bytes) -> bytes:
    """
    Reassemble a chunked body (everything after the blank header line).

    Raises AssertionError if the framing is broken or the last chunk is
    missing.
    """
    body = b""
    while True:
        size_line, sep, data = data.partition(b"\r\n")
        assert sep, "missing chunk size line"
        size = int(size_line, 16)
        if size == 0:
            assert data == b"\r\n", "bad last chunk"
            return body
        body += data[:size]
        assert data[size:size + 2] == b"\r\n", "chunk not terminated by CRLF"
        data = data[size + 2:]


def split_response(raw: bytes) -> Tuple[List[str], bytes]:
    """
    Split raw response bytes into header lines and the decoded body.

    The body is un-chunked, then gunzipped if Content-encoding says so.
    """
    head, sep, rest = raw.partition(b"\r\n\r\n")
    assert sep, "response head not terminated"
    headers = head.decode("utf-8").split("\r\n")
    body = decode_chunked(rest)
    if any(h.lower() == "content-encoding: gzip" for h in headers):
        body = gzip.decompress(body)
    return headers, body


@pytest.fixture
def parse_response() -> Callable[[bytes], Tuple[List[str], bytes]]:
    """The split_response helper, as a fixture."""
    return split_response


class TestServer:
    """Test server helper that runs in a background thread."""

    def __init__(self, server: HTTPServer, port: int):
        self.server = server
        self.port = port
        self._thread: threading.Thread = None

    def start(self):
        """Start server in background thread."""
        self._thread = threading.Thread(
            target=self.server.run,
            daemon=True
        )
        self._thread.start()

        if not self.server.wait_until_ready(timeout=5.0):
            raise RuntimeError("Server failed to start")

    def stop(self):
        """Stop the server."""
        if self.server.is_running:
            self.server.stop()

        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5.0)

    def request(self, raw: bytes, timeout: float = 5.0) -> bytes:
        """Send raw bytes and read until the server closes the connection."""
        with socket.create_connection(("127.0.0.1", self.port), timeout=timeout) as s:
            s.sendall(raw)
            chunks = []
            while True:
                data = s.recv(65536)
                if not data:
                    break
                chunks.append(data)
        return b"".join(chunks)


@pytest.fixture
def test_server(free_port: int, www_root: Path) -> Generator[TestServer, None, None]:
    """Create a test server serving www_root."""
    server = HTTPServer(ServerConfig(
        host="127.0.0.1",
        port=free_port,
        workers=4,
        root_dir=str(www_root),
        timeout=5.0,
        log_level="WARNING",
    ))

    test_srv = TestServer(server, free_port)
    test_srv.start()

    yield test_srv

    test_srv.stop()
