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

from statichttp import HTTPServer, ServerConfig
from statichttp.handlers import StaticFileHandler
from statichttp.http import TemplateRenderer


ERROR_TEMPLATE = (
    "<title>{%status_code%}</title>"
    "<h1>{%status_code%} {%reason_phrase%}</h1>"
    "<p>{%message%}</p>"
)

LISTING_TEMPLATE = "<h1>Index of {%path%}</h1><ul>{%list%}\n</ul>"


@pytest.fixture
def doc_root(tmp_path: Path) -> Path:
    """
    Document root used across tests:

        www/
        ├── hello.txt          "hello"
        ├── style.css
        ├── data.xyz           unknown extension
        ├── docs/
        │   ├── index.html     "<p>docs</p>"
        │   └── guide.html
        └── assets/            no index.html
            ├── img/
            ├── Zeta/
            ├── b.png
            └── a.txt
    """
    root = tmp_path / "www"
    root.mkdir()

    (root / "hello.txt").write_text("hello")
    (root / "style.css").write_text("body { color: red; }")
    (root / "data.xyz").write_text("???")

    docs = root / "docs"
    docs.mkdir()
    (docs / "index.html").write_text("<p>docs</p>")
    (docs / "guide.html").write_text("<p>guide</p>")

    assets = root / "assets"
    assets.mkdir()
    (assets / "img").mkdir()
    (assets / "Zeta").mkdir()
    (assets / "b.png").write_bytes(b"\x89PNG\r\n\x1a\n")
    (assets / "a.txt").write_text("a")

    return root


@pytest.fixture
def template_dir(tmp_path: Path) -> Path:
    """Minimal error and listing templates, outside the document root."""
    directory = tmp_path / "templates"
    directory.mkdir()
    (directory / "error.html").write_text(ERROR_TEMPLATE)
    (directory / "dirlist.html").write_text(LISTING_TEMPLATE)
    return directory


@pytest.fixture
def renderer(template_dir: Path) -> TemplateRenderer:
    return TemplateRenderer(template_dir)


@pytest.fixture
def handler(doc_root: Path, renderer: TemplateRenderer) -> StaticFileHandler:
    return StaticFileHandler(doc_root, templates=renderer)


@pytest.fixture
def free_port() -> int:
    """Get a free port for testing."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]


class TestServer:
    """Test server helper that runs in a background thread."""

    __test__ = False

    def __init__(self, server: HTTPServer):
        self.server = server
        self._thread: threading.Thread = None

    @property
    def port(self) -> int:
        return self.server.address[1]

    def start(self):
        """Start server in background thread and wait until it listens."""
        self._thread = threading.Thread(target=self.server.run, daemon=True)
        self._thread.start()

        if not self.server.wait_until_ready(timeout=5.0):
            raise RuntimeError("Server failed to start")

    def stop(self):
        self.server.shutdown()
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5.0)

    def request(self, raw: bytes, timeout: float = 5.0) -> bytes:
        """Send raw bytes and read until the server closes the connection."""
        with socket.create_connection(("127.0.0.1", self.port), timeout=timeout) as s:
            s.sendall(raw)
            chunks = []
            while True:
                chunk = s.recv(65536)
                if not chunk:
                    break
                chunks.append(chunk)
        return b"".join(chunks)

    def get(self, url: str, version: str = "HTTP/1.1") -> bytes:
        return self.request(f"GET {url} {version}\r\nHost: localhost\r\n\r\n".encode())


def make_server(doc_root: Path, template_dir: Path, **overrides) -> TestServer:
    config = ServerConfig(
        host="127.0.0.1",
        port=0,
        root_dir=str(doc_root),
        template_dir=str(template_dir),
        log_level="WARNING",
        **overrides,
    )
    return TestServer(HTTPServer(config))


@pytest.fixture
def test_server(doc_root: Path, template_dir: Path) -> Generator[TestServer, None, None]:
    """Server with a thread per connection."""
    srv = make_server(doc_root, template_dir)
    srv.start()
    yield srv
    srv.stop()


@pytest.fixture
def pooled_server(doc_root: Path, template_dir: Path) -> Generator[TestServer, None, None]:
    """Server with a two-worker pool."""
    srv = make_server(doc_root, template_dir, max_workers=2, queue_size=4)
    srv.start()
    yield srv
    srv.stop()
