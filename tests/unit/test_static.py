"""
Unit tests for resource resolution against a document root.
"""

import logging
import os

import pytest

from statichttp.handlers import StaticFileHandler, list_directory
from statichttp.http.request import parse_request
from statichttp.http.templates import DirectoryEntry, TemplateRenderer


def get(handler: StaticFileHandler, url: str):
    return handler.resolve(parse_request(f"GET {url} HTTP/1.1\r\n\r\n".encode()))


class TestFiles:

    def test_serves_file(self, handler):
        result = get(handler, "/hello.txt")

        assert result.status_code == 200
        assert result.content_type == "text/plain"
        assert result.body == b"hello"

    def test_index_file(self, doc_root, handler):
        """GET /index.html with index.html = 'hi'."""
        (doc_root / "index.html").write_text("hi")

        result = get(handler, "/index.html")

        assert result == (200, "text/html", b"hi")

    def test_root_serves_index(self, doc_root, handler):
        (doc_root / "index.html").write_text("home")
        assert get(handler, "/").body == b"home"

    def test_missing_file_is_404(self, handler):
        result = get(handler, "/missing.txt")

        assert result.status_code == 404
        assert result.body is None

    def test_unknown_extension_is_415(self, handler):
        """Checked before the filesystem: data.xyz exists but is never read."""
        assert get(handler, "/data.xyz").status_code == 415
        assert get(handler, "/nothing.xyz").status_code == 415

    def test_percent_encoded_name(self, doc_root, handler):
        (doc_root / "my notes.txt").write_text("n")
        assert get(handler, "/my%20notes.txt").body == b"n"

    def test_file_with_extension_that_is_a_directory(self, doc_root, handler):
        (doc_root / "site.html").mkdir()
        assert get(handler, "/site.html").status_code == 404

    def test_binary_content_is_untouched(self, doc_root, handler):
        payload = bytes(range(256))
        (doc_root / "blob.png").write_bytes(payload)
        assert get(handler, "/blob.png").body == payload


class TestInvalidRequests:

    @pytest.mark.parametrize("raw, status", [
        (b"GET /index.html\r\n", 400),
        (b"DELETE /hello.txt HTTP/1.1\r\n", 405),
        (b"GET /hello.txt SPDY/3\r\n", 505),
        (b"", 405),
    ])
    def test_short_circuits(self, handler, raw, status):
        assert handler.resolve(parse_request(raw)) == (status, "", None)

    def test_does_not_touch_filesystem(self, tmp_path):
        """A request rejected by the parser never reaches the root."""
        root = tmp_path / "gone"
        root.mkdir()
        handler = StaticFileHandler(root)
        root.rmdir()

        assert handler.resolve(parse_request(b"GET /x.txt\r\n")).status_code == 400


class TestTraversal:

    @pytest.mark.parametrize("url", [
        "/../secret.txt",
        "/docs/../../secret.txt",
        "/%2e%2e/secret.txt",
        "/..%2Fsecret.txt",
    ])
    def test_escape_is_403(self, doc_root, handler, url, caplog):
        (doc_root.parent / "secret.txt").write_text("top secret")

        with caplog.at_level(logging.WARNING, logger="statichttp.handlers.static"):
            result = get(handler, url)

        assert result.status_code == 403
        assert result.body is None
        assert "traversal" in caplog.text

    def test_dotdot_inside_root_is_fine(self, handler):
        assert get(handler, "/docs/../hello.txt").body == b"hello"

    @pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks unavailable")
    def test_symlink_out_of_root_is_403(self, doc_root, handler):
        outside = doc_root.parent / "outside.txt"
        outside.write_text("x")
        (doc_root / "link.txt").symlink_to(outside)

        assert get(handler, "/link.txt").status_code == 403


class TestUnresolvablePaths:
    """Paths the filesystem refuses are 404, never an exception."""

    def test_overlong_directory_name_is_404(self, handler):
        result = get(handler, "/" + "a" * 300)
        assert result.status_code == 404
        assert result.body is None

    def test_overlong_file_name_is_404(self, handler):
        result = get(handler, "/" + "a" * 300 + ".txt")
        assert result == (404, "text/plain", None)

    @pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks unavailable")
    def test_self_referencing_symlink_is_404(self, doc_root, handler):
        os.symlink(doc_root / "loop.txt", doc_root / "loop.txt")
        assert get(handler, "/loop.txt").status_code == 404

    @pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks unavailable")
    def test_symlink_loop_directory_is_404(self, doc_root, handler):
        os.symlink(doc_root / "loop", doc_root / "loop")
        assert get(handler, "/loop").status_code == 404


class TestDirectories:

    def test_directory_with_index(self, handler):
        """Internal fallthrough to <dir>/index.html, no redirect."""
        result = get(handler, "/docs")
        assert result == (200, "text/html", b"<p>docs</p>")

    def test_trailing_slash_same_as_without(self, handler):
        assert get(handler, "/docs/") == get(handler, "/docs")

    def test_missing_directory_is_404(self, handler):
        assert get(handler, "/nope").status_code == 404

    def test_file_without_extension_is_404(self, doc_root, handler):
        """No extension means 'directory'; a plain file does not qualify."""
        (doc_root / "README").write_text("r")
        assert get(handler, "/README").status_code == 404

    def test_listing(self, handler):
        result = get(handler, "/assets")
        html = result.body.decode()

        assert result.status_code == 200
        assert result.content_type == "text/html"
        assert "<h1>Index of /assets/</h1>" in html
        assert html.index("Zeta/") < html.index("img/") < html.index("a.txt") < html.index("b.png")

    def test_root_listing_without_index(self, handler):
        """GET / with no index.html lists the root."""
        result = get(handler, "/")
        html = result.body.decode()

        assert result.status_code == 200
        assert "<h1>Index of /</h1>" in html
        assert '<li><a href="assets/">assets/</a></li>' in html
        assert '<li><a href="hello.txt">hello.txt</a></li>' in html

    def test_explicit_index_html_is_not_listed(self, handler):
        """Only a request for exactly '/' falls back to the listing."""
        assert get(handler, "/index.html").status_code == 404

    def test_listing_disabled_is_403(self, doc_root, renderer):
        handler = StaticFileHandler(doc_root, templates=renderer, directory_listing=False)

        assert get(handler, "/assets").status_code == 403
        assert get(handler, "/").status_code == 403
        assert get(handler, "/docs").status_code == 200

    def test_listing_without_templates(self, doc_root):
        handler = StaticFileHandler(doc_root)
        html = get(handler, "/assets").body.decode()

        assert "<h1>Index of /assets/</h1>" in html
        assert '<a href="a.txt">a.txt</a>' in html


class TestListDirectory:

    def test_directories_first_then_code_point_order(self, doc_root):
        entries = list_directory(doc_root / "assets")

        assert entries == [
            DirectoryEntry("Zeta", is_dir=True),
            DirectoryEntry("img", is_dir=True),
            DirectoryEntry("a.txt"),
            DirectoryEntry("b.png"),
        ]

    def test_empty_directory(self, tmp_path):
        assert list_directory(tmp_path) == []

    def test_missing_directory_raises(self, tmp_path):
        with pytest.raises(OSError):
            list_directory(tmp_path / "missing")


class TestConstruction:

    def test_missing_root_raises(self, tmp_path):
        with pytest.raises(ValueError):
            StaticFileHandler(tmp_path / "missing")

    def test_default_renderer(self, doc_root):
        assert isinstance(StaticFileHandler(doc_root).templates, TemplateRenderer)
