"""
End-to-end tests over real sockets.
"""

import socket
import threading

import pytest

from statichttp import HTTPServer, ServerConfig


def split_response(data: bytes):
    """Split wire bytes into (status line, headers dict, body)."""
    head, _, body = data.partition(b"\r\n\r\n")
    lines = head.decode("utf-8").split("\r\n")
    headers = dict(line.split(": ", 1) for line in lines[1:])
    return lines[0], headers, body


class TestScenarios:

    def test_serves_index(self, doc_root, test_server):
        (doc_root / "index.html").write_text("hi")

        status, headers, body = split_response(test_server.get("/index.html"))

        assert status == "HTTP/1.1 200 OK"
        assert headers["Content-Type"] == "text/html"
        assert headers["Content-Length"] == "2"
        assert body == b"hi"
        assert list(headers) == ["Date", "Content-Type", "Content-Length"]

    def test_root_lists_directory_without_index(self, test_server):
        status, headers, body = split_response(test_server.get("/"))
        html = body.decode()

        assert status == "HTTP/1.1 200 OK"
        assert headers["Content-Type"] == "text/html"
        assert html.index("assets/") < html.index("docs/") < html.index("data.xyz")

    def test_unsupported_type(self, test_server):
        status, headers, body = split_response(test_server.get("/data.xyz"))

        assert status == "HTTP/1.1 415 Unsupported Media Type"
        assert b"The requested file format is currently not supported." in body

    def test_missing_version_is_400(self, test_server):
        status, _, body = split_response(test_server.request(b"GET /index.html\r\n\r\n"))

        assert status == "HTTP/1.1 400 Bad Request"
        assert b"Please check the request format." in body

    def test_missing_file(self, test_server):
        status, headers, body = split_response(test_server.get("/missing.txt"))

        assert status == "HTTP/1.1 404 Not Found"
        assert headers["Content-Type"] == "text/html"
        assert b"cannot be found" in body
        assert headers["Content-Length"] == str(len(body))


class TestProtocol:

    def test_echoes_http_1_0(self, test_server):
        status, _, _ = split_response(test_server.get("/hello.txt", version="HTTP/1.0"))
        assert status == "HTTP/1.0 200 OK"

    def test_unknown_method(self, test_server):
        status, _, body = split_response(test_server.request(b"DELETE /hello.txt HTTP/1.1\r\n\r\n"))

        assert status == "HTTP/1.1 405 Method Not Allowed"
        assert b"GET is currently the only supported method." in body

    def test_post_is_served_like_get(self, test_server):
        status, _, body = split_response(test_server.request(b"POST /hello.txt HTTP/1.1\r\n\r\n"))

        assert status == "HTTP/1.1 200 OK"
        assert body == b"hello"

    def test_bad_version(self, test_server):
        status, _, _ = split_response(test_server.request(b"GET /hello.txt HTX/1.1\r\n\r\n"))
        assert status == "HTTP/1.1 505 HTTP Version Not Supported"

    def test_request_line_split_across_packets(self, test_server):
        with socket.create_connection(("127.0.0.1", test_server.port), timeout=5) as s:
            s.sendall(b"GET /hel")
            s.sendall(b"lo.txt HTTP/1.1\r\n\r\n")
            data = b""
            while True:
                chunk = s.recv(4096)
                if not chunk:
                    break
                data += chunk

        assert split_response(data)[2] == b"hello"

    def test_connection_closed_after_response(self, test_server):
        """One exchange per connection: the server closes after replying."""
        with socket.create_connection(("127.0.0.1", test_server.port), timeout=5) as s:
            s.sendall(b"GET /hello.txt HTTP/1.1\r\n\r\n")
            data = b""
            while True:
                chunk = s.recv(4096)
                if not chunk:
                    break
                data += chunk

        assert data.endswith(b"hello")

    def test_client_closing_without_request(self, test_server):
        """An empty connection gets no response and does not disturb the server."""
        with socket.create_connection(("127.0.0.1", test_server.port), timeout=5):
            pass

        status, _, _ = split_response(test_server.get("/hello.txt"))
        assert status == "HTTP/1.1 200 OK"

    def test_traversal_is_forbidden(self, doc_root, test_server):
        (doc_root.parent / "secret.txt").write_text("secret")

        status, _, body = split_response(test_server.get("/../secret.txt"))

        assert status == "HTTP/1.1 403 Forbidden"
        assert b"secret" not in body

    def test_directory_with_index(self, test_server):
        status, _, body = split_response(test_server.get("/docs/"))

        assert status == "HTTP/1.1 200 OK"
        assert body == b"<p>docs</p>"


class TestConcurrency:

    def test_parallel_clients(self, test_server):
        results = []
        lock = threading.Lock()

        def fetch():
            data = test_server.get("/hello.txt")
            with lock:
                results.append(split_response(data)[2])

        threads = [threading.Thread(target=fetch) for _ in range(20)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=10)

        assert results == [b"hello"] * 20

    def test_pooled_server_serves(self, pooled_server):
        for _ in range(5):
            status, _, body = split_response(pooled_server.get("/hello.txt"))
            assert status == "HTTP/1.1 200 OK"
            assert body == b"hello"

    def test_slow_client_does_not_block_others(self, test_server):
        with socket.create_connection(("127.0.0.1", test_server.port), timeout=5) as slow:
            slow.sendall(b"GET /hel")

            status, _, _ = split_response(test_server.get("/hello.txt"))
            assert status == "HTTP/1.1 200 OK"


class TestHandleRequest:
    """HTTPServer.handle_request works without sockets."""

    def test_handle_request(self, doc_root, template_dir):
        server = HTTPServer(ServerConfig(root_dir=str(doc_root), template_dir=str(template_dir)))

        request, response = server.handle_request(b"GET /hello.txt HTTP/1.1\r\n\r\n")

        assert request.url == "/hello.txt"
        assert response.status_code == 200
        assert response.content == b"hello"

    def test_unexpected_error_becomes_500(self, doc_root, template_dir, monkeypatch):
        from conftest import make_server

        srv = make_server(doc_root, template_dir)

        def explode(request):
            raise RuntimeError("disk on fire")

        monkeypatch.setattr(srv.server.handler, "resolve", explode)
        srv.start()
        try:
            status, _, body = split_response(srv.get("/hello.txt"))
        finally:
            srv.stop()

        assert status == "HTTP/1.1 500 Internal Server Error"
        assert b"unknown errors" in body

    def test_invalid_config_raises(self, tmp_path):
        with pytest.raises(ValueError):
            HTTPServer(ServerConfig(root_dir=str(tmp_path / "missing")))


class TestOverload:

    def test_full_queue_answers_503(self, doc_root, template_dir, monkeypatch):
        from conftest import make_server

        srv = make_server(doc_root, template_dir, max_workers=1, queue_size=1)
        monkeypatch.setattr(srv.server._thread_pool, "submit", lambda *args: False)
        srv.start()
        try:
            status, headers, body = split_response(srv.get("/hello.txt"))
        finally:
            srv.stop()

        assert status == "HTTP/1.1 503 Service Unavailable"
        assert headers["Content-Type"] == "text/html"
        assert b"busy" in body
