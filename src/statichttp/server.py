"""
=============================================================================
STATIC HTTP SERVER
=============================================================================

Wires the pieces together. One connection carries exactly one exchange:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   SocketServer.accept()                                              │
    │        │                                                             │
    │        ▼                                                             │
    │   dispatch ── thread per connection (default)                        │
    │        │   └─ ThreadPool (max_workers set) ── queue full ──► 503     │
    │        ▼                                                             │
    │   Connection.read_request()     bytes up to the first CRLF           │
    │        │                                                             │
    │        ▼                                                             │
    │   RequestParser.parse()         HTTPRequest (never raises)           │
    │        │                                                             │
    │        ▼                                                             │
    │   StaticFileHandler.resolve()   status, content type, body           │
    │        │                                                             │
    │        ▼                                                             │
    │   HTTPResponse.to_bytes()       status line, 3 headers, body         │
    │        │                                                             │
    │        ▼                                                             │
    │   Connection.send_response()  ──►  close                             │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

A failure in one worker is logged and answered with 500 when nothing has
been sent yet. It never reaches the accept loop or other connections.

=============================================================================
"""

from typing import Optional, Tuple
import logging
import threading

from .access_log import RequestLog, log_request
from .config import ServerConfig
from .core import Connection, SocketServer, ThreadPool
from .handlers import StaticFileHandler
from .http import HTTPRequest, HTTPResponse, HTTPStatus, RequestParser, TemplateRenderer


logger = logging.getLogger(__name__)


class HTTPServer:
    """
    Static file server over HTTP/1.x.

    Usage:
        server = HTTPServer(ServerConfig(root_dir="./public", port=8000))
        server.run()    # blocks until Ctrl+C / SIGTERM / shutdown()

    Raises:
        ValueError: The configuration is invalid.
    """

    def __init__(self, config: Optional[ServerConfig] = None):
        self.config = config or ServerConfig()
        self.config.validate()

        self.templates = TemplateRenderer(self.config.resolved_template_dir)
        self.handler = StaticFileHandler(
            root_dir=self.config.root_dir,
            templates=self.templates,
            directory_listing=self.config.directory_listing,
        )
        self._parser = RequestParser()

        self._socket_server = SocketServer(self.config)
        self._thread_pool: Optional[ThreadPool] = None
        if self.config.max_workers is not None:
            self._thread_pool = ThreadPool(
                workers=self.config.max_workers,
                queue_size=self.config.queue_size,
            )

        self._running = False

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def address(self) -> Tuple[str, int]:
        """Bound (host, port); the real port once listening on port 0."""
        return self._socket_server.address

    def run(self, host: Optional[str] = None, port: Optional[int] = None):
        """
        Serve until shut down.

        Args:
            host: Override config host.
            port: Override config port.

        Raises:
            OSError: The address cannot be bound.
        """
        if host:
            self.config.host = host
        if port is not None:
            self.config.port = port

        self._setup_logging()

        if not self.config.resolved_template_dir.is_dir():
            logger.warning(
                f"Template directory {self.config.resolved_template_dir} not found, "
                f"using built-in pages"
            )

        if self._thread_pool:
            self._thread_pool.start()

        logger.info(
            f"Serving {self.handler.root_dir} on {self.config.host}:{self.config.port}"
        )

        self._running = True
        try:
            self._socket_server.start(self._handle_connection)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            self._shutdown()

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """Block until the server is accepting connections."""
        return self._socket_server.wait_until_ready(timeout)

    def shutdown(self):
        """Ask the accept loop to stop. run() returns shortly after."""
        self._socket_server.shutdown()

    def _setup_logging(self):
        level = getattr(logging, self.config.log_level.upper(), logging.INFO)

        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        logging.getLogger("statichttp").setLevel(level)

    def _shutdown(self):
        logger.info("Shutting down server...")
        self._running = False

        if self._thread_pool:
            self._thread_pool.shutdown(wait=True)

        logger.info("Server stopped")

    # =========================================================================
    # DISPATCH
    # =========================================================================

    def _handle_connection(self, conn: Connection):
        """Called on the accept thread for every new connection."""
        if self._thread_pool is None:
            thread = threading.Thread(
                target=self._process_connection,
                args=(conn,),
                name=f"conn-{conn.id}",
                daemon=True,
            )
            thread.start()
            return

        if not self._thread_pool.submit(self._process_connection, conn):
            logger.warning(f"[{conn.id}] Worker queue full, rejecting connection")
            with conn:
                self._send(conn, HTTPResponse.error(HTTPStatus.SERVICE_UNAVAILABLE), "-")

    # =========================================================================
    # ONE EXCHANGE
    # =========================================================================

    def handle_request(self, data: bytes) -> Tuple[HTTPRequest, HTTPResponse]:
        """
        Parse raw request bytes and resolve them to a response.

        Pure with respect to the network: usable without a socket.
        """
        request = self._parser.parse(data)

        if request.status >= 400:
            first_line = data.split(b"\r\n", 1)[0][:200]
            logger.warning(f"Malformed request ({request.status}): {first_line!r}")

        return request, HTTPResponse.from_request(request, self.handler)

    def _process_connection(self, conn: Connection):
        """Runs on a worker thread. Always closes the connection."""
        with conn:
            try:
                self._exchange(conn)
            except Exception as e:
                logger.exception(f"[{conn.id}] Unexpected error: {e}")
                if conn.bytes_sent == 0:
                    self._send(conn, HTTPResponse.error(HTTPStatus.INTERNAL_SERVER_ERROR), "-")

    def _exchange(self, conn: Connection):
        data = conn.read_request()
        if data is None:
            return

        request, response = self.handle_request(data)

        logger.debug(f"[{conn.id}] {request.describe()}")
        logger.debug(f"[{conn.id}] {response.describe()}")

        self._send(conn, response, request.request_line)

    def _send(self, conn: Connection, response: HTTPResponse, request_line: str):
        """Serialize, write and record one response."""
        payload = response.to_bytes(self.templates)
        if not conn.send_response(payload):
            return

        header_end = payload.find(b"\r\n\r\n") + 4
        log_request(RequestLog(
            connection_id=conn.id,
            client_ip=conn.client_ip,
            request_line=request_line,
            status_code=response.status_code,
            content_length=len(payload) - header_end,
            duration_ms=conn.age * 1000,
        ))
