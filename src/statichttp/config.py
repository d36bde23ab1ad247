"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

Every tunable of the server in one dataclass.

    ServerConfig()               defaults: 127.0.0.1:12345, serve "."
    ServerConfig.from_env()      STATICHTTP_* environment variables
    statichttp --port 8000 ...   CLI flags (see __main__.py)

validate() is called once at startup. A bad value raises ValueError there
instead of surfacing later as a failed connection.

=============================================================================
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional
import logging
import os


TEMPLATE_DIR_NAME = "templates"


@dataclass
class ServerConfig:
    """
    Configuration for the static file server.

    =========================================================================
    CONFIGURATION GROUPS
    =========================================================================

    NETWORK     host, port, backlog, buffer_size, max_request_size, timeout
    CONTENT     root_dir, template_dir, directory_listing
    THREADING   max_workers, queue_size
    LOGGING     log_level

    =========================================================================
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    host: str = "127.0.0.1"
    """
    The IP address to bind to.
    - "127.0.0.1" - Localhost only
    - "0.0.0.0" - All network interfaces
    """

    port: int = 12345
    """Port to listen on. 0 lets the OS pick a free one."""

    backlog: int = 5
    """Length of the kernel accept queue."""

    buffer_size: int = 8192
    """Bytes requested per recv() call."""

    max_request_size: int = 64 * 1024
    """
    Stop buffering a request after this many bytes.
    Only the request line is used, so anything beyond it is wasted memory.
    """

    timeout: Optional[float] = None
    """
    Per-connection socket timeout in seconds.
    None = block until the client sends or closes.
    """

    # ─────────────────────────────────────────────────────────────────────
    # CONTENT
    # ─────────────────────────────────────────────────────────────────────

    root_dir: str = "."
    """Document root. Urls are resolved relative to this directory."""

    template_dir: Optional[str] = None
    """
    Directory holding error.html and dirlist.html.
    None = "<root_dir>/templates".
    """

    directory_listing: bool = True
    """
    List directories that have no index.html.
    When False such requests get 403 Forbidden.
    """

    # ─────────────────────────────────────────────────────────────────────
    # THREADING
    # ─────────────────────────────────────────────────────────────────────

    max_workers: Optional[int] = None
    """
    None = one new thread per connection.
    N = fixed pool of N workers; connections beyond queue_size get 503.
    """

    queue_size: int = 64
    """Connections allowed to wait for a pool worker."""

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    """Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)."""

    @property
    def resolved_template_dir(self) -> Path:
        """template_dir, or the templates folder inside the document root."""
        if self.template_dir:
            return Path(self.template_dir)
        return Path(self.root_dir) / TEMPLATE_DIR_NAME

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """
        Create configuration from environment variables.

        =====================================================================
        ENVIRONMENT VARIABLES
        =====================================================================

        STATICHTTP_HOST        Bind address (default: 127.0.0.1)
        STATICHTTP_PORT        Port (default: 12345)
        STATICHTTP_ROOT        Document root (default: .)
        STATICHTTP_TEMPLATES   Template directory (default: <root>/templates)
        STATICHTTP_WORKERS     Pool size (default: thread per connection)
        STATICHTTP_TIMEOUT     Socket timeout in seconds (default: none)
        STATICHTTP_LOG_LEVEL   Logging level (default: INFO)

        =====================================================================

        Raises:
            ValueError: A numeric variable does not parse.
        """
        workers = os.getenv("STATICHTTP_WORKERS")
        timeout = os.getenv("STATICHTTP_TIMEOUT")

        return cls(
            host=os.getenv("STATICHTTP_HOST", "127.0.0.1"),
            port=int(os.getenv("STATICHTTP_PORT", "12345")),
            root_dir=os.getenv("STATICHTTP_ROOT", "."),
            template_dir=os.getenv("STATICHTTP_TEMPLATES") or None,
            max_workers=int(workers) if workers else None,
            timeout=float(timeout) if timeout else None,
            log_level=os.getenv("STATICHTTP_LOG_LEVEL", "INFO"),
        )

    def validate(self) -> None:
        """
        Check every value, raising ValueError on the first bad one.
        """
        if not 0 <= self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")

        if self.backlog < 1:
            raise ValueError("backlog must be >= 1")

        if self.buffer_size < 1024:
            raise ValueError("buffer_size must be >= 1024")

        if self.max_request_size < self.buffer_size:
            raise ValueError("max_request_size must be >= buffer_size")

        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("timeout must be > 0")

        if self.max_workers is not None and self.max_workers < 1:
            raise ValueError("max_workers must be >= 1")

        if self.queue_size < 1:
            raise ValueError("queue_size must be >= 1")

        if not Path(self.root_dir).is_dir():
            raise ValueError(f"Document root is not a directory: {self.root_dir}")

        if not isinstance(logging.getLevelName(self.log_level.upper()), int):
            raise ValueError(f"Unknown log level: {self.log_level}")
