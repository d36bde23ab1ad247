"""
=============================================================================
CLIENT CONNECTION
=============================================================================

Wraps one accepted socket for exactly one request/response exchange.

=============================================================================
LIFECYCLE
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   NEW ──► READING ──► WRITING ──► CLOSING ──► CLOSED                 │
    │              │                       ▲                               │
    │              └── nothing usable ─────┘                               │
    │                  (peer closed, reset, timeout)                       │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

There is no keep-alive: after one response the socket is shut down and
closed. Use the connection as a context manager so that always happens:

    with Connection(sock, address) as conn:
        data = conn.read_request()
        if data:
            conn.send_response(response_bytes)

=============================================================================
HOW MUCH IS READ
=============================================================================

Only the request line matters, so reading stops at the first of:

    1. a CRLF is in the buffer       (request line complete)
    2. the peer closes its side      (whatever arrived is parsed)
    3. max_request_size is reached   (the parser sees the truncated data)

TCP may split the request line across several recv() calls; the buffer
accumulates chunks until one of the conditions holds.

=============================================================================
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple
import logging
import socket
import time
import uuid


logger = logging.getLogger(__name__)

CRLF = b"\r\n"

# Upper bounds on reading leftover client bytes during close()
DRAIN_TIMEOUT = 0.5
DRAIN_LIMIT = 65536


class ConnectionState(Enum):
    """Where a connection is in its single exchange."""

    NEW = "new"
    READING = "reading"
    WRITING = "writing"
    CLOSING = "closing"
    CLOSED = "closed"


@dataclass
class Connection:
    """
    A client socket plus the bookkeeping needed for logging.

    Attributes:
        socket: The accepted client socket.
        address: Client (ip, port).
        id: Short identifier used as a log prefix.
        buffer_size: Bytes requested per recv() call.
        timeout: Socket timeout in seconds, None to block.
        max_request_size: Stop reading once the buffer is this large.
        bytes_received: Total bytes read from the client.
        bytes_sent: Total bytes written to the client.
    """

    socket: socket.socket
    address: Tuple[str, int]

    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.NEW
    created_at: float = field(default_factory=time.time)

    buffer_size: int = 8192
    timeout: Optional[float] = None
    max_request_size: int = 65536

    bytes_received: int = 0
    bytes_sent: int = 0

    _buffer: bytes = field(default=b"", repr=False)

    def __post_init__(self):
        self.socket.settimeout(self.timeout)

    @property
    def client_ip(self) -> str:
        return str(self.address[0]) if self.address else "-"

    @property
    def age(self) -> float:
        """Seconds since the connection was accepted."""
        return time.time() - self.created_at

    # =========================================================================
    # READING
    # =========================================================================

    def read_request(self) -> Optional[bytes]:
        """
        Read until the request line is complete.

        Returns:
            The buffered bytes (at least one byte), or None when nothing
            usable arrived: the peer closed without sending, the read
            timed out, or the connection failed.
        """
        self.state = ConnectionState.READING

        try:
            while CRLF not in self._buffer:
                chunk = self.socket.recv(self.buffer_size)
                if not chunk:
                    break

                self._buffer += chunk
                self.bytes_received += len(chunk)

                if len(self._buffer) >= self.max_request_size:
                    logger.warning(
                        f"[{self.id}] Request exceeds {self.max_request_size} bytes, "
                        f"parsing what was received"
                    )
                    break

        except socket.timeout:
            logger.warning(f"[{self.id}] Read timed out after {self.timeout}s")
            return None
        except OSError as e:
            logger.warning(f"[{self.id}] Read failed: {e}")
            return None

        if not self._buffer:
            logger.debug(f"[{self.id}] Peer closed without sending a request")
            return None

        return self._buffer

    # =========================================================================
    # WRITING
    # =========================================================================

    def send_response(self, data: bytes) -> bool:
        """
        Write the whole response.

        Returns:
            True on success, False if the client went away.
        """
        self.state = ConnectionState.WRITING

        try:
            self.socket.sendall(data)
        except OSError as e:
            logger.warning(f"[{self.id}] Send failed: {e}")
            return False

        self.bytes_sent += len(data)
        return True

    # =========================================================================
    # CLOSING
    # =========================================================================

    def close(self):
        """
        Shut down and close the socket. Safe to call more than once.

        Sends FIN first, drains whatever the client still sends (at most
        DRAIN_LIMIT bytes within DRAIN_TIMEOUT seconds), then releases the
        descriptor.
        """
        if self.state == ConnectionState.CLOSED:
            return

        self.state = ConnectionState.CLOSING

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # peer already gone

        self._drain()

        try:
            self.socket.close()
        except OSError:
            pass

        self.state = ConnectionState.CLOSED
        logger.debug(f"[{self.id}] Connection closed after {self.age:.3f}s")

    def _drain(self):
        """Discard unread client data, bounded in bytes and total time."""
        deadline = time.monotonic() + DRAIN_TIMEOUT
        drained = 0

        try:
            while drained < DRAIN_LIMIT:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    break
                self.socket.settimeout(remaining)
                chunk = self.socket.recv(1024)
                if not chunk:
                    break
                drained += len(chunk)
        except OSError:
            pass  # timeout or reset; nothing left worth reading

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
