"""
Transport layer: the listening socket, per-client connections and the
optional bounded worker pool.

    SocketServer ──accept──► Connection ──► HTTPServer (thread or pool)
"""

from .connection import Connection, ConnectionState
from .socket_server import SocketServer
from .thread_pool import ThreadPool

__all__ = [
    "Connection",
    "ConnectionState",
    "SocketServer",
    "ThreadPool",
]
