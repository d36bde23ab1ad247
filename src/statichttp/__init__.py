"""
=============================================================================
statichttp
=============================================================================

A minimal HTTP/1.x static file server built on raw sockets.

    $ statichttp --root ./public --port 8000
    $ curl -i http://127.0.0.1:8000/

It reads one request line per connection, maps the url onto a document
root and answers with the file, a directory listing or an HTML error page,
then closes the connection.

=============================================================================
PACKAGE LAYOUT
=============================================================================

    statichttp/
    ├── http/            parsing, tables, templates, serialization
    ├── handlers/        url → filesystem resolution
    ├── core/            sockets, connections, worker pool
    ├── access_log.py    one line per exchange
    ├── config.py        ServerConfig
    ├── server.py        HTTPServer, the orchestration
    └── __main__.py      command line

=============================================================================
"""

__version__ = "1.0.0"

from .config import ServerConfig
from .server import HTTPServer

__all__ = ["HTTPServer", "ServerConfig", "__version__"]
