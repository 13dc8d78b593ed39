"""
=============================================================================
minihttpd
=============================================================================

A small HTTP/1.1 server built directly on sockets.

    Client ──TCP──► SocketServer ──► Connection ──► RequestParser
                                                         │
                                                         ▼
    Client ◄──bytes── HTTPResponse.to_bytes() ◄──── Router + handlers
                                                         │
                                                         ▼
                                                     FileStore

One request per connection, one thread per connection.

Routes:
    /                 200, empty body
    /echo/<text>      200, body = <text>
    /user-agent       200, body = User-Agent header
    /files/<name>     GET reads, POST writes (needs --directory)

Quick start:
    python -m minihttpd --directory /tmp/data

=============================================================================
"""

__version__ = "1.0.0"

from .server import HTTPServer, create_app
from .config import ServerConfig

__all__ = ["HTTPServer", "ServerConfig", "create_app", "__version__"]
