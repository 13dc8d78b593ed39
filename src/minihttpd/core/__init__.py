"""
=============================================================================
CORE NETWORKING
=============================================================================

Transport-level pieces of the server, below HTTP:

    SocketServer   binds the port and runs the accept loop
    Connection     one accepted client socket, buffered, closed exactly once

The HTTP server on top decides what to do with each Connection (it gives
every one its own thread).

=============================================================================
"""

from .socket_server import SocketServer
from .connection import Connection, ConnectionState

__all__ = [
    "SocketServer",
    "Connection",
    "ConnectionState",
]
