"""
=============================================================================
CONNECTION MANAGEMENT
=============================================================================

Wraps one accepted client socket for a single request/response exchange.

=============================================================================
BUFFERED I/O
=============================================================================

TCP does not preserve message boundaries, and recv() one byte at a time
to find line endings would be painfully slow. The socket is wrapped in
two buffered file objects instead:

    socket.makefile("rb")  ──►  reader   readline() / read(n) for the parser
    socket.makefile("wb")  ──►  writer   write() + flush() for the response

=============================================================================
LIFECYCLE
=============================================================================

    NEW ──► READING ──► PROCESSING ──► WRITING ──► CLOSING ──► CLOSED
     │         │             │            │            ▲
     └─────────┴─────────────┴────────────┴────────────┘
                 (any failure goes straight to close)

There is no keep-alive: every connection serves exactly one request and
is then closed, whatever Connection header the client sent. Use the
connection as a context manager so close() runs on every exit path.

=============================================================================
"""

import logging
import socket
import time
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import BinaryIO, Optional

logger = logging.getLogger(__name__)


class ConnectionState(Enum):
    """Where a connection is in its single request/response cycle."""

    NEW = "new"
    READING = "reading"
    PROCESSING = "processing"
    WRITING = "writing"
    CLOSING = "closing"
    CLOSED = "closed"


@dataclass
class Connection:
    """
    Represents a client connection.

    Attributes:
        socket: The accepted client socket.
        address: Client's (ip, port) tuple.
        id: Short unique identifier for log correlation.
        state: Current lifecycle state.
        created_at: Timestamp when the connection was accepted.
        timeout: Socket timeout in seconds, None to block forever.
    """

    socket: socket.socket
    address: tuple[str, int]

    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.NEW
    created_at: float = field(default_factory=time.time)
    timeout: Optional[float] = None

    _reader: Optional[BinaryIO] = field(default=None, repr=False)
    _writer: Optional[BinaryIO] = field(default=None, repr=False)

    def __post_init__(self):
        # The listening socket polls with a timeout; make sure the client
        # socket gets its own setting rather than inheriting that one.
        self.socket.settimeout(self.timeout)
        self._reader = self.socket.makefile("rb")
        self._writer = self.socket.makefile("wb")

    @property
    def client_ip(self) -> str:
        return self.address[0]

    @property
    def age(self) -> float:
        """Seconds since the connection was accepted."""
        return time.time() - self.created_at

    @property
    def reader(self) -> BinaryIO:
        """Buffered binary reader over the socket, for the request parser."""
        self.state = ConnectionState.READING
        return self._reader

    # =========================================================================
    # WRITING
    # =========================================================================

    def send_response(self, data: bytes) -> bool:
        """
        Write a fully serialized response and flush it.

        Args:
            data: Complete response bytes.

        Returns:
            True if every byte was handed to the OS, False if the client
            went away (the failure is logged, not raised).
        """
        self.state = ConnectionState.WRITING
        try:
            self._writer.write(data)
            self._writer.flush()
            return True
        except OSError as e:
            logger.warning(f"[{self.id}] Send failed: {e}")
            return False

    # =========================================================================
    # CLOSING
    # =========================================================================

    def close(self):
        """
        Close the connection. Idempotent.

        1. Close the buffered file objects. Flush errors are ignored.
        2. shutdown(SHUT_WR): send FIN so the client sees EOF.
        3. Drain unread client data for up to 0.5s, so close() does not
           turn into an RST that discards the response.
        4. close() the socket and release the descriptor.
        """
        if self.state == ConnectionState.CLOSED:
            return

        self.state = ConnectionState.CLOSING

        for stream in (self._writer, self._reader):
            try:
                stream.close()
            except OSError:
                pass

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # Peer already gone

        try:
            self.socket.settimeout(0.5)
            while self.socket.recv(4096):
                pass
        except OSError:
            pass  # socket.timeout is an OSError too

        try:
            self.socket.close()
        except OSError:
            pass

        self.state = ConnectionState.CLOSED
        logger.debug(f"[{self.id}] Connection closed after {self.age * 1000:.1f}ms")

    # =========================================================================
    # CONTEXT MANAGER
    # =========================================================================

    def __enter__(self) -> "Connection":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Always close, never suppress the exception."""
        self.close()
        return False
