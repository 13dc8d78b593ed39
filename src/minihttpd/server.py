"""
=============================================================================
HTTP SERVER
=============================================================================

Ties the pieces together: socket server, request parser, router and
response serializer.

=============================================================================
REQUEST FLOW
=============================================================================

    SocketServer (main thread)
        │ accept()
        ▼
    _handle_connection(conn)      spawn one thread per connection
        │
        ▼
    _process_connection(conn)     (connection thread)
        │
        ├─► parser.parse(conn.reader)     HTTPParseError → log, close
        │
        ├─► router.handle(request)        exception → log, 500
        │
        ├─► response.to_bytes()           fully serialized first
        │
        ├─► conn.send_response(data)      failure → log, close
        │
        └─► conn.close()                  always

=============================================================================
ERROR POLICY
=============================================================================

- A request we cannot parse gets NO response. The connection is simply
  closed, so the client sees either a complete response or a closed
  socket, never a half-written one.
- A handler that raises gets a 500 with an empty body.
- Only the affected connection's thread ever ends because of an error;
  the accept loop keeps running.

=============================================================================
"""

import logging
import threading
import time
from typing import Optional

from .config import ServerConfig
from .core import SocketServer, Connection, ConnectionState
from .handlers import build_router
from .http import (
    HTTPParseError,
    HTTPResponse,
    HTTPStatus,
    RequestParser,
    Router,
    internal_error,
)
from .storage import ByteStore, FileStore

logger = logging.getLogger(__name__)


class HTTPServer:
    """
    Thread-per-connection HTTP/1.1 server.

    =========================================================================
    USAGE
    =========================================================================

        server = HTTPServer(ServerConfig(port=4221, directory="/tmp/data"))
        server.run()          # blocks until Ctrl+C / SIGTERM

    For tests, run it on a background thread with port=0:

        server = HTTPServer(ServerConfig(host="127.0.0.1", port=0))
        threading.Thread(target=server.run, daemon=True).start()
        server.wait_until_ready(5.0)
        host, port = server.address

    =========================================================================
    """

    def __init__(
        self,
        config: Optional[ServerConfig] = None,
        store: Optional[ByteStore] = None,
    ):
        """
        Args:
            config: Server configuration. Defaults to ServerConfig().
            store: Byte store for /files/. When omitted, a FileStore is
                   created from config.directory (if set).
        """
        self.config = config or ServerConfig()
        self.config.validate()

        if store is None and self.config.directory:
            store = FileStore(self.config.directory)
        self.store = store

        self._socket_server = SocketServer(self.config)
        self._parser = RequestParser(max_line_size=self.config.max_line_size)
        self._router = build_router(self.store)

    @property
    def is_running(self) -> bool:
        return self._socket_server.is_running

    @property
    def router(self) -> Router:
        return self._router

    @property
    def address(self):
        return self._socket_server.address

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        return self._socket_server.wait_until_ready(timeout)

    # =========================================================================
    # SERVER LIFECYCLE
    # =========================================================================

    def run(self):
        """
        Start the server (blocking).

        Returns after shutdown() is called or the process receives
        SIGINT/SIGTERM.
        """
        self._setup_logging()

        logger.info(
            f"Starting {self.config.server_name} on {self.config.host}:{self.config.port}"
            + (f", serving files from {self.store!r}" if self.store else "")
        )

        try:
            self._socket_server.start(self._handle_connection)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            logger.info("Server stopped")

    def shutdown(self):
        """Stop accepting connections. In-flight connections finish on their own."""
        self._socket_server.shutdown()

    def _setup_logging(self):
        """Configure logging based on config."""
        level = getattr(logging, self.config.log_level.upper(), logging.INFO)

        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        logging.getLogger("minihttpd").setLevel(level)

    # =========================================================================
    # REQUEST HANDLING
    # =========================================================================

    def _handle_connection(self, conn: Connection):
        """
        Give the connection its own thread.

        Called by SocketServer on the accept thread, so it must not block.
        Connections share nothing but the store and the status table.
        """
        worker = threading.Thread(
            target=self._process_connection,
            args=(conn,),
            name=f"conn-{conn.id}",
            daemon=True,
        )
        worker.start()

    def _process_connection(self, conn: Connection):
        """
        Serve exactly one request on the connection, then close it.
        """
        with conn:
            # ─────────────────────────────────────────────────────────────
            # READ + PARSE
            # ─────────────────────────────────────────────────────────────
            start_time = time.time()
            try:
                request = self._parser.parse(conn.reader, conn.address)
            except HTTPParseError as e:
                logger.warning(f"[{conn.id}] Dropping connection from {conn.client_ip}: {e}")
                return
            except OSError as e:
                logger.warning(f"[{conn.id}] Read failed from {conn.client_ip}: {e}")
                return

            # ─────────────────────────────────────────────────────────────
            # DISPATCH
            # ─────────────────────────────────────────────────────────────
            conn.state = ConnectionState.PROCESSING
            response = self.dispatch(request)

            # ─────────────────────────────────────────────────────────────
            # SERIALIZE + SEND
            # ─────────────────────────────────────────────────────────────
            data = response.to_bytes()
            sent = conn.send_response(data)

            duration_ms = (time.time() - start_time) * 1000
            self._log_access(conn, request, response, sent, duration_ms)

    def dispatch(self, request) -> HTTPResponse:
        """
        Route a parsed request, converting handler crashes into a 500.
        """
        try:
            return self._router.handle(request)
        except Exception as e:
            logger.exception(f"Handler error for {request.method} {request.path}: {e}")
            return internal_error()

    def _log_access(self, conn, request, response, sent, duration_ms):
        """One line per request, roughly Apache common log format."""
        status = response.status
        level = logging.INFO
        if status >= HTTPStatus.INTERNAL_SERVER_ERROR or not sent:
            level = logging.WARNING
        logger.log(
            level,
            f'{conn.client_ip} "{request.method} {request.path} {request.version}" '
            f"{int(status)} {len(response.body)} {duration_ms:.2f}ms"
            + ("" if sent else " (not delivered)"),
        )


def create_app(
    config: Optional[ServerConfig] = None,
    store: Optional[ByteStore] = None,
) -> HTTPServer:
    """Factory for HTTPServer instances."""
    return HTTPServer(config, store)
