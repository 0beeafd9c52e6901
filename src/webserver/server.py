"""
=============================================================================
HTTP SERVER
=============================================================================

Ties the pieces together:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   SocketServer          accept loop (main thread)                   │
    │        │                                                             │
    │        ▼                                                             │
    │   ThreadPool            one task per connection                     │
    │        │                                                             │
    │        ▼                                                             │
    │   _process_connection   (worker thread)                             │
    │        ├──► RequestParser.parse(conn.reader)   None → close quietly │
    │        ├──► RequestHandler.handle(request)     status + body        │
    │        ├──► ChunkedEncoder.send(response)      chunked (+gzip)      │
    │        └──► conn.close()                                            │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
FAILURE MODEL
=============================================================================

- Classification problems (bad method, missing file, ...) are ordinary
  responses built by the RequestHandler.
- Stream problems (malformed request line, client gone mid-header, reset
  while writing) abort the connection: logged, socket closed, no retry.
- Neither stops the worker or the server.

=============================================================================
"""

import logging
from typing import Optional

from .access_log import AccessLogger
from .config import ServerConfig
from .core import Connection, ConnectionState, SocketServer, ThreadPool
from .handler import RequestHandler
from .http import ChunkedEncoder, HTTPParseError, RequestParser
from .resources import FileSystemStore


logger = logging.getLogger(__name__)


class HTTPServer:
    """
    Concurrent HTTP/1.1 file server.

    Usage:
        server = HTTPServer(ServerConfig(port=8080, root_dir="./public"))
        server.run()  # Blocks until Ctrl+C / SIGTERM

    Attributes:
        config:  Validated configuration.
        handler: The RequestHandler shared by all workers.
    """

    def __init__(self, config: Optional[ServerConfig] = None):
        """
        Args:
            config: Server configuration. Defaults are used if omitted.

        Raises:
            ValueError: If the configuration is invalid.
        """
        self.config = config or ServerConfig()
        self.config.validate()  # Fail-fast on invalid config

        self._socket_server = SocketServer(self.config)
        self._thread_pool = ThreadPool(workers=self.config.workers)
        self._parser = RequestParser()
        self.handler = RequestHandler(
            store=FileSystemStore(self.config.root_dir),
            server_name=self.config.server_name,
        )
        self._access_log = AccessLogger(log_format=self.config.log_format)
        self._running = False

    @property
    def is_running(self) -> bool:
        return self._running

    def run(self, host: Optional[str] = None, port: Optional[int] = None):
        """
        Start the server (blocking).

        Args:
            host: Override config host.
            port: Override config port.

        Raises:
            OSError: If the port cannot be bound.
        """
        if host:
            self.config.host = host
        if port:
            self.config.port = port

        self._running = True
        self._setup_logging()
        self._thread_pool.start()

        logger.info(
            f"Serving {self._describe_root()} on {self.config.host}:{self.config.port} "
            f"with {self.config.workers} workers"
        )

        try:
            self._socket_server.start(self._handle_connection)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            self._shutdown()

    def stop(self):
        """Ask a running server to stop. Safe from any thread."""
        self._socket_server.shutdown()

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """Block until the server is listening (for tests and embedding)."""
        return self._socket_server.wait_until_ready(timeout)

    def _describe_root(self) -> str:
        return str(self.handler.store.root_dir)

    def _setup_logging(self):
        """Configure logging based on config."""
        level = getattr(logging, self.config.log_level.upper(), logging.INFO)

        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        logging.getLogger("webserver").setLevel(level)

    def _shutdown(self):
        """Stop accepting, let queued connections finish, stop workers."""
        logger.info("Shutting down server...")
        self._running = False
        self._thread_pool.shutdown(wait=True, timeout=30.0)
        logger.info("Server stopped")

    def _handle_connection(self, conn: Connection):
        """Queue a connection for a worker (called on the accept thread)."""
        self._thread_pool.submit(self._process_connection, args=(conn,))

    def _process_connection(self, conn: Connection):
        """
        Serve one request on a connection (runs in a worker thread).

        =====================================================================
        STATE MACHINE
        =====================================================================

            Start ─► NoRequest (EOF before any byte)             → close
                  └► RequestLine ─► Headers ─► Classified ─► Encoded → close

        =====================================================================

        Args:
            conn: The client connection, owned by this task until closed.
        """
        with conn:
            try:
                conn.state = ConnectionState.READING
                request = self._parser.parse(conn.reader)
                if request is None:
                    logger.debug(f"[{conn.id}] Client closed before sending a request")
                    return

                conn.state = ConnectionState.PROCESSING
                response = self.handler.handle(request, conn.local_port)

                conn.state = ConnectionState.WRITING
                encoder = ChunkedEncoder(
                    conn.writer,
                    chunk_size=self.config.chunk_size,
                    gzip_level=self.config.gzip_level,
                )
                encoder.send(response, gzip=request.accepts_gzip)

                self._access_log.log(
                    conn.id, conn.client_ip, request, response,
                    duration_ms=conn.age * 1000,
                )

            except HTTPParseError as e:
                logger.warning(
                    f"[{conn.id}] Dropping connection from {conn.client_ip} "
                    f"({e.status_code}): {e}"
                )
            except Exception as e:
                logger.exception(f"[{conn.id}] Connection error: {e}")

