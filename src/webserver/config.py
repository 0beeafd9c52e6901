"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

All tunables of the server in one dataclass, with defaults that match a
plain `webserver` invocation: port 8080, ten worker threads, files served
from the current directory.

=============================================================================
SOURCES
=============================================================================

    ServerConfig()              defaults
    ServerConfig.from_env()     WEBSERVER_* environment variables
    __main__                    CLI arguments override both

Configuration is validated once, when the server is constructed, so a bad
value fails at startup instead of on the first request.

=============================================================================
"""

import logging
import os
from dataclasses import dataclass
from typing import Optional


logger = logging.getLogger(__name__)


DEFAULT_PORT = 8080
DEFAULT_WORKERS = 10


@dataclass
class ServerConfig:
    """
    Configuration for the HTTP server.

    =========================================================================
    CONFIGURATION GROUPS
    =========================================================================

    NETWORK SETTINGS
    - host, port, backlog, timeout

    THREADING SETTINGS
    - workers

    CONTENT
    - root_dir, chunk_size, gzip_level, server_name

    LOGGING
    - log_level, log_format

    =========================================================================
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    host: str = "0.0.0.0"
    """
    The IP address to bind to. All interfaces by default; use
    "127.0.0.1" to accept local connections only.
    """

    port: int = DEFAULT_PORT
    """TCP port, in the open interval (0, 65535)."""

    backlog: int = 128
    """Connections the OS queues while all workers are busy accepting."""

    timeout: Optional[float] = None
    """
    Socket read/write timeout per connection, in seconds.
    None = block forever: a silent client keeps its worker busy.
    """

    # ─────────────────────────────────────────────────────────────────────
    # THREAD POOL
    # ─────────────────────────────────────────────────────────────────────

    workers: int = DEFAULT_WORKERS
    """Fixed number of worker threads, one connection each at a time."""

    # ─────────────────────────────────────────────────────────────────────
    # CONTENT
    # ─────────────────────────────────────────────────────────────────────

    root_dir: str = "."
    """Directory request URIs are resolved against."""

    chunk_size: int = 8192
    """Largest chunk written by the chunked encoder, in bytes."""

    gzip_level: int = 9
    """gzip compression level (1 fastest, 9 smallest)."""

    server_name: str = "COMP4621HttpServer"
    """Server header value and error page footer."""

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    """
    Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
    DEBUG also traces every request and response header line.
    """

    log_format: str = "text"
    """Access log format: 'text' (one line per request) or 'json'."""

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """
        Create configuration from environment variables.

        =====================================================================
        ENVIRONMENT VARIABLES
        =====================================================================

        WEBSERVER_HOST        Bind address (default: 0.0.0.0)
        WEBSERVER_PORT        Port (default: 8080, also used if invalid)
        WEBSERVER_WORKERS     Worker threads (default: 10)
        WEBSERVER_ROOT        Server root directory (default: .)
        WEBSERVER_LOG_LEVEL   Logging level (default: INFO)
        WEBSERVER_LOG_FORMAT  Access log format (default: text)

        =====================================================================
        """
        return cls(
            host=os.getenv("WEBSERVER_HOST", "0.0.0.0"),
            port=parse_port(os.getenv("WEBSERVER_PORT")),
            workers=int(os.getenv("WEBSERVER_WORKERS", str(DEFAULT_WORKERS))),
            root_dir=os.getenv("WEBSERVER_ROOT", "."),
            log_level=os.getenv("WEBSERVER_LOG_LEVEL", "INFO"),
            log_format=os.getenv("WEBSERVER_LOG_FORMAT", "text"),
        )

    def validate(self) -> None:
        """
        Validate configuration values.

        Raises:
            ValueError: On the first invalid value found.
        """
        if not is_valid_port(self.port):
            raise ValueError(f"Invalid port: {self.port}. Must be 1-65534.")

        if self.workers < 1:
            raise ValueError("workers must be >= 1")

        if self.backlog < 0:
            raise ValueError("backlog must be >= 0")

        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("timeout must be > 0")

        if self.chunk_size < 1:
            raise ValueError("chunk_size must be >= 1")

        if not 0 <= self.gzip_level <= 9:
            raise ValueError("gzip_level must be between 0 and 9")

        if self.log_format not in ("text", "json"):
            raise ValueError(f"Invalid log_format: {self.log_format!r}")

        if not os.path.isdir(self.root_dir):
            raise ValueError(f"Server root is not a directory: {self.root_dir}")


def is_valid_port(port: int) -> bool:
    """Ports 0 and 65535 and above are rejected."""
    return 0 < port < 65535


def parse_port(value: Optional[str], default: int = DEFAULT_PORT) -> int:
    """
    Parse a port from the command line or the environment.

    Args:
        value:   Port as text, or None if not given.
        default: Port used when value is missing or invalid.

    Returns:
        A port in the open interval (0, 65535). Invalid input is not fatal:
        a warning is logged and the default is returned.
    """
    if value is None:
        return default

    try:
        port = int(value)
    except ValueError:
        logger.warning(f"Invalid port {value!r}, using default port {default}")
        return default

    if not is_valid_port(port):
        logger.warning(f"Port {port} out of range, using default port {default}")
        return default

    return port
