"""
=============================================================================
CONNECTION MANAGEMENT
=============================================================================

Wraps one accepted client socket with what the request pipeline needs:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    Connection Responsibilities                       │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │  1. STREAMS                                                          │
    │     └── reader: buffered binary stream, read line by line           │
    │     └── writer: buffered binary stream for the chunked encoder      │
    │                                                                      │
    │  2. LOCAL PORT                                                       │
    │     └── The port the client connected to, shown on error pages      │
    │                                                                      │
    │  3. STATE TRACKING                                                   │
    │     └── NEW → READING → PROCESSING → WRITING → CLOSED               │
    │                                                                      │
    │  4. CLOSE                                                            │
    │     └── Half-close, drain, close: no file descriptor leaks          │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
ONE REQUEST, THEN CLOSE
=============================================================================

The server does not support keep-alive. Each connection carries exactly
one request and one response, then it is closed by the worker that owns
it. There is no keep-alive state and no request counting.

=============================================================================
"""

import socket
import time
import logging
import uuid
from enum import Enum
from dataclasses import dataclass, field
from typing import BinaryIO, Optional


logger = logging.getLogger(__name__)


class ConnectionState(Enum):
    """Connection lifecycle states, used in logs."""
    NEW = "new"                # Just accepted
    READING = "reading"        # Reading the request head
    PROCESSING = "processing"  # Classifying, building the response
    WRITING = "writing"        # Sending the encoded response
    CLOSING = "closing"        # Shutdown sequence
    CLOSED = "closed"          # Socket released


@dataclass
class Connection:
    """
    Represents a client connection.

    Attributes:
        socket:     The client socket.
        address:    Client's (ip, port) tuple.
        id:         Short unique identifier for logs.
        state:      Current connection state.
        created_at: Timestamp when the connection was accepted.
        timeout:    Socket timeout in seconds, None for blocking I/O.
    """

    socket: socket.socket
    address: tuple

    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.NEW
    created_at: float = field(default_factory=time.time)
    timeout: Optional[float] = None

    _reader: Optional[BinaryIO] = field(default=None, repr=False)
    _writer: Optional[BinaryIO] = field(default=None, repr=False)

    def __post_init__(self):
        # Blocking I/O, optionally bounded by a timeout
        self.socket.settimeout(self.timeout)

    # =========================================================================
    # PROPERTIES
    # =========================================================================

    @property
    def client_ip(self) -> str:
        return self.address[0]

    @property
    def local_port(self) -> int:
        """The local port this connection was accepted on."""
        return self.socket.getsockname()[1]

    @property
    def age(self) -> float:
        """Connection age in seconds."""
        return time.time() - self.created_at

    # =========================================================================
    # STREAMS
    # =========================================================================

    @property
    def reader(self) -> BinaryIO:
        """
        Buffered binary input stream over the socket.

        Created on first access. makefile() handles TCP's arbitrary chunk
        boundaries for us: readline() keeps calling recv() until it sees
        a newline or EOF.
        """
        if self._reader is None:
            self._reader = self.socket.makefile("rb")
        return self._reader

    @property
    def writer(self) -> BinaryIO:
        """Buffered binary output stream over the socket."""
        if self._writer is None:
            self._writer = self.socket.makefile("wb")
        return self._writer

    # =========================================================================
    # CLOSING
    # =========================================================================

    def close(self):
        """
        Close the connection.

        1. Close the stream wrappers (flushes the writer).
        2. shutdown(SHUT_WR): send FIN, the client sees end of response.
        3. Drain what the client still sends (e.g. an unread POST body),
           so the kernel does not answer it with a RST.
        4. close(): release the file descriptor.

        Safe to call more than once.
        """
        if self.state == ConnectionState.CLOSED:
            return

        self.state = ConnectionState.CLOSING

        for stream in (self._writer, self._reader):
            if stream is not None:
                try:
                    stream.close()
                except OSError:
                    pass  # Peer already gone, nothing left to flush

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # Already disconnected

        try:
            self.socket.settimeout(0.5)
            while self.socket.recv(1024):
                pass
        except OSError:
            pass  # socket.timeout is an OSError too

        try:
            self.socket.close()
        except OSError:
            pass

        self.state = ConnectionState.CLOSED
        logger.debug(f"[{self.id}] Connection closed after {self.age:.3f}s")

    # =========================================================================
    # CONTEXT MANAGER
    # =========================================================================

    def __enter__(self):
        """
        Allows:

            with conn:
                request = parser.parse(conn.reader)
                ...
            # Connection closed here, even on error
        """
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False  # Don't suppress exceptions
