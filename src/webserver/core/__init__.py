"""
=============================================================================
CORE - Sockets and Threads
=============================================================================

    SocketServer  accepts TCP connections and wraps each in a Connection
    Connection    one client socket: streams, local port, orderly close
    ThreadPool    fixed number of workers, one connection per task

Nothing in here knows about HTTP.

=============================================================================
"""

from .socket_server import SocketServer
from .connection import Connection, ConnectionState
from .thread_pool import ThreadPool

__all__ = [
    "SocketServer",     # Listening socket and accept loop
    "Connection",       # Client socket wrapper
    "ConnectionState",  # Connection lifecycle states
    "ThreadPool",       # Worker threads
]
