"""
=============================================================================
WEBSERVER - Multithreaded HTTP/1.1 File Server on Raw Sockets
=============================================================================

Serves files from a server root over HTTP/1.1, one request per connection,
every response body sent with chunked transfer encoding and gzip-compressed
when the client allows it.

=============================================================================
PACKAGE LAYOUT
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   core/         sockets and threads                                 │
    │      socket_server   listening socket, accept loop, signals         │
    │      connection      one client socket and its streams              │
    │      thread_pool     fixed-size worker pool                         │
    │                                                                      │
    │   http/         the protocol, no sockets                            │
    │      request         request head parser                            │
    │      status_codes    statuses, phrases, error messages              │
    │      mime_types      extension → Content-Type table                 │
    │      response        response builder, error page, HTTP dates       │
    │      chunked         chunked encoder, gzip                          │
    │                                                                      │
    │   handler.py    request classification (status decision)            │
    │   resources.py  files below the server root                         │
    │   server.py     wires it all together                               │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Quick start:

    from webserver import HTTPServer, ServerConfig

    HTTPServer(ServerConfig(port=8080, root_dir="./public")).run()

=============================================================================
"""

__version__ = "1.0.0"

from .server import HTTPServer
from .config import ServerConfig

__all__ = ["HTTPServer", "ServerConfig", "__version__"]
