"""
=============================================================================
REQUEST HANDLER
=============================================================================

Classifies a parsed request into exactly one status and builds the
matching response.

=============================================================================
DECISION TABLE
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                       handle(request) Flow                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   method unrecognized? ──yes──► 400  (empty context)                │
    │          │ no                                                        │
    │   version != HTTP/1.1? ──yes──► 505  (context: offered version)     │
    │          │ no                                                        │
    │   dispatch on method                                                 │
    │          ├── HEAD ─────────────► 200  headers only, no body         │
    │          ├── GET ──────────────► _serve_resource()                   │
    │          │                          ├── outside root  → 403 (uri)   │
    │          │                          ├── directory     → 403 (uri)   │
    │          │                          ├── missing       → 404 (uri)   │
    │          │                          ├── ok            → 200 + file  │
    │          │                          └── any failure   → 400         │
    │          ├── POST ─────────────► 405  (context: "POST")             │
    │          └── PUT/DELETE/       ► 501  (context: method name)        │
    │              TRACE/CONNECT                                           │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
THE GET FALLBACK
=============================================================================

Anything that goes wrong while serving an existing file (extension not in
the content type table, permission denied, file vanished between the
checks...) is answered with 400 Bad Request. It is never a 500 and
the page does not say why resolution failed. The cause is
logged at DEBUG level on the server side.

All of the file work happens before a status is chosen, so a failure
never leaves half of a 200 response behind.

=============================================================================
"""

import logging
from typing import Optional

from .http.mime_types import get_content_type
from .http.request import HTTPRequest, RequestMethod
from .http.response import (
    HTTP_VERSION, SERVER_NAME, HTTPResponse, ResponseBuilder,
)
from .http.status_codes import HTTPStatus
from .resources import FileSystemStore, ResourceStore


logger = logging.getLogger(__name__)


class RequestHandler:
    """
    Turns an HTTPRequest into an HTTPResponse.

    Stateless apart from its configuration, so one instance serves all
    worker threads.

    Usage:
        handler = RequestHandler(FileSystemStore("./public"))
        response = handler.handle(request, local_port=8080)
    """

    def __init__(
        self,
        store: Optional[ResourceStore] = None,
        server_name: str = SERVER_NAME,
        version: str = HTTP_VERSION,
    ):
        """
        Args:
            store:       Resource store for GET; defaults to the current
                         working directory.
            server_name: Identifier for the Server header and error pages.
            version:     The only protocol version accepted.
        """
        self.store = store if store is not None else FileSystemStore(".")
        self.server_name = server_name
        self.version = version

    def handle(self, request: HTTPRequest, local_port: int = 0) -> HTTPResponse:
        """
        Classify the request and build its response.

        Args:
            request:    Parsed request.
            local_port: Port the connection was accepted on, shown in the
                        error page footer.

        Returns:
            The response, with the status set exactly once.
        """
        builder = ResponseBuilder(server_name=self.server_name, version=self.version)

        # ─────────────────────────────────────────────────────────────────
        # 1. UNRECOGNIZED METHOD
        # ─────────────────────────────────────────────────────────────────
        if request.method is RequestMethod.UNRECOGNIZED:
            return self._error(builder, HTTPStatus.BAD_REQUEST, "", local_port)

        # ─────────────────────────────────────────────────────────────────
        # 2. PROTOCOL VERSION
        # ─────────────────────────────────────────────────────────────────
        # Checked before dispatch: no method logic runs for other versions.
        if request.version != self.version:
            return self._error(
                builder, HTTPStatus.HTTP_VERSION_NOT_SUPPORTED,
                request.version, local_port,
            )

        # ─────────────────────────────────────────────────────────────────
        # 3. METHOD DISPATCH
        # ─────────────────────────────────────────────────────────────────
        if request.method is RequestMethod.HEAD:
            return builder.status(HTTPStatus.OK).build()

        if request.method is RequestMethod.GET:
            return self._serve_resource(builder, request.uri, local_port)

        if request.method is RequestMethod.POST:
            return self._error(
                builder, HTTPStatus.METHOD_NOT_ALLOWED, "POST", local_port
            )

        # PUT, DELETE, TRACE, CONNECT
        return self._error(
            builder, HTTPStatus.NOT_IMPLEMENTED, str(request.method), local_port
        )

    def _serve_resource(
        self, builder: ResponseBuilder, uri: str, local_port: int
    ) -> HTTPResponse:
        """
        Answer a GET for a URI from the resource store.

        Args:
            builder:    Builder with no status set yet.
            uri:        Request URI.
            local_port: Port for error page footers.

        Returns:
            200 with the file, or 403 / 404 / 400 with an error page.
        """
        try:
            if self.store.is_forbidden(uri) or self.store.is_dir(uri):
                status, context = HTTPStatus.FORBIDDEN, uri
            elif not self.store.exists(uri):
                status, context = HTTPStatus.NOT_FOUND, uri
            else:
                content_type = get_content_type(uri)
                modified = self.store.modified_time(uri)
                content = self.store.read_bytes(uri)
                status = HTTPStatus.OK
        except Exception as e:
            # Single fallback: every resolution failure is a 400
            logger.debug(f"GET {uri} failed: {type(e).__name__}: {e}")
            status, context = HTTPStatus.BAD_REQUEST, ""

        if status != HTTPStatus.OK:
            return self._error(builder, status, context, local_port)

        return (builder
            .status(HTTPStatus.OK)
            .content_type(content_type)
            .date()
            .last_modified(modified)
            .body(content)
            .build())

    def _error(
        self,
        builder: ResponseBuilder,
        status: HTTPStatus,
        context: str,
        local_port: int,
    ) -> HTTPResponse:
        """Set an error status and attach its error page."""
        return builder.status(status).error_page(context, local_port).build()
