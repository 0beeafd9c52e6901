"""
=============================================================================
HTTP STATUS CODES
=============================================================================

The closed set of status codes this server can answer with, together with
their reason phrases and the message templates used on error pages.

=============================================================================
STATUS LINE AND ERROR PAGE
=============================================================================

Every response starts with a status line built from the code and phrase:

    HTTP/1.1 404 Not Found
             ─┬─ ────┬────
              │      │
              │      └── Reason phrase (from _STATUS_PHRASES)
              └───────── Status code

Error responses also carry a small HTML page. Its paragraph comes from the
message template of the status, where a single "*" is replaced by some
context about the request:

    "This website * is not available ..."  +  "/missing.png"
        └──► "This website /missing.png is not available ..."

=============================================================================
"""

from enum import IntEnum


class HTTPStatus(IntEnum):
    """
    HTTP status codes used by the server.

    Extends IntEnum, so members compare equal to plain integers:

        >>> HTTPStatus.NOT_FOUND == 404
        True
        >>> HTTPStatus.NOT_FOUND.status_string
        '404 Not Found'
    """

    # 2xx SUCCESS
    OK = 200

    # 3xx REDIRECTION (declared for completeness, never chosen by the handler)
    MOVED_PERMANENTLY = 301
    NOT_MODIFIED = 304

    # 4xx CLIENT ERRORS
    BAD_REQUEST = 400              # Unrecognized method, failed GET resolution
    FORBIDDEN = 403                # Directory requested
    NOT_FOUND = 404                # File does not exist
    METHOD_NOT_ALLOWED = 405       # POST

    # 5xx SERVER ERRORS
    INTERNAL_SERVER_ERROR = 500
    NOT_IMPLEMENTED = 501          # PUT, DELETE, TRACE, CONNECT
    HTTP_VERSION_NOT_SUPPORTED = 505

    @property
    def phrase(self) -> str:
        """Reason phrase for the status line (e.g. "Not Found")."""
        return _STATUS_PHRASES[self]

    @property
    def status_string(self) -> str:
        """Code and phrase together, as used in the status line and page title."""
        return f"{int(self)} {self.phrase}"

    @property
    def message(self) -> str:
        """Error page message template, or "" when the status has none."""
        return _STATUS_MESSAGES.get(self, "")

    @property
    def is_error(self) -> bool:
        return self >= 400

    def render_message(self, context: str = "") -> str:
        """
        Fill the message template with request context.

        Only the first "*" is replaced. A template without a placeholder is
        returned as is.

        Args:
            context: Text to substitute (method name, URI, version...).

        Returns:
            The rendered message.
        """
        return self.message.replace("*", context, 1)


# =============================================================================
# REASON PHRASES
# =============================================================================

_STATUS_PHRASES = {
    HTTPStatus.OK: "OK",
    HTTPStatus.MOVED_PERMANENTLY: "Moved Permanently",
    HTTPStatus.NOT_MODIFIED: "Not Modified",
    HTTPStatus.BAD_REQUEST: "Bad Request",
    HTTPStatus.FORBIDDEN: "Forbidden",
    HTTPStatus.NOT_FOUND: "Not Found",
    HTTPStatus.METHOD_NOT_ALLOWED: "Method Not Allowed",
    HTTPStatus.INTERNAL_SERVER_ERROR: "Internal Server Error",
    HTTPStatus.NOT_IMPLEMENTED: "Not Implemented",
    HTTPStatus.HTTP_VERSION_NOT_SUPPORTED: "HTTP Version not supported",
}


# =============================================================================
# ERROR PAGE MESSAGES
# =============================================================================
#
# "*" marks where the request context goes. Statuses missing from this
# table render an empty paragraph.
#
# =============================================================================

_STATUS_MESSAGES = {
    HTTPStatus.BAD_REQUEST:
        "The request message is not understood by server, please try again.",
    HTTPStatus.FORBIDDEN:
        "You don't have permission to access * on this server.",
    HTTPStatus.NOT_FOUND:
        "This website * is not available or the file is missing on this server.",
    HTTPStatus.METHOD_NOT_ALLOWED:
        "Method * is not allowed in this server.",
    HTTPStatus.INTERNAL_SERVER_ERROR:
        "The server encounters an error, please try again later.",
    HTTPStatus.NOT_IMPLEMENTED:
        "This request method * is not supported by the server.",
    HTTPStatus.HTTP_VERSION_NOT_SUPPORTED:
        "HTTP Version * is not supported",
}
