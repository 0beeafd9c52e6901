"""
=============================================================================
HTTP RESPONSE BUILDER
=============================================================================

Assembles the status line, header lines and body of a response.

=============================================================================
RESPONSE ANATOMY
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    HTTP RESPONSE (as built here)                    │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │    HTTP/1.1 200 OK                      ┐                            │
    │    Connection: close                    │ always first, in this      │
    │    Server: COMP4621HttpServer           ┘ order (status())           │
    │    Content-Type: text/html              ┐                            │
    │    Date: Mon, 19 Oct 2026 10:00:00 GMT  │ added per outcome          │
    │    Last-Modified: ...                   ┘                            │
    │                                                                      │
    │    <body bytes>                           file content, error page,  │
    │                                           or nothing (HEAD)          │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Headers are kept as an ordered list of raw lines, not a dict: the server
never looks them up again, it only writes them out. Framing headers
(Transfer-Encoding, Content-encoding) are added later by the ChunkedEncoder.

=============================================================================
BUILDER PATTERN
=============================================================================

    response = (ResponseBuilder(server_name="COMP4621HttpServer")
        .status(HTTPStatus.NOT_FOUND)
        .error_page("/missing.png", port=8080)
        .build())

The builder enforces the rules of a response:
- the status is set exactly once, and before anything else
- a file body can only be attached to a 200 response

=============================================================================
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional, Union

from .status_codes import HTTPStatus


HTTP_VERSION = "HTTP/1.1"
SERVER_NAME = "COMP4621HttpServer"


@dataclass
class HTTPResponse:
    """
    A response ready to be encoded.

    Attributes:
        status:  The chosen status.
        headers: Header lines, the status line first.
        body:    Body bytes, or None when there is no body (HEAD).
    """

    status: HTTPStatus = HTTPStatus.OK
    headers: List[str] = field(default_factory=list)
    body: Optional[bytes] = None

    @property
    def status_line(self) -> str:
        """The first header line, e.g. "HTTP/1.1 404 Not Found"."""
        return self.headers[0] if self.headers else ""

    def get_header(self, name: str) -> Optional[str]:
        """
        Get the value of the first header line with this name.

        Case-insensitive. Returns None if no such header exists.
        """
        prefix = name.lower() + ":"
        for line in self.headers[1:]:
            if line.lower().startswith(prefix):
                return line[len(prefix):].strip()
        return None


class ResponseBuilder:
    """
    Fluent builder for HTTPResponse.

    Every method except build() returns self for chaining.
    """

    def __init__(self, server_name: str = SERVER_NAME, version: str = HTTP_VERSION):
        """
        Args:
            server_name: Value of the Server header and the error page footer.
            version:     Protocol version for the status line.
        """
        self._server_name = server_name
        self._version = version
        self._status: Optional[HTTPStatus] = None
        self._headers: List[str] = []
        self._body: Optional[bytes] = None

    # =========================================================================
    # STATUS
    # =========================================================================

    def status(self, status: HTTPStatus) -> "ResponseBuilder":
        """
        Set the status and append the three fixed lines.

        The lines are, in order: status line, "Connection: close" and
        "Server: <name>".

        Raises:
            RuntimeError: If a status was already set.
        """
        if self._status is not None:
            raise RuntimeError(
                f"Status already set to {self._status.status_string}"
            )
        self._status = status
        self._headers.append(f"{self._version} {status.status_string}")
        self._headers.append("Connection: close")
        self._headers.append(f"Server: {self._server_name}")
        return self

    # =========================================================================
    # HEADERS
    # =========================================================================

    def header(self, name: str, value: str) -> "ResponseBuilder":
        """Append a "Name: value" header line. No escaping is done."""
        self._require_status()
        self._headers.append(f"{name}: {value}")
        return self

    def content_type(self, content_type: str) -> "ResponseBuilder":
        return self.header("Content-Type", content_type)

    def date(self, when: Optional[datetime] = None) -> "ResponseBuilder":
        """Append a Date header, the current time by default."""
        return self.header("Date", format_http_date(when or datetime.now(timezone.utc)))

    def last_modified(self, when: datetime) -> "ResponseBuilder":
        return self.header("Last-Modified", format_http_date(when))

    # =========================================================================
    # BODY
    # =========================================================================

    def body(self, body: Union[str, bytes]) -> "ResponseBuilder":
        """
        Attach resource content to a 200 response.

        Raises:
            RuntimeError: If the status is not 200 OK.
        """
        self._require_status()
        if self._status != HTTPStatus.OK:
            raise RuntimeError(
                f"Cannot attach a resource body to {self._status.status_string}"
            )
        self._body = body.encode("utf-8") if isinstance(body, str) else body
        return self

    def error_page(self, context: str = "", port: int = 0) -> "ResponseBuilder":
        """
        Attach the HTML error page for the current status.

        Args:
            context: Text substituted into the status message. Surrogates
                     from undecodable request bytes are written back as
                     the original bytes.
            port:    Local port the connection was accepted on (footer).
        """
        self._require_status()
        self._body = render_error_page(
            self._status, context, self._server_name, port
        ).encode("utf-8", "surrogateescape")
        return self

    # =========================================================================
    # BUILD
    # =========================================================================

    def build(self) -> HTTPResponse:
        """
        Return the finished response.

        Raises:
            RuntimeError: If no status was set.
        """
        self._require_status()
        return HTTPResponse(
            status=self._status,
            headers=list(self._headers),
            body=self._body,
        )

    def _require_status(self):
        if self._status is None:
            raise RuntimeError("Response status must be set first")


# =============================================================================
# ERROR PAGE
# =============================================================================

def render_error_page(
    status: HTTPStatus,
    context: str = "",
    server_name: str = SERVER_NAME,
    port: int = 0,
) -> str:
    """
    Render the minimal HTML page sent with error statuses.

        <HTML><HEAD>
        <TITLE>404 Not Found</TITLE>
        </HEAD><BODY>
        <H1>Not Found</H1>
        <P>This website /x.png is not available or ...</P>
        <HR>
        <P><I>COMP4621HttpServer at localhost Port 8080</I></P>
        </BODY></HTML>

    Lines end with CRLF.

    Args:
        status:      Status the page describes.
        context:     Replaces the "*" in the status message.
        server_name: Server identifier for the footer.
        port:        Local port for the footer.

    Returns:
        The page as a string.
    """
    return (
        "<HTML><HEAD>\r\n"
        f"<TITLE>{status.status_string}</TITLE>\r\n"
        "</HEAD><BODY>\r\n"
        f"<H1>{status.phrase}</H1>\r\n"
        f"<P>{status.render_message(context)}</P>\r\n<HR>\r\n"
        f"<P><I>{server_name} at localhost Port {port}</I></P>\r\n"
        "</BODY></HTML>\r\n"
    )


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================

def format_http_date(dt: datetime) -> str:
    """
    Format a datetime as an HTTP-date (RFC 7231).

    Format: Day, DD Mon YYYY HH:MM:SS GMT
    Example: Mon, 19 Oct 2026 12:00:00 GMT

    Naive datetimes are taken as UTC; aware ones are converted to UTC.
    """
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc)

    # Weekday names (0=Monday in Python's datetime)
    days = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
    months = ["Jan", "Feb", "Mar", "Apr", "May", "Jun",
              "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]

    return (
        f"{days[dt.weekday()]}, "
        f"{dt.day:02d} {months[dt.month - 1]} {dt.year} "
        f"{dt.hour:02d}:{dt.minute:02d}:{dt.second:02d} GMT"
    )
