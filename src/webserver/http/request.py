"""
=============================================================================
HTTP REQUEST PARSER
=============================================================================

Reads one HTTP/1.1 request head (request line + header lines) from a binary
stream and turns it into an immutable HTTPRequest.

=============================================================================
WHAT WE READ
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     HTTP REQUEST HEAD                               │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │    GET /index.html HTTP/1.1\r\n         ← request line               │
    │    ─┬─ ─────┬───── ────┬───                                          │
    │   Method   URI      Version                                          │
    │                                                                      │
    │    Host: localhost:8080\r\n             ← header lines, kept         │
    │    Accept-Encoding: gzip, deflate\r\n     verbatim and in order      │
    │    \r\n                                 ← empty line: end of head    │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

The server answers exactly one request per connection and never reads a
request body, so parsing stops at the empty line.

=============================================================================
LENIENT METHOD, STRICT FRAMING
=============================================================================

An unknown method such as "FOO" is NOT a parse error. It is recorded as
RequestMethod.UNRECOGNIZED and the request handler answers 400 for it.

The framing itself is strict:
- A request line with fewer than three tokens is malformed.
- A stream that ends before the empty line is malformed.
Both raise HTTPParseError, which aborts the connection without a response.

=============================================================================
"""

import io
import logging
from dataclasses import dataclass
from enum import Enum
from typing import BinaryIO, Optional, Tuple


logger = logging.getLogger(__name__)


class HTTPParseError(Exception):
    """
    Raised when the request head cannot be framed.

    Carries the HTTP status that best describes the problem, for logging.
    The connection is closed without writing a response.
    """

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.status_code = status_code


class RequestMethod(Enum):
    """
    Request methods the server knows about.

    UNRECOGNIZED stands for any token outside this set (including lowercase
    spellings such as "get"); its value is None.
    """
    GET = "GET"
    HEAD = "HEAD"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    TRACE = "TRACE"
    CONNECT = "CONNECT"
    UNRECOGNIZED = None

    @classmethod
    def parse(cls, token: str) -> "RequestMethod":
        """Map a method token to a member, UNRECOGNIZED if unknown."""
        try:
            return cls(token)
        except ValueError:
            return cls.UNRECOGNIZED

    def __str__(self) -> str:
        return self.value or ""


@dataclass(frozen=True)
class HTTPRequest:
    """
    A parsed request head.

    Attributes:
        method:       Parsed method (UNRECOGNIZED for unknown tokens).
        uri:          Request target, untouched. Used as a path relative
                      to the server root.
        version:      Protocol version token, e.g. "HTTP/1.1".
        headers:      Raw header lines in arrival order, without line
                      terminators.
        accepts_gzip: True if an Accept-Encoding line mentions gzip.
        method_token: The method exactly as sent, for logging.
    """

    method: RequestMethod
    uri: str
    version: str
    headers: Tuple[str, ...] = ()
    accepts_gzip: bool = False
    method_token: str = ""

    @property
    def request_line(self) -> str:
        """Reconstructed request line, for logs."""
        return f"{self.method_token or self.method} {self.uri} {self.version}"


class RequestParser:
    """
    Parses a request head from a binary, line-oriented stream.

    Usage:
        rfile = sock.makefile("rb")
        request = RequestParser().parse(rfile)
        if request is None:
            ...  # client closed without sending anything

    The parser keeps no state between calls, one instance can be shared by
    all worker threads.
    """

    # UTF-8, with undecodable bytes kept as surrogates so the URI maps back
    # to the exact bytes on disk and in error pages
    ENCODING = "utf-8"
    ERRORS = "surrogateescape"

    def __init__(self, max_line_length: int = 65536):
        """
        Args:
            max_line_length: Longest request or header line accepted, in
                             bytes. Longer lines raise HTTPParseError(431).
        """
        self.max_line_length = max_line_length

    def parse(self, stream: BinaryIO) -> Optional[HTTPRequest]:
        """
        Read one request head from the stream.

        Args:
            stream: Binary file-like object supporting readline().

        Returns:
            The parsed HTTPRequest, or None if the stream was already at EOF.

        Raises:
            HTTPParseError: If the request line has fewer than three tokens
                            or the stream ends before the empty line.
            OSError: If reading from the stream fails.
        """
        line = self._read_line(stream)
        if line is None:
            return None

        logger.debug(f"Request line: {line}")

        # ─────────────────────────────────────────────────────────────────
        # REQUEST LINE: METHOD SP URI SP VERSION
        # ─────────────────────────────────────────────────────────────────
        # Runs of whitespace separate the tokens. Extra tokens are ignored.
        tokens = line.split()
        if len(tokens) < 3:
            raise HTTPParseError(f"Malformed request line: {line!r}")
        method_token, uri, version = tokens[:3]

        # ─────────────────────────────────────────────────────────────────
        # HEADER LINES, UNTIL THE EMPTY LINE
        # ─────────────────────────────────────────────────────────────────
        headers = []
        accepts_gzip = False
        while True:
            header = self._read_line(stream)
            if header is None:
                raise HTTPParseError("Connection closed before end of headers")
            if header == "":
                break
            logger.debug(f"Request header: {header}")
            if not accepts_gzip and _is_gzip_accept_encoding(header):
                accepts_gzip = True
            headers.append(header)

        return HTTPRequest(
            method=RequestMethod.parse(method_token),
            uri=uri,
            version=version,
            headers=tuple(headers),
            accepts_gzip=accepts_gzip,
            method_token=method_token,
        )

    def _read_line(self, stream: BinaryIO) -> Optional[str]:
        """
        Read one line and strip its terminator ("\\r\\n" or "\\n").

        Returns None at EOF. A final line without terminator is returned
        as is.
        """
        raw = stream.readline(self.max_line_length + 1)
        if not raw:
            return None
        if len(raw) > self.max_line_length:
            raise HTTPParseError("Request line or header too long", status_code=431)
        return raw.decode(self.ENCODING, self.ERRORS).rstrip("\r\n")


def _is_gzip_accept_encoding(header: str) -> bool:
    """Check if a raw header line is an Accept-Encoding line allowing gzip."""
    return "accept-encoding" in header.lower() and "gzip" in header


def parse_request(data: bytes) -> Optional[HTTPRequest]:
    """
    Convenience function to parse a request head from bytes.

    Args:
        data: Raw request bytes.

    Returns:
        Parsed HTTPRequest, or None for empty input.
    """
    return RequestParser().parse(io.BytesIO(data))
