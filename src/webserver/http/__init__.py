"""
=============================================================================
HTTP PROTOCOL LAYER
=============================================================================

Everything that knows about HTTP but nothing about sockets. Each module
works on plain bytes, strings or file-like streams, so it can be tested
with io.BytesIO.

    request       bytes in  → HTTPRequest
    response      status    → HTTPResponse (header lines + body)
    chunked       HTTPResponse → bytes out (chunked, optionally gzip)
    status_codes  the closed set of statuses the server sends
    mime_types    extension → Content-Type

=============================================================================
"""

from .request import (
    HTTPParseError,
    HTTPRequest,
    RequestMethod,
    RequestParser,
    parse_request,
)
from .response import (
    HTTPResponse,
    ResponseBuilder,
    format_http_date,
    render_error_page,
)
from .chunked import ChunkedEncoder, gzip_compress
from .status_codes import HTTPStatus
from .mime_types import UnsupportedContentTypeError, get_content_type

__all__ = [
    # Request parsing
    "HTTPRequest",
    "RequestMethod",
    "RequestParser",
    "HTTPParseError",
    "parse_request",

    # Response building
    "HTTPResponse",
    "ResponseBuilder",
    "render_error_page",
    "format_http_date",

    # Wire encoding
    "ChunkedEncoder",
    "gzip_compress",

    # Status codes
    "HTTPStatus",

    # Content types
    "get_content_type",
    "UnsupportedContentTypeError",
]
