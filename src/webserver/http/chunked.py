"""
=============================================================================
CHUNKED TRANSFER ENCODING + GZIP
=============================================================================

Writes a finished HTTPResponse to the client. The server never sends
Content-Length: every body is framed with chunked transfer encoding,
optionally gzip-compressed first.

=============================================================================
WIRE FORMAT
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    CHUNKED RESPONSE ON THE WIRE                     │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │    HTTP/1.1 200 OK\r\n                                              │
    │    Connection: close\r\n                                            │
    │    ...\r\n                                                          │
    │    Content-encoding: gzip\r\n         ← only if compressed          │
    │    Transfer-Encoding: chunked\r\n     ← always                      │
    │    \r\n                               ← end of headers              │
    │                                                                      │
    │    2000\r\n                           ← chunk size in hex (8192)    │
    │    <8192 bytes>\r\n                                                 │
    │    1a\r\n                             ← last data chunk (26 bytes)  │
    │    <26 bytes>\r\n                                                   │
    │    0\r\n                              ← terminating chunk, written  │
    │    \r\n                                 even with no body at all    │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

An empty body produces no data chunk. Writing "0\r\n" for it would end
the stream too early.

=============================================================================
COMPRESSION IS BEST-EFFORT
=============================================================================

If compression fails the failure is logged and the body is sent
uncompressed, without the Content-encoding header. A response is never
dropped because of compression.

=============================================================================
"""

import gzip
import logging
import zlib
from typing import BinaryIO, Iterable, Optional

from .response import HTTPResponse


logger = logging.getLogger(__name__)


CRLF = b"\r\n"
LAST_CHUNK = b"0" + CRLF + CRLF


def gzip_compress(body: bytes, level: int = 9) -> Optional[bytes]:
    """
    Gzip-compress a body.

    Args:
        body:  Bytes to compress.
        level: Compression level, 1 (fastest) to 9 (smallest).

    Returns:
        The compressed bytes, or None if compression failed.
    """
    try:
        return gzip.compress(body, compresslevel=level)
    except (zlib.error, ValueError, TypeError, MemoryError) as e:
        logger.warning(f"Error when compressing response body: {e}")
        return None


class ChunkedEncoder:
    """
    Writes header lines and a chunked body to a binary stream.

    Low-level use:

        encoder = ChunkedEncoder(wfile)
        encoder.write_header("HTTP/1.1 200 OK")
        encoder.end_headers()
        encoder.write(b"hello")
        encoder.finish()          # 0\\r\\n\\r\\n, flush, close

    Most callers use send(), which does all of the above for a response.
    """

    def __init__(self, stream: BinaryIO, chunk_size: int = 8192, gzip_level: int = 9):
        """
        Args:
            stream:     Writable binary stream (e.g. socket.makefile("wb")).
            chunk_size: Largest data chunk written, in bytes.
            gzip_level: Compression level used by send().
        """
        if chunk_size < 1:
            raise ValueError("chunk_size must be >= 1")
        self.stream = stream
        self.chunk_size = chunk_size
        self.gzip_level = gzip_level
        self._finished = False

    # =========================================================================
    # HIGH-LEVEL API
    # =========================================================================

    def send(self, response: HTTPResponse, gzip: bool = False) -> None:
        """
        Encode and write a whole response, then close the stream.

        The response itself is not modified; framing headers are added to
        a copy of its header list.

        Args:
            response: Finished response.
            gzip:     Whether the client accepts gzip.
        """
        headers = list(response.headers)
        body = response.body

        if gzip and body is not None:
            compressed = gzip_compress(body, self.gzip_level)
            if compressed is not None:
                body = compressed
                headers.append("Content-encoding: gzip")

        headers.append("Transfer-Encoding: chunked")

        try:
            self.write_headers(headers)
            if body is not None:
                self.write(body)
        except OSError:
            # Peer gone: no terminating chunk, keep the original error
            self.abort()
            raise
        finally:
            self.finish()

    # =========================================================================
    # LOW-LEVEL API
    # =========================================================================

    def write_header(self, line: str) -> None:
        """Write one header line followed by CRLF."""
        self.stream.write(line.encode("utf-8") + CRLF)

    def write_headers(self, lines: Iterable[str]) -> None:
        """Write all header lines, then the empty line ending the head."""
        for line in lines:
            logger.debug(f"Response header: {line}")
            self.write_header(line)
        self.end_headers()

    def end_headers(self) -> None:
        self.stream.write(CRLF)

    def write(self, data: bytes) -> None:
        """Write data as one or more chunks of at most chunk_size bytes."""
        for start in range(0, len(data), self.chunk_size):
            chunk = data[start:start + self.chunk_size]
            self.stream.write(b"%x" % len(chunk) + CRLF + chunk + CRLF)

    def finish(self) -> None:
        """
        Write the terminating chunk, flush and close the stream.

        Calling it again is a no-op.
        """
        if self._finished:
            return
        self._finished = True
        try:
            self.stream.write(LAST_CHUNK)
            self.stream.flush()
        finally:
            self.stream.close()

    def abort(self) -> None:
        """
        Close the stream without the terminating chunk, after a failed write.

        Errors while closing are logged at DEBUG and not raised, so the
        write error that caused the abort is the one reported. finish()
        becomes a no-op.
        """
        if self._finished:
            return
        self._finished = True
        try:
            self.stream.close()
        except OSError as e:
            logger.debug(f"Error closing aborted response stream: {e}")
