"""
=============================================================================
ACCESS LOG
=============================================================================

One log record per request/response exchange, on the "webserver.access"
logger.

    text:  127.0.0.1 - - [2026-10-19T10:00:00+00:00] "GET /index.html HTTP/1.1" 200 512 gzip 3.12ms
    json:  {"connection_id": "1a2b3c4d", "client_ip": "127.0.0.1", ...}

The format comes from ServerConfig.log_format. Route this logger to its
own handler to keep access lines apart from diagnostics:

    logging.getLogger("webserver.access").addHandler(file_handler)

=============================================================================
"""

import json
import logging
from dataclasses import dataclass, asdict
from datetime import datetime, timezone

from .http.request import HTTPRequest
from .http.response import HTTPResponse


logger = logging.getLogger("webserver.access")


@dataclass
class RequestLog:
    """
    Structured log entry for one exchange.

    Attributes:
        connection_id: Connection identifier, to correlate with other logs.
        client_ip:     Client's IP address.
        request_line:  "METHOD URI VERSION" as received.
        status_code:   Status sent back.
        body_length:   Body size before encoding, in bytes (0 if none).
        gzip:          Whether the client asked for gzip.
        duration_ms:   Time from accept to response written.
        timestamp:     ISO 8601 time of the log entry (UTC).
    """

    connection_id: str
    client_ip: str
    request_line: str
    status_code: int
    body_length: int
    gzip: bool
    duration_ms: float
    timestamp: str

    def to_dict(self) -> dict:
        data = asdict(self)
        data["duration_ms"] = round(self.duration_ms, 2)
        return data

    def to_text(self) -> str:
        """Apache-like single line."""
        encoding = "gzip" if self.gzip else "identity"
        return (
            f'{self.client_ip} - - [{self.timestamp}] '
            f'"{self.request_line}" {self.status_code} '
            f'{self.body_length} {encoding} {self.duration_ms:.2f}ms'
        )


class AccessLogger:
    """
    Writes RequestLog entries in the configured format.

    Usage:
        access = AccessLogger(log_format="json")
        access.log(conn.id, conn.client_ip, request, response, duration_ms)
    """

    def __init__(self, log_format: str = "text", level: int = logging.INFO):
        """
        Args:
            log_format: "text" or "json".
            level:      Level the entries are logged at.
        """
        self.log_format = log_format
        self.level = level

    def log(
        self,
        connection_id: str,
        client_ip: str,
        request: HTTPRequest,
        response: HTTPResponse,
        duration_ms: float,
    ) -> RequestLog:
        """Build, emit and return the entry for one exchange."""
        entry = RequestLog(
            connection_id=connection_id,
            client_ip=client_ip,
            request_line=request.request_line,
            status_code=int(response.status),
            body_length=len(response.body) if response.body is not None else 0,
            gzip=request.accepts_gzip,
            duration_ms=duration_ms,
            timestamp=datetime.now(timezone.utc).isoformat(timespec="seconds"),
        )

        if self.log_format == "json":
            logger.log(self.level, json.dumps(entry.to_dict()))
        else:
            logger.log(self.level, entry.to_text())

        return entry
