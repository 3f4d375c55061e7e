"""
=============================================================================
HTTP RESPONSE MODEL
=============================================================================

A response whose body is streamed rather than held in memory.

=============================================================================
HEADERS BEFORE BODY
=============================================================================

On the wire the header block precedes the body, so once the first body
byte has gone out the headers can no longer change. ResponseStream makes
that moment explicit:

    response.set_header("Content-Encoding", "gzip")     ✓  not committed
    response.output.write(b"...")                        ── commits:
        │                                                   status line +
        ▼                                                   headers + CRLF
    HTTP/1.1 200 OK\\r\\n                                     are written first
    Content-Encoding: gzip\\r\\n
    \\r\\n
    ...body bytes...

    response.set_header("X-Late", "1")                   ✗  HeadersCommittedError

Anything that must be reflected in the headers (the compression negotiator
in particular) has to run before the first write.

=============================================================================
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from http import HTTPStatus
from typing import BinaryIO, Dict, List, Optional
import logging


logger = logging.getLogger(__name__)


class HeadersCommittedError(RuntimeError):
    """Raised when a header is changed after the header block was sent."""

    def __init__(self, name: str):
        super().__init__(f"Cannot set header {name!r}: headers already sent")
        self.name = name


@dataclass
class HTTPResponse:
    """
    An HTTP response with a streaming output sink.

    Header names keep their case for output but are matched
    case-insensitively.
    """

    status: int = HTTPStatus.OK
    headers: Dict[str, str] = field(default_factory=dict)
    output: Optional[BinaryIO] = None
    version: str = "HTTP/1.1"
    committed: bool = False

    @property
    def status_line(self) -> str:
        """Format: HTTP-VERSION SP STATUS-CODE SP REASON-PHRASE"""
        try:
            phrase = HTTPStatus(self.status).phrase
        except ValueError:
            phrase = ""
        return f"{self.version} {int(self.status)} {phrase}".rstrip()

    def _find(self, name: str) -> Optional[str]:
        lowered = name.lower()
        for existing in self.headers:
            if existing.lower() == lowered:
                return existing
        return None

    def _check_open(self, name: str) -> None:
        if self.committed:
            raise HeadersCommittedError(name)

    def set_header(self, name: str, value: str) -> "HTTPResponse":
        """
        Set a header, replacing any existing value.

        Returns:
            Self for method chaining

        Raises:
            HeadersCommittedError: If the headers were already sent.
        """
        self._check_open(name)
        existing = self._find(name)
        if existing is not None:
            del self.headers[existing]
        self.headers[name] = value
        return self

    def add_header(self, name: str, value: str) -> "HTTPResponse":
        """Append a value to a header, comma-joined with any existing value."""
        self._check_open(name)
        existing = self._find(name)
        if existing is None:
            self.headers[name] = value
        else:
            self.headers[existing] = f"{self.headers[existing]}, {value}"
        return self

    def remove_header(self, name: str) -> "HTTPResponse":
        """Remove a header if present."""
        self._check_open(name)
        existing = self._find(name)
        if existing is not None:
            del self.headers[existing]
        return self

    def get_header(self, name: str, default: Optional[str] = None) -> Optional[str]:
        existing = self._find(name)
        return self.headers[existing] if existing is not None else default

    def get_header_values(self, name: str) -> List[str]:
        """Get every value of a header, split on commas."""
        raw = self.get_header(name)
        if raw is None:
            return []
        return [value.strip() for value in raw.split(",") if value.strip()]

    def header_bytes(self, server_name: str = "httpcodec") -> bytes:
        """Serialize the status line and header block, including the blank line."""
        response_headers = dict(self.headers)

        if self._find("Date") is None:
            response_headers["Date"] = format_http_date(datetime.now(timezone.utc))
        if self._find("Server") is None:
            response_headers["Server"] = server_name

        lines = [self.status_line]
        lines.extend(f"{name}: {value}" for name, value in response_headers.items())
        lines.append("")
        return "\r\n".join(lines).encode("latin-1") + b"\r\n"


class ResponseStream:
    """
    Body sink for an HTTPResponse.

    The first write (or flush) sends the header block to the transport and
    marks the response committed. Closing the stream closes the transport.
    """

    def __init__(self, transport: BinaryIO, response: HTTPResponse, server_name: str = "httpcodec"):
        self._transport = transport
        self._response = response
        self._server_name = server_name
        self.closed = False

    def _commit(self) -> None:
        if not self._response.committed:
            self._transport.write(self._response.header_bytes(self._server_name))
            self._response.committed = True
            logger.debug(f"Committed headers: {self._response.status_line}")

    def write(self, data: bytes) -> int:
        if self.closed:
            raise ValueError("write to closed response stream")
        self._commit()
        self._transport.write(data)
        return len(data)

    def flush(self) -> None:
        if self.closed:
            return
        self._commit()
        self._transport.flush()

    def close(self) -> None:
        if self.closed:
            return
        try:
            self.flush()
        finally:
            self.closed = True
            self._transport.close()

    def __enter__(self) -> "ResponseStream":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


def open_response(transport: BinaryIO, status: int = HTTPStatus.OK, server_name: str = "httpcodec") -> HTTPResponse:
    """Create a response whose output streams to ``transport``."""
    response = HTTPResponse(status=status)
    response.output = ResponseStream(transport, response, server_name)
    return response


def format_http_date(dt: datetime) -> str:
    """
    Format a datetime as an HTTP-date (RFC 7231).

    Example: Wed, 01 Jan 2026 12:00:00 GMT
    """
    days = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
    months = ["Jan", "Feb", "Mar", "Apr", "May", "Jun",
              "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]

    return (
        f"{days[dt.weekday()]}, "
        f"{dt.day:02d} {months[dt.month - 1]} {dt.year} "
        f"{dt.hour:02d}:{dt.minute:02d}:{dt.second:02d} GMT"
    )
