"""
=============================================================================
HTTP REQUEST MODEL
=============================================================================

Just enough of an HTTP request for content negotiation: the request line,
headers with multi-valued access, and a percent-decoded path and query.

=============================================================================
MULTI-VALUED HEADERS
=============================================================================

A header may arrive as several lines or as one comma-separated line. Both
forms end up as the same stored value:

    Accept-Encoding: gzip;q=0.8          ┐
    Accept-Encoding: br                  ├─►  "gzip;q=0.8, br"
                                         ┘
    Accept-Encoding: gzip;q=0.8, br      ──►  "gzip;q=0.8, br"

get_header_values() splits that back into ["gzip;q=0.8", "br"], which is
the shape the encoding negotiator consumes.

=============================================================================
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple
import re

from ..codec import MalformedNumber
from ..urldecoding import parse_query, url_decode


class HTTPParseError(Exception):
    """
    Raised when HTTP request parsing fails.

    Carries the status code that should be returned to the client:

        400 Bad Request                - Malformed syntax or escapes
        405 Method Not Allowed         - Unknown method
        413 Payload Too Large          - Request exceeds size limit
        505 HTTP Version Not Supported - Unknown HTTP version
    """

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.status_code = status_code


@dataclass
class HTTPRequest:
    """
    A parsed HTTP request.

    Header names are stored lowercase; repeated headers are joined with
    ", " per RFC 7230 section 3.2.2.
    """

    method: str
    path: str
    version: str = "HTTP/1.1"
    headers: Dict[str, str] = field(default_factory=dict)
    query_params: Dict[str, List[str]] = field(default_factory=dict)
    body: bytes = b""

    def get_header(self, name: str, default: str = "") -> str:
        """Get a header value (case-insensitive lookup)."""
        return self.headers.get(name.lower(), default)

    def get_header_values(self, name: str) -> List[str]:
        """
        Get every value of a header as a list.

        Example:
            # Accept-Encoding: gzip;q=0.8, deflate
            request.get_header_values("Accept-Encoding")
            # ["gzip;q=0.8", "deflate"]
        """
        raw = self.headers.get(name.lower())
        if raw is None:
            return []
        return [value.strip() for value in raw.split(",") if value.strip()]

    @property
    def accept_encoding(self) -> List[str]:
        return self.get_header_values("accept-encoding")

    def get_query(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """Get the first value of a query parameter."""
        values = self.query_params.get(name, [])
        return values[0] if values else default


class RequestParser:
    """
    Parses raw HTTP request bytes into HTTPRequest objects.

    Usage:
        parser = RequestParser(max_request_size=1024 * 1024)
        request = parser.parse(b"GET /a%20b HTTP/1.1\\r\\nHost: x\\r\\n\\r\\n")
        request.path  # "/a b"
    """

    VALID_METHODS = frozenset({
        "GET", "HEAD", "POST", "PUT", "DELETE", "PATCH", "OPTIONS", "TRACE", "CONNECT",
    })

    REQUEST_LINE_PATTERN = re.compile(r"^([A-Z]+) ([^ ]+) (HTTP/\d\.\d)$")
    HEADER_PATTERN = re.compile(r"^([^:]+):\s*(.*)$")

    def __init__(self, max_request_size: int = 10 * 1024 * 1024, encoding: str = "utf-8"):
        self.max_request_size = max_request_size
        self.encoding = encoding

    def parse(self, data: bytes) -> HTTPRequest:
        """
        Parse raw HTTP request data.

        Raises:
            HTTPParseError: If the request is malformed.
        """
        if len(data) > self.max_request_size:
            raise HTTPParseError(f"Request too large: {len(data)} bytes", status_code=413)

        header_end = data.find(b"\r\n\r\n")
        if header_end == -1:
            raise HTTPParseError("Incomplete request: no header terminator")

        header_section = data[:header_end].decode("latin-1")
        body = data[header_end + 4:]

        lines = header_section.split("\r\n")
        method, path, query_params, version = self._parse_request_line(lines[0])
        headers = self._parse_headers(lines[1:])

        try:
            content_length = int(headers.get("content-length", "0"))
        except ValueError:
            raise HTTPParseError(f"Invalid Content-Length: {headers['content-length']}")
        if len(body) < content_length:
            raise HTTPParseError(
                f"Incomplete body: expected {content_length} bytes, got {len(body)}"
            )

        return HTTPRequest(
            method=method,
            path=path,
            version=version,
            headers=headers,
            query_params=query_params,
            body=body[:content_length],
        )

    def _parse_request_line(self, line: str) -> Tuple[str, str, Dict[str, List[str]], str]:
        match = self.REQUEST_LINE_PATTERN.match(line)
        if not match:
            raise HTTPParseError(f"Invalid request line: {line}")

        method, uri, version = match.groups()

        if method not in self.VALID_METHODS:
            raise HTTPParseError(f"Invalid method: {method}", status_code=405)

        if version not in ("HTTP/1.0", "HTTP/1.1"):
            raise HTTPParseError(f"Unsupported HTTP version: {version}", status_code=505)

        raw_path, _, query = uri.partition("?")
        raw_path = raw_path.partition("#")[0]
        query = query.partition("#")[0]

        try:
            path = url_decode(raw_path, self.encoding) or "/"
            query_params = parse_query(query, self.encoding)
        except MalformedNumber as e:
            raise HTTPParseError(f"Invalid escape in URI: {e.text}") from e

        return method, path, query_params, version

    def _parse_headers(self, lines: List[str]) -> Dict[str, str]:
        headers: Dict[str, str] = {}
        current_name = None

        for line in lines:
            if not line:
                continue

            # Obsolete line folding: continues the previous header
            if line[0] in (" ", "\t"):
                if current_name is not None:
                    headers[current_name] += " " + line.strip()
                continue

            match = self.HEADER_PATTERN.match(line)
            if not match:
                continue

            name, value = match.groups()
            name = name.strip().lower()
            value = value.strip()
            current_name = name

            if name in headers:
                headers[name] += ", " + value
            else:
                headers[name] = value

        return headers


def parse_request(data: bytes, max_size: int = 10 * 1024 * 1024) -> HTTPRequest:
    """Parse an HTTP request with a one-off RequestParser."""
    return RequestParser(max_request_size=max_size).parse(data)
