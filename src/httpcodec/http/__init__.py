"""
Minimal HTTP request/response model used by the encoding pipeline.

    request.py   - HTTPRequest, RequestParser (percent-decoded path/query)
    response.py  - HTTPResponse, ResponseStream (headers commit on first write)
"""

from .request import HTTPRequest, RequestParser, HTTPParseError, parse_request
from .response import (
    HTTPResponse,
    ResponseStream,
    HeadersCommittedError,
    open_response,
    format_http_date,
)

__all__ = [
    # Request parsing
    "HTTPRequest",
    "RequestParser",
    "HTTPParseError",
    "parse_request",

    # Response streaming
    "HTTPResponse",
    "ResponseStream",
    "HeadersCommittedError",
    "open_response",
    "format_http_date",
]
