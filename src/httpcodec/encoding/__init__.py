"""
Content-encoding negotiation and the gzip transform.

    from httpcodec.encoding import check_and_wrap

    sink = check_and_wrap(request, response)
    with sink:
        sink.write(body)
"""

from .gzip_sink import GzipSink, DEFAULT_LEVEL
from .negotiation import (
    ACCEPT_ENCODING,
    CONTENT_ENCODING,
    GZIP,
    NegotiationResult,
    accepts_gzip,
    negotiate,
    check_and_wrap,
)

__all__ = [
    "GzipSink",
    "DEFAULT_LEVEL",
    "ACCEPT_ENCODING",
    "CONTENT_ENCODING",
    "GZIP",
    "NegotiationResult",
    "accepts_gzip",
    "negotiate",
    "check_and_wrap",
]
