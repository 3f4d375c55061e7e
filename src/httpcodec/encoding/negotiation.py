"""
=============================================================================
CONTENT-ENCODING NEGOTIATION
=============================================================================

Decides whether a response body goes out gzip-compressed, and keeps the
Content-Encoding header in step with that decision.

=============================================================================
DECISION TABLE
=============================================================================

    ┌──────────────────┬──────────────────────┬──────────────┬────────────┐
    │ Accept-Encoding  │ Content-Encoding     │ require_     │ result     │
    │ mentions gzip?   │ already "gzip"?      │ wants_header │            │
    ├──────────────────┼──────────────────────┼──────────────┼────────────┤
    │ no               │ (any)                │ (any)        │ raw sink   │
    │ yes              │ yes                  │ (any)        │ gzip       │
    │ yes              │ no                   │ False        │ gzip + set │
    │                  │                      │              │ header     │
    │ yes              │ no                   │ True         │ raw sink   │
    └──────────────────┴──────────────────────┴──────────────┴────────────┘

"Mentions gzip" is a substring test on each Accept-Encoding value, so
"gzip;q=0.8" and "x-gzip" both count. A q=0 weight is not treated as a
refusal.

"Already gzip" compares the whole Content-Encoding value. A stacked value
such as "deflate, gzip" is replaced with "gzip", because only the gzip
transform is applied.

With require_wants_header=True the handler opts in per response by setting
"Content-Encoding: gzip" itself before the body is written.

=============================================================================
ORDER OF OPERATIONS
=============================================================================

    1. negotiate()                     pure decision
    2. response.set_header(...)        header block still open
    3. GzipSink(response.output)       writes the gzip header bytes, which
                                       commits the response headers
    4. return sink                     caller writes the body

Step 2 must precede step 3; after the first body byte the header block is
frozen (see http.response.HeadersCommittedError). If step 3 fails before
anything was committed, step 2 is undone.

=============================================================================
"""

from dataclasses import dataclass
from typing import BinaryIO, Iterable, Optional
import logging

from ..http.request import HTTPRequest
from ..http.response import HTTPResponse
from .gzip_sink import DEFAULT_LEVEL, GzipSink


logger = logging.getLogger(__name__)

ACCEPT_ENCODING = "Accept-Encoding"
CONTENT_ENCODING = "Content-Encoding"

GZIP = "gzip"


@dataclass(frozen=True)
class NegotiationResult:
    """Outcome of negotiate()."""

    compress: bool
    set_header: bool = False


def accepts_gzip(accepted_encodings: Iterable[Optional[str]]) -> bool:
    """True if any Accept-Encoding value contains "gzip"."""
    return any(value is not None and GZIP in value for value in accepted_encodings)


def negotiate(
    accepted_encodings: Iterable[Optional[str]],
    current_encoding: Optional[str],
    require_wants_header: bool,
) -> NegotiationResult:
    """
    Decide whether to compress.

    Args:
        accepted_encodings: Accept-Encoding values from the request.
        current_encoding: The whole Content-Encoding value already on the
            response, or None. Only the exact value "gzip" counts as a
            declaration; "deflate, gzip" does not.
        require_wants_header: Only compress when the response already
            declares gzip.

    Returns:
        NegotiationResult; set_header is True when the caller must set
        "Content-Encoding: gzip" (replacing any other value) before
        writing.
    """
    if not accepts_gzip(accepted_encodings):
        return NegotiationResult(compress=False)

    wants_gzip = current_encoding == GZIP

    if require_wants_header and not wants_gzip:
        return NegotiationResult(compress=False)

    return NegotiationResult(compress=True, set_header=not wants_gzip)


def check_and_wrap(
    request: HTTPRequest,
    response: HTTPResponse,
    require_wants_header: bool = False,
    level: int = DEFAULT_LEVEL,
) -> BinaryIO:
    """
    Wrap the response output in a GzipSink when the client accepts gzip.

    Args:
        request: The incoming request (Accept-Encoding is read).
        response: The outgoing response (Content-Encoding is read and,
            unless it is exactly "gzip", set to "gzip").
        require_wants_header: See negotiate().
        level: gzip compression level, 0-9.

    Returns:
        A GzipSink over response.output, or response.output unchanged.

    Raises:
        ValueError: If the response has no output sink.
        HeadersCommittedError: If the header must be set but the response
            was already committed.
        OSError: If the transform cannot write its header to the sink.
            Content-Encoding is put back the way it was if the response
            is still uncommitted.
    """
    sink = response.output
    if sink is None:
        raise ValueError("response has no output sink")

    previous = response.get_header(CONTENT_ENCODING)
    decision = negotiate(
        request.get_header_values(ACCEPT_ENCODING),
        previous,
        require_wants_header,
    )

    if not decision.compress:
        logger.debug(f"Not compressing {request.method} {request.path}")
        return sink

    if decision.set_header:
        response.set_header(CONTENT_ENCODING, GZIP)

    logger.debug(f"Compressing {request.method} {request.path} with gzip level {level}")
    try:
        return GzipSink(sink, level)
    except Exception:
        if decision.set_header and not response.committed:
            if previous is None:
                response.remove_header(CONTENT_ENCODING)
            else:
                response.set_header(CONTENT_ENCODING, previous)
        raise
