"""
=============================================================================
HTTPCODEC - Output Encoding Pipeline for HTTP Responses
=============================================================================

Three small pieces that sit between a request handler and the socket:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   handler value ──► Serializer ──► [GzipSink] ──► ResponseStream   │
    │                      │               │                │             │
    │                      │               │                └─ headers    │
    │                      │               │                   commit on  │
    │                      │               │                   1st write  │
    │                      │               └─ chosen by the encoding      │
    │                      │                  negotiator                  │
    │                      └─ first match in a SerializerRegistry         │
    │                                                                      │
    │   codec / urldecoding: hex and base-N helpers, percent-decoding     │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
PACKAGE STRUCTURE
=============================================================================

    httpcodec/
    ├── __init__.py          # This file - package exports
    ├── __main__.py          # CLI (python -m httpcodec)
    ├── config.py            # EncodingConfig, configure_logging
    ├── codec.py             # hex / base-N encode and decode
    ├── urldecoding.py       # percent-decoding on top of codec
    ├── output.py            # write_body: negotiate + serialize + close
    ├── encoding/
    │   ├── negotiation.py   # Accept-Encoding / Content-Encoding decision
    │   └── gzip_sink.py     # streaming gzip transform
    ├── serialization/
    │   ├── base.py          # Serializer contract, priority bands
    │   ├── serializers.py   # bytes, stream, JSON, default (catch-all)
    │   └── registry.py      # priority-ordered lookup
    └── http/
        ├── request.py       # HTTPRequest, RequestParser
        └── response.py      # HTTPResponse, ResponseStream

=============================================================================
QUICK START
=============================================================================

    from httpcodec import parse_request, open_response, write_body

    request = parse_request(raw_bytes)
    response = open_response(client_socket.makefile("wb"))
    write_body(request, response, {"message": "Hello"})

=============================================================================
"""

__version__ = "1.0.0"

from .codec import (
    MalformedNumber,
    decode_hex_digit,
    parse_unsigned_int,
    bytes_to_hex,
    byte_to_hex,
    bytes_to_base_n,
)
from .urldecoding import url_decode, parse_query
from .config import EncodingConfig, configure_logging
from .encoding import check_and_wrap, negotiate, GzipSink
from .serialization import (
    Serializer,
    DefaultSerializer,
    SerializerRegistry,
    NoSerializerError,
    default_registry,
)
from .http import (
    HTTPRequest,
    HTTPResponse,
    HeadersCommittedError,
    parse_request,
    open_response,
)
from .output import write_body

__all__ = [
    "__version__",

    # Codec
    "MalformedNumber",
    "decode_hex_digit",
    "parse_unsigned_int",
    "bytes_to_hex",
    "byte_to_hex",
    "bytes_to_base_n",
    "url_decode",
    "parse_query",

    # Configuration
    "EncodingConfig",
    "configure_logging",

    # Negotiation
    "check_and_wrap",
    "negotiate",
    "GzipSink",

    # Serialization
    "Serializer",
    "DefaultSerializer",
    "SerializerRegistry",
    "NoSerializerError",
    "default_registry",

    # HTTP model
    "HTTPRequest",
    "HTTPResponse",
    "HeadersCommittedError",
    "parse_request",
    "open_response",
    "write_body",
]
