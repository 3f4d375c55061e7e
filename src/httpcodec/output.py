"""
Body output: negotiate the encoding, serialize, release the sink.

    write_body(request, response, value)
        │
        ├── check_and_wrap()      raw sink or GzipSink; Content-Encoding set
        ├── registry.write()      first serializer that handles value
        └── sink.close()          always, including when negotiation or
                                  serialization fails
"""

import logging
from typing import Any, Optional

from .config import EncodingConfig
from .encoding import check_and_wrap
from .http.request import HTTPRequest
from .http.response import HTTPResponse
from .serialization import Serializer, SerializerRegistry, default_registry


logger = logging.getLogger(__name__)

_default_registry = default_registry()


def write_body(
    request: HTTPRequest,
    response: HTTPResponse,
    value: Any,
    registry: Optional[SerializerRegistry] = None,
    config: Optional[EncodingConfig] = None,
) -> Serializer:
    """
    Write ``value`` as the response body.

    Args:
        request: The request being answered.
        response: Response whose output sink receives the body.
        value: Anything a registered serializer handles.
        registry: Serializers to consult (defaults to the built-ins).
        config: Compression settings (defaults to EncodingConfig()).

    Returns:
        The serializer that wrote the body.

    Raises:
        NoSerializerError: If nothing in the registry handles the value.
        OSError: If the sink rejects a write.
    """
    registry = registry if registry is not None else _default_registry
    config = config or EncodingConfig()

    try:
        sink = check_and_wrap(
            request,
            response,
            require_wants_header=config.require_wants_header,
            level=config.gzip_level,
        )
    except Exception:
        if response.output is not None:
            response.output.close()
        raise

    try:
        serializer = registry.write(sink, value)
    finally:
        sink.close()

    logger.debug(f"Wrote {type(value).__name__} body with {serializer.name}")
    return serializer
