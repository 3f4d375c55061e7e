"""
=============================================================================
ENCODING CONFIGURATION
=============================================================================

Settings for the output pipeline, in one typed place.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    CONFIGURATION SOURCES                            │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   1. Code:        EncodingConfig(gzip_level=9)                      │
    │   2. Environment: HTTPCODEC_GZIP_LEVEL=9                            │
    │                   HTTPCODEC_REQUIRE_WANTS_HEADER=true               │
    │                   HTTPCODEC_LOG_LEVEL=DEBUG                         │
    │   3. CLI:         python -m httpcodec --log-level DEBUG ...         │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Validation happens once, up front, via validate().

=============================================================================
"""

import logging
import os
from dataclasses import dataclass


LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ValueError(f"{name} must be a boolean, got {raw!r}")


@dataclass
class EncodingConfig:
    """
    Configuration for response encoding.

    Development:
        EncodingConfig(log_level="DEBUG")

    Handlers opt in to compression one response at a time:
        EncodingConfig(require_wants_header=True)
    """

    require_wants_header: bool = False
    """
    Only compress responses that already declare Content-Encoding: gzip.
    False = compress whenever the client accepts gzip.
    """

    gzip_level: int = 6
    """
    gzip compression level (0-9).
    1 = fastest, 6 = balanced (default), 9 = smallest output.
    """

    log_level: str = "INFO"
    """Logging level for the httpcodec logger namespace."""

    @classmethod
    def from_env(cls) -> "EncodingConfig":
        """
        Create configuration from environment variables.

        HTTPCODEC_REQUIRE_WANTS_HEADER  true/false (default: false)
        HTTPCODEC_GZIP_LEVEL            0-9 (default: 6)
        HTTPCODEC_LOG_LEVEL             DEBUG/INFO/... (default: INFO)
        """
        return cls(
            require_wants_header=_env_bool("HTTPCODEC_REQUIRE_WANTS_HEADER", False),
            gzip_level=int(os.getenv("HTTPCODEC_GZIP_LEVEL", "6")),
            log_level=os.getenv("HTTPCODEC_LOG_LEVEL", "INFO"),
        )

    def validate(self) -> None:
        """Raise ValueError on the first invalid setting."""
        if not 0 <= self.gzip_level <= 9:
            raise ValueError(f"Invalid gzip_level: {self.gzip_level}. Must be 0-9.")

        if not isinstance(logging.getLevelName(self.log_level.upper()), int):
            raise ValueError(f"Invalid log_level: {self.log_level}")


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging and the httpcodec logger level."""
    numeric = getattr(logging, level.upper(), logging.INFO)

    logging.basicConfig(
        level=numeric,
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
    )

    logging.getLogger("httpcodec").setLevel(numeric)
