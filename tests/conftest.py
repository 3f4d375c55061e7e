"""
pytest configuration and fixtures.
"""

import io
import sys
from pathlib import Path

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from httpcodec.http import HTTPRequest, HTTPResponse, open_response


class RecordingTransport(io.BytesIO):
    """BytesIO that keeps its contents after close()."""

    def __init__(self):
        super().__init__()
        self.data = b""
        self.flush_count = 0
        self.close_count = 0

    def flush(self):
        self.flush_count += 1
        super().flush()

    def close(self):
        self.close_count += 1
        if not self.closed:
            self.data = self.getvalue()
        super().close()

    @property
    def contents(self) -> bytes:
        return self.data if self.closed else self.getvalue()


class FailingSink:
    """Sink that rejects every write."""

    def __init__(self):
        self.closed = False

    def write(self, data):
        raise OSError("connection reset")

    def flush(self):
        pass

    def close(self):
        self.closed = True


@pytest.fixture
def transport() -> RecordingTransport:
    """In-memory transport that records everything written."""
    return RecordingTransport()


@pytest.fixture
def response(transport: RecordingTransport) -> HTTPResponse:
    """Response streaming into the recording transport."""
    return open_response(transport)


@pytest.fixture
def gzip_request() -> HTTPRequest:
    """Request from a client that accepts gzip with a quality value."""
    return HTTPRequest(
        method="GET",
        path="/items",
        headers={"accept-encoding": "gzip;q=0.8, deflate"},
    )


@pytest.fixture
def plain_request() -> HTTPRequest:
    """Request from a client that does not accept gzip."""
    return HTTPRequest(
        method="GET",
        path="/items",
        headers={"accept-encoding": "deflate, br"},
    )


@pytest.fixture
def failing_sink() -> FailingSink:
    """Sink whose writes raise OSError."""
    return FailingSink()
