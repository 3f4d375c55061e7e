"""
Unit tests for write_body().
"""

import gzip
import io
import json

import pytest

from httpcodec.config import EncodingConfig
from httpcodec.http import HTTPResponse, open_response
from httpcodec.output import write_body
from httpcodec.serialization import (
    BytesSerializer,
    DefaultSerializer,
    JsonSerializer,
    NoSerializerError,
    Serializer,
    SerializerRegistry,
)


class ExplodingSerializer(Serializer):
    """Test serializer that fails halfway through."""

    def handles(self, value):
        return True

    def write(self, sink, value):
        sink.write(b"partial")
        raise OSError("disk gone")


class BrokenTransport(io.BytesIO):
    """Transport whose peer has gone away."""

    def write(self, data):
        raise OSError("broken pipe")


def split(raw: bytes):
    head, _, body = raw.partition(b"\r\n\r\n")
    return head.decode("latin-1"), body


class TestWriteBody:
    """Tests for the negotiate-serialize-close pipeline."""

    def test_json_gzipped(self, gzip_request, response, transport):
        """Test a dict is JSON-encoded and compressed."""
        used = write_body(gzip_request, response, {"id": 7, "name": "Zoë"})

        assert isinstance(used, JsonSerializer)
        assert transport.closed

        head, body = split(transport.contents)
        assert "Content-Encoding: gzip" in head
        assert json.loads(gzip.decompress(body)) == {"id": 7, "name": "Zoë"}

    def test_plain_text_uncompressed(self, plain_request, response, transport):
        """Test the default serializer without compression."""
        used = write_body(plain_request, response, 42)

        assert isinstance(used, DefaultSerializer)
        head, body = split(transport.contents)
        assert "Content-Encoding" not in head
        assert body == b"42"

    def test_stream_body(self, gzip_request, response, transport):
        """Test a file-like body is copied through gzip."""
        write_body(gzip_request, response, io.BytesIO(b"x" * 100_000))

        _, body = split(transport.contents)
        assert gzip.decompress(body) == b"x" * 100_000
        assert len(body) < 100_000

    def test_require_wants_header_config(self, gzip_request, response, transport):
        """Test opt-in policy from configuration."""
        write_body(
            gzip_request,
            response,
            b"raw",
            config=EncodingConfig(require_wants_header=True),
        )

        head, body = split(transport.contents)
        assert "Content-Encoding" not in head
        assert body == b"raw"

    def test_handler_opt_in(self, gzip_request, response, transport):
        """Test a response that declares gzip is compressed under the opt-in policy."""
        response.set_header("Content-Encoding", "gzip")
        write_body(
            gzip_request,
            response,
            b"raw",
            config=EncodingConfig(require_wants_header=True),
        )

        _, body = split(transport.contents)
        assert gzip.decompress(body) == b"raw"

    def test_custom_registry(self, plain_request, response, transport):
        """Test a caller-supplied registry."""
        registry = SerializerRegistry([BytesSerializer()])
        used = write_body(plain_request, response, b"bin", registry=registry)

        assert isinstance(used, BytesSerializer)
        assert split(transport.contents)[1] == b"bin"

    def test_sink_closed_when_no_serializer(self, plain_request, response, transport):
        """Test the sink is released when nothing handles the value."""
        registry = SerializerRegistry([BytesSerializer()])
        with pytest.raises(NoSerializerError):
            write_body(plain_request, response, 3.14, registry=registry)
        assert transport.closed

    def test_sink_closed_when_serializer_fails(self, gzip_request, response, transport):
        """Test the sink is released and the error propagates."""
        registry = SerializerRegistry([ExplodingSerializer()])
        with pytest.raises(OSError, match="disk gone"):
            write_body(gzip_request, response, "x", registry=registry)
        assert transport.closed

    def test_sink_closed_when_gzip_header_write_fails(self, gzip_request, failing_sink):
        """Test the raw sink is released when the transform cannot start."""
        response = HTTPResponse(output=failing_sink)

        with pytest.raises(OSError, match="connection reset"):
            write_body(gzip_request, response, "x")

        assert failing_sink.closed
        assert response.get_header("Content-Encoding") is None

    def test_broken_transport_left_unlabelled(self, gzip_request):
        """Test a transport that fails on the first write is closed without a gzip label."""
        transport = BrokenTransport()
        response = open_response(transport)

        with pytest.raises(OSError):
            write_body(gzip_request, response, "x")

        assert transport.closed
        assert not response.committed
        assert response.get_header("Content-Encoding") is None
