"""
Unit tests for content-encoding negotiation.
"""

import gzip
import zlib
from dataclasses import dataclass

import pytest

from httpcodec.encoding import (
    GzipSink,
    NegotiationResult,
    accepts_gzip,
    negotiate,
    check_and_wrap,
)
from httpcodec.http import HTTPRequest, HTTPResponse, HeadersCommittedError, ResponseStream


@dataclass
class CountingResponse(HTTPResponse):
    """HTTPResponse that counts set_header() calls per header name."""

    def __post_init__(self):
        self.set_calls = {}

    def set_header(self, name, value):
        self.set_calls[name] = self.set_calls.get(name, 0) + 1
        return super().set_header(name, value)


@pytest.fixture
def counting_response(transport) -> CountingResponse:
    response = CountingResponse()
    response.output = ResponseStream(transport, response)
    return response


def body_of(raw: bytes) -> bytes:
    return raw.partition(b"\r\n\r\n")[2]


class TestAcceptsGzip:
    """Tests for accepts_gzip()."""

    def test_substring_match(self):
        """Test quality-suffixed and prefixed tokens match."""
        assert accepts_gzip(["gzip;q=0.8"])
        assert accepts_gzip(["deflate", "x-gzip"])

    def test_no_match(self):
        """Test absent token and empty input."""
        assert not accepts_gzip(["deflate", "br"])
        assert not accepts_gzip([])

    def test_none_values_skipped(self):
        """Test None entries are ignored."""
        assert not accepts_gzip([None])
        assert accepts_gzip([None, "gzip"])


class TestNegotiate:
    """Tests for the pure negotiate() decision."""

    @pytest.mark.parametrize("require", [True, False])
    def test_not_accepted(self, require):
        """Test no compression when the client does not accept gzip."""
        assert negotiate(["deflate"], None, require) == NegotiationResult(compress=False)
        assert negotiate(["deflate"], "gzip", require) == NegotiationResult(compress=False)

    def test_accepted_without_requirement(self):
        """Test compression and header set when not yet declared."""
        result = negotiate(["gzip;q=0.8"], None, False)
        assert result.compress
        assert result.set_header

    def test_accepted_and_declared(self):
        """Test header is not set again when already declared."""
        for require in (True, False):
            result = negotiate(["gzip"], "gzip", require)
            assert result.compress
            assert not result.set_header

    def test_requirement_not_met(self):
        """Test opt-in policy without a declared encoding."""
        assert not negotiate(["gzip"], None, True).compress
        assert not negotiate(["gzip"], "br", True).compress

    def test_declared_encoding_exact_match(self):
        """Test the declared encoding must equal "gzip" exactly."""
        assert not negotiate(["gzip"], "x-gzip", True).compress

    def test_stacked_encoding_is_not_a_declaration(self):
        """Test "deflate, gzip" does not count as already declaring gzip."""
        assert not negotiate(["gzip"], "deflate, gzip", True).compress
        assert negotiate(["gzip"], "deflate, gzip", False) == NegotiationResult(
            compress=True, set_header=True
        )


class TestCheckAndWrap:
    """Tests for check_and_wrap()."""

    def test_wraps_and_sets_header_once(self, gzip_request, counting_response, transport):
        """Test quality-valued Accept-Encoding wraps and sets the header once."""
        sink = check_and_wrap(gzip_request, counting_response, require_wants_header=False)

        assert isinstance(sink, GzipSink)
        assert counting_response.set_calls == {"Content-Encoding": 1}
        assert counting_response.get_header("Content-Encoding") == "gzip"

        with sink:
            sink.write(b"hello world" * 10)

        raw = transport.contents
        assert raw.count(b"Content-Encoding: gzip\r\n") == 1
        assert gzip.decompress(body_of(raw)) == b"hello world" * 10

    def test_header_committed_with_gzip_header(self, gzip_request, response):
        """Test the header is in place before any byte goes out."""
        sink = check_and_wrap(gzip_request, response)

        # The gzip member header has been written, so the response is committed
        assert response.committed
        with pytest.raises(HeadersCommittedError):
            response.set_header("X-Late", "1")
        sink.close()

    @pytest.mark.parametrize("require", [True, False])
    def test_not_accepted_returns_raw_sink(self, plain_request, counting_response, transport, require):
        """Test the raw sink comes back untouched."""
        raw_sink = counting_response.output

        sink = check_and_wrap(plain_request, counting_response, require_wants_header=require)

        assert sink is raw_sink
        assert counting_response.set_calls == {}
        assert counting_response.get_header("Content-Encoding") is None
        assert transport.contents == b""

    def test_missing_accept_encoding(self, response):
        """Test a request without Accept-Encoding."""
        request = HTTPRequest(method="GET", path="/")
        assert check_and_wrap(request, response) is response.output

    def test_require_wants_header_without_declaration(self, gzip_request, counting_response):
        """Test opt-in mode leaves undeclared responses alone."""
        sink = check_and_wrap(gzip_request, counting_response, require_wants_header=True)

        assert sink is counting_response.output
        assert counting_response.set_calls == {}

    def test_require_wants_header_with_declaration(self, gzip_request, counting_response, transport):
        """Test opt-in mode compresses declared responses without re-setting the header."""
        counting_response.headers["content-encoding"] = "gzip"

        sink = check_and_wrap(gzip_request, counting_response, require_wants_header=True)
        assert isinstance(sink, GzipSink)
        assert counting_response.set_calls == {}

        with sink:
            sink.write(b"data")

        raw = transport.contents
        assert raw.lower().count(b"content-encoding") == 1
        assert gzip.decompress(body_of(raw)) == b"data"

    def test_already_committed(self, gzip_request, response):
        """Test wrapping after the body started fails rather than sending a late header."""
        response.output.write(b"early")
        with pytest.raises(HeadersCommittedError):
            check_and_wrap(gzip_request, response)

    def test_no_output_sink(self, gzip_request):
        """Test a response without a sink is rejected."""
        with pytest.raises(ValueError):
            check_and_wrap(gzip_request, HTTPResponse())

    def test_stacked_encoding_replaced(self, gzip_request, response, transport):
        """Test a stacked Content-Encoding is replaced by exactly gzip."""
        response.set_header("Content-Encoding", "deflate, gzip")

        sink = check_and_wrap(gzip_request, response)
        assert isinstance(sink, GzipSink)
        assert response.get_header("Content-Encoding") == "gzip"

        with sink:
            sink.write(b"body")

        raw = transport.contents
        assert b"Content-Encoding: gzip\r\n" in raw
        assert b"deflate" not in raw
        assert gzip.decompress(body_of(raw)) == b"body"

    def test_construction_failure_propagates(self, gzip_request, failing_sink):
        """Test OSError from the sink surfaces and the header is taken back."""
        response = HTTPResponse(output=failing_sink)
        with pytest.raises(OSError):
            check_and_wrap(gzip_request, response)

        assert not response.committed
        assert response.get_header("Content-Encoding") is None

    def test_construction_failure_restores_previous_header(self, gzip_request, failing_sink):
        """Test a replaced Content-Encoding value is put back on failure."""
        response = HTTPResponse(output=failing_sink)
        response.set_header("Content-Encoding", "deflate, gzip")

        with pytest.raises(OSError):
            check_and_wrap(gzip_request, response)

        assert response.get_header("Content-Encoding") == "deflate, gzip"

    def test_compression_level_passed_through(self, gzip_request, response):
        """Test the level argument reaches the transform."""
        sink = check_and_wrap(gzip_request, response, level=9)
        assert sink.level == 9
        sink.close()


class TestGzipSink:
    """Tests for GzipSink."""

    def test_flush_makes_partial_output_decodable(self, transport):
        """Test sync flush pushes written data to the transport."""
        sink = GzipSink(transport)
        sink.write(b"partial")
        sink.flush()

        decoder = zlib.decompressobj(16 + zlib.MAX_WBITS)
        assert decoder.decompress(transport.getvalue()) == b"partial"
        assert transport.flush_count >= 1
        sink.close()

    def test_close_owns_wrapped_sink(self, transport):
        """Test closing the transform closes the raw sink exactly once."""
        sink = GzipSink(transport)
        assert sink.raw is transport
        sink.write(b"x")
        sink.close()
        sink.close()

        assert sink.closed
        assert transport.closed
        assert transport.close_count == 1
        assert gzip.decompress(transport.contents) == b"x"

    def test_write_after_close(self, transport):
        """Test writes to a closed sink are rejected."""
        sink = GzipSink(transport)
        sink.close()
        with pytest.raises(ValueError):
            sink.write(b"x")

    def test_raw_closed_on_error_path(self, transport):
        """Test the context manager releases the raw sink when the body fails."""
        with pytest.raises(RuntimeError):
            with GzipSink(transport) as sink:
                sink.write(b"x")
                raise RuntimeError("handler failed")
        assert transport.closed

    def test_invalid_level(self, transport):
        """Test levels outside 0-9."""
        with pytest.raises(ValueError):
            GzipSink(transport, level=10)
