"""
Unit tests for HTTP request parsing.
"""

import io

import pytest

from webserver.http.request import (
    HTTPRequest,
    RequestMethod,
    RequestParser,
    HTTPParseError,
    parse_request,
)


class TestRequestMethod:
    """Tests for method token parsing."""

    @pytest.mark.parametrize("token", [
        "GET", "HEAD", "POST", "PUT", "DELETE", "TRACE", "CONNECT",
    ])
    def test_known_methods(self, token: str):
        """Test that every known token maps to its member."""
        assert RequestMethod.parse(token).value == token
        assert str(RequestMethod.parse(token)) == token

    @pytest.mark.parametrize("token", ["get", "FOO", "OPTIONS", "PATCH", ""])
    def test_unknown_methods(self, token: str):
        """Test that unknown or lowercase tokens are UNRECOGNIZED."""
        assert RequestMethod.parse(token) is RequestMethod.UNRECOGNIZED

    def test_unrecognized_str(self):
        """Test that UNRECOGNIZED renders as an empty string."""
        assert str(RequestMethod.UNRECOGNIZED) == ""


class TestRequestParser:
    """Tests for RequestParser class."""

    def test_parse_simple_get(self, sample_get_request: bytes):
        """Test parsing a simple GET request."""
        parser = RequestParser()
        request = parser.parse(io.BytesIO(sample_get_request))

        assert request.method is RequestMethod.GET
        assert request.uri == "/index.html"
        assert request.version == "HTTP/1.1"
        assert request.method_token == "GET"

    def test_parse_headers_in_order(self, sample_get_request: bytes):
        """Test that header lines are kept verbatim and in order."""
        request = parse_request(sample_get_request)

        assert request.headers == (
            "Host: localhost:8080",
            "User-Agent: pytest",
            "Accept-Encoding: gzip, deflate",
        )

    def test_accepts_gzip(self, sample_get_request: bytes):
        """Test gzip detection from Accept-Encoding."""
        assert parse_request(sample_get_request).accepts_gzip is True

    def test_accepts_gzip_header_name_case_insensitive(self):
        """Test that the header name is matched case-insensitively."""
        raw = b"GET / HTTP/1.1\r\naccept-encoding: gzip\r\n\r\n"
        assert parse_request(raw).accepts_gzip is True

    def test_no_gzip_without_accept_encoding(self):
        """Test that gzip elsewhere in the head does not count."""
        raw = b"GET /gzip.html HTTP/1.1\r\nUser-Agent: gzip-bot\r\n\r\n"
        assert parse_request(raw).accepts_gzip is False

    def test_no_gzip_with_other_encodings(self):
        """Test Accept-Encoding without gzip."""
        raw = b"GET / HTTP/1.1\r\nAccept-Encoding: deflate, br\r\n\r\n"
        assert parse_request(raw).accepts_gzip is False

    def test_parse_without_headers(self):
        """Test a request line directly followed by the empty line."""
        request = parse_request(b"HEAD /x HTTP/1.1\r\n\r\n")

        assert request.method is RequestMethod.HEAD
        assert request.headers == ()

    def test_parse_bare_lf_line_endings(self):
        """Test that LF-only line endings are accepted."""
        request = parse_request(b"GET /a.css HTTP/1.1\nHost: x\n\n")

        assert request.uri == "/a.css"
        assert request.headers == ("Host: x",)

    def test_unknown_method_is_not_an_error(self):
        """Test that an unknown method parses as UNRECOGNIZED."""
        request = parse_request(b"FOO /x HTTP/1.1\r\n\r\n")

        assert request.method is RequestMethod.UNRECOGNIZED
        assert request.method_token == "FOO"
        assert request.request_line == "FOO /x HTTP/1.1"

    def test_extra_tokens_ignored(self):
        """Test that tokens after the version are ignored."""
        request = parse_request(b"GET /x HTTP/1.1 extra\r\n\r\n")

        assert request.version == "HTTP/1.1"

    def test_uri_is_not_decoded(self):
        """Test that the URI is kept as sent."""
        request = parse_request(b"GET /a%20b.html?q=1 HTTP/1.1\r\n\r\n")

        assert request.uri == "/a%20b.html?q=1"

    def test_utf8_uri(self):
        """Test that a UTF-8 request line decodes to the literal URI."""
        request = parse_request("GET /café.html HTTP/1.1\r\n\r\n".encode("utf-8"))

        assert request.uri == "/café.html"

    def test_undecodable_bytes_round_trip(self):
        """Test that invalid UTF-8 in the URI maps back to the same bytes."""
        request = parse_request(b"GET /\xff\xfe.html HTTP/1.1\r\n\r\n")

        assert request.uri.encode("utf-8", "surrogateescape") == b"/\xff\xfe.html"

    def test_body_is_not_read(self, sample_post_request: bytes):
        """Test that parsing stops at the empty line."""
        stream = io.BytesIO(sample_post_request)
        request = RequestParser().parse(stream)

        assert request.method is RequestMethod.POST
        assert stream.read() == b'{"name": "John"}'

    def test_empty_stream_is_no_request(self):
        """Test that EOF before any byte yields None."""
        assert parse_request(b"") is None

    def test_parse_invalid_request_line(self):
        """Test handling of malformed request line."""
        with pytest.raises(HTTPParseError) as exc_info:
            parse_request(b"GET /\r\nHost: test\r\n\r\n")

        assert exc_info.value.status_code == 400

    def test_eof_before_end_of_headers(self):
        """Test that a head cut short is an error."""
        with pytest.raises(HTTPParseError):
            parse_request(b"GET / HTTP/1.1\r\nHost: test\r\n")

    def test_line_too_long(self):
        """Test the line length limit."""
        parser = RequestParser(max_line_length=32)
        raw = b"GET /" + b"a" * 64 + b" HTTP/1.1\r\n\r\n"

        with pytest.raises(HTTPParseError) as exc_info:
            parser.parse(io.BytesIO(raw))

        assert exc_info.value.status_code == 431

    def test_parser_is_reusable(self, sample_get_request: bytes):
        """Test that one parser handles many streams."""
        parser = RequestParser()
        first = parser.parse(io.BytesIO(sample_get_request))
        second = parser.parse(io.BytesIO(b"HEAD / HTTP/1.0\r\n\r\n"))

        assert first.method is RequestMethod.GET
        assert second.version == "HTTP/1.0"


class TestHTTPRequest:
    """Tests for the HTTPRequest value."""

    def test_request_is_immutable(self):
        """Test that requests cannot be modified after parsing."""
        request = HTTPRequest(RequestMethod.GET, "/", "HTTP/1.1")

        with pytest.raises(AttributeError):
            request.uri = "/other"

    def test_request_line_without_token(self):
        """Test request_line falls back to the method name."""
        request = HTTPRequest(RequestMethod.PUT, "/x", "HTTP/1.1")

        assert request.request_line == "PUT /x HTTP/1.1"
