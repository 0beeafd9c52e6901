"""
Unit tests for HTTP response building.
"""

from datetime import datetime, timedelta, timezone

import pytest

from webserver.http.response import (
    HTTPResponse,
    ResponseBuilder,
    format_http_date,
    render_error_page,
)
from webserver.http.status_codes import HTTPStatus


class TestHTTPResponse:
    """Tests for HTTPResponse class."""

    def test_status_line(self):
        response = HTTPResponse(
            status=HTTPStatus.NOT_FOUND,
            headers=["HTTP/1.1 404 Not Found", "Connection: close"],
        )

        assert response.status_line == "HTTP/1.1 404 Not Found"

    def test_get_header_case_insensitive(self):
        response = HTTPResponse(headers=["HTTP/1.1 200 OK", "Content-Type: text/css"])

        assert response.get_header("content-type") == "text/css"
        assert response.get_header("Content-Length") is None

    def test_empty_response(self):
        assert HTTPResponse().status_line == ""


class TestResponseBuilder:
    """Tests for ResponseBuilder class."""

    def test_fixed_lines_follow_status(self):
        """Test status line, Connection and Server, in that order."""
        response = ResponseBuilder(server_name="TestServer").status(HTTPStatus.OK).build()

        assert response.headers == [
            "HTTP/1.1 200 OK",
            "Connection: close",
            "Server: TestServer",
        ]
        assert response.body is None

    def test_status_set_only_once(self):
        """Test that a second status is refused."""
        builder = ResponseBuilder().status(HTTPStatus.OK)

        with pytest.raises(RuntimeError):
            builder.status(HTTPStatus.NOT_FOUND)

    def test_build_requires_status(self):
        with pytest.raises(RuntimeError):
            ResponseBuilder().build()

    def test_header_requires_status(self):
        with pytest.raises(RuntimeError):
            ResponseBuilder().header("X-Test", "1")

    def test_body_only_on_ok(self):
        """Test that a resource body cannot be attached to an error."""
        builder = ResponseBuilder().status(HTTPStatus.FORBIDDEN)

        with pytest.raises(RuntimeError):
            builder.body(b"secret")

    def test_body_accepts_str(self):
        response = ResponseBuilder().status(HTTPStatus.OK).body("héllo").build()

        assert response.body == "héllo".encode("utf-8")

    def test_method_chaining(self):
        """Test that headers keep insertion order."""
        modified = datetime(2026, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
        response = (ResponseBuilder()
            .status(HTTPStatus.OK)
            .content_type("text/html")
            .date(modified)
            .last_modified(modified)
            .body(b"<html/>")
            .build())

        assert response.headers[3:] == [
            "Content-Type: text/html",
            "Date: Fri, 02 Jan 2026 03:04:05 GMT",
            "Last-Modified: Fri, 02 Jan 2026 03:04:05 GMT",
        ]
        assert response.body == b"<html/>"

    def test_version_in_status_line(self):
        response = ResponseBuilder(version="HTTP/1.0").status(HTTPStatus.OK).build()

        assert response.status_line == "HTTP/1.0 200 OK"

    def test_error_page_body(self):
        response = (ResponseBuilder()
            .status(HTTPStatus.NOT_FOUND)
            .error_page("/missing.html", 8080)
            .build())

        assert b"<TITLE>404 Not Found</TITLE>" in response.body
        assert b"/missing.html" in response.body
        assert b"Port 8080" in response.body

    def test_build_returns_copy_of_headers(self):
        builder = ResponseBuilder().status(HTTPStatus.OK)
        response = builder.build()
        response.headers.append("X-Extra: 1")

        assert "X-Extra: 1" not in builder.build().headers


class TestErrorPage:
    """Tests for render_error_page."""

    def test_exact_layout(self):
        page = render_error_page(HTTPStatus.METHOD_NOT_ALLOWED, "POST", "COMP4621HttpServer", 8080)

        assert page == (
            "<HTML><HEAD>\r\n"
            "<TITLE>405 Method Not Allowed</TITLE>\r\n"
            "</HEAD><BODY>\r\n"
            "<H1>Method Not Allowed</H1>\r\n"
            "<P>Method POST is not allowed in this server.</P>\r\n"
            "<HR>\r\n"
            "<P><I>COMP4621HttpServer at localhost Port 8080</I></P>\r\n"
            "</BODY></HTML>\r\n"
        )

    def test_empty_context(self):
        page = render_error_page(HTTPStatus.BAD_REQUEST)

        assert "<P>The request message is not understood by server, please try again.</P>" in page

    def test_context_not_escaped(self):
        """Test that the context is inserted verbatim."""
        page = render_error_page(HTTPStatus.NOT_FOUND, "/<b>.html")

        assert "/<b>.html" in page


class TestFormatHTTPDate:
    """Tests for HTTP date formatting."""

    def test_format(self):
        dt = datetime(2026, 10, 19, 12, 0, 0)
        assert format_http_date(dt) == "Mon, 19 Oct 2026 12:00:00 GMT"

    def test_aware_datetime_converted_to_utc(self):
        dt = datetime(2026, 10, 19, 14, 30, 0, tzinfo=timezone(timedelta(hours=2)))
        assert format_http_date(dt) == "Mon, 19 Oct 2026 12:30:00 GMT"
