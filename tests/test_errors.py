"""Tests for strata.errors and the terminal handler in strata.server.errors."""

import logging

import pytest

from strata.errors import (
    ConfigurationError,
    HTTPError,
    NotFound,
    ResponseFinished,
    StrataError,
)
from strata.http.request import Request
from strata.http.response import Response
from strata.server.errors import final_handler


def _request(path: str = "/missing") -> Request:
    return Request.from_asgi({"type": "http", "method": "GET", "path": path})


class TestHierarchy:
    def test_http_error_is_strata_error(self) -> None:
        assert issubclass(HTTPError, StrataError)

    def test_not_found_is_http_error(self) -> None:
        assert issubclass(NotFound, HTTPError)

    def test_configuration_error_is_strata_error(self) -> None:
        assert issubclass(ConfigurationError, StrataError)

    def test_response_finished_is_strata_error(self) -> None:
        assert issubclass(ResponseFinished, StrataError)


class TestHTTPError:
    def test_status_and_detail(self) -> None:
        err = HTTPError(status=400, detail="Bad request body")
        assert err.status == 400
        assert err.detail == "Bad request body"

    def test_str_with_detail(self) -> None:
        assert str(HTTPError(status=400, detail="Bad request body")) == "400: Bad request body"

    def test_str_without_detail(self) -> None:
        assert str(HTTPError(status=500)) == "500"

    def test_frozen(self) -> None:
        err = HTTPError(status=400)
        with pytest.raises(AttributeError):
            err.status = 500  # type: ignore[misc]

    def test_default_empty_headers(self) -> None:
        assert HTTPError(status=400).headers == ()


class TestNotFound:
    def test_defaults(self) -> None:
        err = NotFound()
        assert err.status == 404
        assert err.detail == "Not Found"

    def test_custom_detail(self) -> None:
        assert NotFound("No such user").detail == "No such user"


class TestFinalHandler:
    def test_no_error_is_404(self) -> None:
        response = Response()
        final_handler(_request(), response)(None)
        assert response.status == 404
        assert response.text == "Not Found"
        assert response.finished

    def test_error_is_500(self) -> None:
        response = Response()
        final_handler(_request(), response)(RuntimeError("secret detail"))
        assert response.status == 500
        assert response.text == "Internal Server Error"
        assert "secret" not in response.text

    @pytest.mark.parametrize("value", ["", 0, False])
    def test_falsy_error_is_404(self, value: object) -> None:
        response = Response()
        final_handler(_request(), response)(value)
        assert response.status == 404

    def test_non_exception_error_is_500(self) -> None:
        response = Response()
        final_handler(_request(), response)("just a string")
        assert response.status == 500

    def test_http_error_status_and_headers(self) -> None:
        response = Response()
        err = HTTPError(status=401, detail="Login required", headers=(("WWW-Authenticate", "Basic"),))
        final_handler(_request(), response)(err)
        assert response.status == 401
        assert response.text == "Login required"
        assert response.get_header("www-authenticate") == "Basic"

    def test_http_error_without_detail(self) -> None:
        response = Response()
        final_handler(_request(), response)(HTTPError(status=418))
        assert response.text == "Error 418"

    def test_not_found_error(self) -> None:
        response = Response()
        final_handler(_request(), response)(NotFound())
        assert response.status == 404
        assert response.text == "Not Found"

    def test_debug_body_includes_traceback(self) -> None:
        response = Response()
        try:
            raise ValueError("kaboom")
        except ValueError as exc:
            error = exc

        final_handler(_request(), response, debug=True)(error)
        assert response.status == 500
        assert "ValueError('kaboom')" in response.text
        assert "Traceback" in response.text

    def test_debug_body_for_non_exception(self) -> None:
        response = Response()
        final_handler(_request(), response, debug=True)("m1 error")
        assert response.text == "Internal Server Error\n\n'm1 error'\n"

    def test_debug_http_error_body(self) -> None:
        response = Response()
        final_handler(_request(), response, debug=True)(HTTPError(403, "Forbidden"))
        assert response.text == "403: Forbidden"

    def test_finished_response_left_alone(self) -> None:
        response = Response()
        response.end("already answered")
        final_handler(_request(), response)(RuntimeError("late"))
        assert response.status == 200
        assert response.text == "already answered"

    def test_500_is_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.ERROR, logger="strata.server"):
            final_handler(_request("/boom"), Response())(RuntimeError("kaboom"))
        assert "500 GET /boom" in caplog.text

    def test_404_logged_at_debug(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.DEBUG, logger="strata.server"):
            final_handler(_request("/nowhere"), Response())(None)
        records = [r for r in caplog.records if r.name == "strata.server"]
        assert records[0].levelno == logging.DEBUG
        assert "404 GET /nowhere" in records[0].getMessage()

    def test_500_discards_partial_output(self) -> None:
        response = Response()
        response.set_header("Content-Type", "application/json")
        response.set_header("X-Partial", "1")
        response.write('{"ok": ')

        final_handler(_request(), response)(RuntimeError("half way"))

        assert response.status == 500
        assert response.content_type == "text/plain; charset=utf-8"
        assert response.get_header("x-partial") is None
        assert response.text == "Internal Server Error"

    def test_404_discards_partial_output(self) -> None:
        response = Response()
        response.set_header("X-Partial", "1")
        response.write("draft")

        final_handler(_request(), response)(None)

        assert response.headers == []
        assert response.text == "Not Found"

    def test_http_error_keeps_only_its_own_headers(self) -> None:
        response = Response()
        response.set_header("Content-Type", "application/json")
        response.set_header("X-Partial", "1")
        response.write("[1, 2")

        final_handler(_request(), response)(HTTPError(429, "Slow down", (("Retry-After", "30"),)))

        assert response.status == 429
        assert response.headers == [("Retry-After", "30")]
        assert response.content_type == "text/plain; charset=utf-8"
        assert response.text == "Slow down"
