"""Tests for the request executor."""

from __future__ import annotations

import httpx
import pytest

from apitester.client.executor import RequestExecutor
from apitester.exceptions import ConnectionError_, RequestBuildError, ResponseReadError


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _executor(handler) -> RequestExecutor:
    return RequestExecutor(transport=httpx.MockTransport(handler))


class _BrokenStream(httpx.SyncByteStream):
    """Body stream that drops the connection after the first chunk."""

    def __iter__(self):
        yield b'{"partial": '
        raise httpx.ReadError("connection reset by peer")


# ---------------------------------------------------------------------------
# Context manager
# ---------------------------------------------------------------------------


class TestContextManager:
    def test_enter_creates_client(self) -> None:
        executor = RequestExecutor()
        assert executor._client is None
        with executor:
            assert executor._client is not None
        assert executor._client is None


# ---------------------------------------------------------------------------
# Request construction
# ---------------------------------------------------------------------------


class TestRequestConstruction:
    def test_get_without_body(self, recorder) -> None:
        with _executor(recorder) as executor:
            response = executor.execute("GET", "http://x/y")

        assert response.status_code == 200
        assert len(recorder.requests) == 1
        request = recorder.requests[0]
        assert request.method == "GET"
        assert str(request.url) == "http://x/y"
        assert request.content == b""
        assert "content-type" not in request.headers

    def test_body_and_headers_passed_through(self, recorder) -> None:
        with _executor(recorder) as executor:
            executor.execute(
                "POST",
                "https://api.example.com/items?x=1",
                '{"name": "test"}',
                {"X-Trace": "abc", "Authorization": "Bearer t"},
            )

        request = recorder.requests[0]
        assert request.method == "POST"
        assert str(request.url) == "https://api.example.com/items?x=1"
        assert request.content == b'{"name": "test"}'
        assert request.headers["X-Trace"] == "abc"
        assert request.headers["Authorization"] == "Bearer t"

    def test_content_type_defaults_to_json_when_body_present(self, recorder) -> None:
        with _executor(recorder) as executor:
            executor.execute("PUT", "http://x/y", "plainly not json")

        assert recorder.requests[0].headers["Content-Type"] == "application/json"

    def test_content_type_not_overridden(self, recorder) -> None:
        with _executor(recorder) as executor:
            executor.execute("POST", "http://x/y", "a=1", {"Content-Type": "text/plain"})

        assert recorder.requests[0].headers.get_list("content-type") == ["text/plain"]

    def test_content_type_check_is_case_insensitive(self, recorder) -> None:
        with _executor(recorder) as executor:
            executor.execute("POST", "http://x/y", "a=1", {"content-type": "text/csv"})

        assert recorder.requests[0].headers.get_list("content-type") == ["text/csv"]

    def test_no_default_content_type_without_body(self, recorder) -> None:
        with _executor(recorder) as executor:
            executor.execute("DELETE", "http://x/y", "", {"X-A": "1"})

        request = recorder.requests[0]
        assert "content-type" not in request.headers
        assert request.headers["X-A"] == "1"

    def test_caller_content_type_kept_without_body(self, recorder) -> None:
        with _executor(recorder) as executor:
            executor.execute("GET", "http://x/y", "", {"Content-Type": "text/xml"})

        assert recorder.requests[0].headers["Content-Type"] == "text/xml"

    def test_lowercase_method_sent_upper(self, recorder) -> None:
        with _executor(recorder) as executor:
            executor.execute("patch", "http://x/y")

        assert recorder.requests[0].method == "PATCH"

    def test_unicode_body_encoded_utf8(self, recorder) -> None:
        with _executor(recorder) as executor:
            executor.execute("POST", "http://x/y", '{"name": "José"}')

        assert recorder.requests[0].content == '{"name": "José"}'.encode("utf-8")

    def test_non_ascii_header_value_sent_as_utf8(self, recorder) -> None:
        with _executor(recorder) as executor:
            executor.execute("GET", "http://x/y", "", {"X-Name": "café"})

        request = recorder.requests[0]
        assert (b"X-Name", "café".encode("utf-8")) in request.headers.raw
        assert request.headers["X-Name"] == "café"

    def test_follows_redirects(self) -> None:
        seen: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request.url.path)
            if request.url.path == "/old":
                return httpx.Response(302, headers={"Location": "/new"})
            return httpx.Response(200, text="moved here")

        with _executor(handler) as executor:
            response = executor.execute("GET", "http://x/old")

        assert seen == ["/old", "/new"]
        assert response.status_code == 200
        assert response.text == "moved here"


class TestBuildFailures:
    @pytest.mark.parametrize("url", ["not a url", "/relative/path", "ftp://x/y", "http://"])
    def test_invalid_url(self, recorder, url: str) -> None:
        with _executor(recorder) as executor:
            with pytest.raises(RequestBuildError, match="Could not create request"):
                executor.execute("GET", url)
        assert recorder.requests == []

    @pytest.mark.parametrize("method", ["", "GE T", "GET\n", "PO(ST"])
    def test_invalid_method(self, recorder, method: str) -> None:
        with _executor(recorder) as executor:
            with pytest.raises(RequestBuildError):
                executor.execute(method, "http://x/y")
        assert recorder.requests == []

    def test_unencodable_header_value(self, recorder) -> None:
        with _executor(recorder) as executor:
            with pytest.raises(RequestBuildError, match="Could not create request"):
                executor.execute("GET", "http://x/y", "", {"X-Name": "caf\udce9"})
        assert recorder.requests == []

    def test_build_failure_exit_code(self, recorder) -> None:
        with _executor(recorder) as executor:
            with pytest.raises(RequestBuildError) as exc_info:
                executor.execute("GET", "nope")
        assert exc_info.value.exit_code == 2


# ---------------------------------------------------------------------------
# Transport and read failures
# ---------------------------------------------------------------------------


class TestTransportFailures:
    @pytest.mark.parametrize(
        "exc",
        [
            httpx.ConnectError("connection refused"),
            httpx.ConnectTimeout("timed out"),
            httpx.ReadTimeout("timed out"),
        ],
    )
    def test_send_failure_raises_connection_error(self, exc: Exception) -> None:
        calls: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            raise exc

        with _executor(handler) as executor:
            with pytest.raises(ConnectionError_, match="Could not send request") as exc_info:
                executor.execute("GET", "http://x/y")

        assert exc_info.value.exit_code == 6
        assert not isinstance(exc_info.value, ResponseReadError)
        assert len(calls) == 1

    def test_read_failure_raises_response_read_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, stream=_BrokenStream())

        with _executor(handler) as executor:
            with pytest.raises(ResponseReadError, match="Could not read response"):
                executor.execute("GET", "http://x/y")

    def test_redirect_loop_raises_connection_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(302, headers={"Location": "/loop"})

        with _executor(handler) as executor:
            with pytest.raises(ConnectionError_, match="Could not send request") as exc_info:
                executor.execute("GET", "http://x/loop")

        assert exc_info.value.exit_code == 6
        assert isinstance(exc_info.value.__cause__, httpx.TooManyRedirects)

    def test_corrupt_content_encoding_raises_response_read_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200,
                headers={"Content-Encoding": "gzip"},
                stream=httpx.ByteStream(b"notgzip"),
            )

        with _executor(handler) as executor:
            with pytest.raises(ResponseReadError, match="Could not read response") as exc_info:
                executor.execute("GET", "http://x/y")

        assert exc_info.value.exit_code == 6
        assert isinstance(exc_info.value.__cause__, httpx.DecodingError)

    def test_error_status_is_not_an_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(500, json={"error": "boom"})

        with _executor(handler) as executor:
            response = executor.execute("GET", "http://x/y")

        assert response.status_code == 500
        assert response.json() == {"error": "boom"}
