"""Synchronous request executor built on :mod:`httpx`.

:class:`RequestExecutor` turns a ``(method, url, body, headers)`` tuple into
exactly one outbound HTTP request and returns the fully read response for
rendering by :func:`~apitester.client.response.render_response`.

There is no retry, no cache, and no timeout override: the
transport's defaults apply, and every failure is surfaced to the caller as a
typed :class:`~apitester.exceptions.ApitesterError`:

- :class:`~apitester.exceptions.RequestBuildError` -- bad method, URL or header.
- :class:`~apitester.exceptions.ConnectionError_` -- DNS, refused
  connection, TLS, timeout, redirect loop.
- :class:`~apitester.exceptions.ResponseReadError` -- the connection dropped
  or the content encoding was corrupt while the body was being read.
"""

from __future__ import annotations

import re
from typing import Mapping, Optional

import httpx

from apitester.exceptions import ConnectionError_, RequestBuildError, ResponseReadError
from apitester.output import debug

DEFAULT_CONTENT_TYPE = "application/json"

# RFC 7230 token characters.
_METHOD_RE = re.compile(r"[!#$%&'*+\-.^_`|~0-9A-Za-z]+")


class RequestExecutor:
    """Send single HTTP requests and return the read responses.

    Must be used as a context manager so that the underlying
    :class:`httpx.Client` is opened and closed around the call.

    Args:
        transport: Optional :class:`httpx.BaseTransport` to send through.
            Tests pass an :class:`httpx.MockTransport`; in normal use the
            default network transport is used.

    Example::

        with RequestExecutor() as executor:
            response = executor.execute("GET", "https://httpbin.org/get")
    """

    def __init__(self, transport: Optional[httpx.BaseTransport] = None) -> None:
        self._transport = transport
        self._client: Optional[httpx.Client] = None

    # ------------------------------------------------------------------ #
    # Context manager
    # ------------------------------------------------------------------ #

    def __enter__(self) -> RequestExecutor:
        self._client = httpx.Client(transport=self._transport, follow_redirects=True)
        return self

    def __exit__(self, *args: object) -> None:
        if self._client:
            self._client.close()
            self._client = None

    # ------------------------------------------------------------------ #
    # Public API
    # ------------------------------------------------------------------ #

    def execute(
        self,
        method: str,
        url: str,
        body: str = "",
        headers: Optional[Mapping[str, str]] = None,
    ) -> httpx.Response:
        """Build, send, and fully read one HTTP request.

        ``Content-Type: application/json`` is added when *body* is non-empty
        and *headers* carries no ``Content-Type`` of its own. The body is
        never inspected to infer a type.

        Args:
            method: HTTP verb, e.g. ``GET``.
            url: Absolute ``http``/``https`` URL.
            body: Raw payload; attached only when non-empty.
            headers: Header name to value, applied as given.

        Returns:
            The :class:`httpx.Response` with its body already read.

        Raises:
            RequestBuildError: If the method or URL is malformed.
            ConnectionError_: If the request could not be sent.
            ResponseReadError: If the body cannot be read or decoded.
        """
        assert self._client is not None, "Executor not initialised -- use as context manager"

        request = self.build_request(method, url, body, headers)
        debug(f"Sending {request.method} {request.url}")

        try:
            response = self._client.send(request, stream=True)
        except httpx.RequestError as exc:
            raise ConnectionError_(f"Could not send request: {_describe(exc)}") from exc

        try:
            response.read()
        except (httpx.RequestError, httpx.StreamError) as exc:
            raise ResponseReadError(f"Could not read response: {_describe(exc)}") from exc
        finally:
            response.close()

        debug(f"Received {response.status_code} ({len(response.content)} bytes)")
        return response

    def build_request(
        self,
        method: str,
        url: str,
        body: str = "",
        headers: Optional[Mapping[str, str]] = None,
    ) -> httpx.Request:
        """Construct the :class:`httpx.Request` that :meth:`execute` would send.

        Raises:
            RequestBuildError: If the method, URL or headers cannot be encoded.
        """
        assert self._client is not None, "Executor not initialised -- use as context manager"

        if not _METHOD_RE.fullmatch(method):
            raise RequestBuildError(f"Could not create request: invalid method {method!r}")

        try:
            # Non-ASCII header values go out as UTF-8 bytes.
            request_headers = httpx.Headers(dict(headers or {}), encoding="utf-8")
            if body and "content-type" not in request_headers:
                request_headers["Content-Type"] = DEFAULT_CONTENT_TYPE

            request = self._client.build_request(
                method,
                url,
                headers=request_headers,
                content=body.encode("utf-8") if body else None,
            )
        except (httpx.InvalidURL, ValueError, TypeError) as exc:
            raise RequestBuildError(f"Could not create request: {exc}") from exc

        if request.url.scheme not in ("http", "https") or not request.url.host:
            raise RequestBuildError(
                f"Could not create request: {url!r} is not an absolute http(s) URL"
            )
        return request


def _describe(exc: Exception) -> str:
    """Exception message, falling back to the class name when it is empty."""
    return str(exc) or type(exc).__name__
