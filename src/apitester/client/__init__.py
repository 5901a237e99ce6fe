"""HTTP client module for apitester.

Provides the request executor that wraps :mod:`httpx` and the renderer that
prints its responses.

Classes:
    :class:`RequestExecutor` -- blocking executor backed by :class:`httpx.Client`.

Functions:
    :func:`render_response` -- print status, headers, and body of a response.

Example::

    from apitester.client import RequestExecutor, render_response

    with RequestExecutor() as executor:
        render_response(executor.execute("GET", "https://httpbin.org/get"))
"""

from apitester.client.executor import RequestExecutor
from apitester.client.response import render_response

__all__ = ["RequestExecutor", "render_response"]
