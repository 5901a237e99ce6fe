"""Response rendering -- maps :class:`httpx.Response` to terminal output.

After :meth:`~apitester.client.executor.RequestExecutor.execute` returns,
:func:`render_response` prints the status line, every response header, and
the body. A body that is valid JSON is re-indented with two spaces; any other
body is written as the raw bytes received, and an empty body shows as
``<empty>``.

See Also:
    :mod:`apitester.output` -- the output manager that writes to the terminal.
"""

from __future__ import annotations

import json
from typing import Any, Optional

import httpx

from apitester.output import get_output

EMPTY_BODY = "<empty>"

_INDENT = "  "
_JSON_WHITESPACE = " \t\n\r"


def render_response(response: httpx.Response) -> None:
    """Print a read response using the global output system.

    Args:
        response: The :class:`httpx.Response` to display. Its body must
            already have been read.
    """
    output = get_output()

    output.print_data("\nResponse:")
    output.print_data(f"Status: {status_line(response)}")
    output.print_data("Headers:")
    for name, value in group_headers(response.headers):
        output.print_data(f"  {name}: {value}")

    output.print_data("\nBody:")
    content = response.content
    if not content:
        output.print_data(EMPTY_BODY)
        return

    pretty = format_json_body(content)
    if pretty is not None:
        output.print_json(pretty)
    else:
        output.print_bytes(content)


def status_line(response: httpx.Response) -> str:
    """Return ``"<code> <reason>"``, e.g. ``"200 OK"``."""
    reason = response.reason_phrase
    return f"{response.status_code} {reason}" if reason else str(response.status_code)


def group_headers(headers: httpx.Headers) -> list[tuple[str, str]]:
    """Collapse repeated headers into one entry per name.

    Names keep the casing of their first occurrence and values are joined
    with ``", "`` in the order they were received.
    """
    names: dict[str, str] = {}
    values: dict[str, list[str]] = {}
    for raw_name, raw_value in headers.raw:
        name = raw_name.decode(headers.encoding)
        key = name.lower()
        names.setdefault(key, name)
        values.setdefault(key, []).append(raw_value.decode(headers.encoding))
    return [(names[key], ", ".join(values[key])) for key in names]


def format_json_body(content: bytes) -> Optional[str]:
    """Re-indent *content* with two spaces if it is a valid JSON document.

    The document is validated with :func:`json.loads` but re-indented from
    its own tokens, so number literals, string escapes and duplicate keys
    come out exactly as the server sent them. ``NaN`` and ``Infinity`` are
    not JSON and make the body count as raw text.

    Returns:
        The indented document, or ``None`` if *content* is not valid
        UTF-8 JSON.
    """
    try:
        text = content.decode("utf-8")
        json.loads(text, parse_constant=_reject_constant)
    except ValueError:
        return None
    return _reindent(text)


def _reject_constant(name: str) -> Any:
    raise ValueError(f"{name} is not valid JSON")


def _reindent(text: str) -> str:
    """Lay out an already validated JSON document, one value per line."""
    out: list[str] = []
    depth = 0
    # An opening bracket waits for its next token so empty containers stay "{}" / "[]".
    pending_open = False
    i = 0
    while i < len(text):
        char = text[i]
        if char in _JSON_WHITESPACE:
            i += 1
            continue

        if pending_open:
            pending_open = False
            if char in "]}":
                depth -= 1
                out.append(char)
                i += 1
                continue
            out.append("\n" + _INDENT * depth)

        if char in "[{":
            out.append(char)
            depth += 1
            pending_open = True
        elif char in "]}":
            depth -= 1
            out.append("\n" + _INDENT * depth + char)
        elif char == ",":
            out.append(",\n" + _INDENT * depth)
        elif char == ":":
            out.append(": ")
        elif char == '"':
            end = _string_end(text, i)
            out.append(text[i:end])
            i = end
            continue
        else:
            out.append(char)
        i += 1
    return "".join(out)


def _string_end(text: str, start: int) -> int:
    """Index just past the closing quote of the string opening at *start*."""
    i = start + 1
    while text[i] != '"':
        i += 2 if text[i] == "\\" else 1
    return i + 1
