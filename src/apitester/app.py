"""Typer application and CLI entry point for apitester.

This module wires together the top-level Typer application and its four
commands:

* ``send`` -- issue one HTTP request and print the response.
* ``save NAME`` -- store a request definition under a name.
* ``run NAME`` -- replay a saved request.
* ``list`` -- show every saved name.

The root callback builds the :class:`~apitester.output.OutputManager` from
the global flags, loads the :class:`~apitester.store.RequestStore` once, and
passes it to the commands through ``ctx.obj`` together with the factory used
to create a :class:`~apitester.client.RequestExecutor`.

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``. It installs signal handlers and invokes the Typer app.
Unhandled exceptions are written to a crash log under the config directory.
"""

from __future__ import annotations

import signal
import sys
import traceback
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Iterator, Optional

import typer

from apitester import __version__
from apitester.client import RequestExecutor, render_response
from apitester.exceptions import ApitesterError, InvalidUsageError, NotFoundError
from apitester.exit_codes import EXIT_GENERIC_FAILURE, EXIT_INTERRUPTED
from apitester.models import SavedRequest
from apitester.output import error, info, print_data, success, warning
from apitester.store import RequestStore


app = typer.Typer(
    name="apitester",
    help="A lightweight CLI alternative to Postman.",
    no_args_is_help=True,
    add_completion=True,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"apitester {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    no_color: bool = typer.Option(
        False, "--no-color", help="Disable color output."
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug output."
    ),
) -> None:
    """Root callback executed before every sub-command.

    Initialises the global :class:`~apitester.output.OutputManager` from
    CLI flags, then loads the saved-request store and stores it in the
    Typer context as ``ctx.obj["store"]``. A store or executor factory
    already present in ``ctx.obj`` is left untouched.

    Args:
        ctx: Typer invocation context.
        version: If ``True``, print the version string and exit.
        no_color: Disable all colour and Rich markup.
        quiet: Suppress informational output.
        verbose: Enable debug-level diagnostic output on stderr.
    """
    from apitester.config import get_store_path
    from apitester.output import OutputManager, set_output

    set_output(OutputManager(no_color=no_color, quiet=quiet, verbose=verbose))

    ctx.ensure_object(dict)
    if "store" not in ctx.obj:
        store = RequestStore(get_store_path())
        store.load()
        ctx.obj["store"] = store
    ctx.obj.setdefault("executor_factory", RequestExecutor)


# ------------------------------------------------------------------ #
# Commands
# ------------------------------------------------------------------ #


@app.command("send")
def send_command(
    ctx: typer.Context,
    method: str = typer.Option("GET", "--method", "-X", help="HTTP method."),
    url: str = typer.Option("", "--url", "-u", help="Request URL (required)."),
    data: str = typer.Option("", "--data", "-d", help="Request body."),
    headers: Optional[list[str]] = typer.Option(
        None, "--headers", "-H", help="Request header as key=value (repeatable)."
    ),
) -> None:
    """Send an HTTP request.

    Example::

        apitester send -u https://httpbin.org/get
        apitester send -X POST -u https://httpbin.org/post -d '{"a": 1}' -H X-Trace=1
    """
    with _reported_errors():
        _require_url(url)
        _execute(ctx, method, url, data, parse_headers(headers))


@app.command("save")
def save_command(
    ctx: typer.Context,
    name: str = typer.Argument(help="Name to save the request under."),
    method: str = typer.Option("GET", "--method", "-X", help="HTTP method."),
    url: str = typer.Option("", "--url", "-u", help="Request URL (required)."),
    data: str = typer.Option("", "--data", "-d", help="Request body."),
    headers: Optional[list[str]] = typer.Option(
        None, "--headers", "-H", help="Request header as key=value (repeatable)."
    ),
) -> None:
    """Save a request for later use.

    An existing request with the same name is replaced without asking.

    Example::

        apitester save create-user -X post -u https://api.example.com/users -d '{"name": "alice"}'
    """
    with _reported_errors():
        _require_url(url)
        definition = SavedRequest(
            url=url,
            method=method,
            headers=parse_headers(headers),
            body=data,
        )

    store = _store(ctx)
    store.upsert(name, definition)
    if store.persist():
        success(f"Saved test '{name}'")


@app.command("run")
def run_command(
    ctx: typer.Context,
    name: str = typer.Argument(help="Name of the saved request."),
) -> None:
    """Run a saved request.

    Example::

        apitester run create-user
    """
    with _reported_errors():
        saved = _store(ctx).get(name)
        if saved is None:
            raise NotFoundError(f"No saved test named '{name}'")

        info(f"Running saved test '{name}'...")
        _execute(ctx, saved.method, saved.url, saved.body, saved.headers)


@app.command("list")
def list_command(ctx: typer.Context) -> None:
    """List all saved requests."""
    names = _store(ctx).list()
    if not names:
        print_data("No saved tests")
        return

    print_data("Saved tests:")
    for name in names:
        print_data(f"  - {name}")


# ------------------------------------------------------------------ #
# Helpers
# ------------------------------------------------------------------ #


def parse_headers(values: Optional[list[str]]) -> dict[str, str]:
    """Turn repeated ``key=value`` strings into a header mapping.

    Values are split on the first ``=`` so header values may contain ``=``.
    A repeated key keeps its last value and a warning is printed.

    Raises:
        InvalidUsageError: If an entry has no ``=`` or an empty key.
    """
    headers: dict[str, str] = {}
    for item in values or []:
        key, sep, value = item.partition("=")
        key = key.strip()
        if not sep or not key:
            raise InvalidUsageError(f"Invalid header '{item}', expected key=value")
        if key in headers:
            warning(f"Header '{key}' given more than once, using the last value")
        headers[key] = value
    return headers


def _require_url(url: str) -> None:
    if not url:
        raise InvalidUsageError("URL is required")


def _store(ctx: typer.Context) -> RequestStore:
    return ctx.obj["store"]


def _execute(
    ctx: typer.Context,
    method: str,
    url: str,
    body: str,
    headers: dict[str, str],
) -> None:
    """Send one request through a fresh executor and render the response."""
    with ctx.obj["executor_factory"]() as executor:
        response = executor.execute(method, url, body, headers)
    render_response(response)


@contextmanager
def _reported_errors() -> Iterator[None]:
    """Print an :class:`ApitesterError` and exit with its code."""
    try:
        yield
    except ApitesterError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None


# ------------------------------------------------------------------ #
# Entry point
# ------------------------------------------------------------------ #


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(EXIT_INTERRUPTED)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write a crash traceback to disk and return the log file path.

    Args:
        exc: The unhandled exception to log.

    Returns:
        Absolute path to the written crash log file.
    """
    from apitester.config import get_logs_dir

    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = get_logs_dir() / f"crash-{timestamp}.log"
    log_path.write_text(
        "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    )
    return str(log_path)


def main() -> None:
    """CLI entry point invoked by the ``apitester`` console script.

    Unhandled :class:`~apitester.exceptions.ApitesterError` instances
    cause a clean exit with the error's ``exit_code``. All other exceptions
    produce a crash log and a generic failure exit.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
    """
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(EXIT_INTERRUPTED)
    except Exception as exc:
        if isinstance(exc, ApitesterError):
            error(str(exc))
            sys.exit(exc.exit_code)
        else:
            log_path = _write_crash_log(exc)
            error(f"Unexpected error. Debug log: {log_path}")
            sys.exit(EXIT_GENERIC_FAILURE)
