"""Terminal output for apitester.

apitester is an interactive terminal tool, so everything the user asked for
goes to **stdout**: rendered responses, confirmations such as
``Saved test 'foo'`` and user-facing error messages. Only diagnostics that
are not part of a command's result go to **stderr**: warnings and the
``--verbose`` debug trace.

* **TTY detection** -- Rich formatting (syntax-highlighted JSON, coloured
  messages) when stdout is an interactive terminal, plain text when piped.
* **Colour control** -- respects ``NO_COLOR``, ``TERM=dumb``, and the
  ``--no-color`` CLI flag.

The module exposes two layers:

1. :class:`OutputManager` -- a stateful object holding format preferences,
   Rich consoles, and quiet/verbose flags. Created once in
   :func:`~apitester.app.main_callback` and installed via :func:`set_output`.
2. Module-level convenience functions (:func:`info`, :func:`error`,
   :func:`debug`, etc.) that delegate to the global ``OutputManager``
   instance so callers do not need to pass the manager around.
"""

from __future__ import annotations

import os
import sys
from enum import Enum
from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.syntax import Syntax


class OutputFormat(str, Enum):
    """Enumeration of supported output formats.

    ``AUTO`` resolves to ``RICH`` when stdout is an interactive TTY and colour
    is not disabled, or to ``PLAIN`` otherwise.
    """

    AUTO = "auto"
    PLAIN = "plain"
    RICH = "rich"


class OutputManager:
    """Central manager for all CLI output.

    Maintains two Rich :class:`~rich.console.Console` instances -- one for
    stdout (results and messages) and one for stderr (warnings and debug
    trace) -- and routes every output call to the correct stream.

    Args:
        format: Desired output format. ``AUTO`` resolves based on TTY
            detection.
        no_color: Disable all colour and Rich markup.
        quiet: Suppress informational and success messages.
        verbose: Enable debug-level messages on stderr.
    """

    def __init__(
        self,
        format: OutputFormat = OutputFormat.AUTO,
        no_color: bool = False,
        quiet: bool = False,
        verbose: bool = False,
    ) -> None:
        self._no_color = no_color or _should_disable_color()
        self._quiet = quiet
        self._verbose = verbose

        if format == OutputFormat.AUTO:
            self._format = (
                OutputFormat.RICH if _is_tty() and not self._no_color else OutputFormat.PLAIN
            )
        else:
            self._format = format

        self._stdout = Console(
            file=sys.stdout,
            no_color=self._no_color,
            force_terminal=(self._format == OutputFormat.RICH),
        )
        self._stderr = Console(
            file=sys.stderr,
            no_color=self._no_color,
            stderr=True,
        )

    @property
    def format(self) -> OutputFormat:
        """The resolved output format."""
        return self._format

    @property
    def is_quiet(self) -> bool:
        """Whether quiet mode is enabled."""
        return self._quiet

    @property
    def is_verbose(self) -> bool:
        """Whether verbose mode is enabled."""
        return self._verbose

    # ------------------------------------------------------------------ #
    # Data output (stdout)
    # ------------------------------------------------------------------ #

    def print_data(self, text: str) -> None:
        """Print raw text to stdout exactly as given (no markup interpretation).

        Args:
            text: The string to write. A trailing newline is appended.
        """
        if self._format == OutputFormat.RICH:
            self._stdout.print(text, markup=False, highlight=False, soft_wrap=True)
        else:
            print(text, file=sys.stdout, flush=True)

    def print_bytes(self, data: bytes) -> None:
        """Write *data* to stdout unchanged, followed by a newline.

        Goes through the binary buffer under ``sys.stdout`` so bodies that
        are not valid UTF-8 reach the terminal byte for byte. Streams
        without a buffer get the data decoded with replacement characters.

        Args:
            data: Raw bytes to write.
        """
        stream = sys.stdout
        buffer = getattr(stream, "buffer", None)
        if buffer is None:
            print(data.decode("utf-8", errors="replace"), file=stream, flush=True)
            return
        stream.flush()
        buffer.write(data + b"\n")
        buffer.flush()

    def print_json(self, text: str) -> None:
        """Print an already-indented JSON document to stdout.

        In Rich mode the document is syntax highlighted; otherwise it is
        written verbatim.

        Args:
            text: Serialised JSON.
        """
        if self._format == OutputFormat.RICH:
            syntax = Syntax(text, "json", theme="monokai", word_wrap=True)
            self._stdout.print(syntax)
        else:
            print(text, file=sys.stdout, flush=True)

    # ------------------------------------------------------------------ #
    # Messages (stdout)
    # ------------------------------------------------------------------ #

    def info(self, message: str) -> None:
        """Print an informational message. Suppressed by ``--quiet``.

        Args:
            message: The message text.
        """
        if not self._quiet:
            if self._format == OutputFormat.PLAIN:
                print(message, file=sys.stdout, flush=True)
            else:
                self._stdout.print(escape(message))

    def success(self, message: str) -> None:
        """Print a green success message. Suppressed by ``--quiet``.

        Args:
            message: The message text.
        """
        if not self._quiet:
            if self._format == OutputFormat.PLAIN:
                print(message, file=sys.stdout, flush=True)
            else:
                self._stdout.print(f"[green]{escape(message)}[/green]")

    def error(self, message: str) -> None:
        """Print a bold-red error. Never suppressed.

        Args:
            message: The error text (prefixed with ``Error:`` on output).
        """
        if self._format == OutputFormat.PLAIN:
            print(f"Error: {message}", file=sys.stdout, flush=True)
        else:
            self._stdout.print(f"[bold red]Error:[/bold red] {escape(message)}")

    # ------------------------------------------------------------------ #
    # Diagnostics (stderr)
    # ------------------------------------------------------------------ #

    def warning(self, message: str) -> None:
        """Print a yellow warning to stderr. NOT suppressed by ``--quiet``.

        Args:
            message: The warning text.
        """
        if self._no_color:
            print(f"Warning: {message}", file=sys.stderr, flush=True)
        else:
            self._stderr.print(f"[yellow]Warning:[/yellow] {escape(message)}")

    def debug(self, message: str) -> None:
        """Print a debug message to stderr. Only shown when ``--verbose`` is active.

        Args:
            message: The debug text (prefixed with ``[debug]`` on output).
        """
        if self._verbose:
            if self._no_color:
                print(f"[debug] {message}", file=sys.stderr, flush=True)
            else:
                self._stderr.print(f"[dim]\\[debug] {escape(message)}[/dim]")


# ------------------------------------------------------------------ #
# Module-level helpers
# ------------------------------------------------------------------ #


def _is_tty() -> bool:
    """Check if stdout is a TTY."""
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


def _should_disable_color() -> bool:
    """Check if color should be disabled per clig.dev.

    Returns True when NO_COLOR env var is set (any value) or TERM=dumb.
    """
    if os.environ.get("NO_COLOR") is not None:
        return True
    if os.environ.get("TERM") == "dumb":
        return True
    return False


# ------------------------------------------------------------------ #
# Global output instance (set during app startup)
# ------------------------------------------------------------------ #

_output: Optional[OutputManager] = None


def get_output() -> OutputManager:
    """Return the global :class:`OutputManager` instance.

    If no instance has been installed via :func:`set_output`, a default
    ``OutputManager`` with ``AUTO`` format is created lazily.
    """
    global _output
    if _output is None:
        _output = OutputManager()
    return _output


def set_output(output: OutputManager) -> None:
    """Install *output* as the global :class:`OutputManager` instance."""
    global _output
    _output = output


def reset_output() -> None:
    """Reset the global :class:`OutputManager` to ``None``.

    Primarily useful in test suites to ensure a clean state between tests.
    """
    global _output
    _output = None


# ------------------------------------------------------------------ #
# Convenience functions that use the global instance
# ------------------------------------------------------------------ #


def print_data(text: str) -> None:
    """Print raw data to stdout via the global OutputManager."""
    get_output().print_data(text)


def print_bytes(data: bytes) -> None:
    """Write raw bytes to stdout via the global OutputManager."""
    get_output().print_bytes(data)


def print_json(text: str) -> None:
    """Print a JSON document to stdout via the global OutputManager."""
    get_output().print_json(text)


def info(message: str) -> None:
    """Print info message via the global OutputManager."""
    get_output().info(message)


def success(message: str) -> None:
    """Print success message via the global OutputManager."""
    get_output().success(message)


def error(message: str) -> None:
    """Print error via the global OutputManager."""
    get_output().error(message)


def warning(message: str) -> None:
    """Print warning to stderr via the global OutputManager."""
    get_output().warning(message)


def debug(message: str) -> None:
    """Print debug message to stderr via the global OutputManager."""
    get_output().debug(message)
