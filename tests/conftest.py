"""Shared test fixtures for apitester.

Provides reusable fixtures for isolating the config directory, managing
output state, faking the network with :class:`httpx.MockTransport`, and
running CLI commands. These fixtures are automatically discovered by pytest
and available to all test modules without explicit imports.
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable

import httpx
import pytest

from apitester.client import RequestExecutor
from apitester.output import OutputFormat, OutputManager, reset_output, set_output
from apitester.store import RequestStore

Handler = Callable[[httpx.Request], httpx.Response]


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time. When CliRunner or capsys swaps those streams and the
    test finishes, the cached references become stale. Resetting forces a
    fresh manager to be created on next use.
    """
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point APITESTER_CONFIG_DIR at a temporary directory.

    Also redirects ``Path.home()`` so nothing can fall back to the real
    ``~/.apitester``, and disables colour so output is plain text.

    Returns:
        The config directory (not yet created).
    """
    config_dir = tmp_path / "config"
    monkeypatch.setenv("APITESTER_CONFIG_DIR", str(config_dir))
    monkeypatch.setattr(Path, "home", classmethod(lambda cls: tmp_path / "home"))
    monkeypatch.setenv("NO_COLOR", "1")
    return config_dir


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def plain_output() -> OutputManager:
    """Install a PLAIN-format OutputManager so capsys sees exact text."""
    output = OutputManager(format=OutputFormat.PLAIN, no_color=True)
    set_output(output)
    yield output
    reset_output()


# ---------------------------------------------------------------------------
# Store fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def store_path(tmp_path: Path) -> Path:
    return tmp_path / "store" / "tests.json"


@pytest.fixture
def store(store_path: Path, plain_output: OutputManager) -> RequestStore:
    """An empty RequestStore backed by a file under tmp_path."""
    return RequestStore(store_path)


# ---------------------------------------------------------------------------
# Network fakes
# ---------------------------------------------------------------------------


class RecordingHandler:
    """MockTransport handler that records every request it receives."""

    def __init__(self, response: httpx.Response | None = None) -> None:
        self.requests: list[httpx.Request] = []
        self._response = response

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self._response is not None:
            return self._response
        return httpx.Response(200, json={"ok": True})


@pytest.fixture
def recorder() -> RecordingHandler:
    return RecordingHandler()


@pytest.fixture
def make_factory() -> Callable[[Handler], Callable[[], RequestExecutor]]:
    """Return a helper that builds an executor factory sending through a handler."""

    def _make(handler: Handler) -> Callable[[], RequestExecutor]:
        return lambda: RequestExecutor(transport=httpx.MockTransport(handler))

    return _make


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()
