"""Configuration directory resolution and atomic file writes.

apitester keeps all of its state under a single per-user directory:

* ``~/.apitester/`` by default, derived from the user's home directory.
* ``$APITESTER_CONFIG_DIR`` when that environment variable is set, which
  is mostly useful for tests and for keeping separate collections of saved
  requests side by side.

The directory holds ``tests.json`` (the saved-request store, see
:mod:`apitester.store`) and a ``logs/`` subdirectory for crash logs.

File writes go through :func:`atomic_write` so that a crash mid-write never
leaves a truncated store behind.
"""

from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Optional

_APP_NAME = "apitester"
_STORE_FILENAME = "tests.json"
_CONFIG_DIR_ENV = "APITESTER_CONFIG_DIR"


def get_config_dir() -> Path:
    """Return the configuration directory, creating it if necessary.

    Returns:
        ``$APITESTER_CONFIG_DIR`` if set, otherwise ``~/.apitester``
        (guaranteed to exist).
    """
    env_value = os.environ.get(_CONFIG_DIR_ENV, "")
    if env_value:
        path = Path(env_value).expanduser()
    else:
        path = Path.home() / f".{_APP_NAME}"
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_store_path() -> Path:
    """Path to the saved-request store file (``<config_dir>/tests.json``)."""
    return get_config_dir() / _STORE_FILENAME


def get_logs_dir() -> Path:
    """Return the crash-log directory (``<config_dir>/logs/``), creating it if necessary."""
    path = get_config_dir() / "logs"
    path.mkdir(parents=True, exist_ok=True)
    return path


def atomic_write(path: Path, data: str) -> None:
    """Write data to file atomically using temp file + rename.

    The temporary file is created in the same directory as *path* so that
    ``os.replace`` is guaranteed to be an atomic rename on POSIX systems.
    On success the temp file is renamed over *path*; on any failure the temp
    file is cleaned up and the original exception propagates.

    Raises:
        OSError: If the directory is not writable or the rename fails.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    fd = None
    tmp_path: Optional[str] = None
    try:
        fd = tempfile.NamedTemporaryFile(
            mode="w",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
            encoding="utf-8",
        )
        tmp_path = fd.name
        fd.write(data)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        fd = None  # prevent double-close in finally
        os.replace(tmp_path, path)
    except BaseException:
        # Clean up the temp file on any error (including KeyboardInterrupt).
        if fd is not None:
            fd.close()
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
        raise
