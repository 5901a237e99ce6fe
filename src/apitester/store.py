"""JSON-backed store of named request definitions.

The store is a single JSON document (``<config_dir>/tests.json`` by default)
mapping names to :class:`~apitester.models.SavedRequest` objects. One
:class:`RequestStore` is constructed at CLI startup, loaded once, and
handed to each command through the Typer context.

Every mutation is followed by :meth:`RequestStore.persist`, which rewrites
the whole file. There is no locking: apitester runs one command per
process and assumes no concurrent writers.

Failures are reported to the user but never abort the command: a store that
cannot be read starts empty, and a store that cannot be written keeps its
in-memory state for the rest of the run.

See Also:
    :func:`~apitester.config.atomic_write` -- the temp-file-then-rename write.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from apitester.config import atomic_write
from apitester.exceptions import StoreError
from apitester.models import SavedRequest, SavedRequestMap
from apitester.output import debug, error


class RequestStore:
    """Read/write saved request definitions for the current user.

    Args:
        path: Location of the JSON document backing the store.

    Example::

        store = RequestStore(get_store_path())
        store.load()
        store.upsert("health", SavedRequest(url="https://api.example.com/health"))
        store.persist()
    """

    def __init__(self, path: Path) -> None:
        self._path = path
        self._requests: dict[str, SavedRequest] = {}

    @property
    def path(self) -> Path:
        """The filesystem path of the backing JSON file."""
        return self._path

    def __len__(self) -> int:
        return len(self._requests)

    def __contains__(self, name: object) -> bool:
        return name in self._requests

    def load(self) -> dict[str, SavedRequest]:
        """Load every saved request from disk, replacing the in-memory map.

        A missing file is not an error and yields an empty store. Any other
        read or parse failure is reported and the store is left empty for
        the remainder of the run.

        Returns:
            A copy of the loaded mapping (possibly empty).
        """
        self._requests = {}
        try:
            self._requests = self._read()
        except StoreError as exc:
            error(str(exc))
        debug(f"Loaded {len(self._requests)} saved test(s) from {self._path}")
        return dict(self._requests)

    def get(self, name: str) -> Optional[SavedRequest]:
        """Return the request saved under *name*, or ``None``."""
        return self._requests.get(name)

    def upsert(self, name: str, definition: SavedRequest) -> None:
        """Insert *definition* under *name*, silently replacing any existing entry."""
        self._requests[name] = definition

    def persist(self) -> bool:
        """Write the full mapping to disk with two-space indentation.

        Returns:
            ``True`` on success. ``False`` if the file could not be written,
            in which case the error has been reported and the in-memory
            state is unchanged.
        """
        try:
            self._write()
        except StoreError as exc:
            error(str(exc))
            return False
        debug(f"Wrote {len(self._requests)} saved test(s) to {self._path}")
        return True

    def list(self) -> list[str]:
        """Return every saved name, sorted for stable display."""
        return sorted(self._requests)

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    def _read(self) -> dict[str, SavedRequest]:
        if not self._path.exists():
            return {}
        try:
            text = self._path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise StoreError(f"Could not read saved tests: {exc}") from exc
        try:
            return SavedRequestMap.validate_json(text)
        except ValidationError as exc:
            raise StoreError(f"Could not parse saved tests: {_summarise(exc)}") from exc

    def _write(self) -> None:
        data = {
            name: request.model_dump(mode="json")
            for name, request in self._requests.items()
        }
        try:
            atomic_write(self._path, json.dumps(data, indent=2) + "\n")
        except OSError as exc:
            raise StoreError(f"Could not save tests: {exc}") from exc


def _summarise(exc: ValidationError) -> str:
    """One-line description of the first validation problem."""
    first = exc.errors()[0]
    location = ".".join(str(part) for part in first["loc"])
    if location:
        return f"{location}: {first['msg']}"
    return first["msg"]
