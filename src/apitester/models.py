"""Pydantic models for persisted request definitions.

A :class:`SavedRequest` is the only entity apitester writes to disk. The
saved-test file is a JSON object mapping names to serialised
``SavedRequest`` instances; :data:`SavedRequestMap` validates that whole
document in one pass.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, TypeAdapter, ValidationInfo, field_validator


class SavedRequest(BaseModel):
    """A named HTTP request definition that can be replayed with ``apitester run``.

    The method is normalised to upper case on construction so that
    ``-X post`` and ``-X POST`` produce the same stored entry. ``null``
    values for ``headers`` or ``body`` in a hand-edited file are read as
    empty.

    Example::

        SavedRequest(
            url="https://api.example.com/users",
            method="post",
            headers={"Authorization": "Bearer abc"},
            body='{"name": "alice"}',
        )
    """

    url: str = Field(min_length=1, description="Absolute request URL")
    method: str = Field(default="GET", description="HTTP method, upper case")
    headers: dict[str, str] = Field(
        default_factory=dict, description="Request headers as sent"
    )
    body: str = Field(default="", description="Raw request payload")

    @field_validator("method")
    @classmethod
    def upper_method(cls, value: str) -> str:
        return value.upper()

    @field_validator("headers", "body", mode="before")
    @classmethod
    def null_as_empty(cls, value: Any, info: ValidationInfo) -> Any:
        if value is None:
            return {} if info.field_name == "headers" else ""
        return value


SavedRequestMap = TypeAdapter(dict[str, SavedRequest])
"""Validator for the full saved-test document (``{name: SavedRequest}``)."""
