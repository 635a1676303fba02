# src/planstore/core/errors.py

"""
Store error taxonomy.

Caller errors (NotInitializedError, ImportParseError) propagate synchronously.
Data errors (DecodeError) and durability errors (FlushError) are absorbed by the
store and only show up in logs.
"""

from __future__ import annotations


class StoreError(Exception):
    """Base class for all planstore errors."""


class NotInitializedError(StoreError, RuntimeError):
    """An operation was called before initialize() (or after dispose())."""

    def __init__(self, store_name: str) -> None:
        super().__init__(f"Store '{store_name}' is not initialized")
        self.store_name = store_name


class DecodeError(StoreError, ValueError):
    """A stored payload could not be turned back into an entity."""

    def __init__(self, message: str, *, key: str | None = None) -> None:
        super().__init__(message)
        self.key = key


class ImportParseError(StoreError, ValueError):
    """Import text is not a JSON array of well-formed entity payloads."""

    def __init__(self, message: str, *, index: int | None = None) -> None:
        if index is not None:
            message = f"{message} (element {index})"
        super().__init__(message)
        self.index = index


class FlushError(StoreError):
    """The backend durability barrier failed."""
