# src/planstore/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the stores.

The stores depend on Protocols instead of concrete implementations.
This keeps the key-value engine and the timer mechanism swappable and makes
testing easier.
"""

from collections.abc import Callable, Iterable, Mapping
from typing import Protocol, TypeVar

T = TypeVar("T")


class Backend(Protocol):
    """
    Handle to one named key -> text collection.

    Writes become crash-safe only after flush().
    """

    def get(self, key: str) -> str | None: ...
    def put(self, key: str, value: str) -> None: ...
    def put_all(self, entries: Mapping[str, str]) -> None: ...
    def delete(self, key: str) -> None: ...
    def delete_all(self, keys: Iterable[str]) -> None: ...
    def keys(self) -> list[str]: ...
    def contains(self, key: str) -> bool: ...
    def clear(self) -> None: ...
    def length(self) -> int: ...
    def flush(self) -> None: ...
    def close(self) -> None: ...


class BackendOpener(Protocol):
    """Opens (idempotently) a Backend handle scoped to a collection name."""
    def open(self, name: str) -> Backend: ...


class Codec(Protocol[T]):
    def encode(self, entity: T) -> str: ...
    def decode(self, text: str) -> T: ...
    def to_payload(self, entity: T) -> dict: ...
    def from_payload(self, payload: object) -> T: ...
    def identify(self, entity: T) -> str: ...


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


TimerFactory = Callable[[float, Callable[[], None]], TimerHandle]
# (delay_seconds, callback) -> cancellable handle. The callback runs once on
# whatever context the host provides (thread, event loop, test clock).
