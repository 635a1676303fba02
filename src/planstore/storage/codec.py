# src/planstore/storage/codec.py

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from typing import Any, Generic, TypeVar

from ..core.errors import DecodeError

logger = logging.getLogger(__name__)

T = TypeVar("T")

Payload = dict[str, Any]


class JsonCodec(Generic[T]):
    """
    Entity <-> JSON text.

    The entity shape is owned by the model module; the codec only knows how to
    get a payload dict out of an entity, build an entity back from one, and
    read the identifier used as the storage key.
    """

    def __init__(
        self,
        *,
        to_payload: Callable[[T], Payload],
        from_payload: Callable[[Payload], T],
        identify: Callable[[T], str],
    ) -> None:
        self._to_payload = to_payload
        self._from_payload = from_payload
        self._identify = identify

    def identify(self, entity: T) -> str:
        return str(self._identify(entity))

    def to_payload(self, entity: T) -> Payload:
        return self._to_payload(entity)

    def from_payload(self, payload: object) -> T:
        if not isinstance(payload, dict):
            raise DecodeError(f"expected a JSON object, got {type(payload).__name__}")
        try:
            return self._from_payload(payload)
        except DecodeError:
            raise
        except (KeyError, TypeError, ValueError, AttributeError, OverflowError) as e:
            raise DecodeError(f"malformed payload: {e!r}") from e

    def encode(self, entity: T) -> str:
        return json.dumps(self.to_payload(entity), ensure_ascii=False)

    def decode(self, text: str) -> T:
        try:
            payload = json.loads(text)
        except (TypeError, ValueError, RecursionError) as e:
            raise DecodeError(f"invalid JSON: {e}") from e
        return self.from_payload(payload)
