# src/planstore/storage/entity_store.py

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from typing import Generic, TypeVar

from ..core.errors import DecodeError, ImportParseError, NotInitializedError
from ..core.ports import Backend, BackendOpener, Codec, TimerFactory
from .autosave import DEFAULT_QUIET_PERIOD, AutoSaveScheduler

logger = logging.getLogger(__name__)

T = TypeVar("T")


class EntityStore(Generic[T]):
    """
    Keyed JSON-document store for one entity type.

    - every mutation writes to the backend immediately;
    - only the durability barrier (backend.flush) is deferred, debounced by an
      AutoSaveScheduler so a burst of writes costs one flush;
    - undecodable records are logged and skipped on read, never raised;
    - import parses and decodes everything before the first write.

    Not safe for concurrent mutation from several callers; serialize externally.
    """

    def __init__(
        self,
        opener: BackendOpener,
        name: str,
        codec: Codec[T],
        *,
        quiet_period: float = DEFAULT_QUIET_PERIOD,
        timer_factory: TimerFactory | None = None,
        log: logging.Logger | None = None,
    ) -> None:
        self._opener = opener
        self._name = name
        self._codec = codec
        self._log = log or logger
        self._backend: Backend | None = None
        self._autosave = AutoSaveScheduler(
            self._flush_backend,
            quiet_period=quiet_period,
            timer_factory=timer_factory,
            name=name,
            log=self._log,
        )

    @property
    def name(self) -> str:
        return self._name

    @property
    def is_initialized(self) -> bool:
        return self._backend is not None

    @property
    def is_dirty(self) -> bool:
        return self._autosave.dirty

    # ---- lifecycle ----

    def initialize(self) -> None:
        if self._backend is not None:
            self._log.warning("Store %s already initialized; ignoring", self._name)
            return
        self._backend = self._opener.open(self._name)
        self._log.info("Store %s initialized (%d records)", self._name, self._backend.length())

    def dispose(self) -> None:
        """
        Cancel the pending auto-save and release the backend.

        Does NOT flush: writes made during the last quiet period are lost unless
        the caller ran force_flush() first.
        """
        self._autosave.cancel()
        backend, self._backend = self._backend, None
        if backend is not None:
            backend.close()
            self._log.info("Store %s disposed", self._name)

    # ---- low-level helpers ----

    def _require_backend(self) -> Backend:
        if self._backend is None:
            raise NotInitializedError(self._name)
        return self._backend

    def _flush_backend(self) -> None:
        self._require_backend().flush()

    def _decode_record(self, key: str, text: str) -> T | None:
        try:
            return self._codec.decode(text)
        except DecodeError as e:
            self._log.warning("Skipping corrupted %s record %s: %s", self._name, key, e)
            return None

    # ---- reads ----

    def get_all(self) -> list[T]:
        backend = self._require_backend()
        out: list[T] = []
        for key in backend.keys():
            text = backend.get(key)
            if text is None:
                continue
            entity = self._decode_record(key, text)
            if entity is not None:
                out.append(entity)
        return out

    def get_by_id(self, entity_id: str) -> T | None:
        text = self._require_backend().get(entity_id)
        if text is None:
            return None
        return self._decode_record(entity_id, text)

    def exists_by_id(self, entity_id: str) -> bool:
        return self._require_backend().contains(entity_id)

    def count(self) -> int:
        return self._require_backend().length()

    # ---- writes ----

    def save(self, entity: T) -> None:
        backend = self._require_backend()
        backend.put(self._codec.identify(entity), self._codec.encode(entity))
        self._autosave.mark_dirty()

    def save_many(self, entities: Iterable[T]) -> None:
        backend = self._require_backend()
        entries = {self._codec.identify(e): self._codec.encode(e) for e in entities}
        backend.put_all(entries)
        self._autosave.mark_dirty()

    def delete_by_id(self, entity_id: str) -> None:
        self._require_backend().delete(entity_id)
        self._autosave.mark_dirty()

    def delete_many(self, entity_ids: Iterable[str]) -> None:
        self._require_backend().delete_all(list(entity_ids))
        self._autosave.mark_dirty()

    def clear(self) -> None:
        self._require_backend().clear()
        self._autosave.mark_dirty()

    # ---- durability ----

    def force_flush(self) -> bool:
        """
        Flush now and cancel the pending auto-save, even with nothing pending.

        Returns False if the backend flush failed (already logged); the store
        stays dirty so a later call retries.
        """
        self._require_backend()
        return self._autosave.force_flush()

    force_save = force_flush

    # ---- export / import ----

    def export_to_json(self) -> str:
        payloads = [self._codec.to_payload(e) for e in self.get_all()]
        return json.dumps(payloads, ensure_ascii=False)

    def import_from_json(self, text: str, *, clear_first: bool = False) -> int:
        """
        Import a JSON array of payloads.

        All elements are decoded before anything is written; on any failure
        ImportParseError is raised and the store is untouched.
        Returns the number of imported entities.
        """
        self._require_backend()
        try:
            raw = json.loads(text)
        except (TypeError, ValueError) as e:
            raise ImportParseError(f"import text is not valid JSON: {e}") from e
        if not isinstance(raw, list):
            raise ImportParseError(f"import text must be a JSON array, got {type(raw).__name__}")

        entities: list[T] = []
        for i, item in enumerate(raw):
            try:
                entities.append(self._codec.from_payload(item))
            except DecodeError as e:
                raise ImportParseError(str(e), index=i) from e

        if clear_first:
            self.clear()
        self.save_many(entities)
        self._log.info(
            "Imported %d %s records (clear_first=%s)", len(entities), self._name, clear_first
        )
        return len(entities)
