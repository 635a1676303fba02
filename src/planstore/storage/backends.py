# src/planstore/storage/backends.py

from __future__ import annotations

import contextlib
import logging
import re
import sqlite3
import threading
from collections.abc import Iterable, Mapping
from pathlib import Path

logger = logging.getLogger(__name__)

_NAME_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]{0,63}$")


def _check_name(name: str) -> str:
    if not _NAME_RE.match(name or ""):
        raise ValueError(f"invalid collection name: {name!r}")
    return name


class SqliteBackend:
    """
    One collection stored as a key/value table in its own SQLite file.

    Writes go into an open transaction and only become durable on flush()
    (COMMIT). close() rolls back whatever was not flushed.

    Thread-safety:
    - a single connection guarded by a lock, so the auto-save timer thread can
      flush while the owner keeps writing.
    """

    def __init__(self, db_path: str | Path, name: str) -> None:
        self.name = _check_name(name)
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.RLock()
        self._conn: sqlite3.Connection | None = self._connect()
        self._ensure_schema()
        logger.info("SqliteBackend ready db=%s keys=%s", self._db_path, self.length())

    @property
    def closed(self) -> bool:
        return self._conn is None

    # ---- low-level helpers ----

    def _connect(self) -> sqlite3.Connection:
        # isolation_level=None: transactions are driven explicitly (BEGIN/COMMIT).
        conn = sqlite3.connect(
            str(self._db_path),
            timeout=30.0,
            isolation_level=None,
            check_same_thread=False,
        )
        with contextlib.suppress(sqlite3.DatabaseError):
            conn.execute("PRAGMA journal_mode=WAL")
        return conn

    def _ensure_schema(self) -> None:
        with self._lock:
            self._require_conn().execute(
                """
                CREATE TABLE IF NOT EXISTS records (
                    key   TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                )
                """
            )

    def _require_conn(self) -> sqlite3.Connection:
        if self._conn is None:
            raise RuntimeError(f"SqliteBackend '{self.name}' is closed")
        return self._conn

    def _write_conn(self) -> sqlite3.Connection:
        conn = self._require_conn()
        if not conn.in_transaction:
            conn.execute("BEGIN")
        return conn

    # ---- reads ----

    def get(self, key: str) -> str | None:
        with self._lock:
            row = self._require_conn().execute(
                "SELECT value FROM records WHERE key = ?", (str(key),)
            ).fetchone()
        return None if row is None else str(row[0])

    def keys(self) -> list[str]:
        with self._lock:
            rows = self._require_conn().execute("SELECT key FROM records ORDER BY rowid").fetchall()
        return [str(r[0]) for r in rows]

    def contains(self, key: str) -> bool:
        with self._lock:
            row = self._require_conn().execute(
                "SELECT 1 FROM records WHERE key = ?", (str(key),)
            ).fetchone()
        return row is not None

    def length(self) -> int:
        with self._lock:
            (n,) = self._require_conn().execute("SELECT COUNT(*) FROM records").fetchone()
        return int(n)

    # ---- writes ----

    def put(self, key: str, value: str) -> None:
        self.put_all({key: value})

    def put_all(self, entries: Mapping[str, str]) -> None:
        if not entries:
            return
        with self._lock:
            self._write_conn().executemany(
                """
                INSERT INTO records(key, value) VALUES (?, ?)
                ON CONFLICT(key) DO UPDATE SET value = excluded.value
                """,
                [(str(k), str(v)) for k, v in entries.items()],
            )

    def delete(self, key: str) -> None:
        self.delete_all([key])

    def delete_all(self, keys: Iterable[str]) -> None:
        ks = [str(k) for k in keys]
        if not ks:
            return
        with self._lock:
            self._write_conn().executemany("DELETE FROM records WHERE key = ?", [(k,) for k in ks])

    def clear(self) -> None:
        with self._lock:
            self._write_conn().execute("DELETE FROM records")

    # ---- durability ----

    def flush(self) -> None:
        with self._lock:
            conn = self._require_conn()
            if conn.in_transaction:
                conn.execute("COMMIT")

    def close(self) -> None:
        with self._lock:
            conn, self._conn = self._conn, None
            if conn is None:
                return
            try:
                if conn.in_transaction:
                    logger.warning("SqliteBackend %s closed with unflushed writes; rolling back", self.name)
                    conn.execute("ROLLBACK")
            finally:
                conn.close()


class SqliteBackendOpener:
    """
    Opens one SQLite file per collection under `data_dir` (<name>.sqlite3).

    open() is idempotent: the same live handle is returned until it is closed.
    """

    def __init__(self, data_dir: str | Path) -> None:
        self._data_dir = Path(data_dir)
        self._open: dict[str, SqliteBackend] = {}
        self._lock = threading.Lock()

    def path_for(self, name: str) -> Path:
        return self._data_dir / f"{_check_name(name)}.sqlite3"

    def open(self, name: str) -> SqliteBackend:
        with self._lock:
            handle = self._open.get(name)
            if handle is None or handle.closed:
                handle = SqliteBackend(self.path_for(name), name)
                self._open[name] = handle
            return handle


class MemoryBackend:
    """
    Dict-backed collection. Nothing survives the process.

    flush_count records how many durability barriers were requested, which is
    what the tests and the `memory` backend setting care about.
    """

    def __init__(self, name: str = "memory", data: dict[str, str] | None = None) -> None:
        self.name = name
        self._data: dict[str, str] = {} if data is None else data
        self._closed = False
        self.flush_count = 0

    @property
    def closed(self) -> bool:
        return self._closed

    def _check_open(self) -> None:
        if self._closed:
            raise RuntimeError(f"MemoryBackend '{self.name}' is closed")

    def get(self, key: str) -> str | None:
        self._check_open()
        return self._data.get(str(key))

    def put(self, key: str, value: str) -> None:
        self._check_open()
        self._data[str(key)] = str(value)

    def put_all(self, entries: Mapping[str, str]) -> None:
        self._check_open()
        for k, v in entries.items():
            self._data[str(k)] = str(v)

    def delete(self, key: str) -> None:
        self._check_open()
        self._data.pop(str(key), None)

    def delete_all(self, keys: Iterable[str]) -> None:
        self._check_open()
        for k in keys:
            self._data.pop(str(k), None)

    def keys(self) -> list[str]:
        self._check_open()
        return list(self._data)

    def contains(self, key: str) -> bool:
        self._check_open()
        return str(key) in self._data

    def clear(self) -> None:
        self._check_open()
        self._data.clear()

    def length(self) -> int:
        self._check_open()
        return len(self._data)

    def flush(self) -> None:
        self._check_open()
        self.flush_count += 1

    def close(self) -> None:
        self._closed = True


class MemoryBackendOpener:
    """Keeps each collection's dict alive across close/reopen within the process."""

    def __init__(self) -> None:
        self.opened: dict[str, MemoryBackend] = {}
        self._data: dict[str, dict[str, str]] = {}

    def open(self, name: str) -> MemoryBackend:
        handle = self.opened.get(name)
        if handle is None or handle.closed:
            handle = MemoryBackend(name, self._data.setdefault(name, {}))
            self.opened[name] = handle
        return handle
