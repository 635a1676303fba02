# tests/test_backends.py

from __future__ import annotations

from pathlib import Path

import pytest

from planstore.storage.backends import MemoryBackendOpener, SqliteBackend, SqliteBackendOpener
from planstore.tasks.task_store import TaskStore

from .factories import make_task
from .fakes import ManualTimerFactory


def test_sqlite_basic_kv_contract(tmp_path: Path) -> None:
    kv = SqliteBackend(tmp_path / "tasks.sqlite3", "tasks")

    kv.put("a", "1")
    kv.put_all({"b": "2", "c": "3"})
    kv.put("a", "10")

    assert kv.get("a") == "10"
    assert kv.get("zzz") is None
    assert kv.keys() == ["a", "b", "c"]
    assert kv.length() == 3
    assert kv.contains("b")

    kv.delete("b")
    kv.delete("missing")
    kv.delete_all(["c", "nope"])
    assert kv.keys() == ["a"]

    kv.clear()
    assert kv.length() == 0
    kv.close()


def test_sqlite_writes_survive_reopen_only_after_flush(tmp_path: Path) -> None:
    path = tmp_path / "tasks.sqlite3"

    kv = SqliteBackend(path, "tasks")
    kv.put("kept", "yes")
    kv.flush()
    kv.put("lost", "no")
    kv.close()

    reopened = SqliteBackend(path, "tasks")
    assert reopened.keys() == ["kept"]
    reopened.close()


def test_sqlite_closed_handle_refuses_use(tmp_path: Path) -> None:
    kv = SqliteBackend(tmp_path / "x.sqlite3", "x")
    kv.close()
    kv.close()
    assert kv.closed
    with pytest.raises(RuntimeError):
        kv.get("a")


def test_sqlite_rejects_bad_collection_names(tmp_path: Path) -> None:
    with pytest.raises(ValueError):
        SqliteBackendOpener(tmp_path).open("../escape")


def test_sqlite_opener_is_idempotent(tmp_path: Path) -> None:
    opener = SqliteBackendOpener(tmp_path)
    first = opener.open("tasks")
    assert opener.open("tasks") is first
    assert opener.path_for("tasks") == tmp_path / "tasks.sqlite3"

    first.close()
    second = opener.open("tasks")
    assert second is not first
    second.close()


def test_task_store_on_sqlite_persists_after_autosave(tmp_path: Path) -> None:
    clock = ManualTimerFactory()
    store = TaskStore(SqliteBackendOpener(tmp_path), timer_factory=clock)
    store.initialize()
    store.save_many([make_task("t1"), make_task("t2")])
    clock.advance(3.0)
    store.save(make_task("t3"))
    store.dispose()

    again = TaskStore(SqliteBackendOpener(tmp_path), timer_factory=clock)
    again.initialize()
    assert sorted(t.id for t in again.get_all()) == ["t1", "t2"]
    assert again.get_by_id("t1") == make_task("t1")
    again.dispose()


def test_memory_opener_keeps_data_across_reopen() -> None:
    opener = MemoryBackendOpener()
    kv = opener.open("projects")
    kv.put("p1", "{}")
    kv.close()

    with pytest.raises(RuntimeError):
        kv.get("p1")
    assert opener.open("projects").get("p1") == "{}"
