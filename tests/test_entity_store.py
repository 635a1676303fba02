# tests/test_entity_store.py

from __future__ import annotations

import json

import pytest

from planstore.core.errors import ImportParseError, NotInitializedError
from planstore.storage.backends import MemoryBackend, MemoryBackendOpener
from planstore.tasks.task_store import TaskStore

from .factories import make_task
from .fakes import FlakyBackend, ManualTimerFactory, SingleBackendOpener


def test_operations_before_initialize_raise() -> None:
    store = TaskStore(MemoryBackendOpener(), timer_factory=ManualTimerFactory())

    with pytest.raises(NotInitializedError):
        store.get_all()
    with pytest.raises(NotInitializedError):
        store.save(make_task())
    with pytest.raises(NotInitializedError):
        store.count()
    with pytest.raises(NotInitializedError):
        store.force_flush()
    with pytest.raises(NotInitializedError):
        store.import_from_json("[]")


def test_second_initialize_is_a_noop() -> None:
    opener = SingleBackendOpener(MemoryBackend("tasks"))
    store = TaskStore(opener, timer_factory=ManualTimerFactory())
    store.initialize()
    store.initialize()
    assert opener.open_calls == 1


def test_save_then_get_round_trips(task_store: TaskStore) -> None:
    task = make_task("t1", description="pour concrete", depends_on=["t0"], notes="dry weather")
    task_store.save(task)

    assert task_store.get_by_id("t1") == task
    assert task_store.get_by_id("missing") is None


def test_save_twice_keeps_one_record(task_store: TaskStore) -> None:
    task = make_task("t1")
    task_store.save(task)
    task_store.save(task)
    assert task_store.count() == 1


def test_save_overwrites_previous_value(task_store: TaskStore) -> None:
    task_store.save(make_task("t1", progress=0.1))
    task_store.save(make_task("t1", progress=0.8))
    got = task_store.get_by_id("t1")
    assert got is not None
    assert got.progress == pytest.approx(0.8)


def test_corrupted_record_is_skipped_but_counted(task_store: TaskStore, backend: MemoryBackend) -> None:
    task_store.save_many([make_task("t1"), make_task("t2")])
    backend.put("t2", "{not json")
    backend.put("t3", json.dumps({"id": "t3"}))  # valid JSON, missing required fields

    all_ids = [t.id for t in task_store.get_all()]
    assert all_ids == ["t1"]
    assert task_store.count() == 3
    assert task_store.get_by_id("t2") is None
    assert task_store.get_by_id("t3") is None
    assert task_store.exists_by_id("t2") is True


def test_overflowing_and_deeply_nested_records_are_skipped(
    task_store: TaskStore, backend: MemoryBackend
) -> None:
    task_store.save_many([make_task("t1"), make_task("t2"), make_task("t3")])
    huge = make_task("t2").to_dict()
    huge["progress"] = 10**400
    backend.put("t2", json.dumps(huge))
    backend.put("t3", "[" * 100000 + "]" * 100000)

    assert [t.id for t in task_store.get_all()] == ["t1"]
    assert task_store.get_by_id("t2") is None
    assert task_store.get_by_id("t3") is None
    assert len(json.loads(task_store.export_to_json())) == 1


def test_get_all_follows_backend_key_order(task_store: TaskStore) -> None:
    task_store.save_many([make_task("b"), make_task("a"), make_task("c")])
    assert [t.id for t in task_store.get_all()] == ["b", "a", "c"]


def test_delete_scenario(task_store: TaskStore) -> None:
    task_store.save_many([make_task("t1"), make_task("t2")])
    task_store.delete_by_id("t1")

    assert task_store.count() == 1
    assert task_store.exists_by_id("t1") is False
    assert task_store.get_by_id("t1") is None


def test_delete_missing_id_is_noop(task_store: TaskStore, clock: ManualTimerFactory) -> None:
    task_store.delete_by_id("nope")
    task_store.delete_many(["nope", "nada"])
    assert task_store.count() == 0


def test_delete_many_and_clear(task_store: TaskStore) -> None:
    task_store.save_many([make_task("t1"), make_task("t2"), make_task("t3")])
    task_store.delete_many(["t1", "t3"])
    assert [t.id for t in task_store.get_all()] == ["t2"]

    task_store.clear()
    assert task_store.count() == 0
    assert task_store.is_dirty


def test_export_import_scenario(task_store: TaskStore, clock: ManualTimerFactory) -> None:
    t1, t2 = make_task("t1"), make_task("t2", project_id="p2")
    task_store.save_many([t1, t2])
    assert task_store.count() == 2

    exported = task_store.export_to_json()
    payloads = json.loads(exported)
    assert isinstance(payloads, list)
    assert len(payloads) == 2
    assert {p["id"] for p in payloads} == {"t1", "t2"}

    fresh = TaskStore(MemoryBackendOpener(), timer_factory=clock)
    fresh.initialize()
    assert fresh.import_from_json(exported, clear_first=True) == 2
    assert fresh.count() == 2
    assert fresh.get_by_id("t1") == t1
    assert fresh.get_by_id("t2") == t2


def test_export_omits_corrupted_records(task_store: TaskStore, backend: MemoryBackend) -> None:
    task_store.save(make_task("t1"))
    backend.put("bad", "garbage")
    assert [p["id"] for p in json.loads(task_store.export_to_json())] == ["t1"]


@pytest.mark.parametrize(
    "text",
    [
        "not json at all",
        '{"id": "t9"}',
        "[1, 2, 3]",
    ],
)
def test_import_parse_failure_leaves_store_unchanged(task_store: TaskStore, text: str) -> None:
    task_store.save(make_task("t1"))
    before = task_store.export_to_json()

    with pytest.raises(ImportParseError):
        task_store.import_from_json(text, clear_first=True)

    assert task_store.export_to_json() == before
    assert task_store.count() == 1


def test_import_rejects_whole_batch_on_one_bad_element(task_store: TaskStore) -> None:
    good = make_task("t2").to_dict()
    bad = dict(make_task("t3").to_dict())
    del bad["startDate"]

    with pytest.raises(ImportParseError) as excinfo:
        task_store.import_from_json(json.dumps([good, bad]))

    assert excinfo.value.index == 1
    assert task_store.count() == 0


@pytest.mark.parametrize(
    "field, value",
    [("level", float("inf")), ("progress", 10**400), ("isMilestone", "false")],
)
def test_import_rejects_out_of_range_or_mistyped_fields(
    task_store: TaskStore, field: str, value: object
) -> None:
    task_store.save(make_task("t1"))
    bad = make_task("t2").to_dict()
    bad[field] = value

    with pytest.raises(ImportParseError) as excinfo:
        task_store.import_from_json(json.dumps([bad]), clear_first=True)

    assert excinfo.value.index == 0
    assert [t.id for t in task_store.get_all()] == ["t1"]


def test_import_without_clear_upserts(task_store: TaskStore) -> None:
    task_store.save_many([make_task("t1", name="old"), make_task("t2")])
    payload = json.dumps([make_task("t1", name="new").to_dict(), make_task("t3").to_dict()])

    task_store.import_from_json(payload)

    assert task_store.count() == 3
    got = task_store.get_by_id("t1")
    assert got is not None and got.name == "new"


def test_dispose_closes_backend_and_blocks_further_use(
    task_store: TaskStore, backend: MemoryBackend, clock: ManualTimerFactory
) -> None:
    task_store.save(make_task("t1"))
    task_store.dispose()

    assert backend.closed
    assert clock.pending == []
    assert backend.flush_count == 0
    with pytest.raises(NotInitializedError):
        task_store.get_all()


def test_flush_failure_is_absorbed_and_retried(clock: ManualTimerFactory) -> None:
    backend = FlakyBackend("tasks")
    store = TaskStore(SingleBackendOpener(backend), timer_factory=clock)
    store.initialize()

    backend.fail_flush = True
    store.save(make_task("t1"))  # must not raise
    clock.advance(3.0)
    assert store.is_dirty
    assert backend.flush_count == 0

    assert store.force_flush() is False
    assert store.is_dirty

    backend.fail_flush = False
    assert store.force_save() is True
    assert not store.is_dirty
    assert backend.flush_count == 1
