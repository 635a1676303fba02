# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from planstore.projects.project_store import ProjectStore
from planstore.storage.backends import MemoryBackend
from planstore.tasks.task_store import TaskStore

from .fakes import ManualTimerFactory, SingleBackendOpener


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with bootstrap and commands.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="planstore-test",
        log_level="DEBUG",
        data_dir=tmp_path / "data",
        backend="memory",
        autosave_seconds=3.0,
        seed_default_project=False,
        flush_on_exit=True,
    )


@pytest.fixture()
def clock() -> ManualTimerFactory:
    return ManualTimerFactory()


@pytest.fixture()
def backend() -> MemoryBackend:
    return MemoryBackend("tasks")


@pytest.fixture()
def task_store(backend: MemoryBackend, clock: ManualTimerFactory) -> TaskStore:
    store = TaskStore(SingleBackendOpener(backend), timer_factory=clock)
    store.initialize()
    return store


@pytest.fixture()
def project_store(clock: ManualTimerFactory) -> ProjectStore:
    store = ProjectStore(SingleBackendOpener(MemoryBackend("projects")), timer_factory=clock)
    store.initialize()
    return store
