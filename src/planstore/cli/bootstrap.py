# src/planstore/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures the local (gitignored) data directory exists,
- picks the backend, builds and initializes both stores,
- seeds a default project into an empty project store (policy, not storage).
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta

from ..config import BACKEND_MEMORY, get_settings
from ..core.ports import BackendOpener, TimerFactory
from ..core.state import AppState
from ..projects.project_models import Project, ProjectStatus
from ..projects.project_store import ProjectStore
from ..storage.backends import MemoryBackendOpener, SqliteBackendOpener
from ..tasks.task_store import TaskStore

logger = logging.getLogger(__name__)

DEFAULT_PROJECT_ID = "project-001"


def _build_opener(settings) -> BackendOpener:
    if settings.backend == BACKEND_MEMORY:
        return MemoryBackendOpener()
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    return SqliteBackendOpener(settings.data_dir)


def default_project(now: datetime | None = None) -> Project:
    now = (now or datetime.now()).replace(microsecond=0)
    return Project(
        id=DEFAULT_PROJECT_ID,
        name="New construction project",
        description="Starter project created on first run.",
        client_name="",
        location="",
        start_date=now,
        end_date=now + timedelta(days=180),
        budget=0.0,
        status=ProjectStatus.PLANNING.value,
        members=[],
        created_at=now,
        updated_at=now,
    )


def seed_default_project(store: ProjectStore) -> Project | None:
    """Save default_project() if the store is empty. Returns the seeded project."""
    if store.count() > 0:
        return None
    project = default_project()
    store.save(project)
    logger.info("Initial project seeded: %s", project.name)
    return project


def create_initial_state(
    *,
    settings=None,
    opener: BackendOpener | None = None,
    timer_factory: TimerFactory | None = None,
) -> AppState:
    """
    Create AppState with both stores opened.

    Keeping settings/opener injectable makes the app easier to test and avoids
    hidden global config reads. If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()
    if opener is None:
        opener = _build_opener(settings)

    task_store = TaskStore(
        opener,
        quiet_period=settings.autosave_seconds,
        timer_factory=timer_factory,
    )
    project_store = ProjectStore(
        opener,
        quiet_period=settings.autosave_seconds,
        timer_factory=timer_factory,
    )
    task_store.initialize()
    project_store.initialize()

    if settings.seed_default_project:
        seed_default_project(project_store)

    return AppState(settings=settings, task_store=task_store, project_store=project_store)


def shutdown_state(state: AppState) -> None:
    """Flush (if configured) and dispose every store. No exceptions escape."""
    flush = bool(getattr(state.settings, "flush_on_exit", True))
    for name, store in state.stores().items():
        if flush:
            try:
                if not store.force_flush():
                    logger.warning("Final flush failed for %s; recent writes may be lost", name)
            except Exception:
                logger.exception("Final flush crashed for %s", name)
        try:
            store.dispose()
        except Exception:
            logger.exception("Dispose failed for %s", name)
