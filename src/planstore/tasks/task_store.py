# src/planstore/tasks/task_store.py

from __future__ import annotations

import logging

from ..core.ports import BackendOpener, TimerFactory
from ..storage.autosave import DEFAULT_QUIET_PERIOD
from ..storage.codec import JsonCodec
from ..storage.entity_store import EntityStore
from .task_models import Task

logger = logging.getLogger(__name__)

TASKS_COLLECTION = "tasks"

task_codec: JsonCodec[Task] = JsonCodec(
    to_payload=Task.to_dict,
    from_payload=Task.from_dict,
    identify=lambda t: t.id,
)


class TaskStore(EntityStore[Task]):
    """Task collection plus the by-project / by-status / tree queries the views use."""

    def __init__(
        self,
        opener: BackendOpener,
        *,
        name: str = TASKS_COLLECTION,
        quiet_period: float = DEFAULT_QUIET_PERIOD,
        timer_factory: TimerFactory | None = None,
        log: logging.Logger | None = None,
    ) -> None:
        super().__init__(
            opener,
            name,
            task_codec,
            quiet_period=quiet_period,
            timer_factory=timer_factory,
            log=log or logger,
        )

    def get_tasks_by_project(self, project_id: str) -> list[Task]:
        return [t for t in self.get_all() if t.project_id == project_id]

    def get_tasks_by_status(self, status: str) -> list[Task]:
        return [t for t in self.get_all() if t.status == status]

    def delete_tasks_by_project(self, project_id: str) -> int:
        ids = [t.id for t in self.get_tasks_by_project(project_id)]
        self.delete_many(ids)
        logger.debug("Deleted %d tasks of project %s", len(ids), project_id)
        return len(ids)

    def get_children(self, parent_id: str | None) -> list[Task]:
        return [t for t in self.get_all() if t.parent_id == parent_id]

    def get_visible_tasks(self) -> list[Task]:
        """
        Depth-first walk from the root tasks; children of a collapsed task
        (is_expanded=False) are hidden.
        """
        tasks = self.get_all()
        by_parent: dict[str | None, list[Task]] = {}
        for t in tasks:
            by_parent.setdefault(t.parent_id, []).append(t)

        out: list[Task] = []
        seen: set[str] = set()

        def walk(parent_id: str | None) -> None:
            for t in by_parent.get(parent_id, []):
                if t.id in seen:
                    continue
                seen.add(t.id)
                out.append(t)
                if t.is_expanded:
                    walk(t.id)

        walk(None)
        return out
