# src/planstore/core/state.py

from __future__ import annotations

from dataclasses import dataclass

from ..projects.project_store import ProjectStore
from ..tasks.task_store import TaskStore


@dataclass
class AppState:
    # Settings kept on the state so command handlers can read them.
    settings: object

    task_store: TaskStore
    project_store: ProjectStore

    def stores(self) -> dict[str, TaskStore | ProjectStore]:
        return {
            self.task_store.name: self.task_store,
            self.project_store.name: self.project_store,
        }
