# src/planstore/projects/project_store.py

from __future__ import annotations

import logging

from ..core.ports import BackendOpener, TimerFactory
from ..storage.autosave import DEFAULT_QUIET_PERIOD
from ..storage.codec import JsonCodec
from ..storage.entity_store import EntityStore
from .project_models import Project

logger = logging.getLogger(__name__)

PROJECTS_COLLECTION = "projects"

project_codec: JsonCodec[Project] = JsonCodec(
    to_payload=Project.to_dict,
    from_payload=Project.from_dict,
    identify=lambda p: p.id,
)


class ProjectStore(EntityStore[Project]):
    def __init__(
        self,
        opener: BackendOpener,
        *,
        name: str = PROJECTS_COLLECTION,
        quiet_period: float = DEFAULT_QUIET_PERIOD,
        timer_factory: TimerFactory | None = None,
        log: logging.Logger | None = None,
    ) -> None:
        super().__init__(
            opener,
            name,
            project_codec,
            quiet_period=quiet_period,
            timer_factory=timer_factory,
            log=log or logger,
        )

    def get_projects_by_status(self, status: str) -> list[Project]:
        return [p for p in self.get_all() if p.status == status]

    def get_active_projects(self) -> list[Project]:
        """Projects that are neither completed nor cancelled."""
        return [p for p in self.get_all() if p.is_active]
