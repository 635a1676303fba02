# src/planstore/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from typing import Any

from ..core.users import User, opt_bool, opt_int, opt_num, opt_str, parse_dt, req_str


class TaskStatus(StrEnum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    DELAYED = "delayed"
    ON_HOLD = "on_hold"


class TaskPriority(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class TaskCategory(StrEnum):
    FOUNDATION = "foundation"
    STRUCTURE = "structure"
    ELECTRICAL = "electrical"
    PLUMBING = "plumbing"
    FINISHING = "finishing"
    INSPECTION = "inspection"
    GENERAL = "general"


@dataclass(slots=True)
class Task:
    """
    A schedule item of a construction project.

    status/priority/category are kept as plain strings so that values written
    by newer clients survive a round trip; the StrEnums above list the known ones.
    """

    id: str
    project_id: str
    name: str
    start_date: datetime
    end_date: datetime
    status: str
    category: str
    created_at: datetime
    updated_at: datetime

    description: str | None = None
    progress: float = 0.0
    priority: str = TaskPriority.MEDIUM.value
    parent_id: str | None = None
    depends_on: list[str] = field(default_factory=list)
    assignees: list[User] = field(default_factory=list)
    is_expanded: bool = True
    is_milestone: bool = False
    level: int = 0
    notes: str | None = None
    phase_id: str | None = None
    contractor_name: str | None = None

    @property
    def duration_days(self) -> int:
        return (self.end_date - self.start_date).days + 1

    def is_overdue(self, now: datetime | None = None) -> bool:
        now = now or datetime.now(self.end_date.tzinfo)
        return self.status != TaskStatus.COMPLETED and now > self.end_date

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "projectId": self.project_id,
            "name": self.name,
            "description": self.description,
            "startDate": self.start_date.isoformat(),
            "endDate": self.end_date.isoformat(),
            "progress": self.progress,
            "status": self.status,
            "priority": self.priority,
            "category": self.category,
            "parentId": self.parent_id,
            "dependsOn": list(self.depends_on),
            "assignees": [a.to_dict() for a in self.assignees],
            "isExpanded": self.is_expanded,
            "isMilestone": self.is_milestone,
            "level": self.level,
            "notes": self.notes,
            "createdAt": self.created_at.isoformat(),
            "updatedAt": self.updated_at.isoformat(),
            "phaseId": self.phase_id,
            "contractorName": self.contractor_name,
        }

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> Task:
        depends_on = payload.get("dependsOn") or []
        assignees = payload.get("assignees") or []
        if not isinstance(depends_on, list) or not isinstance(assignees, list):
            raise TypeError("dependsOn/assignees must be lists")

        return cls(
            id=req_str(payload, "id"),
            project_id=req_str(payload, "projectId"),
            name=req_str(payload, "name"),
            description=opt_str(payload.get("description")),
            start_date=parse_dt(payload["startDate"]),
            end_date=parse_dt(payload["endDate"]),
            progress=opt_num(payload.get("progress")),
            status=req_str(payload, "status"),
            priority=opt_str(payload.get("priority")) or TaskPriority.MEDIUM.value,
            category=req_str(payload, "category"),
            parent_id=opt_str(payload.get("parentId")),
            depends_on=[str(d) for d in depends_on],
            assignees=[User.from_dict(a) for a in assignees],
            is_expanded=opt_bool(payload.get("isExpanded"), True),
            is_milestone=opt_bool(payload.get("isMilestone"), False),
            level=opt_int(payload.get("level")),
            notes=opt_str(payload.get("notes")),
            created_at=parse_dt(payload["createdAt"]),
            updated_at=parse_dt(payload["updatedAt"]),
            phase_id=opt_str(payload.get("phaseId")),
            contractor_name=opt_str(payload.get("contractorName")),
        )
