# src/planstore/projects/project_models.py

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from typing import Any

from ..core.users import User, opt_str, parse_dt, req_str


class ProjectStatus(StrEnum):
    PLANNING = "planning"
    IN_PROGRESS = "in_progress"
    ON_HOLD = "on_hold"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


INACTIVE_STATUSES = frozenset({ProjectStatus.COMPLETED.value, ProjectStatus.CANCELLED.value})


@dataclass(slots=True)
class Project:
    id: str
    name: str
    description: str
    client_name: str
    location: str
    start_date: datetime
    end_date: datetime
    budget: float
    status: str
    created_at: datetime
    updated_at: datetime
    members: list[User] = field(default_factory=list)
    thumbnail_url: str | None = None

    @property
    def is_active(self) -> bool:
        return self.status not in INACTIVE_STATUSES

    @property
    def duration_days(self) -> int:
        return (self.end_date - self.start_date).days

    def progress(self, now: datetime | None = None) -> float:
        """Elapsed share of the planned schedule, clamped to [0, 1]."""
        now = now or datetime.now(self.start_date.tzinfo)
        if now < self.start_date:
            return 0.0
        if now > self.end_date:
            return 1.0
        total = self.duration_days
        if total <= 0:
            return 1.0
        return min(1.0, (now - self.start_date).days / total)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "clientName": self.client_name,
            "location": self.location,
            "startDate": self.start_date.isoformat(),
            "endDate": self.end_date.isoformat(),
            "budget": self.budget,
            "status": self.status,
            "members": [m.to_dict() for m in self.members],
            "thumbnailUrl": self.thumbnail_url,
            "createdAt": self.created_at.isoformat(),
            "updatedAt": self.updated_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> Project:
        members = payload["members"]
        if not isinstance(members, list):
            raise TypeError("members must be a list")
        budget = payload["budget"]
        if isinstance(budget, bool) or not isinstance(budget, (int, float)):
            raise TypeError("budget must be a number")

        return cls(
            id=req_str(payload, "id"),
            name=req_str(payload, "name"),
            description=req_str(payload, "description"),
            client_name=req_str(payload, "clientName"),
            location=req_str(payload, "location"),
            start_date=parse_dt(payload["startDate"]),
            end_date=parse_dt(payload["endDate"]),
            budget=float(budget),
            status=req_str(payload, "status"),
            members=[User.from_dict(m) for m in members],
            thumbnail_url=opt_str(payload.get("thumbnailUrl")),
            created_at=parse_dt(payload["createdAt"]),
            updated_at=parse_dt(payload["updatedAt"]),
        )
