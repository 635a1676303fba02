# src/planstore/core/users.py

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from typing import Any


def parse_dt(raw: Any) -> datetime:
    if not isinstance(raw, str):
        raise TypeError(f"expected ISO-8601 string, got {type(raw).__name__}")
    return datetime.fromisoformat(raw)


def parse_opt_dt(raw: Any) -> datetime | None:
    return None if raw is None else parse_dt(raw)


def opt_str(raw: Any) -> str | None:
    if raw is None:
        return None
    if not isinstance(raw, str):
        raise TypeError(f"expected string, got {type(raw).__name__}")
    return raw


def req_str(payload: dict[str, Any], key: str) -> str:
    raw = payload[key]
    if not isinstance(raw, str):
        raise TypeError(f"{key}: expected string, got {type(raw).__name__}")
    return raw


def opt_bool(raw: Any, default: bool) -> bool:
    if raw is None:
        return default
    if not isinstance(raw, bool):
        raise TypeError(f"expected bool, got {type(raw).__name__}")
    return raw


def opt_int(raw: Any, default: int = 0) -> int:
    if raw is None:
        return default
    if isinstance(raw, bool) or not isinstance(raw, int):
        raise TypeError(f"expected int, got {type(raw).__name__}")
    return raw


def opt_num(raw: Any, default: float = 0.0) -> float:
    if raw is None:
        return default
    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        raise TypeError(f"expected number, got {type(raw).__name__}")
    return float(raw)


class UserRole(StrEnum):
    PROJECT_MANAGER = "project_manager"
    SITE_MANAGER = "site_manager"
    ENGINEER = "engineer"
    ARCHITECT = "architect"
    SUBCONTRACTOR = "subcontractor"
    INSPECTOR = "inspector"
    CLIENT = "client"


@dataclass(slots=True)
class User:
    """A project member / task assignee as embedded in task and project payloads."""

    id: str
    name: str
    email: str
    role: str
    department: str
    avatar_url: str | None = None
    is_online: bool = False
    last_seen: datetime | None = None
    phone: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "avatarUrl": self.avatar_url,
            "role": self.role,
            "department": self.department,
            "isOnline": self.is_online,
            "lastSeen": self.last_seen.isoformat() if self.last_seen else None,
            "phone": self.phone,
        }

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> User:
        return cls(
            id=req_str(payload, "id"),
            name=req_str(payload, "name"),
            email=req_str(payload, "email"),
            role=req_str(payload, "role"),
            department=req_str(payload, "department"),
            avatar_url=opt_str(payload.get("avatarUrl")),
            is_online=opt_bool(payload.get("isOnline"), False),
            last_seen=parse_opt_dt(payload.get("lastSeen")),
            phone=opt_str(payload.get("phone")),
        )

    @property
    def initials(self) -> str:
        parts = self.name.split(" ")
        if len(parts) >= 2 and parts[0] and parts[1]:
            return f"{parts[0][0]}{parts[1][0]}".upper()
        return self.name[:2].upper()
