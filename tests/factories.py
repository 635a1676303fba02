# tests/factories.py

from __future__ import annotations

from datetime import datetime

from planstore.core.users import User, UserRole
from planstore.projects.project_models import Project, ProjectStatus
from planstore.tasks.task_models import Task, TaskCategory, TaskStatus

T0 = datetime(2024, 4, 1, 8, 0, 0)


def make_user(user_id: str = "u1", name: str = "Taro Yamada") -> User:
    return User(
        id=user_id,
        name=name,
        email=f"{user_id}@example.com",
        role=UserRole.SITE_MANAGER.value,
        department="Construction",
    )


def make_task(task_id: str = "t1", project_id: str = "p1", **overrides) -> Task:
    fields = dict(
        id=task_id,
        project_id=project_id,
        name=f"Task {task_id}",
        start_date=T0,
        end_date=datetime(2024, 4, 10, 17, 0, 0),
        status=TaskStatus.NOT_STARTED.value,
        category=TaskCategory.FOUNDATION.value,
        created_at=T0,
        updated_at=T0,
        assignees=[make_user()],
        depends_on=[],
    )
    fields.update(overrides)
    return Task(**fields)


def make_project(project_id: str = "p1", **overrides) -> Project:
    fields = dict(
        id=project_id,
        name=f"Project {project_id}",
        description="Office building",
        client_name="ACME",
        location="Tokyo",
        start_date=T0,
        end_date=datetime(2024, 12, 31),
        budget=1_500_000.0,
        status=ProjectStatus.IN_PROGRESS.value,
        members=[make_user()],
        created_at=T0,
        updated_at=T0,
    )
    fields.update(overrides)
    return Project(**fields)
