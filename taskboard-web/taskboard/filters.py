"""Search / status / priority / project filters for the list pages.

Filters are conjunctive and an unset filter does not constrain. Visibility
is applied first, so a filter can never surface something the policy hides.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from datetime import date
from typing import Any, Dict, Iterable, List, Optional

from .board import is_overdue
from .models import Project, Task
from .policy import AccessPolicy
from .relations import extract_id


def _text_matches(term: str, *values: Optional[str]) -> bool:
    needle = (term or "").strip().lower()
    if not needle:
        return True
    return any(needle in (value or "").lower() for value in values)


def _params(obj: Any, names: Dict[str, str]) -> Dict[str, str]:
    params: Dict[str, str] = {}
    for f in fields(obj):
        value = getattr(obj, f.name)
        if value is None or value == "":
            continue
        if isinstance(value, bool):
            value = "true" if value else "false"
        params[names.get(f.name, f.name)] = str(value)
    return params


_PARAM_NAMES = {
    "manager_id": "managerId",
    "project_id": "projectId",
    "assigned_to": "assignedTo",
    "created_by": "createdBy",
}


@dataclass
class ProjectFilters:
    search: str = ""
    status: str = ""
    priority: str = ""
    manager_id: str = ""
    page: Optional[int] = None
    limit: Optional[int] = None
    sort: Optional[str] = None
    order: Optional[str] = None

    def to_params(self) -> Dict[str, str]:
        """Query parameters for ``GET /projects``."""
        return _params(self, _PARAM_NAMES)

    @property
    def active_count(self) -> int:
        return sum(1 for value in (self.status, self.priority, self.manager_id) if value)

    def matches(self, project: Project) -> bool:
        if not _text_matches(self.search, project.title, project.description):
            return False
        if self.status and project.status != self.status:
            return False
        if self.priority and project.priority != self.priority:
            return False
        if self.manager_id and extract_id(project.manager) != self.manager_id:
            return False
        return True


@dataclass
class TaskFilters:
    search: str = ""
    status: str = ""
    priority: str = ""
    project_id: str = ""
    assigned_to: str = ""
    created_by: str = ""
    overdue: Optional[bool] = None
    page: Optional[int] = None
    limit: Optional[int] = None
    sort: Optional[str] = None
    order: Optional[str] = None

    def to_params(self) -> Dict[str, str]:
        """Query parameters for ``GET /tasks``."""
        return _params(self, _PARAM_NAMES)

    @property
    def active_count(self) -> int:
        return sum(1 for value in (self.status, self.priority, self.project_id) if value)

    def matches(self, task: Task, today: Optional[date] = None) -> bool:
        if not _text_matches(self.search, task.title, task.description):
            return False
        if self.status and task.status != self.status:
            return False
        if self.priority and task.priority != self.priority:
            return False
        if self.project_id and extract_id(task.project) != self.project_id:
            return False
        if self.assigned_to and extract_id(task.assigned_to) != self.assigned_to:
            return False
        if self.created_by and extract_id(task.created_by) != self.created_by:
            return False
        if self.overdue is not None and is_overdue(task.due_date, task.status, today=today) != self.overdue:
            return False
        return True


def visible_projects(projects: Iterable[Project], policy: AccessPolicy) -> List[Project]:
    return [p for p in projects if policy.can_view_project(p)]


def visible_tasks(tasks: Iterable[Task], policy: AccessPolicy) -> List[Task]:
    return [t for t in tasks if policy.can_view_task(t)]


def filter_projects(
    projects: Iterable[Project],
    policy: AccessPolicy,
    filters: Optional[ProjectFilters] = None,
) -> List[Project]:
    filters = filters or ProjectFilters()
    return [p for p in visible_projects(projects, policy) if filters.matches(p)]


def filter_tasks(
    tasks: Iterable[Task],
    policy: AccessPolicy,
    filters: Optional[TaskFilters] = None,
    today: Optional[date] = None,
) -> List[Task]:
    filters = filters or TaskFilters()
    return [t for t in visible_tasks(tasks, policy) if filters.matches(t, today=today)]
