"""Role based visibility rules for projects and tasks.

These predicates only decide which affordances the UI shows. Every
mutating call is authorized again by the API.

Rules:
- elevated roles (``admin`` by default) may do everything;
- ``team_member`` and ``manager`` see and edit projects they belong to, and
  tasks assigned to them (edit: or created by them) or belonging to a loaded
  project they are a member of;
- only elevated roles create projects or delete anything;
- a missing user, or an unknown role, gets nothing.

Task rules join against the currently loaded projects. A task whose project
is not loaded is not visible through membership.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Iterable, Mapping, Optional

from .models import Project, Task, User, UserRole
from .relations import extract_id, index_by_id

DEFAULT_ELEVATED_ROLES: FrozenSet[str] = frozenset({UserRole.ADMIN.value})
MEMBER_ROLES: FrozenSet[str] = frozenset({UserRole.TEAM_MEMBER.value, UserRole.MANAGER.value})


def _as_user(user: Any) -> Optional[User]:
    if user is None or isinstance(user, User):
        return user
    if isinstance(user, Mapping):
        return User.from_dict(user)
    return None


def _as_project(project: Any) -> Optional[Project]:
    if project is None or isinstance(project, Project):
        return project
    if isinstance(project, Mapping):
        return Project.from_dict(project)
    return None


def _as_task(task: Any) -> Optional[Task]:
    if task is None or isinstance(task, Task):
        return task
    if isinstance(task, Mapping):
        return Task.from_dict(task)
    return None


def _project_index(projects: Any) -> Dict[str, Project]:
    if isinstance(projects, Mapping):
        return {k: p for k, p in ((k, _as_project(v)) for k, v in projects.items()) if p is not None}
    if not isinstance(projects, (list, tuple)):
        return {}
    return index_by_id(p for p in (_as_project(raw) for raw in projects) if p is not None)


def _is_elevated(user: User, elevated_roles: Iterable[str]) -> bool:
    return user.role in elevated_roles


def _is_member_role(user: User, elevated_roles: Iterable[str]) -> bool:
    return user.role in MEMBER_ROLES and not _is_elevated(user, elevated_roles)


def is_project_member(user: Any, project: Any) -> bool:
    user = _as_user(user)
    project = _as_project(project)
    if user is None or project is None or not user.id:
        return False
    return user.id in project.team_member_ids


def can_view_project(user: Any, project: Any, *, elevated_roles: Iterable[str] = DEFAULT_ELEVATED_ROLES) -> bool:
    user = _as_user(user)
    if user is None:
        return False
    if _is_elevated(user, elevated_roles):
        return True
    if _is_member_role(user, elevated_roles):
        return is_project_member(user, project)
    return False


def can_edit_project(user: Any, project: Any, *, elevated_roles: Iterable[str] = DEFAULT_ELEVATED_ROLES) -> bool:
    # membership implies edit rights
    return can_view_project(user, project, elevated_roles=elevated_roles)


def can_delete_project(user: Any, project: Any = None, *, elevated_roles: Iterable[str] = DEFAULT_ELEVATED_ROLES) -> bool:
    user = _as_user(user)
    return user is not None and _is_elevated(user, elevated_roles)


def can_create_project(user: Any, *, elevated_roles: Iterable[str] = DEFAULT_ELEVATED_ROLES) -> bool:
    user = _as_user(user)
    return user is not None and _is_elevated(user, elevated_roles)


def _member_of_task_project(user: User, task: Task, projects: Any) -> bool:
    project_id = extract_id(task.project)
    if project_id is None:
        return False
    project = _project_index(projects).get(project_id)
    if project is None:
        return False
    return is_project_member(user, project)


def can_view_task(
    user: Any,
    task: Any,
    projects: Any = (),
    *,
    elevated_roles: Iterable[str] = DEFAULT_ELEVATED_ROLES,
) -> bool:
    user = _as_user(user)
    task = _as_task(task)
    if user is None or task is None:
        return False
    if _is_elevated(user, elevated_roles):
        return True
    if not _is_member_role(user, elevated_roles) or not user.id:
        return False
    if extract_id(task.assigned_to) == user.id:
        return True
    return _member_of_task_project(user, task, projects)


def can_edit_task(
    user: Any,
    task: Any,
    projects: Any = (),
    *,
    elevated_roles: Iterable[str] = DEFAULT_ELEVATED_ROLES,
) -> bool:
    user = _as_user(user)
    task = _as_task(task)
    if user is None or task is None:
        return False
    if _is_elevated(user, elevated_roles):
        return True
    if not _is_member_role(user, elevated_roles) or not user.id:
        return False
    if user.id in (extract_id(task.assigned_to), extract_id(task.created_by)):
        return True
    return _member_of_task_project(user, task, projects)


def can_delete_task(user: Any, task: Any = None, *, elevated_roles: Iterable[str] = DEFAULT_ELEVATED_ROLES) -> bool:
    user = _as_user(user)
    return user is not None and _is_elevated(user, elevated_roles)


def can_create_task(user: Any, project: Any = None, *, elevated_roles: Iterable[str] = DEFAULT_ELEVATED_ROLES) -> bool:
    user = _as_user(user)
    if user is None:
        return False
    if _is_elevated(user, elevated_roles):
        return True
    if project is None or not _is_member_role(user, elevated_roles):
        return False
    return is_project_member(user, project)


@dataclass
class AccessPolicy:
    """The acting user plus the loaded projects, evaluated on every render."""

    user: Optional[User]
    projects: Any = ()
    elevated_roles: FrozenSet[str] = DEFAULT_ELEVATED_ROLES
    _index: Dict[str, Project] = field(init=False, repr=False, default_factory=dict)

    def __post_init__(self) -> None:
        self.user = _as_user(self.user)
        self._index = _project_index(self.projects)

    @property
    def is_elevated(self) -> bool:
        return self.user is not None and _is_elevated(self.user, self.elevated_roles)

    def project(self, project_id: Optional[str]) -> Optional[Project]:
        if project_id is None:
            return None
        return self._index.get(project_id)

    def can_view_project(self, project: Any) -> bool:
        return can_view_project(self.user, project, elevated_roles=self.elevated_roles)

    def can_edit_project(self, project: Any) -> bool:
        return can_edit_project(self.user, project, elevated_roles=self.elevated_roles)

    def can_delete_project(self, project: Any = None) -> bool:
        return can_delete_project(self.user, project, elevated_roles=self.elevated_roles)

    def can_create_project(self) -> bool:
        return can_create_project(self.user, elevated_roles=self.elevated_roles)

    def can_view_task(self, task: Any) -> bool:
        return can_view_task(self.user, task, self._index, elevated_roles=self.elevated_roles)

    def can_edit_task(self, task: Any) -> bool:
        return can_edit_task(self.user, task, self._index, elevated_roles=self.elevated_roles)

    def can_delete_task(self, task: Any = None) -> bool:
        return can_delete_task(self.user, task, elevated_roles=self.elevated_roles)

    def can_create_task(self, project: Any = None) -> bool:
        return can_create_task(self.user, project, elevated_roles=self.elevated_roles)
