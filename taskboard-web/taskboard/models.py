"""Client-side view models for users, projects and tasks.

All entities come from the API as JSON dicts. ``from_dict`` never raises:
missing or ill-typed fields fall back to defaults so one odd record cannot
break a page.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

from .relations import Relation, parse_relation, parse_relations, relation_ids


class UserRole(str, Enum):
    ADMIN = "admin"
    MANAGER = "manager"
    TEAM_MEMBER = "team_member"


class ProjectPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ProjectStatus(str, Enum):
    PLANNING = "planning"
    IN_PROGRESS = "in_progress"
    TESTING = "testing"
    COMPLETED = "completed"
    ON_HOLD = "on_hold"
    CANCELLED = "cancelled"


class TaskPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class TaskStatus(str, Enum):
    TODO = "todo"
    IN_PROGRESS = "in_progress"
    REVIEW = "review"
    TESTING = "testing"
    COMPLETED = "completed"
    BLOCKED = "blocked"


def enum_values(enum_cls) -> List[str]:
    return [member.value for member in enum_cls]


def _str(raw: Mapping[str, Any], key: str, default: str = "") -> str:
    value = raw.get(key)
    if value is None:
        return default
    return str(value)


def _opt_str(raw: Mapping[str, Any], key: str) -> Optional[str]:
    value = raw.get(key)
    if value in (None, ""):
        return None
    return str(value)


def _opt_float(raw: Mapping[str, Any], key: str) -> Optional[float]:
    value = raw.get(key)
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def to_int(value: Any) -> Optional[int]:
    """Lenient int parsing for counters in API payloads; junk gives ``None``."""
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        return None


def _str_list(raw: Mapping[str, Any], key: str) -> List[str]:
    value = raw.get(key)
    if not isinstance(value, list):
        return []
    return [str(v) for v in value if v is not None]


def _mapping(raw: Any) -> Mapping[str, Any]:
    return raw if isinstance(raw, Mapping) else {}


@dataclass
class User:
    id: str
    email: str = ""
    first_name: str = ""
    last_name: str = ""
    role: str = ""
    is_active: bool = True
    department: Optional[str] = None
    phone_number: Optional[str] = None
    last_login_at: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @property
    def full_name(self) -> str:
        return " ".join(p for p in (self.first_name, self.last_name) if p) or self.email

    @classmethod
    def from_dict(cls, raw: Any) -> "User":
        raw = _mapping(raw)
        return cls(
            id=_str(raw, "_id"),
            email=_str(raw, "email"),
            first_name=_str(raw, "firstName"),
            last_name=_str(raw, "lastName"),
            role=_str(raw, "role").lower(),
            is_active=bool(raw.get("isActive", True)),
            department=_opt_str(raw, "department"),
            phone_number=_opt_str(raw, "phoneNumber"),
            last_login_at=_opt_str(raw, "lastLoginAt"),
            created_at=_opt_str(raw, "createdAt"),
            updated_at=_opt_str(raw, "updatedAt"),
            raw=dict(raw),
        )


@dataclass
class Project:
    id: str
    title: str = ""
    description: str = ""
    deadline: Optional[str] = None
    priority: str = ProjectPriority.MEDIUM.value
    status: str = ProjectStatus.PLANNING.value
    manager: Relation = None
    team_members: List[Relation] = field(default_factory=list)
    budget: Optional[float] = None
    estimated_hours: Optional[float] = None
    actual_hours: Optional[float] = None
    tags: List[str] = field(default_factory=list)
    attachments: List[str] = field(default_factory=list)
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @property
    def team_member_ids(self) -> List[str]:
        return relation_ids(self.team_members)

    @classmethod
    def from_dict(cls, raw: Any) -> "Project":
        raw = _mapping(raw)
        return cls(
            id=_str(raw, "_id"),
            title=_str(raw, "title"),
            description=_str(raw, "description"),
            deadline=_opt_str(raw, "deadline"),
            priority=_str(raw, "priority", ProjectPriority.MEDIUM.value),
            status=_str(raw, "status", ProjectStatus.PLANNING.value),
            manager=parse_relation(raw.get("managerId")),
            team_members=parse_relations(raw.get("teamMembers")),
            budget=_opt_float(raw, "budget"),
            estimated_hours=_opt_float(raw, "estimatedHours"),
            actual_hours=_opt_float(raw, "actualHours"),
            tags=_str_list(raw, "tags"),
            attachments=_str_list(raw, "attachments"),
            created_at=_opt_str(raw, "createdAt"),
            updated_at=_opt_str(raw, "updatedAt"),
            raw=dict(raw),
        )


@dataclass
class TaskComment:
    author: Relation = None
    comment: str = ""
    created_at: Optional[str] = None

    @classmethod
    def from_dict(cls, raw: Any) -> "TaskComment":
        raw = _mapping(raw)
        return cls(
            author=parse_relation(raw.get("userId")),
            comment=_str(raw, "comment"),
            created_at=_opt_str(raw, "createdAt"),
        )


@dataclass
class Task:
    id: str
    title: str = ""
    description: str = ""
    project: Relation = None
    assigned_to: Relation = None
    created_by: Relation = None
    status: str = TaskStatus.TODO.value
    priority: str = TaskPriority.MEDIUM.value
    due_date: Optional[str] = None
    estimated_hours: Optional[float] = None
    actual_hours: Optional[float] = None
    tags: List[str] = field(default_factory=list)
    attachments: List[str] = field(default_factory=list)
    dependencies: List[Relation] = field(default_factory=list)
    comments: List[TaskComment] = field(default_factory=list)
    completed_at: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @classmethod
    def from_dict(cls, raw: Any) -> "Task":
        raw = _mapping(raw)
        comments = raw.get("comments")
        return cls(
            id=_str(raw, "_id"),
            title=_str(raw, "title"),
            description=_str(raw, "description"),
            project=parse_relation(raw.get("projectId")),
            assigned_to=parse_relation(raw.get("assignedTo")),
            created_by=parse_relation(raw.get("createdBy")),
            status=_str(raw, "status", TaskStatus.TODO.value),
            priority=_str(raw, "priority", TaskPriority.MEDIUM.value),
            due_date=_opt_str(raw, "dueDate"),
            estimated_hours=_opt_float(raw, "estimatedHours"),
            actual_hours=_opt_float(raw, "actualHours"),
            tags=_str_list(raw, "tags"),
            attachments=_str_list(raw, "attachments"),
            dependencies=parse_relations(raw.get("dependencies")),
            comments=[TaskComment.from_dict(c) for c in comments] if isinstance(comments, list) else [],
            completed_at=_opt_str(raw, "completedAt"),
            created_at=_opt_str(raw, "createdAt"),
            updated_at=_opt_str(raw, "updatedAt"),
            raw=dict(raw),
        )


@dataclass(frozen=True)
class Pagination:
    current_page: int = 1
    total_pages: int = 1
    total: Optional[int] = None
    limit: Optional[int] = None

    @classmethod
    def from_dict(cls, raw: Any) -> "Pagination":
        raw = _mapping(raw)

        def _int(key: str) -> Optional[int]:
            return to_int(raw.get(key))

        total = _int("totalProjects")
        if total is None:
            total = _int("totalTasks")
        if total is None:
            total = _int("total")
        return cls(
            current_page=_int("currentPage") or 1,
            total_pages=_int("totalPages") or 1,
            total=total,
            limit=_int("limit"),
        )
