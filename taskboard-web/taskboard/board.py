"""Board, stats and table helpers shared by the dashboard and list pages."""

from __future__ import annotations

from collections import OrderedDict
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

import pandas as pd

from .models import Project, Task, TaskStatus, to_int
from .relations import creator_label, project_label, user_label

BOARD_COLUMNS: List[Dict[str, str]] = [
    {"status": TaskStatus.TODO.value, "title": "To Do"},
    {"status": TaskStatus.IN_PROGRESS.value, "title": "In Progress"},
    {"status": TaskStatus.REVIEW.value, "title": "Review"},
    {"status": TaskStatus.TESTING.value, "title": "Testing"},
    {"status": TaskStatus.COMPLETED.value, "title": "Completed"},
    {"status": TaskStatus.BLOCKED.value, "title": "Blocked"},
]
FLOW_STATUSES = [c["status"] for c in BOARD_COLUMNS if c["status"] != TaskStatus.BLOCKED.value]
CLOSED_STATUSES = {TaskStatus.COMPLETED.value, "cancelled"}

DateLike = Union[str, date, datetime, None]


def parse_date(value: DateLike) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00")).date()
    except ValueError:
        try:
            return date.fromisoformat(str(value)[:10])
        except ValueError:
            return None


def days_until(value: DateLike, today: Optional[date] = None) -> Optional[int]:
    target = parse_date(value)
    if target is None:
        return None
    return (target - (today or date.today())).days


def is_overdue(due: DateLike, status: Optional[str] = None, today: Optional[date] = None) -> bool:
    """Due date strictly before today and the task is not closed."""
    if status in CLOSED_STATUSES:
        return False
    remaining = days_until(due, today=today)
    return remaining is not None and remaining < 0


def format_date(value: DateLike, fmt: str = "%b %d, %Y") -> str:
    parsed = parse_date(value)
    return parsed.strftime(fmt) if parsed else "—"


def enum_to_display_text(value: Optional[str]) -> str:
    if not value:
        return ""
    return " ".join(word.capitalize() for word in str(value).split("_"))


def initials(first_name: str, last_name: str) -> str:
    return f"{(first_name or '')[:1]}{(last_name or '')[:1]}".upper()


def truncate_text(text: str, max_length: int) -> str:
    if len(text or "") <= max_length:
        return text or ""
    return text[:max_length] + "..."


def completion_percentage(completed: int, total: int) -> int:
    if total <= 0:
        return 0
    return int(round(completed / total * 100))


def group_by_status(tasks: Iterable[Task]) -> "OrderedDict[str, List[Task]]":
    """Kanban columns in board order; unknown statuses are dropped."""
    grouped: "OrderedDict[str, List[Task]]" = OrderedDict((c["status"], []) for c in BOARD_COLUMNS)
    for task in tasks:
        if task.status in grouped:
            grouped[task.status].append(task)
    return grouped


def next_status(status: str) -> Optional[str]:
    if status not in FLOW_STATUSES:
        return None
    idx = FLOW_STATUSES.index(status)
    return FLOW_STATUSES[idx + 1] if idx + 1 < len(FLOW_STATUSES) else None


def previous_status(status: str) -> Optional[str]:
    if status not in FLOW_STATUSES:
        return None
    idx = FLOW_STATUSES.index(status)
    return FLOW_STATUSES[idx - 1] if idx > 0 else None


def task_summary(tasks: Sequence[Task], today: Optional[date] = None) -> Dict[str, int]:
    return {
        "total": len(tasks),
        "completed": sum(1 for t in tasks if t.status == TaskStatus.COMPLETED.value),
        "in_progress": sum(1 for t in tasks if t.status == TaskStatus.IN_PROGRESS.value),
        "overdue": sum(1 for t in tasks if is_overdue(t.due_date, t.status, today=today)),
    }


def tasks_to_frame(tasks: Sequence[Task]) -> pd.DataFrame:
    columns = ["id", "title", "project", "assigned_to", "created_by", "status", "priority", "due_date", "estimated_hours"]
    if not tasks:
        return pd.DataFrame(columns=columns)
    rows = [
        {
            "id": t.id,
            "title": t.title,
            "project": project_label(t.project),
            "assigned_to": user_label(t.assigned_to),
            "created_by": creator_label(t.created_by),
            "status": enum_to_display_text(t.status),
            "priority": enum_to_display_text(t.priority),
            "due_date": parse_date(t.due_date),
            "estimated_hours": t.estimated_hours,
        }
        for t in tasks
    ]
    return pd.DataFrame(rows, columns=columns)


def projects_to_frame(projects: Sequence[Project]) -> pd.DataFrame:
    columns = ["id", "title", "manager", "status", "priority", "deadline", "members", "estimated_hours"]
    if not projects:
        return pd.DataFrame(columns=columns)
    rows = [
        {
            "id": p.id,
            "title": p.title,
            "manager": creator_label(p.manager),
            "status": enum_to_display_text(p.status),
            "priority": enum_to_display_text(p.priority),
            "deadline": parse_date(p.deadline),
            "members": len(p.team_member_ids),
            "estimated_hours": p.estimated_hours,
        }
        for p in projects
    ]
    return pd.DataFrame(rows, columns=columns)


def stats_frame(stats: Any, label: str = "status") -> pd.DataFrame:
    """``[{"_id": "todo", "count": 3}, ...]`` from the analytics payload as a frame."""
    if not isinstance(stats, list):
        stats = []
    rows = [
        {label: enum_to_display_text(str(s.get("_id") or "unknown")), "count": to_int(s.get("count")) or 0}
        for s in stats
        if isinstance(s, dict)
    ]
    return pd.DataFrame(rows, columns=[label, "count"])


def team_workload_frame(workload: Any) -> pd.DataFrame:
    columns = ["member", "email", "total", "completed", "in_progress", "overdue", "completion_rate"]
    if not isinstance(workload, list):
        return pd.DataFrame(columns=columns)
    rows = [
        {
            "member": w.get("userName") or "Unknown",
            "email": w.get("userEmail") or "",
            "total": w.get("totalTasks") or 0,
            "completed": w.get("completedTasks") or 0,
            "in_progress": w.get("inProgressTasks") or 0,
            "overdue": w.get("overdueTasks") or 0,
            "completion_rate": w.get("completionRate") or 0,
        }
        for w in workload
        if isinstance(w, dict)
    ]
    return pd.DataFrame(rows, columns=columns)
