"""Client-side validation and payload building for the create/edit forms.

Validation happens before anything is sent; a failure raises
``FormValidationError`` carrying every message for the form.
"""

from __future__ import annotations

import math
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Optional, Union

from .models import ProjectPriority, ProjectStatus, TaskPriority, TaskStatus, enum_values

MIN_PASSWORD_LENGTH = 6
REQUIRED_FIELDS_MESSAGE = "Please fill in all required fields"


class FormValidationError(ValueError):
    def __init__(self, errors: List[str]):
        self.errors = list(errors)
        super().__init__("; ".join(self.errors) or REQUIRED_FIELDS_MESSAGE)


def parse_tags(raw: Union[str, Iterable[str], None]) -> List[str]:
    """``"api, ui,,"`` -> ``["api", "ui"]``."""
    if raw is None:
        return []
    parts = raw.split(",") if isinstance(raw, str) else list(raw)
    return [str(p).strip() for p in parts if str(p).strip()]


def _iso_date(value: Any) -> Optional[str]:
    if value in (None, ""):
        return None
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    text = str(value).strip()
    try:
        return date.fromisoformat(text[:10]).isoformat()
    except ValueError:
        return None


def _hours(value: Any, label: str, errors: List[str]) -> Optional[float]:
    if value in (None, ""):
        return None
    try:
        hours = float(value)
    except (TypeError, ValueError):
        errors.append(f"{label} must be a number")
        return None
    if not math.isfinite(hours):
        errors.append(f"{label} must be a number")
        return None
    if hours < 0:
        errors.append(f"{label} cannot be negative")
        return None
    return hours


def _choice(value: Any, allowed: List[str], label: str, errors: List[str]) -> Optional[str]:
    if value in (None, ""):
        return None
    value = str(value)
    if value not in allowed:
        errors.append(f"Invalid {label}: {value}")
        return None
    return value


def build_project_payload(
    *,
    title: Any = None,
    description: Any = None,
    deadline: Any = None,
    priority: Any = None,
    status: Any = None,
    manager_id: Any = None,
    team_members: Optional[Iterable[str]] = None,
    estimated_hours: Any = None,
    budget: Any = None,
    tags: Union[str, Iterable[str], None] = None,
    partial: bool = False,
) -> Dict[str, Any]:
    """Validated body for ``POST /projects`` (or ``PUT`` with ``partial=True``)."""
    errors: List[str] = []
    payload: Dict[str, Any] = {}

    if title is not None or not partial:
        clean_title = str(title or "").strip()
        if not clean_title:
            errors.append("Project title is required")
        payload["title"] = clean_title
    if deadline is not None or not partial:
        iso = _iso_date(deadline)
        if iso is None:
            errors.append("Deadline is required")
        payload["deadline"] = iso
    if description is not None or not partial:
        payload["description"] = str(description or "").strip()

    prio = _choice(priority, enum_values(ProjectPriority), "priority", errors)
    if prio is not None:
        payload["priority"] = prio
    elif not partial and priority in (None, ""):
        payload["priority"] = ProjectPriority.MEDIUM.value
    stat = _choice(status, enum_values(ProjectStatus), "status", errors)
    if stat is not None:
        payload["status"] = stat

    if manager_id:
        payload["managerId"] = str(manager_id)
    if team_members is not None:
        payload["teamMembers"] = list(dict.fromkeys(str(m) for m in team_members if m))
    elif not partial:
        payload["teamMembers"] = []
    hours = _hours(estimated_hours, "Estimated hours", errors)
    if hours is not None:
        payload["estimatedHours"] = hours
    money = _hours(budget, "Budget", errors)
    if money is not None:
        payload["budget"] = money
    if tags is not None or not partial:
        payload["tags"] = parse_tags(tags)

    if errors:
        raise FormValidationError(errors)
    return payload


def build_task_payload(
    *,
    title: Any = None,
    description: Any = None,
    project_id: Any = None,
    assigned_to: Any = None,
    due_date: Any = None,
    priority: Any = None,
    status: Any = None,
    estimated_hours: Any = None,
    tags: Union[str, Iterable[str], None] = None,
    dependencies: Optional[Iterable[str]] = None,
    partial: bool = False,
) -> Dict[str, Any]:
    """Validated body for ``POST /tasks`` (or ``PUT`` with ``partial=True``)."""
    errors: List[str] = []
    payload: Dict[str, Any] = {}

    if title is not None or not partial:
        clean_title = str(title or "").strip()
        if not clean_title:
            errors.append("Task title is required")
        payload["title"] = clean_title
    if project_id is not None or not partial:
        if not project_id:
            errors.append("Project is required")
        payload["projectId"] = str(project_id or "")
    if due_date is not None or not partial:
        iso = _iso_date(due_date)
        if iso is None:
            errors.append("Due date is required")
        payload["dueDate"] = iso
    if description is not None or not partial:
        payload["description"] = str(description or "").strip()
    if assigned_to:
        payload["assignedTo"] = str(assigned_to)

    prio = _choice(priority, enum_values(TaskPriority), "priority", errors)
    if prio is not None:
        payload["priority"] = prio
    elif not partial and priority in (None, ""):
        payload["priority"] = TaskPriority.MEDIUM.value
    stat = _choice(status, enum_values(TaskStatus), "status", errors)
    if stat is not None:
        payload["status"] = stat

    hours = _hours(estimated_hours, "Estimated hours", errors)
    if hours is not None:
        payload["estimatedHours"] = hours
    if tags is not None or not partial:
        payload["tags"] = parse_tags(tags)
    if dependencies is not None or not partial:
        payload["dependencies"] = list(dict.fromkeys(str(d) for d in (dependencies or []) if d))

    if errors:
        raise FormValidationError(errors)
    return payload


def build_comment_payload(comment: Any) -> Dict[str, str]:
    text = str(comment or "").strip()
    if not text:
        raise FormValidationError(["Comment cannot be empty"])
    return {"comment": text}


def build_profile_payload(
    *,
    first_name: Any = None,
    last_name: Any = None,
    department: Any = None,
    phone_number: Any = None,
) -> Dict[str, str]:
    errors: List[str] = []
    payload: Dict[str, str] = {}
    for key, value, label in (
        ("firstName", first_name, "First name"),
        ("lastName", last_name, "Last name"),
    ):
        if value is None:
            continue
        text = str(value).strip()
        if not text:
            errors.append(f"{label} cannot be empty")
        payload[key] = text
    if department is not None:
        payload["department"] = str(department).strip()
    if phone_number is not None:
        payload["phoneNumber"] = str(phone_number).strip()
    if errors:
        raise FormValidationError(errors)
    return payload


def build_password_payload(current_password: str, new_password: str, confirm_password: str) -> Dict[str, str]:
    errors: List[str] = []
    if not current_password:
        errors.append("Current password is required")
    if not new_password or len(new_password) < MIN_PASSWORD_LENGTH:
        errors.append(f"New password must be at least {MIN_PASSWORD_LENGTH} characters")
    if new_password != confirm_password:
        errors.append("Passwords do not match")
    if errors:
        raise FormValidationError(errors)
    return {"currentPassword": current_password, "newPassword": new_password}


def build_login_payload(email: Any, password: Any) -> Dict[str, str]:
    email = str(email or "").strip()
    if not email or not password:
        raise FormValidationError(["Email and password are required"])
    return {"email": email, "password": str(password)}


def build_register_payload(
    *,
    email: Any,
    password: Any,
    first_name: Any,
    last_name: Any,
    department: Any = None,
    phone_number: Any = None,
) -> Dict[str, str]:
    errors: List[str] = []
    payload = {
        "email": str(email or "").strip(),
        "password": str(password or ""),
        "firstName": str(first_name or "").strip(),
        "lastName": str(last_name or "").strip(),
    }
    if not payload["email"] or "@" not in payload["email"]:
        errors.append("A valid email is required")
    if len(payload["password"]) < MIN_PASSWORD_LENGTH:
        errors.append(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
    if not payload["firstName"] or not payload["lastName"]:
        errors.append("First and last name are required")
    if department:
        payload["department"] = str(department).strip()
    if phone_number:
        payload["phoneNumber"] = str(phone_number).strip()
    if errors:
        raise FormValidationError(errors)
    return payload


def build_status_change(current: Any, selected: Any, allowed: List[str]) -> Optional[Dict[str, str]]:
    """``{"status": selected}`` for an actual move between known statuses, else ``None``."""
    if current not in allowed or selected not in allowed or selected == current:
        return None
    return {"status": str(selected)}
