"""Taskboard web client.

Streamlit front end for the Taskboard project/task API. The modules here
hold everything that is not presentation: envelope normalization,
reference-or-embedded relation handling, role based visibility and list
filtering.
"""

from .normalize import normalize_collection
from .policy import (
    AccessPolicy,
    can_create_project,
    can_create_task,
    can_delete_project,
    can_delete_task,
    can_edit_project,
    can_edit_task,
    can_view_project,
    can_view_task,
)
from .relations import Embedded, Reference, extract_id, extract_label
from .filters import ProjectFilters, TaskFilters, filter_projects, filter_tasks

__version__ = "0.1.0"

__all__ = [
    "normalize_collection",
    "AccessPolicy",
    "can_create_project",
    "can_create_task",
    "can_delete_project",
    "can_delete_task",
    "can_edit_project",
    "can_edit_task",
    "can_view_project",
    "can_view_task",
    "Embedded",
    "Reference",
    "extract_id",
    "extract_label",
    "ProjectFilters",
    "TaskFilters",
    "filter_projects",
    "filter_tasks",
]
