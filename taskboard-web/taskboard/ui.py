"""Streamlit glue shared by every page: page setup, session wiring, toasts."""

from __future__ import annotations

from datetime import date
from html import escape
from typing import Iterable, Optional

import streamlit as st
from streamlit.errors import StreamlitAPIException

from .api_client import TaskboardClient
from .board import enum_to_display_text, format_date, is_overdue
from .config import configure_logging, get_config
from .models import (
    Project,
    ProjectPriority,
    ProjectStatus,
    Task,
    TaskComment,
    TaskPriority,
    TaskStatus,
    User,
    enum_values,
)
from .policy import AccessPolicy
from .relations import project_label, user_label
from .session import SessionContext, restore_session

_BADGE_CSS = """
<style>
.tb-badge { display:inline-block;font-size:0.70rem;font-weight:700;border-radius:30px;padding:0.18rem 0.6rem;margin-right:.3rem;letter-spacing:.5px;text-transform:uppercase;border:1px solid rgba(0,0,0,.15); }
.tb-low { background:#bbf7d0; } .tb-medium { background:#fef08a; } .tb-high { background:#fed7aa; }
.tb-critical, .tb-urgent { background:#fecaca; }
.tb-planning, .tb-todo { background:#f3f4f6; } .tb-in_progress { background:#dbeafe; }
.tb-review, .tb-testing { background:#fef9c3; } .tb-completed { background:#dcfce7; }
.tb-on_hold, .tb-blocked { background:#ffedd5; } .tb-cancelled { background:#fee2e2; }
.tb-overdue { color:#b91c1c;font-weight:600; }
</style>
"""

_BADGE_VALUES = frozenset(
    value for enum_cls in (ProjectStatus, ProjectPriority, TaskStatus, TaskPriority) for value in enum_values(enum_cls)
)


def set_page(page_title: str = "Taskboard", page_icon: str = "📋", layout: str = "wide") -> None:
    """Configure the page and inject the badge CSS.

    Safe to call once at the top of each page.
    """
    try:
        st.set_page_config(page_title=page_title, page_icon=page_icon, layout=layout)
    except StreamlitAPIException:
        # set_page_config can only be called once per run
        pass
    st.markdown(_BADGE_CSS, unsafe_allow_html=True)


def badge(value: Optional[str]) -> str:
    """Status/priority pill. Only known values get a colour class."""
    if not value:
        return ""
    css = f"tb-badge tb-{value}" if value in _BADGE_VALUES else "tb-badge"
    return f'<span class="{css}">{escape(enum_to_display_text(value))}</span>'


def task_card_html(task: Task, *, show_status: bool = True, today: Optional[date] = None) -> str:
    due = escape(format_date(task.due_date))
    if is_overdue(task.due_date, task.status, today=today):
        due = f"<span class='tb-overdue'>{due} · overdue</span>"
    badges = (badge(task.status) if show_status else "") + badge(task.priority)
    return (
        f"**{escape(task.title)}** {badges}<br/>"
        f"<small>{escape(project_label(task.project))} · {escape(user_label(task.assigned_to))} · {due}</small>"
    )


def project_heading_html(project: Project) -> str:
    return f"### {escape(project.title)} {badge(project.status)}{badge(project.priority)}"


def comment_header_html(comment: TaskComment) -> str:
    return f"**{escape(user_label(comment.author))}** · <small>{escape(format_date(comment.created_at))}</small>"


def get_client() -> TaskboardClient:
    """One client (and session) per browser session."""
    if "tb_client" not in st.session_state:
        config = get_config()
        configure_logging(config.log_level)
        st.session_state.tb_client = TaskboardClient(config, SessionContext())
    return st.session_state.tb_client


def current_user() -> Optional[User]:
    client = get_client()
    return restore_session(client)


def require_user() -> User:
    """Current user, or a login prompt followed by ``st.stop()``."""
    user = current_user()
    if user is None:
        st.warning("Please log in to continue.")
        st.page_link("app.py", label="Go to login", icon="🔐")
        st.stop()
    return user


def build_policy(projects: Iterable = ()) -> AccessPolicy:
    client = get_client()
    return AccessPolicy(client.session.user, list(projects), elevated_roles=client.config.elevated_roles)


def notify_errors(errors: Iterable[str]) -> None:
    for message in errors:
        st.toast(message, icon="⚠️")


def sidebar_user() -> None:
    client = get_client()
    user = client.session.user
    if user is None:
        return
    with st.sidebar:
        st.markdown(f"**{user.full_name}**")
        st.caption(f"{user.email} · {enum_to_display_text(user.role)}")
        if st.button("Log out", key="tb-logout"):
            client.logout()
            st.toast("Logged out successfully", icon="👋")
            st.switch_page("app.py")
