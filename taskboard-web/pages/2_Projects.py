from datetime import date

import streamlit as st

from taskboard.board import enum_to_display_text, format_date, parse_date
from taskboard.filters import ProjectFilters, filter_projects
from taskboard.forms import FormValidationError, build_project_payload, build_status_change
from taskboard.loader import load_users, project_loader
from taskboard.models import Project, ProjectPriority, ProjectStatus, UserRole, enum_values
from taskboard.relations import creator_label, extract_id
from taskboard.ui import (
    build_policy,
    get_client,
    notify_errors,
    project_heading_html,
    require_user,
    set_page,
    sidebar_user,
)

set_page(page_title="Projects", page_icon="📁")
user = require_user()
sidebar_user()
client = get_client()

PRIORITIES = enum_values(ProjectPriority)
STATUSES = enum_values(ProjectStatus)

if "tb_projects" not in st.session_state:
    st.session_state.tb_projects = project_loader()
loader = st.session_state.tb_projects


def _show_errors(exc: FormValidationError) -> None:
    for message in exc.errors:
        st.error(message)


def _change_status(project_id: str, current: str, key: str) -> None:
    payload = build_status_change(current, st.session_state.get(key), STATUSES)
    if payload is None:
        return
    resp = client.update_project(project_id, payload)
    if resp.success:
        st.session_state.tb_project_notice = ("success", "Project status updated successfully")
    else:
        st.session_state.tb_project_notice = ("error", resp.message or "Failed to update project status")


def _assignable_users():
    # admins are not assigned to project teams
    return [u for u in load_users(client) if u.role != UserRole.ADMIN.value]


def _member_picker(key: str, default_ids):
    users = _assignable_users()
    if not users:
        st.caption("No team members available.")
        return list(default_ids)
    labels = {u.id: f"{u.full_name} ({u.email})" for u in users}
    return st.multiselect(
        "Team members",
        options=list(labels),
        default=[i for i in default_ids if i in labels],
        format_func=lambda i: labels.get(i, i),
        key=key,
    )


# ----- Header / filters -----
st.title("Projects")
policy = build_policy()
st.caption("Manage all projects across your organization" if policy.is_elevated else "Projects you are a member of")

notice = st.session_state.pop("tb_project_notice", None)
if notice:
    kind, message = notice
    if kind == "success":
        st.toast(message, icon="✅")
    else:
        st.error(message)

fc1, fc2, fc3, fc4 = st.columns([2.2, 1.1, 1.1, 0.6])
with fc1:
    search = st.text_input("Search", placeholder="Search projects…")
with fc2:
    status_filter = st.selectbox("Status", [""] + STATUSES, format_func=lambda s: enum_to_display_text(s) or "All statuses")
with fc3:
    priority_filter = st.selectbox("Priority", [""] + PRIORITIES, format_func=lambda s: enum_to_display_text(s) or "All priorities")
with fc4:
    st.write("")
    if st.button("↻", help="Reload projects"):
        st.toast("Projects refreshed", icon="✅")

filters = ProjectFilters(search=search, status=status_filter, priority=priority_filter)
projects = loader.load(lambda: client.get_projects(filters))
notify_errors([loader.error] if loader.error else [])

policy = build_policy(projects)
visible = filter_projects(projects, policy, filters)

# ----- Create (admin only) -----
if policy.can_create_project():
    with st.expander("➕ New project", expanded=False):
        with st.form("tb-project-create", clear_on_submit=True):
            title = st.text_input("Title *")
            description = st.text_area("Description")
            c1, c2, c3 = st.columns(3)
            with c1:
                deadline = st.date_input("Deadline *", value=None, min_value=date.today())
            with c2:
                priority = st.selectbox("Priority", PRIORITIES, index=PRIORITIES.index("medium"), format_func=enum_to_display_text)
            with c3:
                status = st.selectbox("Status", STATUSES, format_func=enum_to_display_text)
            members = _member_picker("tb-create-members", [])
            c4, c5 = st.columns(2)
            with c4:
                estimated = st.text_input("Estimated hours")
            with c5:
                tags = st.text_input("Tags (comma separated)")
            create_clicked = st.form_submit_button("Create project")
        if create_clicked:
            try:
                payload = build_project_payload(
                    title=title,
                    description=description,
                    deadline=deadline,
                    priority=priority,
                    status=status,
                    manager_id=user.id,
                    team_members=members,
                    estimated_hours=estimated,
                    tags=tags,
                )
            except FormValidationError as exc:
                _show_errors(exc)
            else:
                resp = client.create_project(payload)
                if resp.success:
                    st.toast("Project created successfully", icon="✅")
                    st.rerun()
                else:
                    st.error(resp.message or "Failed to create project")


def _edit_form(project: Project) -> None:
    with st.form(f"tb-project-edit-{project.id}"):
        title = st.text_input("Title *", value=project.title)
        description = st.text_area("Description", value=project.description)
        c1, c2, c3 = st.columns(3)
        with c1:
            deadline = st.date_input("Deadline *", value=parse_date(project.deadline))
        with c2:
            priority = st.selectbox(
                "Priority", PRIORITIES,
                index=PRIORITIES.index(project.priority) if project.priority in PRIORITIES else 1,
                format_func=enum_to_display_text,
            )
        with c3:
            status = st.selectbox(
                "Status", STATUSES,
                index=STATUSES.index(project.status) if project.status in STATUSES else 0,
                format_func=enum_to_display_text,
            )
        members = project.team_member_ids
        if policy.is_elevated:
            members = _member_picker(f"tb-edit-members-{project.id}", project.team_member_ids)
        tags = st.text_input("Tags (comma separated)", value=", ".join(project.tags))
        saved = st.form_submit_button("Save changes")
    if saved:
        try:
            payload = build_project_payload(
                title=title,
                description=description,
                deadline=deadline,
                priority=priority,
                status=status,
                team_members=members,
                tags=tags,
                partial=True,
            )
        except FormValidationError as exc:
            _show_errors(exc)
            return
        resp = client.update_project(project.id, payload)
        if resp.success:
            st.toast("Project updated successfully", icon="✅")
            st.rerun()
        else:
            st.error(resp.message or "Failed to update project")


# ----- List -----
st.markdown(f"**{len(visible)}** project(s)")
if not visible:
    if policy.can_create_project():
        st.info("No projects match your current filters. Create one above to get started.")
    else:
        st.info("You have not been added to any projects yet.")

for project in visible:
    with st.container(border=True):
        st.markdown(project_heading_html(project), unsafe_allow_html=True)
        if project.description:
            st.write(project.description)
        m1, m2, m3, m4 = st.columns(4)
        m1.caption(f"📅 Deadline: {format_date(project.deadline)}")
        m2.caption(f"👥 {len(project.team_member_ids)} members")
        m3.caption(f"🧑‍💼 Manager: {creator_label(project.manager)}")
        if project.estimated_hours is not None:
            m4.caption(f"⏱ {project.estimated_hours:g}h estimated")
        if project.tags:
            st.caption(" ".join(f"#{t}" for t in project.tags))

        if policy.can_edit_project(project):
            a1, a2 = st.columns([1.4, 3])
            with a1:
                if project.status in STATUSES:
                    status_key = f"tb-qs-{project.id}"
                    # the widget always shows the loaded status; changes go through the callback
                    st.session_state[status_key] = project.status
                    st.selectbox(
                        "Quick status",
                        STATUSES,
                        format_func=enum_to_display_text,
                        key=status_key,
                        on_change=_change_status,
                        args=(project.id, project.status, status_key),
                    )
                else:
                    st.caption(f"Status: {project.status}")
            with a2:
                with st.expander("✏️ Edit project"):
                    _edit_form(project)

        if policy.can_delete_project(project):
            confirm = st.checkbox(
                "I understand this cannot be undone", key=f"tb-del-confirm-{project.id}"
            )
            if st.button("🗑 Delete project", key=f"tb-del-{project.id}", disabled=not confirm):
                resp = client.delete_project(project.id)
                if resp.success:
                    st.toast("Project deleted successfully", icon="🗑")
                    st.rerun()
                else:
                    st.error("Failed to delete project")

        if extract_id(project.manager) == user.id:
            st.caption("You manage this project.")
