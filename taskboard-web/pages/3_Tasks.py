import streamlit as st

from taskboard.board import (
    BOARD_COLUMNS,
    enum_to_display_text,
    group_by_status,
    next_status,
    parse_date,
    previous_status,
    task_summary,
    tasks_to_frame,
)
from taskboard.filters import ProjectFilters, TaskFilters, filter_tasks
from taskboard.forms import FormValidationError, build_comment_payload, build_task_payload
from taskboard.loader import load_users, project_loader, task_loader
from taskboard.models import Task, TaskPriority, TaskStatus, enum_values
from taskboard.ui import (
    build_policy,
    comment_header_html,
    get_client,
    notify_errors,
    require_user,
    set_page,
    sidebar_user,
    task_card_html,
)

set_page(page_title="Tasks", page_icon="✅")
user = require_user()
sidebar_user()
client = get_client()

PRIORITIES = enum_values(TaskPriority)
STATUSES = enum_values(TaskStatus)

if "tb_tasks" not in st.session_state:
    st.session_state.tb_tasks = task_loader()
if "tb_task_projects" not in st.session_state:
    st.session_state.tb_task_projects = project_loader()
if "tb_task_view" not in st.session_state:
    st.session_state.tb_task_view = "List"


def _show_errors(exc: FormValidationError) -> None:
    for message in exc.errors:
        st.error(message)


def _move(task: Task, status: str) -> None:
    resp = client.update_task(task.id, {"status": status})
    if resp.success:
        st.toast(f"Moved to {enum_to_display_text(status)}", icon="✅")
        st.rerun()
    else:
        st.error(resp.message or "Failed to update task")


# ----- Header / filters -----
st.title("Tasks")

projects = st.session_state.tb_task_projects.load(
    lambda: client.get_projects(ProjectFilters(limit=client.config.dashboard_limit))
)
policy = build_policy(projects)
allowed_projects = [p for p in projects if policy.can_create_task(p)]
project_titles = {p.id: p.title for p in projects}

fc1, fc2, fc3, fc4, fc5 = st.columns([2.0, 1.0, 1.0, 1.4, 0.6])
with fc1:
    search = st.text_input("Search", placeholder="Search tasks…")
with fc2:
    status_filter = st.selectbox("Status", [""] + STATUSES, format_func=lambda s: enum_to_display_text(s) or "All statuses")
with fc3:
    priority_filter = st.selectbox("Priority", [""] + PRIORITIES, format_func=lambda s: enum_to_display_text(s) or "All priorities")
with fc4:
    project_filter = st.selectbox(
        "Project", [""] + list(project_titles), format_func=lambda i: project_titles.get(i, "All projects")
    )
with fc5:
    st.write("")
    if st.button("↻", help="Reload tasks"):
        st.toast("Tasks refreshed", icon="✅")

filters = TaskFilters(search=search, status=status_filter, priority=priority_filter, project_id=project_filter)
loader = st.session_state.tb_tasks
tasks = loader.load(lambda: client.get_tasks(filters))
notify_errors([e for e in (st.session_state.tb_task_projects.error, loader.error) if e])

visible = filter_tasks(tasks, policy, filters)

summary = task_summary(visible)
m1, m2, m3, m4 = st.columns(4)
m1.metric("Total", summary["total"])
m2.metric("In progress", summary["in_progress"])
m3.metric("Completed", summary["completed"])
m4.metric("Overdue", summary["overdue"])
if filters.active_count:
    st.caption(f"{filters.active_count} filter(s) active")

# ----- Create -----
if policy.is_elevated or allowed_projects:
    with st.expander("➕ New task", expanded=False):
        if not allowed_projects:
            st.info("Create a project first.")
        else:
            users = load_users(client)
            user_names = {u.id: u.full_name for u in users}
            with st.form("tb-task-create", clear_on_submit=True):
                title = st.text_input("Title *")
                description = st.text_area("Description")
                c1, c2 = st.columns(2)
                with c1:
                    project_id = st.selectbox(
                        "Project *", [p.id for p in allowed_projects], format_func=lambda i: project_titles.get(i, i)
                    )
                with c2:
                    assignee = st.selectbox(
                        "Assign to", [""] + list(user_names), format_func=lambda i: user_names.get(i, "Unassigned")
                    )
                c3, c4, c5 = st.columns(3)
                with c3:
                    due = st.date_input("Due date *", value=None)
                with c4:
                    priority = st.selectbox("Priority", PRIORITIES, index=PRIORITIES.index("medium"), format_func=enum_to_display_text)
                with c5:
                    estimated = st.text_input("Estimated hours")
                tags = st.text_input("Tags (comma separated)")
                create_clicked = st.form_submit_button("Create task")
            if create_clicked:
                try:
                    payload = build_task_payload(
                        title=title,
                        description=description,
                        project_id=project_id,
                        assigned_to=assignee,
                        due_date=due,
                        priority=priority,
                        estimated_hours=estimated,
                        tags=tags,
                    )
                except FormValidationError as exc:
                    _show_errors(exc)
                else:
                    resp = client.create_task(payload)
                    if resp.success:
                        st.toast("Task created successfully", icon="✅")
                        st.rerun()
                    else:
                        st.error(resp.message or "Failed to create task")


def _edit_form(task: Task) -> None:
    with st.form(f"tb-task-edit-{task.id}"):
        title = st.text_input("Title *", value=task.title)
        description = st.text_area("Description", value=task.description)
        c1, c2, c3 = st.columns(3)
        with c1:
            due = st.date_input("Due date *", value=parse_date(task.due_date))
        with c2:
            priority = st.selectbox(
                "Priority", PRIORITIES,
                index=PRIORITIES.index(task.priority) if task.priority in PRIORITIES else 1,
                format_func=enum_to_display_text,
            )
        with c3:
            status = st.selectbox(
                "Status", STATUSES,
                index=STATUSES.index(task.status) if task.status in STATUSES else 0,
                format_func=enum_to_display_text,
            )
        tags = st.text_input("Tags (comma separated)", value=", ".join(task.tags))
        saved = st.form_submit_button("Save changes")
    if saved:
        try:
            payload = build_task_payload(
                title=title,
                description=description,
                due_date=due,
                priority=priority,
                status=status,
                tags=tags,
                partial=True,
            )
        except FormValidationError as exc:
            _show_errors(exc)
            return
        resp = client.update_task(task.id, payload)
        if resp.success:
            st.toast("Task updated successfully", icon="✅")
            st.rerun()
        else:
            st.error(resp.message or "Failed to update task")


def _comment_form(task: Task) -> None:
    for c in task.comments:
        st.markdown(comment_header_html(c), unsafe_allow_html=True)
        st.write(c.comment)
    with st.form(f"tb-comment-{task.id}", clear_on_submit=True):
        text = st.text_area("Add a comment", height=80)
        posted = st.form_submit_button("Post")
    if posted:
        try:
            payload = build_comment_payload(text)
        except FormValidationError as exc:
            _show_errors(exc)
            return
        resp = client.add_task_comment(task.id, payload["comment"])
        if resp.success:
            st.toast("Comment added", icon="💬")
            st.rerun()
        else:
            st.error(resp.message or "Failed to add comment")


def _task_card(task: Task) -> None:
    st.markdown(task_card_html(task, show_status=False), unsafe_allow_html=True)


# ----- View -----
view = st.radio("View", ["List", "Board"], horizontal=True, key="tb_task_view", label_visibility="collapsed")

if not visible:
    st.info("No tasks match your current filters.")
elif view == "List":
    df = tasks_to_frame(visible)
    st.dataframe(df.drop(columns=["id"]), use_container_width=True, hide_index=True)

    for task in visible:
        with st.expander(f"{task.title} · {enum_to_display_text(task.status)}"):
            _task_card(task)
            if task.description:
                st.write(task.description)
            st.page_link("pages/4_Task_Details.py", label="Open details", icon="🔎", query_params={"task": task.id})
            if policy.can_edit_task(task):
                _edit_form(task)
            if policy.can_delete_task(task):
                confirm = st.checkbox("I understand this cannot be undone", key=f"tb-del-confirm-{task.id}")
                if st.button("🗑 Delete task", key=f"tb-del-{task.id}", disabled=not confirm):
                    resp = client.delete_task(task.id)
                    if resp.success:
                        st.toast("Task deleted successfully", icon="🗑")
                        st.rerun()
                    else:
                        st.error("Failed to delete task")
            st.markdown("**Comments**")
            _comment_form(task)
else:
    grouped = group_by_status(visible)
    cols = st.columns(len(BOARD_COLUMNS))
    for col, column in zip(cols, BOARD_COLUMNS):
        status = column["status"]
        with col:
            st.markdown(f"**{column['title']}** ({len(grouped[status])})")
            for task in grouped[status]:
                with st.container(border=True):
                    _task_card(task)
                    if not policy.can_edit_task(task):
                        continue
                    back, forward = previous_status(status), next_status(status)
                    b1, b2 = st.columns(2)
                    if back and b1.button("◀", key=f"tb-back-{task.id}", help=f"Move to {enum_to_display_text(back)}"):
                        _move(task, back)
                    if forward and b2.button("▶", key=f"tb-fwd-{task.id}", help=f"Move to {enum_to_display_text(forward)}"):
                        _move(task, forward)
                    if status != TaskStatus.BLOCKED.value and st.button("Block", key=f"tb-block-{task.id}"):
                        _move(task, TaskStatus.BLOCKED.value)
                    if status == TaskStatus.BLOCKED.value and st.button("Unblock", key=f"tb-unblock-{task.id}"):
                        _move(task, TaskStatus.TODO.value)
