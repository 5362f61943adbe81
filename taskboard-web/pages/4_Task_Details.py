import streamlit as st

from taskboard.board import days_until, enum_to_display_text, format_date, is_overdue, next_status
from taskboard.filters import ProjectFilters
from taskboard.forms import FormValidationError, build_comment_payload
from taskboard.loader import load_task, project_loader
from taskboard.relations import creator_label, extract_id, project_label, user_label
from taskboard.ui import badge, build_policy, comment_header_html, get_client, require_user, set_page, sidebar_user

set_page(page_title="Task details", page_icon="🔎", layout="centered")
require_user()
sidebar_user()
client = get_client()

task_id = st.query_params.get("task")
if not task_id:
    st.info("Pick a task from the Tasks page to see its details.")
    st.page_link("pages/3_Tasks.py", label="Back to tasks", icon="⬅️")
    st.stop()

task = load_task(client, task_id)
if task is None:
    st.error("Task not found")
    st.page_link("pages/3_Tasks.py", label="Back to tasks", icon="⬅️")
    st.stop()

if "tb_detail_projects" not in st.session_state:
    st.session_state.tb_detail_projects = project_loader()
projects = st.session_state.tb_detail_projects.load(
    lambda: client.get_projects(ProjectFilters(limit=client.config.dashboard_limit))
)
policy = build_policy(projects)

if not policy.can_view_task(task):
    st.warning("You do not have access to this task.")
    st.stop()

st.page_link("pages/3_Tasks.py", label="Back to tasks", icon="⬅️")
st.title(task.title)
st.markdown(f"{badge(task.status)}{badge(task.priority)}", unsafe_allow_html=True)

if task.description:
    st.write(task.description)

c1, c2 = st.columns(2)
with c1:
    st.markdown(f"**Project:** {project_label(task.project)}")
    st.markdown(f"**Assigned to:** {user_label(task.assigned_to)}")
    st.markdown(f"**Created by:** {creator_label(task.created_by)}")
with c2:
    remaining = days_until(task.due_date)
    if is_overdue(task.due_date, task.status):
        st.markdown(
            f"**Due:** <span class='tb-overdue'>{format_date(task.due_date)} ({-remaining} day(s) overdue)</span>",
            unsafe_allow_html=True,
        )
    else:
        st.markdown(f"**Due:** {format_date(task.due_date)}")
    if task.estimated_hours is not None:
        st.markdown(f"**Estimated:** {task.estimated_hours:g}h")
    if task.actual_hours is not None:
        st.markdown(f"**Actual:** {task.actual_hours:g}h")
    if task.completed_at:
        st.markdown(f"**Completed:** {format_date(task.completed_at)}")

if task.tags:
    st.caption(" ".join(f"#{t}" for t in task.tags))

if task.dependencies:
    st.markdown("**Depends on**")
    for dep in task.dependencies:
        st.markdown(f"- {project_label(dep)}")

forward = next_status(task.status)
if forward and policy.can_edit_task(task):
    if st.button(f"Move to {enum_to_display_text(forward)}"):
        resp = client.update_task(task.id, {"status": forward})
        if resp.success:
            st.toast("Task updated successfully", icon="✅")
            st.rerun()
        else:
            st.error(resp.message or "Failed to update task")

st.divider()
st.subheader(f"Comments ({len(task.comments)})")
if not task.comments:
    st.caption("No comments yet.")
for comment in task.comments:
    with st.container(border=True):
        st.markdown(comment_header_html(comment), unsafe_allow_html=True)
        st.write(comment.comment)

with st.form("tb-detail-comment", clear_on_submit=True):
    text = st.text_area("Add a comment", height=90)
    posted = st.form_submit_button("Post comment")
if posted:
    try:
        payload = build_comment_payload(text)
    except FormValidationError as exc:
        for message in exc.errors:
            st.error(message)
    else:
        resp = client.add_task_comment(task.id, payload["comment"])
        if resp.success:
            st.toast("Comment added", icon="💬")
            st.rerun()
        else:
            st.error(resp.message or "Failed to add comment")

project = policy.project(extract_id(task.project))
if project is not None:
    st.caption(f"Project deadline: {format_date(project.deadline)}")
