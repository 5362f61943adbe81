import plotly.express as px
import streamlit as st

from taskboard.board import (
    projects_to_frame,
    stats_frame,
    task_summary,
    team_workload_frame,
)
from taskboard.filters import visible_projects, visible_tasks
from taskboard.loader import load_dashboard
from taskboard.ui import build_policy, get_client, notify_errors, require_user, set_page, sidebar_user, task_card_html

set_page(page_title="Dashboard", page_icon="📊")
user = require_user()
sidebar_user()
client = get_client()

st.title(f"Welcome back, {user.first_name or user.full_name}")
st.caption(
    "Organization overview" if build_policy().is_elevated else "Your projects and tasks"
)

if st.button("↻ Refresh", key="tb-dash-refresh"):
    st.toast("Dashboard refreshed", icon="✅")

with st.spinner("Loading dashboard…"):
    data = load_dashboard(client)
notify_errors(data.errors)

policy = build_policy(data.projects)
projects = visible_projects(data.projects, policy)
tasks = visible_tasks(data.tasks, policy)

# ----- KPIs -----
overview = (data.analytics or {}).get("overview") or {}
summary = task_summary(tasks)
k1, k2, k3, k4 = st.columns(4)
k1.metric("Projects", overview.get("totalProjects", len(projects)))
k2.metric("Tasks", overview.get("totalTasks", summary["total"]))
k3.metric("Completed", overview.get("completedTasks", summary["completed"]))
k4.metric("Overdue", overview.get("overdueTasks", summary["overdue"]))
if overview.get("completionRate") is not None:
    st.progress(min(max(float(overview["completionRate"]) / 100.0, 0.0), 1.0), text=f"Completion rate {overview['completionRate']}%")

# ----- Charts -----
analytics = data.analytics or {}
c1, c2 = st.columns(2)
with c1:
    st.subheader("Tasks by status")
    df_status = stats_frame(analytics.get("taskStats"), label="status")
    if df_status.empty:
        st.info("No task statistics yet.")
    else:
        st.plotly_chart(px.pie(df_status, names="status", values="count", hole=0.45), use_container_width=True)
with c2:
    st.subheader("Tasks by priority")
    df_prio = stats_frame(analytics.get("priorityStats"), label="priority")
    if df_prio.empty:
        st.info("No priority statistics yet.")
    else:
        st.plotly_chart(px.bar(df_prio, x="priority", y="count", color="priority"), use_container_width=True)

if policy.is_elevated:
    st.subheader("Team workload")
    df_team = team_workload_frame(analytics.get("teamWorkload"))
    if df_team.empty:
        st.info("No workload data.")
    else:
        st.dataframe(df_team, use_container_width=True, hide_index=True)

# ----- Recent activity -----
left, right = st.columns(2)
with left:
    st.subheader("Recent tasks")
    if not tasks:
        st.caption("No tasks to show.")
    for task in tasks[:8]:
        st.markdown(task_card_html(task), unsafe_allow_html=True)
with right:
    st.subheader("Projects")
    df_projects = projects_to_frame(projects)
    if df_projects.empty:
        st.caption("No projects to show.")
    else:
        st.dataframe(df_projects.drop(columns=["id"]), use_container_width=True, hide_index=True)
