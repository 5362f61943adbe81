from datetime import date

from taskboard.filters import ProjectFilters, TaskFilters, filter_projects, filter_tasks
from taskboard.models import Project, Task
from taskboard.policy import AccessPolicy

ADMIN = AccessPolicy({"_id": "a1", "role": "admin"})


def _tasks(*raws):
    return [Task.from_dict(r) for r in raws]


def test_status_and_search_compose():
    tasks = _tasks(
        {"_id": "t1", "title": "Fix bug", "status": "todo"},
        {"_id": "t2", "title": "Write docs", "status": "completed"},
    )
    result = filter_tasks(tasks, ADMIN, TaskFilters(search="bug", status="todo"))
    assert [t.id for t in result] == ["t1"]


def test_unset_filters_do_not_constrain():
    tasks = _tasks({"_id": "t1", "title": "a"}, {"_id": "t2", "title": "b"})
    assert len(filter_tasks(tasks, ADMIN)) == 2
    assert len(filter_tasks(tasks, ADMIN, TaskFilters())) == 2


def test_search_is_case_insensitive_and_covers_description():
    tasks = _tasks(
        {"_id": "t1", "title": "Deploy", "description": "Roll out the API"},
        {"_id": "t2", "title": "Design"},
    )
    assert [t.id for t in filter_tasks(tasks, ADMIN, TaskFilters(search="api"))] == ["t1"]


def test_project_filter_matches_reference_and_embedded():
    tasks = _tasks(
        {"_id": "t1", "projectId": "p1"},
        {"_id": "t2", "projectId": {"_id": "p1", "title": "Apollo"}},
        {"_id": "t3", "projectId": "p2"},
    )
    assert [t.id for t in filter_tasks(tasks, ADMIN, TaskFilters(project_id="p1"))] == ["t1", "t2"]


def test_overdue_filter():
    today = date(2024, 6, 1)
    tasks = _tasks(
        {"_id": "t1", "dueDate": "2024-05-01", "status": "todo"},
        {"_id": "t2", "dueDate": "2024-05-01", "status": "completed"},
        {"_id": "t3", "dueDate": "2024-07-01", "status": "todo"},
    )
    result = filter_tasks(tasks, ADMIN, TaskFilters(overdue=True), today=today)
    assert [t.id for t in result] == ["t1"]


def test_visibility_applies_before_filters():
    member = {"_id": "u1", "role": "team_member"}
    projects = [
        Project.from_dict({"_id": "p1", "title": "Alpha", "teamMembers": ["u1"]}),
        Project.from_dict({"_id": "p2", "title": "Alpha two", "teamMembers": ["u2"]}),
    ]
    policy = AccessPolicy(member, projects)
    assert [p.id for p in filter_projects(projects, policy, ProjectFilters(search="alpha"))] == ["p1"]


def test_project_filters_status_and_priority():
    projects = [
        Project.from_dict({"_id": "p1", "status": "planning", "priority": "high"}),
        Project.from_dict({"_id": "p2", "status": "planning", "priority": "low"}),
        Project.from_dict({"_id": "p3", "status": "completed", "priority": "high"}),
    ]
    result = filter_projects(projects, ADMIN, ProjectFilters(status="planning", priority="high"))
    assert [p.id for p in result] == ["p1"]


def test_to_params_skips_empty_values():
    assert ProjectFilters(search="x", limit=20).to_params() == {"search": "x", "limit": "20"}
    params = TaskFilters(project_id="p1", assigned_to="u1", overdue=False).to_params()
    assert params == {"projectId": "p1", "assignedTo": "u1", "overdue": "false"}


def test_active_count():
    assert TaskFilters(search="x").active_count == 0
    assert TaskFilters(status="todo", project_id="p1").active_count == 2
