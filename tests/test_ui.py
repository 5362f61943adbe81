from datetime import date

from taskboard.models import Project, Task, TaskComment
from taskboard.ui import badge, comment_header_html, project_heading_html, task_card_html

HOSTILE = '"><img src=x onerror=alert(1)>'


def test_badge_known_value():
    assert badge("in_progress") == '<span class="tb-badge tb-in_progress">In Progress</span>'
    assert badge(None) == ""


def test_badge_unknown_value_is_escaped_and_unstyled():
    out = badge("x" + HOSTILE)
    assert "<img" not in out
    assert out.startswith('<span class="tb-badge">')
    assert "&lt;img" in out


def test_task_card_escapes_api_text():
    task = Task.from_dict({
        "_id": "t1",
        "title": "<script>alert(1)</script>",
        "status": "todo",
        "priority": HOSTILE,
        "projectId": {"_id": "p1", "title": "<b>Apollo</b>"},
        "assignedTo": {"_id": "u1", "firstName": "<i>Ada</i>"},
        "dueDate": "2024-05-01",
    })
    out = task_card_html(task, today=date(2024, 6, 1))
    assert "<script>" not in out
    assert "<img" not in out
    assert "<b>" not in out and "<i>" not in out
    assert "&lt;script&gt;" in out
    assert "&lt;b&gt;Apollo&lt;/b&gt;" in out
    assert "tb-overdue" in out
    assert 'class="tb-badge tb-todo"' in out


def test_task_card_without_status_badge():
    task = Task.from_dict({"_id": "t1", "title": "Fix bug", "status": "review", "priority": "high"})
    out = task_card_html(task, show_status=False)
    assert "tb-review" not in out
    assert "tb-high" in out
    assert "Unassigned" in out


def test_project_heading_and_comment_header_escape():
    project = Project.from_dict({"_id": "p1", "title": "<img src=x>", "status": "planning"})
    assert "<img" not in project_heading_html(project)
    comment = TaskComment.from_dict({"userId": {"_id": "u1", "firstName": "<u>Eve</u>"}, "comment": "hi"})
    assert "&lt;u&gt;Eve&lt;/u&gt;" in comment_header_html(comment)
