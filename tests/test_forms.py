from datetime import date

import pytest

from taskboard.forms import (
    FormValidationError,
    build_comment_payload,
    build_login_payload,
    build_password_payload,
    build_profile_payload,
    build_project_payload,
    build_register_payload,
    build_status_change,
    build_task_payload,
    parse_tags,
)


def test_parse_tags():
    assert parse_tags("api, ui,, ") == ["api", "ui"]
    assert parse_tags(["x", " y "]) == ["x", "y"]
    assert parse_tags(None) == []


def test_project_payload_defaults():
    payload = build_project_payload(title=" Apollo ", deadline=date(2024, 9, 1), team_members=["u1", "u1", "u2"])
    assert payload["title"] == "Apollo"
    assert payload["deadline"] == "2024-09-01"
    assert payload["priority"] == "medium"
    assert payload["teamMembers"] == ["u1", "u2"]
    assert payload["tags"] == []


def test_project_payload_requires_title_and_deadline():
    with pytest.raises(FormValidationError) as exc:
        build_project_payload(title="", deadline=None)
    assert "Project title is required" in exc.value.errors
    assert "Deadline is required" in exc.value.errors


def test_project_payload_rejects_bad_values():
    with pytest.raises(FormValidationError) as exc:
        build_project_payload(title="x", deadline="2024-01-01", priority="extreme", estimated_hours="-3")
    assert "Invalid priority: extreme" in exc.value.errors
    assert "Estimated hours cannot be negative" in exc.value.errors


def test_partial_project_payload_only_sends_given_fields():
    assert build_project_payload(status="completed", partial=True) == {"status": "completed"}


def test_task_payload():
    payload = build_task_payload(
        title="Fix bug",
        project_id="p1",
        due_date="2024-06-10T00:00:00Z",
        assigned_to="u1",
        estimated_hours="2.5",
        dependencies=["t1", "t1"],
    )
    assert payload["projectId"] == "p1"
    assert payload["dueDate"] == "2024-06-10"
    assert payload["assignedTo"] == "u1"
    assert payload["estimatedHours"] == 2.5
    assert payload["dependencies"] == ["t1"]
    assert "status" not in payload


def test_task_payload_requires_project():
    with pytest.raises(FormValidationError) as exc:
        build_task_payload(title="Fix bug", due_date="2024-06-10")
    assert exc.value.errors == ["Project is required"]


def test_comment_payload():
    assert build_comment_payload("  looks good ") == {"comment": "looks good"}
    with pytest.raises(FormValidationError):
        build_comment_payload("   ")


def test_profile_payload():
    assert build_profile_payload(first_name="Ada", department=" R&D ") == {"firstName": "Ada", "department": "R&D"}
    with pytest.raises(FormValidationError):
        build_profile_payload(last_name=" ")


def test_password_payload():
    assert build_password_payload("old", "secret1", "secret1") == {"currentPassword": "old", "newPassword": "secret1"}
    with pytest.raises(FormValidationError) as exc:
        build_password_payload("old", "abc", "abd")
    assert "Passwords do not match" in exc.value.errors
    assert len(exc.value.errors) == 2


def test_login_and_register_payloads():
    assert build_login_payload(" a@b.c ", "pw") == {"email": "a@b.c", "password": "pw"}
    with pytest.raises(FormValidationError):
        build_login_payload("", "pw")
    payload = build_register_payload(email="a@b.c", password="secret1", first_name="Ada", last_name="L", phone_number="")
    assert payload == {"email": "a@b.c", "password": "secret1", "firstName": "Ada", "lastName": "L"}
    with pytest.raises(FormValidationError) as exc:
        build_register_payload(email="nope", password="123", first_name="", last_name="")
    assert len(exc.value.errors) == 3


def test_hours_must_be_finite():
    for raw in ("nan", "inf", "-inf", float("nan")):
        with pytest.raises(FormValidationError) as exc:
            build_task_payload(title="x", project_id="p1", due_date="2024-06-10", estimated_hours=raw)
        assert exc.value.errors == ["Estimated hours must be a number"]
    with pytest.raises(FormValidationError):
        build_project_payload(title="x", deadline="2024-06-10", budget="Infinity")


def test_status_change_only_for_real_moves():
    allowed = ["planning", "in_progress", "completed"]
    assert build_status_change("planning", "completed", allowed) == {"status": "completed"}
    assert build_status_change("planning", "planning", allowed) is None
    assert build_status_change("archived", "planning", allowed) is None
    assert build_status_change("planning", None, allowed) is None
