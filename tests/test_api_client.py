from taskboard.api_client import ApiResponse
from taskboard.filters import TaskFilters

LOGIN_OK = {
    "success": True,
    "data": {
        "user": {"_id": "u1", "email": "ada@example.com", "firstName": "Ada", "role": "team_member"},
        "accessToken": "access-1",
        "refreshToken": "refresh-1",
    },
}


def test_login_stores_tokens_and_user(client, http, reply):
    http.add("POST", "/auth/login", reply(200, LOGIN_OK))
    resp = client.login("ada@example.com", "secret1")
    assert resp.success
    assert client.session.access_token == "access-1"
    assert client.session.refresh_token == "refresh-1"
    assert client.session.user.id == "u1"
    assert http.calls[0]["json"] == {"email": "ada@example.com", "password": "secret1"}


def test_failed_login_does_not_refresh(client, http, reply):
    client.session.set_tokens("stale", "refresh-1")
    http.add("POST", "/auth/login", reply(401, {"success": False, "message": "Invalid credentials"}))
    resp = client.login("ada@example.com", "wrong")
    assert not resp.success
    assert resp.error_kind == "auth"
    assert resp.message == "Invalid credentials"
    assert [c["path"] for c in http.calls] == ["/auth/login"]


def test_bearer_header_sent(client, http, reply):
    client.session.set_tokens("access-1")
    http.add("GET", "/tasks", reply(200, {"success": True, "data": {"tasks": []}}))
    client.get_tasks(TaskFilters(status="todo", limit=10))
    call = http.calls[0]
    assert call["headers"]["Authorization"] == "Bearer access-1"
    assert call["params"] == {"status": "todo", "limit": "10"}


def test_unauthorized_refreshes_and_retries(client, http, reply):
    client.session.set_tokens("expired", "refresh-1")
    http.add("GET", "/projects", reply(401, {"success": False}), reply(200, {"success": True, "data": {"projects": [{"_id": "p1"}]}}))
    http.add("POST", "/auth/refresh", reply(200, {"success": True, "data": {"accessToken": "access-2", "refreshToken": "refresh-2"}}))

    resp = client.get_projects()

    assert resp.success
    assert resp.items("projects") == [{"_id": "p1"}]
    assert [c["path"] for c in http.calls] == ["/projects", "/auth/refresh", "/projects"]
    assert http.calls[-1]["headers"]["Authorization"] == "Bearer access-2"
    assert client.session.refresh_token == "refresh-2"


def test_failed_refresh_clears_session(client, http, reply):
    client.session.set_tokens("expired", "refresh-1")
    client.session.set_user({"_id": "u1", "role": "admin"})
    http.add("GET", "/projects", reply(401, {"success": False, "message": "Token expired"}))
    http.add("POST", "/auth/refresh", reply(401, {"success": False}))

    resp = client.get_projects()

    assert not resp.success
    assert resp.status_code == 401
    assert client.session.user is None
    assert client.session.access_token is None


def test_still_unauthorized_after_refresh_logs_out(client, http, reply):
    client.session.set_tokens("expired", "refresh-1")
    http.add("GET", "/tasks", reply(401, {"success": False}))
    http.add("POST", "/auth/refresh", reply(200, {"success": True, "data": {"accessToken": "access-2"}}))
    resp = client.get_tasks()
    assert resp.status_code == 401
    assert not client.session.has_token
    assert [c["path"] for c in http.calls] == ["/tasks", "/auth/refresh", "/tasks"]


def test_transport_error(client, http, connection_error):
    http.add("GET", "/tasks", connection_error)
    resp = client.get_tasks()
    assert not resp.ok
    assert resp.status_code == 0
    assert resp.error_kind == "transport"
    assert resp.message == "Unable to reach the server"
    assert resp.items("tasks") == []


def test_envelope_failure_on_200(client, http, reply):
    http.add("GET", "/tasks/t1", reply(200, {"success": False, "message": "Task not found"}))
    resp = client.get_task("t1")
    assert resp.ok
    assert not resp.success
    assert resp.entity("task") is None
    assert resp.message == "Task not found"


def test_non_json_body(client, http, reply):
    http.add("DELETE", "/projects/p1", reply(500, None))
    resp = client.delete_project("p1")
    assert resp.body is None
    assert resp.error_kind == "http"
    assert resp.message == "HTTP 500"


def test_logout_always_clears(client, http, connection_error):
    client.session.set_tokens("access-1", "refresh-1")
    http.add("POST", "/auth/logout", connection_error)
    client.logout()
    assert not client.session.has_token
    assert client.session.refresh_token is None


def test_update_profile_refreshes_session_user(client, http, reply):
    client.session.set_tokens("access-1")
    client.session.set_user({"_id": "u1", "firstName": "Ada"})
    http.add("PUT", "/auth/profile", reply(200, {"success": True, "data": {"user": {"_id": "u1", "firstName": "Augusta"}}}))
    client.update_profile({"firstName": "Augusta"})
    assert client.session.user.first_name == "Augusta"


def test_analytics_date_range(client, http, reply):
    http.add("GET", "/analytics/team", reply(200, {"success": True, "data": {}}))
    client.get_team_analytics(start_date="2024-01-01")
    assert http.calls[0]["params"] == {"startDate": "2024-01-01"}


def test_response_to_dict():
    resp = ApiResponse(ok=True, status_code=200, url="http://x/api/tasks", method="GET", body={"success": True})
    assert resp.to_dict()["status_code"] == 200
    assert resp.success


def test_refresh_skipped_when_token_already_replaced(client, http, reply):
    client.session.set_tokens("old", "refresh-1")

    class ReplacedInFlight(reply):
        def json(self):
            client.session.set_tokens("rotated-elsewhere")
            return super().json()

    http.add("GET", "/tasks", ReplacedInFlight(401, {"success": False}), reply(200, {"success": True, "data": {"tasks": []}}))

    resp = client.get_tasks()

    assert resp.success
    assert [c["path"] for c in http.calls] == ["/tasks", "/tasks"]
    assert http.calls[-1]["headers"]["Authorization"] == "Bearer rotated-elsewhere"
    assert client.session.refresh_token == "refresh-1"
