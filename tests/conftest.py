import pytest
import requests

from taskboard.api_client import TaskboardClient
from taskboard.config import AppConfig
from taskboard.session import SessionContext


class FakeResponse:
    def __init__(self, status_code=200, body=None):
        self.status_code = status_code
        self._body = body

    def json(self):
        if self._body is None:
            raise ValueError("no json")
        return self._body


class FakeHttp:
    """Stands in for requests.Session; replies are matched on (METHOD, path)."""

    def __init__(self):
        self.routes = {}
        self.calls = []

    def add(self, method, path, *replies):
        self.routes.setdefault((method, path), []).extend(replies)

    def request(self, method, url, params=None, json=None, headers=None, verify=True, timeout=None):
        path = url.split("://", 1)[-1].split("/api", 1)[1]
        self.calls.append({"method": method, "path": path, "params": params, "json": json, "headers": headers})
        replies = self.routes.get((method, path))
        if not replies:
            return FakeResponse(404, {"success": False, "message": "Not found"})
        reply = replies.pop(0) if len(replies) > 1 else replies[0]
        if isinstance(reply, Exception):
            raise reply
        return reply


@pytest.fixture
def config():
    return AppConfig(
        api_url="http://api.test",
        timeout_seconds=5.0,
        verify_ssl=True,
        dashboard_limit=50,
        elevated_roles=frozenset({"admin"}),
        log_level="INFO",
    )


@pytest.fixture
def http():
    return FakeHttp()


@pytest.fixture
def client(config, http):
    return TaskboardClient(config, SessionContext(), http=http)


@pytest.fixture
def connection_error():
    return requests.ConnectionError("connection refused")


@pytest.fixture
def reply():
    return FakeResponse
