from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import requests

from .config import AppConfig, get_config
from .filters import ProjectFilters, TaskFilters
from .normalize import envelope_message, extract_entity, normalize_collection
from .session import SessionContext

logger = logging.getLogger(__name__)

# Requests to these paths never trigger a token refresh.
_NO_REFRESH_PATHS = ("/auth/login", "/auth/register", "/auth/refresh")


@dataclass(frozen=True)
class ApiResponse:
    ok: bool
    status_code: int
    url: str
    method: str
    body: Any = None
    error: Optional[str] = None
    error_kind: Optional[str] = None  # transport | auth | http

    @property
    def success(self) -> bool:
        """HTTP success and the envelope does not report a failure."""
        if not self.ok:
            return False
        return not (isinstance(self.body, dict) and self.body.get("success") is False)

    @property
    def message(self) -> str:
        if self.error_kind == "transport":
            return "Unable to reach the server"
        return envelope_message(self.body, default=self.error or "An error occurred")

    def items(self, key: Optional[str] = None) -> List[Any]:
        return normalize_collection(self.body, key) if self.success else []

    def entity(self, key: str) -> Optional[Dict[str, Any]]:
        return extract_entity(self.body, key) if self.success else None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ok": self.ok,
            "status_code": self.status_code,
            "url": self.url,
            "method": self.method,
            "body": self.body,
            "error": self.error,
            "error_kind": self.error_kind,
        }


class TaskboardClient:
    """HTTP client for the Taskboard API.

    Calls never raise; failures come back as ``ApiResponse(ok=False)``. A 401
    gets one token refresh and one retry; if that fails too the session is
    cleared. Concurrent 401s share a single refresh: refresh tokens are
    single use, so a request whose token was already replaced just retries.
    """

    def __init__(
        self,
        config: Optional[AppConfig] = None,
        session: Optional[SessionContext] = None,
        *,
        http: Optional[requests.Session] = None,
    ) -> None:
        self.config = config or get_config()
        self.session = session or SessionContext()
        self.base_url = self.config.api_base_url
        self.timeout_seconds = self.config.timeout_seconds
        self.verify_ssl = self.config.verify_ssl
        self._http = http or requests.Session()
        self._refresh_lock = threading.Lock()
        logger.debug("API base URL: %s", self.base_url)

    def _build_headers(self, headers: Optional[Dict[str, str]]) -> Dict[str, str]:
        merged: Dict[str, str] = {
            "Accept": "application/json",
            "Content-Type": "application/json",
        }
        if self.session.access_token:
            merged["Authorization"] = f"Bearer {self.session.access_token}"
        if headers:
            merged.update({k: str(v) for k, v in headers.items()})
        return merged

    def _send(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json_body: Any = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> ApiResponse:
        url = f"{self.base_url}{path}"
        try:
            resp = self._http.request(
                method,
                url,
                params=params or None,
                json=json_body,
                headers=self._build_headers(headers),
                verify=self.verify_ssl,
                timeout=self.timeout_seconds,
            )
        except requests.RequestException as exc:
            logger.warning("%s %s failed: %s", method, url, exc)
            return ApiResponse(ok=False, status_code=0, url=url, method=method, error=str(exc), error_kind="transport")

        parsed: Any = None
        try:
            parsed = resp.json()
        except ValueError:
            parsed = None

        ok = 200 <= int(resp.status_code) < 300
        if ok:
            return ApiResponse(ok=True, status_code=int(resp.status_code), url=url, method=method, body=parsed)

        kind = "auth" if resp.status_code == 401 else "http"
        return ApiResponse(
            ok=False,
            status_code=int(resp.status_code),
            url=url,
            method=method,
            body=parsed,
            error=envelope_message(parsed, default=f"HTTP {resp.status_code}"),
            error_kind=kind,
        )

    def request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json_body: Any = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> ApiResponse:
        method_u = (method or "GET").upper().strip()
        path = path or ""
        if not path.startswith("/"):
            path = "/" + path

        sent_token = self.session.access_token
        resp = self._send(method_u, path, params=params, json_body=json_body, headers=headers)
        if resp.status_code != 401 or path in _NO_REFRESH_PATHS:
            return resp

        if not self._refresh_after(sent_token):
            logger.info("Token refresh failed; forcing logout")
            self.session.clear()
            return resp

        retry = self._send(method_u, path, params=params, json_body=json_body, headers=headers)
        if retry.status_code == 401:
            logger.info("Request still unauthorized after refresh; forcing logout")
            self.session.clear()
        return retry

    def _refresh_after(self, sent_token: Optional[str]) -> bool:
        with self._refresh_lock:
            current = self.session.access_token
            if current and current != sent_token:
                logger.debug("Access token already refreshed by another request")
                return True
            return self._try_refresh()

    def _try_refresh(self) -> bool:
        refresh_token = self.session.refresh_token
        if not refresh_token:
            return False
        resp = self.refresh(refresh_token)
        data = resp.body.get("data") if resp.success and isinstance(resp.body, dict) else None
        if not isinstance(data, dict) or not data.get("accessToken"):
            return False
        self.session.set_tokens(data["accessToken"], data.get("refreshToken"))
        logger.info("Access token refreshed")
        return True

    def _store_auth(self, resp: ApiResponse) -> ApiResponse:
        data = resp.body.get("data") if resp.success and isinstance(resp.body, dict) else None
        if isinstance(data, dict) and data.get("accessToken"):
            self.session.set_tokens(data["accessToken"], data.get("refreshToken"))
            self.session.set_user(data.get("user"))
        return resp

    # ---------------- Auth ----------------

    def login(self, email: str, password: str) -> ApiResponse:
        resp = self.request("POST", "/auth/login", json_body={"email": email, "password": password})
        return self._store_auth(resp)

    def register(self, data: Dict[str, Any]) -> ApiResponse:
        return self._store_auth(self.request("POST", "/auth/register", json_body=data))

    def refresh(self, refresh_token: str) -> ApiResponse:
        return self.request("POST", "/auth/refresh", json_body={"refreshToken": refresh_token})

    def logout(self) -> None:
        """Best-effort server logout; the local session is always cleared."""
        try:
            if self.session.access_token:
                self._send("POST", "/auth/logout")
        finally:
            self.session.clear()

    def get_profile(self) -> ApiResponse:
        return self.request("GET", "/auth/profile")

    def update_profile(self, data: Dict[str, Any]) -> ApiResponse:
        resp = self.request("PUT", "/auth/profile", json_body=data)
        user = resp.entity("user")
        if user is not None:
            self.session.set_user(user)
        return resp

    def change_password(self, data: Dict[str, str]) -> ApiResponse:
        return self.request("PUT", "/auth/change-password", json_body=data)

    def get_users(self) -> ApiResponse:
        return self.request("GET", "/users")

    # ---------------- Projects ----------------

    def get_projects(self, filters: Optional[ProjectFilters] = None) -> ApiResponse:
        params = filters.to_params() if filters else None
        return self.request("GET", "/projects", params=params)

    def get_project(self, project_id: str) -> ApiResponse:
        return self.request("GET", f"/projects/{project_id}")

    def create_project(self, data: Dict[str, Any]) -> ApiResponse:
        return self.request("POST", "/projects", json_body=data)

    def update_project(self, project_id: str, data: Dict[str, Any]) -> ApiResponse:
        return self.request("PUT", f"/projects/{project_id}", json_body=data)

    def delete_project(self, project_id: str) -> ApiResponse:
        return self.request("DELETE", f"/projects/{project_id}")

    def get_project_stats(self, project_id: str) -> ApiResponse:
        return self.request("GET", f"/projects/{project_id}/stats")

    # ---------------- Tasks ----------------

    def get_tasks(self, filters: Optional[TaskFilters] = None) -> ApiResponse:
        params = filters.to_params() if filters else None
        return self.request("GET", "/tasks", params=params)

    def get_task(self, task_id: str) -> ApiResponse:
        return self.request("GET", f"/tasks/{task_id}")

    def create_task(self, data: Dict[str, Any]) -> ApiResponse:
        return self.request("POST", "/tasks", json_body=data)

    def update_task(self, task_id: str, data: Dict[str, Any]) -> ApiResponse:
        return self.request("PUT", f"/tasks/{task_id}", json_body=data)

    def delete_task(self, task_id: str) -> ApiResponse:
        return self.request("DELETE", f"/tasks/{task_id}")

    def add_task_comment(self, task_id: str, comment: str) -> ApiResponse:
        return self.request("POST", f"/tasks/{task_id}/comments", json_body={"comment": comment})

    def get_my_tasks(self, filters: Optional[TaskFilters] = None) -> ApiResponse:
        params = filters.to_params() if filters else None
        return self.request("GET", "/tasks/my-tasks", params=params)

    # ---------------- Analytics ----------------

    def get_dashboard_analytics(self) -> ApiResponse:
        return self.request("GET", "/analytics/dashboard")

    def get_project_analytics(self, start_date: Optional[str] = None, end_date: Optional[str] = None) -> ApiResponse:
        return self.request("GET", "/analytics/projects", params=_date_range(start_date, end_date))

    def get_team_analytics(self, start_date: Optional[str] = None, end_date: Optional[str] = None) -> ApiResponse:
        return self.request("GET", "/analytics/team", params=_date_range(start_date, end_date))


def _date_range(start_date: Optional[str], end_date: Optional[str]) -> Dict[str, str]:
    params: Dict[str, str] = {}
    if start_date:
        params["startDate"] = str(start_date)
    if end_date:
        params["endDate"] = str(end_date)
    return params
