"""List loading with stale-response protection.

Every load of a list is tagged with a generation number. A result is only
applied when no newer load of the same list has been dispatched, so a slow
older request can never overwrite fresher data. Failed loads replace the
list with ``[]`` and record a message for the UI to toast.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Generic, List, Optional, Tuple, TypeVar

from .api_client import ApiResponse, TaskboardClient
from .filters import ProjectFilters, TaskFilters
from .models import Project, Task, User
from .normalize import extract_data

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ListLoader(Generic[T]):
    def __init__(self, name: str, key: Optional[str], parse: Callable[[Any], T]) -> None:
        self.name = name
        self.key = key
        self.parse = parse
        self.items: List[T] = []
        self.error: Optional[str] = None
        self.applied_generation = 0
        self._dispatched = 0
        self._lock = threading.Lock()

    @property
    def latest_generation(self) -> int:
        return self._dispatched

    def begin(self) -> int:
        with self._lock:
            self._dispatched += 1
            return self._dispatched

    def apply(self, generation: int, items: List[T], error: Optional[str] = None) -> bool:
        """Replace the list wholesale unless a newer load was dispatched."""
        with self._lock:
            if generation < self._dispatched:
                logger.debug("Discarding stale %s result (generation %s < %s)", self.name, generation, self._dispatched)
                return False
            self.items = list(items)
            self.error = error
            self.applied_generation = generation
            return True

    def resolve(self, resp: ApiResponse) -> Tuple[List[T], Optional[str]]:
        if not resp.success:
            logger.warning("Failed to load %s: %s", self.name, resp.message)
            return [], f"Failed to load {self.name}"
        return [self.parse(raw) for raw in resp.items(self.key)], None

    def load(self, fetch: Callable[[], ApiResponse]) -> List[T]:
        generation = self.begin()
        items, error = self.resolve(fetch())
        self.apply(generation, items, error)
        return self.items


def project_loader() -> ListLoader[Project]:
    return ListLoader("projects", "projects", Project.from_dict)


def task_loader() -> ListLoader[Task]:
    return ListLoader("tasks", "tasks", Task.from_dict)


@dataclass
class DashboardData:
    analytics: Optional[Dict[str, Any]] = None
    projects: List[Project] = field(default_factory=list)
    tasks: List[Task] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)


def load_dashboard(
    client: TaskboardClient,
    limit: Optional[int] = None,
    *,
    projects: Optional[ListLoader[Project]] = None,
    tasks: Optional[ListLoader[Task]] = None,
) -> DashboardData:
    """Fetch analytics, projects and tasks concurrently and combine them."""
    limit = limit or client.config.dashboard_limit
    projects = projects or project_loader()
    tasks = tasks or task_loader()
    project_gen = projects.begin()
    task_gen = tasks.begin()

    with ThreadPoolExecutor(max_workers=3, thread_name_prefix="dashboard") as pool:
        analytics_future = pool.submit(client.get_dashboard_analytics)
        projects_future = pool.submit(client.get_projects, ProjectFilters(limit=limit))
        tasks_future = pool.submit(client.get_tasks, TaskFilters(limit=limit))
        analytics_resp = analytics_future.result()
        projects_resp = projects_future.result()
        tasks_resp = tasks_future.result()

    data = DashboardData()
    if analytics_resp.success:
        data.analytics = extract_data(analytics_resp.body)
    else:
        logger.warning("Failed to load analytics: %s", analytics_resp.message)
        data.errors.append("Failed to load analytics")

    for loader, generation, resp in ((projects, project_gen, projects_resp), (tasks, task_gen, tasks_resp)):
        items, error = loader.resolve(resp)
        loader.apply(generation, items, error)
        if error:
            data.errors.append(error)

    data.projects = list(projects.items)
    data.tasks = list(tasks.items)
    return data


def load_project_detail(client: TaskboardClient, project_id: str) -> Tuple[Optional[Project], List[Task]]:
    """``GET /projects/{id}`` returns the project plus its tasks."""
    resp = client.get_project(project_id)
    raw = resp.entity("project")
    if raw is None:
        return None, []
    return Project.from_dict(raw), [Task.from_dict(t) for t in resp.items("tasks")]


def load_task(client: TaskboardClient, task_id: str) -> Optional[Task]:
    raw = client.get_task(task_id).entity("task")
    return Task.from_dict(raw) if raw is not None else None


def load_users(client: TaskboardClient) -> List[User]:
    """Active users for team assignment; ``[]`` on failure."""
    resp = client.get_users()
    if not resp.success:
        return []
    body = resp.body if isinstance(resp.body, dict) else {}
    data = body.get("data")
    if isinstance(data, list):
        return [User.from_dict(u) for u in data if isinstance(u, dict)]
    return [User.from_dict(u) for u in resp.items("users") if isinstance(u, dict)]
