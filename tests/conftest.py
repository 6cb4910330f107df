from __future__ import annotations

import socket
import sys
import threading
import time
from pathlib import Path
from typing import Iterator, List, Optional, Tuple

import pytest
import requests
import uvicorn

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from tasktracker.client import TaskApiError  # noqa: E402
from tasktracker.main import create_app  # noqa: E402
from tasktracker.settings import SettingsManager  # noqa: E402
from tasktracker.store import Task, TaskNotFoundError, TaskStore  # noqa: E402


def _find_free_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


class _ThreadedServer(uvicorn.Server):
    # Signal handlers can only be installed from the main thread.
    def install_signal_handlers(self) -> None:
        pass


@pytest.fixture(scope="module")
def live_server(tmp_path_factory: pytest.TempPathFactory) -> Iterator[Tuple[TaskStore, str]]:
    settings_dir = tmp_path_factory.mktemp("settings")
    settings_manager = SettingsManager(settings_dir / "settings.json", environ={})
    store = TaskStore()
    app = create_app(store=store, settings_manager=settings_manager)

    port = _find_free_port()
    server = _ThreadedServer(
        uvicorn.Config(app, host="127.0.0.1", port=port, log_level="error")
    )
    thread = threading.Thread(target=server.run, name="uvicorn-test", daemon=True)
    thread.start()

    base_url = f"http://127.0.0.1:{port}"
    deadline = time.time() + 10
    while time.time() < deadline:
        try:
            response = requests.get(base_url, timeout=1)
        except requests.RequestException:
            time.sleep(0.1)
            continue
        if response.status_code == 200:
            break
    else:
        server.should_exit = True
        thread.join(timeout=2)
        pytest.fail("Server did not start within timeout.")

    yield store, base_url

    server.should_exit = True
    thread.join(timeout=5)


@pytest.fixture()
def api(live_server: Tuple[TaskStore, str]) -> Iterator[Tuple[TaskStore, str]]:
    """Live server with an emptied store for each test."""
    store, base_url = live_server
    for task in store.list():
        store.delete(task.id)
    yield store, base_url


class FakeTaskClient:
    """
    In-process stand-in for TaskClient backed by a real TaskStore.

    Set ``fail_on`` to a method name to make that call raise TaskApiError.
    """

    def __init__(self, store: Optional[TaskStore] = None) -> None:
        self.store = store or TaskStore()
        self.calls: List[str] = []
        self.fail_on: Optional[str] = None

    def _record(self, name: str) -> None:
        self.calls.append(name)
        if self.fail_on == name:
            raise TaskApiError(f"{name} failed", 500)

    def get_tasks(self) -> List[Task]:
        self._record("get_tasks")
        return self.store.list()

    def add_task(self, title: str) -> Task:
        self._record("add_task")
        return self.store.create(title)

    def update_task(self, task_id: str, **changes) -> Task:
        self._record("update_task")
        try:
            return self.store.update(task_id, changes)
        except TaskNotFoundError as exc:
            raise TaskApiError('{"error":"Task not found"}', 404) from exc

    def delete_task(self, task_id: str) -> None:
        self._record("delete_task")
        try:
            self.store.delete(task_id)
        except TaskNotFoundError as exc:
            raise TaskApiError("Failed to delete task", 404) from exc


@pytest.fixture()
def fake_client() -> FakeTaskClient:
    return FakeTaskClient()
