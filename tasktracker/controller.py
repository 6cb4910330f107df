from __future__ import annotations

import logging
import time
from typing import Callable, List, Optional

from .client import TaskApiError, TaskClient
from .store import Task


logger = logging.getLogger("tasktracker.controller")

FILTERS = ("all", "active", "completed")


class TaskController:
    """
    View state and user actions of the task list page.

    The controller never patches its cache from a mutation response: every
    successful add, toggle, edit or delete is followed by a full reload so the
    cached list always mirrors the server. Failures are reported through
    ``alert`` and leave the state untouched.
    """

    def __init__(
        self,
        client: TaskClient,
        *,
        alert: Optional[Callable[[str], None]] = None,
        delete_delay: float = 0.3,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.client = client
        self.alert = alert or (lambda message: logger.error("%s", message))
        self.delete_delay = delete_delay
        self._sleep = sleep

        self.tasks: List[Task] = []
        self.filter = "all"
        self.new_title = ""
        self.editing_id: Optional[str] = None
        self.editing_title = ""
        self.deleting_id: Optional[str] = None
        self.loading = False

    @property
    def visible_tasks(self) -> List[Task]:
        if self.filter == "active":
            return [task for task in self.tasks if not task.completed]
        if self.filter == "completed":
            return [task for task in self.tasks if task.completed]
        return list(self.tasks)

    @property
    def active_count(self) -> int:
        return len([task for task in self.tasks if not task.completed])

    def set_filter(self, value: str) -> None:
        if value not in FILTERS:
            raise ValueError(f"Unknown filter {value!r}; expected one of {', '.join(FILTERS)}")
        self.filter = value

    def mount(self) -> None:
        self.fetch_tasks()

    def fetch_tasks(self) -> None:
        self.loading = True
        try:
            self.tasks = self.client.get_tasks()
        except TaskApiError as exc:
            self.alert(f"Failed to fetch tasks: {exc}")
        finally:
            self.loading = False

    def add(self) -> None:
        if not self.new_title.strip():
            return
        try:
            self.client.add_task(self.new_title)
        except TaskApiError as exc:
            self.alert(f"Failed to add task: {exc}")
            return
        self.new_title = ""
        self.fetch_tasks()

    def toggle(self, task: Task) -> None:
        try:
            self.client.update_task(task.id, completed=not task.completed)
        except TaskApiError as exc:
            self.alert(f"Failed to update task: {exc}")
            return
        self.fetch_tasks()

    def start_edit(self, task: Task) -> None:
        self.editing_id = task.id
        self.editing_title = task.title

    def cancel_edit(self) -> None:
        self.editing_id = None
        self.editing_title = ""

    def save_edit(self, task: Task) -> None:
        try:
            self.client.update_task(task.id, title=self.editing_title)
        except TaskApiError as exc:
            self.alert(f"Failed to update task: {exc}")
            return
        self.cancel_edit()
        self.fetch_tasks()

    def delete(self, task_id: str) -> None:
        self.deleting_id = task_id
        try:
            # Row stays marked as pending removal for the delay window.
            self._sleep(self.delete_delay)
            self.client.delete_task(task_id)
            self.fetch_tasks()
        except TaskApiError as exc:
            self.alert(f"Failed to delete task: {exc}")
        finally:
            self.deleting_id = None
