from __future__ import annotations

import logging
import threading
from dataclasses import asdict, dataclass, replace
from typing import Any, Dict, List, Mapping
from uuid import uuid4


logger = logging.getLogger("tasktracker.store")


class TaskStoreError(RuntimeError):
    """Base class for failures raised by the task store."""


class TaskValidationError(TaskStoreError):
    """Raised when a task cannot be created from the supplied title."""


class TaskNotFoundError(TaskStoreError):
    """Raised when no task carries the requested id."""

    def __init__(self, task_id: str) -> None:
        super().__init__(f"Task {task_id} not found")
        self.task_id = task_id


@dataclass
class Task:
    id: str
    title: str
    completed: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "Task":
        return cls(
            id=str(payload["id"]),
            title=payload.get("title", ""),
            completed=bool(payload.get("completed", False)),
        )


class TaskStore:
    """
    In-memory, insertion-ordered collection of tasks.

    Every operation runs under a lock so concurrent request handlers see a
    consistent list. Callers only ever receive copies of the stored tasks.
    Nothing is persisted: the collection disappears with the process.
    """

    UPDATABLE_FIELDS = ("title", "completed")

    def __init__(self) -> None:
        self._tasks: List[Task] = []
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._tasks)

    def list(self) -> List[Task]:
        with self._lock:
            return [replace(task) for task in self._tasks]

    def get(self, task_id: str) -> Task:
        with self._lock:
            return replace(self._find(task_id))

    def create(self, title: Any) -> Task:
        if not title or not isinstance(title, str):
            raise TaskValidationError("Title is required and must be a string")
        task = Task(id=str(uuid4()), title=title, completed=False)
        with self._lock:
            self._tasks.append(task)
            size = len(self._tasks)
        logger.info("Created task %s (total=%d)", task.id, size)
        return replace(task)

    def update(self, task_id: str, patch: Mapping[str, Any]) -> Task:
        """
        Apply the provided ``title``/``completed`` fields to an existing task.

        Unknown keys and fields explicitly set to ``None`` are ignored. Values
        are stored as given, so an update may blank the title.
        """
        changes = {
            key: patch[key]
            for key in self.UPDATABLE_FIELDS
            if key in patch and patch[key] is not None
        }
        with self._lock:
            task = self._find(task_id)
            for key, value in changes.items():
                setattr(task, key, value)
            updated = replace(task)
        logger.info("Updated task %s fields=%s", task_id, sorted(changes))
        return updated

    def delete(self, task_id: str) -> None:
        with self._lock:
            before = len(self._tasks)
            self._tasks = [task for task in self._tasks if task.id != task_id]
            if len(self._tasks) == before:
                raise TaskNotFoundError(task_id)
            size = len(self._tasks)
        logger.info("Deleted task %s (total=%d)", task_id, size)

    def _find(self, task_id: str) -> Task:
        for task in self._tasks:
            if task.id == task_id:
                return task
        raise TaskNotFoundError(task_id)
