from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional

import requests

from .store import Task


logger = logging.getLogger("tasktracker.client")


class TaskApiError(RuntimeError):
    """Raised when the task API answers with an error or cannot be reached."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class TaskClient:
    """
    Minimal HTTP client for the task API.

    Task ids are passed through untouched as opaque strings.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:5000",
        timeout: float = 10,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def get_tasks(self) -> List[Task]:
        response = self._request("GET", "/tasks")
        return [Task.from_dict(item) for item in self._decode(response)]

    def add_task(self, title: str) -> Task:
        response = self._request("POST", "/tasks", payload={"title": title})
        return Task.from_dict(self._decode(response))

    def update_task(self, task_id: str, **changes: Any) -> Task:
        response = self._request("PUT", f"/tasks/{task_id}", payload=changes)
        return Task.from_dict(self._decode(response))

    def delete_task(self, task_id: str) -> None:
        response = self._request("DELETE", f"/tasks/{task_id}", check=False)
        if response.status_code >= 400:
            raise TaskApiError("Failed to delete task", response.status_code)

    def close(self) -> None:
        self.session.close()

    def _request(
        self,
        method: str,
        path: str,
        *,
        payload: Optional[Dict[str, Any]] = None,
        check: bool = True,
    ) -> requests.Response:
        url = f"{self.base_url}{path}"
        headers = {}
        data = None
        if payload is not None:
            headers["Content-Type"] = "application/json"
            data = json.dumps(payload)
        try:
            response = self.session.request(
                method, url, headers=headers, data=data, timeout=self.timeout
            )
        except requests.RequestException as exc:
            logger.warning("%s %s failed: %s", method, url, exc)
            raise TaskApiError(f"Could not reach task API at {self.base_url}: {exc}") from exc
        logger.debug("%s %s -> %d", method, url, response.status_code)
        if check and response.status_code >= 400:
            raise TaskApiError(response.text or "API error", response.status_code)
        return response

    @staticmethod
    def _decode(response: requests.Response) -> Any:
        try:
            return response.json()
        except ValueError as exc:
            raise TaskApiError("Failed to decode task API response as JSON.") from exc
