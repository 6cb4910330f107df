from __future__ import annotations

from typing import Tuple

import requests

from tasktracker.store import TaskStore


def test_root_reports_liveness(api: Tuple[TaskStore, str]) -> None:
    _, base_url = api
    response = requests.get(base_url, timeout=2)
    assert response.status_code == 200
    assert response.text == "Backend is running!"
    assert response.headers["content-type"].startswith("text/plain")


def test_ui_page_served(api: Tuple[TaskStore, str]) -> None:
    _, base_url = api
    response = requests.get(f"{base_url}/ui", timeout=2)
    assert response.status_code == 200
    assert "<!DOCTYPE html>" in response.text
    assert "Task Manager" in response.text


def test_list_starts_empty(api: Tuple[TaskStore, str]) -> None:
    _, base_url = api
    response = requests.get(f"{base_url}/tasks", timeout=2)
    assert response.status_code == 200
    assert response.json() == []


def test_create_returns_201(api: Tuple[TaskStore, str]) -> None:
    store, base_url = api
    response = requests.post(f"{base_url}/tasks", json={"title": "Buy milk"}, timeout=2)
    assert response.status_code == 201
    body = response.json()
    assert body["title"] == "Buy milk"
    assert body["completed"] is False
    assert isinstance(body["id"], str)
    assert [task.id for task in store.list()] == [body["id"]]


def test_create_rejects_bad_titles(api: Tuple[TaskStore, str]) -> None:
    store, base_url = api
    for payload in ({}, {"title": ""}, {"title": 7}, {"title": None}):
        response = requests.post(f"{base_url}/tasks", json=payload, timeout=2)
        assert response.status_code == 400, payload
        assert response.json() == {"error": "Title is required and must be a string"}
    assert len(store) == 0


def test_create_rejects_malformed_body(api: Tuple[TaskStore, str]) -> None:
    store, base_url = api
    response = requests.post(
        f"{base_url}/tasks",
        data="not json",
        headers={"Content-Type": "application/json"},
        timeout=2,
    )
    assert response.status_code == 400
    assert "error" in response.json()
    response = requests.post(f"{base_url}/tasks", json=["Buy milk"], timeout=2)
    assert response.status_code == 400
    assert len(store) == 0


def test_update_unknown_id_returns_404(api: Tuple[TaskStore, str]) -> None:
    store, base_url = api
    store.create("Buy milk")
    before = store.list()
    response = requests.put(f"{base_url}/tasks/missing", json={"completed": True}, timeout=2)
    assert response.status_code == 404
    assert response.json() == {"error": "Task not found"}
    assert store.list() == before


def test_update_title_only(api: Tuple[TaskStore, str]) -> None:
    store, base_url = api
    task = store.create("Buy milk")
    store.update(task.id, {"completed": True})
    response = requests.put(f"{base_url}/tasks/{task.id}", json={"title": "Buy bread"}, timeout=2)
    assert response.status_code == 200
    assert response.json() == {"id": task.id, "title": "Buy bread", "completed": True}


def test_update_with_empty_body_changes_nothing(api: Tuple[TaskStore, str]) -> None:
    store, base_url = api
    task = store.create("Buy milk")
    response = requests.put(f"{base_url}/tasks/{task.id}", timeout=2)
    assert response.status_code == 200
    assert response.json() == task.to_dict()


def test_delete_unknown_id_returns_404(api: Tuple[TaskStore, str]) -> None:
    store, base_url = api
    store.create("Buy milk")
    response = requests.delete(f"{base_url}/tasks/missing", timeout=2)
    assert response.status_code == 404
    assert response.json() == {"error": "Task not found"}
    assert len(store) == 1


def test_list_count_after_creates_and_deletes(api: Tuple[TaskStore, str]) -> None:
    _, base_url = api
    ids = []
    for index in range(5):
        response = requests.post(f"{base_url}/tasks", json={"title": f"task {index}"}, timeout=2)
        ids.append(response.json()["id"])
    for task_id in ids[1:3]:
        assert requests.delete(f"{base_url}/tasks/{task_id}", timeout=2).status_code == 204
    listed = requests.get(f"{base_url}/tasks", timeout=2).json()
    assert [item["id"] for item in listed] == [ids[0], ids[3], ids[4]]


def test_cors_allows_configured_origin(api: Tuple[TaskStore, str]) -> None:
    _, base_url = api
    response = requests.get(
        f"{base_url}/tasks", headers={"Origin": "http://localhost:5173"}, timeout=2
    )
    assert response.headers.get("access-control-allow-origin") == "http://localhost:5173"
    response = requests.get(
        f"{base_url}/tasks", headers={"Origin": "http://evil.example"}, timeout=2
    )
    assert "access-control-allow-origin" not in response.headers


def test_end_to_end_scenario(api: Tuple[TaskStore, str]) -> None:
    _, base_url = api
    session = requests.Session()

    created = session.post(f"{base_url}/tasks", json={"title": "Buy milk"}, timeout=2)
    assert created.status_code == 201
    first = created.json()
    assert first["completed"] is False

    second = session.post(f"{base_url}/tasks", json={"title": "Walk dog"}, timeout=2).json()

    listed = session.get(f"{base_url}/tasks", timeout=2).json()
    assert [item["title"] for item in listed] == ["Buy milk", "Walk dog"]

    updated = session.put(f"{base_url}/tasks/{first['id']}", json={"completed": True}, timeout=2)
    assert updated.status_code == 200
    assert updated.json() == {"id": first["id"], "title": "Buy milk", "completed": True}

    deleted = session.delete(f"{base_url}/tasks/{second['id']}", timeout=2)
    assert deleted.status_code == 204
    assert deleted.content == b""

    listed = session.get(f"{base_url}/tasks", timeout=2).json()
    assert listed == [{"id": first["id"], "title": "Buy milk", "completed": True}]
    session.close()
