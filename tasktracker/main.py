from __future__ import annotations

import json
import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse, PlainTextResponse, Response
import uvicorn

from .settings import SettingsManager, load_settings
from .store import TaskNotFoundError, TaskStore, TaskValidationError
from .templates import render_app_page


def _configure_logging(log_file: Path) -> logging.Logger:
    logger = logging.getLogger("tasktracker")
    if logger.handlers:
        return logger
    logger.setLevel(logging.DEBUG)
    formatter = logging.Formatter(
        "%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    log_file.parent.mkdir(parents=True, exist_ok=True)
    file_handler = RotatingFileHandler(
        log_file, maxBytes=5 * 1024 * 1024, backupCount=3, encoding="utf-8"
    )
    file_handler.setFormatter(formatter)
    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(logging.INFO)
    stream_handler.setFormatter(formatter)
    logger.addHandler(file_handler)
    logger.addHandler(stream_handler)
    logger.propagate = False
    logger.debug("Logging initialised, writing to %s", log_file)
    return logger


logger = logging.getLogger("tasktracker")


def _error(message: str, status_code: int) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status_code)


async def _read_json_object(request: Request) -> Optional[Dict[str, Any]]:
    """
    Decode the request body as a JSON object; an empty body counts as ``{}``.

    Returns ``None`` when the body is not a JSON object.
    """
    body_bytes = await request.body()
    if not body_bytes.strip():
        return {}
    try:
        payload = json.loads(body_bytes.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError):
        return None
    if not isinstance(payload, dict):
        return None
    return payload


def create_app(
    store: Optional[TaskStore] = None,
    settings_manager: Optional[SettingsManager] = None,
) -> FastAPI:
    """
    Build the task API around ``store``.

    The store is owned by the caller when supplied, which lets tests inspect it
    directly; otherwise a fresh empty store is created for this app.
    """
    settings_manager = settings_manager or load_settings()
    settings = settings_manager.settings
    _configure_logging(settings_manager.log_file)
    task_store = store if store is not None else TaskStore()

    app = FastAPI(title="Task Tracker")
    app.state.task_store = task_store
    app.state.settings = settings
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings["server"]["cors_origin"]],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/", response_class=PlainTextResponse)
    async def root() -> PlainTextResponse:
        return PlainTextResponse("Backend is running!")

    @app.get("/ui", response_class=HTMLResponse)
    async def ui_page() -> HTMLResponse:
        delay = float(settings["client"].get("delete_delay", 0.3))
        return HTMLResponse(render_app_page(api_url="", delete_delay_ms=int(delay * 1000)))

    @app.get("/tasks", response_class=JSONResponse)
    async def list_tasks() -> JSONResponse:
        tasks: List[Dict[str, Any]] = [task.to_dict() for task in task_store.list()]
        return JSONResponse(tasks)

    @app.post("/tasks")
    async def create_task(request: Request) -> JSONResponse:
        payload = await _read_json_object(request)
        if payload is None:
            return _error("Request body must be a JSON object", status.HTTP_400_BAD_REQUEST)
        try:
            task = task_store.create(payload.get("title"))
        except TaskValidationError as exc:
            logger.info("Rejected task creation: %s", exc)
            return _error(str(exc), status.HTTP_400_BAD_REQUEST)
        return JSONResponse(task.to_dict(), status_code=status.HTTP_201_CREATED)

    @app.put("/tasks/{task_id}")
    async def update_task(task_id: str, request: Request) -> JSONResponse:
        payload = await _read_json_object(request)
        if payload is None:
            return _error("Request body must be a JSON object", status.HTTP_400_BAD_REQUEST)
        try:
            task = task_store.update(task_id, payload)
        except TaskNotFoundError:
            logger.info("Update for unknown task %s", task_id)
            return _error("Task not found", status.HTTP_404_NOT_FOUND)
        return JSONResponse(task.to_dict())

    @app.delete("/tasks/{task_id}")
    async def delete_task(task_id: str) -> Response:
        try:
            task_store.delete(task_id)
        except TaskNotFoundError:
            logger.info("Delete for unknown task %s", task_id)
            return _error("Task not found", status.HTTP_404_NOT_FOUND)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    logger.info(
        "Application ready (environment=%s cors_origin=%s)",
        settings.get("environment"),
        settings["server"]["cors_origin"],
    )
    return app


def run() -> None:
    settings_manager = load_settings()
    settings = settings_manager.settings
    application = create_app(settings_manager=settings_manager)
    host = settings["server"]["host"]
    port = int(settings["server"]["port"])
    logger.info("Server running on http://%s:%d", host, port)
    logger.info("Environment: %s", settings.get("environment", "development"))
    uvicorn.run(application, host=host, port=port, log_level="info")


# Convenience include for uvicorn.
app = create_app()

__all__ = ["app", "create_app", "run"]


if __name__ == "__main__":
    run()
