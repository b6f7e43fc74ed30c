"""FastAPI application wiring for the task tracker.

Beginner terms used in this file:
- FastAPI app: the main web application object.
- Route/path operation: a function exposed over HTTP (for example, GET /health).
- Exception handler: turns a raised domain error into an HTTP response.
- app.state: a place to store shared runtime objects (store, handlers).

Serve with: uvicorn task_tracker.main:create_app --factory
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

from fastapi import Body, FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import HTMLResponse, JSONResponse

from .app.errors import TaskNotFoundError, TaskValidationError
from .app.handlers import TaskHandlers
from .app.models import Task
from .app.storage import TaskStore, build_task_store
from .app.ui import render_homepage
from .seed import seed_tasks

logger = logging.getLogger(__name__)


def create_app(store: TaskStore | None = None) -> FastAPI:
    """Application factory.

    This pattern builds and returns a fully configured FastAPI app instance.
    Tests pass their own `store`; otherwise the store comes from
    TASK_TRACKER_DATABASE_URL.
    """
    # Load local .env values into process environment if keys are not already set.
    _load_env_file(Path(".env"))

    if store is None:
        # Fail fast if required configuration is missing.
        database_url = os.getenv("TASK_TRACKER_DATABASE_URL", "").strip()
        if not database_url:
            raise RuntimeError("TASK_TRACKER_DATABASE_URL is required.")
        store = build_task_store(database_url)

    if _env_flag("TASK_TRACKER_SEED_ON_START", default=False):
        created = seed_tasks(store)
        logger.info("task_app event=seeded count=%s", len(created))

    app = FastAPI(title="task_tracker", version="0.1.0")
    app.state.store = store
    app.state.handlers = TaskHandlers(store)

    @app.exception_handler(TaskNotFoundError)
    async def not_found(_: Request, exc: TaskNotFoundError) -> JSONResponse:
        logger.info("task_api event=not_found task_id=%s", exc.task_id)
        return JSONResponse(status_code=404, content={"detail": "Task not found"})

    @app.exception_handler(TaskValidationError)
    async def unprocessable(_: Request, exc: TaskValidationError) -> JSONResponse:
        logger.info("task_api event=invalid errors=%s", exc.errors)
        return JSONResponse(status_code=422, content=exc.errors)

    @app.exception_handler(RequestValidationError)
    async def malformed_request(_: Request, exc: RequestValidationError) -> JSONResponse:
        errors = _request_field_errors(exc)
        logger.info("task_api event=malformed_request errors=%s", errors)
        return JSONResponse(status_code=422, content=errors)

    # Multiple health endpoints map to the same function for compatibility with
    # different probes/load balancers.
    @app.get("/health")
    @app.get("/healthz")
    @app.get("/live")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/", response_class=HTMLResponse)
    def home() -> str:
        return render_homepage()

    @app.get("/api/tasks", response_model=list[Task])
    def list_tasks() -> list[Task]:
        return app.state.handlers.list_tasks()

    @app.get("/api/tasks/{task_id}", response_model=Task)
    def show_task(task_id: str) -> Task:
        return app.state.handlers.show_task(task_id)

    # Bodies are read raw so that the allow-list in TaskHandlers, not a
    # request model, decides which fields survive.
    @app.post("/api/tasks", response_model=Task, status_code=201)
    def create_task(payload: Any = Body(default=None)) -> Task:
        return app.state.handlers.create_task(payload)

    @app.patch("/api/tasks/{task_id}", response_model=Task)
    @app.put("/api/tasks/{task_id}", response_model=Task)
    def update_task(task_id: str, payload: Any = Body(default=None)) -> Task:
        return app.state.handlers.update_task(task_id, payload)

    @app.delete("/api/tasks/{task_id}", status_code=204)
    def delete_task(task_id: str) -> Response:
        app.state.handlers.delete_task(task_id)
        return Response(status_code=204)

    return app


def _request_field_errors(exc: RequestValidationError) -> dict[str, list[str]]:
    """Reshape FastAPI request errors into the field -> messages map used for 422s.

    Undecodable JSON is reported under "body"; other entries use the innermost
    location name.
    """
    errors: dict[str, list[str]] = {}
    for item in exc.errors():
        loc = [str(part) for part in item.get("loc", ())]
        if item.get("type") == "json_invalid" or len(loc) < 2:
            field = loc[0] if loc else "body"
        else:
            field = loc[-1]
        errors.setdefault(field, []).append(str(item.get("msg", "is invalid")))
    return errors


def _env_flag(name: str, *, default: bool) -> bool:
    """Read a 0/1 style env var; return default when unset."""
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    return raw_value.strip().lower() in {"1", "true", "yes", "on"}


def _load_env_file(path: Path) -> None:
    """Minimal .env loader used to avoid an external dependency for this project."""
    if not path.exists():
        return

    for raw_line in path.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        value = value.strip()
        if not key:
            continue
        if (value.startswith('"') and value.endswith('"')) or (
            value.startswith("'") and value.endswith("'")
        ):
            value = value[1:-1]
        os.environ.setdefault(key, value)
