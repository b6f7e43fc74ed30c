"""Request handlers for the task resource.

Each handler does its own setup instead of relying on framework hooks:
1) parse the id (anything that is not a UUID cannot name a task),
2) load the record or fail with TaskNotFoundError,
3) filter the request body down to the permitted fields,
4) delegate to the store.

FastAPI routes in `task_tracker.main` stay thin wrappers around these.
"""

from __future__ import annotations

import logging
import uuid
from typing import Any

from pydantic import ValidationError

from .errors import TaskNotFoundError, TaskValidationError
from .models import Task, TaskParams
from .storage import TaskStore

logger = logging.getLogger(__name__)

PERMITTED_FIELDS = ("title", "completed")


def parse_task_id(raw_id: str) -> str:
    """Normalize a path id, treating malformed ids as missing records."""
    try:
        return str(uuid.UUID(str(raw_id)))
    except ValueError as exc:
        raise TaskNotFoundError(str(raw_id)) from exc


def permit_task_params(body: Any) -> TaskParams:
    """Apply the allow-list to a `{"task": {...}}` body.

    Unknown keys are dropped silently. A missing or non-object envelope
    counts as an empty field set; type errors on permitted fields are
    reported per field.
    """
    envelope = body.get("task") if isinstance(body, dict) else None
    if not isinstance(envelope, dict):
        envelope = {}
    permitted = {key: envelope[key] for key in PERMITTED_FIELDS if key in envelope}
    try:
        return TaskParams.model_validate(permitted)
    except ValidationError as exc:
        raise TaskValidationError(_field_errors(exc)) from exc


class TaskHandlers:
    """Stateless handlers mapping one-to-one to store operations."""

    def __init__(self, store: TaskStore) -> None:
        self.store = store

    def list_tasks(self) -> list[Task]:
        return self.store.list_tasks()

    def show_task(self, raw_id: str) -> Task:
        return self.store.get_task(parse_task_id(raw_id))

    def create_task(self, body: Any) -> Task:
        params = permit_task_params(body)
        task = self.store.create_task(params.title, completed=params.completed)
        logger.info("task_api event=created task_id=%s completed=%s", task.id, task.completed)
        return task

    def update_task(self, raw_id: str, body: Any) -> Task:
        task_id = parse_task_id(raw_id)
        current = self.store.get_task(task_id)
        changes = permit_task_params(body).changes()
        title = changes.get("title")
        if "title" in changes and title is None:
            # An explicit null title still has to fail the blank check.
            title = ""
        updated = self.store.update_task(
            current.id,
            title=title,
            completed=changes.get("completed"),
        )
        logger.info(
            "task_api event=updated task_id=%s fields=%s",
            task_id,
            ",".join(sorted(changes)) or "-",
        )
        return updated

    def delete_task(self, raw_id: str) -> None:
        task_id = parse_task_id(raw_id)
        current = self.store.get_task(task_id)
        self.store.delete_task(current.id)
        logger.info("task_api event=deleted task_id=%s", task_id)


def _field_errors(exc: ValidationError) -> dict[str, list[str]]:
    """Collapse pydantic error entries into a field -> messages map."""
    errors: dict[str, list[str]] = {}
    for item in exc.errors():
        field = str(item["loc"][0]) if item["loc"] else "task"
        errors.setdefault(field, []).append(item["msg"])
    return errors
