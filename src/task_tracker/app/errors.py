"""Error taxonomy shared by the store, API handlers and UI client."""

from __future__ import annotations

BLANK_MESSAGE = "can't be blank"


class TaskTrackerError(Exception):
    """Base class for task tracker failures."""


class TaskNotFoundError(TaskTrackerError):
    """Referenced task id does not exist."""

    def __init__(self, task_id: str) -> None:
        super().__init__(f"Task {task_id} does not exist")
        self.task_id = task_id


class TaskValidationError(TaskTrackerError):
    """One or more fields failed validation.

    `errors` maps field name to messages, e.g. {"title": ["can't be blank"]}.
    """

    def __init__(self, errors: dict[str, list[str]]) -> None:
        super().__init__(_format_errors(errors))
        self.errors = errors


class TransportError(TaskTrackerError):
    """Client-side network or response decoding failure."""


def blank_title_error() -> TaskValidationError:
    return TaskValidationError({"title": [BLANK_MESSAGE]})


def _format_errors(errors: dict[str, list[str]]) -> str:
    parts = [f"{field} {message}" for field, messages in errors.items() for message in messages]
    return ", ".join(parts) or "invalid task"
