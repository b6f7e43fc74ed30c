"""Client-side task board state.

The board holds one mutable `BoardState` and changes it only through
`mount`, `add`, `toggle`, `delete` and `dismiss_error`. Every change waits for
the server's answer, so `state.tasks` always mirrors the last acknowledged
server list. `render()` is a pure projection of the state.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol

from .errors import TaskNotFoundError, TaskTrackerError
from .models import Task


class TaskApi(Protocol):
    def list_tasks(self) -> list[Task]: ...

    def create_task(self, title: str, *, completed: bool | None = None) -> Task: ...

    def update_task(
        self,
        task_id: str,
        *,
        title: str | None = None,
        completed: bool | None = None,
    ) -> Task: ...

    def delete_task(self, task_id: str) -> None: ...


@dataclass
class BoardState:
    tasks: list[Task] = field(default_factory=list)
    pending_input: str = ""
    loading: bool = False
    error: str | None = None


class TaskBoard:
    """Task list view driven by a TaskApi (usually TaskApiClient)."""

    def __init__(self, api: TaskApi) -> None:
        self.api = api
        self.state = BoardState()

    def mount(self) -> None:
        self.state.loading = True
        try:
            self.state.tasks = self.api.list_tasks()
            self.state.error = None
        except TaskTrackerError as exc:
            self.state.error = _message(exc)
        finally:
            self.state.loading = False

    def set_draft(self, text: str) -> None:
        self.state.pending_input = text

    def add(self) -> None:
        draft = self.state.pending_input
        if not draft.strip():
            return
        try:
            created = self.api.create_task(draft)
        except TaskTrackerError as exc:
            self.state.error = _message(exc)
            return
        self.state.tasks = [created, *self.state.tasks]
        self.state.pending_input = ""
        self.state.error = None

    def toggle(self, task_id: str) -> None:
        current = self._find(task_id)
        if current is None:
            self.state.error = _message(TaskNotFoundError(task_id))
            return
        try:
            updated = self.api.update_task(task_id, completed=not current.completed)
        except TaskTrackerError as exc:
            self.state.error = _message(exc)
            return
        self.state.tasks = [updated if task.id == task_id else task for task in self.state.tasks]
        self.state.error = None

    def delete(self, task_id: str) -> None:
        try:
            self.api.delete_task(task_id)
        except TaskTrackerError as exc:
            self.state.error = _message(exc)
            return
        self.state.tasks = [task for task in self.state.tasks if task.id != task_id]
        self.state.error = None

    def dismiss_error(self) -> None:
        self.state.error = None

    def render(self) -> list[str]:
        lines: list[str] = []
        if self.state.loading:
            lines.append("Loading tasks...")
        if self.state.error:
            lines.append(f"Error: {self.state.error}")
        if not self.state.tasks:
            lines.append("No tasks yet.")
        for task in self.state.tasks:
            mark = "x" if task.completed else " "
            created = task.created_at.strftime("%Y-%m-%d %H:%M")
            lines.append(f"[{mark}] {task.title}  (id={task.id}, created {created})")
        return lines

    def _find(self, task_id: str) -> Task | None:
        for task in self.state.tasks:
            if task.id == task_id:
                return task
        return None


def _message(exc: TaskTrackerError) -> str:
    if isinstance(exc, TaskNotFoundError):
        return "Task not found."
    return str(exc)
