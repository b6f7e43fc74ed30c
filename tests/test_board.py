from __future__ import annotations

import http.client
import uuid
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

import pytest
from fastapi.testclient import TestClient

from task_tracker.app import client as client_module
from task_tracker.app.client import TaskApiClient
from task_tracker.app.errors import TaskNotFoundError, TaskValidationError, TransportError
from task_tracker.app.models import Task
from task_tracker.app.view import TaskBoard


def _task(title: str, *, completed: bool = False) -> Task:
    return Task(
        id=str(uuid.uuid4()),
        title=title,
        completed=completed,
        created_at=datetime(2026, 2, 14, 10, 0, tzinfo=UTC),
    )


class FakeApi:
    """Scriptable TaskApi double; set `fail_with` to make the next call raise."""

    def __init__(self, tasks: list[Task] | None = None) -> None:
        self.tasks = list(tasks or [])
        self.fail_with: Exception | None = None
        self.calls: list[tuple[str, Any]] = []

    def _check(self, name: str, arg: Any) -> None:
        self.calls.append((name, arg))
        if self.fail_with is not None:
            exc, self.fail_with = self.fail_with, None
            raise exc

    def list_tasks(self) -> list[Task]:
        self._check("list", None)
        return list(self.tasks)

    def create_task(self, title: str, *, completed: bool | None = None) -> Task:
        self._check("create", title)
        task = _task(title)
        self.tasks.insert(0, task)
        return task

    def update_task(
        self, task_id: str, *, title: str | None = None, completed: bool | None = None
    ) -> Task:
        self._check("update", (task_id, completed))
        for index, task in enumerate(self.tasks):
            if task.id == task_id:
                self.tasks[index] = task.model_copy(update={"completed": completed})
                return self.tasks[index]
        raise TaskNotFoundError(task_id)

    def delete_task(self, task_id: str) -> None:
        self._check("delete", task_id)
        self.tasks = [task for task in self.tasks if task.id != task_id]


def test_mount_loads_tasks() -> None:
    tasks = [_task("newer"), _task("older")]
    board = TaskBoard(FakeApi(tasks))
    board.mount()
    assert board.state.tasks == tasks
    assert board.state.loading is False
    assert board.state.error is None


def test_mount_failure_sets_error_and_stops_loading() -> None:
    api = FakeApi()
    api.fail_with = TransportError("Could not reach task API: refused")
    board = TaskBoard(api)
    board.mount()
    assert board.state.error == "Could not reach task API: refused"
    assert board.state.loading is False
    assert board.state.tasks == []


def test_add_ignores_blank_draft() -> None:
    api = FakeApi()
    board = TaskBoard(api)
    board.set_draft("   ")
    board.add()
    assert api.calls == []
    assert board.state.pending_input == "   "


def test_add_prepends_server_task_and_clears_draft() -> None:
    existing = _task("existing")
    api = FakeApi([existing])
    board = TaskBoard(api)
    board.mount()
    board.set_draft("Fresh")
    board.add()
    assert [task.title for task in board.state.tasks] == ["Fresh", "existing"]
    assert board.state.pending_input == ""


def test_add_failure_keeps_draft_and_list() -> None:
    api = FakeApi()
    board = TaskBoard(api)
    board.set_draft("Nope")
    api.fail_with = TaskValidationError({"title": ["can't be blank"]})
    board.add()
    assert board.state.tasks == []
    assert board.state.pending_input == "Nope"
    assert board.state.error == "title can't be blank"


def test_toggle_sends_negated_flag_and_replaces_entry() -> None:
    first, second = _task("first"), _task("second", completed=True)
    api = FakeApi([first, second])
    board = TaskBoard(api)
    board.mount()

    board.toggle(second.id)
    assert api.calls[-1] == ("update", (second.id, False))
    assert [task.completed for task in board.state.tasks] == [False, False]

    board.toggle(first.id)
    assert api.calls[-1] == ("update", (first.id, True))
    assert board.state.tasks[0].completed is True


def test_toggle_failure_leaves_state_untouched() -> None:
    task = _task("stubborn")
    api = FakeApi([task])
    board = TaskBoard(api)
    board.mount()
    api.fail_with = TransportError("timed out")
    board.toggle(task.id)
    assert board.state.tasks == [task]
    assert board.state.error == "timed out"


def test_toggle_unknown_id_reports_not_found() -> None:
    api = FakeApi()
    board = TaskBoard(api)
    board.toggle("missing")
    assert board.state.error == "Task not found."
    assert api.calls == []


def test_delete_removes_entry_only_after_success() -> None:
    keep, drop = _task("keep"), _task("drop")
    api = FakeApi([keep, drop])
    board = TaskBoard(api)
    board.mount()

    api.fail_with = TaskNotFoundError(drop.id)
    board.delete(drop.id)
    assert board.state.tasks == [keep, drop]
    assert board.state.error == "Task not found."

    board.delete(drop.id)
    assert board.state.tasks == [keep]


def test_error_clears_on_dismiss_or_next_success() -> None:
    api = FakeApi([_task("one")])
    board = TaskBoard(api)
    board.state.error = "old"
    board.dismiss_error()
    assert board.state.error is None

    board.state.error = "old"
    board.mount()
    assert board.state.error is None


def test_render_is_a_projection_of_state() -> None:
    board = TaskBoard(FakeApi())
    assert board.render() == ["No tasks yet."]

    done = _task("Done thing", completed=True)
    board.state.tasks = [done, _task("Open thing")]
    board.state.error = "boom"
    lines = board.render()
    assert lines[0] == "Error: boom"
    assert lines[1].startswith("[x] Done thing")
    assert f"id={done.id}" in lines[1]
    assert lines[2].startswith("[ ] Open thing")
    assert board.render() == lines


def test_board_against_live_api(
    client: TestClient,
    api_transport: Callable[[str, str, dict[str, Any] | None], tuple[int, Any]],
) -> None:
    api = TaskApiClient("http://testserver", transport=api_transport)
    board = TaskBoard(api)
    board.mount()
    assert board.state.tasks == []

    for title in ("Write docs", "Review docs"):
        board.set_draft(title)
        board.add()
    assert [task.title for task in board.state.tasks] == ["Review docs", "Write docs"]

    target = board.state.tasks[1]
    board.toggle(target.id)
    assert board.state.tasks[1].completed is True

    board.delete(board.state.tasks[0].id)
    assert [task.title for task in board.state.tasks] == ["Write docs"]

    # A fresh mount sees exactly what the server acknowledged.
    reloaded = TaskBoard(api)
    reloaded.mount()
    assert reloaded.state.tasks == board.state.tasks

    board.delete(str(uuid.uuid4()))
    assert board.state.error == "Task not found."


@pytest.mark.parametrize(
    "failure",
    [
        http.client.RemoteDisconnected("Remote end closed connection without response"),
        ConnectionResetError("connection reset by peer"),
    ],
)
def test_board_survives_dropped_connections(
    monkeypatch: pytest.MonkeyPatch, failure: Exception
) -> None:
    def drop(req: Any, timeout: float) -> None:
        raise failure

    monkeypatch.setattr(client_module.request, "urlopen", drop)
    board = TaskBoard(TaskApiClient("http://127.0.0.1:9"))
    board.mount()
    assert board.state.loading is False
    assert board.state.error is not None
    assert board.state.error.startswith("Could not reach task API")

    board.set_draft("Offline task")
    board.add()
    assert board.state.tasks == []
    assert board.state.pending_input == "Offline task"


def test_board_survives_undecodable_body(monkeypatch: pytest.MonkeyPatch) -> None:
    class BinaryResponse:
        status = 200

        def __enter__(self) -> BinaryResponse:
            return self

        def __exit__(self, *_exc: object) -> None:
            return None

        def read(self) -> bytes:
            return b"\xff\xfe garbage"

    monkeypatch.setattr(client_module.request, "urlopen", lambda req, timeout: BinaryResponse())
    board = TaskBoard(TaskApiClient("http://tasks.local"))
    board.mount()
    assert board.state.error == "Task API returned a body that is not UTF-8."
