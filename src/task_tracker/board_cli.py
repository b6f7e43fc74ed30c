"""Terminal front end for a running task tracker.

Usage:
  task-tracker-board list
  task-tracker-board add "Write release notes"
  task-tracker-board toggle <task-id>
  task-tracker-board delete <task-id>

Each command mounts the board (fetches the list), applies one action and
prints the rendered board. Exit status is 1 when the board ends with an error.
"""

from __future__ import annotations

import argparse
import os
import sys
from collections.abc import Sequence

from .app.client import TaskApiClient
from .app.view import TaskBoard


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="List and edit tasks from the terminal.")
    parser.add_argument(
        "--base-url",
        type=str,
        default=os.getenv("TASK_TRACKER_BASE_URL", "http://127.0.0.1:8000"),
        help="Task API base URL (default: TASK_TRACKER_BASE_URL or http://127.0.0.1:8000).",
    )
    parser.add_argument(
        "--timeout-s",
        type=float,
        default=_env_float("TASK_TRACKER_TIMEOUT_S", default=10.0),
        help="Socket timeout per request in seconds.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("list", help="Show all tasks, newest first.")
    add_parser = subparsers.add_parser("add", help="Create a task.")
    add_parser.add_argument("title")
    toggle_parser = subparsers.add_parser("toggle", help="Flip a task's completed flag.")
    toggle_parser.add_argument("task_id")
    delete_parser = subparsers.add_parser("delete", help="Delete a task.")
    delete_parser.add_argument("task_id")
    return parser


def run(board: TaskBoard, args: argparse.Namespace) -> int:
    board.mount()
    if board.state.error is None:
        if args.command == "add":
            board.set_draft(args.title)
            board.add()
        elif args.command == "toggle":
            board.toggle(args.task_id)
        elif args.command == "delete":
            board.delete(args.task_id)
    for line in board.render():
        print(line)
    return 1 if board.state.error else 0


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    client = TaskApiClient(args.base_url, timeout_s=args.timeout_s)
    return run(TaskBoard(client), args)


def _env_float(name: str, *, default: float) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


if __name__ == "__main__":
    sys.exit(main())
