"""Reset a task store to a small set of sample tasks.

Usage:
  task-tracker-seed --database-url sqlite:///data/tasks.db
"""

from __future__ import annotations

import argparse
import os

from .app.models import Task
from .app.storage import TaskStore, build_task_store

SAMPLE_TASKS: tuple[tuple[str, bool], ...] = (
    ("Learn FastAPI", True),
    ("Build a task tracker app", False),
    ("Add a browser front end", False),
    ("Deploy to production", False),
)


def seed_tasks(store: TaskStore) -> list[Task]:
    """Delete every task, then insert the samples. Safe to run repeatedly."""
    for task in store.list_tasks():
        store.delete_task(task.id)
    return [store.create_task(title, completed=completed) for title, completed in SAMPLE_TASKS]


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Replace all tasks with sample data.")
    parser.add_argument(
        "--database-url",
        type=str,
        default=os.getenv("TASK_TRACKER_DATABASE_URL", ""),
        help="Store URL (default: TASK_TRACKER_DATABASE_URL).",
    )
    return parser.parse_args()


def main() -> None:
    args = _parse_args()
    if not args.database_url:
        raise SystemExit("TASK_TRACKER_DATABASE_URL or --database-url is required.")
    created = seed_tasks(build_task_store(args.database_url))
    print(f"Created {len(created)} tasks")


if __name__ == "__main__":
    main()
