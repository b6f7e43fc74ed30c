"""Storage backends for task records.

Beginner terms:
- Migration: creating/updating database tables before normal reads/writes.
- CRUD: create, read, update, delete operations.
- Row factory: returns query rows as dict-like objects instead of tuples.

Three backends share one contract (`TaskStore`) and are picked from the
database URL by `build_task_store`:
- postgresql://...  -> PostgresTaskStore
- sqlite:///path    -> SqliteTaskStore
- memory://         -> InMemoryTaskStore
"""

from __future__ import annotations

import logging
import sqlite3
import threading
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, Protocol

from .errors import TaskNotFoundError, blank_title_error
from .models import Task

logger = logging.getLogger(__name__)


class TaskStore(Protocol):
    def migrate(self) -> None: ...

    def create_task(self, title: str | None, completed: bool = False) -> Task: ...

    def get_task(self, task_id: str) -> Task: ...

    def update_task(
        self,
        task_id: str,
        *,
        title: str | None = None,
        completed: bool | None = None,
    ) -> Task: ...

    def delete_task(self, task_id: str) -> None: ...

    def list_tasks(self) -> list[Task]: ...


def build_task_store(database_url: str) -> TaskStore:
    """Create the backend matching the URL scheme and migrate it."""
    scheme = database_url.split(":", 1)[0].lower()
    store: TaskStore
    if scheme in {"postgresql", "postgres"}:
        store = PostgresTaskStore(database_url)
    elif scheme == "sqlite":
        store = SqliteTaskStore(_sqlite_path(database_url))
    elif scheme == "memory":
        store = InMemoryTaskStore()
    else:
        raise ValueError(f"Unsupported database URL scheme: {scheme!r}")
    store.migrate()
    return store


def _checked_title(title: str | None) -> str:
    """Reject missing and whitespace-only titles."""
    if title is None or not title.strip():
        raise blank_title_error()
    return title


def _sqlite_path(database_url: str) -> Path:
    # sqlite:///relative.db and sqlite:////abs/path.db, as SQLAlchemy spells them.
    raw_path = database_url.split(":///", 1)[1] if ":///" in database_url else ""
    if not raw_path:
        raise ValueError("sqlite URL must look like sqlite:///path/to/tasks.db")
    return Path(raw_path)


class InMemoryTaskStore:
    """Process-local storage for tests and throwaway demos."""

    def __init__(self) -> None:
        self._tasks: dict[str, Task] = {}
        # Insertion counter breaks created_at ties in list_tasks.
        self._sequence: dict[str, int] = {}
        self._next_sequence = 1
        # Sync FastAPI routes run in a threadpool; the lock keeps the two maps in step.
        self._lock = threading.Lock()

    def migrate(self) -> None:
        return None

    def create_task(self, title: str | None, completed: bool = False) -> Task:
        task = Task(
            id=str(uuid.uuid4()),
            title=_checked_title(title),
            completed=completed,
            created_at=datetime.now(UTC),
        )
        with self._lock:
            self._tasks[task.id] = task
            self._sequence[task.id] = self._next_sequence
            self._next_sequence += 1
        return task.model_copy()

    def get_task(self, task_id: str) -> Task:
        with self._lock:
            task = self._tasks.get(task_id)
        if task is None:
            raise TaskNotFoundError(task_id)
        return task.model_copy()

    def update_task(
        self,
        task_id: str,
        *,
        title: str | None = None,
        completed: bool | None = None,
    ) -> Task:
        changes: dict[str, Any] = {}
        if title is not None:
            changes["title"] = _checked_title(title)
        if completed is not None:
            changes["completed"] = completed
        with self._lock:
            current = self._tasks.get(task_id)
            if current is None:
                raise TaskNotFoundError(task_id)
            updated = current.model_copy(update=changes)
            self._tasks[task_id] = updated
        return updated.model_copy()

    def delete_task(self, task_id: str) -> None:
        with self._lock:
            if self._tasks.pop(task_id, None) is None:
                raise TaskNotFoundError(task_id)
            self._sequence.pop(task_id, None)

    def list_tasks(self) -> list[Task]:
        with self._lock:
            ordered = sorted(
                self._tasks.values(),
                key=lambda task: (task.created_at, self._sequence[task.id]),
                reverse=True,
            )
        return [task.model_copy() for task in ordered]


class SqliteTaskStore:
    """SQLite-backed storage for running the app without a database server."""

    def __init__(self, path: Path) -> None:
        self.path = path
        self._lock = threading.Lock()

    def migrate(self) -> None:
        """Create the tasks table and ordering index if they do not exist."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self._lock, self._connect() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS tasks (
                    id TEXT PRIMARY KEY,
                    title TEXT NOT NULL,
                    completed INTEGER NOT NULL DEFAULT 0,
                    created_at TEXT NOT NULL
                )
                """)
            conn.execute("""
                CREATE INDEX IF NOT EXISTS idx_tasks_created_at
                ON tasks(created_at DESC)
                """)
        logger.info("task_store event=migrated backend=sqlite path=%s", self.path)

    def create_task(self, title: str | None, completed: bool = False) -> Task:
        task = Task(
            id=str(uuid.uuid4()),
            title=_checked_title(title),
            completed=completed,
            created_at=datetime.now(UTC),
        )
        with self._lock, self._connect() as conn:
            conn.execute(
                "INSERT INTO tasks (id, title, completed, created_at) VALUES (?, ?, ?, ?)",
                (
                    task.id,
                    task.title,
                    int(task.completed),
                    task.created_at.isoformat(timespec="microseconds"),
                ),
            )
        return task

    def get_task(self, task_id: str) -> Task:
        with self._lock, self._connect() as conn:
            row = conn.execute("SELECT * FROM tasks WHERE id = ?", (task_id,)).fetchone()
        if row is None:
            raise TaskNotFoundError(task_id)
        return self._row_to_task(row)

    def update_task(
        self,
        task_id: str,
        *,
        title: str | None = None,
        completed: bool | None = None,
    ) -> Task:
        assignments: list[str] = []
        params: list[Any] = []
        if title is not None:
            assignments.append("title = ?")
            params.append(_checked_title(title))
        if completed is not None:
            assignments.append("completed = ?")
            params.append(int(completed))
        if assignments:
            with self._lock, self._connect() as conn:
                cursor = conn.execute(
                    f"UPDATE tasks SET {', '.join(assignments)} WHERE id = ?",
                    (*params, task_id),
                )
                if cursor.rowcount == 0:
                    raise TaskNotFoundError(task_id)
        return self.get_task(task_id)

    def delete_task(self, task_id: str) -> None:
        with self._lock, self._connect() as conn:
            cursor = conn.execute("DELETE FROM tasks WHERE id = ?", (task_id,))
            if cursor.rowcount == 0:
                raise TaskNotFoundError(task_id)

    def list_tasks(self) -> list[Task]:
        with self._lock, self._connect() as conn:
            rows = conn.execute(
                "SELECT * FROM tasks ORDER BY created_at DESC, rowid DESC"
            ).fetchall()
        return [self._row_to_task(row) for row in rows]

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        """Open a connection that commits on success and always closes."""
        conn = sqlite3.connect(self.path)
        conn.row_factory = sqlite3.Row
        try:
            with conn:
                yield conn
        finally:
            conn.close()

    @staticmethod
    def _row_to_task(row: sqlite3.Row) -> Task:
        return Task(
            id=row["id"],
            title=row["title"],
            completed=bool(row["completed"]),
            created_at=datetime.fromisoformat(row["created_at"]),
        )


class PostgresTaskStore:
    """Thread-safe PostgreSQL-backed storage for Task records."""

    def __init__(self, database_url: str) -> None:
        if not database_url:
            raise ValueError("database_url is required")
        self.database_url = database_url
        # Lock guards DB operations done through this storage instance.
        self._lock = threading.Lock()
        # Lazy import helper keeps error message clear if psycopg is missing.
        self._psycopg, self._dict_row = self._load_psycopg()

    def migrate(self) -> None:
        """Create required table and index if they do not already exist."""
        with self._lock, self._connect() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS tasks (
                    id UUID PRIMARY KEY,
                    title TEXT NOT NULL,
                    completed BOOLEAN NOT NULL DEFAULT FALSE,
                    created_at TIMESTAMPTZ NOT NULL,
                    seq BIGSERIAL
                )
                """)
            # Tables created before the insertion counter existed get it backfilled.
            conn.execute("""
                ALTER TABLE tasks
                ADD COLUMN IF NOT EXISTS seq BIGSERIAL
                """)
            conn.execute("""
                CREATE INDEX IF NOT EXISTS idx_tasks_created_at_seq
                ON tasks(created_at DESC, seq DESC)
                """)
            conn.commit()
        logger.info("task_store event=migrated backend=postgres")

    def create_task(self, title: str | None, completed: bool = False) -> Task:
        """Insert a new task row and return it."""
        checked_title = _checked_title(title)
        with self._lock, self._connect() as conn:
            row = conn.execute(
                """
                INSERT INTO tasks (id, title, completed, created_at)
                VALUES (%s, %s, %s, %s)
                RETURNING *
                """,
                (uuid.uuid4(), checked_title, completed, datetime.now(tz=UTC)),
            ).fetchone()
            conn.commit()
        return self._row_to_task(row)

    def get_task(self, task_id: str) -> Task:
        """Read one task by id and convert DB row to typed Task model."""
        with self._lock, self._connect() as conn:
            row = conn.execute(
                "SELECT * FROM tasks WHERE id::text = %s",
                (task_id,),
            ).fetchone()
        if row is None:
            raise TaskNotFoundError(task_id)
        return self._row_to_task(row)

    def update_task(
        self,
        task_id: str,
        *,
        title: str | None = None,
        completed: bool | None = None,
    ) -> Task:
        """Update selected task fields while keeping unspecified fields unchanged."""
        next_title = _checked_title(title) if title is not None else None
        with self._lock, self._connect() as conn:
            row = conn.execute(
                """
                UPDATE tasks
                SET title = COALESCE(%s, title),
                    completed = COALESCE(%s, completed)
                WHERE id::text = %s
                RETURNING *
                """,
                (next_title, completed, task_id),
            ).fetchone()
            conn.commit()
        if row is None:
            raise TaskNotFoundError(task_id)
        return self._row_to_task(row)

    def delete_task(self, task_id: str) -> None:
        with self._lock, self._connect() as conn:
            cursor = conn.execute("DELETE FROM tasks WHERE id::text = %s", (task_id,))
            conn.commit()
        if cursor.rowcount == 0:
            raise TaskNotFoundError(task_id)

    def list_tasks(self) -> list[Task]:
        with self._lock, self._connect() as conn:
            rows = conn.execute(
                "SELECT * FROM tasks ORDER BY created_at DESC, seq DESC"
            ).fetchall()
        return [self._row_to_task(row) for row in rows]

    def _connect(self) -> Any:
        """Open a psycopg connection that yields dict-like rows."""
        return self._psycopg.connect(self.database_url, row_factory=self._dict_row)

    @staticmethod
    def _load_psycopg() -> tuple[Any, Any]:
        """Import psycopg and helpers with a friendly install hint on failure."""
        try:
            import psycopg
            from psycopg.rows import dict_row
        except ImportError as exc:  # pragma: no cover - exercised only without dependency
            raise RuntimeError(
                "PostgreSQL backend requires psycopg. Install with: "
                'python -m pip install "psycopg[binary]>=3.2,<4.0"'
            ) from exc
        return psycopg, dict_row

    @staticmethod
    def _row_to_task(row: Any) -> Task:
        """Map one DB row to the canonical Task model."""
        return Task(
            id=str(row["id"]),
            title=row["title"],
            completed=bool(row["completed"]),
            created_at=row["created_at"],
        )
