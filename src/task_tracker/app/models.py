"""Pydantic models shared across API handlers, storage and the UI client.

Beginner terms used in this file:
- Model: a typed schema class used for validation/serialization.
- extra="ignore": unknown input keys are dropped instead of rejected.
- model_fields_set: the names of fields the caller actually supplied.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class Task(BaseModel):
    """Canonical task record shape returned by API/storage."""

    id: str
    title: str
    completed: bool = False
    created_at: datetime


class TaskParams(BaseModel):
    """Permitted task fields from a create/update request body.

    Only `title` and `completed` pass through; anything else is ignored.
    Absent fields stay out of `model_fields_set`, which is how an update
    tells "not sent" apart from an explicit value.
    """

    model_config = ConfigDict(extra="ignore")

    title: str | None = None
    completed: bool = False

    def changes(self) -> dict[str, object]:
        """Return only the fields present in the request."""
        return {name: getattr(self, name) for name in self.model_fields_set}
