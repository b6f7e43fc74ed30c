"""HTTP client for the task API.

Speaks the same contract the browser page uses and turns every failure into
one of the task tracker errors:
- 404                          -> TaskNotFoundError
- 422 with a field-error map   -> TaskValidationError
- anything else unexpected     -> TransportError (network, bad JSON, odd status)
"""

from __future__ import annotations

import http.client
import json
import logging
from collections.abc import Callable
from typing import Any
from urllib import error, request

from pydantic import ValidationError

from .errors import TaskNotFoundError, TaskValidationError, TransportError
from .models import Task

logger = logging.getLogger(__name__)

# (method, url, json payload or None) -> (status code, decoded body)
Transport = Callable[[str, str, dict[str, Any] | None], tuple[int, Any]]


class TaskApiClient:
    """Small task API client built on urllib."""

    def __init__(
        self,
        base_url: str = "http://127.0.0.1:8000",
        *,
        timeout_s: float = 10.0,
        transport: Transport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout_s = timeout_s
        self._transport = transport or self._request_json

    def list_tasks(self) -> list[Task]:
        data = self._call("GET", "/api/tasks")
        if not isinstance(data, list):
            raise TransportError("Expected a JSON array of tasks.")
        return [self._to_task(item) for item in data]

    def get_task(self, task_id: str) -> Task:
        return self._to_task(self._call("GET", f"/api/tasks/{task_id}", task_id=task_id))

    def create_task(self, title: str, *, completed: bool | None = None) -> Task:
        fields: dict[str, Any] = {"title": title}
        if completed is not None:
            fields["completed"] = completed
        data = self._call("POST", "/api/tasks", payload={"task": fields}, expected=201)
        return self._to_task(data)

    def update_task(
        self,
        task_id: str,
        *,
        title: str | None = None,
        completed: bool | None = None,
    ) -> Task:
        fields: dict[str, Any] = {}
        if title is not None:
            fields["title"] = title
        if completed is not None:
            fields["completed"] = completed
        data = self._call(
            "PATCH",
            f"/api/tasks/{task_id}",
            payload={"task": fields},
            task_id=task_id,
        )
        return self._to_task(data)

    def delete_task(self, task_id: str) -> None:
        self._call("DELETE", f"/api/tasks/{task_id}", expected=204, task_id=task_id)

    def _call(
        self,
        method: str,
        path: str,
        *,
        payload: dict[str, Any] | None = None,
        expected: int = 200,
        task_id: str = "",
    ) -> Any:
        status_code, data = self._transport(method, f"{self.base_url}{path}", payload)
        if status_code == expected:
            return data
        if status_code == 404:
            raise TaskNotFoundError(task_id)
        if status_code == 422 and isinstance(data, dict):
            raise TaskValidationError(_normalize_field_errors(data))
        raise TransportError(f"{method} {path} failed with HTTP {status_code}.")

    def _request_json(
        self,
        method: str,
        url: str,
        payload: dict[str, Any] | None = None,
    ) -> tuple[int, Any]:
        raw_payload: bytes | None = None
        headers = {"Accept": "application/json"}
        if payload is not None:
            raw_payload = json.dumps(payload).encode("utf-8")
            headers["Content-Type"] = "application/json"

        req = request.Request(url=url, method=method, data=raw_payload, headers=headers)
        try:
            status_code, raw_body = self._open(req)
        except (error.URLError, http.client.HTTPException, OSError) as exc:
            # URLError and socket timeouts are OSErrors; http.client failures are not.
            reason = getattr(exc, "reason", None) or str(exc) or type(exc).__name__
            logger.warning(
                "task_client event=transport_error method=%s url=%s error=%s",
                method,
                url,
                type(exc).__name__,
            )
            raise TransportError(f"Could not reach task API: {reason}") from exc
        return status_code, _decode_body(raw_body)

    def _open(self, req: request.Request) -> tuple[int, bytes]:
        """Send one request; HTTP error statuses come back as (code, body)."""
        try:
            with request.urlopen(req, timeout=self.timeout_s) as response:
                return response.status, response.read()
        except error.HTTPError as exc:
            return exc.code, exc.read()

    @staticmethod
    def _to_task(data: Any) -> Task:
        try:
            return Task.model_validate(data)
        except ValidationError as exc:
            raise TransportError("Task API returned a malformed task.") from exc


def _decode_body(raw_body: bytes) -> Any:
    if not raw_body:
        return None
    try:
        return json.loads(raw_body.decode("utf-8"))
    except UnicodeDecodeError as exc:
        raise TransportError("Task API returned a body that is not UTF-8.") from exc
    except json.JSONDecodeError as exc:
        raise TransportError("Task API returned invalid JSON.") from exc


def _normalize_field_errors(data: dict[str, Any]) -> dict[str, list[str]]:
    errors: dict[str, list[str]] = {}
    for field, messages in data.items():
        if isinstance(messages, list):
            errors[str(field)] = [str(message) for message in messages]
        else:
            errors[str(field)] = [str(messages)]
    return errors
