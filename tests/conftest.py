from __future__ import annotations

from collections.abc import Callable, Iterator
from typing import Any

import pytest
from fastapi.testclient import TestClient

from task_tracker import main as main_module
from task_tracker.app.storage import InMemoryTaskStore


@pytest.fixture
def store() -> InMemoryTaskStore:
    return InMemoryTaskStore()


@pytest.fixture
def client(monkeypatch: pytest.MonkeyPatch) -> Iterator[TestClient]:
    monkeypatch.setenv("TASK_TRACKER_DATABASE_URL", "memory://")
    monkeypatch.delenv("TASK_TRACKER_SEED_ON_START", raising=False)
    monkeypatch.setattr(main_module, "_load_env_file", lambda _path: None)
    app = main_module.create_app()
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def api_transport(
    client: TestClient,
) -> Callable[[str, str, dict[str, Any] | None], tuple[int, Any]]:
    """Route TaskApiClient requests through a TestClient instead of a socket."""

    def transport(method: str, url: str, payload: dict[str, Any] | None) -> tuple[int, Any]:
        response = client.request(method, url, json=payload)
        return response.status_code, (response.json() if response.content else None)

    return transport
