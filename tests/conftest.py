from __future__ import annotations

from typing import Any

import pytest
from fastapi.testclient import TestClient

from formdesk.app import create_app
from formdesk.config import Settings
from formdesk.storage import init_storage


@pytest.fixture(params=["sqlite", "json"])
def settings(request: pytest.FixtureRequest, tmp_path, monkeypatch) -> Settings:
    monkeypatch.setenv("STORAGE_BACKEND", request.param)
    monkeypatch.setenv("SQLITE_PATH", str(tmp_path / "data" / "app.db"))
    monkeypatch.setenv("JSON_PATH", str(tmp_path / "data" / "store.json"))
    monkeypatch.setenv("DEFAULT_PAGE_SIZE", "10")
    return Settings()


@pytest.fixture
def storage(settings: Settings):
    return init_storage(settings)


@pytest.fixture
def client(settings: Settings) -> TestClient:
    return TestClient(create_app(settings))


@pytest.fixture
def contact_form_payload() -> dict[str, Any]:
    return {
        "title": "Contact Us",
        "description": "Tell us about yourself",
        "owner_name": "alice",
        "fields": [
            {"id": "name", "type": "text", "label": "Name", "required": True},
            {"id": "email", "type": "email", "label": "Email", "required": True},
            {"id": "topics", "type": "checkbox", "label": "Topics", "options": ["News", "Support"]},
        ],
    }


@pytest.fixture
def published_form(client: TestClient, contact_form_payload: dict[str, Any]) -> dict[str, Any]:
    created = client.post("/api/forms", json=contact_form_payload)
    assert created.status_code == 201
    form_id = created.json()["id"]
    published = client.post(f"/api/forms/{form_id}/publish", json={})
    assert published.status_code == 200
    return published.json()
