"""Tests for the data source API."""

from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient

from autorank.config import Settings
from autorank.core.constants import DEMO_CSV_DATA
from autorank.core.exceptions import DataSourceError
from autorank.dependencies import get_data_service
from autorank.main import app
from autorank.services.data_service import DataService


@pytest.fixture
def client(test_settings: Settings):
    app.dependency_overrides[get_data_service] = lambda: DataService(test_settings)
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_preview(client: TestClient):
    response = client.post(
        "/api/v1/data/preview", json={"csv_text": DEMO_CSV_DATA, "batch_size": 3, "limit": 2}
    )

    assert response.status_code == 200
    data = response.json()
    assert data["total_records"] == 4
    assert data["batches_total"] == 2
    assert data["columns"] == ["Article ID", "Name", "Price", "Category", "Status"]
    assert len(data["rows"]) == 2
    assert data["rows"][0]["id"] == "row-1"
    assert data["rows"][0]["Price"] == 14.99
    assert data["template_url"] == "https://withpassion.decathlon.net/rank2/assets/template.xlsx"


def test_preview_drops_malformed_rows(client: TestClient):
    response = client.post("/api/v1/data/preview", json={"csv_text": "a,b\n1,2\n3\n4,5"})

    assert response.status_code == 200
    assert response.json()["total_records"] == 2


def test_preview_invalid_batch_size(client: TestClient):
    response = client.post("/api/v1/data/preview", json={"csv_text": "a\n1", "batch_size": 0})
    assert response.status_code == 422


def test_fetch_sheet(client: TestClient):
    fetch = AsyncMock(return_value=("Name\nShoes", "https://docs.google.com/export"))
    with patch("autorank.services.data_service.fetch_sheet_csv", fetch):
        response = client.post(
            "/api/v1/data/sheet",
            json={"url": "https://docs.google.com/spreadsheets/d/abc123/edit#gid=0"},
        )

    assert response.status_code == 200
    assert response.json() == {
        "csv_text": "Name\nShoes",
        "export_url": "https://docs.google.com/export",
        "from_fallback": False,
        "warnings": [],
    }


def test_fetch_sheet_fallback(client: TestClient):
    fetch = AsyncMock(side_effect=DataSourceError("Sheet download failed: HTTP 401"))
    with patch("autorank.services.data_service.fetch_sheet_csv", fetch):
        response = client.post(
            "/api/v1/data/sheet",
            json={"url": "https://docs.google.com/spreadsheets/d/abc123/edit"},
        )

    assert response.status_code == 200
    data = response.json()
    assert data["from_fallback"] is True
    assert data["csv_text"] == DEMO_CSV_DATA
    assert len(data["warnings"]) == 1


def test_fetch_sheet_invalid_url(client: TestClient):
    response = client.post("/api/v1/data/sheet", json={"url": "https://example.com"})

    assert response.status_code == 400
    assert response.json() == {
        "detail": "Invalid Google Sheet URL format.",
        "type": "DataSourceError",
    }
