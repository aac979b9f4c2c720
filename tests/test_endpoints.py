"""
Test per endpoint FastAPI (preview/commit/health).
"""
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from api.main import app
from api.routers.catalog import get_ai_client, get_store
from tests.mocks import FakeCatalogStore

LISTINO_TEXT = "Sr. No | Item List\n1 | Dalfi Dark Chocolate\n2 | Davidoff Coffee\n"


@pytest.fixture
def fake_store():
    return FakeCatalogStore()


@pytest.fixture
def client(fake_store):
    app.dependency_overrides[get_store] = lambda: fake_store
    app.dependency_overrides[get_ai_client] = lambda: None
    yield TestClient(app)
    app.dependency_overrides.clear()


def _pdf_upload(content: bytes = b"%PDF-1.4 listino", content_type: str = "application/pdf"):
    return {"file": ("listino.pdf", content, content_type)}


class TestCatalogEndpoints:
    """Test endpoint import catalogo."""

    def test_preview(self, client):
        with patch("ingest.text_extract.decode_pdf_text", return_value=LISTINO_TEXT):
            response = client.post("/api/catalog/preview", files=_pdf_upload())

        assert response.status_code == 200
        data = response.json()
        assert data["products"] == ["Dalfi Dark Chocolate", "Davidoff Coffee"]
        assert data["productCount"] == 2
        assert data["usedAI"] is False
        assert [c["name"] for c in data["categories"]] == ["Chocolates", "Coffee"]

    def test_preview_not_pdf(self, client):
        response = client.post("/api/catalog/preview", files=_pdf_upload(b"a,b", "text/csv"))

        assert response.status_code == 400
        assert response.json()["detail"] == "File must be a PDF"

    def test_preview_missing_file(self, client):
        response = client.post("/api/catalog/preview", data={"correlation_id": "test-123"})

        assert response.status_code == 400
        assert response.json()["detail"] == "PDF file is required"

    def test_preview_corrupt_pdf(self, client):
        with patch("ingest.text_extract.decode_pdf_text", side_effect=ValueError("No /Root object")):
            response = client.post("/api/catalog/preview", files=_pdf_upload())

        assert response.status_code == 422
        assert response.json()["detail"].startswith("Error parsing PDF")

    def test_commit(self, client, fake_store):
        with patch("ingest.text_extract.decode_pdf_text", return_value=LISTINO_TEXT):
            response = client.post("/api/catalog/commit", files=_pdf_upload())

        assert response.status_code == 200
        data = response.json()
        assert data["categoriesCreated"] == 2
        assert data["productsCreated"] == 2
        assert data["productsSkipped"] == 0
        assert set(fake_store.products) == {"Dalfi Dark Chocolate", "Davidoff Coffee"}

    def test_commit_twice_skips(self, client):
        with patch("ingest.text_extract.decode_pdf_text", return_value=LISTINO_TEXT):
            client.post("/api/catalog/commit", files=_pdf_upload())
            response = client.post("/api/catalog/commit", files=_pdf_upload())

        data = response.json()
        assert data["productsCreated"] == 0
        assert data["productsSkipped"] == 2
        assert data["skipped"][0] == {"name": "Dalfi Dark Chocolate", "reason": "Already exists"}

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["service"] == "catalog-processor"
