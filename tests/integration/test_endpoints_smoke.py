import json

import pytest
from fastapi.testclient import TestClient

from vision_metadata.api.routes_skill import get_metadata_pipeline
from vision_metadata.config import settings


@pytest.fixture
def client(tmp_path, monkeypatch) -> TestClient:
    """
    Real wiring from settings: mock vision provider, local document folder,
    in-memory metadata store.
    """
    (tmp_path / "photo.jpg").write_bytes(b"\xff\xd8\xff\xe0fake-jpeg")

    monkeypatch.setattr(settings, "vision_provider", "mock")
    monkeypatch.setattr(settings, "document_source", "local")
    monkeypatch.setattr(settings, "document_root", str(tmp_path))
    monkeypatch.setattr(settings, "output_mode", "both")
    get_metadata_pipeline.cache_clear()

    from vision_metadata.main import create_app

    yield TestClient(create_app())
    get_metadata_pipeline.cache_clear()


def test_smoke_health(client: TestClient):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


def test_smoke_invoke_returns_all_templates(client: TestClient):
    event = {"source": {"id": "photo.jpg", "created_by": {"id": "1"}}}

    resp = client.post("/skills/invoke", json=event, headers={"X-Request-Id": "it-1"})

    assert resp.status_code == 200, resp.text
    assert resp.headers.get("X-Request-Id") == "it-1"

    written = resp.json()["written"]
    assert set(written) == {"imageContent", "keywords", "transcripts"}

    flat = written["imageContent"]["keywords"]
    assert flat.startswith("logoAnnotations: Acme\n\nlabelAnnotations: Product, Box\n\n")
    assert flat.endswith("imagePropertiesAnnotation: red (0.6), white (0.3)\n\n")

    keywords = json.loads(written["keywords"]["keywords"])["skills_data"][0]
    assert [e["text"] for e in keywords["entries"]] == ["Acme", "Product", "Box"]

    transcripts = json.loads(written["transcripts"]["transcripts"])["skills_data"][0]
    assert transcripts["entries"] == [{"text": "ACME\nFragile"}]


def test_smoke_invoke_is_repeatable(client: TestClient):
    event = {"source": {"id": "photo.jpg", "created_by": {"id": "1"}}}

    first = client.post("/skills/invoke", json=event).json()["written"]
    second = client.post("/skills/invoke", json=event).json()["written"]

    assert first == second


def test_smoke_metrics_exposes_pipeline_counters(client: TestClient):
    client.post("/skills/invoke", json={"source": {"id": "photo.jpg", "created_by": {"id": "1"}}})

    resp = client.get("/metrics")

    assert resp.status_code == 200
    assert "metadata_writes_total" in resp.text
    assert "vision_requests_total" in resp.text


def test_smoke_unknown_route_uses_error_schema(client: TestClient):
    resp = client.get("/nope", headers={"X-Request-Id": "it-404"})

    assert resp.status_code == 404
    assert resp.json() == {"error": {"code": "http_error", "message": "Not Found", "request_id": "it-404"}}
