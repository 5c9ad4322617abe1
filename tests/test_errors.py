from fastapi import FastAPI
from fastapi.testclient import TestClient

from datasprint.errors import ConflictError, register_error_handlers


def _app() -> FastAPI:
    app = FastAPI()
    register_error_handlers(app)

    @app.get("/boom")
    def boom():
        raise RuntimeError("database on fire")

    @app.get("/conflict")
    def conflict():
        raise ConflictError()

    return app


def test_unhandled_error_becomes_envelope():
    client = TestClient(_app(), raise_server_exceptions=False)
    response = client.get("/boom")
    assert response.status_code == 500
    body = response.json()
    assert body["success"] is False
    assert body["error"] == "Internal Server Error"
    assert body["path"] == "/boom"
    assert body["method"] == "GET"
    assert "database on fire" not in response.text
    assert "stack" not in body


def test_app_error_uses_its_status():
    response = TestClient(_app()).get("/conflict")
    assert response.status_code == 409
    assert response.json()["message"] == "A record with this value already exists"


def test_unknown_route_envelope(client):
    response = client.get("/api/nowhere")
    assert response.status_code == 404
    body = response.json()
    assert body["error"] == "Not Found"
    assert body["message"] == "Route GET /api/nowhere not found"
    assert body["timestamp"]


def test_health(client):
    for path in ("/health", "/api/health"):
        response = client.get(path)
        assert response.status_code == 200
        assert response.json()["status"] == "ok"
