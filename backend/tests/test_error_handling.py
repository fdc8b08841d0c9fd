import pytest
from fastapi.testclient import TestClient

from conftest import register


@pytest.fixture
def lenient_client(db_session):
    from main import app

    with TestClient(app, raise_server_exceptions=False) as c:
        yield c


@pytest.fixture
def broken_listing(monkeypatch):
    from services.habit_service import HabitService

    def boom(db, user_id):
        raise RuntimeError("listing exploded")

    monkeypatch.setattr(HabitService, "get_all", boom)


def test_unexpected_error_reports_cause_outside_production(lenient_client, broken_listing):
    headers = register(lenient_client)
    resp = lenient_client.get("/api/v1/habits", headers=headers)
    assert resp.status_code == 500
    assert resp.json() == {"detail": "Internal server error", "error": "listing exploded"}


def test_unexpected_error_hides_cause_in_production(lenient_client, broken_listing, monkeypatch):
    import main

    headers = register(lenient_client)
    monkeypatch.setattr(main, "is_production", lambda: True)
    resp = lenient_client.get("/api/v1/habits", headers=headers)
    assert resp.status_code == 500
    assert resp.json() == {"detail": "Internal server error"}


def test_health_degraded_when_database_unreachable(lenient_client, monkeypatch):
    import routes.health_routes

    monkeypatch.setattr(routes.health_routes, "ping_db", lambda db: False)
    resp = lenient_client.get("/api/v1/health")
    assert resp.status_code == 503
    body = resp.json()
    assert body["status"] == "DEGRADED"
    assert body["checks"]["database"] == "disconnected"


def test_validation_error_is_a_plain_400(lenient_client):
    headers = register(lenient_client)
    resp = lenient_client.post("/api/v1/habits", json={"name": "Read", "color": "blue"}, headers=headers)
    assert resp.status_code == 400
    assert resp.json()["detail"].startswith("color:")
