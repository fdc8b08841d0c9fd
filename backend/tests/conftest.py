import os
import sys
import tempfile

import pytest

# Point the app at a throwaway SQLite file before config is imported
_tmp_dir = tempfile.mkdtemp(prefix="habit_gym_test_")
os.environ["DATABASE_URL"] = "sqlite:///" + os.path.join(_tmp_dir, "test.db")
os.environ["ENVIRONMENT"] = "test"

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


@pytest.fixture
def db_session():
    import models  # noqa: F401
    from database import Base, engine, SessionLocal

    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def client(db_session):
    from fastapi.testclient import TestClient
    from main import app

    with TestClient(app) as c:
        yield c


def register(client, email="lifter@example.com", password="secret123", name="Lifter"):
    resp = client.post("/api/v1/auth/register", json={"name": name, "email": email, "password": password})
    assert resp.status_code == 201, resp.text
    token = resp.json()["data"]["token"]
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def auth_headers(client):
    return register(client)
