import os

# Must be set before app.core.config is first imported.
os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite://")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ.setdefault("PASSWORD_HASH_ROUNDS", "4")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from app.api.deps import get_db  # noqa: E402
from app.db.base import Base  # noqa: E402
from app.main import app  # noqa: E402
from app import models  # noqa: E402,F401


@pytest.fixture()
def db_session_factory():
    engine = create_engine(
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


@pytest.fixture()
def db_session(db_session_factory):
    session = db_session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client(db_session_factory):
    def override_get_db():
        db = db_session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


def register_and_login(client, *, role: str, email: str | None = None, section_id: str | None = None) -> dict:
    email = email or f"{role}@example.com"
    payload = {
        "name": f"{role.title()} User",
        "email": email,
        "password": "password123",
        "role": role,
    }
    if section_id is not None:
        payload["section_id"] = section_id
    response = client.post("/api/auth/register", json=payload)
    assert response.status_code == 201, response.text

    login = client.post("/api/auth/login", json={"email": email, "password": "password123"})
    assert login.status_code == 200, login.text
    return {"Authorization": f"Bearer {login.json()['access_token']}"}


@pytest.fixture()
def admin_headers(client):
    return register_and_login(client, role="admin")


@pytest.fixture()
def scheduler_headers(client):
    return register_and_login(client, role="scheduler")


@pytest.fixture()
def student_headers(client):
    return register_and_login(client, role="student")


@pytest.fixture()
def login_as(client):
    def _login(role: str, **kwargs) -> dict:
        return register_and_login(client, role=role, **kwargs)

    return _login
