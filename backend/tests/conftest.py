import os

# Must be set before motoclub modules read their configuration.
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("AUTO_CREATE_TABLES", "false")
os.environ.pop("API_PREFIX", None)

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from motoclub.db import enable_sqlite_foreign_keys, session_scope
from motoclub.deps import get_db
from motoclub.main import app
from motoclub.models import Base
from motoclub.rate_limit import limiter


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(engine)
    Base.metadata.create_all(engine)
    factory = sessionmaker(bind=engine, class_=Session, expire_on_commit=False, autoflush=False)
    yield factory
    engine.dispose()


@pytest.fixture
def client(session_factory):
    def override_db():
        with session_scope(session_factory) as db:
            yield db

    app.dependency_overrides[get_db] = override_db
    limiter.reset()
    yield TestClient(app)
    app.dependency_overrides.clear()
    limiter.reset()


def register(client, email, role="rider", password="secret123", name="Test Rider", **extra):
    res = client.post(
        "/api/auth/register",
        json={"email": email, "password": password, "role": role, "name": name, **extra},
    )
    assert res.status_code == 201, res.text
    body = res.json()
    return body["token"], body["user"]


def auth(token):
    return {"Authorization": f"Bearer {token}"}
