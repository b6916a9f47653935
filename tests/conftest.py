"""
Pytest configuration for API tests.

The app runs against an in-memory SQLite database shared through a
StaticPool. Authentication is replaced by a fake that treats the bearer
credential as the caller's email, so tests can act as any owner.
"""
import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("LOG_DIR", os.path.join(os.path.dirname(__file__), ".logs"))

import pytest
from fastapi import HTTPException, Request
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.database import Base, get_db
from app.main import app
from app.routers.courses import list_cache
from app.utils.auth import Identity, get_current_user


def fake_current_user(request: Request) -> Identity:
    header = request.headers.get("Authorization", "")
    if not header.startswith("Bearer ") or not header[7:]:
        raise HTTPException(status_code=401, detail="Unauthorized")
    return Identity(email=header[7:], name="Test User")


@pytest.fixture()
def db_session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    yield factory
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture()
def client(db_session_factory):
    def override_get_db():
        db = db_session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_current_user] = fake_current_user
    list_cache.clear()
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
    list_cache.clear()


def auth(email: str) -> dict:
    return {"Authorization": f"Bearer {email}"}


def make_draft(**overrides) -> dict:
    draft = {
        "courseCode": "CS101",
        "title": "Intro to Programming",
        "units": 3,
        "days": "MWF",
        "time": "09:00 - 10:30",
        "room": "B201",
        "instructor": "Ada Lovelace",
    }
    draft.update(overrides)
    return draft
