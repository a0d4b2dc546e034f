"""
Shared pytest fixtures: in-memory SQLite store, seeded users, FastAPI client with get_db overridden.

DATABASE_URL is pointed at SQLite before portal is imported so no test ever opens a MySQL pool.
"""
import os

os.environ.setdefault("DATABASE_URL", "sqlite://")

from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import portal.models  # noqa: F401
from portal.config import settings
from portal.db.base import Base
from portal.db.session import get_db
from portal.main import app
from portal.models import AdminNotification, User
from portal.services import document_requests
from portal.services.auth import create_session

API_TOKEN = "test-token"


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(autouse=True)
def _clear_request_caches():
    document_requests.detail_cache.clear()
    document_requests.list_cache.clear()
    yield
    document_requests.detail_cache.clear()
    document_requests.list_cache.clear()


@pytest.fixture(autouse=True)
def _test_settings(monkeypatch):
    monkeypatch.setattr(settings, "api_token", API_TOKEN)
    monkeypatch.setattr(settings, "notify_admins_by_email", False)
    monkeypatch.setattr(settings, "smtp_user", "")
    monkeypatch.setattr(settings, "smtp_password", "")


# =============================================================================
# Seed data
# =============================================================================


@pytest.fixture
def users(db):
    """Two admins and two clients, committed so every session sees them."""
    rows = {
        "alice": User(email="alice@office.test", first_name="Alice", last_name="Admin", role="admin"),
        "bob": User(email="bob@office.test", first_name="Bob", last_name="Boss", role="admin"),
        "carol": User(email="carol@client.test", first_name="Carol", last_name="Client", role="user"),
        "dave": User(email="dave@client.test", first_name=None, last_name=None, role="user"),
    }
    db.add_all(rows.values())
    db.commit()
    return {name: u.id for name, u in rows.items()}


@pytest.fixture
def add_admin_notification(db):
    """add_admin_notification(title, created_at=..., data=...) -> id. Inserts a broadcast row directly,
    bypassing encoding, so `data` may be malformed text."""

    def add(title="Hello", *, created_at=None, data=None, notification_type="system"):
        row = AdminNotification(
            type=notification_type,
            title=title,
            message=f"{title} message",
            data=data,
            created_at=created_at or datetime.now(timezone.utc),
        )
        db.add(row)
        db.commit()
        return row.id

    return add


# =============================================================================
# HTTP
# =============================================================================


@pytest.fixture
def app_client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.pop(get_db, None)


@pytest.fixture
def client_for(app_client, session_factory):
    """client_for(user_id) -> TestClient carrying a fresh session cookie for that user."""
    clients = []

    def make(user_id):
        with session_factory() as s:
            info = create_session(s, user_id)
        c = TestClient(app)
        c.cookies.set(settings.session_cookie_name, info.id)
        clients.append(c)
        return c

    yield make
    for c in clients:
        c.close()


@pytest.fixture
def api_headers():
    return {"Authorization": f"Bearer {API_TOKEN}"}
