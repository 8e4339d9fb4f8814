# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Callable, Generator, Iterator
from datetime import timedelta
from itertools import count
from pathlib import Path

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite://")

from campus_share.api.v1.dependencies import get_storage_dep
from campus_share.core import security
from campus_share.core.security import create_access_token
from campus_share.db.session import Base
from campus_share.db.session import get_db as app_get_session
from campus_share.db.time import utcnow
from campus_share.main import app as fastapi_app
from campus_share.models import Resource, User
from campus_share.repositories.user_repo import new_user
from campus_share.services.storage import LocalFileStorage

TEST_DB_URL = "sqlite://"
TEST_PASSWORD = "password123"

_EMAIL_COUNTER = count(1)

# Minimum bcrypt cost for test hashes.
security.BCRYPT_ROUNDS = 4


@pytest.fixture(scope="session")
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def db_session(engine: Engine) -> Iterator[Session]:
    connection = engine.connect()
    transaction = connection.begin()
    SessionLocal = sessionmaker(
        bind=connection,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
    )
    session = SessionLocal()
    session.begin_nested()

    @event.listens_for(session, "after_transaction_end")
    def restart_savepoint(sess: Session, trans) -> None:  # pragma: no cover - SQLAlchemy internals
        if trans.nested and not getattr(trans._parent, "nested", False):
            session.begin_nested()

    try:
        yield session
    finally:
        event.remove(session, "after_transaction_end", restart_savepoint)
        session.close()

        if transaction.is_active:
            transaction.rollback()
        connection.close()

        # Ensure each test sees a clean database even if commits occurred.
        with engine.begin() as cleanup_conn:
            for table in reversed(Base.metadata.sorted_tables):
                cleanup_conn.execute(table.delete())


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture()
def storage(tmp_path: Path) -> LocalFileStorage:
    """File storage rooted in a per-test temporary directory."""
    return LocalFileStorage(tmp_path / "uploads", max_bytes=1024)


@pytest.fixture(autouse=True)
def override_dependencies(
    app: FastAPI,
    db_session: Session,
    storage: LocalFileStorage,
) -> Iterator[None]:
    def _get_session_override() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[app_get_session] = _get_session_override
    app.dependency_overrides[get_storage_dep] = lambda: storage
    try:
        yield
    finally:
        app.dependency_overrides.pop(app_get_session, None)
        app.dependency_overrides.pop(get_storage_dep, None)


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


@pytest.fixture()
def make_user(db_session: Session) -> Callable[..., User]:
    """Return a factory that persists users with unique emails."""

    def _make(
        name: str = "Test User",
        *,
        email: str | None = None,
        department: str = "Computer Science",
        role: str = "user",
        password: str = TEST_PASSWORD,
    ) -> User:
        user = new_user(
            name=name,
            email=email or f"user{next(_EMAIL_COUNTER)}@campus.edu",
            password=password,
            department=department,
            role=role,
        )
        db_session.add(user)
        db_session.flush()
        db_session.refresh(user)
        return user

    return _make


@pytest.fixture()
def test_user(make_user: Callable[..., User]) -> User:
    """Create and return a persisted test user."""
    return make_user("Test User")


@pytest.fixture()
def other_user(make_user: Callable[..., User]) -> User:
    """Create and return a second persisted user."""
    return make_user("Other User")


@pytest.fixture()
def admin_user(make_user: Callable[..., User]) -> User:
    """Create and return a persisted admin."""
    return make_user("Admin User", role="admin")


def bearer(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}


@pytest.fixture()
def auth_token(test_user: User) -> dict[str, str]:
    """Return authorization headers for the primary test user."""
    return bearer(test_user)


@pytest.fixture()
def other_auth_token(other_user: User) -> dict[str, str]:
    """Return authorization headers for the secondary test user."""
    return bearer(other_user)


@pytest.fixture()
def admin_auth_token(admin_user: User) -> dict[str, str]:
    """Return authorization headers for the admin."""
    return bearer(admin_user)


@pytest.fixture()
def make_resource(db_session: Session, test_user: User) -> Callable[..., Resource]:
    """Return a factory that persists resources.

    ``age_minutes`` pushes ``created_at`` into the past so that ordering by
    creation time is deterministic.
    """

    def _make(
        title: str = "Data Structures Notes",
        *,
        description: str = "Lecture notes on trees and graphs",
        department: str = "Computer Science",
        subject: str = "Algorithms",
        semester: int = 3,
        file_location: str = "/uploads/1700000000000-notes.pdf",
        downloads: int = 0,
        uploader: User | None = None,
        age_minutes: int = 0,
    ) -> Resource:
        resource = Resource(
            title=title,
            description=description,
            department=department,
            subject=subject,
            semester=semester,
            file_location=file_location,
            uploaded_by_id=(uploader or test_user).id,
            download_count=downloads,
            created_at=utcnow() - timedelta(minutes=age_minutes),
        )
        db_session.add(resource)
        db_session.flush()
        db_session.refresh(resource)
        return resource

    return _make


@pytest.fixture()
def test_resource(make_resource: Callable[..., Resource]) -> Resource:
    """Create a baseline resource for tests."""
    return make_resource()


@pytest.fixture()
def stored_resource(
    make_resource: Callable[..., Resource],
    storage: LocalFileStorage,
) -> Resource:
    """A resource whose backing file exists in the test upload directory."""
    name = "1700000000000-lecture.pdf"
    (storage.base_dir / name).write_bytes(b"%PDF-1.4 test")
    return make_resource("Lecture", file_location=f"/uploads/{name}")
