# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Callable, Generator, Iterator
from datetime import UTC, date, datetime, timedelta

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("SECRET_KEY", "unseal-test-secret")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("CREATE_TABLES_ON_STARTUP", "false")
os.environ.setdefault("STORE_TIMEZONE", "UTC")
os.environ.setdefault("DEFAULT_TIMEZONE", "UTC")

from unseal_stage.core.security import create_access_token
from unseal_stage.db.session import Base
from unseal_stage.db.session import get_db as app_get_session
from unseal_stage.main import app as fastapi_app
from unseal_stage.models import Partnership
from unseal_stage.services import MessageStore, PartnershipManager, RequestContext

TEST_DB_URL = "sqlite://"

# Fixed clock for service-level tests: a Saturday noon in UTC.
NOW = datetime(2024, 6, 15, 12, 0, tzinfo=UTC)
TODAY = NOW.date()
RELATIONSHIP_DATE = date(2024, 1, 1)


@pytest.fixture()
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
    SessionLocal = sessionmaker(
        bind=engine,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
    )
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture(autouse=True)
def override_session_dependency(app: FastAPI, db_session: Session) -> Iterator[None]:
    def _get_session_override() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[app_get_session] = _get_session_override
    try:
        yield
    finally:
        app.dependency_overrides.pop(app_get_session, None)


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


@pytest.fixture()
def make_ctx() -> Callable[..., RequestContext]:
    """Return a factory for request contexts pinned to the test clock."""

    def _make(user_id: str, now: datetime = NOW, days: int = 0) -> RequestContext:
        return RequestContext(user_id=user_id, now=now + timedelta(days=days))

    return _make


@pytest.fixture()
def partnerships(db_session: Session) -> PartnershipManager:
    return PartnershipManager(db_session)


@pytest.fixture()
def messages(db_session: Session) -> MessageStore:
    return MessageStore(db_session)


@pytest.fixture()
def pending(partnerships: PartnershipManager, make_ctx) -> Partnership:
    """u1 has asked u2 to pair; u2 has not answered yet."""
    return partnerships.send_request(make_ctx("u1"), "u2")


@pytest.fixture()
def paired(partnerships: PartnershipManager, pending: Partnership, make_ctx) -> Partnership:
    """u1 and u2 are partners since 2024-01-01."""
    return partnerships.accept_request(make_ctx("u2"), pending.id, RELATIONSHIP_DATE)


def auth_headers(user_id: str, timezone: str | None = None) -> dict[str, str]:
    """Return bearer headers for ``user_id``."""
    headers = {"Authorization": f"Bearer {create_access_token(user_id)}"}
    if timezone:
        headers["X-Timezone"] = timezone
    return headers


@pytest.fixture()
def headers() -> Callable[..., dict[str, str]]:
    """Return a factory producing bearer headers for a user id."""
    return auth_headers


@pytest.fixture()
def now() -> datetime:
    return NOW
