"""Shared fixtures: in-memory SQLite, a fake upstream service and bearer tokens."""
import json
import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET", "test-secret-for-hipaai-chat-tokens-0001")

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.db.session import Base, get_db
from app.models import ChatSession, ChatMessage, UpstreamSettings  # noqa: F401
from app.core.security import create_token
from app.core.upstream import RedactionClient, UpstreamConfig
from app.api.deps import get_redaction_client


class FakeUpstream:
    """Records requests and answers with a configurable response."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.status_code = 200
        self.body: object = {"text": "Hi there"}
        self.exc: Exception | None = None

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.exc is not None:
            raise self.exc
        if isinstance(self.body, (bytes, str)):
            return httpx.Response(self.status_code, content=self.body)
        return httpx.Response(self.status_code, json=self.body)

    def client(self) -> RedactionClient:
        return RedactionClient(transport=httpx.MockTransport(self.handler))

    @property
    def sent_texts(self) -> list[str]:
        return [json.loads(r.content)["text"] for r in self.requests]


@pytest.fixture
def db_engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=db_engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def upstream():
    return FakeUpstream()


@pytest.fixture
def upstream_config():
    return UpstreamConfig(url="http://upstream.test/process", api_key="test-key", timeout=5.0)


@pytest.fixture
def client(session_factory, upstream, monkeypatch):
    """TestClient wired to the in-memory database and the fake upstream."""
    monkeypatch.setenv("UPSTREAM_API_KEY", "test-key")
    monkeypatch.setenv("UPSTREAM_API_URL", "http://upstream.test/process")

    from main import app

    def _get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_redaction_client] = upstream.client
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def auth_headers(user_id: int, **claims) -> dict:
    token = create_token({"sub": str(user_id), **claims})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def as_user():
    return auth_headers
