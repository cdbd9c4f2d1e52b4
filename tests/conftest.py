"""Pytest configuration and fixtures."""

import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ.pop("ADVISORY_API_KEY", None)
os.environ.pop("API_KEY", None)
os.environ.pop("HIGH_DEBT_THRESHOLD", None)

from types import SimpleNamespace  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402

from debt_manager.db import Base, build_engine, get_db  # noqa: E402
from debt_manager.deps.advisor import get_advisor  # noqa: E402
from debt_manager.main import app  # noqa: E402
from debt_manager.services.advisory_service import DebtAdvisor  # noqa: E402


class FakeCompletions:
    """Stands in for `client.chat.completions` of the openai SDK."""

    def __init__(self, text: str | None = "Negotiate a 3x installment plan.", error: Exception | None = None):
        self.text = text
        self.error = error
        self.calls: list[dict] = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        message = SimpleNamespace(content=self.text)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def fake_chat_client(completions: FakeCompletions):
    return SimpleNamespace(chat=SimpleNamespace(completions=completions))


@pytest.fixture
def session_factory():
    """Fresh in-memory database per test."""
    engine = build_engine("sqlite://")
    Base.metadata.create_all(engine)
    factory = sessionmaker(bind=engine, autoflush=False, autocommit=False)
    yield factory
    engine.dispose()


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def fake_completions() -> FakeCompletions:
    return FakeCompletions()


@pytest.fixture
def client(session_factory, fake_completions):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    advisor = DebtAdvisor(api_key="test-key", client=fake_chat_client(fake_completions))

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_advisor] = lambda: advisor
    yield TestClient(app)
    app.dependency_overrides.clear()
