"""
Shared pytest fixtures: in-memory SQLite, the FastAPI TestClient and a fake AI client.
"""
import os

# must be set before expense_tracker is imported: settings are read at import time
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret")
os.environ.setdefault("OPENAI_API_KEY", "")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from expense_tracker.core.config import settings
from expense_tracker.db import models  # noqa: F401  (registers models)
from expense_tracker.db.base import Base
from expense_tracker.db.session import get_db
from expense_tracker.main import app
from expense_tracker.services.ai_client import get_receipt_client
from expense_tracker.services.security import create_access_token

# StaticPool ensures all connections share the same in-memory database
_ENGINE = create_engine(
    "sqlite:///:memory:",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
_Session = sessionmaker(autocommit=False, autoflush=False, bind=_ENGINE)


class FakeReceiptClient:
    """Stands in for ReceiptAIClient; returns ``reply`` or raises ``error``."""

    def __init__(self, reply="", error=None):
        self.reply = reply
        self.error = error
        self.calls = []

    def _answer(self, kind, *args):
        self.calls.append((kind,) + args)
        if self.error is not None:
            raise self.error
        return self.reply

    def complete_text(self, prompt):
        return self._answer("text", prompt)

    def complete_vision(self, system_prompt, image_base64, mime_type="image/jpeg"):
        return self._answer("vision", system_prompt, image_base64, mime_type)


@pytest.fixture(autouse=True)
def _reset_tables():
    Base.metadata.create_all(bind=_ENGINE)
    yield
    Base.metadata.drop_all(bind=_ENGINE)


@pytest.fixture(autouse=True)
def _receipt_tmp_dir(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "RECEIPT_TMP_DIR", str(tmp_path))
    return tmp_path


@pytest.fixture()
def db():
    session = _Session()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def fake_ai():
    return FakeReceiptClient()


@pytest.fixture()
def client(db, fake_ai):
    def _override():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = _override
    app.dependency_overrides[get_receipt_client] = lambda: fake_ai
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture()
def auth_headers():
    token = create_access_token("user-1", email="ada@example.com", name="Ada")
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def other_headers():
    token = create_access_token("user-2", email="bob@example.com")
    return {"Authorization": f"Bearer {token}"}
