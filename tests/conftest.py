"""Pytest configuration and fixtures."""

import os

# Keep tests off any real database or provider configured in .env
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["DEEPSEEK_API_KEY"] = ""
os.environ["GEMINI_API_KEY"] = ""

from typing import List

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from wordbook import models  # noqa: F401
from wordbook.core.database import Base, get_db
from wordbook.core.llm_client import get_provider
from wordbook.core.llm_provider import LLMMessage, LLMProvider, LLMResponse
from wordbook.main import app


class FakeProvider(LLMProvider):
    """Returns a canned reply or raises a canned error, and records prompts."""

    name = "fake"

    def __init__(self, reply: str = "", error: Exception | None = None, available: bool = True):
        super().__init__(model="fake-1")
        self.reply = reply
        self.error = error
        self.available = available
        self.prompts: List[str] = []

    async def chat(self, messages: List[LLMMessage]) -> LLMResponse:
        self.prompts.append(messages[-1].content)
        if self.error is not None:
            raise self.error
        return LLMResponse(content=self.reply)

    async def list_models(self) -> List[str]:
        return [self.model]


UBIQUITOUS_REPLY = """```json
{
  "word": "ubiquitous",
  "meaning": "无处不在的",
  "example": "Smartphones have become ubiquitous.",
  "ukPhonetic": "/juːˈbɪkwɪtəs/",
  "usPhonetic": "/juːˈbɪkwətəs/"
}
```"""


@pytest.fixture
def db_session():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    session = sessionmaker(bind=engine, autoflush=False, autocommit=False)()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture
def fake_provider():
    return FakeProvider(reply=UBIQUITOUS_REPLY)


@pytest.fixture
def client(db_session, fake_provider):
    def _get_db():
        yield db_session

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_provider] = lambda: fake_provider
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
