"""
Shared fixtures.

The environment is pointed at a throwaway SQLite file before any ``src``
module is imported, because settings are read once and cached.
"""
import os
import tempfile
from types import SimpleNamespace

_TMP_DIR = tempfile.mkdtemp(prefix="onboarding-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{_TMP_DIR}/app.db"
os.environ["GROQ_API_KEY"] = "test-key"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ.pop("LLM_TEMPERATURE", None)
os.environ.pop("LLM_MAX_TOKENS", None)

import pytest
from fastapi.testclient import TestClient

from src.core.config import get_settings
from src.database.connection import StoreConnection
from src.database.store import OrderedStore
from src.llm.client import LLMClient
from src.services.chat_relay import ChatRelay
from src.services.survey_repository import SurveyRepository


START_MS = 1_700_000_000_000


class FakeClock:
    """Millisecond clock that advances a fixed step per call."""

    def __init__(self, start: int = START_MS, step: int = 1000):
        self.now = start
        self.step = step

    def __call__(self) -> int:
        value = self.now
        self.now += self.step
        return value


def make_chunk(content):
    return SimpleNamespace(choices=[SimpleNamespace(delta=SimpleNamespace(content=content))])


class FakeStream:
    """Upstream completion stream: yields chunks, optionally fails afterwards."""

    def __init__(self, chunks, error=None):
        self.chunks = list(chunks)
        self.error = error
        self.closed = False
        self.consumed = 0

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        for chunk in self.chunks:
            self.consumed += 1
            yield chunk
        if self.error is not None:
            raise self.error

    async def close(self):
        self.closed = True


class FakeCompletions:
    def __init__(self):
        self.calls = []
        self.chunks = []
        self.stream_error = None
        self.open_error = None
        self.streams = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.open_error is not None:
            raise self.open_error
        stream = FakeStream(self.chunks, self.stream_error)
        self.streams.append(stream)
        return stream


class FakeGroq:
    """Stands in for groq.AsyncGroq; records every completion request."""

    def __init__(self):
        self.completions = FakeCompletions()
        self.chat = SimpleNamespace(completions=self.completions)
        self.closed = False

    def respond_with(self, *fragments, error=None):
        self.completions.chunks = [make_chunk(fragment) for fragment in fragments]
        self.completions.stream_error = error

    async def close(self):
        self.closed = True


@pytest.fixture
def store_connection(tmp_path):
    connection = StoreConnection(f"sqlite:///{tmp_path / 'store.db'}")
    connection.open()
    yield connection
    connection.close()


@pytest.fixture
def store(store_connection):
    # Small batches so scans cross fetch boundaries
    return OrderedStore(store_connection, scan_batch_size=2)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def repository(store, clock):
    return SurveyRepository(store, clock=clock, delete_batch_size=2)


@pytest.fixture
def fake_groq():
    return FakeGroq()


@pytest.fixture
def llm_client(fake_groq):
    return LLMClient(get_settings(), client=fake_groq)


@pytest.fixture
def relay(llm_client):
    return ChatRelay(llm_client)


@pytest.fixture
def client(repository, relay, store_connection):
    from src.api.dependencies import get_chat_relay, get_store_connection, get_survey_repository
    from src.api.main import app

    app.dependency_overrides[get_survey_repository] = lambda: repository
    app.dependency_overrides[get_chat_relay] = lambda: relay
    app.dependency_overrides[get_store_connection] = lambda: store_connection
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
