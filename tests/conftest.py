"""
Shared fixtures: a temporary SQLite database, a controllable clock and
embedding providers that need no model download.
"""

from datetime import datetime, timedelta, timezone

import pytest

from semantic_memory.api.tools import ToolDispatcher
from semantic_memory.core.bio_store import BiographyStore
from semantic_memory.core.db import Database
from semantic_memory.core.errors import EmbeddingError
from semantic_memory.core.memory_store import MemoryStore
from semantic_memory.vector.embeddings import DeterministicHashEmbedding, IEmbeddingProvider


class FakeClock:
    """Returns a strictly increasing time, one second per call."""

    def __init__(self, start=datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)):
        self.current = start

    def __call__(self):
        self.current = self.current + timedelta(seconds=1)
        return self.current


class StaticEmbedding(IEmbeddingProvider):
    """Embedding provider returning hand-picked vectors; unknown text maps to zeros."""

    def __init__(self, vectors=None, dimension=3):
        self.vectors = dict(vectors or {})
        self.dimension = dimension
        self.calls = []

    def embed_text(self, text):
        self.calls.append(text)
        return list(self.vectors.get(text, [0.0] * self.dimension))

    def get_dimension(self):
        return self.dimension


class FailingEmbedding(IEmbeddingProvider):
    def embed_text(self, text):
        raise EmbeddingError("model unavailable")

    def get_dimension(self):
        return 3


@pytest.fixture
def db(tmp_path):
    database = Database(str(tmp_path / "memory.db")).init()
    yield database
    database.close()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def static_embedder():
    return StaticEmbedding({
        "query": [1.0, 0.0, 0.0],
        "exact": [1.0, 0.0, 0.0],
        "close": [0.8, 0.6, 0.0],
        "far": [0.0, 1.0, 0.0],
        "opposite": [-1.0, 0.0, 0.0],
    })


@pytest.fixture
def failing_embedder():
    return FailingEmbedding()


@pytest.fixture
def hash_embedder():
    return DeterministicHashEmbedding(dimension=384)


@pytest.fixture
def memory_store(db, static_embedder, clock):
    return MemoryStore(db, static_embedder, clock=clock)


@pytest.fixture
def hash_memory_store(db, hash_embedder, clock):
    return MemoryStore(db, hash_embedder, clock=clock)


@pytest.fixture
def bio_store(db, clock):
    return BiographyStore(db, clock=clock)


@pytest.fixture
def dispatcher(hash_memory_store, bio_store):
    return ToolDispatcher(hash_memory_store, bio_store)
