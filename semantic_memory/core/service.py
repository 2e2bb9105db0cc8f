"""
Process-lifetime wiring: one database handle, one embedding provider, two stores.
"""

from typing import Optional

from .bio_store import BiographyStore
from .config import MAX_SEARCH_RESULTS, get_db_path, get_embedding_provider
from .db import Database
from .memory_store import MemoryStore
from ..util.logging import logger
from ..vector.embeddings import IEmbeddingProvider


class MemoryService:
    """Owns the storage handle and the stores built on it.

    `start()` opens the database and loads the embedding model; failures
    there are fatal to the process. `close()` is idempotent.
    """

    def __init__(self, db: Database, embedder: IEmbeddingProvider, max_results: int = MAX_SEARCH_RESULTS):
        self.db = db
        self.embedder = embedder
        self.memories = MemoryStore(db, embedder, max_results=max_results)
        self.bio = BiographyStore(db)

    @classmethod
    def from_config(cls, db_path: Optional[str] = None) -> "MemoryService":
        return cls(Database(db_path or get_db_path()), get_embedding_provider())

    def start(self, load_model: bool = True) -> "MemoryService":
        self.db.init()
        if load_model:
            self.embedder.load()
            logger.info(
                f"Embedding provider ready: {self.embedder.__class__.__name__} "
                f"(dimension {self.embedder.get_dimension()})"
            )
        logger.info(f"Database initialized with {self.memories.count()} memories")
        return self

    def close(self) -> None:
        self.db.close()

    def __enter__(self) -> "MemoryService":
        return self.start()

    def __exit__(self, *exc_info) -> None:
        self.close()
