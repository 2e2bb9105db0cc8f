"""
Memory Store: owns the `memories` table.
Create-or-update by id, point lookup, deletion, listing and similarity search.
"""

import json
import sqlite3
import time
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from .config import MAX_SEARCH_RESULTS, PREVIEW_CHARS, SEARCH_DEFAULT_LIMIT, SEARCH_DEFAULT_THRESHOLD
from .db import Database
from .errors import StorageError
from .schema import Memory, MemorySummary, SaveResult, SearchHit, SearchOutcome, next_timestamp, utc_now
from ..util.logging import logger
from ..vector.embeddings import IEmbeddingProvider
from ..vector.similarity import Candidate, rank


def clamp_limit(limit: int, maximum: int = MAX_SEARCH_RESULTS) -> int:
    return max(1, min(int(limit), maximum))


def clamp_score(min_score: float) -> float:
    return max(0.0, min(float(min_score), 1.0))


def make_preview(text: str, budget: int = PREVIEW_CHARS) -> str:
    return text[:budget] + "..." if len(text) > budget else text


def _load_metadata(raw: Optional[str]) -> Dict[str, Any]:
    if not raw:
        return {}
    try:
        return json.loads(raw)
    except json.JSONDecodeError as e:
        raise StorageError(f"Corrupt metadata column: {e}") from e


def _load_embedding(raw: Optional[str]) -> Optional[List[float]]:
    """Decode a stored embedding; None unless it is a JSON list of numbers."""
    try:
        vector = json.loads(raw)
    except (TypeError, json.JSONDecodeError):
        return None
    if not isinstance(vector, list):
        return None
    # bool is an int subclass but never a coordinate
    if not all(isinstance(x, (int, float)) and not isinstance(x, bool) for x in vector):
        return None
    return vector


class MemoryStore:
    """Persistent semantic memories backed by SQLite.

    Embeddings are computed before any database write, so no reader ever
    observes a row whose embedding does not match its text.
    """

    def __init__(
        self,
        db: Database,
        embedder: IEmbeddingProvider,
        clock: Callable[[], datetime] = utc_now,
        max_results: int = MAX_SEARCH_RESULTS,
    ):
        self.db = db
        self.embedder = embedder
        self.clock = clock
        self.max_results = max_results

    def save(self, memory_id: str, text: str, metadata: Optional[Dict[str, Any]] = None) -> SaveResult:
        """Embed `text` and insert or overwrite the memory stored under `memory_id`.

        `created_at` survives overwrites; `updated_at` is refreshed on every save.

        Raises:
            EmbeddingError: the provider could not embed the text.
            StorageError: the database write failed.
        """
        embedding = self.embedder.embed_text(text)
        embedding_json = json.dumps(embedding)
        metadata_json = json.dumps(metadata if metadata is not None else {})
        moment = self.clock()

        with self.db.transaction() as conn:
            existing = conn.execute("SELECT updated_at FROM memories WHERE id = ?", (memory_id,)).fetchone()
            now = next_timestamp(moment, existing["updated_at"] if existing is not None else None)
            conn.execute(
                """
                INSERT INTO memories (id, text, embedding, metadata, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    text = excluded.text,
                    embedding = excluded.embedding,
                    metadata = excluded.metadata,
                    updated_at = excluded.updated_at
                """,
                (memory_id, text, embedding_json, metadata_json, now, now),
            )

        was_update = existing is not None
        logger.log_memory_operation("update" if was_update else "create", memory_id, text)
        return SaveResult(id=memory_id, was_update=was_update)

    def search(
        self,
        query: str,
        limit: int = SEARCH_DEFAULT_LIMIT,
        min_score: float = SEARCH_DEFAULT_THRESHOLD,
    ) -> SearchOutcome:
        """Rank every stored memory against `query` by cosine similarity.

        `limit` is clamped to [1, max_results] and `min_score` to [0, 1].
        An empty store short-circuits without calling the embedding provider.
        """
        started = time.perf_counter()
        limit = clamp_limit(limit, self.max_results)
        min_score = clamp_score(min_score)

        rows = self.db.fetch_all(
            "SELECT id, text, embedding, metadata, created_at, updated_at FROM memories"
        )
        if not rows:
            return SearchOutcome(results=[], empty_store=True)

        query_vector = self.embedder.embed_text(query)
        dimension = len(query_vector)

        candidates = []
        by_id = {}
        for row in rows:
            vector = _load_embedding(row["embedding"])
            if vector is None:
                logger.warning(f"Skipping memory '{row['id']}': unreadable embedding")
                continue
            if len(vector) != dimension:
                logger.warning(
                    f"Skipping memory '{row['id']}': embedding has {len(vector)} dimensions, expected {dimension}"
                )
                continue
            candidates.append(Candidate(key=row["id"], vector=vector, tiebreak=row["updated_at"]))
            by_id[row["id"]] = row

        ranked = rank(query_vector, candidates, limit=limit, min_score=min_score)

        results = []
        for candidate, score in ranked:
            row = by_id[candidate.key]
            results.append(SearchHit(
                id=row["id"],
                text=row["text"],
                metadata=_load_metadata(row["metadata"]),
                score=score,
                created_at=row["created_at"],
                updated_at=row["updated_at"],
            ))

        logger.log_search(
            query, len(candidates), len(results), limit, min_score,
            (time.perf_counter() - started) * 1000,
        )
        return SearchOutcome(results=results, empty_store=False)

    def get(self, memory_id: str) -> Optional[Memory]:
        row = self.db.fetch_one(
            "SELECT id, text, metadata, created_at, updated_at FROM memories WHERE id = ?",
            (memory_id,),
        )
        if row is None:
            return None
        return self._row_to_memory(row)

    def delete(self, memory_id: str) -> bool:
        """Delete a memory by id. Returns False if nothing was stored under it."""
        with self.db.transaction() as conn:
            cursor = conn.execute("DELETE FROM memories WHERE id = ?", (memory_id,))
        deleted = cursor.rowcount > 0
        logger.log_memory_operation("delete", memory_id, status="success" if deleted else "not_found")
        return deleted

    def list_all(self) -> List[MemorySummary]:
        """List every memory, most recently updated first."""
        rows = self.db.fetch_all(
            "SELECT id, text, metadata, created_at, updated_at FROM memories ORDER BY updated_at DESC, id ASC"
        )
        return [
            MemorySummary(
                id=row["id"],
                metadata=_load_metadata(row["metadata"]),
                preview=make_preview(row["text"]),
                created_at=row["created_at"],
                updated_at=row["updated_at"],
            )
            for row in rows
        ]

    def count(self) -> int:
        row = self.db.fetch_one("SELECT COUNT(*) AS count FROM memories")
        return row["count"]

    def _row_to_memory(self, row: sqlite3.Row) -> Memory:
        return Memory(
            id=row["id"],
            text=row["text"],
            metadata=_load_metadata(row["metadata"]),
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )
