"""
Embedding providers. The stores depend only on IEmbeddingProvider.
"""

from abc import ABC, abstractmethod
import hashlib
import re

import numpy as np

from ..core.errors import EmbeddingError
from ..util.logging import logger

_TOKEN_RE = re.compile(r"\w+", re.UNICODE)


class IEmbeddingProvider(ABC):
    """Abstract interface for embedding providers."""

    @abstractmethod
    def embed_text(self, text: str) -> list[float]:
        """Generate embedding vector for given text."""
        pass

    @abstractmethod
    def get_dimension(self) -> int:
        """Get the dimension of the embedding vectors."""
        pass

    def load(self) -> None:
        """Eagerly prepare the provider. Default is a no-op."""


class DeterministicHashEmbedding(IEmbeddingProvider):
    """Deterministic hash-based embedding provider for testing purposes.

    Each lowercase word token is hashed into a bucket with a signed weight and
    the result is L2-normalised, so texts sharing words score higher under
    cosine similarity. No model download is required. Text without word
    tokens (e.g. the empty string) yields the zero vector.
    """

    def __init__(self, dimension: int = 384):
        self.dimension = dimension

    def embed_text(self, text: str) -> list[float]:
        """Generate deterministic embedding vector using hash function."""
        vector = np.zeros(self.dimension, dtype=np.float64)
        for token in _TOKEN_RE.findall(text.lower()):
            digest = hashlib.md5(token.encode("utf-8")).digest()
            bucket = int.from_bytes(digest[:4], "big") % self.dimension
            sign = 1.0 if digest[4] & 1 else -1.0
            vector[bucket] += sign

        norm = np.linalg.norm(vector)
        if norm > 0:
            vector = vector / norm
        return vector.tolist()

    def get_dimension(self) -> int:
        """Get the dimension of the embedding vectors."""
        return self.dimension


class SentenceTransformerEmbedding(IEmbeddingProvider):
    """Sentence transformers embedding provider using pre-trained models.

    Uses all-MiniLM-L6-v2 by default: mean-pooled, normalized 384-d vectors.
    """

    def __init__(self, model_name: str = "all-MiniLM-L6-v2"):
        self.model_name = model_name
        self._model = None
        self._dimension = None

    @property
    def model(self):
        if self._model is None:
            logger.info(f"Loading embedding model {self.model_name} (first time may take a while)...")
            try:
                from sentence_transformers import SentenceTransformer
                self._model = SentenceTransformer(self.model_name)
            except Exception as e:
                raise EmbeddingError(f"Cannot load embedding model '{self.model_name}': {e}") from e
            logger.info(f"Embedding model {self.model_name} loaded")
        return self._model

    def load(self) -> None:
        self.get_dimension()

    def embed_text(self, text: str) -> list[float]:
        """Generate embedding vector using sentence transformers."""
        model = self.model
        try:
            embedding = model.encode(text, convert_to_tensor=False, normalize_embeddings=True)
        except Exception as e:
            raise EmbeddingError(f"Embedding failed: {e}") from e
        return np.asarray(embedding, dtype=np.float64).tolist()

    def get_dimension(self) -> int:
        """Get the dimension of the embedding vectors."""
        if self._dimension is None:
            model = self.model
            dimension = model.get_sentence_embedding_dimension()
            if dimension is None:
                # Get dimension by encoding a dummy string
                dimension = len(self.embed_text("test"))
            self._dimension = dimension
        return self._dimension
