"""
Embedding providers and the cosine similarity engine.
"""

# Package initialization for vector module
from .embeddings import IEmbeddingProvider, DeterministicHashEmbedding, SentenceTransformerEmbedding
from .similarity import Candidate, cosine_similarity, rank, score_all

__all__ = [
    'IEmbeddingProvider',
    'DeterministicHashEmbedding',
    'SentenceTransformerEmbedding',
    'Candidate',
    'cosine_similarity',
    'rank',
    'score_all',
]
