"""
Cosine similarity and ranking. Pure functions, no I/O.
"""

from dataclasses import dataclass
from typing import List, Sequence, Tuple

import numpy as np


@dataclass
class Candidate:
    key: str
    vector: Sequence[float]
    tiebreak: str = ""
    """Secondary sort key, descending (stores pass updated_at)."""


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine of the angle between two vectors of equal length.

    A zero-magnitude vector on either side scores 0.0.
    """
    va = np.asarray(a, dtype=np.float64)
    vb = np.asarray(b, dtype=np.float64)
    if va.shape != vb.shape:
        raise ValueError(f"Vector length mismatch: {va.shape[0]} != {vb.shape[0]}")

    norm_a = np.linalg.norm(va)
    norm_b = np.linalg.norm(vb)
    if norm_a == 0 or norm_b == 0:
        return 0.0
    return float(np.dot(va, vb) / (norm_a * norm_b))


def score_all(query: Sequence[float], vectors: Sequence[Sequence[float]]) -> np.ndarray:
    """Cosine similarity of query against each row, vectorised."""
    if len(vectors) == 0:
        return np.zeros(0, dtype=np.float64)

    q = np.asarray(query, dtype=np.float64)
    matrix = np.asarray(vectors, dtype=np.float64)
    if matrix.ndim != 2 or matrix.shape[1] != q.shape[0]:
        raise ValueError(f"Vector length mismatch: expected {q.shape[0]} columns, got {matrix.shape}")

    q_norm = np.linalg.norm(q)
    row_norms = np.linalg.norm(matrix, axis=1)
    denom = row_norms * q_norm
    dots = matrix @ q
    scores = np.zeros(len(matrix), dtype=np.float64)
    nonzero = denom > 0
    scores[nonzero] = dots[nonzero] / denom[nonzero]
    return scores


def rank(
    query: Sequence[float],
    candidates: Sequence[Candidate],
    limit: int,
    min_score: float,
) -> List[Tuple[Candidate, float]]:
    """Score candidates, drop those below min_score and return the top `limit`.

    Order is score descending, then tiebreak descending, then key ascending.
    """
    if not candidates:
        return []

    scores = score_all(query, [c.vector for c in candidates])
    kept = [(c, float(s)) for c, s in zip(candidates, scores) if s >= min_score]

    # Stable sorts applied from least to most significant key
    kept.sort(key=lambda item: item[0].key)
    kept.sort(key=lambda item: item[0].tiebreak, reverse=True)
    kept.sort(key=lambda item: item[1], reverse=True)
    return kept[:max(limit, 0)]
