import math

import numpy as np
import pytest

from semantic_memory.vector.similarity import Candidate, cosine_similarity, rank, score_all


def test_self_similarity_is_one():
    vector = [0.3, -1.2, 4.5, 0.0, 2.2]
    assert cosine_similarity(vector, vector) == pytest.approx(1.0)


def test_similarity_is_symmetric():
    a = [0.1, 0.7, -0.3]
    b = [0.9, -0.2, 0.4]
    assert cosine_similarity(a, b) == pytest.approx(cosine_similarity(b, a))


def test_known_values():
    assert cosine_similarity([1.0, 0.0], [0.0, 1.0]) == pytest.approx(0.0)
    assert cosine_similarity([1.0, 0.0], [-1.0, 0.0]) == pytest.approx(-1.0)
    assert cosine_similarity([1.0, 1.0], [1.0, 0.0]) == pytest.approx(1 / math.sqrt(2))


def test_scale_invariance():
    assert cosine_similarity([1.0, 2.0, 3.0], [2.0, 4.0, 6.0]) == pytest.approx(1.0)


def test_zero_vector_scores_zero():
    assert cosine_similarity([0.0, 0.0, 0.0], [1.0, 2.0, 3.0]) == 0.0
    assert cosine_similarity([1.0, 2.0, 3.0], [0.0, 0.0, 0.0]) == 0.0
    assert cosine_similarity([0.0, 0.0], [0.0, 0.0]) == 0.0


def test_length_mismatch_raises():
    with pytest.raises(ValueError):
        cosine_similarity([1.0, 0.0], [1.0, 0.0, 0.0])


def test_score_all_matches_pairwise():
    query = [0.2, 0.5, -0.1]
    vectors = [[0.2, 0.5, -0.1], [1.0, 0.0, 0.0], [0.0, 0.0, 0.0], [-0.4, 0.3, 0.9]]
    scores = score_all(query, vectors)
    expected = [cosine_similarity(query, v) for v in vectors]
    assert np.allclose(scores, expected)


def test_score_all_empty():
    assert len(score_all([1.0, 0.0], [])) == 0


def test_rank_orders_filters_and_limits():
    candidates = [
        Candidate("far", [0.0, 1.0]),
        Candidate("exact", [1.0, 0.0]),
        Candidate("close", [0.8, 0.6]),
        Candidate("opposite", [-1.0, 0.0]),
    ]
    ranked = rank([1.0, 0.0], candidates, limit=10, min_score=0.3)
    assert [c.key for c, _ in ranked] == ["exact", "close"]
    assert ranked[0][1] == pytest.approx(1.0)
    assert ranked[1][1] == pytest.approx(0.8)

    limited = rank([1.0, 0.0], candidates, limit=1, min_score=0.0)
    assert [c.key for c, _ in limited] == ["exact"]


def test_rank_threshold_is_inclusive():
    exact_score = cosine_similarity([1.0, 0.0], [1.0, 1.0])
    ranked = rank([1.0, 0.0], [Candidate("a", [1.0, 1.0])], limit=5, min_score=exact_score)
    assert len(ranked) == 1


def test_rank_breaks_ties_by_tiebreak_then_key():
    candidates = [
        Candidate("b", [1.0, 0.0], tiebreak="2024-01-01T00:00:01.000Z"),
        Candidate("a", [1.0, 0.0], tiebreak="2024-01-01T00:00:01.000Z"),
        Candidate("c", [1.0, 0.0], tiebreak="2024-01-01T00:00:05.000Z"),
    ]
    ranked = rank([1.0, 0.0], candidates, limit=5, min_score=0.0)
    assert [c.key for c, _ in ranked] == ["c", "a", "b"]


def test_rank_empty_candidates():
    assert rank([1.0, 0.0], [], limit=5, min_score=0.0) == []
