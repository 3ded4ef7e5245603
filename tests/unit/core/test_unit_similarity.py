# tests/unit/core/test_unit_similarity.py — v1
"""Tests for core/similarity.py."""

from __future__ import annotations

import numpy as np
import pytest

from papermind.core.similarity import cosine_similarities


class TestCosineSimilarities:
    def test_known_values(self):
        scores = cosine_similarities([1.0, 0.0], [[1.0, 0.0], [0.0, 2.0], [-3.0, 0.0]])
        np.testing.assert_allclose(scores, [1.0, 0.0, -1.0])

    def test_scale_invariant(self):
        scores = cosine_similarities([2.0, 2.0], [[1.0, 1.0]])
        assert scores[0] == pytest.approx(1.0)

    def test_zero_vector_scores_zero(self):
        scores = cosine_similarities([1.0, 0.0], [[0.0, 0.0]])
        assert scores[0] == 0.0

    def test_empty(self):
        assert cosine_similarities([1.0], []).shape == (0,)

    def test_dimension_mismatch(self):
        with pytest.raises(ValueError, match="Dimension mismatch"):
            cosine_similarities([1.0, 0.0], [[1.0, 0.0, 0.0]])
