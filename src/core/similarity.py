# src/core/similarity.py — v1
"""Cosine similarity between a query vector and a set of vectors (numpy)."""

from __future__ import annotations

from typing import Sequence

import numpy as np


def cosine_similarities(
    query: Sequence[float], vectors: Sequence[Sequence[float]]
) -> np.ndarray:
    """Similarity of query to each row of vectors, values in [-1, 1].

    Zero vectors score 0 instead of dividing by zero.

    Raises:
        ValueError: If dimensions disagree.
    """
    matrix = np.asarray(vectors, dtype=np.float64)
    if matrix.size == 0:
        return np.empty(0, dtype=np.float64)
    q = np.asarray(query, dtype=np.float64)
    if matrix.ndim != 2 or matrix.shape[1] != q.shape[0]:
        raise ValueError(
            f"Dimension mismatch: query has {q.shape[0]}, vectors have shape {matrix.shape}"
        )

    norms = np.maximum(np.linalg.norm(matrix, axis=1), 1e-10)
    q_norm = max(float(np.linalg.norm(q)), 1e-10)
    return (matrix @ q) / (norms * q_norm)
