"""
Similarity utilities: cosine similarity and vector averaging for semantic matching.

Pure functions over immutable inputs; safe to call from concurrent requests.
"""

from typing import List, Sequence

import numpy as np

from ..errors import DimensionMismatch, EmptyInput


def cosine_similarity(v1: Sequence[float], v2: Sequence[float]) -> float:
    """
    Compute cosine similarity between two vectors.

    Raises DimensionMismatch when the lengths differ. Returns 0.0 when either
    vector has zero magnitude.
    """
    if len(v1) != len(v2):
        raise DimensionMismatch(len(v1), len(v2), "cosine_similarity")
    v1_arr = np.asarray(v1, dtype=float)
    v2_arr = np.asarray(v2, dtype=float)
    norm_product = np.linalg.norm(v1_arr) * np.linalg.norm(v2_arr)
    if norm_product == 0:
        return 0.0
    return float(np.dot(v1_arr, v2_arr) / norm_product)


def average_vectors(vectors: Sequence[Sequence[float]]) -> List[float]:
    """Elementwise mean of one or more equal-length vectors."""
    if not vectors:
        raise EmptyInput("Cannot average an empty sequence of vectors")
    dims = len(vectors[0])
    for vec in vectors[1:]:
        if len(vec) != dims:
            raise DimensionMismatch(dims, len(vec), "average_vectors")
    return [float(x) for x in np.mean(np.asarray(vectors, dtype=float), axis=0)]
