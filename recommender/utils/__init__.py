"""Shared utilities for vector math."""

from .similarity import average_vectors, cosine_similarity

__all__ = [
    "average_vectors",
    "cosine_similarity",
]
