"""
Embedding Strategy

This module defines HOW text is extracted from movies for embedding.
Changes to this module require re-running ingestion (bump STRATEGY_VERSION).

The embedding text formula:
    "{description}"  (overview only, stripped)

Member answers are embedded as their raw description, so catalog and query
vectors both come from free-text plot/mood descriptions.
"""

from typing import Union

from ..models.movie import CatalogCandidate

# IMPORTANT: Bump this version when the embedding logic changes!
STRATEGY_VERSION = "1.0"

# Default local model (sentence-transformers); 384-dim, mean pooling, normalized.
EMBEDDING_MODEL = "sentence-transformers/all-MiniLM-L6-v2"
EMBEDDING_DIMENSIONS = 384


def get_embed_text(movie: Union[CatalogCandidate, dict]) -> str:
    """
    Generate text for embedding from a catalog candidate.

    Falls back to the title when the description is blank, which only happens
    for hand-built catalogs (ingested candidates always pass the description gate).
    """
    if isinstance(movie, dict):
        description = movie.get("description") or ""
        title = movie.get("title") or ""
    else:
        description = movie.description or ""
        title = movie.title or ""
    text = description.strip()
    return text or title.strip() or "Untitled movie"


def validate_movie_for_embedding(movie: Union[CatalogCandidate, dict]) -> tuple[bool, str]:
    """
    Validate that a movie has the required fields for embedding.

    Returns:
        (is_valid, error_message)
    """
    data = movie if isinstance(movie, dict) else movie.model_dump()
    if not (data.get("title") or "").strip():
        return False, "Missing 'title' field"
    if not (data.get("description") or "").strip():
        return False, "Missing 'description' field"
    return True, ""
