"""Data models for the recommender."""

from .config import DEFAULT_CONFIG, RecommendationConfig, resolve_config
from .movie import (
    TMDB_IMAGE_BASE_URL,
    CandidateItem,
    CatalogCandidate,
    CatalogRecord,
    MediaAttributes,
    ensure_candidates,
    ensure_records,
)
from .scoring import MemberAnswer, RankedResult, RecommendationResult

__all__ = [
    "DEFAULT_CONFIG",
    "RecommendationConfig",
    "resolve_config",
    "TMDB_IMAGE_BASE_URL",
    "CandidateItem",
    "CatalogCandidate",
    "CatalogRecord",
    "MediaAttributes",
    "ensure_candidates",
    "ensure_records",
    "MemberAnswer",
    "RankedResult",
    "RecommendationResult",
]
