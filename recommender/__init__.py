"""
Movie Night Recommender: group recommendations by averaged embeddings

Single entry point for the recommender package:
- models/: RecommendationConfig, CandidateItem, CatalogCandidate, CatalogRecord, MemberAnswer, RankedResult
- stages/: candidate_pool (ingestion transform), ranking (group vector + catalog scoring)
- embedding/: get_embed_text, version and model constants
- utils/: cosine_similarity, average_vectors
"""

from .errors import (
    CatalogStoreError,
    DimensionMismatch,
    EmbeddingFailed,
    EmbeddingUnavailable,
    EmptyCatalog,
    EmptyInput,
    IngestionFailed,
    NoPreferences,
    RecommenderError,
    UpstreamRequestError,
)
from .models import (
    DEFAULT_CONFIG,
    CandidateItem,
    CatalogCandidate,
    CatalogRecord,
    MediaAttributes,
    MemberAnswer,
    RankedResult,
    RecommendationConfig,
    RecommendationResult,
)
from .recommendation_engine import RecommendationEngine
from .stages.candidate_pool import build_candidate_pool
from .stages.ranking import get_group_vector, rank_catalog
from .utils import average_vectors, cosine_similarity
from .embedding import (
    get_embed_text,
    STRATEGY_VERSION,
    EMBEDDING_MODEL,
    EMBEDDING_DIMENSIONS,
)

__all__ = [
    "CatalogStoreError",
    "DimensionMismatch",
    "EmbeddingFailed",
    "EmbeddingUnavailable",
    "EmptyCatalog",
    "EmptyInput",
    "IngestionFailed",
    "NoPreferences",
    "RecommenderError",
    "UpstreamRequestError",
    "DEFAULT_CONFIG",
    "CandidateItem",
    "CatalogCandidate",
    "CatalogRecord",
    "MediaAttributes",
    "MemberAnswer",
    "RankedResult",
    "RecommendationConfig",
    "RecommendationResult",
    "RecommendationEngine",
    "build_candidate_pool",
    "get_group_vector",
    "rank_catalog",
    "average_vectors",
    "cosine_similarity",
    "get_embed_text",
    "STRATEGY_VERSION",
    "EMBEDDING_MODEL",
    "EMBEDDING_DIMENSIONS",
]
