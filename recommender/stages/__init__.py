"""Pipeline stages: candidate_pool (ingestion transform), ranking (request time)."""

from .candidate_pool import build_candidate_pool
from .ranking import get_group_vector, rank_catalog

__all__ = [
    "build_candidate_pool",
    "get_group_vector",
    "rank_catalog",
]
