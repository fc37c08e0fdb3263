"""
Candidate Pool: turn raw upstream rows into an embedding-ready catalog.

Deduplicates by upstream id (first seen wins), applies quality gates, sorts by
composite score, and projects each survivor to a CatalogCandidate.
No network or store access happens here.

The public entry point is build_candidate_pool.
"""

import math
from typing import Any, Dict, List, Sequence, Union

from ..models.config import RecommendationConfig, DEFAULT_CONFIG
from ..models.movie import CandidateItem, CatalogCandidate, ensure_candidates


def deduplicate(items: Sequence[CandidateItem]) -> List[CandidateItem]:
    """Keep the first occurrence of each upstream id, preserving order."""
    seen = set()
    unique = []
    for item in items:
        if item.id in seen:
            continue
        seen.add(item.id)
        unique.append(item)
    return unique


def passes_quality_gates(
    item: CandidateItem,
    config: RecommendationConfig = DEFAULT_CONFIG,
) -> bool:
    """True if item has a title, a substantive overview, and enough votes."""
    title = (item.title or "").strip()
    overview = (item.overview or "").strip()
    if not title:
        return False
    if len(overview) <= config.min_description_length:
        return False
    if item.vote_count <= config.min_vote_count:
        return False
    return True


def composite_score(
    item: CandidateItem,
    config: RecommendationConfig = DEFAULT_CONFIG,
) -> float:
    """Rating weighted with log-popularity; non-positive popularity ranks last."""
    score = item.vote_average * config.weight_vote_average
    if config.weight_popularity == 0:
        return score
    popularity_term = math.log(item.popularity) if item.popularity > 0 else float("-inf")
    return score + popularity_term * config.weight_popularity


def project(item: CandidateItem) -> CatalogCandidate:
    """Map an upstream row to the fields a catalog record carries."""
    return CatalogCandidate(
        title=(item.title or "").strip(),
        description=(item.overview or "").strip(),
        media=item.media_attributes(),
    )


def build_candidate_pool(
    items: Sequence[Union[Dict[str, Any], CandidateItem]],
    config: RecommendationConfig = DEFAULT_CONFIG,
) -> List[CatalogCandidate]:
    """
    Deduplicate, quality-filter, composite-rank, and project upstream rows.

    The sort is stable: equal composite scores keep first-seen order.
    All survivors are returned; ordering is priority only.
    """
    typed = ensure_candidates(list(items))
    unique = deduplicate(typed)
    survivors = [item for item in unique if passes_quality_gates(item, config)]
    survivors.sort(key=lambda item: composite_score(item, config), reverse=True)
    return [project(item) for item in survivors]
