"""
Group Recommendation Engine

Thin facade over the ranking stages:
- query_vector: embed each member answer (concurrently) and average
- core: cosine-score the full catalog and sort

The engine never mutates its inputs; the only side effects are the injected
embedding calls. The caller reads the catalog before invoking it.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence, Union

from .errors import EmptyCatalog, NoPreferences
from .models.config import RecommendationConfig, resolve_config
from .models.movie import CatalogRecord, ensure_records
from .models.scoring import MemberAnswer, RecommendationResult
from .stages.ranking import get_group_vector, rank_catalog
from .stages.ranking.query_vector import EmbedFn

logger = logging.getLogger(__name__)


def ensure_answers(answers: Sequence[Union[Dict[str, Any], MemberAnswer]]) -> List[MemberAnswer]:
    """Convert dicts to MemberAnswer, numbering people by position when absent."""
    out = []
    for i, a in enumerate(answers):
        if isinstance(a, MemberAnswer):
            out.append(a)
        else:
            out.append(MemberAnswer.model_validate({"person": i, **a}))
    return out


class RecommendationEngine:
    """
    Ranks a catalog for a group of members.

    Usage:
        engine = RecommendationEngine(embed=client.embed)
        result = await engine.recommend(answers, catalog)
    """

    def __init__(
        self,
        embed: Optional[EmbedFn] = None,
        config: Optional[RecommendationConfig] = None,
    ):
        self.embed = embed
        self.config = resolve_config(config)

    async def recommend(
        self,
        member_answers: Sequence[Union[Dict[str, Any], MemberAnswer]],
        catalog: Sequence[Union[Dict[str, Any], CatalogRecord]],
        embed: Optional[EmbedFn] = None,
        top_k: Optional[int] = None,
    ) -> RecommendationResult:
        """
        Return the top-K catalog records for the group.

        Raises NoPreferences (no answers or a blank answer), EmptyCatalog,
        EmbeddingFailed (any member embedding failed or timed out), and
        DimensionMismatch (catalog embedded with a different model).
        """
        answers = ensure_answers(member_answers)
        if not answers:
            raise NoPreferences()
        for a in answers:
            if not a.description.strip():
                raise NoPreferences(f"Answer for person {a.person} has no description")
        if not catalog:
            raise EmptyCatalog()
        embed_fn = embed or self.embed
        if embed_fn is None:
            raise ValueError("RecommendationEngine needs an embed function")
        k = top_k if top_k is not None else self.config.top_k
        if k < 1:
            raise ValueError(f"top_k must be >= 1, got {k}")

        records = ensure_records(list(catalog))
        query_vector = await get_group_vector(answers, embed_fn, self.config)
        ranked = rank_catalog(query_vector, records)
        logger.info(
            "[recommend] members=%d scored=%d top=%s",
            len(answers),
            len(ranked),
            ranked[0].record.title if ranked else None,
        )
        return RecommendationResult(recommendations=ranked[:k], total_scored=len(ranked))
