"""
Exhaustive catalog scoring against the group query vector.

Every record is scored with cosine similarity; the sort is stable so records
with equal similarity keep catalog order.
"""

from typing import List, Sequence

from ...errors import DimensionMismatch
from ...models.movie import CatalogRecord
from ...models.scoring import RankedResult
from ...utils.similarity import cosine_similarity


def score_record(query_vector: Sequence[float], record: CatalogRecord) -> RankedResult:
    """Score one record. A stored embedding of the wrong size means catalog/model skew."""
    if record.dimensions != len(query_vector):
        raise DimensionMismatch(
            len(query_vector),
            record.dimensions,
            f"catalog record {record.id or record.title!r}",
        )
    return RankedResult(record=record, similarity=cosine_similarity(query_vector, record.embedding))


def rank_catalog(
    query_vector: Sequence[float],
    catalog: Sequence[CatalogRecord],
) -> List[RankedResult]:
    """Score the whole catalog and sort by descending similarity (stable)."""
    scored = [score_record(query_vector, record) for record in catalog]
    scored.sort(key=lambda r: r.similarity, reverse=True)
    return scored
