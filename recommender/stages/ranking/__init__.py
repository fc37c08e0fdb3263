"""
Group ranking: embed member answers, average, score the catalog.

Public API: get_group_vector, rank_catalog.
- query_vector: concurrent member embedding + averaging.
- core: exhaustive cosine scoring and stable sort.
"""

from .core import rank_catalog, score_record
from .query_vector import embed_member_answers, get_group_vector

__all__ = [
    "rank_catalog",
    "score_record",
    "embed_member_answers",
    "get_group_vector",
]
