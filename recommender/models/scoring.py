"""
Scoring models: member answers in, ranked results out.

Contains:
- MemberAnswer: one group member's free-text preference
- RankedResult: a catalog record with its similarity to the group vector
- RecommendationResult: top-K results plus the number of records scored
"""

from typing import List

from pydantic import BaseModel

from .movie import CatalogRecord


class MemberAnswer(BaseModel):
    """A person index and what they feel like watching."""

    person: int = 0
    description: str


class RankedResult(BaseModel):
    """A catalog record scored against the group query vector."""

    record: CatalogRecord
    similarity: float

    def to_response_dict(self) -> dict:
        out = self.record.to_response_dict()
        out["similarity"] = self.similarity
        return out


class RecommendationResult(BaseModel):
    """Top-K ranked results for one request."""

    recommendations: List[RankedResult]
    total_scored: int
