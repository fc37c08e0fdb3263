"""
Recommender configuration: candidate pool (ingestion) and ranking parameters.

RecommendationConfig defaults are defined here. Callers may pass a dict
(e.g. from a JSON overrides file); from_dict() merges it with these defaults.
"""

from typing import Dict, Optional

from pydantic import BaseModel, model_validator


class RecommendationConfig(BaseModel):
    """Configuration for candidate pool building and group ranking."""

    # -------------------------------------------------------------------------
    # Candidate Pool: quality gates applied to upstream items
    # -------------------------------------------------------------------------

    # Overview must be strictly longer than this (after strip). Thin overviews embed poorly.
    min_description_length: int = 30

    # Vote count must be strictly greater than this. Filters obscure/unrated titles.
    min_vote_count: int = 10

    # -------------------------------------------------------------------------
    # Composite Ranking (advisory ordering, no cutoff)
    # score = weight_vote_average * vote_average + weight_popularity * log(popularity)
    # -------------------------------------------------------------------------

    weight_vote_average: float = 0.7
    weight_popularity: float = 0.3

    # -------------------------------------------------------------------------
    # Ranking
    # -------------------------------------------------------------------------

    # Number of results returned per request.
    top_k: int = 5

    # Upper bound for a single member-answer embedding call.
    embed_timeout_seconds: float = 10.0

    @model_validator(mode="after")
    def check_bounds(self):
        if self.top_k < 1:
            raise ValueError(f"top_k must be >= 1, got {self.top_k}")
        if self.embed_timeout_seconds <= 0:
            raise ValueError("embed_timeout_seconds must be positive")
        if self.min_description_length < 0 or self.min_vote_count < 0:
            raise ValueError("Quality thresholds must be non-negative")
        return self

    @classmethod
    def from_dict(cls, config_dict: Dict) -> "RecommendationConfig":
        """Create config from dictionary (e.g., loaded from JSON)."""
        flat = {}
        if "candidate_pool" in config_dict:
            flat.update(config_dict["candidate_pool"])
        if "composite_weights" in config_dict:
            cw = config_dict["composite_weights"]
            if "vote_average" in cw:
                flat["weight_vote_average"] = cw["vote_average"]
            if "popularity" in cw:
                flat["weight_popularity"] = cw["popularity"]
        if "ranking" in config_dict:
            flat.update(config_dict["ranking"])
        allowed = set(cls.model_fields)
        flat.update({k: v for k, v in config_dict.items() if k in allowed})
        filtered = {k: v for k, v in flat.items() if k in allowed}
        return cls.model_validate(filtered)


DEFAULT_CONFIG = RecommendationConfig()


def resolve_config(config: Optional["RecommendationConfig"]) -> "RecommendationConfig":
    """Return config or DEFAULT_CONFIG when none is provided."""
    return config if config is not None else DEFAULT_CONFIG
