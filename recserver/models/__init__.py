"""Pydantic request/response models for the API."""

from .recommend import (
    AnswerIn,
    CatalogStatus,
    ErrorResponse,
    MovieCard,
    RecommendRequest,
    RecommendResponse,
)

__all__ = [
    "AnswerIn",
    "CatalogStatus",
    "ErrorResponse",
    "MovieCard",
    "RecommendRequest",
    "RecommendResponse",
]
