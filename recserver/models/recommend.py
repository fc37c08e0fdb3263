"""Recommendation request/response models."""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class AnswerIn(BaseModel):
    description: str
    person: Optional[int] = None


class RecommendRequest(BaseModel):
    answers: List[AnswerIn] = []


class MovieCard(BaseModel):
    """One recommendation; media fields are present only for ingested movies."""

    id: Optional[str] = None
    title: str
    description: str
    similarity: float
    tmdb_id: Optional[int] = None
    poster_url: Optional[str] = None
    backdrop_url: Optional[str] = None
    release_date: Optional[str] = None
    vote_average: Optional[float] = None
    vote_count: Optional[int] = None
    genre_ids: Optional[List[int]] = None
    popularity: Optional[float] = None


class RecommendResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    recommendations: List[MovieCard]
    total_scored: int = Field(alias="totalScored")
    message: str


class ErrorResponse(BaseModel):
    error: str
    code: str
    retryable: bool = False


class CatalogStatus(BaseModel):
    store: str
    movie_count: int
    embedding_model: str
    embedding_dimensions: int
    ready: bool
