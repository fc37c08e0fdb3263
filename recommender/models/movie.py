"""
Movie models: upstream candidates, embedding-ready projections, and catalog records.

CandidateItem mirrors one TMDB list row and is built via CandidateItem.model_validate(d).
Media attributes travel as one optional substructure: a record either has all of
its TMDB metadata (keyed by tmdb_id) or none of it.
"""

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, field_validator

TMDB_IMAGE_BASE_URL = "https://image.tmdb.org/t/p/w500"


class MediaAttributes(BaseModel):
    """TMDB metadata carried from ingestion to the response."""

    tmdb_id: int
    poster_url: Optional[str] = None
    backdrop_url: Optional[str] = None
    release_date: Optional[str] = None
    vote_average: Optional[float] = None
    vote_count: Optional[int] = None
    genre_ids: List[int] = []
    popularity: Optional[float] = None


class CandidateItem(BaseModel):
    """
    Raw movie row from the upstream API.

    All fields except id are optional; list endpoints routinely omit overview or paths.
    """

    model_config = ConfigDict(extra="allow")

    id: int
    title: Optional[str] = None
    overview: Optional[str] = None
    poster_path: Optional[str] = None
    backdrop_path: Optional[str] = None
    release_date: Optional[str] = None
    vote_average: float = 0.0
    vote_count: int = 0
    genre_ids: List[int] = []
    popularity: float = 0.0

    @field_validator("vote_average", "vote_count", "popularity", mode="before")
    @classmethod
    def null_as_zero(cls, v):
        return 0 if v is None else v

    @field_validator("genre_ids", mode="before")
    @classmethod
    def null_as_empty(cls, v):
        return [] if v is None else v

    def image_url(self, path: Optional[str]) -> Optional[str]:
        return f"{TMDB_IMAGE_BASE_URL}{path}" if path else None

    def media_attributes(self) -> MediaAttributes:
        return MediaAttributes(
            tmdb_id=self.id,
            poster_url=self.image_url(self.poster_path),
            backdrop_url=self.image_url(self.backdrop_path),
            release_date=self.release_date,
            vote_average=self.vote_average,
            vote_count=self.vote_count,
            genre_ids=list(self.genre_ids),
            popularity=self.popularity,
        )


class CatalogCandidate(BaseModel):
    """A filtered, projected movie ready to be embedded."""

    title: str
    description: str
    media: Optional[MediaAttributes] = None


class CatalogRecord(BaseModel):
    """A persisted movie with its embedding. Read-only at request time."""

    id: Optional[str] = None
    title: str
    description: str
    embedding: List[float]
    media: Optional[MediaAttributes] = None

    @field_validator("embedding")
    @classmethod
    def embedding_not_empty(cls, v: List[float]) -> List[float]:
        if not v:
            raise ValueError("CatalogRecord requires a non-empty embedding")
        return v

    @property
    def dimensions(self) -> int:
        return len(self.embedding)

    def to_response_dict(self) -> Dict[str, Any]:
        """Flat dict for API responses: core fields plus media fields when present."""
        out: Dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "description": self.description,
        }
        if self.media is not None:
            out.update(self.media.model_dump())
        return out


def ensure_candidates(items: List[Union[Dict[str, Any], CandidateItem]]) -> List[CandidateItem]:
    """Convert list of dicts or CandidateItems to CandidateItem models."""
    return [
        CandidateItem.model_validate(i) if isinstance(i, dict) else i
        for i in items
    ]


def ensure_records(records: List[Union[Dict[str, Any], CatalogRecord]]) -> List[CatalogRecord]:
    """Convert list of dicts or CatalogRecords to CatalogRecord models."""
    return [
        CatalogRecord.model_validate(r) if isinstance(r, dict) else r
        for r in records
    ]
