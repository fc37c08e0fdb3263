"""
Ingestion Pipeline

Builds the movie candidate set from TMDB across a fixed plan of query facets
(popular, top rated, per-genre discover, now playing, upcoming, optional
searches), then hands the accumulated rows to the pure candidate pool stage.

Failure scoping:
- a page request is retried by TMDBClient (bounded exponential backoff)
- a page that still fails ends its facet; earlier pages of that facet are kept
- a failed facet is logged and skipped; the run continues
- a row that does not validate as a movie is dropped and counted
- only the preflight check and the transform stage are fatal (IngestionFailed)
"""

import logging
import math
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence

from pydantic import ValidationError

from recommender.errors import IngestionFailed
from recommender.models.config import RecommendationConfig, DEFAULT_CONFIG
from recommender.models.movie import CandidateItem, CatalogCandidate
from recommender.stages.candidate_pool import build_candidate_pool

from .tmdb_client import TMDBClient

logger = logging.getLogger(__name__)

# Courtesy delays between page requests (seconds), independent of retry backoff
LIST_FACET_DELAY = 0.3
GENRE_FACET_DELAY = 0.4


@dataclass(frozen=True)
class FacetSpec:
    """One upstream query dimension: which endpoint, how many pages, how many rows per page."""

    name: str
    kind: str  # "popular" | "top_rated" | "genre" | "now_playing" | "upcoming" | "search"
    pages: int = 1
    per_page_limit: int = 20
    delay: float = LIST_FACET_DELAY
    genre_id: Optional[int] = None
    query: Optional[str] = None

    def fetch(self, client: TMDBClient, page: int) -> List[Dict]:
        if self.kind == "popular":
            return client.popular(page)
        if self.kind == "top_rated":
            return client.top_rated(page)
        if self.kind == "now_playing":
            return client.now_playing(page)
        if self.kind == "upcoming":
            return client.upcoming(page)
        if self.kind == "genre":
            return client.discover_by_genre(self.genre_id, page)
        if self.kind == "search":
            return client.search(self.query or "", page)
        raise ValueError(f"Unknown facet kind: {self.kind}")


def genre_facet(genre_id: int, name: str, limit: int, pages: int) -> FacetSpec:
    """Genre facet capped at `limit` rows overall, spread evenly across pages."""
    return FacetSpec(
        name=name,
        kind="genre",
        pages=pages,
        per_page_limit=math.ceil(limit / pages),
        delay=GENRE_FACET_DELAY,
        genre_id=genre_id,
    )


def search_facet(query: str, limit: int = 10) -> FacetSpec:
    return FacetSpec(name=f"Search: {query}", kind="search", pages=1, per_page_limit=limit, query=query)


# (genre_id, name, limit, pages)
GENRE_PLAN = [
    (28, "Action", 12, 2),
    (35, "Comedy", 12, 2),
    (18, "Drama", 12, 2),
    (878, "Science Fiction", 10, 2),
    (27, "Horror", 8, 1),
    (10749, "Romance", 8, 1),
    (53, "Thriller", 10, 2),
    (16, "Animation", 8, 1),
    (80, "Crime", 8, 1),
    (14, "Fantasy", 8, 1),
    (12, "Adventure", 10, 2),
    (10402, "Music", 5, 1),
    (9648, "Mystery", 6, 1),
    (10751, "Family", 6, 1),
    (36, "History", 5, 1),
]

DEFAULT_FACET_PLAN: List[FacetSpec] = (
    [
        FacetSpec("Popular", "popular", pages=3, per_page_limit=15),
        FacetSpec("Top Rated", "top_rated", pages=2, per_page_limit=15),
    ]
    + [genre_facet(*g) for g in GENRE_PLAN]
    + [
        FacetSpec("Now Playing", "now_playing", pages=1, per_page_limit=10),
        FacetSpec("Upcoming", "upcoming", pages=1, per_page_limit=8),
    ]
)


@dataclass
class IngestionReport:
    """What an ingestion run fetched, lost, and kept."""

    facets_attempted: int = 0
    facets_failed: List[str] = field(default_factory=list)
    pages_fetched: int = 0
    pages_lost: int = 0
    raw_count: int = 0
    invalid_count: int = 0
    unique_count: int = 0
    candidate_count: int = 0

    @property
    def facets_succeeded(self) -> int:
        return self.facets_attempted - len(self.facets_failed)


@dataclass
class IngestionResult:
    """Candidates in priority order plus the run report."""

    candidates: List[CatalogCandidate]
    report: IngestionReport


class IngestionPipeline:
    """
    Fetches, deduplicates, filters, and ranks movie candidates from TMDB.

    Usage:
        pipeline = IngestionPipeline(TMDBClient(api_key))
        result = pipeline.run()
        for candidate in result.candidates: ...
    """

    def __init__(
        self,
        client: TMDBClient,
        facets: Optional[Sequence[FacetSpec]] = None,
        config: RecommendationConfig = DEFAULT_CONFIG,
        sleep: Callable[[float], None] = time.sleep,
        preflight: bool = True,
    ):
        self.client = client
        self.facets = list(facets) if facets is not None else list(DEFAULT_FACET_PLAN)
        self.config = config
        self.preflight = preflight
        self._sleep = sleep

    def check_connection(self) -> None:
        """Fail fast when the API is unreachable or the key is rejected."""
        try:
            self.client.configuration()
        except Exception as e:
            raise IngestionFailed(f"TMDB connectivity check failed: {e}") from e
        logger.info("[ingest] TMDB connection OK")

    def _fetch_facet(self, facet: FacetSpec, sink: List[Dict], report: IngestionReport) -> None:
        """Append each page's rows to sink; the courtesy delay follows every request."""
        for page in range(1, facet.pages + 1):
            try:
                rows = facet.fetch(self.client, page)
            except Exception:
                report.pages_lost += facet.pages - page + 1
                raise
            finally:
                self._sleep(facet.delay)
            sink.extend(rows[:facet.per_page_limit])
            report.pages_fetched += 1

    def validate_rows(self, raw: List[Dict], report: IngestionReport) -> List[CandidateItem]:
        """Parse rows one at a time; a malformed row is dropped, not fatal."""
        items = []
        for row in raw:
            try:
                items.append(CandidateItem.model_validate(row))
            except ValidationError as e:
                report.invalid_count += 1
                logger.debug("[ingest] dropping invalid row %r: %s", row.get("id") if isinstance(row, dict) else row, e)
        if report.invalid_count:
            logger.warning("[ingest] dropped %d row(s) that failed validation", report.invalid_count)
        return items

    def fetch_raw(self, report: IngestionReport) -> List[Dict]:
        """Run the facet plan; a failed facet is logged and skipped."""
        raw: List[Dict] = []
        for facet in self.facets:
            report.facets_attempted += 1
            logger.info("[ingest] fetching %s (%d page(s))", facet.name, facet.pages)
            try:
                self._fetch_facet(facet, raw, report)
            except Exception as e:
                report.facets_failed.append(facet.name)
                logger.warning("[ingest] facet %s failed, skipping: %s", facet.name, e)
        report.raw_count = len(raw)
        return raw

    def run(self) -> IngestionResult:
        """Fetch every facet, then transform the accumulated rows into candidates."""
        report = IngestionReport()
        if self.preflight:
            self.check_connection()

        raw = self.fetch_raw(report)
        logger.info("[ingest] total rows fetched before deduplication: %d", report.raw_count)

        items = self.validate_rows(raw, report)
        try:
            report.unique_count = len({item.id for item in items})
            candidates = build_candidate_pool(items, self.config)
        except Exception as e:
            lost = f" (facets failed: {', '.join(report.facets_failed)})" if report.facets_failed else ""
            raise IngestionFailed(f"Candidate transform failed: {e}{lost}") from e

        report.candidate_count = len(candidates)
        if report.facets_failed:
            logger.warning(
                "[ingest] partial run: %d/%d facets failed (%s), %d page(s) lost",
                len(report.facets_failed),
                report.facets_attempted,
                ", ".join(report.facets_failed),
                report.pages_lost,
            )
        logger.info(
            "[ingest] %d unique, %d candidates after quality filter",
            report.unique_count,
            report.candidate_count,
        )
        return IngestionResult(candidates=candidates, report=report)
