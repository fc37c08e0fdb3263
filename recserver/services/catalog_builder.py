"""
Catalog Builder

Embeds ingestion candidates and writes them to the catalog store.

Usage:
    result = build_catalog(candidates, embedder)
    replace_catalog(store, result.records)

A candidate whose embedding fails (provider error, wrong dimensionality) is
skipped and recorded in result.errors; the rest of the batch continues.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence

from recommender.embedding import get_embed_text, validate_movie_for_embedding
from recommender.models.movie import CatalogCandidate, CatalogRecord

from .catalog_store import CatalogStore, replace_catalog
from .embedding_client import EmbeddingClient

logger = logging.getLogger(__name__)

# Pause between items so a hosted embedding provider is not hammered
DELAY_BETWEEN_ITEMS = 0.2


@dataclass
class BuildProgress:
    """Progress information for catalog building."""
    current: int
    total: int
    title: str = ""
    error: str = ""


@dataclass
class CatalogBuildResult:
    """Records ready to persist plus what was dropped on the way."""
    records: List[CatalogRecord] = field(default_factory=list)
    inserted: int = 0
    skipped: int = 0
    errors: List[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return len(self.errors) == 0


# Bundled sample catalog; used when the upstream run fails or comes back empty
SAMPLE_MOVIES = [
    CatalogCandidate(
        title="The Matrix",
        description=(
            "A computer hacker learns that reality as he knows it is actually a simulation, "
            "and he must fight to free humanity from the machines."
        ),
    ),
    CatalogCandidate(
        title="Inception",
        description=(
            "A thief who steals corporate secrets through dream-sharing technology is given "
            "the inverse task of planting an idea into the mind of a CEO."
        ),
    ),
    CatalogCandidate(
        title="The Dark Knight",
        description=(
            "Batman faces his greatest challenge yet when the Joker wreaks havoc on Gotham City, "
            "forcing him to confront his own moral boundaries."
        ),
    ),
    CatalogCandidate(
        title="Parasite",
        description=(
            "A poor family schemes to become employed by a wealthy family and infiltrate their "
            "household by posing as unrelated, highly qualified individuals."
        ),
    ),
    CatalogCandidate(
        title="Spirited Away",
        description=(
            "A young girl becomes trapped in a mysterious spirit world and must find a way to "
            "save her parents and return to the human world."
        ),
    ),
]


def build_catalog(
    candidates: Sequence[CatalogCandidate],
    embedder: EmbeddingClient,
    dimensions: Optional[int] = None,
    delay: float = DELAY_BETWEEN_ITEMS,
    sleep: Callable[[float], None] = time.sleep,
    on_progress: Optional[Callable[[BuildProgress], None]] = None,
) -> CatalogBuildResult:
    """
    Embed every candidate in order.

    Args:
        candidates: Ingestion output, already in priority order
        embedder: Anything with embed(text) -> List[float]
        dimensions: Required vector length (defaults to embedder.dimensions)
        delay: Seconds to wait between items
        sleep: Injected for tests
        on_progress: Optional callback per item

    Returns:
        CatalogBuildResult; records keep the candidates' order
    """
    expected = dimensions if dimensions is not None else getattr(embedder, "dimensions", None)
    result = CatalogBuildResult()
    total = len(candidates)

    for i, candidate in enumerate(candidates):
        if i > 0 and delay > 0:
            sleep(delay)

        ok, reason = validate_movie_for_embedding(candidate)
        if not ok:
            error = f"{candidate.title or 'unknown'}: {reason}"
        else:
            error = ""
            try:
                vector = embedder.embed(get_embed_text(candidate))
                if expected is not None and len(vector) != expected:
                    error = f"{candidate.title}: expected {expected} dimensions, got {len(vector)}"
                else:
                    result.records.append(CatalogRecord(
                        title=candidate.title,
                        description=candidate.description,
                        embedding=list(vector),
                        media=candidate.media,
                    ))
            except Exception as e:
                error = f"{candidate.title}: {e}"

        if error:
            result.skipped += 1
            result.errors.append(error)
            logger.warning("[catalog] skipping %s", error)
        else:
            logger.debug("[catalog] embedded %d/%d: %s", i + 1, total, candidate.title)

        if on_progress:
            on_progress(BuildProgress(current=i + 1, total=total, title=candidate.title, error=error))

    logger.info("[catalog] embedded %d/%d candidates (%d skipped)", len(result.records), total, result.skipped)
    return result


def populate_catalog(
    store: CatalogStore,
    candidates: Sequence[CatalogCandidate],
    embedder: EmbeddingClient,
    **kwargs,
) -> CatalogBuildResult:
    """
    Embed candidates and replace the store's contents with the result.

    When nothing could be embedded the store is left untouched and
    result.inserted stays 0.
    """
    result = build_catalog(candidates, embedder, **kwargs)
    if not result.records:
        logger.warning("[catalog] no movies embedded; keeping the existing catalog")
        return result
    result.inserted = replace_catalog(store, result.records)
    return result
