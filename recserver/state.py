"""Application state: config, embedding client, catalog store, engine."""

import logging
from typing import List, Optional

from fastapi import Request

from recommender import RecommendationConfig, RecommendationEngine
from recommender.errors import EmbeddingUnavailable
from recommender.models.movie import CatalogRecord

from .config import ServerConfig
from .services import (
    CatalogStore,
    EmbeddingClient,
    create_catalog_store,
    create_embedding_client,
)

logger = logging.getLogger(__name__)


class AppState:
    """
    Everything a request needs, built once per app.

    Collaborators can be injected (tests pass fakes); otherwise they are
    created from the config.
    """

    def __init__(
        self,
        config: ServerConfig,
        embedder: Optional[EmbeddingClient] = None,
        store: Optional[CatalogStore] = None,
        recommendation_config: Optional[RecommendationConfig] = None,
    ):
        self.config = config
        self.embedder = embedder if embedder is not None else create_embedding_client(config)
        self.store = store if store is not None else create_catalog_store(config)
        rec_config = recommendation_config or RecommendationConfig(
            top_k=config.top_k,
            embed_timeout_seconds=config.http_timeout,
        )
        self.engine = RecommendationEngine(embed=self.embedder.embed, config=rec_config)
        logger.info(
            "[startup] embeddings: %s (%d dims), catalog store: %s",
            self.embedder.model,
            self.embedder.dimensions,
            self.store_backend,
        )

    @property
    def store_backend(self) -> str:
        return getattr(self.store, "backend", type(self.store).__name__)

    def warmup(self) -> bool:
        """
        Load the embedding model ahead of the first request.

        A failed load is logged, not raised: the server still starts and
        requests retry the load (answering 503 until it succeeds).
        """
        warmup = getattr(self.embedder, "warmup", None)
        if warmup is None:
            return True
        try:
            warmup()
        except EmbeddingUnavailable as e:
            logger.error("[startup] embedding warmup failed: %s", e)
            return False
        logger.info("[startup] embedding model %s warmed up", self.embedder.model)
        return True

    def load_catalog(self) -> List[CatalogRecord]:
        """Read the full catalog; called once per recommendation request."""
        return self.store.select_all()

    def catalog_count(self) -> int:
        return self.store.count()


def get_state(request: Request) -> AppState:
    """FastAPI dependency: the AppState attached by create_app."""
    return request.app.state.app_state
