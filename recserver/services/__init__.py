"""Backing logic: upstream client, ingestion, embeddings, catalog stores."""

from .retry import RetryPolicy, DEFAULT_RETRY_POLICY, call_with_retry
from .tmdb_client import TMDBClient
from .ingestion import (
    DEFAULT_FACET_PLAN,
    FacetSpec,
    IngestionPipeline,
    IngestionReport,
    IngestionResult,
    genre_facet,
    search_facet,
)
from .embedding_client import (
    EmbeddingClient,
    GeminiEmbeddingClient,
    OpenAIEmbeddingClient,
    SentenceTransformerEmbeddingClient,
    check_provider_available,
    create_embedding_client,
)
from .catalog_store import (
    CatalogStore,
    InMemoryCatalogStore,
    JsonCatalogStore,
    QdrantCatalogStore,
    create_catalog_store,
    decode_embedding,
    encode_embedding,
    replace_catalog,
)
from .catalog_builder import (
    SAMPLE_MOVIES,
    BuildProgress,
    CatalogBuildResult,
    build_catalog,
    populate_catalog,
)

__all__ = [
    "RetryPolicy",
    "DEFAULT_RETRY_POLICY",
    "call_with_retry",
    "TMDBClient",
    "DEFAULT_FACET_PLAN",
    "FacetSpec",
    "IngestionPipeline",
    "IngestionReport",
    "IngestionResult",
    "genre_facet",
    "search_facet",
    "EmbeddingClient",
    "GeminiEmbeddingClient",
    "OpenAIEmbeddingClient",
    "SentenceTransformerEmbeddingClient",
    "check_provider_available",
    "create_embedding_client",
    "CatalogStore",
    "InMemoryCatalogStore",
    "JsonCatalogStore",
    "QdrantCatalogStore",
    "create_catalog_store",
    "decode_embedding",
    "encode_embedding",
    "replace_catalog",
    "SAMPLE_MOVIES",
    "BuildProgress",
    "CatalogBuildResult",
    "build_catalog",
    "populate_catalog",
]
