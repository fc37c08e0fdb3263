"""
Embedding Clients

Map text to a fixed-length vector. Three providers share one contract:
- SentenceTransformerEmbeddingClient: local all-MiniLM-L6-v2 (384-dim), the default
- OpenAIEmbeddingClient: text-embedding-3-small (1536-dim)
- GeminiEmbeddingClient: models/embedding-001 (768-dim)

Every call is retried with exponential backoff; exhausted retries or a model
that fails to load raise EmbeddingUnavailable. A vector whose length differs
from the configured dimensionality raises DimensionMismatch (never retried).

Usage:
    client = create_embedding_client(config)
    vector = client.embed("a heist movie with a twist")
"""

import logging
import threading
import time
from typing import Any, Callable, List, Optional, Protocol

from recommender.embedding import EMBEDDING_DIMENSIONS, EMBEDDING_MODEL
from recommender.errors import DimensionMismatch, EmbeddingUnavailable

from ..config import ServerConfig
from .retry import RetryPolicy, call_with_retry

logger = logging.getLogger(__name__)

EMBED_RETRY_POLICY = RetryPolicy(max_attempts=3, base_delay=1.0)
MODEL_LOAD_RETRY_POLICY = RetryPolicy(max_attempts=3, base_delay=2.0)


class EmbeddingClient(Protocol):
    """Protocol for text embedding providers."""

    model: str
    dimensions: int

    def embed(self, text: str) -> List[float]:
        """Return the embedding of text; raise EmbeddingUnavailable on failure."""
        ...


class BaseEmbeddingClient:
    """Retry, dimension check, and lazy model loading shared by the providers."""

    def __init__(
        self,
        model: str,
        dimensions: int,
        timeout: float = 10.0,
        retry_policy: RetryPolicy = EMBED_RETRY_POLICY,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.model = model
        self.dimensions = dimensions
        self.timeout = timeout
        self.retry_policy = retry_policy
        self._sleep = sleep
        self._backend: Optional[Any] = None
        self._load_lock = threading.Lock()

    # Subclasses implement these two
    def _load(self) -> Any:
        raise NotImplementedError

    def _embed(self, backend: Any, text: str) -> List[float]:
        raise NotImplementedError

    @property
    def backend(self) -> Any:
        """Get or create the provider backend (model or API client)."""
        if self._backend is None:
            with self._load_lock:
                if self._backend is None:
                    try:
                        self._backend = call_with_retry(
                            self._load,
                            MODEL_LOAD_RETRY_POLICY,
                            sleep=self._sleep,
                            label=f"load {self.model}",
                        )
                    except Exception as e:
                        raise EmbeddingUnavailable(f"Failed to load embedding model {self.model}: {e}") from e
                    logger.info("[embedding] %s ready (%d dims)", self.model, self.dimensions)
        return self._backend

    def warmup(self) -> None:
        """Load the backend and run one encode so the first request is not slow."""
        self.embed("warmup")

    def embed(self, text: str) -> List[float]:
        backend = self.backend
        try:
            vector = call_with_retry(
                lambda: self._embed(backend, text),
                self.retry_policy,
                sleep=self._sleep,
                label=f"embed via {self.model}",
            )
        except DimensionMismatch:
            raise
        except Exception as e:
            raise EmbeddingUnavailable(f"Embedding failed with {self.model}: {e}") from e
        return vector

    def _check_dimensions(self, vector: List[float]) -> List[float]:
        if len(vector) != self.dimensions:
            raise DimensionMismatch(self.dimensions, len(vector), f"model {self.model}")
        return vector


class SentenceTransformerEmbeddingClient(BaseEmbeddingClient):
    """Local sentence-transformers model; mean pooling with L2-normalized output."""

    def __init__(
        self,
        model: str = EMBEDDING_MODEL,
        dimensions: int = EMBEDDING_DIMENSIONS,
        cache_dir: Optional[str] = None,
        device: Optional[str] = None,
        **kwargs,
    ):
        super().__init__(model, dimensions, **kwargs)
        self.cache_dir = cache_dir
        self.device = device

    def _load(self) -> Any:
        from sentence_transformers import SentenceTransformer

        return SentenceTransformer(self.model, cache_folder=self.cache_dir, device=self.device)

    def _embed(self, backend: Any, text: str) -> List[float]:
        vector = backend.encode(text, normalize_embeddings=True, convert_to_numpy=True)
        return self._check_dimensions([float(x) for x in vector])


class OpenAIEmbeddingClient(BaseEmbeddingClient):
    """OpenAI embeddings API."""

    DEFAULT_MODEL = "text-embedding-3-small"
    DEFAULT_DIMENSIONS = 1536

    def __init__(
        self,
        api_key: Optional[str],
        model: str = DEFAULT_MODEL,
        dimensions: int = DEFAULT_DIMENSIONS,
        **kwargs,
    ):
        if not api_key:
            raise ValueError(
                "OpenAI API key not provided. Set OPENAI_API_KEY environment variable "
                "or pass api_key to OpenAIEmbeddingClient."
            )
        super().__init__(model, dimensions, **kwargs)
        self.api_key = api_key

    def _load(self) -> Any:
        from openai import OpenAI

        # Retries are ours; the SDK's own would multiply the attempt count
        return OpenAI(api_key=self.api_key, timeout=self.timeout, max_retries=0)

    def _embed(self, backend: Any, text: str) -> List[float]:
        params = {"model": self.model, "input": [text]}
        if self.model.startswith("text-embedding-3"):
            params["dimensions"] = self.dimensions
        response = backend.embeddings.create(**params)
        return self._check_dimensions(list(response.data[0].embedding))


class GeminiEmbeddingClient(BaseEmbeddingClient):
    """Google Gemini embeddings via google-generativeai."""

    DEFAULT_MODEL = "models/embedding-001"
    DEFAULT_DIMENSIONS = 768

    def __init__(
        self,
        api_key: Optional[str],
        model: str = DEFAULT_MODEL,
        dimensions: int = DEFAULT_DIMENSIONS,
        **kwargs,
    ):
        if not api_key:
            raise ValueError(
                "Gemini API key not provided. Set GEMINI_API_KEY environment variable "
                "or pass api_key to GeminiEmbeddingClient."
            )
        super().__init__(model, dimensions, **kwargs)
        self.api_key = api_key

    def _load(self) -> Any:
        import google.generativeai as genai

        genai.configure(api_key=self.api_key)
        return genai

    def _embed(self, backend: Any, text: str) -> List[float]:
        result = backend.embed_content(
            model=self.model,
            content=text,
            request_options={"timeout": self.timeout},
        )
        return self._check_dimensions(list(result["embedding"]))


def create_embedding_client(config: ServerConfig) -> BaseEmbeddingClient:
    """Build the embedding client selected by EMBEDDING_PROVIDER."""
    provider = config.embedding_provider
    common = {"timeout": config.http_timeout}
    if provider == "openai":
        return OpenAIEmbeddingClient(
            config.openai_api_key,
            model=config.embedding_model,
            dimensions=config.embedding_dimensions,
            **common,
        )
    if provider == "gemini":
        return GeminiEmbeddingClient(
            config.gemini_api_key,
            model=config.embedding_model,
            dimensions=config.embedding_dimensions,
            **common,
        )
    if provider == "sentence-transformers":
        return SentenceTransformerEmbeddingClient(
            model=config.embedding_model,
            dimensions=config.embedding_dimensions,
            cache_dir=str(config.models_dir),
            **common,
        )
    raise ValueError(f"Unknown embedding provider: {provider}")


def check_provider_available(config: ServerConfig) -> tuple[bool, str]:
    """
    Check if the configured embedding provider is installed and keyed.

    Returns:
        (is_available, message)
    """
    provider = config.embedding_provider
    try:
        if provider == "openai":
            import openai  # noqa: F401

            if not config.openai_api_key:
                return False, "OPENAI_API_KEY environment variable not set"
        elif provider == "gemini":
            import google.generativeai  # noqa: F401

            if not config.gemini_api_key:
                return False, "GEMINI_API_KEY environment variable not set"
        elif provider == "sentence-transformers":
            import sentence_transformers  # noqa: F401
        else:
            return False, f"Unknown embedding provider: {provider}"
    except ImportError as e:
        return False, f"{provider} package not installed: {e}"
    return True, f"{provider} configured ({config.embedding_model})"
