"""
Server Configuration

Loads configuration from environment variables and provides defaults.
Supports loading from .env file using python-dotenv.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from recommender.embedding import EMBEDDING_DIMENSIONS, EMBEDDING_MODEL

# Single .env at the project root for the server and the populate script
root_env = Path(__file__).resolve().parent.parent / ".env"
if root_env.exists():
    load_dotenv(root_env)

EMBEDDING_PROVIDERS = ("sentence-transformers", "openai", "gemini")
CATALOG_STORES = ("json", "qdrant", "memory")

# Model defaults per provider when EMBEDDING_MODEL is unset
PROVIDER_DEFAULTS = {
    "sentence-transformers": (EMBEDDING_MODEL, EMBEDDING_DIMENSIONS),
    "openai": ("text-embedding-3-small", 1536),
    "gemini": ("models/embedding-001", 768),
}


@dataclass
class ServerConfig:
    """Server configuration."""

    # API Keys
    tmdb_api_key: Optional[str] = None
    openai_api_key: Optional[str] = None
    gemini_api_key: Optional[str] = None

    # Upstream catalog
    tmdb_base_url: str = "https://api.themoviedb.org/3"
    http_timeout: float = 10.0

    # Embeddings
    embedding_provider: str = "sentence-transformers"
    embedding_model: str = EMBEDDING_MODEL
    embedding_dimensions: int = EMBEDDING_DIMENSIONS
    models_dir: Path = Path(__file__).parent.parent / "models"

    # Catalog store: "json" | "qdrant" | "memory"
    catalog_store: str = "json"
    catalog_path: Path = Path(__file__).parent.parent / "data" / "catalog.json"
    qdrant_url: Optional[str] = None
    qdrant_collection: str = "movies"

    # Server settings
    host: str = "0.0.0.0"
    port: int = 5001
    top_k: int = 5
    cors_origins: List[str] = field(default_factory=lambda: ["http://localhost:5173", "http://localhost:3000"])
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """Load configuration from environment variables."""
        base_dir = Path(__file__).parent.parent

        def _path_env(key: str, default: Path) -> Path:
            v = os.getenv(key)
            if not v:
                return default
            p = Path(v)
            return p if p.is_absolute() else (base_dir / p).resolve()

        provider = os.getenv("EMBEDDING_PROVIDER", "sentence-transformers").strip().lower()
        default_model, default_dims = PROVIDER_DEFAULTS.get(provider, (EMBEDDING_MODEL, EMBEDDING_DIMENSIONS))
        origins = os.getenv("CORS_ORIGINS", "")

        return cls(
            tmdb_api_key=os.getenv("TMDB_API_KEY"),
            openai_api_key=os.getenv("OPENAI_API_KEY"),
            gemini_api_key=os.getenv("GEMINI_API_KEY") or os.getenv("GOOGLE_API_KEY"),
            tmdb_base_url=os.getenv("TMDB_BASE_URL", "https://api.themoviedb.org/3").rstrip("/"),
            http_timeout=float(os.getenv("HTTP_TIMEOUT", "10")),
            embedding_provider=provider,
            embedding_model=os.getenv("EMBEDDING_MODEL") or default_model,
            embedding_dimensions=int(os.getenv("EMBEDDING_DIMENSIONS") or default_dims),
            models_dir=_path_env("MODELS_DIR", base_dir / "models"),
            catalog_store=os.getenv("CATALOG_STORE", "json").strip().lower(),
            catalog_path=_path_env("CATALOG_PATH", base_dir / "data" / "catalog.json"),
            qdrant_url=os.getenv("QDRANT_URL"),
            qdrant_collection=os.getenv("QDRANT_COLLECTION", "movies"),
            host=os.getenv("HOST", "0.0.0.0"),
            port=int(os.getenv("PORT", "5001")),
            top_k=int(os.getenv("TOP_K", "5")),
            cors_origins=[o.strip() for o in origins.split(",") if o.strip()] or cls().cors_origins,
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )

    def validate(self) -> tuple[bool, list[str]]:
        """
        Validate the configuration.

        Returns:
            (is_valid, list_of_errors)
        """
        errors = []

        if self.embedding_provider not in EMBEDDING_PROVIDERS:
            errors.append(f"Unknown EMBEDDING_PROVIDER: {self.embedding_provider}")
        if self.embedding_provider == "openai" and not self.openai_api_key:
            errors.append("OPENAI_API_KEY is required for the openai embedding provider")
        if self.embedding_provider == "gemini" and not self.gemini_api_key:
            errors.append("GEMINI_API_KEY is required for the gemini embedding provider")
        if self.embedding_dimensions <= 0:
            errors.append(f"EMBEDDING_DIMENSIONS must be positive, got {self.embedding_dimensions}")

        if self.catalog_store not in CATALOG_STORES:
            errors.append(f"Unknown CATALOG_STORE: {self.catalog_store}")
        if self.catalog_store == "qdrant" and not self.qdrant_url:
            errors.append("QDRANT_URL is required for the qdrant catalog store")

        if self.top_k < 1:
            errors.append(f"TOP_K must be >= 1, got {self.top_k}")

        # TMDB key is only needed by the populate script, not the server

        return len(errors) == 0, errors


def configure_logging(level: str = "INFO") -> None:
    """Root logging format shared by the server and the populate script."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
