"""Server configuration: environment loading and validation."""

from pathlib import Path

from recserver.config import ServerConfig

ENV_KEYS = (
    "EMBEDDING_PROVIDER", "EMBEDDING_MODEL", "EMBEDDING_DIMENSIONS", "CATALOG_STORE", "CATALOG_PATH",
    "QDRANT_URL", "TOP_K", "CORS_ORIGINS", "OPENAI_API_KEY", "GEMINI_API_KEY", "GOOGLE_API_KEY",
)


def clean_env(monkeypatch):
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


class TestFromEnv:
    def test_defaults(self, monkeypatch):
        clean_env(monkeypatch)
        config = ServerConfig.from_env()
        assert config.embedding_provider == "sentence-transformers"
        assert config.embedding_dimensions == 384
        assert config.catalog_store == "json"
        assert config.top_k == 5
        assert config.validate() == (True, [])

    def test_provider_defaults_follow_provider(self, monkeypatch):
        clean_env(monkeypatch)
        monkeypatch.setenv("EMBEDDING_PROVIDER", "openai")
        config = ServerConfig.from_env()
        assert config.embedding_model == "text-embedding-3-small"
        assert config.embedding_dimensions == 1536

    def test_overrides(self, monkeypatch):
        clean_env(monkeypatch)
        monkeypatch.setenv("TOP_K", "3")
        monkeypatch.setenv("CORS_ORIGINS", "https://a.test, https://b.test")
        monkeypatch.setenv("CATALOG_PATH", "/tmp/movies.json")
        config = ServerConfig.from_env()
        assert config.top_k == 3
        assert config.cors_origins == ["https://a.test", "https://b.test"]
        assert config.catalog_path == Path("/tmp/movies.json")


class TestValidate:
    def test_missing_provider_key(self):
        ok, errors = ServerConfig(embedding_provider="openai").validate()
        assert not ok
        assert any("OPENAI_API_KEY" in e for e in errors)

    def test_qdrant_needs_url(self):
        ok, errors = ServerConfig(catalog_store="qdrant").validate()
        assert not ok
        assert any("QDRANT_URL" in e for e in errors)

    def test_bad_top_k(self):
        ok, _ = ServerConfig(top_k=0).validate()
        assert not ok

    def test_unknown_store(self):
        ok, errors = ServerConfig(catalog_store="sqlite").validate()
        assert not ok
