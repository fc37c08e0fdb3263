"""
Populate Script Tests

End-to-end runs of the populate CLI against a temp JSON catalog, with the
embedding client and TMDB client replaced by fakes.
"""

import json

import pytest

from recommender.errors import IngestionFailed
from recommender.models.movie import CatalogRecord
from recserver.scripts import populate_catalog as script
from recserver.services.catalog_store import JsonCatalogStore

from .fakes import FakeEmbedder


@pytest.fixture
def catalog_env(tmp_path, monkeypatch):
    path = tmp_path / "catalog.json"
    monkeypatch.setenv("CATALOG_STORE", "json")
    monkeypatch.setenv("CATALOG_PATH", str(path))
    monkeypatch.setenv("EMBEDDING_PROVIDER", "sentence-transformers")
    monkeypatch.setenv("EMBEDDING_DIMENSIONS", "384")
    monkeypatch.setenv("TMDB_API_KEY", "test-key")
    monkeypatch.setattr(script, "create_embedding_client", lambda config: FakeEmbedder(dimensions=384))
    return path


class FailingPipeline:
    def __init__(self, *args, **kwargs):
        pass

    def run(self):
        raise IngestionFailed("TMDB connectivity check failed: 401")


class TestPopulateScript:
    def test_sample_run_writes_catalog(self, catalog_env, capsys):
        assert script.main(["--sample", "--smoke-query", "space"]) == 0
        data = json.loads(catalog_env.read_text())
        assert data["movie_count"] == 5
        assert len(data["movies"][0]["embedding"]) == 384
        assert "Smoke query" in capsys.readouterr().out

    def test_ingestion_failure_falls_back_to_sample(self, catalog_env, monkeypatch):
        monkeypatch.setattr(script, "IngestionPipeline", FailingPipeline)
        assert script.main(["--smoke-query", ""]) == 0
        assert json.loads(catalog_env.read_text())["movie_count"] == 5

    def test_no_fallback_exits_with_error(self, catalog_env, monkeypatch):
        monkeypatch.setattr(script, "IngestionPipeline", FailingPipeline)
        assert script.main(["--no-fallback"]) == 1
        assert not catalog_env.exists()

    def test_dry_run_writes_nothing(self, catalog_env):
        assert script.main(["--sample", "--dry-run"]) == 0
        assert not catalog_env.exists()

    def test_limit(self, catalog_env):
        assert script.main(["--sample", "--limit", "2", "--smoke-query", ""]) == 0
        assert json.loads(catalog_env.read_text())["movie_count"] == 2

    def test_all_embeddings_failing_keeps_existing_catalog(self, catalog_env, monkeypatch):
        existing = [
            CatalogRecord(title=f"Kept {i}", description="Already in the catalog", embedding=[0.1] * 384)
            for i in range(3)
        ]
        JsonCatalogStore(catalog_env, dimensions=384).bulk_insert(existing)
        monkeypatch.setattr(
            script, "create_embedding_client", lambda config: FakeEmbedder(dimensions=384, fail_on=("",))
        )
        assert script.main(["--sample", "--smoke-query", ""]) == 1
        assert JsonCatalogStore(catalog_env, dimensions=384).count() == 3
