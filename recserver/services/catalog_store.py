"""
Catalog Store

Persists CatalogRecords (movie + embedding). The populate script writes the
catalog as one batch (clear, then insert); the server only reads it.

Implementations:
- InMemoryCatalogStore: tests and throwaway runs
- JsonCatalogStore: single JSON file, every write is temp file + os.replace
- QdrantCatalogStore: one Qdrant collection, cosine distance

All of them pass embeddings through encode_embedding / decode_embedding, so a
record read back always carries a List[float] regardless of how it was stored.
"""

import json
import logging
import os
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol, Sequence

from recommender.errors import CatalogStoreError, DimensionMismatch, EmptyInput
from recommender.embedding import STRATEGY_VERSION
from recommender.models.movie import CatalogRecord

from ..config import ServerConfig

logger = logging.getLogger(__name__)


class CatalogStore(Protocol):
    """Protocol for catalog storage."""

    def clear_all(self) -> None:
        """Remove every record."""
        ...

    def bulk_insert(self, records: Sequence[CatalogRecord]) -> int:
        """Append records; return how many were written."""
        ...

    def select_all(self) -> List[CatalogRecord]:
        """Every record, embeddings decoded."""
        ...

    def count(self) -> int:
        ...


# ----------------------------------------------------------------------
# Embedding codec
# ----------------------------------------------------------------------

def encode_embedding(vector: Sequence[float]) -> List[float]:
    """Native float list for storage."""
    return [float(x) for x in vector]


def decode_embedding(value: Any) -> List[float]:
    """
    Decode a stored embedding into List[float].

    Accepts a native list (or tuple) of numbers or JSON text of one; older
    catalogs stored the vector as a string column.
    """
    if isinstance(value, (bytes, bytearray)):
        value = value.decode("utf-8")
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except json.JSONDecodeError as e:
            raise CatalogStoreError(f"Stored embedding is not valid JSON: {e}") from e
    if not isinstance(value, (list, tuple)) or not value:
        raise CatalogStoreError(f"Stored embedding must be a non-empty list, got {type(value).__name__}")
    try:
        return [float(x) for x in value]
    except (TypeError, ValueError) as e:
        raise CatalogStoreError(f"Stored embedding has non-numeric entries: {e}") from e


def record_to_row(record: CatalogRecord) -> Dict[str, Any]:
    row = record.model_dump(mode="json", exclude={"embedding"})
    row["embedding"] = encode_embedding(record.embedding)
    return row


def row_to_record(row: Dict[str, Any]) -> CatalogRecord:
    data = dict(row)
    data["embedding"] = decode_embedding(data.get("embedding"))
    return CatalogRecord.model_validate(data)


def _check_dimensions(records: Sequence[CatalogRecord], dimensions: Optional[int]) -> None:
    if dimensions is None:
        return
    for record in records:
        if record.dimensions != dimensions:
            raise DimensionMismatch(dimensions, record.dimensions, f"record '{record.title}'")


# ----------------------------------------------------------------------
# In-memory
# ----------------------------------------------------------------------

class InMemoryCatalogStore:
    """Catalog held in a list. Ids are assigned on insert when missing."""

    backend = "memory"

    def __init__(self, records: Optional[Sequence[CatalogRecord]] = None, dimensions: Optional[int] = None):
        self.dimensions = dimensions
        self._rows: List[Dict[str, Any]] = []
        self._next_id = 1
        if records:
            self.bulk_insert(records)

    def clear_all(self) -> None:
        self._rows = []
        self._next_id = 1

    def bulk_insert(self, records: Sequence[CatalogRecord]) -> int:
        _check_dimensions(records, self.dimensions)
        for record in records:
            row = record_to_row(record)
            if row.get("id") is None:
                row["id"] = str(self._next_id)
            self._next_id += 1
            self._rows.append(row)
        return len(records)

    def select_all(self) -> List[CatalogRecord]:
        return [row_to_record(row) for row in self._rows]

    def count(self) -> int:
        return len(self._rows)


# ----------------------------------------------------------------------
# JSON file
# ----------------------------------------------------------------------

class JsonCatalogStore:
    """
    Catalog persisted as one JSON document.

    File layout:
        {"embedding_model": ..., "embedding_dimensions": ..., "strategy_version": ...,
         "created_at": ...,
         "movie_count": N, "movies": [{id, title, description, embedding, media}, ...]}

    Writes go to a temp file in the same directory and are swapped in with
    os.replace, so a reader sees either the old catalog or the new one.
    A catalog built under another embedding strategy still loads, with a
    warning to re-run the populate script.
    """

    backend = "json"

    def __init__(self, path: Path, dimensions: Optional[int] = None, embedding_model: str = ""):
        self.path = Path(path)
        self.dimensions = dimensions
        self.embedding_model = embedding_model

    def _read_document(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path) as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            raise CatalogStoreError(f"Failed to read catalog from {self.path}: {e}") from e
        if not isinstance(data, dict):
            raise CatalogStoreError(f"Catalog file {self.path} is not a JSON object")
        return data

    def _read_rows(self, data: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        if data is None:
            data = self._read_document()
        rows = data.get("movies", [])
        if not isinstance(rows, list):
            raise CatalogStoreError(f"Catalog file {self.path} has no 'movies' list")
        return rows

    def _write_rows(self, rows: List[Dict[str, Any]]) -> None:
        data = {
            "embedding_model": self.embedding_model,
            "embedding_dimensions": self.dimensions,
            "strategy_version": STRATEGY_VERSION,
            "created_at": datetime.now().isoformat(),
            "movie_count": len(rows),
            "movies": rows,
        }
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w") as f:
                json.dump(data, f)
            os.replace(tmp_path, self.path)
        except OSError as e:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise CatalogStoreError(f"Failed to write catalog to {self.path}: {e}") from e

    def clear_all(self) -> None:
        self._write_rows([])

    def bulk_insert(self, records: Sequence[CatalogRecord]) -> int:
        _check_dimensions(records, self.dimensions)
        rows = self._read_rows()
        next_id = max((int(r["id"]) for r in rows if str(r.get("id", "")).isdigit()), default=0) + 1
        for record in records:
            row = record_to_row(record)
            if row.get("id") is None:
                row["id"] = str(next_id)
                next_id += 1
            rows.append(row)
        self._write_rows(rows)
        logger.info("[catalog] wrote %d movies to %s", len(rows), self.path)
        return len(records)

    def select_all(self) -> List[CatalogRecord]:
        data = self._read_document()
        stored = data.get("strategy_version")
        if data and stored != STRATEGY_VERSION:
            logger.warning(
                "[catalog] %s was built with embedding strategy %s (current %s); re-run the populate script",
                self.path,
                stored,
                STRATEGY_VERSION,
            )
        return [row_to_record(row) for row in self._read_rows(data)]

    def count(self) -> int:
        return len(self._read_rows())


# ----------------------------------------------------------------------
# Qdrant
# ----------------------------------------------------------------------

class QdrantCatalogStore:
    """
    Catalog stored in one Qdrant collection.

    clear_all recreates the collection (cosine distance, configured size);
    record fields travel in the point payload, the embedding is the point vector.
    """

    backend = "qdrant"
    BATCH_SIZE = 100

    def __init__(
        self,
        qdrant_url: str,
        collection: str = "movies",
        dimensions: int = 384,
        timeout: float = 30.0,
        client: Optional[Any] = None,
    ):
        self.qdrant_url = qdrant_url
        self.collection = collection
        self.dimensions = dimensions
        self.timeout = timeout
        self._client = client

    @property
    def client(self) -> Any:
        """Get or create the Qdrant client."""
        if self._client is None:
            from qdrant_client import QdrantClient

            try:
                self._client = QdrantClient(url=self.qdrant_url, timeout=self.timeout)
            except Exception as e:
                raise CatalogStoreError(f"Failed to connect to Qdrant at {self.qdrant_url}: {e}") from e
        return self._client

    def _collection_exists(self) -> bool:
        collections = self.client.get_collections().collections
        return any(c.name == self.collection for c in collections)

    def clear_all(self) -> None:
        from qdrant_client.http import models

        try:
            if self._collection_exists():
                self.client.delete_collection(self.collection)
            self.client.create_collection(
                collection_name=self.collection,
                vectors_config=models.VectorParams(size=self.dimensions, distance=models.Distance.COSINE),
            )
        except Exception as e:
            raise CatalogStoreError(f"Failed to reset Qdrant collection '{self.collection}': {e}") from e

    def bulk_insert(self, records: Sequence[CatalogRecord]) -> int:
        from qdrant_client.http import models

        _check_dimensions(records, self.dimensions)
        start = self.count()
        try:
            for i in range(0, len(records), self.BATCH_SIZE):
                batch = records[i:i + self.BATCH_SIZE]
                points = []
                for offset, record in enumerate(batch):
                    point_id = start + i + offset + 1
                    payload = record.model_dump(mode="json", exclude={"embedding"})
                    if payload.get("id") is None:
                        payload["id"] = str(point_id)
                    points.append(models.PointStruct(
                        id=point_id,
                        vector=encode_embedding(record.embedding),
                        payload=payload,
                    ))
                self.client.upsert(collection_name=self.collection, points=points)
        except Exception as e:
            raise CatalogStoreError(f"Failed to insert into Qdrant collection '{self.collection}': {e}") from e
        logger.info("[catalog] upserted %d movies into qdrant:%s", len(records), self.collection)
        return len(records)

    def select_all(self) -> List[CatalogRecord]:
        try:
            if not self._collection_exists():
                return []
            rows: List[Dict[str, Any]] = []
            offset = None
            while True:
                points, next_offset = self.client.scroll(
                    collection_name=self.collection,
                    limit=self.BATCH_SIZE,
                    offset=offset,
                    with_payload=True,
                    with_vectors=True,
                )
                for point in points:
                    row = dict(point.payload or {})
                    row.setdefault("id", str(point.id))
                    row["embedding"] = point.vector
                    rows.append(row)
                if next_offset is None:
                    break
                offset = next_offset
        except Exception as e:
            raise CatalogStoreError(f"Failed to read Qdrant collection '{self.collection}': {e}") from e
        rows.sort(key=lambda r: int(r["id"]) if str(r["id"]).isdigit() else 0)
        return [row_to_record(row) for row in rows]

    def count(self) -> int:
        try:
            if not self._collection_exists():
                return 0
            return self.client.count(collection_name=self.collection, exact=True).count
        except Exception as e:
            raise CatalogStoreError(f"Failed to count Qdrant collection '{self.collection}': {e}") from e


# ----------------------------------------------------------------------
# Helpers
# ----------------------------------------------------------------------

def create_catalog_store(config: ServerConfig) -> CatalogStore:
    """Build the catalog store selected by CATALOG_STORE."""
    if config.catalog_store == "json":
        return JsonCatalogStore(
            config.catalog_path,
            dimensions=config.embedding_dimensions,
            embedding_model=config.embedding_model,
        )
    if config.catalog_store == "qdrant":
        if not config.qdrant_url:
            raise ValueError("QDRANT_URL is required for the qdrant catalog store")
        return QdrantCatalogStore(
            config.qdrant_url,
            collection=config.qdrant_collection,
            dimensions=config.embedding_dimensions,
        )
    if config.catalog_store == "memory":
        return InMemoryCatalogStore(dimensions=config.embedding_dimensions)
    raise ValueError(f"Unknown catalog store: {config.catalog_store}")


def replace_catalog(store: CatalogStore, records: Sequence[CatalogRecord]) -> int:
    """Replace the whole catalog: clear, then insert back to back."""
    # Reject bad batches before the clear so the old catalog survives
    if not records:
        raise EmptyInput("Refusing to replace the catalog with an empty batch")
    _check_dimensions(records, getattr(store, "dimensions", None))
    store.clear_all()
    inserted = store.bulk_insert(records)
    logger.info("[catalog] replaced catalog with %d movies", inserted)
    return inserted
