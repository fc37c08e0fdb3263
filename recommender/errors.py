"""
Error taxonomy for the recommender core and its collaborators.

Numeric invariant violations (DimensionMismatch, EmptyInput) are data-integrity
errors and always surface. Transient upstream/embedding failures carry
retryable=True so the HTTP layer can tell "try again" apart from "bad input".
"""

from typing import Optional


class RecommenderError(Exception):
    """Base exception for all recommender errors."""

    retryable: bool = False

    def __init__(self, message: str, code: Optional[str] = None):
        self.message = message
        self.code = code or self.__class__.__name__
        super().__init__(self.message)


# Vector math
class DimensionMismatch(RecommenderError, ValueError):
    """Two vectors that must share a dimensionality do not."""

    def __init__(self, expected: int, actual: int, context: str = ""):
        self.expected = expected
        self.actual = actual
        where = f" ({context})" if context else ""
        super().__init__(f"Vector dimension mismatch{where}: expected {expected}, got {actual}")


class EmptyInput(RecommenderError, ValueError):
    """An aggregate was requested over an empty sequence."""

    pass


# Recommendation requests
class NoPreferences(RecommenderError):
    """No member answers were supplied."""

    def __init__(self, message: str = "No preferences provided"):
        super().__init__(message)


class EmptyCatalog(RecommenderError):
    """The catalog has no records; ingestion has not been run."""

    def __init__(self, message: str = "No movies found. Please run the ingestion script first."):
        super().__init__(message)


# Embeddings
class EmbeddingUnavailable(RecommenderError):
    """The embedding provider could not produce a vector (model load or exhausted retries)."""

    retryable = True


class EmbeddingFailed(RecommenderError):
    """A member answer could not be embedded; the whole request fails."""

    retryable = True


# Ingestion
class UpstreamRequestError(RecommenderError):
    """A single upstream catalog request failed."""

    def __init__(self, message: str, retryable: bool = True, status_code: Optional[int] = None):
        super().__init__(message)
        self.retryable = retryable
        self.status_code = status_code


class IngestionFailed(RecommenderError):
    """The ingestion run cannot produce a candidate set."""

    pass


# Storage
class CatalogStoreError(RecommenderError):
    """Catalog store operation failed."""

    retryable = True
