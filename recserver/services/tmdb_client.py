"""
TMDB Client

Thin wrapper over The Movie Database v3 list endpoints. Every request is
bounded by a timeout and retried with exponential backoff.

Usage:
    client = TMDBClient(api_key="...")
    rows = client.popular(page=1)
"""

import logging
import time
from typing import Any, Callable, Dict, List, Optional

import requests

from recommender.errors import UpstreamRequestError

from .retry import DEFAULT_RETRY_POLICY, RetryPolicy, call_with_retry

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.themoviedb.org/3"
USER_AGENT = "MovieNightRecommender/1.0"


class TMDBClient:
    """
    Fetches movie list pages from TMDB.

    Status failures, timeouts and connection errors raise a retryable
    UpstreamRequestError; a body that is not JSON raises a non-retryable one.
    A 2xx response without a "results" field is an empty page.
    """

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 10.0,
        retry_policy: RetryPolicy = DEFAULT_RETRY_POLICY,
        session: Optional[requests.Session] = None,
        sleep: Callable[[float], None] = time.sleep,
        language: str = "en-US",
    ):
        if not api_key:
            raise ValueError(
                "TMDB API key not provided. Set TMDB_API_KEY environment variable "
                "or pass api_key to TMDBClient."
            )
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.retry_policy = retry_policy
        self.language = language
        self._session = session or requests.Session()
        self._session.headers.update({"User-Agent": USER_AGENT})
        self._sleep = sleep

    def _get_json(self, path: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """One HTTP GET, mapped onto UpstreamRequestError."""
        url = f"{self.base_url}{path}"
        query = {"api_key": self.api_key, "language": self.language}
        query.update(params or {})
        try:
            response = self._session.get(url, params=query, timeout=self.timeout)
        except requests.Timeout as e:
            raise UpstreamRequestError(f"Timeout after {self.timeout}s for {path}") from e
        except requests.RequestException as e:
            raise UpstreamRequestError(f"Request to {path} failed: {e}") from e
        if not 200 <= response.status_code < 300:
            raise UpstreamRequestError(
                f"HTTP {response.status_code} for {path}",
                status_code=response.status_code,
            )
        try:
            data = response.json()
        except ValueError as e:
            raise UpstreamRequestError(f"Invalid JSON from {path}", retryable=False) from e
        if not isinstance(data, dict):
            raise UpstreamRequestError(f"Unexpected payload type from {path}", retryable=False)
        return data

    def request(self, path: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """GET with the client's retry policy."""
        return call_with_retry(
            lambda: self._get_json(path, params),
            self.retry_policy,
            sleep=self._sleep,
            label=f"tmdb {path}",
        )

    def fetch_page(self, path: str, page: int = 1, params: Optional[Dict[str, Any]] = None) -> List[Dict]:
        """Fetch one list page and return its results (empty when absent)."""
        query = dict(params or {})
        query["page"] = page
        logger.debug("[tmdb] GET %s page=%d", path, page)
        data = self.request(path, query)
        results = data.get("results")
        if not results:
            return []
        if not isinstance(results, list):
            raise UpstreamRequestError(f"'results' is not a list for {path}", retryable=False)
        return results

    # ------------------------------------------------------------------
    # Endpoints
    # ------------------------------------------------------------------

    def configuration(self) -> Dict[str, Any]:
        """API configuration; doubles as a connectivity and key check."""
        return self.request("/configuration")

    def popular(self, page: int = 1) -> List[Dict]:
        return self.fetch_page("/movie/popular", page)

    def top_rated(self, page: int = 1) -> List[Dict]:
        return self.fetch_page("/movie/top_rated", page)

    def now_playing(self, page: int = 1) -> List[Dict]:
        return self.fetch_page("/movie/now_playing", page)

    def upcoming(self, page: int = 1) -> List[Dict]:
        return self.fetch_page("/movie/upcoming", page)

    def discover_by_genre(self, genre_id: int, page: int = 1) -> List[Dict]:
        return self.fetch_page(
            "/discover/movie",
            page,
            {"with_genres": genre_id, "sort_by": "popularity.desc"},
        )

    def search(self, query: str, page: int = 1) -> List[Dict]:
        return self.fetch_page("/search/movie", page, {"query": query})

    def genres(self) -> List[Dict]:
        """Genre id/name list."""
        data = self.request("/genre/movie/list")
        return data.get("genres") or []
