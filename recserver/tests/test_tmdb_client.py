"""
TMDB Client Tests

Request building, status/timeout/body error mapping, retry integration, and
page parsing. The requests.Session is a fake; no network access.
"""

import pytest
import requests

from recommender.errors import UpstreamRequestError
from recserver.services.retry import RetryPolicy
from recserver.services.tmdb_client import USER_AGENT, TMDBClient

from .fakes import FakeResponse, FakeSession, movie_row, page


def make_client(session, sleep, attempts=3):
    return TMDBClient(
        "test-key",
        base_url="https://tmdb.test/3",
        session=session,
        sleep=sleep,
        retry_policy=RetryPolicy(max_attempts=attempts, base_delay=1.0),
    )


class TestRequests:
    def test_requires_api_key(self):
        with pytest.raises(ValueError):
            TMDBClient(None)

    def test_query_params_and_timeout(self, sleep):
        session = FakeSession({"/movie/popular": [page(movie_row(1))]})
        client = make_client(session, sleep)
        client.popular(page=2)
        call = session.calls[0]
        assert call["url"] == "https://tmdb.test/3/movie/popular"
        assert call["params"]["api_key"] == "test-key"
        assert call["params"]["language"] == "en-US"
        assert call["params"]["page"] == 2
        assert call["timeout"] == 10.0

    def test_user_agent_set(self, sleep):
        session = FakeSession()
        make_client(session, sleep)
        assert session.headers["User-Agent"] == USER_AGENT

    def test_discover_by_genre_params(self, sleep):
        session = FakeSession({"/discover/movie": [page(movie_row(1))]})
        make_client(session, sleep).discover_by_genre(28, page=1)
        params = session.calls[0]["params"]
        assert params["with_genres"] == 28
        assert params["sort_by"] == "popularity.desc"

    def test_search_params(self, sleep):
        session = FakeSession({"/search/movie": [page(movie_row(1))]})
        make_client(session, sleep).search("heist")
        assert session.calls[0]["params"]["query"] == "heist"


class TestPages:
    def test_returns_results(self, sleep):
        session = FakeSession({"/movie/top_rated": [page(movie_row(1), movie_row(2))]})
        rows = make_client(session, sleep).top_rated()
        assert [r["id"] for r in rows] == [1, 2]

    def test_missing_results_is_empty_page(self, sleep):
        session = FakeSession({"/movie/upcoming": [FakeResponse(200, {"page": 1})]})
        assert make_client(session, sleep).upcoming() == []

    def test_non_list_results_not_retried(self, sleep):
        session = FakeSession({"/movie/upcoming": [FakeResponse(200, {"results": "oops"})]})
        with pytest.raises(UpstreamRequestError) as exc_info:
            make_client(session, sleep).upcoming()
        assert exc_info.value.retryable is False

    def test_genres(self, sleep):
        session = FakeSession({"/genre/movie/list": [FakeResponse(200, {"genres": [{"id": 28, "name": "Action"}]})]})
        assert make_client(session, sleep).genres() == [{"id": 28, "name": "Action"}]


class TestErrors:
    def test_server_error_retried_then_succeeds(self, sleep):
        session = FakeSession({"/movie/popular": [FakeResponse(503, {}), page(movie_row(1))]})
        rows = make_client(session, sleep).popular()
        assert len(rows) == 1
        assert len(session.calls) == 2
        assert sleep.calls == [1.0]

    def test_status_error_exhausts_retries(self, sleep):
        session = FakeSession({"/movie/popular": [FakeResponse(500, {})]})
        with pytest.raises(UpstreamRequestError) as exc_info:
            make_client(session, sleep).popular()
        assert exc_info.value.status_code == 500
        assert exc_info.value.retryable is True
        assert len(session.calls) == 3
        assert sleep.calls == [1.0, 2.0]

    def test_client_error_also_retried(self, sleep):
        session = FakeSession({"/movie/popular": [FakeResponse(401, {})]})
        with pytest.raises(UpstreamRequestError):
            make_client(session, sleep).popular()
        assert len(session.calls) == 3

    def test_timeout_is_retryable(self, sleep, timeout_error):
        session = FakeSession({"/movie/popular": [timeout_error, page(movie_row(1))]})
        assert len(make_client(session, sleep).popular()) == 1
        assert len(session.calls) == 2

    def test_connection_error_is_retryable(self, sleep):
        session = FakeSession({"/movie/popular": [requests.ConnectionError("refused")]})
        with pytest.raises(UpstreamRequestError):
            make_client(session, sleep).popular()
        assert len(session.calls) == 3

    def test_invalid_json_not_retried(self, sleep):
        session = FakeSession({"/movie/popular": [FakeResponse(200, text="<html>")]})
        with pytest.raises(UpstreamRequestError) as exc_info:
            make_client(session, sleep).popular()
        assert exc_info.value.retryable is False
        assert len(session.calls) == 1
        assert sleep.calls == []

    def test_configuration_check(self, sleep):
        session = FakeSession({"/configuration": [FakeResponse(200, {"images": {}})]})
        assert make_client(session, sleep).configuration() == {"images": {}}
