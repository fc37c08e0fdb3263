"""
Ingestion Pipeline Tests

Failure scoping, courtesy delays, and page accounting for the TMDB fetch
plan, plus the hand-off to the candidate pool transform.

Scenarios:
----------
- one facet fails, the others still contribute candidates
- a facet failing mid-way keeps the pages fetched before the failure
- the courtesy delay follows every page request, successful or not
- a row that fails validation is dropped and counted, the rest survive
- a failed connectivity preflight or transform aborts the run
"""

import pytest

from recommender.errors import IngestionFailed
from recserver.services import ingestion
from recserver.services.ingestion import (
    DEFAULT_FACET_PLAN,
    GENRE_FACET_DELAY,
    LIST_FACET_DELAY,
    FacetSpec,
    IngestionPipeline,
    genre_facet,
    search_facet,
)
from recserver.services.retry import RetryPolicy
from recserver.services.tmdb_client import TMDBClient

from .fakes import FakeResponse, FakeSession, RecordingSleep, movie_row, page

CONFIG_OK = FakeResponse(200, {"images": {"base_url": "https://image.tmdb.org/t/p/"}})
BAD_BODY = FakeResponse(200, text="<html>gateway</html>")


def make_pipeline(routes, facets, sleep, preflight=True):
    routes = dict(routes)
    routes.setdefault("/configuration", [CONFIG_OK])
    session = FakeSession(routes)
    client = TMDBClient(
        "test-key",
        base_url="https://tmdb.test/3",
        session=session,
        sleep=RecordingSleep(),
        retry_policy=RetryPolicy(max_attempts=3, base_delay=1.0),
    )
    return IngestionPipeline(client, facets=facets, sleep=sleep, preflight=preflight), session


class TestFacetFailureScoping:
    def test_failed_facet_is_skipped(self, sleep):
        facets = [
            FacetSpec("Popular", "popular"),
            FacetSpec("Top Rated", "top_rated"),
            FacetSpec("Now Playing", "now_playing"),
            FacetSpec("Upcoming", "upcoming"),
        ]
        routes = {
            "/movie/popular": [page(movie_row(1), movie_row(2))],
            "/movie/top_rated": [BAD_BODY],
            "/movie/now_playing": [page(movie_row(3))],
            "/movie/upcoming": [page(movie_row(4))],
        }
        pipeline, _ = make_pipeline(routes, facets, sleep)
        result = pipeline.run()

        assert {c.media.tmdb_id for c in result.candidates} == {1, 2, 3, 4}
        assert result.report.facets_failed == ["Top Rated"]
        assert result.report.facets_attempted == 4
        assert result.report.facets_succeeded == 3

    def test_retryable_failure_exhausts_then_skips(self, sleep):
        facets = [FacetSpec("Popular", "popular"), FacetSpec("Upcoming", "upcoming")]
        routes = {
            "/movie/popular": [FakeResponse(503, {})],
            "/movie/upcoming": [page(movie_row(4))],
        }
        pipeline, session = make_pipeline(routes, facets, sleep)
        result = pipeline.run()

        assert len(session.calls_to("/movie/popular")) == 3
        assert [c.media.tmdb_id for c in result.candidates] == [4]
        assert result.report.facets_failed == ["Popular"]

    def test_pages_before_failure_are_kept(self, sleep):
        facets = [FacetSpec("Popular", "popular", pages=3)]
        routes = {"/movie/popular": [page(movie_row(1)), BAD_BODY]}
        pipeline, session = make_pipeline(routes, facets, sleep)
        result = pipeline.run()

        assert [c.media.tmdb_id for c in result.candidates] == [1]
        assert result.report.pages_fetched == 1
        assert result.report.pages_lost == 2
        # the facet stops at the failing page
        assert [c["params"]["page"] for c in session.calls_to("/movie/popular")] == [1, 2]

    def test_all_facets_failing_yields_empty_result(self, sleep):
        facets = [FacetSpec("Popular", "popular"), FacetSpec("Upcoming", "upcoming")]
        routes = {"/movie/popular": [BAD_BODY], "/movie/upcoming": [BAD_BODY]}
        pipeline, _ = make_pipeline(routes, facets, sleep)
        result = pipeline.run()

        assert result.candidates == []
        assert result.report.facets_failed == ["Popular", "Upcoming"]


class TestCourtesyDelay:
    def test_delay_after_every_request(self, sleep):
        facets = [FacetSpec("Popular", "popular", pages=2), genre_facet(28, "Action", limit=5, pages=1)]
        routes = {
            "/movie/popular": [page(movie_row(1))],
            "/discover/movie": [page(movie_row(2))],
        }
        pipeline, _ = make_pipeline(routes, facets, sleep)
        pipeline.run()
        assert sleep.calls == [LIST_FACET_DELAY, LIST_FACET_DELAY, GENRE_FACET_DELAY]

    def test_delay_also_follows_failed_request(self, sleep):
        facets = [FacetSpec("Popular", "popular", pages=3)]
        routes = {"/movie/popular": [BAD_BODY]}
        pipeline, _ = make_pipeline(routes, facets, sleep)
        pipeline.run()
        assert sleep.calls == [LIST_FACET_DELAY]


class TestAccumulation:
    def test_per_page_limit_slices_rows(self, sleep):
        facets = [FacetSpec("Popular", "popular", pages=1, per_page_limit=2)]
        routes = {"/movie/popular": [page(movie_row(1), movie_row(2), movie_row(3))]}
        pipeline, _ = make_pipeline(routes, facets, sleep)
        result = pipeline.run()
        assert result.report.raw_count == 2
        assert len(result.candidates) == 2

    def test_duplicates_across_facets_collapse(self, sleep):
        facets = [FacetSpec("Popular", "popular"), FacetSpec("Top Rated", "top_rated")]
        routes = {
            "/movie/popular": [page(movie_row(1, title="First seen"), movie_row(2))],
            "/movie/top_rated": [page(movie_row(1, title="Seen again"), movie_row(3))],
        }
        pipeline, _ = make_pipeline(routes, facets, sleep)
        result = pipeline.run()

        assert result.report.raw_count == 4
        assert result.report.unique_count == 3
        titles = {c.title for c in result.candidates}
        assert "First seen" in titles
        assert "Seen again" not in titles

    def test_quality_filter_and_rank_applied(self, sleep):
        facets = [FacetSpec("Popular", "popular")]
        low_votes = movie_row(2, vote_count=5)
        routes = {
            "/movie/popular": [page(movie_row(1, vote_average=6.0), low_votes, movie_row(3, vote_average=9.0))],
        }
        pipeline, _ = make_pipeline(routes, facets, sleep)
        result = pipeline.run()
        assert [c.media.tmdb_id for c in result.candidates] == [3, 1]
        assert result.report.candidate_count == 2

    def test_search_facet(self, sleep):
        routes = {"/search/movie": [page(movie_row(7))]}
        pipeline, session = make_pipeline(routes, [search_facet("heist")], sleep)
        result = pipeline.run()
        assert session.calls_to("/search/movie")[0]["params"]["query"] == "heist"
        assert len(result.candidates) == 1

    def test_invalid_rows_dropped_and_counted(self, sleep):
        facets = [FacetSpec("Popular", "popular"), FacetSpec("Top Rated", "top_rated")]
        routes = {
            "/movie/popular": [page(movie_row(1), {"id": None, "title": "No id", "overview": "x" * 40})],
            "/movie/top_rated": [page({"title": "Missing id", "overview": "y" * 40}, movie_row(2), "junk")],
        }
        pipeline, _ = make_pipeline(routes, facets, sleep)
        result = pipeline.run()
        assert result.report.raw_count == 5
        assert result.report.invalid_count == 3
        assert result.report.unique_count == 2
        assert sorted(c.media.tmdb_id for c in result.candidates) == [1, 2]


class TestFatalErrors:
    def test_preflight_failure_aborts(self, sleep):
        routes = {"/configuration": [FakeResponse(401, {"status_message": "Invalid API key"})]}
        pipeline, session = make_pipeline(routes, [FacetSpec("Popular", "popular")], sleep)
        with pytest.raises(IngestionFailed, match="connectivity"):
            pipeline.run()
        assert session.calls_to("/movie/popular") == []

    def test_preflight_can_be_skipped(self, sleep):
        routes = {
            "/configuration": [FakeResponse(401, {})],
            "/movie/popular": [page(movie_row(1))],
        }
        pipeline, session = make_pipeline(routes, [FacetSpec("Popular", "popular")], sleep, preflight=False)
        assert len(pipeline.run().candidates) == 1
        assert session.calls_to("/configuration") == []

    def test_transform_error_wrapped(self, sleep, monkeypatch):
        def broken_pool(items, config):
            raise ValueError("bad weights")

        monkeypatch.setattr(ingestion, "build_candidate_pool", broken_pool)
        routes = {"/movie/popular": [page(movie_row(1))]}
        pipeline, _ = make_pipeline(routes, [FacetSpec("Popular", "popular")], sleep)
        with pytest.raises(IngestionFailed, match="bad weights") as exc_info:
            pipeline.run()
        assert isinstance(exc_info.value.__cause__, ValueError)


class TestDefaultPlan:
    def test_plan_shape(self):
        names = [f.name for f in DEFAULT_FACET_PLAN]
        assert names[:2] == ["Popular", "Top Rated"]
        assert names[-2:] == ["Now Playing", "Upcoming"]
        assert len([f for f in DEFAULT_FACET_PLAN if f.kind == "genre"]) == 15

    def test_genre_limit_spread_across_pages(self):
        action = next(f for f in DEFAULT_FACET_PLAN if f.name == "Action")
        assert action.pages == 2
        assert action.per_page_limit == 6
        assert action.delay == GENRE_FACET_DELAY

    def test_list_facet_caps(self):
        by_name = {f.name: f for f in DEFAULT_FACET_PLAN}
        assert (by_name["Popular"].pages, by_name["Popular"].per_page_limit) == (3, 15)
        assert (by_name["Top Rated"].pages, by_name["Top Rated"].per_page_limit) == (2, 15)
        assert by_name["Now Playing"].per_page_limit == 10
        assert by_name["Upcoming"].per_page_limit == 8
