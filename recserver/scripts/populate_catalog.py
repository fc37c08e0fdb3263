#!/usr/bin/env python3
"""
Populate the movie catalog: fetch candidates from TMDB, embed them, and
replace the configured catalog store in one batch.

Requires:
  - TMDB_API_KEY in env (unless --sample)
  - the embedding provider's key when EMBEDDING_PROVIDER is openai or gemini

Usage:
  From repo root:
    python -m recserver.scripts.populate_catalog

  Optional:
    --dry-run                 fetch and filter only, print the candidate count
    --sample                  skip TMDB and load the bundled sample movies
    --no-fallback             fail instead of falling back to the sample movies
    --search "heist"          add a search facet (repeatable)
    --limit 200               embed at most this many candidates
    --smoke-query "..."       test query to run after populating ("" to skip)
    --list-genres             print TMDB genre ids and exit
"""

import argparse
import asyncio
import sys
from typing import List, Optional

from recommender import RecommendationEngine
from recommender.errors import IngestionFailed
from recommender.models.movie import CatalogCandidate

from ..config import ServerConfig, configure_logging
from ..services import (
    DEFAULT_FACET_PLAN,
    SAMPLE_MOVIES,
    IngestionPipeline,
    TMDBClient,
    create_catalog_store,
    create_embedding_client,
    populate_catalog,
    search_facet,
)

DEFAULT_SMOKE_QUERY = "I want an action movie with great visuals and amazing fight scenes"


def _fetch_candidates(config: ServerConfig, args: argparse.Namespace) -> Optional[List[CatalogCandidate]]:
    """Run ingestion; None means the run failed and the caller decides about fallback."""
    try:
        client = TMDBClient(config.tmdb_api_key, base_url=config.tmdb_base_url, timeout=config.http_timeout)
    except ValueError as e:
        print(f"TMDB unavailable: {e}", file=sys.stderr)
        return None

    facets = list(DEFAULT_FACET_PLAN) + [search_facet(q) for q in args.search or []]
    pipeline = IngestionPipeline(client, facets=facets)
    try:
        result = pipeline.run()
    except IngestionFailed as e:
        print(f"Ingestion failed: {e}", file=sys.stderr)
        return None

    report = result.report
    print(
        f"Fetched {report.raw_count} rows from {report.facets_succeeded}/{report.facets_attempted} facets; "
        f"{report.unique_count} unique, {report.candidate_count} passed the quality filter"
    )
    if report.facets_failed:
        print(f"  Failed facets: {', '.join(report.facets_failed)} ({report.pages_lost} page(s) lost)")
    if report.invalid_count:
        print(f"  Dropped {report.invalid_count} malformed row(s)")
    return result.candidates


def _list_genres(config: ServerConfig) -> int:
    try:
        client = TMDBClient(config.tmdb_api_key, base_url=config.tmdb_base_url, timeout=config.http_timeout)
        genres = client.genres()
    except Exception as e:
        print(f"Failed to list genres: {e}", file=sys.stderr)
        return 1
    for g in genres:
        print(f"  {g.get('id'):>6}  {g.get('name')}")
    return 0


def _run_smoke_query(engine: RecommendationEngine, store, query: str) -> None:
    catalog = store.select_all()
    result = asyncio.run(engine.recommend([{"description": query}], catalog, top_k=3))
    print(f"Smoke query: {query!r}")
    for r in result.recommendations:
        print(f"  {r.similarity:.3f}  {r.record.title}")


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Populate the movie catalog with embeddings")
    parser.add_argument("--dry-run", action="store_true", help="Fetch and filter only; do not embed or write")
    parser.add_argument("--sample", action="store_true", help="Use the bundled sample movies instead of TMDB")
    parser.add_argument(
        "--no-fallback",
        action="store_true",
        help="Exit with an error instead of falling back to the sample movies",
    )
    parser.add_argument("--search", action="append", metavar="QUERY", help="Extra TMDB search facet (repeatable)")
    parser.add_argument("--limit", type=int, default=None, help="Max candidates to embed (default: all)")
    parser.add_argument(
        "--smoke-query",
        default=DEFAULT_SMOKE_QUERY,
        metavar="TEXT",
        help="Query to run after populating; pass an empty string to skip",
    )
    parser.add_argument("--list-genres", action="store_true", help="Print TMDB genres and exit")
    args = parser.parse_args(argv)

    config = ServerConfig.from_env()
    configure_logging(config.log_level)

    if args.list_genres:
        return _list_genres(config)

    ok, errors = config.validate()
    if not ok:
        for e in errors:
            print(f"Config error: {e}", file=sys.stderr)
        return 1

    if args.sample:
        candidates = list(SAMPLE_MOVIES)
        print(f"Using {len(candidates)} sample movies")
    else:
        candidates = _fetch_candidates(config, args)
        if not candidates:
            if args.no_fallback:
                print("No candidates from TMDB and --no-fallback set.", file=sys.stderr)
                return 1
            candidates = list(SAMPLE_MOVIES)
            print(f"Falling back to {len(candidates)} sample movies")

    if args.limit is not None:
        candidates = candidates[:args.limit]

    if args.dry_run:
        print(f"Dry run: {len(candidates)} candidates would be embedded")
        for c in candidates[:10]:
            print(f"  {c.title}")
        return 0

    embedder = create_embedding_client(config)
    store = create_catalog_store(config)
    print(f"Embedding {len(candidates)} movies with {embedder.model} ({embedder.dimensions} dims)")
    result = populate_catalog(
        store,
        candidates,
        embedder,
        dimensions=config.embedding_dimensions,
        on_progress=lambda p: print(f"  {p.current}/{p.total}: {p.title}" + (" (skipped)" if p.error else "")),
    )
    for e in result.errors:
        print(f"  Error: {e}", file=sys.stderr)
    print(f"Inserted {result.inserted}, skipped {result.skipped}; catalog now holds {store.count()} movies")

    if result.inserted == 0:
        print("Nothing was embedded; the existing catalog was left unchanged.", file=sys.stderr)
        return 1

    if args.smoke_query:
        engine = RecommendationEngine(embed=embedder.embed)
        _run_smoke_query(engine, store, args.smoke_query)

    print("Done.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
