#!/usr/bin/env python3
from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from moviestats.core.config import Settings, configure_logging
from moviestats.core.errors import UpstreamError, classify_error, error_message
from moviestats.schemas.tmdb import CombinedSearchResult, StatsSummary
from moviestats.services.search import SearchAggregator
from moviestats.services.stats import dedupe_movies, summarize
from moviestats.services.tmdb import TMDBClient

logger = logging.getLogger("movie_stats_report")


def _format_search(result: CombinedSearchResult, *, limit: int) -> list[str]:
    lines = [
        f"total_results: {result.total_results}",
        f"total_pages: {result.total_pages}",
        f"movies ({len(result.movies)}):",
    ]
    for movie in result.movies[:limit]:
        year = movie.year if movie.year is not None else "----"
        rating = f"{movie.rating:.1f}" if movie.rating is not None else "n/a"
        genres = ", ".join(movie.genres) or "-"
        lines.append(f"  [{movie.id}] {movie.title} ({year}) rating={rating} genres={genres}")
    lines.append(f"people ({len(result.people)}):")
    for person in result.people[:limit]:
        lines.append(f"  [{person.id}] {person.name}")
    return lines


def _format_summary(summary: StatsSummary) -> list[str]:
    lines = [
        f"total_movies: {summary.total_movies}",
        f"average_rating: {summary.average_rating if summary.average_rating is not None else 'n/a'}",
        f"top_genre: {summary.top_genre or 'n/a'}",
        f"most_productive_year: {summary.most_productive_year or 'n/a'}",
        f"high_rated_movies: {summary.high_rated_movies}",
        "top_genres:",
    ]
    lines.extend(f"  {row.genre}: {row.count}" for row in summary.top_genres)
    lines.append("rating_distribution:")
    lines.extend(f"  {bucket}: {count}" for bucket, count in summary.rating_distribution.items())
    return lines


async def run_report(
    client: TMDBClient,
    *,
    query: str | None,
    page: int,
    limit: int,
) -> list[str]:
    aggregator = SearchAggregator(client)
    if query:
        result = await aggregator.combined_search(query, page)
        return [f"TMDB combined search: {query!r} page {page}", *_format_search(result, limit=limit)]

    statistics = await aggregator.movie_statistics()
    movies = dedupe_movies([*statistics.trending, *statistics.top_rated, *statistics.popular])
    return ["TMDB movie statistics (trending + top rated + popular)", *_format_summary(summarize(movies))]


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Print a TMDB combined search or a statistics summary of the current movie lists."
    )
    parser.add_argument("--query", "-q", default=None, help="Run a combined movie + person search.")
    parser.add_argument("--page", type=int, default=1, help="Search results page.")
    parser.add_argument("--limit", type=int, default=10, help="Max rows printed per section.")
    parser.add_argument("--verbose", action="store_true", help="Log upstream requests.")
    args = parser.parse_args(argv)

    if args.page <= 0:
        parser.error("--page must be greater than 0")
    if args.limit <= 0:
        parser.error("--limit must be greater than 0")

    return args


async def _main_async(args: argparse.Namespace) -> list[str]:
    settings = Settings()
    async with TMDBClient.from_settings(settings) as client:
        return await run_report(client, query=args.query, page=args.page, limit=args.limit)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    configure_logging("DEBUG" if args.verbose else "WARNING")

    try:
        lines = asyncio.run(_main_async(args))
    except UpstreamError as exc:
        logger.debug("report failed", exc_info=exc)
        print(f"error: {error_message(classify_error(exc))}", file=sys.stderr)
        return 1

    print("\n".join(lines))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
