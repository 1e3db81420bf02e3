from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Mapping
from typing import Any

from moviestats.schemas.tmdb import CombinedSearchResult, MovieStatistics
from moviestats.services.normalize import (
    GENRES,
    format_movie,
    format_person,
    results_of,
    total_pages_of,
    total_results_of,
)
from moviestats.services.tmdb import TMDBClient

logger = logging.getLogger(__name__)


async def gather_all_or_nothing(*aws: Awaitable[Any]) -> list[Any]:
    """Run awaitables concurrently and return results in argument order.

    The first failure cancels whatever is still pending and is re-raised
    unchanged, so callers never see a partial result.
    """
    tasks = [asyncio.ensure_future(aw) for aw in aws]
    try:
        done, pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_EXCEPTION)
    except asyncio.CancelledError:
        for task in tasks:
            task.cancel()
        raise

    failed = next((t for t in tasks if t in done and t.exception() is not None), None)
    if failed is not None:
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
        raise failed.exception()  # type: ignore[misc]

    return [task.result() for task in tasks]


class SearchAggregator:
    """Combined movie + person search and list statistics on top of TMDBClient."""

    def __init__(self, client: TMDBClient, *, genres: Mapping[int, str] = GENRES) -> None:
        self.client = client
        self.genres = genres

    async def combined_search(self, query: str, page: int = 1) -> CombinedSearchResult:
        try:
            movies_payload, people_payload = await gather_all_or_nothing(
                self.client.search_movies(query, page),
                self.client.search_people(query, page),
            )
        except Exception:
            logger.warning("combined search failed query=%r page=%s", query, page)
            raise

        return CombinedSearchResult(
            movies=[format_movie(row, self.genres) for row in results_of(movies_payload)],
            people=[format_person(row) for row in results_of(people_payload)],
            total_pages=max(total_pages_of(movies_payload), total_pages_of(people_payload)),
            total_results=total_results_of(movies_payload) + total_results_of(people_payload),
        )

    async def movie_statistics(self) -> MovieStatistics:
        try:
            trending, top_rated, popular = await gather_all_or_nothing(
                self.client.get_trending_movies("week", 1),
                self.client.get_top_rated_movies(1),
                self.client.get_popular_movies(1),
            )
        except Exception:
            logger.warning("movie statistics fetch failed")
            raise

        return MovieStatistics(
            trending=[format_movie(row, self.genres) for row in results_of(trending)],
            top_rated=[format_movie(row, self.genres) for row in results_of(top_rated)],
            popular=[format_movie(row, self.genres) for row in results_of(popular)],
        )
