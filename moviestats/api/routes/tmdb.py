from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response, status

from moviestats.api.deps import get_search_aggregator, get_tmdb_client
from moviestats.api.http_errors import upstream_http_error
from moviestats.core.errors import UpstreamError
from moviestats.schemas.tmdb import CombinedSearchResult, MoviePage, MovieStatisticsOut
from moviestats.services.normalize import format_movie_page
from moviestats.services.search import SearchAggregator
from moviestats.services.stats import dedupe_movies, summarize
from moviestats.services.tmdb import TMDBClient

router = APIRouter(prefix="/tmdb", tags=["tmdb"])
relay_router = APIRouter(prefix="/api/tmdb", tags=["relay"])


@router.get("/search", response_model=CombinedSearchResult)
async def combined_search_route(
    q: str = Query(..., min_length=1),
    page: int = Query(1, ge=1),
    aggregator: SearchAggregator = Depends(get_search_aggregator),
):
    query = q.strip()
    if not query:
        raise HTTPException(status_code=422, detail="q must not be blank")
    try:
        return await aggregator.combined_search(query, page)
    except UpstreamError as exc:
        raise upstream_http_error(exc) from exc


@router.get("/trending", response_model=MoviePage)
async def trending_route(
    window: str = Query("week", pattern="^(day|week)$"),
    page: int = Query(1, ge=1),
    client: TMDBClient = Depends(get_tmdb_client),
):
    try:
        return format_movie_page(await client.get_trending_movies(window, page))
    except UpstreamError as exc:
        raise upstream_http_error(exc) from exc


@router.get("/top-rated", response_model=MoviePage)
async def top_rated_route(
    page: int = Query(1, ge=1),
    client: TMDBClient = Depends(get_tmdb_client),
):
    try:
        return format_movie_page(await client.get_top_rated_movies(page))
    except UpstreamError as exc:
        raise upstream_http_error(exc) from exc


@router.get("/popular", response_model=MoviePage)
async def popular_route(
    page: int = Query(1, ge=1),
    client: TMDBClient = Depends(get_tmdb_client),
):
    try:
        return format_movie_page(await client.get_popular_movies(page))
    except UpstreamError as exc:
        raise upstream_http_error(exc) from exc


@router.get("/discover", response_model=MoviePage)
async def discover_route(
    request: Request,
    client: TMDBClient = Depends(get_tmdb_client),
):
    filters: dict[str, Any] = dict(request.query_params)
    try:
        return format_movie_page(await client.discover_movies(filters))
    except UpstreamError as exc:
        raise upstream_http_error(exc) from exc


@router.get("/genres")
async def genres_route(client: TMDBClient = Depends(get_tmdb_client)):
    try:
        return await client.get_genres()
    except UpstreamError as exc:
        raise upstream_http_error(exc) from exc


@router.get("/movies/{movie_id}")
async def movie_details_route(movie_id: int, client: TMDBClient = Depends(get_tmdb_client)):
    try:
        return await client.get_movie_details(movie_id)
    except UpstreamError as exc:
        raise upstream_http_error(exc) from exc


@router.get("/people/{person_id}")
async def person_details_route(person_id: int, client: TMDBClient = Depends(get_tmdb_client)):
    try:
        return await client.get_person_details(person_id)
    except UpstreamError as exc:
        raise upstream_http_error(exc) from exc


@router.get("/statistics", response_model=MovieStatisticsOut)
async def statistics_route(aggregator: SearchAggregator = Depends(get_search_aggregator)):
    try:
        statistics = await aggregator.movie_statistics()
    except UpstreamError as exc:
        raise upstream_http_error(exc) from exc

    movies = dedupe_movies([*statistics.trending, *statistics.top_rated, *statistics.popular])
    return MovieStatisticsOut(statistics=statistics, summary=summarize(movies))


@router.delete("/cache", status_code=status.HTTP_204_NO_CONTENT)
async def clear_cache_route(client: TMDBClient = Depends(get_tmdb_client)):
    client.clear_cache()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@relay_router.get("/search")
async def relay_search_route(
    q: str = Query(""),
    page: int = Query(1, ge=1),
    client: TMDBClient = Depends(get_tmdb_client),
):
    # Raw upstream payload; the server-held key is injected by the client.
    try:
        return await client.relay_search_movies(q, page)
    except UpstreamError as exc:
        raise upstream_http_error(exc) from exc
