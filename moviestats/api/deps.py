from __future__ import annotations

from fastapi import Depends, HTTPException, Request, status

from moviestats.services.search import SearchAggregator
from moviestats.services.tmdb import TMDBClient


def get_tmdb_client(request: Request) -> TMDBClient:
    client = getattr(request.app.state, "tmdb_client", None)
    if client is None:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="TMDB client not ready")
    return client


def get_search_aggregator(client: TMDBClient = Depends(get_tmdb_client)) -> SearchAggregator:
    return SearchAggregator(client)
