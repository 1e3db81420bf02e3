from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import httpx

from moviestats.core.errors import ErrorKind, UpstreamError
from moviestats.services.cache import RequestCache

if TYPE_CHECKING:
    from moviestats.core.config import Settings

logger = logging.getLogger(__name__)

_DEFAULT_BASE_URL = "https://api.themoviedb.org/3"
_DEFAULT_IMAGE_BASE_URL = "https://image.tmdb.org/t/p"
_DEFAULT_TTL_SECONDS = 300.0
_TRENDING_WINDOWS = ("day", "week")
IMAGE_SIZES = {
    "poster": "/w500",
    "backdrop": "/w1280",
    "profile": "/w185",
}


def _redact(url: httpx.URL) -> str:
    if "api_key" not in url.params:
        return str(url)
    return str(url.copy_set_param("api_key", "***"))


class TMDBClient:
    """TMDB v3 client. Every cached GET is keyed by its full request URL."""

    def __init__(
        self,
        *,
        api_key: str,
        base_url: str = _DEFAULT_BASE_URL,
        image_base_url: str = _DEFAULT_IMAGE_BASE_URL,
        cache: RequestCache | None = None,
        cache_ttl: float = _DEFAULT_TTL_SECONDS,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = 10.0,
    ) -> None:
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.image_base_url = image_base_url.rstrip("/")
        self.cache = cache if cache is not None else RequestCache()
        self.cache_ttl = cache_ttl
        self._owns_http_client = http_client is None
        self._http = http_client if http_client is not None else httpx.AsyncClient(timeout=timeout)

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs: Any) -> "TMDBClient":
        kwargs.setdefault("cache", RequestCache(max_entries=settings.cache_max_entries))
        return cls(
            api_key=settings.tmdb_api_key,
            base_url=settings.tmdb_base_url,
            image_base_url=settings.tmdb_image_base_url,
            cache_ttl=settings.cache_ttl_seconds,
            timeout=settings.http_timeout_seconds,
            **kwargs,
        )

    async def aclose(self) -> None:
        if self._owns_http_client:
            await self._http.aclose()

    async def __aenter__(self) -> "TMDBClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def build_url(self, path: str, params: dict[str, Any] | None = None) -> httpx.URL:
        query: dict[str, Any] = {"api_key": self.api_key}
        for key, value in (params or {}).items():
            if value is None:
                continue
            query[key] = value
        return httpx.URL(f"{self.base_url}{path}", params=query)

    async def _fetch_json(self, url: httpx.URL) -> Any:
        redacted = _redact(url)
        logger.debug("tmdb fetch url=%s", redacted)
        try:
            r = await self._http.get(url, headers={"Accept": "application/json"})
        except httpx.RequestError as exc:
            logger.warning("tmdb request error url=%s error=%s", redacted, exc)
            raise UpstreamError(
                f"Network error while fetching {redacted}: {exc.__class__.__name__}",
                kind=ErrorKind.NETWORK_ERROR,
            ) from exc

        if r.is_error:
            logger.warning("tmdb http error url=%s status=%s", redacted, r.status_code)
            raise UpstreamError(f"HTTP error! status: {r.status_code}", status_code=r.status_code)

        try:
            return r.json()
        except ValueError as exc:
            logger.warning("tmdb invalid json url=%s", redacted)
            raise UpstreamError(
                f"Invalid JSON response from {redacted}",
                kind=ErrorKind.INVALID_RESPONSE,
            ) from exc

    async def make_request(
        self,
        path: str,
        params: dict[str, Any] | None = None,
        *,
        use_cache: bool = True,
    ) -> Any:
        url = self.build_url(path, params)
        if not use_cache:
            return await self._fetch_json(url)
        return await self.cache.fetch_cached(
            str(url),
            lambda: self._fetch_json(url),
            self.cache_ttl,
        )

    def clear_cache(self) -> None:
        self.cache.clear()

    # ------------------------------------------------------------------
    # Endpoints
    # ------------------------------------------------------------------

    async def search_movies(self, query: str, page: int = 1) -> Any:
        return await self.make_request("/search/movie", {"query": query, "page": page})

    async def search_people(self, query: str, page: int = 1) -> Any:
        return await self.make_request("/search/person", {"query": query, "page": page})

    async def relay_search_movies(self, query: str, page: int = 1) -> Any:
        return await self.make_request(
            "/search/movie",
            {"query": query, "page": page},
            use_cache=False,
        )

    async def get_trending_movies(self, time_window: str = "week", page: int = 1) -> Any:
        if time_window not in _TRENDING_WINDOWS:
            raise ValueError(f"time_window must be one of {', '.join(_TRENDING_WINDOWS)}")
        return await self.make_request(f"/trending/movie/{time_window}", {"page": page})

    async def get_top_rated_movies(self, page: int = 1) -> Any:
        return await self.make_request("/movie/top_rated", {"page": page})

    async def get_popular_movies(self, page: int = 1) -> Any:
        return await self.make_request("/movie/popular", {"page": page})

    async def get_movie_details(self, movie_id: int) -> Any:
        return await self.make_request(
            f"/movie/{movie_id}",
            {"append_to_response": "credits,reviews,similar,videos"},
        )

    async def get_movie_credits(self, movie_id: int) -> Any:
        return await self.make_request(f"/movie/{movie_id}/credits")

    async def get_movie_reviews(self, movie_id: int, page: int = 1) -> Any:
        return await self.make_request(f"/movie/{movie_id}/reviews", {"page": page})

    async def get_similar_movies(self, movie_id: int, page: int = 1) -> Any:
        return await self.make_request(f"/movie/{movie_id}/similar", {"page": page})

    async def get_genres(self) -> Any:
        return await self.make_request("/genre/movie/list")

    async def get_person_details(self, person_id: int) -> Any:
        return await self.make_request(
            f"/person/{person_id}",
            {"append_to_response": "movie_credits"},
        )

    async def discover_movies(self, filters: dict[str, Any] | None = None) -> Any:
        # Caller filters never override the server-held key.
        params = {k: v for k, v in (filters or {}).items() if k != "api_key"}
        return await self.make_request("/discover/movie", params)

    def get_image_url(self, path: str | None, size: str = "poster") -> str | None:
        if not path:
            return None
        segment = IMAGE_SIZES.get(size)
        if segment is None:
            raise ValueError(f"Unknown image size {size!r}")
        return f"{self.image_base_url}{segment}{path}"
