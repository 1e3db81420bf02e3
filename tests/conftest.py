import os
from collections import defaultdict
from typing import Any

import httpx
import pytest
from httpx import ASGITransport, AsyncClient

# IMPORTANT:
# Set env vars BEFORE importing moviestats.core.config/moviestats.main (pydantic settings load at import time)
os.environ["ENV"] = "test"
os.environ.setdefault("TMDB_API_KEY", "test-key")
os.environ.setdefault("CORS_ORIGINS", "http://localhost:5173")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from moviestats.main import app as fastapi_app  # noqa: E402
from moviestats.api.deps import get_tmdb_client  # noqa: E402
from moviestats.services.cache import RequestCache  # noqa: E402
from moviestats.services.tmdb import TMDBClient  # noqa: E402

TEST_BASE_URL = "https://tmdb.test/3"


class FakeTMDB:
    """Routes TMDB paths to canned payloads and records every request."""

    def __init__(self) -> None:
        self.routes: dict[str, Any] = {}
        self.requests: list[httpx.Request] = []
        self.calls: dict[str, int] = defaultdict(int)

    def add(self, path: str, payload: Any = None, *, status_code: int = 200, content: bytes | None = None):
        self.routes[path] = (status_code, payload, content)

    def fail(self, path: str, exc: Exception):
        self.routes[path] = exc

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path.removeprefix("/3")
        self.calls[path] += 1
        route = self.routes.get(path)
        if route is None:
            return httpx.Response(404, json={"status_message": "not found"})
        if isinstance(route, Exception):
            raise route
        status_code, payload, content = route
        if content is not None:
            return httpx.Response(status_code, content=content)
        return httpx.Response(status_code, json=payload)


class FakeClock:
    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def fake_tmdb():
    return FakeTMDB()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
async def tmdb_client(fake_tmdb, clock):
    http = httpx.AsyncClient(transport=httpx.MockTransport(fake_tmdb.handler))
    client = TMDBClient(
        api_key="test-key",
        base_url=TEST_BASE_URL,
        cache=RequestCache(clock=clock),
        cache_ttl=300,
        http_client=http,
    )
    yield client
    await http.aclose()


@pytest.fixture
async def client(tmdb_client):
    fastapi_app.dependency_overrides[get_tmdb_client] = lambda: tmdb_client

    transport = ASGITransport(app=fastapi_app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c

    fastapi_app.dependency_overrides.pop(get_tmdb_client, None)


# --- Canned upstream payloads ---

@pytest.fixture
def movie_search_payload():
    return {
        "page": 1,
        "results": [
            {
                "id": 10,
                "title": "A",
                "original_title": "A",
                "overview": "An overview",
                "vote_average": 7,
                "vote_count": 100,
                "popularity": 12,
                "poster_path": "/a.jpg",
                "backdrop_path": "/a-back.jpg",
                "release_date": "2020-01-01",
                "genre_ids": [28, 18],
                "adult": False,
                "original_language": "en",
            }
        ],
        "total_pages": 5,
        "total_results": 100,
    }


@pytest.fixture
def person_search_payload():
    return {
        "page": 1,
        "results": [
            {
                "id": 20,
                "name": "Person A",
                "profile_path": "/p.jpg",
                "popularity": 7,
                "known_for": [{"id": 10, "title": "A"}],
            }
        ],
        "total_pages": 3,
        "total_results": 30,
    }

