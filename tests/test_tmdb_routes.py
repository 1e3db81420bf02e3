import httpx
import pytest

from moviestats.core.errors import ErrorKind, error_message


@pytest.mark.anyio
async def test_health(client):
    r = await client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}


@pytest.mark.anyio
async def test_combined_search_route(client, fake_tmdb, movie_search_payload, person_search_payload):
    fake_tmdb.add("/search/movie", movie_search_payload)
    fake_tmdb.add("/search/person", person_search_payload)

    r = await client.get("/tmdb/search", params={"q": "batman", "page": 1})

    assert r.status_code == 200, r.text
    data = r.json()
    assert data["total_pages"] == 5
    assert data["total_results"] == 130
    assert data["movies"][0]["genres"] == ["Action", "Drama"]
    assert data["movies"][0]["year"] == 2020
    assert data["people"][0]["name"] == "Person A"


@pytest.mark.anyio
async def test_combined_search_route_requires_query(client):
    r = await client.get("/tmdb/search")
    assert r.status_code == 422


@pytest.mark.anyio
@pytest.mark.parametrize("q", ["   ", "\t\n"])
async def test_combined_search_route_rejects_blank_query(client, fake_tmdb, q):
    r = await client.get("/tmdb/search", params={"q": q})

    assert r.status_code == 422
    assert fake_tmdb.requests == []


@pytest.mark.anyio
async def test_combined_search_route_maps_malformed_body_to_bad_gateway(client, fake_tmdb, person_search_payload):
    fake_tmdb.add("/search/movie", {"status_message": "unexpected"})
    fake_tmdb.add("/search/person", person_search_payload)

    r = await client.get("/tmdb/search", params={"q": "batman"})

    assert r.status_code == 502
    assert r.json()["detail"] == error_message(ErrorKind.INVALID_RESPONSE)


@pytest.mark.anyio
async def test_popular_route_maps_wrongly_typed_record_to_bad_gateway(client, fake_tmdb):
    fake_tmdb.add("/movie/popular", {"results": [{"id": 1, "vote_average": "N/A"}]})

    r = await client.get("/tmdb/popular")

    assert r.status_code == 502
    assert r.json()["detail"] == error_message(ErrorKind.INVALID_RESPONSE)


@pytest.mark.anyio
async def test_combined_search_route_maps_rate_limit(client, fake_tmdb, movie_search_payload):
    fake_tmdb.add("/search/movie", movie_search_payload)
    fake_tmdb.add("/search/person", {"status_message": "slow down"}, status_code=429)

    r = await client.get("/tmdb/search", params={"q": "batman"})

    assert r.status_code == 429
    assert r.json()["detail"] == error_message(ErrorKind.RATE_LIMITED)


@pytest.mark.anyio
async def test_combined_search_route_maps_bad_key_to_bad_gateway(client, fake_tmdb):
    fake_tmdb.add("/search/movie", {"status_message": "Invalid API key"}, status_code=401)
    fake_tmdb.add("/search/person", {"status_message": "Invalid API key"}, status_code=401)

    r = await client.get("/tmdb/search", params={"q": "batman"})

    assert r.status_code == 502
    assert r.json()["detail"] == error_message(ErrorKind.UNAUTHORIZED)


@pytest.mark.anyio
async def test_list_routes_return_normalized_pages(client, fake_tmdb):
    payload = {
        "page": 2,
        "results": [{"id": 7, "title": "Seven", "release_date": "1995-09-22", "genre_ids": [80, 9648]}],
        "total_pages": 10,
        "total_results": 200,
    }
    fake_tmdb.add("/trending/movie/day", payload)
    fake_tmdb.add("/movie/top_rated", payload)
    fake_tmdb.add("/movie/popular", payload)

    for path, params in (
        ("/tmdb/trending", {"window": "day", "page": 2}),
        ("/tmdb/top-rated", {"page": 2}),
        ("/tmdb/popular", {"page": 2}),
    ):
        r = await client.get(path, params=params)
        assert r.status_code == 200, r.text
        data = r.json()
        assert data["page"] == 2
        assert data["total_pages"] == 10
        assert data["results"][0]["genres"] == ["Crime", "Mystery"]
        assert data["results"][0]["year"] == 1995


@pytest.mark.anyio
async def test_trending_route_rejects_unknown_window(client):
    r = await client.get("/tmdb/trending", params={"window": "month"})
    assert r.status_code == 422


@pytest.mark.anyio
async def test_discover_route_forwards_filters(client, fake_tmdb):
    fake_tmdb.add("/discover/movie", {"page": 1, "results": [], "total_pages": 0, "total_results": 0})

    r = await client.get("/tmdb/discover", params={"with_genres": "28", "sort_by": "popularity.desc"})

    assert r.status_code == 200, r.text
    params = fake_tmdb.requests[0].url.params
    assert params["with_genres"] == "28"
    assert params["sort_by"] == "popularity.desc"
    assert params["api_key"] == "test-key"


@pytest.mark.anyio
async def test_detail_routes_pass_upstream_payload_through(client, fake_tmdb):
    fake_tmdb.add("/movie/603", {"id": 603, "title": "The Matrix", "credits": {"cast": []}})
    fake_tmdb.add("/person/6384", {"id": 6384, "name": "Keanu Reeves"})
    fake_tmdb.add("/genre/movie/list", {"genres": [{"id": 28, "name": "Action"}]})

    movie = await client.get("/tmdb/movies/603")
    person = await client.get("/tmdb/people/6384")
    genres = await client.get("/tmdb/genres")

    assert movie.json()["title"] == "The Matrix"
    assert person.json()["name"] == "Keanu Reeves"
    assert genres.json()["genres"][0]["name"] == "Action"


@pytest.mark.anyio
async def test_movie_details_route_maps_not_found(client):
    r = await client.get("/tmdb/movies/999999")

    assert r.status_code == 404
    assert r.json()["detail"] == error_message(ErrorKind.NOT_FOUND)


@pytest.mark.anyio
async def test_statistics_route_summarizes_deduplicated_lists(client, fake_tmdb):
    fake_tmdb.add(
        "/trending/movie/week",
        {"results": [{"id": 1, "vote_average": 8.0, "genre_ids": [18], "release_date": "2020-01-01"}]},
    )
    fake_tmdb.add(
        "/movie/top_rated",
        {"results": [{"id": 2, "vote_average": 9.0, "genre_ids": [18, 28], "release_date": "2019-05-01"}]},
    )
    fake_tmdb.add(
        "/movie/popular",
        {"results": [
            {"id": 1, "vote_average": 8.0, "genre_ids": [18], "release_date": "2020-01-01"},
            {"id": 3, "vote_average": 5.0, "genre_ids": [35], "release_date": "2020-06-01"},
        ]},
    )

    r = await client.get("/tmdb/statistics")

    assert r.status_code == 200, r.text
    data = r.json()
    assert len(data["statistics"]["popular"]) == 2
    summary = data["summary"]
    assert summary["total_movies"] == 3
    assert summary["average_rating"] == 7.33
    assert summary["top_genre"] == "Drama"
    assert summary["most_productive_year"] == 2020
    assert summary["high_rated_movies"] == 2


@pytest.mark.anyio
async def test_clear_cache_route(client, fake_tmdb, tmdb_client):
    fake_tmdb.add("/movie/popular", {"results": []})
    await client.get("/tmdb/popular")
    assert len(tmdb_client.cache) == 1

    r = await client.delete("/tmdb/cache")

    assert r.status_code == 204
    assert len(tmdb_client.cache) == 0


@pytest.mark.anyio
async def test_relay_search_returns_raw_payload_uncached(client, fake_tmdb, movie_search_payload):
    fake_tmdb.add("/search/movie", movie_search_payload)

    first = await client.get("/api/tmdb/search", params={"q": "batman", "page": 2})
    await client.get("/api/tmdb/search", params={"q": "batman", "page": 2})

    assert first.status_code == 200
    assert first.json() == movie_search_payload
    assert fake_tmdb.calls["/search/movie"] == 2
    assert fake_tmdb.requests[0].url.params["page"] == "2"
    assert fake_tmdb.requests[0].url.params["api_key"] == "test-key"


@pytest.mark.anyio
async def test_relay_search_maps_network_failure(client, fake_tmdb):
    fake_tmdb.fail("/search/movie", httpx.ConnectError("connection refused"))

    r = await client.get("/api/tmdb/search", params={"q": "batman"})

    assert r.status_code == 503
    assert r.json()["detail"] == error_message(ErrorKind.NETWORK_ERROR)
