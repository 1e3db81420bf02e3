from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from moviestats.core.errors import ErrorKind, UpstreamError
from moviestats.schemas.tmdb import MoviePage, NormalizedMovie, NormalizedPerson

# TMDB movie genre ids.
GENRES: dict[int, str] = {
    28: "Action",
    12: "Adventure",
    16: "Animation",
    35: "Comedy",
    80: "Crime",
    99: "Documentary",
    18: "Drama",
    10751: "Family",
    14: "Fantasy",
    36: "History",
    27: "Horror",
    10402: "Music",
    9648: "Mystery",
    10749: "Romance",
    878: "Science Fiction",
    10770: "TV Movie",
    53: "Thriller",
    10752: "War",
    37: "Western",
}


def parse_year(release_date: Any) -> int | None:
    if isinstance(release_date, str) and len(release_date) >= 4 and release_date[:4].isdigit():
        return int(release_date[:4])
    return None


def _int_list(raw: Any) -> list[int]:
    if not isinstance(raw, list):
        return []
    return [v for v in raw if isinstance(v, int) and not isinstance(v, bool)]


def resolve_genres(genre_ids: list[int], genres: Mapping[int, str] = GENRES) -> list[str]:
    return [genres[gid] for gid in genre_ids if gid in genres]


def _invalid(message: str) -> UpstreamError:
    return UpstreamError(f"Invalid response payload: {message}", kind=ErrorKind.INVALID_RESPONSE)


def format_movie(movie: dict[str, Any], genres: Mapping[int, str] = GENRES) -> NormalizedMovie:
    genre_ids = _int_list(movie.get("genre_ids"))
    release_date = movie.get("release_date") or None
    try:
        return NormalizedMovie(
            id=movie["id"],
            title=movie.get("title"),
            original_title=movie.get("original_title"),
            overview=movie.get("overview"),
            release_date=release_date,
            year=parse_year(release_date),
            rating=movie.get("vote_average"),
            vote_count=movie.get("vote_count"),
            popularity=movie.get("popularity"),
            poster_path=movie.get("poster_path"),
            backdrop_path=movie.get("backdrop_path"),
            genre_ids=genre_ids,
            genres=resolve_genres(genre_ids, genres),
            adult=bool(movie.get("adult", False)),
            original_language=movie.get("original_language"),
        )
    except ValidationError as exc:
        raise _invalid(f"malformed movie record id={movie.get('id')!r}") from exc


def format_person(person: dict[str, Any]) -> NormalizedPerson:
    known_for = person.get("known_for")
    try:
        return NormalizedPerson(
            id=person["id"],
            name=person.get("name"),
            known_for=known_for if isinstance(known_for, list) else [],
            profile_path=person.get("profile_path"),
            popularity=person.get("popularity"),
            adult=bool(person.get("adult", False)),
        )
    except ValidationError as exc:
        raise _invalid(f"malformed person record id={person.get('id')!r}") from exc


def results_of(payload: Any) -> list[dict[str, Any]]:
    """Rows of a paginated TMDB payload; a body without a ``results`` list is invalid."""
    if not isinstance(payload, dict):
        raise _invalid(f"expected an object, got {type(payload).__name__}")
    rows = payload.get("results")
    if not isinstance(rows, list):
        raise _invalid("missing 'results' list")
    return [row for row in rows if isinstance(row, dict) and row.get("id") is not None]


def _count(payload: Any, field: str) -> int:
    value = payload.get(field) if isinstance(payload, dict) else None
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    return 0


def total_pages_of(payload: Any) -> int:
    return _count(payload, "total_pages")


def total_results_of(payload: Any) -> int:
    return _count(payload, "total_results")


def format_movie_page(payload: Any, genres: Mapping[int, str] = GENRES) -> MoviePage:
    return MoviePage(
        page=_count(payload, "page") or 1,
        results=[format_movie(row, genres) for row in results_of(payload)],
        total_pages=total_pages_of(payload),
        total_results=total_results_of(payload),
    )
