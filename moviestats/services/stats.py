from __future__ import annotations

import math
from collections import Counter
from collections.abc import Iterable

from moviestats.schemas.tmdb import GenreCount, NormalizedMovie, StatsSummary, YearCount

HIGH_RATING_THRESHOLD = 8.0
_RATING_BUCKETS = tuple(f"{low}-{low + 1}" for low in range(9, -1, -1))


def dedupe_movies(movies: Iterable[NormalizedMovie]) -> list[NormalizedMovie]:
    seen: set[int] = set()
    out: list[NormalizedMovie] = []
    for movie in movies:
        if movie.id in seen:
            continue
        seen.add(movie.id)
        out.append(movie)
    return out


def _ratings(movies: list[NormalizedMovie]) -> list[float]:
    return [m.rating for m in movies if m.rating is not None]


def average_rating(movies: list[NormalizedMovie]) -> float | None:
    ratings = _ratings(movies)
    if not ratings:
        return None
    return round(sum(ratings) / len(ratings), 2)


def top_genres(movies: list[NormalizedMovie], limit: int = 5) -> list[GenreCount]:
    counts: Counter[str] = Counter()
    for movie in movies:
        counts.update(movie.genres)
    # Counter.most_common is stable for ties (first-seen order).
    return [GenreCount(genre=genre, count=count) for genre, count in counts.most_common(limit)]


def year_distribution(movies: list[NormalizedMovie]) -> list[YearCount]:
    counts = Counter(m.year for m in movies if m.year)
    return [YearCount(year=year, count=counts[year]) for year in sorted(counts, reverse=True)]


def _bucket_for(rating: float) -> str:
    low = min(max(math.floor(rating), 0), 9)
    return f"{low}-{low + 1}"


def rating_distribution(movies: list[NormalizedMovie]) -> dict[str, int]:
    out = {bucket: 0 for bucket in _RATING_BUCKETS}
    for rating in _ratings(movies):
        out[_bucket_for(rating)] += 1
    return out


def summarize(movies: list[NormalizedMovie]) -> StatsSummary:
    genres = top_genres(movies)
    years = year_distribution(movies)
    return StatsSummary(
        total_movies=len(movies),
        average_rating=average_rating(movies),
        top_genre=genres[0].genre if genres else None,
        # years is newest-first, so max() breaks count ties toward the newest year.
        most_productive_year=max(years, key=lambda y: y.count).year if years else None,
        high_rated_movies=sum(1 for r in _ratings(movies) if r >= HIGH_RATING_THRESHOLD),
        top_genres=genres,
        year_distribution=years,
        rating_distribution=rating_distribution(movies),
    )
