from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class NormalizedMovie(BaseModel):
    id: int
    title: str | None = None
    original_title: str | None = None
    overview: str | None = None
    release_date: str | None = None
    year: int | None = None
    rating: float | None = None
    vote_count: int | None = None
    popularity: float | None = None
    poster_path: str | None = None
    backdrop_path: str | None = None
    genre_ids: list[int] = Field(default_factory=list)
    genres: list[str] = Field(default_factory=list)
    adult: bool = False
    original_language: str | None = None


class NormalizedPerson(BaseModel):
    id: int
    name: str | None = None
    known_for: list[Any] = Field(default_factory=list)
    profile_path: str | None = None
    popularity: float | None = None
    adult: bool = False


class CombinedSearchResult(BaseModel):
    movies: list[NormalizedMovie]
    people: list[NormalizedPerson]
    total_pages: int
    total_results: int


class MoviePage(BaseModel):
    page: int
    results: list[NormalizedMovie]
    total_pages: int
    total_results: int


class MovieStatistics(BaseModel):
    trending: list[NormalizedMovie]
    top_rated: list[NormalizedMovie]
    popular: list[NormalizedMovie]


class GenreCount(BaseModel):
    genre: str
    count: int


class YearCount(BaseModel):
    year: int
    count: int


class StatsSummary(BaseModel):
    total_movies: int
    average_rating: float | None = None
    top_genre: str | None = None
    most_productive_year: int | None = None
    high_rated_movies: int
    top_genres: list[GenreCount]
    year_distribution: list[YearCount]
    rating_distribution: dict[str, int]


class MovieStatisticsOut(BaseModel):
    statistics: MovieStatistics
    summary: StatsSummary
