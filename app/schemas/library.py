"""Pydantic schemas for per-user movie annotations: reviews, ratings, bookmarks, watched."""

from datetime import datetime
from typing import Annotated

from pydantic import AfterValidator, BaseModel, ConfigDict, Field

MOVIE_ID_MAX_LENGTH = 64
SCORE_MIN = 1
SCORE_MAX = 10


def _validate_movie_id(value: str) -> str:
    """TMDB ids are kept as strings; strip and require non-empty."""
    movie_id = (value or "").strip()
    if not movie_id:
        raise ValueError("movie_id must be non-empty")
    return movie_id


MovieId = Annotated[
    str,
    Field(min_length=1, max_length=MOVIE_ID_MAX_LENGTH),
    AfterValidator(_validate_movie_id),
]


class ReviewCreate(BaseModel):
    movie_id: MovieId
    content: str = Field(..., min_length=1, max_length=10_000)


class ReviewUpdate(BaseModel):
    content: str = Field(..., min_length=1, max_length=10_000)


class ReviewOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    movie_id: str
    content: str
    created_at: datetime | None = None
    updated_at: datetime | None = None


class RatingUpsert(BaseModel):
    movie_id: MovieId
    score: int = Field(..., ge=SCORE_MIN, le=SCORE_MAX, description="Score from 1 to 10")


class RatingOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    movie_id: str
    score: int


class MovieRatingSummary(BaseModel):
    """Aggregate of all users' scores for one movie; average is None without ratings."""

    movie_id: str
    count: int
    average: float | None = None


class BookmarkCreate(BaseModel):
    movie_id: MovieId
    category: str = Field(default="movie", min_length=1, max_length=32)


class BookmarkOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    movie_id: str
    category: str


class WatchedCreate(BaseModel):
    movie_id: MovieId


class WatchedOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    movie_id: str


class MovieViews(BaseModel):
    movie_id: str
    views: int
