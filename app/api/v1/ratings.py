"""Movie ratings: one 1-10 score per user and movie, plus public per-movie aggregates."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.api.v1.auth import get_current_user
from app.core.database import get_db
from app.models import Rating
from app.schemas.auth import CurrentUser
from app.schemas.library import MovieRatingSummary, RatingOut, RatingUpsert

router = APIRouter()


def _find_rating(db: Session, user_id: int, movie_id: str) -> Rating | None:
    return (
        db.query(Rating)
        .filter(Rating.user_id == user_id, Rating.movie_id == movie_id)
        .first()
    )


@router.put("", response_model=RatingOut)
def rate_movie(
    body: RatingUpsert,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> RatingOut:
    """Create the caller's rating for a movie, or replace its score."""
    rating = _find_rating(db, current_user.id, body.movie_id)
    if rating is None:
        rating = Rating(user_id=current_user.id, movie_id=body.movie_id, score=body.score)
        db.add(rating)
        try:
            db.commit()
        except IntegrityError:
            # A concurrent request inserted the same rating first; update that row.
            db.rollback()
            rating = _find_rating(db, current_user.id, body.movie_id)
            if rating is None:
                raise
            rating.score = body.score
            db.commit()
    else:
        rating.score = body.score
        db.commit()
    db.refresh(rating)
    return RatingOut.model_validate(rating)


@router.get("/movie/{movie_id}", response_model=MovieRatingSummary)
def get_movie_rating(
    movie_id: str,
    db: Annotated[Session, Depends(get_db)],
) -> MovieRatingSummary:
    count, average = (
        db.query(func.count(Rating.id), func.avg(Rating.score))
        .filter(Rating.movie_id == movie_id)
        .one()
    )
    return MovieRatingSummary(
        movie_id=movie_id,
        count=count,
        average=round(float(average), 2) if average is not None else None,
    )


@router.get("/me", response_model=list[RatingOut])
def list_my_ratings(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> list[RatingOut]:
    ratings = (
        db.query(Rating).filter(Rating.user_id == current_user.id).order_by(Rating.id).all()
    )
    return [RatingOut.model_validate(r) for r in ratings]
