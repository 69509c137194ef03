"""Watched-status of movies per user, and public view counts."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.api.v1.auth import get_current_user
from app.core.database import get_db
from app.models import Watched
from app.schemas.auth import CurrentUser
from app.schemas.library import MovieViews, WatchedCreate, WatchedOut

router = APIRouter()


def _find_watched(db: Session, user_id: int, movie_id: str) -> Watched | None:
    return (
        db.query(Watched)
        .filter(Watched.user_id == user_id, Watched.movie_id == movie_id)
        .first()
    )


@router.post("", response_model=WatchedOut, status_code=201)
def mark_watched(
    body: WatchedCreate,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> WatchedOut:
    """Mark a movie as watched; marking it again is a no-op."""
    watched = _find_watched(db, current_user.id, body.movie_id)
    if watched is None:
        watched = Watched(user_id=current_user.id, movie_id=body.movie_id)
        db.add(watched)
        try:
            db.commit()
        except IntegrityError:
            # Lost the insert to a concurrent identical request.
            db.rollback()
            watched = _find_watched(db, current_user.id, body.movie_id)
            if watched is None:
                raise
            return WatchedOut.model_validate(watched)
        db.refresh(watched)
    return WatchedOut.model_validate(watched)


@router.delete("/{movie_id}", status_code=204)
def unmark_watched(
    movie_id: str,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> Response:
    deleted = (
        db.query(Watched)
        .filter(Watched.user_id == current_user.id, Watched.movie_id == movie_id)
        .delete(synchronize_session=False)
    )
    db.commit()
    if not deleted:
        raise HTTPException(status_code=404, detail="Movie is not in the watched list")
    return Response(status_code=204)


@router.get("/me", response_model=list[WatchedOut])
def list_my_watched(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> list[WatchedOut]:
    rows = (
        db.query(Watched).filter(Watched.user_id == current_user.id).order_by(Watched.id).all()
    )
    return [WatchedOut.model_validate(w) for w in rows]


@router.get("/views/{movie_id}", response_model=MovieViews)
def get_movie_views(
    movie_id: str,
    db: Annotated[Session, Depends(get_db)],
) -> MovieViews:
    """Number of users who marked the movie as watched. No authentication required."""
    views = (
        db.query(func.count(Watched.id)).filter(Watched.movie_id == movie_id).scalar() or 0
    )
    return MovieViews(movie_id=movie_id, views=views)
