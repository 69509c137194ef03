"""Bookmarked movies of the current user."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.api.v1.auth import get_current_user
from app.core.database import get_db
from app.models import Bookmark
from app.schemas.auth import CurrentUser
from app.schemas.library import BookmarkCreate, BookmarkOut

router = APIRouter()


def _find_bookmark(db: Session, user_id: int, movie_id: str, category: str) -> Bookmark | None:
    return (
        db.query(Bookmark)
        .filter(
            Bookmark.user_id == user_id,
            Bookmark.movie_id == movie_id,
            Bookmark.category == category,
        )
        .first()
    )


@router.post("", response_model=BookmarkOut, status_code=201)
def add_bookmark(
    body: BookmarkCreate,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> BookmarkOut:
    """Bookmark a movie. Adding the same movie and category twice returns the existing bookmark."""
    bookmark = _find_bookmark(db, current_user.id, body.movie_id, body.category)
    if bookmark is None:
        bookmark = Bookmark(
            user_id=current_user.id, movie_id=body.movie_id, category=body.category
        )
        db.add(bookmark)
        try:
            db.commit()
        except IntegrityError:
            # Lost the insert to a concurrent identical request.
            db.rollback()
            bookmark = _find_bookmark(db, current_user.id, body.movie_id, body.category)
            if bookmark is None:
                raise
            return BookmarkOut.model_validate(bookmark)
        db.refresh(bookmark)
    return BookmarkOut.model_validate(bookmark)


@router.delete("", status_code=204)
def remove_bookmark(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
    movie_id: Annotated[str, Query(min_length=1, max_length=64)],
    category: Annotated[str, Query(min_length=1, max_length=32)] = "movie",
) -> Response:
    deleted = (
        db.query(Bookmark)
        .filter(
            Bookmark.user_id == current_user.id,
            Bookmark.movie_id == movie_id,
            Bookmark.category == category,
        )
        .delete(synchronize_session=False)
    )
    db.commit()
    if not deleted:
        raise HTTPException(status_code=404, detail="Bookmark not found")
    return Response(status_code=204)


@router.get("/me", response_model=list[BookmarkOut])
def list_my_bookmarks(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> list[BookmarkOut]:
    bookmarks = (
        db.query(Bookmark)
        .filter(Bookmark.user_id == current_user.id)
        .order_by(Bookmark.id)
        .all()
    )
    return [BookmarkOut.model_validate(b) for b in bookmarks]
