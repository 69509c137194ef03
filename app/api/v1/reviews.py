"""Movie reviews: public per-movie listing, authenticated add/edit/delete."""

from datetime import UTC, datetime
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from app.api.v1.auth import get_current_user
from app.core.database import get_db
from app.models import Review
from app.schemas.auth import CurrentUser
from app.schemas.library import ReviewCreate, ReviewOut, ReviewUpdate

router = APIRouter()


def _get_own_review(db: Session, review_id: int, user: CurrentUser, *, allow_admin: bool) -> Review:
    review = db.get(Review, review_id)
    if review is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Review not found")
    if review.user_id != user.id and not (allow_admin and user.role == "admin"):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You can only change your own reviews",
        )
    return review


@router.post("", response_model=ReviewOut, status_code=201)
def add_review(
    body: ReviewCreate,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> ReviewOut:
    review = Review(user_id=current_user.id, movie_id=body.movie_id, content=body.content)
    db.add(review)
    db.commit()
    db.refresh(review)
    return ReviewOut.model_validate(review)


@router.patch("/{review_id}", response_model=ReviewOut)
def edit_review(
    review_id: int,
    body: ReviewUpdate,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> ReviewOut:
    """Replace the content of one of the caller's reviews."""
    review = _get_own_review(db, review_id, current_user, allow_admin=False)
    review.content = body.content
    review.updated_at = datetime.now(UTC)
    db.commit()
    db.refresh(review)
    return ReviewOut.model_validate(review)


@router.delete("/{review_id}", status_code=204)
def delete_review(
    review_id: int,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> Response:
    """Delete one of the caller's reviews; admins may delete any review."""
    review = _get_own_review(db, review_id, current_user, allow_admin=True)
    db.delete(review)
    db.commit()
    return Response(status_code=204)


@router.get("/movie/{movie_id}", response_model=list[ReviewOut])
def list_movie_reviews(
    movie_id: str,
    db: Annotated[Session, Depends(get_db)],
) -> list[ReviewOut]:
    """All reviews of a movie, oldest first. No authentication required."""
    reviews = db.query(Review).filter(Review.movie_id == movie_id).order_by(Review.id).all()
    return [ReviewOut.model_validate(r) for r in reviews]


@router.get("/me", response_model=list[ReviewOut])
def list_my_reviews(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> list[ReviewOut]:
    reviews = (
        db.query(Review).filter(Review.user_id == current_user.id).order_by(Review.id).all()
    )
    return [ReviewOut.model_validate(r) for r in reviews]
