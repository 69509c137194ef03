"""API v1 routes."""

from fastapi import APIRouter

from app.api.v1 import auth, bookmarks, health, ratings, reviews, users, watched

router = APIRouter()
router.include_router(health.router, prefix="/health", tags=["health"])
router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(users.router, prefix="/users", tags=["users"])
router.include_router(reviews.router, prefix="/reviews", tags=["reviews"])
router.include_router(ratings.router, prefix="/ratings", tags=["ratings"])
router.include_router(bookmarks.router, prefix="/bookmarks", tags=["bookmarks"])
router.include_router(watched.router, prefix="/watched", tags=["watched"])
