"""SQLAlchemy ORM models."""

from app.models.base import Base
from app.models.bookmark import Bookmark
from app.models.rating import Rating
from app.models.review import Review
from app.models.user import User
from app.models.watched import Watched

__all__ = ["Base", "Bookmark", "Rating", "Review", "User", "Watched"]
