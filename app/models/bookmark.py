"""ORM model for bookmarked movies, grouped by a category (e.g. movie, tv)."""

from sqlalchemy import Column, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from app.models.base import Base, created_at_column


class Bookmark(Base):
    __tablename__ = "bookmarks"
    __table_args__ = (
        UniqueConstraint(
            "user_id", "movie_id", "category", name="uq_bookmarks_user_movie_category"
        ),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    movie_id = Column(String(64), nullable=False)
    category = Column(String(32), nullable=False)
    created_at = created_at_column()

    user = relationship("User", back_populates="bookmarks")
