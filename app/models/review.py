"""ORM model for user-written movie reviews."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from app.models.base import Base, created_at_column


class Review(Base):
    """A review of one TMDB movie by one user. A user may review a movie more than once."""

    __tablename__ = "reviews"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    movie_id = Column(String(64), nullable=False, index=True)
    content = Column(Text, nullable=False)
    created_at = created_at_column()
    updated_at = Column(DateTime(timezone=True), nullable=True)

    user = relationship("User", back_populates="reviews")
