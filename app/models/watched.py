"""ORM model for the watched-status of a movie per user."""

from sqlalchemy import Column, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from app.models.base import Base, created_at_column


class Watched(Base):
    __tablename__ = "watched"
    __table_args__ = (UniqueConstraint("user_id", "movie_id", name="uq_watched_user_movie"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    movie_id = Column(String(64), nullable=False, index=True)
    created_at = created_at_column()

    user = relationship("User", back_populates="watched")
