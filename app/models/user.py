"""ORM model for application users (auth, RBAC and profile)."""

from sqlalchemy import Column, Integer, String, Text
from sqlalchemy.orm import relationship

from app.models.base import Base, created_at_column

DEFAULT_AVATAR = "default.png"
USER_ROLES = ("user", "admin")


class User(Base):
    """
    User account for JWT authentication and role-based access control.

    role: 'admin' or 'user'
    refresh_token: the one refresh token currently accepted for this user; a new
    login or a refresh rotation overwrites it.
    """

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    name = Column(String(255), nullable=False)
    avatar = Column(String(255), nullable=False, default=DEFAULT_AVATAR)
    role = Column(String(32), nullable=False, default="user")
    refresh_token = Column(Text, nullable=True)
    created_at = created_at_column()

    reviews = relationship("Review", back_populates="user", cascade="all, delete-orphan")
    ratings = relationship("Rating", back_populates="user", cascade="all, delete-orphan")
    bookmarks = relationship(
        "Bookmark", back_populates="user", cascade="all, delete-orphan"
    )
    watched = relationship("Watched", back_populates="user", cascade="all, delete-orphan")
