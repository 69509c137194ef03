"""SQLAlchemy declarative Base and shared model configuration."""

from sqlalchemy import Column, DateTime, func
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Declarative base for all ORM models."""

    pass


def created_at_column() -> Column:
    """Timestamp column filled by the database on insert."""
    return Column(DateTime(timezone=True), nullable=False, server_default=func.now())
