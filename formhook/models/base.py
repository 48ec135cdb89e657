"""
Base model classes for FormHook.

Provides the SQLAlchemy declarative base and timestamp mixins.
"""
from datetime import datetime
from sqlalchemy import DateTime
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.sql import func


class Base(DeclarativeBase):
    """Base class for all database models."""
    pass


class CreatedAtMixin:
    """Creation timestamp for rows that are never updated."""
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False
    )


class TimestampMixin(CreatedAtMixin):
    """
    Adds created_at and updated_at timestamps to mutable models.

    Uses server-side defaults for automatic timestamp management.
    """
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False
    )
