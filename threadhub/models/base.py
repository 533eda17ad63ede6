"""
threadhub.models.base - Base SQLAlchemy Models

Provides base classes with common functionality:
- Base: SQLAlchemy declarative base
- TimestampedModel: Automatic created_at/updated_at timestamps
- AccountScopedModel: Rows owned by one email account (email_account_id)
"""

from datetime import UTC, datetime
from uuid import uuid4

from sqlalchemy import DateTime, ForeignKey, text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def _utcnow() -> datetime:
    return datetime.now(UTC)


class Base(DeclarativeBase):
    """
    SQLAlchemy declarative base.

    All models inherit from this class.
    """

    pass


class TimestampedModel:
    """
    Mixin for models with automatic timestamps.

    Provides:
    - created_at: Set on insert
    - updated_at: Set on insert, updated on every update
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=text("now()"),
        comment="When this record was created (UTC)",
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=text("now()"),
        onupdate=_utcnow,
        comment="When this record was last updated (UTC)",
    )


class AccountScopedModel(TimestampedModel, Base):
    """
    Base class for rows owned by a single email account.

    Provides:
    - id: UUID primary key
    - email_account_id: Foreign key to email_accounts
    - Timestamps (created_at, updated_at)
    """

    __abstract__ = True

    id: Mapped[UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid4,
        comment="Unique identifier",
    )

    email_account_id: Mapped[UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("email_accounts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="Email account this record belongs to",
    )

    def __repr__(self) -> str:
        """String representation for debugging."""
        return f"<{self.__class__.__name__}(id={self.id})>"
