"""
threadhub.models.account - Email Account Model

A connected mailbox: which provider serves it and its encrypted OAuth
tokens. Tokens are written by the external sign-in flow; threadhub only
decrypts them to call the provider.
"""

from datetime import datetime
from uuid import UUID as UUIDType
from uuid import uuid4

from sqlalchemy import CheckConstraint, DateTime, Index, LargeBinary, String, text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from threadhub.models.base import Base, TimestampedModel


class EmailAccount(TimestampedModel, Base):
    """
    A user's connected mailbox.

    Example:
        >>> account = EmailAccount(
        ...     user_id=user_id,
        ...     email="jordan@example.com",
        ...     provider="gmail",
        ...     encrypted_credentials=encrypted,
        ...     encryption_key_id="key_v1",
        ... )
    """

    __tablename__ = "email_accounts"

    id: Mapped[UUIDType] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid4,
        comment="Unique identifier",
    )

    user_id: Mapped[UUIDType] = mapped_column(
        UUID(as_uuid=True),
        nullable=False,
        index=True,
        comment="Owning user (managed by the auth service)",
    )

    email: Mapped[str] = mapped_column(
        String(320),
        nullable=False,
        comment="Mailbox address",
    )

    provider: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        comment="Provider (gmail, microsoft_graph)",
    )

    encrypted_credentials: Mapped[bytes | None] = mapped_column(
        LargeBinary,
        nullable=True,
        comment="Fernet-encrypted JSON with access_token (and refresh_token)",
    )

    encryption_key_id: Mapped[str | None] = mapped_column(
        String(50),
        nullable=True,
        comment="Key id used to encrypt the credentials",
    )

    token_expires_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        comment="When the access token expires (UTC)",
    )

    deleted_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        default=None,
        comment="When this account was disconnected (UTC), None if active",
    )

    __table_args__ = (
        CheckConstraint(
            "provider IN ('gmail', 'microsoft_graph')",
            name="ck_email_accounts_provider",
        ),
        Index(
            "idx_email_accounts_user_email",
            "user_id",
            "email",
            unique=True,
            postgresql_where=text("deleted_at IS NULL"),
        ),
    )

    def __repr__(self) -> str:
        return f"<EmailAccount(id={self.id}, provider={self.provider})>"
