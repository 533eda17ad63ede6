"""
threadhub.models.automation - Automation State Models

Rows written by the external rule-execution and categorization
subsystems, read by the thread pipeline:
- Rule: An automation rule configured on an account
- ExecutedRule: The outcome of a rule run against a thread
- ThreadCategory: The category tag attached to a thread
- ThreadTracker: A thread waiting on a reply
"""

from datetime import datetime
from typing import Any
from uuid import UUID as UUIDType

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    String,
    Text,
    UniqueConstraint,
    text,
)
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from threadhub.models.base import AccountScopedModel


class Rule(AccountScopedModel):
    """An automation rule defined on an email account."""

    __tablename__ = "rules"

    name: Mapped[str] = mapped_column(
        String(200),
        nullable=False,
        comment="Display name",
    )

    instructions: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
        comment="Natural-language description of what the rule matches",
    )

    enabled: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        server_default=text("true"),
    )


class ExecutedRule(AccountScopedModel):
    """
    Outcome of a rule evaluated against a thread.

    Many records may exist per thread; the thread listing shows at most
    one PENDING or SKIPPED record, the most recently created.
    """

    __tablename__ = "executed_rules"

    thread_id: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Provider thread / conversation id",
    )

    message_id: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
        comment="Provider id of the message that triggered the rule",
    )

    rule_id: Mapped[UUIDType | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("rules.id", ondelete="SET NULL"),
        nullable=True,
    )

    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        comment="PENDING, SKIPPED, APPLIED, REJECTED, ERROR",
    )

    reason: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
        comment="Why the rule matched (or was skipped)",
    )

    action_items: Mapped[list[dict[str, Any]]] = mapped_column(
        JSONB,
        nullable=False,
        server_default=text("'[]'::jsonb"),
        comment="Actions planned or taken, e.g. [{'type': 'LABEL', 'label': 'Receipts'}]",
    )

    rule: Mapped["Rule | None"] = relationship("Rule", lazy="raise")

    __table_args__ = (
        CheckConstraint(
            "status IN ('PENDING', 'SKIPPED', 'APPLIED', 'REJECTED', 'ERROR')",
            name="ck_executed_rules_status",
        ),
        Index("idx_executed_rules_account_thread", "email_account_id", "thread_id"),
    )


class ThreadCategory(AccountScopedModel):
    """Category tag of a thread, one per (account, thread)."""

    __tablename__ = "thread_categories"

    thread_id: Mapped[str] = mapped_column(String(255), nullable=False)

    category: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        comment="Category name, e.g. Newsletter, Receipt",
    )

    __table_args__ = (
        UniqueConstraint("email_account_id", "thread_id", name="uq_thread_categories_thread"),
    )


class ThreadTracker(AccountScopedModel):
    """A thread waiting on a reply from the user or from the other side."""

    __tablename__ = "thread_trackers"

    thread_id: Mapped[str] = mapped_column(String(255), nullable=False)

    message_id: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Message that started the wait",
    )

    type: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        comment="NEEDS_REPLY, AWAITING, NEEDS_ACTION",
    )

    resolved: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        server_default=text("false"),
    )

    sent_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        comment="When the tracked message was sent (UTC)",
    )

    __table_args__ = (
        CheckConstraint(
            "type IN ('NEEDS_REPLY', 'AWAITING', 'NEEDS_ACTION')",
            name="ck_thread_trackers_type",
        ),
        Index(
            "idx_thread_trackers_open",
            "email_account_id",
            "type",
            "sent_at",
            postgresql_where=text("resolved = false"),
        ),
    )
