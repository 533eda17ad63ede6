"""Create email account and automation state tables

Revision ID: 3f1a9c2d7e10
Revises:
Create Date: 2026-10-18 12:00:00.000000

This migration adds:
- email_accounts: Connected mailboxes with encrypted tokens
- rules / executed_rules: Automation rules and their per-thread outcomes
- thread_categories: Category tag per thread
- thread_trackers: Threads waiting on a reply
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "3f1a9c2d7e10"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
            comment="When this record was created (UTC)",
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
            comment="When this record was last updated (UTC)",
        ),
    ]


def _account_scoped() -> list[sa.Column]:
    return [
        sa.Column("id", sa.UUID(), nullable=False, comment="Unique identifier"),
        sa.Column(
            "email_account_id",
            sa.UUID(),
            sa.ForeignKey("email_accounts.id", ondelete="CASCADE"),
            nullable=False,
            comment="Email account this record belongs to",
        ),
        *_timestamps(),
    ]


def upgrade() -> None:
    op.create_table(
        "email_accounts",
        sa.Column("id", sa.UUID(), nullable=False, comment="Unique identifier"),
        sa.Column("user_id", sa.UUID(), nullable=False, comment="Owning user"),
        sa.Column("email", sa.String(length=320), nullable=False),
        sa.Column("provider", sa.String(length=50), nullable=False),
        sa.Column("encrypted_credentials", sa.LargeBinary(), nullable=True),
        sa.Column("encryption_key_id", sa.String(length=50), nullable=True),
        sa.Column("token_expires_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.CheckConstraint(
            "provider IN ('gmail', 'microsoft_graph')",
            name="ck_email_accounts_provider",
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_email_accounts_user_id", "email_accounts", ["user_id"])
    op.create_index(
        "idx_email_accounts_user_email",
        "email_accounts",
        ["user_id", "email"],
        unique=True,
        postgresql_where=sa.text("deleted_at IS NULL"),
    )

    op.create_table(
        "rules",
        *_account_scoped(),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("instructions", sa.Text(), nullable=True),
        sa.Column("enabled", sa.Boolean(), server_default=sa.text("true"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_rules_email_account_id", "rules", ["email_account_id"])

    op.create_table(
        "executed_rules",
        *_account_scoped(),
        sa.Column("thread_id", sa.String(length=255), nullable=False),
        sa.Column("message_id", sa.String(length=255), nullable=True),
        sa.Column(
            "rule_id",
            sa.UUID(),
            sa.ForeignKey("rules.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("reason", sa.Text(), nullable=True),
        sa.Column(
            "action_items",
            postgresql.JSONB(astext_type=sa.Text()),
            server_default=sa.text("'[]'::jsonb"),
            nullable=False,
        ),
        sa.CheckConstraint(
            "status IN ('PENDING', 'SKIPPED', 'APPLIED', 'REJECTED', 'ERROR')",
            name="ck_executed_rules_status",
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_executed_rules_email_account_id", "executed_rules", ["email_account_id"])
    op.create_index(
        "idx_executed_rules_account_thread",
        "executed_rules",
        ["email_account_id", "thread_id"],
    )

    op.create_table(
        "thread_categories",
        *_account_scoped(),
        sa.Column("thread_id", sa.String(length=255), nullable=False),
        sa.Column("category", sa.String(length=100), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email_account_id", "thread_id", name="uq_thread_categories_thread"),
    )
    op.create_index(
        "ix_thread_categories_email_account_id", "thread_categories", ["email_account_id"]
    )

    op.create_table(
        "thread_trackers",
        *_account_scoped(),
        sa.Column("thread_id", sa.String(length=255), nullable=False),
        sa.Column("message_id", sa.String(length=255), nullable=False),
        sa.Column("type", sa.String(length=20), nullable=False),
        sa.Column("resolved", sa.Boolean(), server_default=sa.text("false"), nullable=False),
        sa.Column("sent_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint(
            "type IN ('NEEDS_REPLY', 'AWAITING', 'NEEDS_ACTION')",
            name="ck_thread_trackers_type",
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_thread_trackers_email_account_id", "thread_trackers", ["email_account_id"])
    op.create_index(
        "idx_thread_trackers_open",
        "thread_trackers",
        ["email_account_id", "type", "sent_at"],
        postgresql_where=sa.text("resolved = false"),
    )


def downgrade() -> None:
    op.drop_table("thread_trackers")
    op.drop_table("thread_categories")
    op.drop_table("executed_rules")
    op.drop_table("rules")
    op.drop_index("idx_email_accounts_user_email", table_name="email_accounts")
    op.drop_index("ix_email_accounts_user_id", table_name="email_accounts")
    op.drop_table("email_accounts")
