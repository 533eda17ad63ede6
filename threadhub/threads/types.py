"""
Caller-visible thread types and automation records.
"""

from datetime import datetime
from enum import StrEnum
from typing import Any
from uuid import UUID

from pydantic import BaseModel

from threadhub.integrations.email.types import Message


class ExecutedRuleStatus(StrEnum):
    """Outcome of an automation rule evaluated against a thread"""

    PENDING = "PENDING"  # Waiting for the user to approve the actions
    SKIPPED = "SKIPPED"  # Rule matched but the actions were not run
    APPLIED = "APPLIED"
    REJECTED = "REJECTED"
    ERROR = "ERROR"


class RuleRef(BaseModel):
    """The rule an automation record was produced by."""

    id: UUID
    name: str


class AutomationRecord(BaseModel):
    """A persisted rule execution, read-only for the thread pipeline."""

    id: UUID
    thread_id: str
    message_id: str | None = None
    rule: RuleRef | None = None
    status: ExecutedRuleStatus
    reason: str | None = None
    action_items: list[dict[str, Any]] = []
    created_at: datetime


class Thread(BaseModel):
    """A conversation as returned to callers."""

    id: str
    messages: list[Message]  # Oldest first
    snippet: str
    plan: AutomationRecord | None = None
    category: str | None = None
    next_page_token: str | None = None  # Continuation token of the page this thread came from


class PagedThreadsResponse(BaseModel):
    """One page of threads plus the provider's continuation token."""

    threads: list[Thread]
    next_page_token: str | None = None
