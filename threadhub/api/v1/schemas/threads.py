"""
threadhub.api.v1.schemas.threads - Thread API Schemas

Response schemas use camelCase field names on the wire.
"""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base for response schemas built from pipeline types."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class MessageResponse(CamelModel):
    id: str
    thread_id: str
    from_addr: str = Field(alias="from")
    to_addrs: list[str]
    subject: str
    date: str
    timestamp: datetime
    snippet: str
    body: str | None = None
    html_body: str | None = None
    labels: list[str]
    is_read: bool


class RuleResponse(CamelModel):
    id: UUID
    name: str


class PlanResponse(CamelModel):
    """Pending or skipped automation shown next to a thread."""

    id: UUID
    message_id: str | None = None
    thread_id: str
    rule: RuleResponse | None = None
    status: str
    reason: str | None = None
    action_items: list[dict[str, Any]]


class ThreadResponse(CamelModel):
    id: str
    messages: list[MessageResponse]
    snippet: str
    plan: PlanResponse | None = None
    category: str | None = None
    next_page_token: str | None = None


class ThreadsResponse(CamelModel):
    """One page of threads. ``nextPageToken`` is null on the last page."""

    threads: list[ThreadResponse]
    next_page_token: str | None = None


class TrackedEmailResponse(CamelModel):
    thread_id: str
    subject: str | None = None
    from_addr: str | None = Field(default=None, alias="from")
    date: str | None = None
    snippet: str | None = None


class ReplyTrackerResponse(CamelModel):
    emails: list[TrackedEmailResponse]
    count: int


class ErrorResponse(BaseModel):
    error: str
