"""
Shared email types used by providers and the thread pipeline.

These types (ThreadQuery included) live in the integrations layer to avoid
circular imports; threadhub.threads imports them directly.

Request parameters and page summaries are internal, short-lived values
and use plain dataclasses. Message crosses the API boundary and is a
Pydantic model.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator


class EmailProvider(StrEnum):
    """Supported email providers"""

    MICROSOFT_GRAPH = "microsoft_graph"  # M365, Outlook
    GMAIL = "gmail"  # Google Workspace


class SnippetEncoding(StrEnum):
    """How a provider encodes the preview snippets it returns."""

    GMAIL = "gmail"  # HTML entities, quoted-printable leftovers
    PLAIN = "plain"  # Graph bodyPreview is already plain text


class Message(BaseModel):
    """A single message belonging to exactly one thread."""

    id: str
    thread_id: str
    from_addr: str = ""
    to_addrs: list[str] = []
    subject: str = ""
    date: str = ""  # Header value as sent, e.g. "Mon, 15 Jan 2024 10:00:00 +0000"
    timestamp: datetime
    snippet: str = ""  # Raw, provider-encoded
    body: str | None = None  # Plain text
    html_body: str | None = None
    labels: list[str] = []
    is_read: bool = True


@dataclass(frozen=True)
class ProviderRequestParams:
    """Provider-specific request built from a ThreadQuery.

    ``page_token`` is the caller's continuation token, passed back to the
    provider verbatim and never inspected.
    """

    limit: int
    page_token: str | None = None


@dataclass(frozen=True)
class GmailRequestParams(ProviderRequestParams):
    """Parameters for ``users.threads.list``."""

    q: str | None = None
    label_ids: tuple[str, ...] = ()


@dataclass(frozen=True)
class GraphRequestParams(ProviderRequestParams):
    """Parameters for listing messages of a mail folder."""

    folder: str | None = None  # None lists across all folders
    filter: str | None = None


@dataclass(frozen=True)
class ThreadSummary:
    """A thread as it appears in a provider's list response."""

    id: str
    snippet: str | None = None


@dataclass(frozen=True)
class ThreadPage:
    """One page of thread summaries in provider order."""

    threads: list[ThreadSummary] = field(default_factory=list)
    next_page_token: str | None = None

    @property
    def thread_ids(self) -> list[str]:
        return [thread.id for thread in self.threads]


class ThreadQuery(BaseModel):
    """Provider-agnostic thread filter.

    Precedence when several filters are set: ``q`` > ``from_email`` >
    ``type``. ``label_id`` scopes the listing to a label (Gmail) or mail
    folder (Graph) and replaces the type-derived scope.
    """

    model_config = ConfigDict(frozen=True)

    type: str | None = None
    label_id: str | None = None
    from_email: str | None = None
    q: str | None = None
    limit: int = 50
    next_page_token: str | None = None

    @field_validator("type", "label_id", "from_email", "q", "next_page_token", mode="before")
    @classmethod
    def _blank_to_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value
