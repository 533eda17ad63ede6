"""
Simulated environment for thread pipeline testing.

SimulatedMailbox implements ThreadProvider over an in-memory list of
threads and records every call it receives, so tests can assert on what
the pipeline asked for. InMemoryRecordStore implements both RecordStore
and TrackerStore.

Why simulate instead of mock:
- Exercises the real translate/assemble code paths
- Failure and latency are configured per thread, not per call
"""

import asyncio
from collections.abc import Collection, Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from uuid import UUID, uuid4

from threadhub.exceptions import ThreadhubError
from threadhub.integrations.email.base import ThreadProvider
from threadhub.integrations.email.types import (
    EmailProvider,
    Message,
    ProviderRequestParams,
    SnippetEncoding,
    ThreadPage,
    ThreadSummary,
)
from threadhub.threads.reply_tracker import ThreadTrackerRecord, TrackerType
from threadhub.threads.types import AutomationRecord, ExecutedRuleStatus, RuleRef

BASE_TIME = datetime(2024, 1, 15, 10, 0, 0, tzinfo=UTC)


def make_message(
    thread_id: str,
    message_id: str,
    *,
    minutes: int = 0,
    subject: str = "Test Subject",
    from_addr: str = "sender@example.com",
    snippet: str = "",
) -> Message:
    """Build a Message sent ``minutes`` after BASE_TIME."""
    timestamp = BASE_TIME + timedelta(minutes=minutes)
    return Message(
        id=message_id,
        thread_id=thread_id,
        from_addr=from_addr,
        to_addrs=["me@example.com"],
        subject=subject,
        date=timestamp.strftime("%a, %d %b %Y %H:%M:%S +0000"),
        timestamp=timestamp,
        snippet=snippet,
        body="body",
    )


def make_record(
    thread_id: str,
    status: ExecutedRuleStatus = ExecutedRuleStatus.PENDING,
    *,
    minutes: int = 0,
    record_id: UUID | None = None,
    rule_name: str | None = "Label newsletters",
) -> AutomationRecord:
    """Build an AutomationRecord created ``minutes`` after BASE_TIME."""
    return AutomationRecord(
        id=record_id or uuid4(),
        thread_id=thread_id,
        message_id=f"{thread_id}-m1",
        rule=RuleRef(id=uuid4(), name=rule_name) if rule_name else None,
        status=status,
        reason="Matched sender",
        action_items=[{"type": "LABEL", "label": "Newsletter"}],
        created_at=BASE_TIME + timedelta(minutes=minutes),
    )


def make_tracker(
    thread_id: str,
    tracker_type: TrackerType = TrackerType.NEEDS_REPLY,
    *,
    sent_at: datetime = BASE_TIME,
) -> ThreadTrackerRecord:
    return ThreadTrackerRecord(
        id=uuid4(),
        thread_id=thread_id,
        message_id=f"{thread_id}-m1",
        type=tracker_type,
        sent_at=sent_at,
    )


class SimulatedMailbox(ThreadProvider):
    """
    In-memory ThreadProvider.

    Threads are listed in insertion order. ``page_size`` splits them into
    pages whose continuation token is the next offset as a string.

    Attributes:
        fail_threads: Thread ids whose message load fails
        fetch_error: Raised by fetch_page when set
        fetch_delay / load_delay: Seconds to sleep before answering
    """

    provider = EmailProvider.GMAIL
    snippet_encoding = SnippetEncoding.GMAIL

    def __init__(self, *, provider: EmailProvider = EmailProvider.GMAIL) -> None:
        # Instance attribute shadows the ClassVar so translate() can target Graph.
        self.provider = provider  # type: ignore[misc]
        self.threads: dict[str, list[Message]] = {}
        self.snippets: dict[str, str | None] = {}
        self.fail_threads: set[str] = set()
        self.fetch_error: ThreadhubError | None = None
        self.fetch_delay: float = 0.0
        self.load_delay: float = 0.0
        self.access_token: str | None = None
        self.fetch_calls: list[ProviderRequestParams] = []
        self.load_calls: list[list[str]] = []
        self.shutdown_called = False

    def add_thread(
        self,
        thread_id: str,
        messages: Sequence[Message],
        snippet: str | None = None,
    ) -> None:
        self.threads[thread_id] = list(messages)
        self.snippets[thread_id] = snippet

    async def initialize(self, access_token: str) -> None:
        self.access_token = access_token

    async def fetch_page(self, params: ProviderRequestParams) -> ThreadPage:
        self.fetch_calls.append(params)
        if self.fetch_delay:
            await asyncio.sleep(self.fetch_delay)
        if self.fetch_error is not None:
            raise self.fetch_error

        offset = int(params.page_token) if params.page_token else 0
        ids = list(self.threads)[offset : offset + params.limit]
        next_offset = offset + len(ids)
        return ThreadPage(
            threads=[ThreadSummary(id=tid, snippet=self.snippets.get(tid)) for tid in ids],
            next_page_token=str(next_offset) if next_offset < len(self.threads) else None,
        )

    async def load_messages(self, thread_ids: Sequence[str]) -> dict[str, list[Message]]:
        self.load_calls.append(list(thread_ids))
        if self.load_delay:
            await asyncio.sleep(self.load_delay)
        return {
            tid: list(self.threads[tid])
            for tid in thread_ids
            if tid in self.threads and tid not in self.fail_threads
        }

    async def shutdown(self) -> None:
        self.shutdown_called = True


@dataclass
class InMemoryRecordStore:
    """RecordStore and TrackerStore over plain lists, scoped by account id."""

    account_id: UUID = field(default_factory=uuid4)
    records: list[AutomationRecord] = field(default_factory=list)
    categories: dict[str, str] = field(default_factory=dict)
    trackers: list[ThreadTrackerRecord] = field(default_factory=list)
    record_queries: list[list[str]] = field(default_factory=list)

    def add_record(self, record: AutomationRecord) -> None:
        self.records.append(record)

    async def find_automation_records(
        self,
        account_id: UUID,
        thread_ids: Sequence[str],
        statuses: Collection[ExecutedRuleStatus],
    ) -> list[AutomationRecord]:
        self.record_queries.append(list(thread_ids))
        if account_id != self.account_id:
            return []
        wanted = set(thread_ids)
        return [r for r in self.records if r.thread_id in wanted and r.status in statuses]

    async def get_categories(self, account_id: UUID, thread_ids: Sequence[str]) -> dict[str, str]:
        if account_id != self.account_id:
            return {}
        return {tid: self.categories[tid] for tid in thread_ids if tid in self.categories}

    async def find_thread_trackers(
        self,
        account_id: UUID,
        tracker_type: TrackerType,
        *,
        offset: int,
        limit: int,
        sent_before: datetime | None,
    ) -> tuple[list[ThreadTrackerRecord], int]:
        if account_id != self.account_id:
            return [], 0
        matching = [
            t
            for t in self.trackers
            if t.type == tracker_type and (sent_before is None or t.sent_at <= sent_before)
        ]
        matching.sort(key=lambda t: t.sent_at, reverse=True)
        return matching[offset : offset + limit], len(matching)
