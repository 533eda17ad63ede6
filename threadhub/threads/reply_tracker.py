"""
threadhub.threads.reply_tracker - Reply Tracking Listing

Lists threads that are waiting on a reply (from the user, or from the
other side), newest first, with a one-line summary of each thread's last
message. Tracker rows come from the record store; message content comes
from the provider's message loader, so threads that fail to load are
dropped the same way they are from thread listings.
"""

import logging
from collections.abc import Sequence
from datetime import UTC, datetime, timedelta
from enum import StrEnum
from typing import Protocol
from uuid import UUID

from pydantic import BaseModel

from threadhub.exceptions import InvalidQueryError
from threadhub.integrations.email.base import ThreadProvider
from threadhub.integrations.email.snippet import normalize_snippet
from threadhub.threads.service import DEFAULT_TIMEOUT_SECONDS, run_with_deadline

logger = logging.getLogger(__name__)


class TrackerType(StrEnum):
    """Why a thread is being tracked"""

    NEEDS_REPLY = "NEEDS_REPLY"  # The user owes a reply
    AWAITING = "AWAITING"  # The user is waiting for a reply
    NEEDS_ACTION = "NEEDS_ACTION"


class TimeRange(StrEnum):
    """How old a tracked message must be to be listed"""

    ALL = "all"
    THREE_DAYS = "3d"
    ONE_WEEK = "1w"
    TWO_WEEKS = "2w"
    ONE_MONTH = "1m"


_TIME_RANGE_DELTAS: dict[TimeRange, timedelta] = {
    TimeRange.THREE_DAYS: timedelta(days=3),
    TimeRange.ONE_WEEK: timedelta(weeks=1),
    TimeRange.TWO_WEEKS: timedelta(weeks=2),
    TimeRange.ONE_MONTH: timedelta(days=30),
}


def sent_before_cutoff(time_range: TimeRange, now: datetime) -> datetime | None:
    """Latest sent_at a tracker may have to be listed, or None for all."""
    delta = _TIME_RANGE_DELTAS.get(time_range)
    return now - delta if delta else None


class ThreadTrackerRecord(BaseModel):
    """A tracked thread as stored locally."""

    id: UUID
    thread_id: str
    message_id: str
    type: TrackerType
    sent_at: datetime


class TrackedEmail(BaseModel):
    """Summary of the last message in a tracked thread."""

    thread_id: str
    subject: str | None = None
    from_addr: str | None = None
    date: str | None = None
    snippet: str | None = None


class ReplyTrackerPage(BaseModel):
    emails: list[TrackedEmail]
    count: int


class TrackerStore(Protocol):
    """Read access to unresolved thread trackers."""

    async def find_thread_trackers(
        self,
        account_id: UUID,
        tracker_type: TrackerType,
        *,
        offset: int,
        limit: int,
        sent_before: datetime | None,
    ) -> tuple[list[ThreadTrackerRecord], int]: ...


class ReplyTrackerService:
    """Pages through tracked threads and summarizes their last message."""

    def __init__(
        self,
        provider: ThreadProvider,
        store: TrackerStore,
        *,
        page_size: int = 20,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        self.provider = provider
        self.store = store
        self.page_size = page_size
        self.timeout = timeout

    async def get_page(
        self,
        account_id: UUID,
        tracker_type: TrackerType,
        *,
        page: int = 1,
        time_range: TimeRange = TimeRange.ALL,
        now: datetime | None = None,
    ) -> ReplyTrackerPage:
        """Return one page of tracked threads and the total tracker count."""
        if page < 1:
            raise InvalidQueryError(f"page must be at least 1, got {page}")

        sent_before = sent_before_cutoff(time_range, now or datetime.now(UTC))
        trackers, count = await self.store.find_thread_trackers(
            account_id,
            tracker_type,
            offset=(page - 1) * self.page_size,
            limit=self.page_size,
            sent_before=sent_before,
        )

        emails = await run_with_deadline(
            self._summarize(trackers),
            self.timeout,
            "Reply tracker listing",
        )
        logger.info(
            f"Retrieved {len(emails)} tracked threads",
            extra={"account_id": str(account_id), "type": tracker_type.value, "count": count},
        )
        return ReplyTrackerPage(emails=emails, count=count)

    async def _summarize(self, trackers: Sequence[ThreadTrackerRecord]) -> list[TrackedEmail]:
        thread_ids = [tracker.thread_id for tracker in trackers]
        if not thread_ids:
            return []

        messages_by_id = await self.provider.load_messages(thread_ids)

        emails: list[TrackedEmail] = []
        seen: set[str] = set()
        for thread_id in thread_ids:
            if thread_id in seen or thread_id not in messages_by_id:
                continue
            seen.add(thread_id)
            messages = messages_by_id[thread_id]
            last = messages[-1] if messages else None
            emails.append(
                TrackedEmail(
                    thread_id=thread_id,
                    subject=last.subject if last else None,
                    from_addr=last.from_addr if last else None,
                    date=last.date if last else None,
                    snippet=(
                        normalize_snippet(last.snippet, self.provider.snippet_encoding)
                        if last
                        else None
                    ),
                )
            )
        return emails
