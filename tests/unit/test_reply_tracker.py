"""
Unit tests for threadhub.threads.reply_tracker.
"""

from datetime import UTC, datetime, timedelta

import pytest

from tests.simulation import InMemoryRecordStore, SimulatedMailbox, make_message, make_tracker
from threadhub.exceptions import InvalidQueryError, PipelineTimeoutError
from threadhub.threads.reply_tracker import (
    ReplyTrackerService,
    TimeRange,
    TrackerType,
    sent_before_cutoff,
)

NOW = datetime(2024, 3, 1, 12, 0, 0, tzinfo=UTC)


class TestSentBeforeCutoff:
    @pytest.mark.parametrize(
        ("time_range", "delta"),
        [
            (TimeRange.THREE_DAYS, timedelta(days=3)),
            (TimeRange.ONE_WEEK, timedelta(days=7)),
            (TimeRange.TWO_WEEKS, timedelta(days=14)),
            (TimeRange.ONE_MONTH, timedelta(days=30)),
        ],
    )
    def test_ranges(self, time_range, delta):
        assert sent_before_cutoff(time_range, NOW) == NOW - delta

    def test_all_has_no_cutoff(self):
        assert sent_before_cutoff(TimeRange.ALL, NOW) is None


@pytest.fixture
def mailbox() -> SimulatedMailbox:
    mailbox = SimulatedMailbox()
    mailbox.add_thread(
        "t1",
        [
            make_message("t1", "t1a", subject="Re: Proposal", snippet="older"),
            make_message(
                "t1",
                "t1b",
                minutes=10,
                subject="Re: Proposal",
                from_addr="Bob <bob@example.com>",
                snippet="Can you &quot;confirm&quot;?",
            ),
        ],
    )
    mailbox.add_thread("t2", [make_message("t2", "t2a", subject="Invoice")])
    return mailbox


@pytest.fixture
def store() -> InMemoryRecordStore:
    store = InMemoryRecordStore()
    store.trackers = [
        make_tracker("t1", sent_at=NOW - timedelta(days=1)),
        make_tracker("t2", sent_at=NOW - timedelta(days=10)),
        make_tracker("t3", TrackerType.AWAITING, sent_at=NOW - timedelta(days=2)),
    ]
    return store


class TestReplyTrackerService:
    @pytest.mark.asyncio
    async def test_summarizes_last_message(self, mailbox, store):
        service = ReplyTrackerService(mailbox, store)

        page = await service.get_page(store.account_id, TrackerType.NEEDS_REPLY, now=NOW)

        assert page.count == 2
        assert [e.thread_id for e in page.emails] == ["t1", "t2"]
        first = page.emails[0]
        assert first.subject == "Re: Proposal"
        assert first.from_addr == "Bob <bob@example.com>"
        assert first.snippet == 'Can you "confirm"?'

    @pytest.mark.asyncio
    async def test_time_range_filters_recent_trackers(self, mailbox, store):
        service = ReplyTrackerService(mailbox, store)

        page = await service.get_page(
            store.account_id, TrackerType.NEEDS_REPLY, time_range=TimeRange.ONE_WEEK, now=NOW
        )

        assert page.count == 1
        assert [e.thread_id for e in page.emails] == ["t2"]

    @pytest.mark.asyncio
    async def test_paging(self, mailbox, store):
        service = ReplyTrackerService(mailbox, store, page_size=1)

        second = await service.get_page(store.account_id, TrackerType.NEEDS_REPLY, page=2, now=NOW)

        assert second.count == 2
        assert [e.thread_id for e in second.emails] == ["t2"]

    @pytest.mark.asyncio
    async def test_unloadable_threads_dropped(self, mailbox, store):
        mailbox.fail_threads.add("t1")
        page = await ReplyTrackerService(mailbox, store).get_page(
            store.account_id, TrackerType.NEEDS_REPLY, now=NOW
        )
        assert [e.thread_id for e in page.emails] == ["t2"]
        assert page.count == 2

    @pytest.mark.asyncio
    async def test_empty_page_skips_provider(self, mailbox):
        store = InMemoryRecordStore()
        page = await ReplyTrackerService(mailbox, store).get_page(
            store.account_id, TrackerType.AWAITING, now=NOW
        )
        assert page.emails == []
        assert page.count == 0
        assert mailbox.load_calls == []

    @pytest.mark.asyncio
    async def test_page_must_be_positive(self, mailbox, store):
        with pytest.raises(InvalidQueryError):
            await ReplyTrackerService(mailbox, store).get_page(
                store.account_id, TrackerType.NEEDS_REPLY, page=0
            )

    @pytest.mark.asyncio
    async def test_deadline(self, mailbox, store):
        mailbox.load_delay = 5.0
        with pytest.raises(PipelineTimeoutError):
            await ReplyTrackerService(mailbox, store, timeout=0.05).get_page(
                store.account_id, TrackerType.NEEDS_REPLY, now=NOW
            )
