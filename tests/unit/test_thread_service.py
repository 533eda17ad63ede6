"""
Unit tests for ThreadService, run against the simulated mailbox and
in-memory record store.
"""

import asyncio

import pytest

from tests.simulation import InMemoryRecordStore, SimulatedMailbox, make_message, make_record
from threadhub.exceptions import (
    InvalidQueryError,
    PipelineTimeoutError,
    ProviderUnavailableError,
    UnauthenticatedError,
)
from threadhub.integrations.email.types import (
    EmailProvider,
    GmailRequestParams,
    GraphRequestParams,
    ThreadQuery,
)
from threadhub.threads.service import ThreadService, run_with_deadline
from threadhub.threads.types import ExecutedRuleStatus


@pytest.fixture
def mailbox() -> SimulatedMailbox:
    mailbox = SimulatedMailbox()
    mailbox.add_thread(
        "A",
        [make_message("A", "a1", snippet="First"), make_message("A", "a2", minutes=3)],
        snippet="Lunch &amp; learn",
    )
    mailbox.add_thread("B", [make_message("B", "b1", snippet="From B")])
    return mailbox


@pytest.fixture
def store() -> InMemoryRecordStore:
    return InMemoryRecordStore()


class TestGetThreads:
    @pytest.mark.asyncio
    async def test_failed_thread_dropped_and_plan_attached(self, mailbox, store):
        record = make_record("A", ExecutedRuleStatus.PENDING)
        store.add_record(record)
        mailbox.fail_threads.add("B")

        page = await ThreadService(mailbox, store).get_threads(store.account_id, ThreadQuery())

        assert [t.id for t in page.threads] == ["A"]
        thread = page.threads[0]
        assert thread.plan == record
        assert thread.snippet == "Lunch & learn"
        assert [m.id for m in thread.messages] == ["a1", "a2"]

    @pytest.mark.asyncio
    async def test_provider_order_preserved(self, store):
        mailbox = SimulatedMailbox()
        for tid in ("z", "m", "a", "q"):
            mailbox.add_thread(tid, [make_message(tid, f"{tid}1")])

        page = await ThreadService(mailbox, store).get_threads(store.account_id, ThreadQuery())

        assert [t.id for t in page.threads] == ["z", "m", "a", "q"]

    @pytest.mark.asyncio
    async def test_snippet_from_last_message_when_thread_has_none(self, mailbox, store):
        page = await ThreadService(mailbox, store).get_threads(store.account_id, ThreadQuery())
        assert page.threads[1].snippet == "From B"

    @pytest.mark.asyncio
    async def test_only_pending_or_skipped_records_shown(self, mailbox, store):
        store.add_record(make_record("A", ExecutedRuleStatus.APPLIED))
        skipped = make_record("B", ExecutedRuleStatus.SKIPPED)
        store.add_record(skipped)
        store.categories["B"] = "Cold email"

        page = await ThreadService(mailbox, store).get_threads(store.account_id, ThreadQuery())

        by_id = {t.id: t for t in page.threads}
        assert by_id["A"].plan is None
        assert by_id["B"].plan == skipped
        assert by_id["B"].category == "Cold email"

    @pytest.mark.asyncio
    async def test_pagination_token_round_trip(self, mailbox, store):
        service = ThreadService(mailbox, store)

        first = await service.get_threads(store.account_id, ThreadQuery(limit=1))
        assert [t.id for t in first.threads] == ["A"]
        assert first.next_page_token == "1"

        second = await service.get_threads(
            store.account_id, ThreadQuery(limit=1, next_page_token=first.next_page_token)
        )
        assert [t.id for t in second.threads] == ["B"]
        assert second.next_page_token is None

    @pytest.mark.asyncio
    async def test_query_translated_for_provider(self, store):
        gmail = SimulatedMailbox()
        await ThreadService(gmail, store).get_threads(
            store.account_id, ThreadQuery(from_email="x@y.com")
        )
        assert gmail.fetch_calls == [GmailRequestParams(limit=50, q="from:x@y.com")]

        graph = SimulatedMailbox(provider=EmailProvider.MICROSOFT_GRAPH)
        await ThreadService(graph, store).get_threads(store.account_id, ThreadQuery(type="sent"))
        assert graph.fetch_calls == [GraphRequestParams(limit=50, folder="sentitems")]

    @pytest.mark.asyncio
    async def test_empty_page_skips_load_and_join(self, store):
        mailbox = SimulatedMailbox()

        page = await ThreadService(mailbox, store).get_threads(store.account_id, ThreadQuery())

        assert page.threads == []
        assert page.next_page_token is None
        assert mailbox.load_calls == []
        assert store.record_queries == []

    @pytest.mark.asyncio
    async def test_load_and_join_see_the_same_ids(self, mailbox, store):
        await ThreadService(mailbox, store).get_threads(store.account_id, ThreadQuery())
        assert mailbox.load_calls == [["A", "B"]]
        assert store.record_queries == [["A", "B"]]


class TestGetThreadsErrors:
    @pytest.mark.asyncio
    async def test_invalid_query_rejected_before_provider_call(self, mailbox, store):
        with pytest.raises(InvalidQueryError):
            await ThreadService(mailbox, store).get_threads(
                store.account_id, ThreadQuery(limit=0)
            )
        assert mailbox.fetch_calls == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error",
        [UnauthenticatedError("token rejected"), ProviderUnavailableError("rate limited", 429)],
    )
    async def test_fetch_errors_propagate(self, mailbox, store, error):
        mailbox.fetch_error = error
        with pytest.raises(type(error)):
            await ThreadService(mailbox, store).get_threads(store.account_id, ThreadQuery())
        assert mailbox.load_calls == []

    @pytest.mark.asyncio
    async def test_deadline_exceeded(self, mailbox, store):
        mailbox.load_delay = 5.0

        with pytest.raises(PipelineTimeoutError, match="timed out"):
            await ThreadService(mailbox, store, timeout=0.05).get_threads(
                store.account_id, ThreadQuery()
            )

    @pytest.mark.asyncio
    async def test_load_and_join_run_concurrently(self, mailbox):
        class SlowStore(InMemoryRecordStore):
            async def get_categories(self, account_id, thread_ids):
                await asyncio.sleep(0.3)
                return {}

        store = SlowStore()
        mailbox.load_delay = 0.3

        # Sequential execution would need 0.6s.
        page = await ThreadService(mailbox, store, timeout=0.5).get_threads(
            store.account_id, ThreadQuery()
        )
        assert len(page.threads) == 2


class TestRunWithDeadline:
    @pytest.mark.asyncio
    async def test_returns_result(self):
        async def work():
            return 42

        assert await run_with_deadline(work(), 1.0, "work") == 42

    @pytest.mark.asyncio
    async def test_timeout_converted(self):
        with pytest.raises(PipelineTimeoutError, match="Slow work timed out after 0.01s"):
            await run_with_deadline(asyncio.sleep(1), 0.01, "Slow work")
