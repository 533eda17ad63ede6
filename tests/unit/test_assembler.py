"""
Unit tests for threadhub.threads.assembler.
"""

from tests.simulation import make_message, make_record
from threadhub.integrations.email.types import SnippetEncoding, ThreadPage, ThreadSummary
from threadhub.threads.assembler import assemble_threads, thread_snippet
from threadhub.threads.joiner import ThreadEnrichment


class TestThreadSnippet:
    def test_prefers_thread_snippet(self):
        summary = ThreadSummary(id="t1", snippet="Fish &amp; chips")
        messages = [make_message("t1", "m1", snippet="ignored")]
        assert thread_snippet(summary, messages, SnippetEncoding.GMAIL) == "Fish & chips"

    def test_falls_back_to_last_message(self):
        summary = ThreadSummary(id="t1")
        messages = [
            make_message("t1", "m1", snippet="first"),
            make_message("t1", "m2", minutes=5, snippet="last &gt; first"),
        ]
        assert thread_snippet(summary, messages, SnippetEncoding.GMAIL) == "last > first"

    def test_no_messages(self):
        assert thread_snippet(ThreadSummary(id="t1"), [], SnippetEncoding.PLAIN) == ""


class TestAssembleThreads:
    def test_provider_order_and_token_kept(self):
        page = ThreadPage(
            threads=[ThreadSummary(id="b"), ThreadSummary(id="a"), ThreadSummary(id="c")],
            next_page_token="tok/=+",
        )
        messages = {tid: [make_message(tid, f"{tid}1")] for tid in ("a", "b", "c")}

        result = assemble_threads(page, messages, {}, SnippetEncoding.GMAIL)

        assert [t.id for t in result.threads] == ["b", "a", "c"]
        assert result.next_page_token == "tok/=+"
        assert all(t.next_page_token == "tok/=+" for t in result.threads)

    def test_missing_threads_skipped(self):
        page = ThreadPage(threads=[ThreadSummary(id="a"), ThreadSummary(id="b")])
        messages = {"b": [make_message("b", "b1")]}

        result = assemble_threads(page, messages, {}, SnippetEncoding.GMAIL)

        assert [t.id for t in result.threads] == ["b"]
        assert result.next_page_token is None
        assert result.threads[0].next_page_token is None

    def test_thread_with_no_messages_kept(self):
        page = ThreadPage(threads=[ThreadSummary(id="a")])
        result = assemble_threads(page, {"a": []}, {}, SnippetEncoding.GMAIL)
        assert result.threads[0].messages == []
        assert result.threads[0].snippet == ""

    def test_enrichment_attached(self):
        record = make_record("a")
        page = ThreadPage(threads=[ThreadSummary(id="a"), ThreadSummary(id="b")])
        messages = {"a": [make_message("a", "a1")], "b": [make_message("b", "b1")]}
        enrichment = {"a": ThreadEnrichment(record=record, category="Newsletter")}

        result = assemble_threads(page, messages, enrichment, SnippetEncoding.GMAIL)

        assert result.threads[0].plan == record
        assert result.threads[0].category == "Newsletter"
        assert result.threads[1].plan is None
        assert result.threads[1].category is None
