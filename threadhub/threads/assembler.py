"""
Thread assembly.

Merges loaded messages and local enrichment into the caller-visible page.
"""

from collections.abc import Mapping, Sequence

from threadhub.integrations.email.snippet import normalize_snippet
from threadhub.integrations.email.types import Message, SnippetEncoding, ThreadPage, ThreadSummary
from threadhub.threads.joiner import NO_ENRICHMENT, ThreadEnrichment
from threadhub.threads.types import PagedThreadsResponse, Thread


def thread_snippet(
    summary: ThreadSummary,
    messages: Sequence[Message],
    encoding: SnippetEncoding,
) -> str:
    """Preview text: the thread's own snippet, else the last message's."""
    if summary.snippet:
        return normalize_snippet(summary.snippet, encoding)
    if messages:
        return normalize_snippet(messages[-1].snippet, encoding)
    return ""


def assemble_threads(
    page: ThreadPage,
    messages_by_id: Mapping[str, list[Message]],
    enrichment_by_id: Mapping[str, ThreadEnrichment],
    encoding: SnippetEncoding,
) -> PagedThreadsResponse:
    """Build the response in provider order, skipping threads that failed to load.

    The continuation token is copied from the provider page unchanged.
    """
    threads: list[Thread] = []
    for summary in page.threads:
        if summary.id not in messages_by_id:
            continue
        messages = messages_by_id[summary.id]
        enrichment = enrichment_by_id.get(summary.id, NO_ENRICHMENT)
        threads.append(
            Thread(
                id=summary.id,
                messages=list(messages),
                snippet=thread_snippet(summary, messages, encoding),
                plan=enrichment.record,
                category=enrichment.category,
                next_page_token=page.next_page_token,
            )
        )

    return PagedThreadsResponse(threads=threads, next_page_token=page.next_page_token)
