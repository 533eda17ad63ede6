"""
threadhub.threads.service - Thread Listing Pipeline

Runs one thread-listing request end to end:

    translate -> fetch_page -> {load_messages, join_automation} -> assemble

The message load and the record join have no data dependency and run
concurrently; assembly waits for both. The whole request runs under one
deadline, after which in-flight provider calls are abandoned and the
request fails with PipelineTimeoutError. No partial page is returned.
"""

import asyncio
import logging
from collections.abc import Awaitable
from typing import TypeVar
from uuid import UUID

from threadhub.exceptions import PipelineTimeoutError
from threadhub.integrations.email.base import ThreadProvider
from threadhub.integrations.email.types import ProviderRequestParams, ThreadQuery
from threadhub.threads.assembler import assemble_threads
from threadhub.threads.joiner import RecordStore, join_automation
from threadhub.threads.types import PagedThreadsResponse

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_TIMEOUT_SECONDS = 30.0


async def run_with_deadline(work: Awaitable[T], timeout: float, what: str) -> T:
    """Await *work*, converting a missed deadline into PipelineTimeoutError."""
    try:
        return await asyncio.wait_for(work, timeout=timeout)
    except TimeoutError as e:
        logger.warning("%s exceeded the %.1fs deadline", what, timeout)
        raise PipelineTimeoutError(f"{what} timed out after {timeout:g}s") from e


class ThreadService:
    """
    Lists enriched threads for one account through a ThreadProvider.

    Example:
        >>> service = ThreadService(provider, SqlRecordStore(session))
        >>> page = await service.get_threads(account_id, ThreadQuery(type="inbox"))
        >>> page.next_page_token  # pass back as ThreadQuery.next_page_token
    """

    def __init__(
        self,
        provider: ThreadProvider,
        store: RecordStore,
        *,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        self.provider = provider
        self.store = store
        self.timeout = timeout

    async def get_threads(self, account_id: UUID, query: ThreadQuery) -> PagedThreadsResponse:
        """
        Fetch one page of threads with their messages, plan and category.

        Raises:
            InvalidQueryError: Before any provider call, if the query is out of range
            UnauthenticatedError: If the provider rejects the access token
            ProviderUnavailableError: If listing threads fails upstream
            PipelineTimeoutError: If the request deadline passes
        """
        params = self.provider.translate(query)
        return await run_with_deadline(
            self._run(account_id, params),
            self.timeout,
            "Thread listing",
        )

    async def _run(self, account_id: UUID, params: ProviderRequestParams) -> PagedThreadsResponse:
        page = await self.provider.fetch_page(params)
        thread_ids = page.thread_ids
        if not thread_ids:
            return PagedThreadsResponse(threads=[], next_page_token=page.next_page_token)

        messages_by_id, enrichment_by_id = await asyncio.gather(
            self.provider.load_messages(thread_ids),
            join_automation(self.store, account_id, thread_ids),
        )

        dropped = [thread_id for thread_id in thread_ids if thread_id not in messages_by_id]
        if dropped:
            logger.warning(
                "Dropped %d of %d threads whose messages could not be loaded",
                len(dropped),
                len(thread_ids),
                extra={"account_id": str(account_id), "thread_ids": dropped},
            )

        response = assemble_threads(
            page,
            messages_by_id,
            enrichment_by_id,
            self.provider.snippet_encoding,
        )
        logger.info(
            f"Listed {len(response.threads)} {self.provider.provider} threads",
            extra={"account_id": str(account_id), "has_more": page.next_page_token is not None},
        )
        return response
