"""
Outlook thread provider.

Implements ThreadProvider on the Microsoft Graph REST API with httpx.
Graph has no thread resource for mailboxes, so a page of threads is the
distinct ``conversationId`` values of a page of messages, and a thread's
messages are loaded with one filtered call per conversation.
"""

import asyncio
import logging
from collections.abc import Sequence
from datetime import UTC, datetime
from typing import Any
from urllib.parse import quote

import httpx

from threadhub.exceptions import (
    InvalidQueryError,
    ProviderUnavailableError,
    ThreadhubError,
    UnauthenticatedError,
)
from threadhub.integrations.email.base import ThreadProvider
from threadhub.integrations.email.query import escape_odata_string
from threadhub.integrations.email.types import (
    EmailProvider,
    GraphRequestParams,
    Message,
    ProviderRequestParams,
    SnippetEncoding,
    ThreadPage,
    ThreadSummary,
)

logger = logging.getLogger(__name__)

GRAPH_BASE_URL = "https://graph.microsoft.com/v1.0"

_LIST_SELECT = "id,conversationId,bodyPreview,receivedDateTime"
_MESSAGE_SELECT = (
    "id,conversationId,subject,from,toRecipients,receivedDateTime,"
    "bodyPreview,body,isRead,categories"
)


def _parse_datetime(value: str | None) -> datetime:
    if not value:
        return datetime.fromtimestamp(0, tz=UTC)
    parsed = datetime.fromisoformat(value)
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)


def _format_address(recipient: dict[str, Any] | None) -> str:
    address = (recipient or {}).get("emailAddress", {})
    name = address.get("name")
    email = address.get("address", "")
    if name and name != email:
        return f"{name} <{email}>"
    return email


def parse_graph_message(msg: dict[str, Any]) -> Message:
    """Convert a Graph message resource into a Message."""
    body = msg.get("body") or {}
    content = body.get("content")
    is_html = body.get("contentType", "").lower() == "html"

    return Message(
        id=msg["id"],
        thread_id=msg.get("conversationId", ""),
        from_addr=_format_address(msg.get("from")),
        to_addrs=[_format_address(r) for r in msg.get("toRecipients", [])],
        subject=msg.get("subject") or "",
        date=msg.get("receivedDateTime") or "",
        timestamp=_parse_datetime(msg.get("receivedDateTime")),
        snippet=msg.get("bodyPreview") or "",
        body=None if is_html else content,
        html_body=content if is_html else None,
        labels=msg.get("categories", []),
        is_read=msg.get("isRead", True),
    )


def _graph_error(exc: Exception, action: str) -> ThreadhubError:
    """Map an httpx exception onto the pipeline error taxonomy."""
    if isinstance(exc, httpx.HTTPStatusError):
        status = exc.response.status_code
        if status == 401:
            return UnauthenticatedError("Microsoft Graph rejected the access token")
        return ProviderUnavailableError(
            f"Microsoft Graph {action} failed with HTTP {status}", upstream_status=status
        )
    if isinstance(exc, httpx.TimeoutException):
        return ProviderUnavailableError(f"Microsoft Graph {action} timed out")
    return ProviderUnavailableError(f"Microsoft Graph {action} failed: {exc}")


class OutlookThreadProvider(ThreadProvider):
    """Microsoft Graph mail provider.

    Example:
        >>> provider = OutlookThreadProvider()
        >>> await provider.initialize(access_token)
        >>> page = await provider.fetch_page(provider.translate(ThreadQuery(type="inbox")))
    """

    provider = EmailProvider.MICROSOFT_GRAPH
    snippet_encoding = SnippetEncoding.PLAIN

    def __init__(
        self,
        *,
        base_url: str = GRAPH_BASE_URL,
        call_timeout: float = 30.0,
        messages_per_thread: int = 100,
        max_concurrency: int = 4,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._call_timeout = call_timeout
        self._messages_per_thread = messages_per_thread
        # Graph throttles mailbox requests above a few concurrent calls.
        self._max_concurrency = max_concurrency
        self._concurrency = asyncio.Semaphore(max_concurrency)
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def initialize(self, access_token: str) -> None:
        """Create the HTTP client bound to an access token."""
        if not access_token:
            raise UnauthenticatedError("Missing access token")

        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            headers={
                "Authorization": f"Bearer {access_token}",
                "Prefer": 'outlook.body-content-type="text"',
            },
            timeout=self._call_timeout,
            transport=self._transport,
        )

    def _require_client(self) -> httpx.AsyncClient:
        if self._client is None:
            raise UnauthenticatedError("Microsoft Graph client not initialized")
        return self._client

    async def _get(self, url: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        response = await self._require_client().get(url, params=params)
        response.raise_for_status()
        return response.json()

    async def fetch_page(self, params: ProviderRequestParams) -> ThreadPage:
        """List one page of messages and group them by conversation."""
        if not isinstance(params, GraphRequestParams):
            raise TypeError(f"Expected GraphRequestParams, got {type(params).__name__}")

        if params.page_token:
            # The continuation token is Graph's @odata.nextLink; it already
            # carries the folder, filter and page size.
            if not params.page_token.startswith(self._base_url + "/"):
                raise InvalidQueryError("Invalid nextPageToken")
            url = params.page_token
            query_params = None
        else:
            if params.folder:
                url = f"/me/mailFolders/{quote(params.folder, safe='')}/messages"
            else:
                url = "/me/messages"
            query_params = {"$top": params.limit, "$select": _LIST_SELECT}
            if params.filter:
                query_params["$filter"] = params.filter
            else:
                query_params["$orderby"] = "receivedDateTime desc"

        try:
            data = await self._get(url, query_params)
        except (httpx.HTTPStatusError, httpx.TransportError) as e:
            raise _graph_error(e, "message listing") from e

        threads: list[ThreadSummary] = []
        seen: set[str] = set()
        for msg in data.get("value", []):
            conversation_id = msg.get("conversationId")
            if not conversation_id or conversation_id in seen:
                continue
            seen.add(conversation_id)
            threads.append(ThreadSummary(id=conversation_id, snippet=msg.get("bodyPreview")))

        return ThreadPage(threads=threads, next_page_token=data.get("@odata.nextLink"))

    async def _load_thread(self, thread_id: str) -> list[Message]:
        url: str | None = "/me/messages"
        params: dict[str, Any] | None = {
            "$filter": f"conversationId eq '{escape_odata_string(thread_id)}'",
            "$select": _MESSAGE_SELECT,
            "$top": self._messages_per_thread,
        }
        messages: list[Message] = []
        async with self._concurrency:
            while url is not None:
                data = await self._get(url, params)
                messages.extend(parse_graph_message(msg) for msg in data.get("value", []))
                url = data.get("@odata.nextLink")
                params = None
                if url is not None and not url.startswith(self._base_url + "/"):
                    logger.warning(
                        "Graph conversation %s truncated at %d messages: unexpected nextLink host",
                        thread_id,
                        len(messages),
                    )
                    url = None
        return sorted(messages, key=lambda m: m.timestamp)

    async def load_messages(self, thread_ids: Sequence[str]) -> dict[str, list[Message]]:
        """Load conversations concurrently, at most ``max_concurrency`` at a time.

        Conversations whose requests fail are dropped. Long conversations are
        followed through ``@odata.nextLink`` until complete.
        """
        self._require_client()
        unique_ids = list(dict.fromkeys(thread_ids))

        results = await asyncio.gather(
            *(self._load_thread(thread_id) for thread_id in unique_ids),
            return_exceptions=True,
        )

        loaded: dict[str, list[Message]] = {}
        for thread_id, result in zip(unique_ids, results, strict=True):
            if isinstance(result, Exception):
                logger.warning("Dropping Graph conversation %s: %s", thread_id, result)
                continue
            if isinstance(result, BaseException):
                raise result
            loaded[thread_id] = result
        return loaded

    async def shutdown(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
