"""
Gmail thread provider.

Implements ThreadProvider using the Gmail API (google-api-python-client).
"""

import asyncio
import base64
import logging
from collections.abc import Sequence
from datetime import UTC, datetime
from typing import Any

from google.auth.exceptions import RefreshError
from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from threadhub.exceptions import (
    ProviderUnavailableError,
    ThreadhubError,
    UnauthenticatedError,
)
from threadhub.integrations.email.base import ThreadProvider
from threadhub.integrations.email.types import (
    EmailProvider,
    GmailRequestParams,
    Message,
    ProviderRequestParams,
    SnippetEncoding,
    ThreadPage,
    ThreadSummary,
)

logger = logging.getLogger(__name__)

# Timeout for individual Gmail API calls (seconds).
# asyncio.wait_for cancels the coroutine on timeout; the underlying thread
# may still complete, but the caller is unblocked.
_DEFAULT_CALL_TIMEOUT_SECONDS = 30.0

# Gmail accepts up to 100 calls per batch request but throttles above 50.
_DEFAULT_BATCH_SIZE = 50


def _pad_base64url(data: str) -> str:
    """Add padding to base64url-encoded string if missing.

    Gmail API returns base64url without padding.  Python's
    ``base64.urlsafe_b64decode`` may fail on certain inputs when
    padding is absent, so we normalise here.
    """
    return data + "=" * (-len(data) % 4)


def _decode_body(data: str) -> str:
    return base64.urlsafe_b64decode(_pad_base64url(data)).decode("utf-8", errors="replace")


def _collect_bodies(part: dict[str, Any], bodies: dict[str, str]) -> None:
    """Walk a MIME part tree, keeping the first text/plain and text/html bodies."""
    mime_type = part.get("mimeType", "")
    data = (part.get("body") or {}).get("data", "")
    if data and mime_type in ("text/plain", "text/html") and mime_type not in bodies:
        bodies[mime_type] = _decode_body(data)
    elif data and not mime_type and "text/plain" not in bodies:
        bodies["text/plain"] = _decode_body(data)
    for child in part.get("parts") or []:
        if not isinstance(child, dict):
            continue
        _collect_bodies(child, bodies)


def _split_addresses(value: str) -> list[str]:
    return [addr.strip() for addr in value.split(",") if addr.strip()]


def parse_gmail_message(msg: dict[str, Any]) -> Message:
    """Convert a Gmail API message resource (format=full) into a Message."""
    payload = msg.get("payload") or {}
    headers = {h["name"].lower(): h["value"] for h in payload.get("headers") or []}

    bodies: dict[str, str] = {}
    _collect_bodies(payload, bodies)

    internal_date = msg.get("internalDate")
    timestamp = (
        datetime.fromtimestamp(int(internal_date) / 1000, tz=UTC)
        if internal_date
        else datetime.fromtimestamp(0, tz=UTC)
    )
    label_ids = msg.get("labelIds") or []

    return Message(
        id=msg["id"],
        thread_id=msg.get("threadId", ""),
        from_addr=headers.get("from", ""),
        to_addrs=_split_addresses(headers.get("to", "")),
        subject=headers.get("subject", ""),
        date=headers.get("date", ""),
        timestamp=timestamp,
        snippet=msg.get("snippet", ""),
        body=bodies.get("text/plain"),
        html_body=bodies.get("text/html"),
        labels=label_ids,
        is_read="UNREAD" not in label_ids,
    )


def parse_gmail_thread(thread: dict[str, Any]) -> list[Message]:
    """Messages of a Gmail thread resource, oldest first."""
    messages = [parse_gmail_message(msg) for msg in thread.get("messages") or []]
    return sorted(messages, key=lambda m: m.timestamp)


def _gmail_error(exc: Exception, action: str) -> ThreadhubError:
    """Map a Google client exception onto the pipeline error taxonomy."""
    if isinstance(exc, RefreshError):
        return UnauthenticatedError(f"Gmail credentials rejected: {exc}")
    if isinstance(exc, HttpError):
        status = exc.resp.status
        if status == 401:
            return UnauthenticatedError("Gmail rejected the access token")
        return ProviderUnavailableError(
            f"Gmail {action} failed with HTTP {status}", upstream_status=status
        )
    if isinstance(exc, TimeoutError):
        return ProviderUnavailableError(f"Gmail {action} timed out")
    return ProviderUnavailableError(f"Gmail {action} failed: {exc}")


class GmailThreadProvider(ThreadProvider):
    """Gmail API provider.

    Wraps synchronous Google API calls with asyncio.to_thread. Thread
    contents are loaded through Gmail's batch endpoint.
    """

    provider = EmailProvider.GMAIL
    snippet_encoding = SnippetEncoding.GMAIL

    def __init__(
        self,
        *,
        call_timeout: float = _DEFAULT_CALL_TIMEOUT_SECONDS,
        batch_size: int = _DEFAULT_BATCH_SIZE,
    ) -> None:
        self._call_timeout = call_timeout
        self._batch_size = batch_size
        self._client: Any = None

    async def _run_in_thread(self, func: Any) -> Any:
        """Run *func* in a thread with a timeout guard."""
        return await asyncio.wait_for(
            asyncio.to_thread(func),
            timeout=self._call_timeout,
        )

    async def initialize(self, access_token: str) -> None:
        """Build the Gmail API service for an access token."""
        if not access_token:
            raise UnauthenticatedError("Missing access token")

        creds = Credentials(token=access_token)

        def _build_service() -> Any:
            return build("gmail", "v1", credentials=creds, cache_discovery=False)

        try:
            self._client = await self._run_in_thread(_build_service)
        except Exception as e:
            raise ProviderUnavailableError(f"Gmail initialization failed: {e}") from e

    def _require_client(self) -> Any:
        if self._client is None:
            raise UnauthenticatedError("Gmail client not initialized")
        return self._client

    async def fetch_page(self, params: ProviderRequestParams) -> ThreadPage:
        """List one page of threads matching the translated query."""
        if not isinstance(params, GmailRequestParams):
            raise TypeError(f"Expected GmailRequestParams, got {type(params).__name__}")
        client = self._require_client()

        kwargs: dict[str, Any] = {"userId": "me", "maxResults": params.limit}
        if params.q:
            kwargs["q"] = params.q
        if params.label_ids:
            kwargs["labelIds"] = list(params.label_ids)
        if params.page_token:
            kwargs["pageToken"] = params.page_token

        def _list_threads() -> dict[str, Any]:
            return client.users().threads().list(**kwargs).execute()

        try:
            result = await self._run_in_thread(_list_threads)
        except Exception as e:
            raise _gmail_error(e, "threads.list") from e

        threads = [
            ThreadSummary(id=t["id"], snippet=t.get("snippet"))
            for t in result.get("threads", [])
            if t.get("id")
        ]
        return ThreadPage(threads=threads, next_page_token=result.get("nextPageToken"))

    async def load_messages(self, thread_ids: Sequence[str]) -> dict[str, list[Message]]:
        """Fetch full threads with one batch request per ``batch_size`` ids."""
        client = self._require_client()
        unique_ids = list(dict.fromkeys(thread_ids))
        if not unique_ids:
            return {}

        loaded: dict[str, list[Message]] = {}

        def _on_response(request_id: str, response: Any, exception: Exception | None) -> None:
            if exception is not None:
                logger.warning("Dropping Gmail thread %s: %s", request_id, exception)
                return
            try:
                loaded[request_id] = parse_gmail_thread(response)
            except Exception:
                # Raising here would abort the rest of the batch.
                logger.warning("Dropping unparseable Gmail thread %s", request_id, exc_info=True)

        def _execute_batches() -> None:
            # httplib2 transports are not thread-safe, so batches run one
            # after another on a single worker thread.
            for start in range(0, len(unique_ids), self._batch_size):
                chunk = unique_ids[start : start + self._batch_size]
                batch = client.new_batch_http_request(callback=_on_response)
                for thread_id in chunk:
                    batch.add(
                        client.users().threads().get(userId="me", id=thread_id, format="full"),
                        request_id=thread_id,
                    )
                try:
                    batch.execute()
                except Exception:
                    logger.warning(
                        "Gmail batch of %d threads failed; dropping them",
                        len(chunk),
                        exc_info=True,
                    )

        try:
            await self._run_in_thread(_execute_batches)
        except TimeoutError:
            logger.warning("Gmail batch load timed out; keeping %d loaded threads", len(loaded))

        return dict(loaded)

    async def shutdown(self) -> None:
        """Clean up Gmail client resources."""
        self._client = None
