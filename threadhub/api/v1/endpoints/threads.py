"""
threadhub.api.v1.endpoints.threads - Thread Listing Endpoint

GET /threads returns one page of the current account's threads, enriched
with pending/skipped automation and category tags.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Query

from threadhub.api.deps import CurrentAccount, Provider, Store
from threadhub.api.v1.schemas.threads import ErrorResponse, ThreadsResponse
from threadhub.integrations.email.types import ThreadQuery
from threadhub.settings import get_settings
from threadhub.threads.service import ThreadService

logger = logging.getLogger(__name__)

router = APIRouter()

_ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    401: {"model": ErrorResponse},
    502: {"model": ErrorResponse},
    504: {"model": ErrorResponse},
}


@router.get("", response_model=ThreadsResponse, responses=_ERROR_RESPONSES)
async def list_threads(
    auth: CurrentAccount,
    provider: Provider,
    store: Store,
    type: Annotated[str | None, Query()] = None,
    label_id: Annotated[str | None, Query(alias="labelId")] = None,
    folder_id: Annotated[str | None, Query(alias="folderId")] = None,
    from_email: Annotated[str | None, Query(alias="fromEmail")] = None,
    q: Annotated[str | None, Query()] = None,
    limit: Annotated[int | None, Query()] = None,
    next_page_token: Annotated[str | None, Query(alias="nextPageToken")] = None,
) -> ThreadsResponse:
    """
    List one page of threads.

    Args:
        type: inbox, sent, draft, trash, spam, starred, important, unread,
            archive or all (default inbox)
        labelId / folderId: Gmail label or Graph mail folder to list instead
        fromEmail: Only threads from this sender
        q: Free-text query; takes precedence over fromEmail and type
        limit: Page size (default 50)
        nextPageToken: Token from the previous page

    Returns:
        Threads in provider order and the token for the next page
    """
    settings = get_settings()
    query = ThreadQuery(
        type=type,
        label_id=label_id or folder_id,
        from_email=from_email,
        q=q,
        limit=limit if limit is not None else settings.default_page_size,
        next_page_token=next_page_token,
    )

    service = ThreadService(provider, store, timeout=settings.request_timeout_seconds)
    page = await service.get_threads(auth.account_id, query)
    return ThreadsResponse.model_validate(page)
