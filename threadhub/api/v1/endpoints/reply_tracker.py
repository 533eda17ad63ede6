"""
threadhub.api.v1.endpoints.reply_tracker - Reply Tracker Endpoint

GET /reply-tracker lists threads that need a reply from the user
(needs-reply) or are waiting on someone else (needs-follow-up).
"""

import logging
from typing import Annotated, Literal

from fastapi import APIRouter, Query

from threadhub.api.deps import CurrentAccount, Provider, Store
from threadhub.api.v1.schemas.threads import ErrorResponse, ReplyTrackerResponse
from threadhub.settings import get_settings
from threadhub.threads.reply_tracker import ReplyTrackerService, TimeRange, TrackerType

logger = logging.getLogger(__name__)

router = APIRouter()

_TRACKER_TYPES: dict[str, TrackerType] = {
    "needs-reply": TrackerType.NEEDS_REPLY,
    "needs-follow-up": TrackerType.AWAITING,
}


@router.get(
    "",
    response_model=ReplyTrackerResponse,
    responses={400: {"model": ErrorResponse}, 401: {"model": ErrorResponse}},
)
async def list_tracked_threads(
    auth: CurrentAccount,
    provider: Provider,
    store: Store,
    type: Annotated[Literal["needs-reply", "needs-follow-up"], Query()],
    page: Annotated[int, Query(ge=1)] = 1,
    time_range: Annotated[TimeRange, Query(alias="timeRange")] = TimeRange.ALL,
) -> ReplyTrackerResponse:
    """
    List tracked threads, newest first.

    Args:
        type: needs-reply or needs-follow-up
        page: Page number (1-indexed)
        timeRange: all, 3d, 1w, 2w or 1m; only threads older than the range

    Returns:
        Last-message summaries and the total number of tracked threads
    """
    settings = get_settings()
    service = ReplyTrackerService(
        provider,
        store,
        page_size=settings.reply_tracker_page_size,
        timeout=settings.request_timeout_seconds,
    )
    result = await service.get_page(
        auth.account_id,
        _TRACKER_TYPES[type],
        page=page,
        time_range=time_range,
    )
    return ReplyTrackerResponse.model_validate(result)
