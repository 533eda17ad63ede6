"""
threadhub.api.v1.router - API v1 Router

Aggregates all v1 API endpoints.
"""

from fastapi import APIRouter

from threadhub.api.v1.endpoints import reply_tracker, threads

api_router = APIRouter()

api_router.include_router(threads.router, prefix="/threads", tags=["threads"])
api_router.include_router(reply_tracker.router, prefix="/reply-tracker", tags=["reply-tracker"])
