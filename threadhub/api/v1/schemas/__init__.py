"""
threadhub.api.v1.schemas - API Request/Response Schemas
"""

from threadhub.api.v1.schemas.threads import (
    ErrorResponse,
    MessageResponse,
    PlanResponse,
    ReplyTrackerResponse,
    ThreadResponse,
    ThreadsResponse,
    TrackedEmailResponse,
)

__all__ = [
    "ErrorResponse",
    "MessageResponse",
    "PlanResponse",
    "ReplyTrackerResponse",
    "ThreadResponse",
    "ThreadsResponse",
    "TrackedEmailResponse",
]
