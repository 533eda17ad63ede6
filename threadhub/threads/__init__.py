"""
Thread aggregation pipeline.

Combines one provider page of threads with locally stored automation
records and categories into a provider-agnostic, paginated response.
"""

from threadhub.threads.joiner import RecordStore, ThreadEnrichment, join_automation
from threadhub.threads.reply_tracker import ReplyTrackerService, TimeRange, TrackerType
from threadhub.threads.service import ThreadService
from threadhub.threads.types import (
    AutomationRecord,
    ExecutedRuleStatus,
    PagedThreadsResponse,
    RuleRef,
    Thread,
)

__all__ = [
    "AutomationRecord",
    "ExecutedRuleStatus",
    "PagedThreadsResponse",
    "RecordStore",
    "ReplyTrackerService",
    "RuleRef",
    "Thread",
    "ThreadEnrichment",
    "ThreadService",
    "TimeRange",
    "TrackerType",
    "join_automation",
]
