"""
threadhub.services.records - SQL Record Store

Reads automation records, categories and reply trackers for one
account. Implements the RecordStore and TrackerStore protocols.
"""

import logging
from collections.abc import Collection, Sequence
from datetime import datetime
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from threadhub.models.automation import ExecutedRule, ThreadCategory, ThreadTracker
from threadhub.threads.reply_tracker import ThreadTrackerRecord, TrackerType
from threadhub.threads.types import AutomationRecord, ExecutedRuleStatus, RuleRef

logger = logging.getLogger(__name__)


def to_automation_record(row: ExecutedRule) -> AutomationRecord:
    """Convert an ExecutedRule row (rule eagerly loaded) to its read model."""
    return AutomationRecord(
        id=row.id,
        thread_id=row.thread_id,
        message_id=row.message_id,
        rule=RuleRef(id=row.rule.id, name=row.rule.name) if row.rule else None,
        status=ExecutedRuleStatus(row.status),
        reason=row.reason,
        action_items=list(row.action_items or []),
        created_at=row.created_at,
    )


class SqlRecordStore:
    """
    Record store backed by the application database.

    Read-only: rows are written by the rule-execution and categorization
    subsystems, and a read may observe them mid-update.

    Example:
        >>> store = SqlRecordStore(session)
        >>> records = await store.find_automation_records(
        ...     account_id, ["t1", "t2"], {ExecutedRuleStatus.PENDING}
        ... )
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def find_automation_records(
        self,
        account_id: UUID,
        thread_ids: Sequence[str],
        statuses: Collection[ExecutedRuleStatus],
    ) -> list[AutomationRecord]:
        """Rule executions of the given threads in the given statuses."""
        if not thread_ids or not statuses:
            return []

        result = await self.session.execute(
            select(ExecutedRule)
            .options(selectinload(ExecutedRule.rule))
            .where(
                ExecutedRule.email_account_id == account_id,
                ExecutedRule.thread_id.in_(list(thread_ids)),
                ExecutedRule.status.in_([status.value for status in statuses]),
            )
            .order_by(ExecutedRule.created_at.desc(), ExecutedRule.id.desc())
        )
        return [to_automation_record(row) for row in result.scalars().all()]

    async def get_categories(
        self,
        account_id: UUID,
        thread_ids: Sequence[str],
    ) -> dict[str, str]:
        """Category of each thread that has one."""
        if not thread_ids:
            return {}

        result = await self.session.execute(
            select(ThreadCategory.thread_id, ThreadCategory.category).where(
                ThreadCategory.email_account_id == account_id,
                ThreadCategory.thread_id.in_(list(thread_ids)),
            )
        )
        return {thread_id: category for thread_id, category in result.all()}

    async def find_thread_trackers(
        self,
        account_id: UUID,
        tracker_type: TrackerType,
        *,
        offset: int,
        limit: int,
        sent_before: datetime | None,
    ) -> tuple[list[ThreadTrackerRecord], int]:
        """One page of unresolved trackers, newest first, plus the total count."""
        conditions = [
            ThreadTracker.email_account_id == account_id,
            ThreadTracker.type == tracker_type.value,
            ThreadTracker.resolved.is_(False),
        ]
        if sent_before is not None:
            conditions.append(ThreadTracker.sent_at <= sent_before)

        count_result = await self.session.execute(
            select(func.count()).select_from(ThreadTracker).where(*conditions)
        )
        count = count_result.scalar() or 0

        result = await self.session.execute(
            select(ThreadTracker)
            .where(*conditions)
            .order_by(ThreadTracker.sent_at.desc())
            .offset(offset)
            .limit(limit)
        )
        trackers = [
            ThreadTrackerRecord(
                id=row.id,
                thread_id=row.thread_id,
                message_id=row.message_id,
                type=TrackerType(row.type),
                sent_at=row.sent_at,
            )
            for row in result.scalars().all()
        ]
        return trackers, count
