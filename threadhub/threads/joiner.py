"""
Automation record join.

Looks up locally stored rule executions and category tags for the threads
of one provider page. The provider page decides membership: ids the store
knows about but the page does not contain are ignored.
"""

import logging
from collections import defaultdict
from collections.abc import Collection, Sequence
from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from threadhub.threads.types import AutomationRecord, ExecutedRuleStatus

logger = logging.getLogger(__name__)

# Statuses shown next to a thread.
DISPLAY_STATUSES: frozenset[ExecutedRuleStatus] = frozenset(
    {ExecutedRuleStatus.PENDING, ExecutedRuleStatus.SKIPPED}
)


class RecordStore(Protocol):
    """Read access to automation records and categories for one account."""

    async def find_automation_records(
        self,
        account_id: UUID,
        thread_ids: Sequence[str],
        statuses: Collection[ExecutedRuleStatus],
    ) -> list[AutomationRecord]: ...

    async def get_categories(
        self,
        account_id: UUID,
        thread_ids: Sequence[str],
    ) -> dict[str, str]: ...


@dataclass(frozen=True)
class ThreadEnrichment:
    """Local data attached to one thread."""

    record: AutomationRecord | None = None
    category: str | None = None


NO_ENRICHMENT = ThreadEnrichment()


def pick_record(records: Sequence[AutomationRecord]) -> AutomationRecord | None:
    """Most recently created record wins; ties go to the greater id."""
    if not records:
        return None
    return max(records, key=lambda r: (r.created_at, str(r.id)))


async def join_automation(
    store: RecordStore,
    account_id: UUID,
    thread_ids: Sequence[str],
) -> dict[str, ThreadEnrichment]:
    """Fetch the displayable record and category of every thread id.

    Every requested id gets an entry, enriched or not. The two store
    queries run one after the other because they share a database session.
    """
    wanted = list(dict.fromkeys(thread_ids))
    if not wanted:
        return {}

    records = await store.find_automation_records(account_id, wanted, DISPLAY_STATUSES)
    categories = await store.get_categories(account_id, wanted)

    wanted_set = set(wanted)
    by_thread: dict[str, list[AutomationRecord]] = defaultdict(list)
    for record in records:
        if record.thread_id in wanted_set and record.status in DISPLAY_STATUSES:
            by_thread[record.thread_id].append(record)

    logger.debug(
        "Joined %d automation records and %d categories for %d threads",
        len(records),
        len(categories),
        len(wanted),
    )

    return {
        thread_id: ThreadEnrichment(
            record=pick_record(by_thread.get(thread_id, [])),
            category=categories.get(thread_id),
        )
        for thread_id in wanted
    }
