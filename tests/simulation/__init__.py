"""
Simulated mailbox and record store for thread pipeline tests.

This package provides in-memory stand-ins for the two things the thread
pipeline talks to, so service and API tests run without Gmail, Microsoft
Graph or a database.

Components:
- environment.py: SimulatedMailbox (a ThreadProvider) and InMemoryRecordStore

Usage:
    from tests.simulation import InMemoryRecordStore, SimulatedMailbox

    mailbox = SimulatedMailbox()
    mailbox.add_thread("A", [make_message("A", "m1")])
    mailbox.fail_threads.add("B")

    store = InMemoryRecordStore()
    store.add_record(make_record("A", ExecutedRuleStatus.PENDING))

    page = await ThreadService(mailbox, store).get_threads(account_id, ThreadQuery())
"""

from tests.simulation.environment import (
    InMemoryRecordStore,
    SimulatedMailbox,
    make_message,
    make_record,
    make_tracker,
)

__all__ = [
    "InMemoryRecordStore",
    "SimulatedMailbox",
    "make_message",
    "make_record",
    "make_tracker",
]
