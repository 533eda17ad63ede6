"""
threadhub.models - SQLAlchemy Database Models

Models are organized by domain:
- base: Base model classes with common functionality
- account: Connected mailboxes and their encrypted tokens
- automation: Rules, rule executions, categories, reply trackers

Usage:
    >>> from threadhub.models import ExecutedRule
    >>> from threadhub.models.database import get_engine, get_sessionmaker
    >>>
    >>> async with get_sessionmaker(get_engine())() as session:
    ...     result = await session.execute(select(ExecutedRule))
"""

from threadhub.models.account import EmailAccount
from threadhub.models.automation import ExecutedRule, Rule, ThreadCategory, ThreadTracker
from threadhub.models.base import Base

__all__ = [
    "Base",
    "EmailAccount",
    "ExecutedRule",
    "Rule",
    "ThreadCategory",
    "ThreadTracker",
]
