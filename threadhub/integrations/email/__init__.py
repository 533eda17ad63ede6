"""
Email thread providers.

Provides provider-specific thread providers (Gmail, Outlook) behind
a common ThreadProvider ABC. Shared types (ThreadQuery, Message,
EmailProvider) live in types.py and are importable from both layers.
"""

from threadhub.integrations.email.base import ThreadProvider
from threadhub.integrations.email.factory import UnknownEmailProviderError, create_thread_provider
from threadhub.integrations.email.gmail import GmailThreadProvider
from threadhub.integrations.email.outlook import OutlookThreadProvider
from threadhub.integrations.email.snippet import normalize_snippet
from threadhub.integrations.email.types import (
    EmailProvider,
    Message,
    SnippetEncoding,
    ThreadPage,
    ThreadQuery,
    ThreadSummary,
)

__all__ = [
    "EmailProvider",
    "GmailThreadProvider",
    "Message",
    "OutlookThreadProvider",
    "SnippetEncoding",
    "ThreadPage",
    "ThreadProvider",
    "ThreadQuery",
    "ThreadSummary",
    "UnknownEmailProviderError",
    "create_thread_provider",
    "normalize_snippet",
]
