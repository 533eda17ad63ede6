"""
Thread provider factory.
"""

from threadhub.integrations.email.base import ThreadProvider
from threadhub.integrations.email.gmail import GmailThreadProvider
from threadhub.integrations.email.outlook import OutlookThreadProvider
from threadhub.integrations.email.types import EmailProvider
from threadhub.settings import ThreadhubSettings, get_settings


class UnknownEmailProviderError(Exception):
    """Raised when an unrecognized email provider is requested."""


def create_thread_provider(
    provider: str,
    settings: ThreadhubSettings | None = None,
) -> ThreadProvider:
    """Create an uninitialized thread provider for the given provider kind.

    Args:
        provider: Provider identifier ("gmail" or "microsoft_graph").
        settings: Settings to size timeouts and batches (defaults to get_settings()).

    Returns:
        ThreadProvider instance; call ``initialize()`` before use.

    Raises:
        UnknownEmailProviderError: If the provider is unknown.
    """
    settings = settings or get_settings()

    if provider == EmailProvider.GMAIL:
        return GmailThreadProvider(
            call_timeout=settings.provider_call_timeout_seconds,
            batch_size=settings.gmail_batch_size,
        )
    if provider == EmailProvider.MICROSOFT_GRAPH:
        return OutlookThreadProvider(
            base_url=settings.graph_base_url,
            call_timeout=settings.provider_call_timeout_seconds,
            messages_per_thread=settings.graph_messages_per_thread,
            max_concurrency=settings.graph_max_concurrency,
        )
    raise UnknownEmailProviderError(f"Unknown email provider: {provider}")
