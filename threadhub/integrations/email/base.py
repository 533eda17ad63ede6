"""
Thread provider abstract base class.
"""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import ClassVar

from threadhub.integrations.email.query import translate
from threadhub.integrations.email.types import (
    EmailProvider,
    Message,
    ProviderRequestParams,
    SnippetEncoding,
    ThreadPage,
    ThreadQuery,
)


class ThreadProvider(ABC):
    """Abstract base class for mailbox thread providers.

    Each provider (Gmail, Outlook, etc.) implements this interface. The
    thread pipeline depends only on it: translate a query, fetch one page
    of thread ids, then load the messages of those threads.
    Providers receive an already-resolved access token; they never
    refresh or persist credentials.
    """

    provider: ClassVar[EmailProvider]
    snippet_encoding: ClassVar[SnippetEncoding]

    @abstractmethod
    async def initialize(self, access_token: str) -> None:
        """Initialize the provider client with an access token.

        Raises:
            UnauthenticatedError: If the token is empty.
            ProviderUnavailableError: If the client cannot be built.
        """

    def translate(self, query: ThreadQuery) -> ProviderRequestParams:
        """Translate a unified query into this provider's request parameters.

        Raises:
            InvalidQueryError: If the query is out of range for this provider.
        """
        return translate(query, self.provider)

    @abstractmethod
    async def fetch_page(self, params: ProviderRequestParams) -> ThreadPage:
        """Fetch one page of thread summaries.

        Order is the provider's own; the continuation token is returned
        exactly as the provider sent it.

        Raises:
            UnauthenticatedError: If the provider rejects the access token.
            ProviderUnavailableError: On transport or upstream errors.
        """

    @abstractmethod
    async def load_messages(self, thread_ids: Sequence[str]) -> dict[str, list[Message]]:
        """Load the messages of each thread, oldest first.

        Threads whose fetch fails are left out of the mapping instead of
        failing the whole call; a present key with an empty list means the
        thread genuinely has no messages.
        """

    async def shutdown(self) -> None:
        """Clean up provider resources. Default is no-op."""
