"""
Unit tests for threadhub.integrations.email.factory.
"""

import pytest

from threadhub.integrations.email.factory import UnknownEmailProviderError, create_thread_provider
from threadhub.integrations.email.gmail import GmailThreadProvider
from threadhub.integrations.email.outlook import OutlookThreadProvider
from threadhub.integrations.email.types import EmailProvider, SnippetEncoding
from threadhub.settings import ThreadhubSettings


@pytest.fixture
def settings() -> ThreadhubSettings:
    return ThreadhubSettings(
        _env_file=None,
        provider_call_timeout_seconds=45.0,
        graph_max_concurrency=3,
        gmail_batch_size=20,
        graph_base_url="https://graph.example.test/v1.0/",
        graph_messages_per_thread=25,
    )


class TestCreateThreadProvider:
    def test_gmail(self, settings: ThreadhubSettings):
        provider = create_thread_provider("gmail", settings)
        assert isinstance(provider, GmailThreadProvider)
        assert provider.provider == EmailProvider.GMAIL
        assert provider.snippet_encoding == SnippetEncoding.GMAIL
        assert provider._call_timeout == 45.0
        assert provider._batch_size == 20

    def test_microsoft_graph(self, settings: ThreadhubSettings):
        provider = create_thread_provider(EmailProvider.MICROSOFT_GRAPH, settings)
        assert isinstance(provider, OutlookThreadProvider)
        assert provider.snippet_encoding == SnippetEncoding.PLAIN
        assert provider._base_url == "https://graph.example.test/v1.0"
        assert provider._messages_per_thread == 25
        assert provider._max_concurrency == 3

    def test_unknown(self, settings: ThreadhubSettings):
        with pytest.raises(UnknownEmailProviderError, match="imap"):
            create_thread_provider("imap", settings)
