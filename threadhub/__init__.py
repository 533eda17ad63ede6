"""
threadhub - Unified thread listing across mail providers

Lists conversation threads from Gmail and Microsoft Graph mailboxes in
one provider-agnostic, paginated shape, enriched with locally stored
automation state (pending/skipped rule executions and category tags).

Example:
    >>> from threadhub.integrations.email import ThreadQuery, create_thread_provider
    >>> from threadhub.services import SqlRecordStore
    >>> from threadhub.threads import ThreadService

    >>> provider = create_thread_provider("gmail")
    >>> await provider.initialize(access_token)
    >>> service = ThreadService(provider, SqlRecordStore(session))
    >>> page = await service.get_threads(account_id, ThreadQuery(type="inbox", limit=20))

Architecture:
    - integrations.email: Query translation, Gmail / Graph providers, snippet cleanup
    - threads: Record join, assembly, pipeline orchestration, reply tracker
    - services: SQL record store, account access resolution
    - api: FastAPI endpoints
"""

__version__ = "0.1.0"
__license__ = "Apache-2.0"
