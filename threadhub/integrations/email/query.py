"""
Thread query translation.

Maps the unified ThreadQuery vocabulary onto each provider's own query
language: a Gmail search string plus label ids, or a Microsoft Graph
mail folder plus an OData ``$filter`` expression.
"""

import logging
from enum import StrEnum

from threadhub.exceptions import InvalidQueryError
from threadhub.integrations.email.types import (
    EmailProvider,
    GmailRequestParams,
    GraphRequestParams,
    ProviderRequestParams,
    ThreadQuery,
)

logger = logging.getLogger(__name__)

# Upper bounds accepted by users.threads.list (maxResults) and Graph ($top).
GMAIL_MAX_PAGE_SIZE = 500
GRAPH_MAX_PAGE_SIZE = 1000


class GmailLabel(StrEnum):
    """Gmail system label ids"""

    INBOX = "INBOX"
    SENT = "SENT"
    DRAFT = "DRAFT"
    TRASH = "TRASH"
    SPAM = "SPAM"
    STARRED = "STARRED"
    IMPORTANT = "IMPORTANT"
    UNREAD = "UNREAD"


_GMAIL_TYPE_LABELS: dict[str, GmailLabel] = {
    "inbox": GmailLabel.INBOX,
    "sent": GmailLabel.SENT,
    "draft": GmailLabel.DRAFT,
    "trash": GmailLabel.TRASH,
    "spam": GmailLabel.SPAM,
    "starred": GmailLabel.STARRED,
    "important": GmailLabel.IMPORTANT,
    "unread": GmailLabel.UNREAD,
}

# Well-known Graph folder names, see mailFolder resource docs.
_GRAPH_TYPE_FOLDERS: dict[str, str | None] = {
    "inbox": "inbox",
    "sent": "sentitems",
    "draft": "drafts",
    "trash": "deleteditems",
    "spam": "junkemail",
    "archive": "archive",
    "starred": None,
    "important": None,
    "unread": None,
    "all": None,
}

_GRAPH_TYPE_FILTERS: dict[str, str] = {
    "starred": "flag/flagStatus eq 'flagged'",
    "important": "importance eq 'high'",
    "unread": "isRead eq false",
}

# Types that list across every label.
_UNSCOPED_TYPES = frozenset({"archive", "all"})


def _normalize_type(value: str | None) -> str:
    """Lower-case a query type; "undefined"/"null"/blank mean inbox."""
    normalized = (value or "").strip().lower()
    if normalized in ("", "undefined", "null"):
        return "inbox"
    return normalized


def _validate_limit(limit: int, maximum: int) -> None:
    if limit <= 0:
        raise InvalidQueryError(f"limit must be positive, got {limit}")
    if limit > maximum:
        raise InvalidQueryError(f"limit must be at most {maximum}, got {limit}")


def get_gmail_label_ids(type_: str | None) -> tuple[str, ...]:
    """Label filter for a query type.

    Unrecognized types fall back to INBOX; archive and all list without
    a label filter.
    """
    normalized = _normalize_type(type_)
    if normalized in _UNSCOPED_TYPES:
        return ()
    return (_GMAIL_TYPE_LABELS.get(normalized, GmailLabel.INBOX).value,)


def build_gmail_search(query: ThreadQuery) -> str | None:
    """Gmail search string, or None when the type's label filter applies."""
    if query.q:
        return query.q
    if query.from_email:
        return f"from:{query.from_email}"
    if _normalize_type(query.type) == "archive":
        return f"-label:{GmailLabel.INBOX}"
    return None


def translate_gmail_query(query: ThreadQuery) -> GmailRequestParams:
    """Translate a ThreadQuery into ``users.threads.list`` parameters."""
    _validate_limit(query.limit, GMAIL_MAX_PAGE_SIZE)

    search = build_gmail_search(query)
    if query.label_id:
        label_ids: tuple[str, ...] = (query.label_id,)
    elif search is not None:
        label_ids = ()
    else:
        label_ids = get_gmail_label_ids(query.type)

    return GmailRequestParams(
        limit=query.limit,
        page_token=query.next_page_token,
        q=search,
        label_ids=label_ids,
    )


def escape_odata_string(value: str) -> str:
    """Escape a value for use inside a single-quoted OData string literal."""
    return value.replace("'", "''")


def build_graph_filter(query: ThreadQuery) -> str | None:
    """Conjunction of the OData sub-filters a query asks for."""
    filters: list[str] = []
    if query.q:
        filters.append(f"contains(subject,'{escape_odata_string(query.q)}')")
    if query.from_email:
        filters.append(f"from/emailAddress/address eq '{escape_odata_string(query.from_email)}'")
    type_filter = _GRAPH_TYPE_FILTERS.get(_normalize_type(query.type))
    if type_filter and not query.label_id:
        filters.append(type_filter)
    return " and ".join(filters) if filters else None


def translate_graph_query(query: ThreadQuery) -> GraphRequestParams:
    """Translate a ThreadQuery into Graph mail folder listing parameters."""
    _validate_limit(query.limit, GRAPH_MAX_PAGE_SIZE)

    if query.label_id:
        folder: str | None = query.label_id
    else:
        folder = _GRAPH_TYPE_FOLDERS.get(_normalize_type(query.type), "inbox")

    return GraphRequestParams(
        limit=query.limit,
        page_token=query.next_page_token,
        folder=folder,
        filter=build_graph_filter(query),
    )


def translate(query: ThreadQuery, provider: EmailProvider | str) -> ProviderRequestParams:
    """Translate a ThreadQuery for the given provider."""
    if provider == EmailProvider.GMAIL:
        params: ProviderRequestParams = translate_gmail_query(query)
    elif provider == EmailProvider.MICROSOFT_GRAPH:
        params = translate_graph_query(query)
    else:
        raise InvalidQueryError(f"Unknown email provider: {provider}")

    logger.debug("Translated thread query for %s: %r", provider, params)
    return params
