"""
threadhub.services - Storage-backed collaborators of the thread pipeline

- records: SqlRecordStore (automation records, categories, reply trackers)
- accounts: AccountService (mailbox lookup and access-token decryption)
"""

from threadhub.services.accounts import (
    AccountAccess,
    AccountService,
    CredentialCipher,
    get_credential_cipher,
    set_credential_cipher,
)
from threadhub.services.records import SqlRecordStore

__all__ = [
    "AccountAccess",
    "AccountService",
    "CredentialCipher",
    "SqlRecordStore",
    "get_credential_cipher",
    "set_credential_cipher",
]
