"""
threadhub.services.accounts - Account Access Resolution

Resolves the (account, provider, access token) triple the thread pipeline
needs for a mailbox. Tokens are stored Fernet-encrypted (AES-128-CBC with
HMAC); keys are versioned so old rows stay readable after a rotation.

Token refresh belongs to the sign-in service: an expired or missing token
is reported as UnauthenticatedError and the caller must reconnect.
"""

import json
import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any
from uuid import UUID

from cryptography.fernet import Fernet, InvalidToken
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from threadhub.exceptions import UnauthenticatedError
from threadhub.integrations.email.types import EmailProvider
from threadhub.models.account import EmailAccount
from threadhub.settings import ThreadhubSettings, get_settings

logger = logging.getLogger(__name__)


class CredentialError(Exception):
    """Base exception for credential encryption errors."""


class NoKeysConfiguredError(CredentialError):
    """Raised when no encryption keys are configured outside development."""


class DecryptionError(CredentialError):
    """Raised when stored credentials cannot be decrypted."""


def generate_encryption_key() -> str:
    """
    Generate a new Fernet encryption key.

    Returns:
        Base64-encoded 32-byte key for THREADHUB_ENCRYPTION_KEYS
    """
    return Fernet.generate_key().decode()


class CredentialCipher:
    """
    Encrypts and decrypts credential payloads with versioned Fernet keys.

    Example:
        >>> cipher = CredentialCipher({"key_v1": generate_encryption_key()}, "key_v1")
        >>> encrypted, key_id = cipher.encrypt({"access_token": "ya29.abc"})
        >>> cipher.decrypt(encrypted, key_id)["access_token"]
        'ya29.abc'
    """

    def __init__(self, keys: dict[str, str | bytes], current_key_id: str) -> None:
        if current_key_id not in keys:
            raise NoKeysConfiguredError(f"Current key {current_key_id!r} is not configured")
        self.current_key_id = current_key_id
        self._fernets = {
            key_id: Fernet(key.encode() if isinstance(key, str) else key)
            for key_id, key in keys.items()
        }

    @classmethod
    def from_settings(cls, settings: ThreadhubSettings) -> "CredentialCipher":
        """Build a cipher from THREADHUB_ENCRYPTION_KEYS / THREADHUB_ENCRYPTION_KEY_ID."""
        if settings.encryption_keys:
            return cls(dict(settings.encryption_keys), settings.encryption_key_id)

        if settings.env != "development":
            raise NoKeysConfiguredError(
                f"No encryption keys configured for env={settings.env}. "
                "Set THREADHUB_ENCRYPTION_KEYS and THREADHUB_ENCRYPTION_KEY_ID."
            )

        logger.warning(
            "No encryption keys configured. Generating a temporary key for development; "
            "stored credentials will not survive a restart."
        )
        return cls({settings.encryption_key_id: generate_encryption_key()}, settings.encryption_key_id)

    def encrypt(self, data: dict[str, Any]) -> tuple[bytes, str]:
        """Encrypt a credential payload with the current key."""
        token = self._fernets[self.current_key_id].encrypt(json.dumps(data).encode("utf-8"))
        return token, self.current_key_id

    def decrypt(self, encrypted: bytes, key_id: str) -> dict[str, Any]:
        """
        Decrypt a credential payload.

        Raises:
            DecryptionError: Unknown key, corrupted data or non-JSON payload
        """
        fernet = self._fernets.get(key_id)
        if fernet is None:
            raise DecryptionError(f"Key not found: {key_id}")
        try:
            data = json.loads(fernet.decrypt(encrypted).decode("utf-8"))
        except InvalidToken as e:
            raise DecryptionError("Failed to decrypt credential: invalid token") from e
        except json.JSONDecodeError as e:
            raise DecryptionError(f"Invalid credential format: {e}") from e
        if not isinstance(data, dict):
            raise DecryptionError("Invalid credential format: expected an object")
        return data


# Default instance (can be replaced for testing)
_default_cipher: CredentialCipher | None = None


def get_credential_cipher() -> CredentialCipher:
    """Get the default credential cipher, built from settings on first use."""
    global _default_cipher  # noqa: PLW0603
    if _default_cipher is None:
        _default_cipher = CredentialCipher.from_settings(get_settings())
    return _default_cipher


def set_credential_cipher(cipher: CredentialCipher | None) -> None:
    """Set the default credential cipher (for testing); None resets it."""
    global _default_cipher  # noqa: PLW0603
    _default_cipher = cipher


@dataclass(frozen=True)
class AccountAccess:
    """What the thread pipeline needs to talk to one mailbox."""

    account_id: UUID
    provider: EmailProvider
    access_token: str = field(repr=False)


class AccountService:
    """
    Looks up email accounts and decrypts their access tokens.

    Example:
        >>> service = AccountService(session)
        >>> account = await service.get_account(user_id, account_id)
        >>> access = service.resolve_access(account)
        >>> provider = create_thread_provider(access.provider)
        >>> await provider.initialize(access.access_token)
    """

    def __init__(self, session: AsyncSession, cipher: CredentialCipher | None = None) -> None:
        self.session = session
        self.cipher = cipher or get_credential_cipher()

    async def get_account(self, user_id: UUID, account_id: UUID) -> EmailAccount | None:
        """Active account owned by the user, or None."""
        result = await self.session.execute(
            select(EmailAccount).where(
                EmailAccount.id == account_id,
                EmailAccount.user_id == user_id,
                EmailAccount.deleted_at.is_(None),
            )
        )
        return result.scalar_one_or_none()

    def resolve_access(self, account: EmailAccount, now: datetime | None = None) -> AccountAccess:
        """
        Decrypt the account's access token.

        Raises:
            UnauthenticatedError: No stored token, undecryptable token,
                expired token or unsupported provider
        """
        if not account.encrypted_credentials or not account.encryption_key_id:
            raise UnauthenticatedError("Missing access token")

        try:
            data = self.cipher.decrypt(account.encrypted_credentials, account.encryption_key_id)
        except DecryptionError as e:
            logger.error(
                "Failed to decrypt credentials",
                extra={"account_id": str(account.id), "key_id": account.encryption_key_id},
            )
            raise UnauthenticatedError("Stored credentials are unreadable") from e

        access_token = data.get("access_token")
        if not access_token:
            raise UnauthenticatedError("Missing access token")

        now = now or datetime.now(UTC)
        if account.token_expires_at is not None and account.token_expires_at <= now:
            raise UnauthenticatedError("Access token expired")

        try:
            provider = EmailProvider(account.provider)
        except ValueError as e:
            raise UnauthenticatedError(f"Unsupported provider: {account.provider}") from e

        return AccountAccess(account_id=account.id, provider=provider, access_token=access_token)
