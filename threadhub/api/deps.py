"""
threadhub.api.deps - FastAPI Dependencies

Provides reusable dependencies for API endpoints:
- get_db: Database session
- get_current_account: Caller identity and the mailbox being read
- get_account_access: Decrypted access token for that mailbox
- get_thread_provider: Initialized ThreadProvider, shut down after the request
- get_record_store: SqlRecordStore on the request session
"""

import logging
from collections.abc import AsyncGenerator
from typing import Annotated
from uuid import UUID

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from threadhub.integrations.email.base import ThreadProvider
from threadhub.integrations.email.factory import create_thread_provider
from threadhub.models.account import EmailAccount
from threadhub.services.accounts import AccountAccess, AccountService
from threadhub.services.records import SqlRecordStore

logger = logging.getLogger(__name__)

# Security scheme for bearer tokens
security = HTTPBearer(auto_error=False)


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    Get database session from app state.

    Raises:
        HTTPException: If database is not initialized
    """
    sessionmaker = getattr(request.app.state, "sessionmaker", None)
    if sessionmaker is None:
        logger.error("Database not initialized")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Database not available",
        )

    async with sessionmaker() as session:
        yield session


# Type alias for database dependency
DBSession = Annotated[AsyncSession, Depends(get_db)]


class AccountContext:
    """
    Authenticated caller and the email account the request reads.

    Attributes:
        user_id: UUID of the caller
        account: The caller's EmailAccount
        account_id: UUID of the account (shortcut)
    """

    def __init__(self, user_id: UUID, account: EmailAccount) -> None:
        self.user_id = user_id
        self.account = account
        self.account_id = account.id


async def get_current_account(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    db: DBSession,
) -> AccountContext:
    """
    Resolve the caller and their email account from the bearer token.

    Accepts a development stub token in the format
    "Bearer <user_id>:<email_account_id>". Session and API-key validation
    belong to the auth service in front of this API.

    Raises:
        HTTPException: If authentication fails
    """
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        user_part, account_part = credentials.credentials.split(":")
        user_id = UUID(user_part)
        account_id = UUID(account_part)
    except ValueError as e:
        logger.warning(f"Invalid token format: {e}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication token",
            headers={"WWW-Authenticate": "Bearer"},
        ) from e

    account = await AccountService(db).get_account(user_id, account_id)
    if account is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Account not found",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return AccountContext(user_id=user_id, account=account)


# Type alias for auth dependency
CurrentAccount = Annotated[AccountContext, Depends(get_current_account)]


async def get_account_access(auth: CurrentAccount, db: DBSession) -> AccountAccess:
    """Decrypted access for the current account (UnauthenticatedError if unusable)."""
    return AccountService(db).resolve_access(auth.account)


Access = Annotated[AccountAccess, Depends(get_account_access)]


async def get_thread_provider(access: Access) -> AsyncGenerator[ThreadProvider, None]:
    """Initialized provider for the current account, shut down after the request."""
    provider = create_thread_provider(access.provider)
    await provider.initialize(access.access_token)
    try:
        yield provider
    finally:
        await provider.shutdown()


Provider = Annotated[ThreadProvider, Depends(get_thread_provider)]


async def get_record_store(db: DBSession) -> SqlRecordStore:
    """Record store on the request's database session."""
    return SqlRecordStore(db)


Store = Annotated[SqlRecordStore, Depends(get_record_store)]
