"""API dependency injection.

Provides FastAPI dependencies for database sessions and the
authenticated request context used across API endpoints.
"""

from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from banqa.core.config import get_settings
from banqa.core.context import DEFAULT_ROLE, RequestContext
from banqa.core.exceptions import AuthenticationError, PermissionDeniedError
from banqa.core.security import decode_token_claims, subject_of
from banqa.db.session import get_async_session

bearer_scheme = HTTPBearer(auto_error=False)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Dependency that provides an async database session.

    This wraps the session management from banqa.db.session
    for use as a FastAPI dependency.

    Usage:
        @router.get("/items")
        async def get_items(db: AsyncSession = Depends(get_db)):
            ...
    """
    async for session in get_async_session():
        yield session


async def get_request_context(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> RequestContext:
    """Resolve the caller from the ``Authorization: Bearer <jwt>`` header."""
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("No authorization header")
    claims = decode_token_claims(credentials.credentials)
    return RequestContext(
        user_id=subject_of(claims),
        access_token=credentials.credentials,
        role=str(claims.get("role") or DEFAULT_ROLE),
    )


async def require_ledger_service(
    ctx: RequestContext = Depends(get_request_context),
) -> RequestContext:
    """Admit only backend components holding the ledger service role.

    Raw balance syncs bypass payment verification, so end-user tokens are
    refused.
    """
    if ctx.role != get_settings().LEDGER_SERVICE_ROLE:
        raise PermissionDeniedError("Wallet sync is restricted to internal services")
    return ctx


# Type aliases for cleaner dependency injection syntax
DBSession = Annotated[AsyncSession, Depends(get_db)]
CurrentContext = Annotated[RequestContext, Depends(get_request_context)]
ServiceContext = Annotated[RequestContext, Depends(require_ledger_service)]
