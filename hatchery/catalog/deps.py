"""FastAPI dependency injection for DB sessions, the list cache and the caller.

Usage in route handlers::

    @router.get("/things")
    async def list_things(db: DbSession, caller: CurrentCaller) -> list[ThingResponse]:
        ...

The DB dependency raises HTTP 503 if HATCHERY_DATABASE_URL is unset.  The
cache dependency never fails: without HATCHERY_REDIS_URL it yields a
disabled cache.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from hatchery.catalog.cache import WorkerModelCache
from hatchery.catalog.caller import Caller, caller_from_headers
from hatchery.catalog.errors import AuthenticationRequiredError, InvalidPrincipalError
from hatchery.catalog.managers.groups import find_group_id
from hatchery.catalog.settings import get_settings


async def get_db(request: Request) -> AsyncIterator[AsyncSession]:
    """Yield an async SQLAlchemy session, closing it after the request.

    Managers commit on success.  If anything raises (including request
    cancellation), closing the session rolls back the open transaction.
    """
    session_factory = request.app.state.db_session_factory
    if session_factory is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Database not configured (HATCHERY_DATABASE_URL is unset).",
        )
    session: AsyncSession = session_factory()
    try:
        yield session
    finally:
        await session.close()


def get_model_cache(request: Request) -> WorkerModelCache:
    """Return the process-wide worker model list cache."""
    cache: WorkerModelCache | None = getattr(request.app.state, "model_cache", None)
    if cache is None:
        settings = get_settings()
        return WorkerModelCache(None, namespace=settings.cache_namespace)
    return cache


def get_caller(request: Request) -> Caller:
    """Resolve the calling principal from gateway-forwarded headers."""
    service_token: str | None = getattr(request.app.state, "auth_token", None)
    try:
        return caller_from_headers(request.headers, service_token)
    except AuthenticationRequiredError as exc:
        raise HTTPException(
            status.HTTP_401_UNAUTHORIZED,
            detail={"code": exc.code, "message": str(exc)},
            headers={"WWW-Authenticate": "Bearer"},
        ) from None
    except InvalidPrincipalError as exc:
        raise HTTPException(
            status.HTTP_400_BAD_REQUEST,
            detail={"code": exc.code, "message": str(exc), "field": exc.field},
        ) from None


async def get_shared_infra_group_id(db: Annotated[AsyncSession, Depends(get_db)]) -> int | None:
    """Id of the shared-infrastructure group, or ``None`` if it does not exist."""
    return await find_group_id(db, get_settings().shared_infra_group)


# -- Annotated type aliases for concise route signatures ---------------------

DbSession = Annotated[AsyncSession, Depends(get_db)]
"""Annotated dependency: async SQLAlchemy session (auto-closed after request)."""

ModelCache = Annotated[WorkerModelCache, Depends(get_model_cache)]
"""Annotated dependency: worker model list cache (possibly disabled)."""

CurrentCaller = Annotated[Caller, Depends(get_caller)]
"""Annotated dependency: the principal making the request."""

SharedInfraGroupId = Annotated[int | None, Depends(get_shared_infra_group_id)]
"""Annotated dependency: id of the group visible to every caller."""
