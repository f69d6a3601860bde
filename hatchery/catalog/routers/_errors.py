"""Translation of domain exceptions into HTTP errors."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from fastapi import HTTPException, status

from hatchery.catalog.errors import (
    AuthenticationRequiredError,
    DuplicateWorkerModelError,
    ForbiddenError,
    GroupNotFoundError,
    InvalidStateFilterError,
    MissingPatternReferenceError,
    ProjectNotFoundError,
    WorkerModelNotFoundError,
    WorkerModelValidationError,
)

_NOT_FOUND = (GroupNotFoundError, WorkerModelNotFoundError, ProjectNotFoundError)
_BAD_REQUEST = (WorkerModelValidationError, InvalidStateFilterError, MissingPatternReferenceError)


def _detail(exc: Exception) -> dict[str, str]:
    detail = {"code": exc.code, "message": str(exc)}  # type: ignore[attr-defined]
    field = getattr(exc, "field", None)
    if field:
        detail["field"] = field
    return detail


@contextmanager
def domain_errors() -> Iterator[None]:
    """Re-raise catalog exceptions raised in the block as ``HTTPException``."""
    try:
        yield
    except _NOT_FOUND as exc:
        raise HTTPException(status.HTTP_404_NOT_FOUND, detail=_detail(exc)) from None
    except AuthenticationRequiredError as exc:
        raise HTTPException(
            status.HTTP_401_UNAUTHORIZED,
            detail=_detail(exc),
            headers={"WWW-Authenticate": "Bearer"},
        ) from None
    except ForbiddenError as exc:
        raise HTTPException(status.HTTP_403_FORBIDDEN, detail=_detail(exc)) from None
    except DuplicateWorkerModelError as exc:
        raise HTTPException(status.HTTP_409_CONFLICT, detail=_detail(exc)) from None
    except _BAD_REQUEST as exc:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, detail=_detail(exc)) from None
