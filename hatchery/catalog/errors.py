"""Domain exceptions for the worker-model catalog.

Each exception subclasses the builtin family matching its kind (``ValueError``
for caller-correctable input, ``PermissionError`` for policy refusals,
``LookupError`` for unknown entities) and carries a stable ``code`` that
routers expose to clients.  Managers and the policy layer raise these; the
HTTP translation lives in the routers.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


class WorkerModelValidationError(ValueError):
    """A worker model definition is structurally invalid."""

    code = "invalid_worker_model"

    def __init__(self, field: str, message: str) -> None:
        super().__init__(message)
        self.field = field


class TypeValidationError(WorkerModelValidationError):
    """Type-specific fields are missing or inconsistent with the declared type."""

    code = "invalid_worker_model_type"


class InvalidStateFilterError(ValueError):
    """Unknown state classifier passed to a list query."""

    code = "invalid_state_filter"

    def __init__(self, value: str) -> None:
        super().__init__(f"Invalid state filter '{value}'")
        self.field = "state"


# ---------------------------------------------------------------------------
# Policy
# ---------------------------------------------------------------------------


class MissingPatternReferenceError(ValueError):
    """An unrestricted model submitted by a non-admin has no pattern name."""

    code = "missing_pattern_reference"

    def __init__(self) -> None:
        super().__init__("Missing model pattern name")
        self.field = "pattern_name"


class InvalidPrincipalError(ValueError):
    """Gateway-forwarded principal headers are malformed."""

    code = "invalid_principal"

    def __init__(self, field: str, message: str) -> None:
        super().__init__(message)
        self.field = field


class AuthenticationRequiredError(PermissionError):
    """The operation requires an authenticated principal."""

    code = "authentication_required"

    def __init__(self, message: str = "Authentication required") -> None:
        super().__init__(message)


class ForbiddenError(PermissionError):
    """The caller lacks the rights for the requested operation."""

    code = "forbidden"


# ---------------------------------------------------------------------------
# Lookup
# ---------------------------------------------------------------------------


class GroupNotFoundError(LookupError):
    code = "group_not_found"

    def __init__(self, group: str | int) -> None:
        super().__init__(f"Group '{group}' not found")


class WorkerModelNotFoundError(LookupError):
    code = "worker_model_not_found"

    def __init__(self, group_name: str, model_name: str) -> None:
        super().__init__(f"Worker model '{group_name}/{model_name}' not found")


class ProjectNotFoundError(LookupError):
    code = "project_not_found"

    def __init__(self, project_key: str) -> None:
        super().__init__(f"Project '{project_key}' not found")


# ---------------------------------------------------------------------------
# Conflict
# ---------------------------------------------------------------------------


class DuplicateWorkerModelError(ValueError):
    """A model with the same name already exists in the owning group."""

    code = "duplicate_worker_model"

    def __init__(self, group_id: int, name: str) -> None:
        super().__init__(f"Worker model '{name}' already exists in group {group_id}")
        self.field = "name"
