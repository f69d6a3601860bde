"""Authorization-aware mutation policy for worker models.

Every function here is pure: the caller is passed explicitly, inputs are
never mutated, and sanitized definitions are returned as new objects.

Rules for non-admin callers:

- an unrestricted model always gets ``provision = 0`` and must name a
  pattern (``MissingPatternReferenceError`` otherwise);
- on update, the type-classification data (``type``, ``docker``,
  ``virtual_machine``) is copied from the stored model, so only an admin can
  change what a model fundamentally is;
- the owning group must be one the caller belongs to.

Admin is an override switch: none of the rules above apply, the payload is
trusted as submitted.  Structural and type validation apply to everyone.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from hatchery.catalog.errors import AuthenticationRequiredError, ForbiddenError, MissingPatternReferenceError
from hatchery.catalog.models.worker_model import SECRET_PLACEHOLDER, WorkerModelDefinition
from hatchery.catalog.validation import validate_structure, validate_type

if TYPE_CHECKING:
    from hatchery.catalog.caller import Caller

# ---------------------------------------------------------------------------
# Mutation paths
# ---------------------------------------------------------------------------


def prepare_for_create(caller: Caller, incoming: WorkerModelDefinition) -> WorkerModelDefinition:
    """Validate and sanitize a definition submitted for creation."""
    _require_authenticated(caller)
    validate_structure(incoming)

    if caller.is_admin:
        sanitized = incoming.model_copy(deep=True)
    else:
        _require_membership(caller, incoming.group_id)
        sanitized = _restrict_provisioning(incoming)

    validate_type(sanitized)
    return sanitized


def prepare_for_update(
    caller: Caller,
    existing: WorkerModelDefinition,
    incoming: WorkerModelDefinition,
) -> WorkerModelDefinition:
    """Validate and sanitize a definition replacing *existing*.

    *existing* must carry clear (unmasked) secrets: masked placeholders in
    *incoming* are resolved against it.
    """
    _require_authenticated(caller)
    validate_structure(incoming)

    if caller.is_admin:
        sanitized = incoming.model_copy(deep=True)
    else:
        if incoming.group_id != existing.group_id:
            _require_membership(caller, incoming.group_id)
        sanitized = _restrict_provisioning(incoming)
        # Must run before validate_type: restoring stored type data can make
        # an otherwise invalid payload valid.
        sanitized = _copy_type_data(existing, sanitized)

    sanitized = _restore_secrets(existing, sanitized)
    validate_type(sanitized)
    return sanitized


# ---------------------------------------------------------------------------
# Permission checks
# ---------------------------------------------------------------------------


def authorize_update(caller: Caller, owning_group_id: int) -> None:
    """Allowed for admins and members of the owning group."""
    _require_authenticated(caller)
    if caller.is_admin or caller.is_member_of(owning_group_id):
        return
    raise ForbiddenError(f"Only members of group {owning_group_id} can modify this worker model")


def authorize_delete(caller: Caller, owning_group_id: int) -> None:
    """Allowed for admins and administrators of the owning group."""
    _require_authenticated(caller)
    if caller.is_admin or caller.is_group_admin(owning_group_id):
        return
    raise ForbiddenError(f"Only administrators of group {owning_group_id} can delete this worker model")


def is_editable(caller: Caller, owning_group_id: int) -> bool:
    """Whether *caller* currently holds mutation rights over a model of *owning_group_id*."""
    if caller.is_admin:
        return True
    return caller.is_authenticated and caller.is_member_of(owning_group_id)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _require_authenticated(caller: Caller) -> None:
    if not caller.is_authenticated:
        raise AuthenticationRequiredError


def _require_membership(caller: Caller, group_id: int | None) -> None:
    if group_id is None or not caller.is_member_of(group_id):
        raise ForbiddenError(f"Not a member of group {group_id}")


def _restrict_provisioning(definition: WorkerModelDefinition) -> WorkerModelDefinition:
    """Provisioning is reserved to admins and restricted models."""
    if definition.restricted:
        return definition.model_copy(deep=True)
    sanitized = definition.model_copy(update={"provision": 0}, deep=True)
    if not sanitized.pattern_name:
        raise MissingPatternReferenceError
    return sanitized


def _copy_type_data(existing: WorkerModelDefinition, incoming: WorkerModelDefinition) -> WorkerModelDefinition:
    return incoming.model_copy(
        update={
            "type": existing.type,
            "docker": existing.docker.model_copy(deep=True) if existing.docker else None,
            "virtual_machine": existing.virtual_machine.model_copy(deep=True) if existing.virtual_machine else None,
        }
    )


def _restore_secrets(existing: WorkerModelDefinition, incoming: WorkerModelDefinition) -> WorkerModelDefinition:
    """Replace masked password placeholders with the stored secret."""
    updates: dict = {}
    if incoming.docker is not None and incoming.docker.password == SECRET_PLACEHOLDER:
        stored = existing.docker.password if existing.docker else ""
        updates["docker"] = incoming.docker.model_copy(update={"password": stored})
    vm = incoming.virtual_machine
    if vm is not None and vm.password == SECRET_PLACEHOLDER:
        stored = existing.virtual_machine.password if existing.virtual_machine else ""
        updates["virtual_machine"] = vm.model_copy(update={"password": stored})
    if not updates:
        return incoming
    return incoming.model_copy(update=updates)
