"""Worker model validation.

Two independent, pure checks:

- ``validate_structure`` -- name, type, group reference and scalar bounds.
  Identical for every caller.
- ``validate_type`` -- the type-specific sub-fields required by the declared
  backend.  The policy layer runs it *after* its own field rewrites, so data
  copied forward from a stored model is re-checked before persistence.

Neither function touches the database or the caller context.
"""

from __future__ import annotations

import re

from hatchery.catalog.errors import InvalidStateFilterError, TypeValidationError, WorkerModelValidationError
from hatchery.catalog.models.enums import Communication, StateFilter, WorkerModelType
from hatchery.catalog.models.worker_model import WorkerModelDefinition

NAME_PATTERN = re.compile(r"^[a-zA-Z0-9._-]+$")

# worker_models.provision is a 4-byte INTEGER column.
MAX_PROVISION = 2**31 - 1

_VM_TYPES = (WorkerModelType.OPENSTACK, WorkerModelType.VSPHERE)


def parse_type(value: str) -> WorkerModelType:
    """Map a raw type string to ``WorkerModelType``."""
    if not value:
        raise WorkerModelValidationError("type", "Worker model type is required")
    try:
        return WorkerModelType(value)
    except ValueError:
        raise WorkerModelValidationError("type", f"Unknown worker model type '{value}'") from None


def parse_state_filter(value: str | None) -> StateFilter | None:
    """Map a raw ``state`` query value to ``StateFilter``; empty means no filter."""
    if not value:
        return None
    try:
        return StateFilter(value)
    except ValueError:
        raise InvalidStateFilterError(value) from None


def validate_structure(definition: WorkerModelDefinition) -> None:
    """Reject definitions with a missing name, type or group reference."""
    if not definition.name:
        raise WorkerModelValidationError("name", "Worker model name is required")
    if not NAME_PATTERN.match(definition.name):
        raise WorkerModelValidationError(
            "name", f"Invalid worker model name '{definition.name}' (allowed: letters, digits, '.', '_', '-')"
        )

    parse_type(definition.type)

    if definition.group_id is None or definition.group_id <= 0:
        raise WorkerModelValidationError("group_id", "A valid owning group id is required")

    if definition.provision < 0:
        raise WorkerModelValidationError("provision", "Provision must be a non-negative integer")
    if definition.provision > MAX_PROVISION:
        raise WorkerModelValidationError("provision", f"Provision must not exceed {MAX_PROVISION}")

    try:
        Communication(definition.communication)
    except ValueError:
        raise WorkerModelValidationError(
            "communication", f"Unknown communication '{definition.communication}'"
        ) from None

    seen: set[str] = set()
    for capability in definition.capabilities:
        if not capability.name:
            raise WorkerModelValidationError("capabilities", "Capability name is required")
        if capability.name in seen:
            raise WorkerModelValidationError("capabilities", f"Duplicate capability '{capability.name}'")
        seen.add(capability.name)


def validate_type(definition: WorkerModelDefinition) -> None:
    """Check the sub-fields required by the declared type."""
    try:
        model_type = WorkerModelType(definition.type)
    except ValueError:
        raise TypeValidationError("type", f"Unknown worker model type '{definition.type}'") from None

    has_pattern = bool(definition.pattern_name)

    if model_type == WorkerModelType.DOCKER:
        if definition.virtual_machine is not None:
            raise TypeValidationError("virtual_machine", "Docker models cannot declare a virtual machine spec")
        docker = definition.docker
        if docker is None or not docker.image:
            raise TypeValidationError("docker.image", "Invalid worker model image")
        if not has_pattern and (not docker.cmd or not docker.shell):
            raise TypeValidationError("docker.cmd", "Invalid worker model command or invalid shell command")
        return

    if model_type in _VM_TYPES:
        if definition.docker is not None:
            raise TypeValidationError("docker", f"{model_type} models cannot declare a docker spec")
        vm = definition.virtual_machine
        if vm is None or not vm.image:
            raise TypeValidationError("virtual_machine.image", "Invalid worker model image")
        if model_type == WorkerModelType.OPENSTACK and not vm.flavor:
            raise TypeValidationError("virtual_machine.flavor", "Invalid worker model flavor")
        if model_type == WorkerModelType.VSPHERE:
            if not vm.user:
                raise TypeValidationError("virtual_machine.user", "Invalid worker model user")
            if not vm.password:
                raise TypeValidationError("virtual_machine.password", "Invalid worker model password")
        if not has_pattern and not vm.cmd:
            raise TypeValidationError("virtual_machine.cmd", "Invalid worker model command")
        return

    # Host models run directly on the hatchery host.
    if definition.docker is not None or definition.virtual_machine is not None:
        raise TypeValidationError("type", "Host models cannot declare docker or virtual machine specs")
