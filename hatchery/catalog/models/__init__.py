"""Data models for the worker-model catalog."""

from hatchery.catalog.models.api import GroupResponse, PipelineUsageResponse, WorkerModelResponse
from hatchery.catalog.models.enums import (
    CapabilityType,
    Communication,
    Role,
    StateFilter,
    WorkerModelType,
)
from hatchery.catalog.models.worker_model import (
    SECRET_PLACEHOLDER,
    Capability,
    DockerSpec,
    VirtualMachineSpec,
    WorkerModelDefinition,
)

__all__ = [
    "SECRET_PLACEHOLDER",
    "Capability",
    "CapabilityType",
    "Communication",
    "DockerSpec",
    "GroupResponse",
    "PipelineUsageResponse",
    "Role",
    "StateFilter",
    "VirtualMachineSpec",
    "WorkerModelDefinition",
    "WorkerModelResponse",
    "WorkerModelType",
]
