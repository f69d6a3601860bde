"""API response schemas.

Request bodies reuse ``WorkerModelDefinition`` directly (create and update
both take a complete definition).  Response schemas serialize ORM rows via
``from_attributes``; ``editable`` is not a column and is filled in by
``hatchery.catalog.presenter`` for the calling principal.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from hatchery.catalog.models.enums import Communication, WorkerModelType
from hatchery.catalog.models.worker_model import Capability, DockerSpec, VirtualMachineSpec

# ---------------------------------------------------------------------------
# Group
# ---------------------------------------------------------------------------


class GroupResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str


# ---------------------------------------------------------------------------
# Worker model
# ---------------------------------------------------------------------------


class WorkerModelResponse(BaseModel):
    """Serialized worker model returned to clients."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: str | None = None
    group_id: int
    group: GroupResponse
    type: WorkerModelType
    docker: DockerSpec | None = None
    virtual_machine: VirtualMachineSpec | None = None
    pattern_name: str
    restricted: bool
    provision: int
    communication: Communication
    is_deprecated: bool
    disabled: bool
    is_official: bool
    need_registration: bool
    nb_spawn_err: int
    last_spawn_err: str | None = None
    capabilities: list[Capability] = Field(default_factory=list)
    created_by: str | None = None
    created_at: datetime
    updated_at: datetime
    editable: bool = Field(default=False, description="Whether the calling principal may modify this model.")


# ---------------------------------------------------------------------------
# Usage
# ---------------------------------------------------------------------------


class PipelineUsageResponse(BaseModel):
    """A pipeline that consumes a worker model."""

    id: int
    name: str
    project_key: str
    project_name: str
