"""Worker model definition.

A worker model is a reusable template describing the runtime environment of
an ephemeral build agent.  ``WorkerModelDefinition`` is the caller-supplied
shape used by both the create and update paths; it is deliberately lenient
(plain strings for ``type`` / ``communication``, optional ``group_id``) so
that structural problems surface as typed validation errors from
``hatchery.catalog.validation`` rather than as generic schema errors.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from hatchery.catalog.models.enums import CapabilityType, Communication

SECRET_PLACEHOLDER = "**********"
"""Value returned in place of stored passwords."""

# -- Type-specific components ------------------------------------------------


class DockerSpec(BaseModel):
    """Container image and startup command for ``docker`` models."""

    model_config = ConfigDict(from_attributes=True)

    image: str = ""
    shell: str = ""
    cmd: str = ""
    envs: dict[str, str] = Field(default_factory=dict)
    memory: int = Field(default=0, ge=0, description="Memory limit in MB; 0 means scheduler default.")
    private: bool = False
    registry: str = ""
    username: str = ""
    password: str = ""


class VirtualMachineSpec(BaseModel):
    """Image, flavor and boot commands for VM-backed models (openstack, vsphere)."""

    model_config = ConfigDict(from_attributes=True)

    image: str = ""
    flavor: str = ""
    pre_cmd: str = ""
    cmd: str = ""
    post_cmd: str = ""
    user: str = ""
    password: str = ""


class Capability(BaseModel):
    """A binary, service or other requirement the model's agents satisfy."""

    model_config = ConfigDict(from_attributes=True)

    name: str
    type: CapabilityType = CapabilityType.BINARY
    value: str = ""


# -- Top-level definition ----------------------------------------------------


class WorkerModelDefinition(BaseModel):
    """Complete worker model definition as submitted on create and update."""

    model_config = ConfigDict(from_attributes=True)

    name: str = ""
    description: str | None = None
    group_id: int | None = Field(default=None, description="Owning group.")
    type: str = Field(default="", description="One of the worker model types, e.g. 'docker'.")
    docker: DockerSpec | None = None
    virtual_machine: VirtualMachineSpec | None = None
    pattern_name: str = Field(default="", description="Shared provisioning pattern; required for unrestricted models.")
    restricted: bool = False
    provision: int = 0
    communication: str = Communication.HTTP
    is_deprecated: bool = False
    disabled: bool = False
    is_official: bool = False
    capabilities: list[Capability] = Field(default_factory=list)
