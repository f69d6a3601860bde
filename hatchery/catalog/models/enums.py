"""Shared enumerations used across the worker-model catalog."""

from __future__ import annotations

from enum import StrEnum

# -- Worker model ------------------------------------------------------------


class WorkerModelType(StrEnum):
    """Execution backend a worker model is spawned on."""

    DOCKER = "docker"
    OPENSTACK = "openstack"
    VSPHERE = "vsphere"
    HOST = "host"


class Communication(StrEnum):
    """Protocol spawned workers use to talk back to the API."""

    HTTP = "http"
    GRPC = "grpc"


class CapabilityType(StrEnum):
    BINARY = "binary"
    NETWORK = "network"
    SERVICE = "service"
    MEMORY = "memory"
    OS_ARCHITECTURE = "os-architecture"


class StateFilter(StrEnum):
    """Lifecycle state classifier accepted by the list endpoint."""

    ACTIVE = "active"
    DEPRECATED = "deprecated"
    DISABLED = "disabled"
    ERROR = "error"
    OFFICIAL = "official"
    REGISTER = "register"


# -- Security ----------------------------------------------------------------


class Role(StrEnum):
    """Role classification of the calling principal."""

    ANONYMOUS = "anonymous"
    MEMBER = "member"
    MAINTAINER = "maintainer"
    ADMIN = "admin"
