"""Unit tests for the mutation policy."""

from __future__ import annotations

import pytest

from hatchery.catalog.caller import Caller
from hatchery.catalog.errors import (
    AuthenticationRequiredError,
    ForbiddenError,
    MissingPatternReferenceError,
    TypeValidationError,
    WorkerModelValidationError,
)
from hatchery.catalog.models.enums import Role
from hatchery.catalog.models.worker_model import (
    SECRET_PLACEHOLDER,
    DockerSpec,
    VirtualMachineSpec,
    WorkerModelDefinition,
)
from hatchery.catalog.policy import (
    authorize_delete,
    authorize_update,
    is_editable,
    prepare_for_create,
    prepare_for_update,
)

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

G1 = 1
G2 = 2

ADMIN = Caller(username="root", role=Role.ADMIN)
MAINTAINER = Caller(username="ops", role=Role.MAINTAINER)
MEMBER = Caller(username="alice", role=Role.MEMBER, group_ids=frozenset({G1}))
GROUP_ADMIN = Caller(username="bob", role=Role.MEMBER, admin_group_ids=frozenset({G1}))
OUTSIDER = Caller(username="eve", role=Role.MEMBER, group_ids=frozenset({G2}))
ANONYMOUS = Caller.anonymous()


def _docker_model(**overrides: object) -> WorkerModelDefinition:
    data: dict = {
        "name": "m1",
        "group_id": G1,
        "type": "docker",
        "docker": DockerSpec(image="ubuntu:24.04", shell="sh -c", cmd="worker"),
    }
    data.update(overrides)
    return WorkerModelDefinition(**data)


def _vsphere_model(**overrides: object) -> WorkerModelDefinition:
    data: dict = {
        "name": "m2",
        "group_id": G1,
        "type": "vsphere",
        "virtual_machine": VirtualMachineSpec(image="tpl-debian", user="ci", password="s3cret", cmd="worker"),
    }
    data.update(overrides)
    return WorkerModelDefinition(**data)


# ---------------------------------------------------------------------------
# Create
# ---------------------------------------------------------------------------


def test_non_admin_unrestricted_without_pattern_is_rejected() -> None:
    with pytest.raises(MissingPatternReferenceError) as exc_info:
        prepare_for_create(MEMBER, _docker_model(restricted=False, provision=5, pattern_name=""))
    assert exc_info.value.code == "missing_pattern_reference"


def test_non_admin_with_pattern_gets_provision_zeroed() -> None:
    incoming = _docker_model(restricted=False, provision=5, pattern_name="default")

    result = prepare_for_create(MEMBER, incoming)

    assert result.provision == 0
    assert result.pattern_name == "default"
    # The submitted definition is never mutated.
    assert incoming.provision == 5


def test_non_admin_restricted_keeps_provision() -> None:
    result = prepare_for_create(MEMBER, _docker_model(restricted=True, provision=2))
    assert result.provision == 2


def test_admin_restricted_keeps_provision() -> None:
    result = prepare_for_create(ADMIN, _docker_model(name="m2", restricted=True, provision=3))
    assert result.provision == 3


def test_admin_skips_pattern_and_provision_rules() -> None:
    result = prepare_for_create(ADMIN, _docker_model(restricted=False, provision=4, pattern_name=""))
    assert result.provision == 4


def test_admin_provision_is_bounded_by_the_column() -> None:
    result = prepare_for_create(ADMIN, _docker_model(restricted=True, provision=2**31 - 1))
    assert result.provision == 2**31 - 1

    with pytest.raises(WorkerModelValidationError) as exc_info:
        prepare_for_create(ADMIN, _docker_model(restricted=True, provision=2**40))
    assert exc_info.value.field == "provision"


def test_admin_still_gets_structural_and_type_validation() -> None:
    with pytest.raises(WorkerModelValidationError):
        prepare_for_create(ADMIN, _docker_model(name=""))
    with pytest.raises(TypeValidationError):
        prepare_for_create(ADMIN, _docker_model(docker=DockerSpec()))


def test_create_requires_authentication() -> None:
    with pytest.raises(AuthenticationRequiredError):
        prepare_for_create(ANONYMOUS, _docker_model(pattern_name="default"))


def test_create_requires_membership_of_target_group() -> None:
    with pytest.raises(ForbiddenError):
        prepare_for_create(OUTSIDER, _docker_model(pattern_name="default"))
    # Maintainers see everything but only create where they belong.
    with pytest.raises(ForbiddenError):
        prepare_for_create(MAINTAINER, _docker_model(pattern_name="default"))


def test_group_admin_counts_as_member() -> None:
    result = prepare_for_create(GROUP_ADMIN, _docker_model(pattern_name="default"))
    assert result.group_id == G1


# ---------------------------------------------------------------------------
# Update
# ---------------------------------------------------------------------------


def test_non_admin_type_change_is_ignored() -> None:
    existing = _docker_model(name="m2", restricted=True, provision=3)
    incoming = _vsphere_model(restricted=True, provision=3)

    result = prepare_for_update(MEMBER, existing, incoming)

    assert result.type == "docker"
    assert result.docker == existing.docker
    assert result.virtual_machine is None


def test_admin_type_change_is_applied() -> None:
    existing = _docker_model(name="m2", restricted=True, provision=3)
    incoming = _vsphere_model(restricted=True, provision=3)

    result = prepare_for_update(ADMIN, existing, incoming)

    assert result.type == "vsphere"
    assert result.docker is None
    assert result.virtual_machine is not None
    assert result.virtual_machine.image == "tpl-debian"


def test_non_admin_update_zeroes_provision() -> None:
    existing = _docker_model(pattern_name="default")
    result = prepare_for_update(MEMBER, existing, _docker_model(pattern_name="default", provision=9))
    assert result.provision == 0


def test_non_admin_update_without_pattern_is_rejected() -> None:
    existing = _docker_model(pattern_name="default")
    with pytest.raises(MissingPatternReferenceError):
        prepare_for_update(MEMBER, existing, _docker_model(pattern_name=""))


def test_non_admin_update_copied_type_data_is_validated() -> None:
    # The empty submitted docker spec is replaced by the stored one.
    existing = _docker_model(pattern_name="default")
    incoming = _docker_model(pattern_name="default", docker=DockerSpec())
    result = prepare_for_update(MEMBER, existing, incoming)
    assert result.docker == existing.docker


def test_non_admin_cannot_move_model_to_foreign_group() -> None:
    existing = _docker_model(pattern_name="default")
    with pytest.raises(ForbiddenError):
        prepare_for_update(MEMBER, existing, _docker_model(pattern_name="default", group_id=G2))


def test_update_restores_masked_secrets() -> None:
    existing = _vsphere_model()
    incoming = _vsphere_model(
        virtual_machine=VirtualMachineSpec(image="tpl-debian", user="ci", password=SECRET_PLACEHOLDER, cmd="w2"),
    )

    result = prepare_for_update(ADMIN, existing, incoming)

    assert result.virtual_machine is not None
    assert result.virtual_machine.password == "s3cret"
    assert result.virtual_machine.cmd == "w2"


def test_update_accepts_new_secret() -> None:
    existing = _docker_model(docker=DockerSpec(image="img", shell="sh", cmd="w", private=True, password="old"))
    incoming = _docker_model(docker=DockerSpec(image="img", shell="sh", cmd="w", private=True, password="new"))
    result = prepare_for_update(ADMIN, existing, incoming)
    assert result.docker is not None
    assert result.docker.password == "new"


# ---------------------------------------------------------------------------
# Permission checks
# ---------------------------------------------------------------------------


def test_authorize_update() -> None:
    authorize_update(ADMIN, G1)
    authorize_update(MEMBER, G1)
    authorize_update(GROUP_ADMIN, G1)
    with pytest.raises(ForbiddenError):
        authorize_update(OUTSIDER, G1)
    with pytest.raises(AuthenticationRequiredError):
        authorize_update(ANONYMOUS, G1)


def test_authorize_delete_requires_group_admin() -> None:
    authorize_delete(ADMIN, G1)
    authorize_delete(GROUP_ADMIN, G1)
    with pytest.raises(ForbiddenError):
        authorize_delete(MEMBER, G1)
    with pytest.raises(AuthenticationRequiredError):
        authorize_delete(ANONYMOUS, G1)


@pytest.mark.parametrize(
    ("caller", "expected"),
    [
        (ADMIN, True),
        (MEMBER, True),
        (GROUP_ADMIN, True),
        (MAINTAINER, False),
        (OUTSIDER, False),
        (ANONYMOUS, False),
    ],
)
def test_is_editable(caller: Caller, expected: bool) -> None:
    assert is_editable(caller, G1) is expected
