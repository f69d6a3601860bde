"""Unit tests for principal resolution from gateway headers."""

from __future__ import annotations

import pytest

from hatchery.catalog.caller import Caller, caller_from_headers
from hatchery.catalog.errors import AuthenticationRequiredError, InvalidPrincipalError
from hatchery.catalog.models.enums import Role

TOKEN = "svc-token"  # noqa: S105


def _headers(**extra: str) -> dict[str, str]:
    headers = {"authorization": f"Bearer {TOKEN}", "x-hatchery-user": "alice"}
    headers.update(extra)
    return headers


def test_no_authorization_is_anonymous() -> None:
    caller = caller_from_headers({"x-hatchery-role": "admin"}, TOKEN)
    assert caller == Caller.anonymous()
    assert not caller.is_authenticated


def test_full_principal() -> None:
    caller = caller_from_headers(
        _headers(**{"x-hatchery-role": "Maintainer", "x-hatchery-groups": "3, 7", "x-hatchery-admin-groups": "7"}),
        TOKEN,
    )
    assert caller.username == "alice"
    assert caller.role is Role.MAINTAINER
    assert caller.group_ids == {3, 7}
    assert caller.is_group_admin(7)
    assert not caller.is_group_admin(3)


def test_role_defaults_to_member() -> None:
    caller = caller_from_headers(_headers(), TOKEN)
    assert caller.role is Role.MEMBER
    assert caller.is_authenticated
    assert caller.group_ids == frozenset()


def test_admin_groups_count_as_membership() -> None:
    caller = caller_from_headers(_headers(**{"x-hatchery-admin-groups": "4"}), TOKEN)
    assert caller.is_member_of(4)


@pytest.mark.parametrize(
    "authorization",
    ["Bearer wrong", "Basic c3ZjOnRva2Vu", "Bearer", f"Token {TOKEN}"],
)
def test_bad_authorization_is_rejected(authorization: str) -> None:
    with pytest.raises(AuthenticationRequiredError):
        caller_from_headers({"authorization": authorization}, TOKEN)


def test_missing_service_token_rejects_bearer() -> None:
    with pytest.raises(AuthenticationRequiredError):
        caller_from_headers(_headers(), None)


def test_unknown_role_is_rejected() -> None:
    with pytest.raises(InvalidPrincipalError) as exc_info:
        caller_from_headers(_headers(**{"x-hatchery-role": "superuser"}), TOKEN)
    assert exc_info.value.field == "x-hatchery-role"


def test_malformed_group_ids_are_rejected() -> None:
    with pytest.raises(InvalidPrincipalError) as exc_info:
        caller_from_headers(_headers(**{"x-hatchery-groups": "3,seven"}), TOKEN)
    assert exc_info.value.field == "x-hatchery-groups"
