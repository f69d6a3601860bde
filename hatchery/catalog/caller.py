"""Calling principal.

Authentication happens upstream: an authenticating gateway verifies the end
user and forwards the principal to this service as headers, together with the
shared service token::

    Authorization: Bearer <HATCHERY_AUTH_TOKEN>
    X-Hatchery-User: alice
    X-Hatchery-Role: member            # anonymous | member | maintainer | admin
    X-Hatchery-Groups: 3,7             # ids of groups alice belongs to
    X-Hatchery-Admin-Groups: 7         # subset alice administers

A request without ``Authorization`` is anonymous.
"""

from __future__ import annotations

import hmac
from collections.abc import Mapping
from dataclasses import dataclass, field

from hatchery.catalog.errors import AuthenticationRequiredError, InvalidPrincipalError
from hatchery.catalog.models.enums import Role

USER_HEADER = "x-hatchery-user"
ROLE_HEADER = "x-hatchery-role"
GROUPS_HEADER = "x-hatchery-groups"
ADMIN_GROUPS_HEADER = "x-hatchery-admin-groups"


@dataclass(frozen=True)
class Caller:
    """Role and group membership of the principal making a request."""

    username: str | None = None
    role: Role = Role.ANONYMOUS
    group_ids: frozenset[int] = field(default_factory=frozenset)
    admin_group_ids: frozenset[int] = field(default_factory=frozenset)

    @classmethod
    def anonymous(cls) -> Caller:
        return cls()

    @property
    def is_authenticated(self) -> bool:
        return self.role != Role.ANONYMOUS

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    @property
    def is_maintainer(self) -> bool:
        return self.role == Role.MAINTAINER

    def is_member_of(self, group_id: int) -> bool:
        """Group administrators count as members."""
        return group_id in self.group_ids or group_id in self.admin_group_ids

    def is_group_admin(self, group_id: int) -> bool:
        return group_id in self.admin_group_ids


def _parse_ids(raw: str | None, header: str) -> frozenset[int]:
    if not raw:
        return frozenset()
    try:
        return frozenset(int(part) for part in raw.split(",") if part.strip())
    except ValueError:
        raise InvalidPrincipalError(header, f"Malformed group id list in {header}: '{raw}'") from None


def caller_from_headers(headers: Mapping[str, str], service_token: str | None) -> Caller:
    """Build a ``Caller`` from gateway-forwarded headers.

    Raises ``AuthenticationRequiredError`` if a bearer token is presented but
    does not match *service_token*, and ``InvalidPrincipalError`` if the
    principal headers are malformed.
    """
    authorization = headers.get("authorization")
    if not authorization:
        return Caller.anonymous()

    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token or service_token is None:
        raise AuthenticationRequiredError("Invalid authorization header")
    if not hmac.compare_digest(token.strip().encode(), service_token.encode()):
        raise AuthenticationRequiredError("Invalid service token")

    raw_role = headers.get(ROLE_HEADER) or Role.MEMBER
    try:
        role = Role(raw_role.lower())
    except ValueError:
        raise InvalidPrincipalError(ROLE_HEADER, f"Unknown role '{raw_role}'") from None

    return Caller(
        username=headers.get(USER_HEADER) or None,
        role=role,
        group_ids=_parse_ids(headers.get(GROUPS_HEADER), GROUPS_HEADER),
        admin_group_ids=_parse_ids(headers.get(ADMIN_GROUPS_HEADER), ADMIN_GROUPS_HEADER),
    )
