"""Visibility resolution for read paths.

Visibility is resolved into a set of group ids *before* querying.  The scope
is pushed into the SQL predicate by ``VisibleGroups.scope`` so a
non-privileged caller's query never touches rows outside its groups.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from hatchery.catalog.errors import ForbiddenError

if TYPE_CHECKING:
    from sqlalchemy import Select

    from hatchery.catalog.caller import Caller


@dataclass(frozen=True)
class VisibleGroups:
    """Groups whose worker models a caller may see.

    ``unrestricted=True`` is the "all groups" sentinel (admins and
    maintainers); ``group_ids`` is ignored in that case.
    """

    unrestricted: bool = False
    group_ids: frozenset[int] = frozenset()

    @classmethod
    def everything(cls) -> VisibleGroups:
        return cls(unrestricted=True)

    @classmethod
    def of(cls, group_ids: Iterable[int]) -> VisibleGroups:
        return cls(group_ids=frozenset(group_ids))

    def scope(self, stmt: Select, column: Any) -> Select:
        """Restrict *stmt* to rows whose *column* is a visible group id."""
        if self.unrestricted:
            return stmt
        return stmt.where(column.in_(sorted(self.group_ids)))

    @property
    def cache_token(self) -> str:
        """Stable identifier of this scope for cache keys."""
        if self.unrestricted:
            return "all"
        return ".".join(str(gid) for gid in sorted(self.group_ids)) or "none"


def resolve_visible_groups(caller: Caller, shared_infra_group_id: int | None) -> VisibleGroups:
    """Return the groups whose models *caller* can see.

    Admins and maintainers see everything.  Everyone else sees their own
    groups plus the shared-infrastructure group.
    """
    if caller.is_admin or caller.is_maintainer:
        return VisibleGroups.everything()
    group_ids = set(caller.group_ids | caller.admin_group_ids)
    if shared_infra_group_id is not None:
        group_ids.add(shared_infra_group_id)
    return VisibleGroups.of(group_ids)


def authorize_group_read(caller: Caller, group_id: int) -> None:
    """Gate group-scoped listings.  Raises ``ForbiddenError`` for non-members."""
    if caller.is_admin or caller.is_member_of(group_id):
        return
    raise ForbiddenError(f"Not a member of group {group_id}")


def authorize_project_read(caller: Caller, project_group_ids: Iterable[int]) -> None:
    """Gate project-scoped listings.

    Allowed for admins, maintainers, and members of any group linked to the
    project.
    """
    if caller.is_admin or caller.is_maintainer:
        return
    if any(caller.is_member_of(gid) for gid in project_group_ids):
        return
    raise ForbiddenError("No group of the caller has access to this project")
