"""Group directory lookups.

Groups are administered elsewhere; the catalog only resolves them by name or
id to anchor worker model ownership.
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hatchery.catalog.db.tables import Group
from hatchery.catalog.errors import GroupNotFoundError


async def get_group(db: AsyncSession, group_id: int) -> Group:
    """Get a group by id.  Raises ``GroupNotFoundError`` if missing."""
    group = await db.get(Group, group_id)
    if group is None:
        raise GroupNotFoundError(group_id)
    return group


async def get_group_by_name(db: AsyncSession, name: str) -> Group:
    """Get a group by name.  Raises ``GroupNotFoundError`` if missing."""
    result = await db.execute(select(Group).where(Group.name == name))
    group = result.scalar_one_or_none()
    if group is None:
        raise GroupNotFoundError(name)
    return group


async def find_group_id(db: AsyncSession, name: str) -> int | None:
    """Return the id of the group called *name*, or ``None``."""
    result = await db.execute(select(Group.id).where(Group.name == name))
    return result.scalar_one_or_none()
