"""Project lookups used to scope worker model listings."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hatchery.catalog.db.tables import Project
from hatchery.catalog.errors import ProjectNotFoundError


async def get_project_by_key(db: AsyncSession, project_key: str) -> Project:
    """Get a project (with its group links) by key.  Raises ``ProjectNotFoundError`` if missing."""
    result = await db.execute(select(Project).where(Project.key == project_key))
    project = result.scalar_one_or_none()
    if project is None:
        raise ProjectNotFoundError(project_key)
    return project


def project_group_ids(project: Project) -> list[int]:
    return [link.group_id for link in project.group_links]
