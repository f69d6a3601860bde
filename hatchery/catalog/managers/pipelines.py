"""Pipeline usage queries.

A pipeline is visible to a caller when its project is linked to one of the
caller's visible groups.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import select

from hatchery.catalog.db.tables import Pipeline, PipelineWorkerModel, ProjectGroup

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from hatchery.catalog.visibility import VisibleGroups


async def list_pipelines_using_model(
    db: AsyncSession,
    worker_model_id: int,
    *,
    visible: VisibleGroups,
) -> list[Pipeline]:
    """List pipelines requiring the given worker model, scoped to *visible*."""
    stmt = (
        select(Pipeline)
        .join(PipelineWorkerModel, PipelineWorkerModel.pipeline_id == Pipeline.id)
        .where(PipelineWorkerModel.worker_model_id == worker_model_id)
        .order_by(Pipeline.name.asc())
    )
    if not visible.unrestricted:
        visible_projects = visible.scope(select(ProjectGroup.project_id), ProjectGroup.group_id)
        stmt = stmt.where(Pipeline.project_id.in_(visible_projects))

    result = await db.execute(stmt)
    return list(result.scalars().all())
