"""Worker models usable by a project."""

from __future__ import annotations

from fastapi import APIRouter

from hatchery.catalog.deps import CurrentCaller, DbSession, SharedInfraGroupId
from hatchery.catalog.managers.worker_models import list_models_for_project
from hatchery.catalog.models.api import WorkerModelResponse
from hatchery.catalog.presenter import present_all
from hatchery.catalog.routers._errors import domain_errors

router = APIRouter(prefix="/projects", tags=["projects"])


@router.get("/{project_key}/worker-models/list", response_model=list[WorkerModelResponse])
async def list_project_worker_models(
    project_key: str,
    db: DbSession,
    caller: CurrentCaller,
    shared_infra_group_id: SharedInfraGroupId,
) -> list[WorkerModelResponse]:
    """Active models of the project's groups and of the shared-infra group."""
    with domain_errors():
        models = await list_models_for_project(db, caller, project_key, shared_infra_group_id=shared_infra_group_id)
    return present_all(models, caller)
