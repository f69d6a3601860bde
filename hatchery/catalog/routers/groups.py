"""Worker models usable by a group."""

from __future__ import annotations

from fastapi import APIRouter

from hatchery.catalog.deps import CurrentCaller, DbSession, SharedInfraGroupId
from hatchery.catalog.managers.worker_models import list_models_for_group
from hatchery.catalog.models.api import WorkerModelResponse
from hatchery.catalog.presenter import present_all
from hatchery.catalog.routers._errors import domain_errors

router = APIRouter(prefix="/groups", tags=["groups"])


@router.get("/{group_id}/worker-models/list", response_model=list[WorkerModelResponse])
async def list_group_worker_models(
    group_id: int,
    db: DbSession,
    caller: CurrentCaller,
    shared_infra_group_id: SharedInfraGroupId,
) -> list[WorkerModelResponse]:
    """Active models owned by the group or by the shared-infra group."""
    with domain_errors():
        models = await list_models_for_group(db, caller, group_id, shared_infra_group_id=shared_infra_group_id)
    return present_all(models, caller)
