"""Worker model endpoints (RPC-style).

All write operations use POST; reads use GET.  Models are addressed by
owning group name and model name.
"""

from __future__ import annotations

from fastapi import APIRouter, Query, status

from hatchery.catalog.deps import CurrentCaller, DbSession, ModelCache, SharedInfraGroupId
from hatchery.catalog.managers import worker_models
from hatchery.catalog.models.api import PipelineUsageResponse, WorkerModelResponse
from hatchery.catalog.models.enums import Communication, WorkerModelType
from hatchery.catalog.models.worker_model import WorkerModelDefinition
from hatchery.catalog.presenter import present, present_all, present_usage
from hatchery.catalog.routers._errors import domain_errors
from hatchery.catalog.validation import parse_state_filter

router = APIRouter(prefix="/worker-models", tags=["worker-models"])


@router.get("/types", response_model=list[str])
async def list_types() -> list[str]:
    """Known worker model types."""
    return [model_type.value for model_type in WorkerModelType]


@router.get("/communications", response_model=list[str])
async def list_communications() -> list[str]:
    """Known worker communication channels."""
    return [communication.value for communication in Communication]


@router.post("/create", response_model=WorkerModelResponse, status_code=status.HTTP_201_CREATED)
async def create_worker_model(
    body: WorkerModelDefinition,
    db: DbSession,
    caller: CurrentCaller,
    cache: ModelCache,
) -> WorkerModelResponse:
    """Create a worker model in the group referenced by ``group_id``."""
    with domain_errors():
        row = await worker_models.create_worker_model(db, caller, body, cache=cache)
    return present(row, caller)


@router.get("/list", response_model=list[WorkerModelResponse])
async def list_worker_models(
    db: DbSession,
    caller: CurrentCaller,
    cache: ModelCache,
    shared_infra_group_id: SharedInfraGroupId,
    binary: str | None = Query(None, description="Keep models declaring a binary capability containing this."),
    state: str | None = Query(
        None,
        description="One of active, deprecated, disabled, error, official, register.",
    ),
) -> list[WorkerModelResponse]:
    """List the models visible to the caller, ordered by name."""
    with domain_errors():
        load_filter = worker_models.LoadFilter(binary=binary or None, state=parse_state_filter(state))
        models = await worker_models.list_visible_worker_models(
            db,
            caller,
            cache=cache,
            shared_infra_group_id=shared_infra_group_id,
            load_filter=load_filter,
        )
    return present_all(models, caller)


@router.get("/{group_name}/{model_name}/get", response_model=WorkerModelResponse)
async def get_worker_model(
    group_name: str,
    model_name: str,
    db: DbSession,
    caller: CurrentCaller,
) -> WorkerModelResponse:
    """Get a single worker model."""
    with domain_errors():
        row = await worker_models.get_worker_model(db, group_name, model_name)
    return present(row, caller)


@router.post("/{group_name}/{model_name}/update", response_model=WorkerModelResponse)
async def update_worker_model(
    group_name: str,
    model_name: str,
    body: WorkerModelDefinition,
    db: DbSession,
    caller: CurrentCaller,
    cache: ModelCache,
) -> WorkerModelResponse:
    """Replace a worker model's definition.

    Password fields holding the masked placeholder keep their stored value.
    """
    with domain_errors():
        row = await worker_models.update_worker_model(db, caller, group_name, model_name, body, cache=cache)
    return present(row, caller)


@router.post("/{group_name}/{model_name}/delete", status_code=status.HTTP_204_NO_CONTENT)
async def delete_worker_model(
    group_name: str,
    model_name: str,
    db: DbSession,
    caller: CurrentCaller,
    cache: ModelCache,
) -> None:
    """Delete a worker model."""
    with domain_errors():
        await worker_models.delete_worker_model(db, caller, group_name, model_name, cache=cache)


@router.get("/{group_name}/{model_name}/usage", response_model=list[PipelineUsageResponse])
async def list_worker_model_usage(
    group_name: str,
    model_name: str,
    db: DbSession,
    caller: CurrentCaller,
    shared_infra_group_id: SharedInfraGroupId,
) -> list[PipelineUsageResponse]:
    """Pipelines requiring the model, limited to projects the caller can see."""
    with domain_errors():
        pipelines = await worker_models.list_model_usage(
            db,
            caller,
            group_name,
            model_name,
            shared_infra_group_id=shared_infra_group_id,
        )
    return present_usage(pipelines)
