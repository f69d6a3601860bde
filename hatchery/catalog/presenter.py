"""Response assembly for worker models.

This is the only place ``editable`` is computed.  ``snapshot`` produces the
caller-independent view (secrets masked, ``editable=False``) which is safe to
cache; ``present`` stamps ``editable`` for the responding caller.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING

from hatchery.catalog.models.api import PipelineUsageResponse, WorkerModelResponse
from hatchery.catalog.models.worker_model import SECRET_PLACEHOLDER
from hatchery.catalog.policy import is_editable

if TYPE_CHECKING:
    from hatchery.catalog.caller import Caller
    from hatchery.catalog.db.tables import Pipeline, WorkerModel


def snapshot(row: WorkerModel) -> WorkerModelResponse:
    """Caller-independent response for *row*, with passwords masked."""
    response = WorkerModelResponse.model_validate(row)
    updates: dict = {"editable": False}
    if response.docker is not None and response.docker.password:
        updates["docker"] = response.docker.model_copy(update={"password": SECRET_PLACEHOLDER})
    if response.virtual_machine is not None and response.virtual_machine.password:
        updates["virtual_machine"] = response.virtual_machine.model_copy(update={"password": SECRET_PLACEHOLDER})
    return response.model_copy(update=updates)


def present(model: WorkerModel | WorkerModelResponse, caller: Caller) -> WorkerModelResponse:
    """Final response for *caller*, with ``editable`` recomputed."""
    response = model if isinstance(model, WorkerModelResponse) else snapshot(model)
    return response.model_copy(update={"editable": is_editable(caller, response.group_id)})


def present_all(models: Iterable[WorkerModel | WorkerModelResponse], caller: Caller) -> list[WorkerModelResponse]:
    return [present(model, caller) for model in models]


def present_usage(pipelines: Iterable[Pipeline]) -> list[PipelineUsageResponse]:
    return [
        PipelineUsageResponse(
            id=pipeline.id,
            name=pipeline.name,
            project_key=pipeline.project.key,
            project_name=pipeline.project.name,
        )
        for pipeline in pipelines
    ]
