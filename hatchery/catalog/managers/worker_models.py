"""Worker model CRUD operations.

Mutations follow one sequence:

1. load the targets (``GroupNotFoundError`` / ``WorkerModelNotFoundError``);
2. run the pure policy (validation, sanitization, permission checks) before
   anything is written;
3. apply and commit in the request's transaction -- any failure rolls back
   the whole unit;
4. invalidate the list cache namespace;
5. re-read the committed row with ``read_authoritative``.

Read paths scope their SQL with ``VisibleGroups`` instead of post-filtering.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING

from loguru import logger
from sqlalchemy import and_, select
from sqlalchemy.exc import IntegrityError

from hatchery.catalog.db.tables import WorkerModel, WorkerModelCapability
from hatchery.catalog.errors import DuplicateWorkerModelError, WorkerModelNotFoundError
from hatchery.catalog.managers.groups import get_group, get_group_by_name
from hatchery.catalog.managers.pipelines import list_pipelines_using_model
from hatchery.catalog.managers.projects import get_project_by_key, project_group_ids
from hatchery.catalog.models.api import WorkerModelResponse
from hatchery.catalog.models.enums import CapabilityType, StateFilter
from hatchery.catalog.models.worker_model import Capability, WorkerModelDefinition
from hatchery.catalog.policy import authorize_delete, authorize_update, prepare_for_create, prepare_for_update
from hatchery.catalog.presenter import snapshot
from hatchery.catalog.visibility import (
    VisibleGroups,
    authorize_group_read,
    authorize_project_read,
    resolve_visible_groups,
)

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from hatchery.catalog.cache import WorkerModelCache
    from hatchery.catalog.caller import Caller
    from hatchery.catalog.db.tables import Pipeline

_UNIQUE_NAME_CONSTRAINT = "uq_worker_models_group_id_name"

_STATE_CLAUSES = {
    StateFilter.ACTIVE: and_(WorkerModel.disabled.is_(False), WorkerModel.is_deprecated.is_(False)),
    StateFilter.DEPRECATED: WorkerModel.is_deprecated.is_(True),
    StateFilter.DISABLED: WorkerModel.disabled.is_(True),
    StateFilter.ERROR: WorkerModel.nb_spawn_err > 0,
    StateFilter.OFFICIAL: WorkerModel.is_official.is_(True),
    StateFilter.REGISTER: WorkerModel.need_registration.is_(True),
}


@dataclass(frozen=True)
class LoadFilter:
    """Optional list filters.  ``state`` must already be parsed."""

    binary: str | None = None
    state: StateFilter | None = None


# ---------------------------------------------------------------------------
# Mutations
# ---------------------------------------------------------------------------


async def create_worker_model(
    db: AsyncSession,
    caller: Caller,
    body: WorkerModelDefinition,
    *,
    cache: WorkerModelCache,
) -> WorkerModel:
    """Create a worker model on behalf of *caller*."""
    definition = prepare_for_create(caller, body)
    group = await get_group(db, definition.group_id)  # type: ignore[arg-type]
    await _ensure_name_available(db, group.id, definition.name)

    row = WorkerModel(group_id=group.id, created_by=caller.username, need_registration=True)
    _apply_definition(row, definition)
    db.add(row)
    await _commit(db, group.id, definition.name)

    await cache.invalidate_namespace()
    logger.info("Worker model created: {}/{} (id={}, by={})", group.name, row.name, row.id, caller.username)
    return await read_authoritative(db, row.id)


async def update_worker_model(
    db: AsyncSession,
    caller: Caller,
    group_name: str,
    model_name: str,
    body: WorkerModelDefinition,
    *,
    cache: WorkerModelCache,
) -> WorkerModel:
    """Replace a worker model's definition on behalf of *caller*."""
    row = await get_worker_model(db, group_name, model_name)
    authorize_update(caller, row.group_id)

    definition = prepare_for_update(caller, to_definition(row), body)
    target_group_id: int = definition.group_id  # type: ignore[assignment]
    if target_group_id != row.group_id:
        await get_group(db, target_group_id)
    if (target_group_id, definition.name) != (row.group_id, row.name):
        await _ensure_name_available(db, target_group_id, definition.name)

    _apply_definition(row, definition)
    row.need_registration = True
    await _commit(db, target_group_id, definition.name)

    await cache.invalidate_namespace()
    logger.info("Worker model updated: {}/{} (id={}, by={})", group_name, model_name, row.id, caller.username)
    return await read_authoritative(db, row.id)


async def delete_worker_model(
    db: AsyncSession,
    caller: Caller,
    group_name: str,
    model_name: str,
    *,
    cache: WorkerModelCache,
) -> None:
    """Delete a worker model.  Only admins and administrators of the owning group may."""
    row = await get_worker_model(db, group_name, model_name)
    authorize_delete(caller, row.group_id)

    await db.delete(row)
    await _commit(db, row.group_id, row.name)

    await cache.invalidate_namespace()
    logger.info("Worker model deleted: {}/{} (by={})", group_name, model_name, caller.username)


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------


async def get_worker_model(db: AsyncSession, group_name: str, model_name: str) -> WorkerModel:
    """Get a model by owning group name and model name.

    Raises ``GroupNotFoundError`` or ``WorkerModelNotFoundError``.
    """
    group = await get_group_by_name(db, group_name)
    result = await db.execute(
        select(WorkerModel).where(WorkerModel.group_id == group.id, WorkerModel.name == model_name)
    )
    row = result.scalar_one_or_none()
    if row is None:
        raise WorkerModelNotFoundError(group_name, model_name)
    return row


async def read_authoritative(db: AsyncSession, model_id: int) -> WorkerModel:
    """Re-read a model from the database, overwriting any identity-map state."""
    result = await db.execute(
        select(WorkerModel).where(WorkerModel.id == model_id).execution_options(populate_existing=True)
    )
    return result.scalar_one()


async def list_worker_models(
    db: AsyncSession,
    *,
    visible: VisibleGroups,
    load_filter: LoadFilter | None = None,
) -> list[WorkerModel]:
    """List models in *visible* groups matching *load_filter*, ordered by name."""
    stmt = visible.scope(select(WorkerModel), WorkerModel.group_id)

    if load_filter is not None:
        if load_filter.binary:
            with_binary = select(WorkerModelCapability.worker_model_id).where(
                WorkerModelCapability.type == CapabilityType.BINARY,
                WorkerModelCapability.name.contains(load_filter.binary, autoescape=True),
            )
            stmt = stmt.where(WorkerModel.id.in_(with_binary))
        if load_filter.state is not None:
            stmt = stmt.where(_STATE_CLAUSES[load_filter.state])

    result = await db.execute(stmt.order_by(WorkerModel.name.asc(), WorkerModel.id.asc()))
    return list(result.scalars().all())


async def list_visible_worker_models(
    db: AsyncSession,
    caller: Caller,
    *,
    cache: WorkerModelCache,
    shared_infra_group_id: int | None,
    load_filter: LoadFilter,
) -> list[WorkerModelResponse]:
    """Caller-scoped listing, served from the cache when possible.

    Returned snapshots have ``editable=False``; the presenter stamps it.
    """
    visible = resolve_visible_groups(caller, shared_infra_group_id)
    # The key pins the cache generation before the query runs.
    key = await cache.list_key(visible.cache_token, load_filter.binary, load_filter.state)

    cached = await cache.get_list(key)
    if cached is not None:
        return cached

    rows = await list_worker_models(db, visible=visible, load_filter=load_filter)
    snapshots = [snapshot(row) for row in rows]
    await cache.set_list(key, snapshots)
    return snapshots


async def list_active_for_groups(db: AsyncSession, group_ids: Iterable[int]) -> list[WorkerModel]:
    """Active, non-deprecated models owned by any of *group_ids*."""
    return await list_worker_models(
        db,
        visible=VisibleGroups.of(group_ids),
        load_filter=LoadFilter(state=StateFilter.ACTIVE),
    )


async def list_models_for_group(
    db: AsyncSession,
    caller: Caller,
    group_id: int,
    *,
    shared_infra_group_id: int | None,
) -> list[WorkerModel]:
    """Models usable by a group: its own plus the shared-infra group's."""
    group = await get_group(db, group_id)
    authorize_group_read(caller, group.id)
    return await list_active_for_groups(db, _with_shared(group.id, shared_infra_group_id=shared_infra_group_id))


async def list_models_for_project(
    db: AsyncSession,
    caller: Caller,
    project_key: str,
    *,
    shared_infra_group_id: int | None,
) -> list[WorkerModel]:
    """Models usable by a project: those of its groups plus the shared-infra group's."""
    project = await get_project_by_key(db, project_key)
    group_ids = project_group_ids(project)
    authorize_project_read(caller, group_ids)
    return await list_active_for_groups(db, _with_shared(*group_ids, shared_infra_group_id=shared_infra_group_id))


async def list_model_usage(
    db: AsyncSession,
    caller: Caller,
    group_name: str,
    model_name: str,
    *,
    shared_infra_group_id: int | None,
) -> list[Pipeline]:
    """Pipelines consuming a model, limited to what *caller* can see."""
    row = await get_worker_model(db, group_name, model_name)
    visible = resolve_visible_groups(caller, shared_infra_group_id)
    return await list_pipelines_using_model(db, row.id, visible=visible)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def to_definition(row: WorkerModel) -> WorkerModelDefinition:
    """Stored state of *row* as a definition (clear secrets included)."""
    return WorkerModelDefinition.model_validate(row)


def _with_shared(*group_ids: int, shared_infra_group_id: int | None) -> set[int]:
    ids = set(group_ids)
    if shared_infra_group_id is not None:
        ids.add(shared_infra_group_id)
    return ids


def _apply_definition(row: WorkerModel, definition: WorkerModelDefinition) -> None:
    row.name = definition.name
    row.description = definition.description
    row.group_id = definition.group_id  # type: ignore[assignment]
    row.type = definition.type
    row.docker = definition.docker.model_dump() if definition.docker else None
    row.virtual_machine = definition.virtual_machine.model_dump() if definition.virtual_machine else None
    row.pattern_name = definition.pattern_name
    row.restricted = definition.restricted
    row.provision = definition.provision
    row.communication = definition.communication
    row.is_deprecated = definition.is_deprecated
    row.disabled = definition.disabled
    row.is_official = definition.is_official
    _sync_capabilities(row, definition.capabilities)


def _sync_capabilities(row: WorkerModel, capabilities: list[Capability]) -> None:
    """Update capabilities in place by name.

    Reusing rows avoids delete-then-insert ordering issues with the
    ``(worker_model_id, name)`` unique constraint.
    """
    current = {cap.name: cap for cap in row.capabilities}
    synced: list[WorkerModelCapability] = []
    for capability in capabilities:
        existing = current.get(capability.name)
        if existing is None:
            existing = WorkerModelCapability(name=capability.name)
        existing.type = capability.type
        existing.value = capability.value
        synced.append(existing)
    row.capabilities = synced


async def _ensure_name_available(db: AsyncSession, group_id: int, name: str) -> None:
    result = await db.execute(
        select(WorkerModel.id).where(WorkerModel.group_id == group_id, WorkerModel.name == name)
    )
    if result.scalar_one_or_none() is not None:
        raise DuplicateWorkerModelError(group_id, name)


async def _commit(db: AsyncSession, group_id: int, name: str) -> None:
    """Commit the unit; a concurrent insert of the same name becomes a conflict.

    Any failed commit is rolled back before the error propagates, so the
    session never carries a half-applied unit.
    """
    try:
        await db.commit()
    except IntegrityError as exc:
        await db.rollback()
        if _UNIQUE_NAME_CONSTRAINT in str(exc.orig):
            raise DuplicateWorkerModelError(group_id, name) from None
        raise
    except Exception:
        await db.rollback()
        raise


