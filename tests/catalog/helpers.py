"""Request builders and row seeding shared by the catalog tests."""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from hatchery.catalog.db.tables import Group, Pipeline, PipelineWorkerModel, Project, ProjectGroup

SERVICE_TOKEN = "test-service-token"  # noqa: S105
CACHE_NAMESPACE = "test:workermodels"


def principal(
    role: str = "member",
    *,
    groups: tuple[int, ...] = (),
    admin_groups: tuple[int, ...] = (),
    user: str = "alice",
) -> dict[str, str]:
    """Headers the authenticating gateway would forward for a principal."""
    return {
        "Authorization": f"Bearer {SERVICE_TOKEN}",
        "X-Hatchery-User": user,
        "X-Hatchery-Role": role,
        "X-Hatchery-Groups": ",".join(str(gid) for gid in groups),
        "X-Hatchery-Admin-Groups": ",".join(str(gid) for gid in admin_groups),
    }


ADMIN = principal("admin", user="root")


def docker_model(group_id: int, name: str = "ubuntu", **overrides: object) -> dict:
    """A valid docker model payload; the pattern name lets non-admins submit it."""
    payload: dict = {
        "name": name,
        "group_id": group_id,
        "type": "docker",
        "pattern_name": "basic_unix",
        "docker": {"image": "ubuntu:24.04", "shell": "sh -c", "cmd": "worker --api"},
        "capabilities": [{"name": "git", "type": "binary"}],
    }
    payload.update(overrides)
    return payload


class Seeder:
    """Inserts the directory rows (groups, projects, pipelines) the catalog reads."""

    def __init__(self, db: AsyncSession) -> None:
        self._db = db

    async def group(self, name: str) -> Group:
        group = Group(name=name)
        self._db.add(group)
        await self._db.flush()
        return group

    async def project(self, key: str, *groups: Group) -> Project:
        project = Project(key=key, name=key.title())
        project.group_links = [ProjectGroup(group_id=group.id) for group in groups]
        self._db.add(project)
        await self._db.flush()
        return project

    async def pipeline(self, name: str, project: Project, *worker_model_ids: int) -> Pipeline:
        pipeline = Pipeline(name=name, project_id=project.id)
        self._db.add(pipeline)
        await self._db.flush()
        for worker_model_id in worker_model_ids:
            self._db.add(PipelineWorkerModel(pipeline_id=pipeline.id, worker_model_id=worker_model_id))
        await self._db.flush()
        return pipeline
