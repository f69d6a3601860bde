"""SQLAlchemy ORM models for PostgreSQL.

These are the single source of truth for the database schema; Alembic reads
``Base.metadata`` for autogenerate.  Groups, projects and pipelines are
owned by other services and only mirrored here to the extent the catalog
needs them (ownership, membership links, model usage).

Uses SQLAlchemy 2.0 declarative style with ``Mapped`` type annotations.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, Text, UniqueConstraint, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

# Timezone-aware timestamp type for all datetime columns.
TimestampTZ = DateTime(timezone=True)


class Base(DeclarativeBase):
    """Declarative base with naming convention for constraints."""

    pass


Base.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


# ---------------------------------------------------------------------------
# Group directory
# ---------------------------------------------------------------------------


class Group(Base):
    __tablename__ = "groups"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(unique=True)


class Project(Base):
    __tablename__ = "projects"

    id: Mapped[int] = mapped_column(primary_key=True)
    key: Mapped[str] = mapped_column(unique=True)
    name: Mapped[str]

    group_links: Mapped[list[ProjectGroup]] = relationship(lazy="selectin", cascade="all, delete-orphan")


class ProjectGroup(Base):
    __tablename__ = "project_groups"

    project_id: Mapped[int] = mapped_column(ForeignKey("projects.id", ondelete="CASCADE"), primary_key=True)
    group_id: Mapped[int] = mapped_column(ForeignKey("groups.id", ondelete="CASCADE"), primary_key=True)
    permission: Mapped[int] = mapped_column(default=4, server_default="4")


class Pipeline(Base):
    __tablename__ = "pipelines"
    __table_args__ = (Index("ix_pipelines_project_id", "project_id"),)

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str]
    project_id: Mapped[int] = mapped_column(ForeignKey("projects.id", ondelete="CASCADE"))

    project: Mapped[Project] = relationship(lazy="joined")


class PipelineWorkerModel(Base):
    """Which pipelines require which worker model."""

    __tablename__ = "pipeline_worker_models"
    __table_args__ = (Index("ix_pipeline_worker_models_worker_model_id", "worker_model_id"),)

    pipeline_id: Mapped[int] = mapped_column(ForeignKey("pipelines.id", ondelete="CASCADE"), primary_key=True)
    worker_model_id: Mapped[int] = mapped_column(ForeignKey("worker_models.id", ondelete="CASCADE"), primary_key=True)


# ---------------------------------------------------------------------------
# Worker models
# ---------------------------------------------------------------------------


class WorkerModel(Base):
    __tablename__ = "worker_models"
    __table_args__ = (
        UniqueConstraint("group_id", "name", name="uq_worker_models_group_id_name"),
        Index("ix_worker_models_group_id", "group_id"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str]
    description: Mapped[str | None] = mapped_column(Text)
    group_id: Mapped[int] = mapped_column(ForeignKey("groups.id"))
    type: Mapped[str]
    docker: Mapped[dict | None] = mapped_column(JSONB)
    virtual_machine: Mapped[dict | None] = mapped_column(JSONB)
    pattern_name: Mapped[str] = mapped_column(default="", server_default="")
    restricted: Mapped[bool] = mapped_column(default=False, server_default="false")
    provision: Mapped[int] = mapped_column(default=0, server_default="0")
    communication: Mapped[str] = mapped_column(default="http", server_default="http")

    # Lifecycle state
    is_deprecated: Mapped[bool] = mapped_column(default=False, server_default="false")
    disabled: Mapped[bool] = mapped_column(default=False, server_default="false")
    is_official: Mapped[bool] = mapped_column(default=False, server_default="false")
    need_registration: Mapped[bool] = mapped_column(default=True, server_default="true")
    nb_spawn_err: Mapped[int] = mapped_column(default=0, server_default="0")
    last_spawn_err: Mapped[str | None] = mapped_column(Text)

    created_by: Mapped[str | None]
    created_at: Mapped[datetime] = mapped_column(TimestampTZ, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(TimestampTZ, server_default=func.now(), onupdate=func.now())

    group: Mapped[Group] = relationship(lazy="joined")
    capabilities: Mapped[list[WorkerModelCapability]] = relationship(
        lazy="selectin",
        cascade="all, delete-orphan",
        order_by="WorkerModelCapability.name",
    )


class WorkerModelCapability(Base):
    __tablename__ = "worker_model_capabilities"
    __table_args__ = (
        UniqueConstraint("worker_model_id", "name", name="uq_worker_model_capabilities_worker_model_id_name"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    worker_model_id: Mapped[int] = mapped_column(ForeignKey("worker_models.id", ondelete="CASCADE"))
    name: Mapped[str]
    type: Mapped[str] = mapped_column(default="binary", server_default="binary")
    value: Mapped[str] = mapped_column(default="", server_default="")
