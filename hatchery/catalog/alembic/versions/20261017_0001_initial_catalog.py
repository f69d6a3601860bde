"""initial catalog

Revision ID: 0001
Revises:
Create Date: 2026-10-17 09:00:00.000000

"""

from __future__ import annotations

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "groups",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_groups")),
        sa.UniqueConstraint("name", name=op.f("uq_groups_name")),
    )
    op.create_table(
        "projects",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("key", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_projects")),
        sa.UniqueConstraint("key", name=op.f("uq_projects_key")),
    )
    op.create_table(
        "project_groups",
        sa.Column("project_id", sa.Integer(), nullable=False),
        sa.Column("group_id", sa.Integer(), nullable=False),
        sa.Column("permission", sa.Integer(), server_default="4", nullable=False),
        sa.ForeignKeyConstraint(
            ["group_id"], ["groups.id"], name=op.f("fk_project_groups_group_id_groups"), ondelete="CASCADE"
        ),
        sa.ForeignKeyConstraint(
            ["project_id"], ["projects.id"], name=op.f("fk_project_groups_project_id_projects"), ondelete="CASCADE"
        ),
        sa.PrimaryKeyConstraint("project_id", "group_id", name=op.f("pk_project_groups")),
    )
    op.create_table(
        "pipelines",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("project_id", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(
            ["project_id"], ["projects.id"], name=op.f("fk_pipelines_project_id_projects"), ondelete="CASCADE"
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_pipelines")),
    )
    op.create_index("ix_pipelines_project_id", "pipelines", ["project_id"], unique=False)

    op.create_table(
        "worker_models",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("group_id", sa.Integer(), nullable=False),
        sa.Column("type", sa.String(), nullable=False),
        sa.Column("docker", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column("virtual_machine", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column("pattern_name", sa.String(), server_default="", nullable=False),
        sa.Column("restricted", sa.Boolean(), server_default="false", nullable=False),
        sa.Column("provision", sa.Integer(), server_default="0", nullable=False),
        sa.Column("communication", sa.String(), server_default="http", nullable=False),
        sa.Column("is_deprecated", sa.Boolean(), server_default="false", nullable=False),
        sa.Column("disabled", sa.Boolean(), server_default="false", nullable=False),
        sa.Column("is_official", sa.Boolean(), server_default="false", nullable=False),
        sa.Column("need_registration", sa.Boolean(), server_default="true", nullable=False),
        sa.Column("nb_spawn_err", sa.Integer(), server_default="0", nullable=False),
        sa.Column("last_spawn_err", sa.Text(), nullable=True),
        sa.Column("created_by", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.ForeignKeyConstraint(["group_id"], ["groups.id"], name=op.f("fk_worker_models_group_id_groups")),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_worker_models")),
        sa.UniqueConstraint("group_id", "name", name="uq_worker_models_group_id_name"),
    )
    op.create_index("ix_worker_models_group_id", "worker_models", ["group_id"], unique=False)

    op.create_table(
        "worker_model_capabilities",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("worker_model_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("type", sa.String(), server_default="binary", nullable=False),
        sa.Column("value", sa.String(), server_default="", nullable=False),
        sa.ForeignKeyConstraint(
            ["worker_model_id"],
            ["worker_models.id"],
            name=op.f("fk_worker_model_capabilities_worker_model_id_worker_models"),
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_worker_model_capabilities")),
        sa.UniqueConstraint(
            "worker_model_id", "name", name="uq_worker_model_capabilities_worker_model_id_name"
        ),
    )

    op.create_table(
        "pipeline_worker_models",
        sa.Column("pipeline_id", sa.Integer(), nullable=False),
        sa.Column("worker_model_id", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(
            ["pipeline_id"],
            ["pipelines.id"],
            name=op.f("fk_pipeline_worker_models_pipeline_id_pipelines"),
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["worker_model_id"],
            ["worker_models.id"],
            name=op.f("fk_pipeline_worker_models_worker_model_id_worker_models"),
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("pipeline_id", "worker_model_id", name=op.f("pk_pipeline_worker_models")),
    )
    op.create_index(
        "ix_pipeline_worker_models_worker_model_id", "pipeline_worker_models", ["worker_model_id"], unique=False
    )


def downgrade() -> None:
    op.drop_index("ix_pipeline_worker_models_worker_model_id", table_name="pipeline_worker_models")
    op.drop_table("pipeline_worker_models")
    op.drop_table("worker_model_capabilities")
    op.drop_index("ix_worker_models_group_id", table_name="worker_models")
    op.drop_table("worker_models")
    op.drop_index("ix_pipelines_project_id", table_name="pipelines")
    op.drop_table("pipelines")
    op.drop_table("project_groups")
    op.drop_table("projects")
    op.drop_table("groups")
