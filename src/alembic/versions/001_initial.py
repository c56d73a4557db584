"""Initial migration: phase catalog, processes, event log, feedback

Revision ID: 001
Revises:
Create Date: 2026-10-18 00:00:00.000000

"""

from collections.abc import Sequence

import sqlalchemy as sa
import sqlmodel

from alembic import op

revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    # 1. Phase catalog
    op.create_table(
        "process_phases",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("process_type", sqlmodel.sql.sqltypes.AutoString(length=50), nullable=False),
        sa.Column("name", sqlmodel.sql.sqltypes.AutoString(length=120), nullable=False),
        sa.Column(
            "sla_kind",
            sqlmodel.sql.sqltypes.AutoString(length=10),
            nullable=False,
            server_default="days",
        ),
        sa.Column("sla_days", sa.Integer(), nullable=True),
        sa.Column("sla_minutes", sa.Integer(), nullable=True),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default="100"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("is_terminal", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("sla_days IS NULL OR sla_days >= 0", name="ck_process_phases_sla_days"),
        sa.CheckConstraint(
            "sla_minutes IS NULL OR sla_minutes >= 0", name="ck_process_phases_sla_minutes"
        ),
    )
    op.create_index(
        "ix_process_phases_type_active_order",
        "process_phases",
        ["process_type", "is_active", "sort_order"],
        unique=False,
    )

    # 2. Processes
    op.create_table(
        "processes",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("type", sqlmodel.sql.sqltypes.AutoString(length=50), nullable=False),
        sa.Column("status", sqlmodel.sql.sqltypes.AutoString(length=20), nullable=False),
        sa.Column("current_phase_id", sa.Uuid(), nullable=True),
        sa.Column("current_phase_started_at", sa.DateTime(), nullable=False),
        sa.Column("current_owner", sqlmodel.sql.sqltypes.AutoString(length=30), nullable=False),
        sa.Column("start_at", sa.DateTime(), nullable=False),
        sa.Column("closed_at", sa.DateTime(), nullable=True),
        sa.Column("version", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("administradora", sqlmodel.sql.sqltypes.AutoString(length=120), nullable=True),
        sa.Column("proposta", sqlmodel.sql.sqltypes.AutoString(length=60), nullable=True),
        sa.Column("grupo", sqlmodel.sql.sqltypes.AutoString(length=30), nullable=True),
        sa.Column("cota", sqlmodel.sql.sqltypes.AutoString(length=30), nullable=True),
        sa.Column("segmento", sqlmodel.sql.sqltypes.AutoString(length=60), nullable=True),
        sa.Column("cliente_nome", sqlmodel.sql.sqltypes.AutoString(length=200), nullable=True),
        sa.Column("credito_disponivel", sa.Numeric(precision=14, scale=2), nullable=True),
        sa.Column("lead_id", sqlmodel.sql.sqltypes.AutoString(length=64), nullable=True),
        sa.Column("cliente_id", sqlmodel.sql.sqltypes.AutoString(length=64), nullable=True),
        sa.Column("created_by", sqlmodel.sql.sqltypes.AutoString(length=64), nullable=False),
        sa.Column("updated_by", sqlmodel.sql.sqltypes.AutoString(length=64), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["current_phase_id"], ["process_phases.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_processes_type_status_start",
        "processes",
        ["type", "status", "start_date"],
        unique=False,
    )

    # 3. Event log (append-only)
    op.create_table(
        "process_events",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("process_id", sa.Uuid(), nullable=False),
        sa.Column("sequence", sa.Integer(), nullable=False),
        sa.Column("at", sa.DateTime(), nullable=False),
        sa.Column("from_phase_id", sa.Uuid(), nullable=True),
        sa.Column("to_phase_id", sa.Uuid(), nullable=True),
        sa.Column("owner", sqlmodel.sql.sqltypes.AutoString(length=30), nullable=False),
        sa.Column("note", sqlmodel.sql.sqltypes.AutoString(length=2000), nullable=True),
        sa.Column("actor", sqlmodel.sql.sqltypes.AutoString(length=64), nullable=False),
        sa.ForeignKeyConstraint(["process_id"], ["processes.id"]),
        sa.ForeignKeyConstraint(["from_phase_id"], ["process_phases.id"]),
        sa.ForeignKeyConstraint(["to_phase_id"], ["process_phases.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("process_id", "sequence", name="uq_process_events_sequence"),
    )
    op.create_index(
        "ix_process_events_process_at", "process_events", ["process_id", "at"], unique=False
    )

    # 4. Finalization feedback, one row per process
    op.create_table(
        "process_feedback",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("process_id", sa.Uuid(), nullable=False),
        sa.Column("user_satisfaction", sa.Integer(), nullable=False),
        sa.Column("client_satisfaction", sa.Integer(), nullable=False),
        sa.Column(
            "improvement_text", sqlmodel.sql.sqltypes.AutoString(length=4000), nullable=True
        ),
        sa.Column("actor", sqlmodel.sql.sqltypes.AutoString(length=64), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["process_id"], ["processes.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("process_id"),
        sa.CheckConstraint(
            "user_satisfaction BETWEEN 0 AND 100", name="ck_process_feedback_user_satisfaction"
        ),
        sa.CheckConstraint(
            "client_satisfaction BETWEEN 0 AND 100",
            name="ck_process_feedback_client_satisfaction",
        ),
    )


def downgrade() -> None:
    op.drop_table("process_feedback")

    op.drop_index("ix_process_events_process_at", table_name="process_events")
    op.drop_table("process_events")

    op.drop_index("ix_processes_type_status_start", table_name="processes")
    op.drop_table("processes")

    op.drop_index("ix_process_phases_type_active_order", table_name="process_phases")
    op.drop_table("process_phases")
