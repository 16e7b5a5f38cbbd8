"""Initial migration

Revision ID: 001
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""

from collections.abc import Sequence

import sqlalchemy as sa
import sqlmodel

from alembic import op

revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

ACTIVE_REQUEST = sa.text("status IN ('PENDING', 'APPROVED')")


def upgrade() -> None:
    # 1. Buildings (base-domain table; status written by the orchestrator only)
    op.create_table(
        "buildings",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("tenant_id", sa.Uuid(), nullable=False),
        sa.Column("name", sqlmodel.sql.sqltypes.AutoString(length=200), nullable=False),
        sa.Column("code", sqlmodel.sql.sqltypes.AutoString(length=50), nullable=False),
        sa.Column(
            "status",
            sqlmodel.sql.sqltypes.AutoString(length=20),
            nullable=False,
            server_default="ACTIVE",
        ),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.Column("archived_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_buildings_tenant_id", "buildings", ["tenant_id"], unique=False)
    op.create_index("ix_buildings_code", "buildings", ["code"], unique=False)
    op.create_index("ix_buildings_status", "buildings", ["status"], unique=False)

    # 2. Units (read-only to the orchestrator)
    op.create_table(
        "units",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("building_id", sa.Uuid(), nullable=False),
        sa.Column("code", sqlmodel.sql.sqltypes.AutoString(length=50), nullable=False),
        sa.Column("active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["building_id"], ["buildings.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_units_building_id", "units", ["building_id"], unique=False)

    # 3. Deletion requests
    op.create_table(
        "deletion_requests",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("tenant_id", sa.Uuid(), nullable=False),
        sa.Column("requested_by", sa.Uuid(), nullable=False),
        sa.Column("reason", sqlmodel.sql.sqltypes.AutoString(length=1000), nullable=False),
        sa.Column(
            "status",
            sqlmodel.sql.sqltypes.AutoString(length=20),
            nullable=False,
            server_default="PENDING",
        ),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.Column("decided_by", sa.Uuid(), nullable=True),
        sa.Column("decided_at", sa.DateTime(), nullable=True),
        sa.Column(
            "rejection_reason", sqlmodel.sql.sqltypes.AutoString(length=1000), nullable=True
        ),
        sa.Column("note", sqlmodel.sql.sqltypes.AutoString(length=1000), nullable=True),
        sa.Column("completed_at", sa.DateTime(), nullable=True),
        sa.Column("canceled_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_deletion_requests_tenant_id", "deletion_requests", ["tenant_id"])
    op.create_index("ix_deletion_requests_requested_by", "deletion_requests", ["requested_by"])
    op.create_index("ix_deletion_requests_status", "deletion_requests", ["status"])
    op.create_index(
        "ix_deletion_requests_tenant_created", "deletion_requests", ["tenant_id", "created_at"]
    )
    # At most one PENDING or APPROVED request per tenant
    op.create_index(
        "uq_deletion_requests_active_tenant",
        "deletion_requests",
        ["tenant_id"],
        unique=True,
        postgresql_where=ACTIVE_REQUEST,
        sqlite_where=ACTIVE_REQUEST,
    )

    # 4. Ledger (append-only)
    op.create_table(
        "deletion_ledger",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("resource_type", sqlmodel.sql.sqltypes.AutoString(length=30), nullable=False),
        sa.Column("resource_id", sa.Uuid(), nullable=False),
        sa.Column("tenant_id", sa.Uuid(), nullable=False),
        sa.Column("deletion_request_id", sa.Uuid(), nullable=True),
        sa.Column("from_status", sqlmodel.sql.sqltypes.AutoString(length=20), nullable=False),
        sa.Column("to_status", sqlmodel.sql.sqltypes.AutoString(length=20), nullable=False),
        sa.Column("actor_id", sa.Uuid(), nullable=False),
        sa.Column("actor_roles", sa.JSON(), nullable=False),
        sa.Column("reason", sqlmodel.sql.sqltypes.AutoString(length=1000), nullable=True),
        sa.Column("correlation_id", sqlmodel.sql.sqltypes.AutoString(length=36), nullable=True),
        sa.Column("details", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "resource_type", "resource_id", "to_status", name="uq_deletion_ledger_transition"
        ),
    )
    op.create_index("ix_deletion_ledger_tenant_id", "deletion_ledger", ["tenant_id"])
    op.create_index(
        "ix_deletion_ledger_resource", "deletion_ledger", ["resource_type", "resource_id"]
    )
    op.create_index(
        "ix_deletion_ledger_request_created",
        "deletion_ledger",
        ["deletion_request_id", "created_at"],
    )


def downgrade() -> None:
    op.drop_table("deletion_ledger")
    op.drop_index("uq_deletion_requests_active_tenant", table_name="deletion_requests")
    op.drop_table("deletion_requests")
    op.drop_table("units")
    op.drop_table("buildings")
