"""Status ledger - append-only history of deletion state transitions."""

from datetime import datetime
from typing import Any
from uuid import UUID, uuid4

from sqlalchemy import JSON, Column, Index, UniqueConstraint
from sqlmodel import Field, SQLModel

from src.app.models.base import utc_now


class LedgerEntry(SQLModel, table=True):
    """One applied transition of a deletion request or building.

    Every state graph the orchestrator manages is acyclic, so a resource
    reaches each status at most once; the unique constraint turns a second
    write of the same transition into a no-op instead of a duplicate.
    """

    __tablename__ = "deletion_ledger"
    __table_args__ = (
        UniqueConstraint(
            "resource_type",
            "resource_id",
            "to_status",
            name="uq_deletion_ledger_transition",
        ),
        Index("ix_deletion_ledger_resource", "resource_type", "resource_id"),
        Index("ix_deletion_ledger_request_created", "deletion_request_id", "created_at"),
    )

    id: UUID = Field(default_factory=uuid4, primary_key=True)

    resource_type: str = Field(max_length=30)  # ResourceType value
    resource_id: UUID
    tenant_id: UUID = Field(index=True)
    deletion_request_id: UUID | None = Field(default=None)

    from_status: str = Field(max_length=20)
    to_status: str = Field(max_length=20)

    actor_id: UUID
    actor_roles: list[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    reason: str | None = Field(default=None, max_length=1000)
    correlation_id: str | None = Field(default=None, max_length=36)
    details: dict[str, Any] | None = Field(default=None, sa_column=Column(JSON, nullable=True))

    created_at: datetime = Field(default_factory=utc_now)
