"""Tenant deletion request model."""

from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import Index, text
from sqlmodel import Field, SQLModel

from src.app.models.base import utc_now
from src.app.models.enums import DeletionRequestStatus

# Backstop for the single-active-request-per-tenant rule
_ACTIVE_PREDICATE = text("status IN ('PENDING', 'APPROVED')")


class DeletionRequest(SQLModel, table=True):
    """Request to retire a whole tenant, decided by a platform admin."""

    __tablename__ = "deletion_requests"
    __table_args__ = (
        Index("ix_deletion_requests_tenant_created", "tenant_id", "created_at"),
        Index(
            "uq_deletion_requests_active_tenant",
            "tenant_id",
            unique=True,
            postgresql_where=_ACTIVE_PREDICATE,
            sqlite_where=_ACTIVE_PREDICATE,
        ),
    )

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    tenant_id: UUID = Field(index=True)
    requested_by: UUID = Field(index=True)
    reason: str = Field(max_length=1000)
    status: str = Field(default=DeletionRequestStatus.PENDING.value, max_length=20, index=True)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    # Admin decision
    decided_by: UUID | None = Field(default=None)
    decided_at: datetime | None = Field(default=None)
    rejection_reason: str | None = Field(default=None, max_length=1000)
    note: str | None = Field(default=None, max_length=1000)

    completed_at: datetime | None = Field(default=None)
    canceled_at: datetime | None = Field(default=None)

    @property
    def status_enum(self) -> DeletionRequestStatus:
        """Get status as DeletionRequestStatus enum."""
        return DeletionRequestStatus(self.status)

    @property
    def is_terminal(self) -> bool:
        return self.status_enum.is_terminal
