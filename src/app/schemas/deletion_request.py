"""Deletion request schemas for API request/response."""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field, field_validator, model_validator

from src.app.core.config import get_settings
from src.app.models import DeletionRequestStatus


class DeletionRequestCreate(BaseModel):
    """Schema for requesting deletion of a tenant."""

    tenant_id: UUID
    reason: str = Field(max_length=1000)

    @field_validator("reason")
    @classmethod
    def validate_reason(cls, v: str) -> str:
        v = v.strip()
        min_length = get_settings().deletion_reason_min_length
        if len(v) < min_length:
            raise ValueError(f"Reason must be at least {min_length} characters")
        return v


class DeletionDecision(BaseModel):
    """Admin decision on a PENDING request."""

    approve: bool
    rejection_reason: str | None = Field(default=None, max_length=1000)
    note: str | None = Field(default=None, max_length=1000)

    @field_validator("rejection_reason", "note")
    @classmethod
    def blank_to_none(cls, v: str | None) -> str | None:
        if v is not None:
            v = v.strip()
            if not v:
                return None
        return v

    @model_validator(mode="after")
    def require_rejection_reason(self) -> "DeletionDecision":
        if not self.approve and self.rejection_reason is None:
            raise ValueError("rejection_reason is required when approve is false")
        return self


class DeletionRequestRead(BaseModel):
    id: UUID
    tenant_id: UUID
    requested_by: UUID
    reason: str
    status: DeletionRequestStatus
    created_at: datetime
    updated_at: datetime
    decided_by: UUID | None
    decided_at: datetime | None
    rejection_reason: str | None
    note: str | None
    completed_at: datetime | None
    canceled_at: datetime | None

    model_config = {"from_attributes": True}


class CascadeFailureRead(BaseModel):
    building_id: UUID
    error: str
    message: str

    model_config = {"from_attributes": True}


class DecisionResponse(BaseModel):
    """Result of a decision, including buildings the fan-out could not move.

    A non-empty `cascade_failures` list means the decision itself is durable
    and the cascade can be retried.
    """

    request: DeletionRequestRead
    applied: bool
    cascade_failures: list[CascadeFailureRead] = []


class TenantTargetsStatus(BaseModel):
    """Progress of every building and unit of the tenant being deleted."""

    deletion_request_id: UUID
    request_status: DeletionRequestStatus
    tenant_id: UUID
    buildings_total: int
    buildings_archived: int
    units_total: int
    units_inactive: int
    buildings_ready: bool
    units_ready: bool
    all_targets_ready: bool


class LedgerEntryRead(BaseModel):
    id: UUID
    resource_type: str
    resource_id: UUID
    tenant_id: UUID
    deletion_request_id: UUID | None
    from_status: str
    to_status: str
    actor_id: UUID
    actor_roles: list[str]
    reason: str | None
    correlation_id: str | None
    details: dict[str, Any] | None
    created_at: datetime

    model_config = {"from_attributes": True}
