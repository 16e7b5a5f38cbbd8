"""Tests for progress snapshots and the errors built from them."""

from uuid import uuid4

import pytest

from src.app.orchestration.errors import (
    ActiveRequestExists,
    CascadeFailure,
    InvalidTransition,
    PartialCascadeFailure,
    PreconditionNotMet,
    ResourceNotFound,
    UpstreamUnavailable,
)
from src.app.orchestration.progress import BuildingTargetsStatus, TenantProgress

pytestmark = pytest.mark.unit


class TestBuildingTargetsStatus:
    def test_empty_building_is_ready(self):
        assert BuildingTargetsStatus(uuid4(), 0, 0).units_ready

    def test_ready_only_when_every_unit_is_inactive(self):
        assert not BuildingTargetsStatus(uuid4(), 10, 9).units_ready
        assert BuildingTargetsStatus(uuid4(), 10, 10).units_ready

    def test_describe(self):
        assert BuildingTargetsStatus(uuid4(), 10, 7).describe() == "3 of 10 units still active"


class TestTenantProgress:
    def test_tenant_without_buildings_is_ready(self):
        progress = TenantProgress(uuid4(), 0, 0, 0, 0)

        assert progress.buildings_ready
        assert progress.all_targets_ready

    def test_buildings_gate_ignores_unit_counts(self):
        # Archived buildings may still hold units that were reactivated
        progress = TenantProgress(uuid4(), 2, 2, 5, 4)

        assert progress.buildings_ready
        assert not progress.units_ready
        assert not progress.all_targets_ready

    def test_as_dict_includes_derived_flags(self):
        tenant_id = uuid4()

        data = TenantProgress(tenant_id, 3, 1, 0, 0).as_dict()

        assert data == {
            "tenant_id": tenant_id,
            "buildings_total": 3,
            "buildings_archived": 1,
            "units_total": 0,
            "units_inactive": 0,
            "buildings_ready": False,
            "units_ready": True,
            "all_targets_ready": False,
        }

    def test_describe(self):
        assert TenantProgress(uuid4(), 5, 2, 0, 0).describe() == "3 of 5 buildings not yet archived"


class TestErrors:
    def test_precondition_carries_counts(self):
        status = BuildingTargetsStatus(uuid4(), 10, 7)

        error = PreconditionNotMet(status)

        assert error.message == "3 of 10 units still active"
        assert error.status_code == 409
        assert error.extra()["status"]["inactive_units"] == 7

    def test_invalid_transition(self):
        error = InvalidTransition("CANCELED", "APPROVED")

        assert error.message == "Cannot move from CANCELED to APPROVED"
        assert error.extra() == {"current_status": "CANCELED", "target_status": "APPROVED"}

    def test_not_found_names_the_resource(self):
        resource_id = uuid4()

        error = ResourceNotFound("deletion_request", resource_id)

        assert error.message == f"Deletion request {resource_id} not found"
        assert error.status_code == 404

    def test_upstream_unavailable_is_retryable(self):
        error = UpstreamUnavailable("Unit directory", "connection refused")

        assert error.status_code == 503
        assert error.message == "Unit directory is unavailable: connection refused. Retry shortly"

    def test_active_request_exists_points_at_blocker(self):
        request_id = uuid4()

        error = ActiveRequestExists(uuid4(), request_id, "APPROVED")

        assert "APPROVED" in error.message
        assert error.extra() == {"deletion_request_id": str(request_id)}

    def test_partial_cascade_failure_lists_buildings(self):
        failures = [CascadeFailure(uuid4(), "timeout", "Building did not respond within 5s")]

        error = PartialCascadeFailure(failures)

        assert error.status_code == 502
        assert error.extra()["failures"][0]["error"] == "timeout"
