"""Tests for the deletion reconciliation activities."""

import pytest
from temporalio.testing import ActivityEnvironment

from src.app.temporal.activities import (
    ReconcileInput,
    list_approved_requests,
    reconcile_deletion_request,
)
from src.app.temporal.activities import reconcile as reconcile_module
from tests.helpers import create_building, get_building, get_request, set_units_active

pytestmark = pytest.mark.integration


@pytest.fixture(autouse=True)
def use_test_database(monkeypatch, session_factory):
    monkeypatch.setattr(reconcile_module, "get_session_factory", lambda: session_factory)


async def test_list_approved_requests(session_factory, approved_request, tenant_id):
    await create_building(session_factory, tenant_id, active_units=1)
    outcome = await approved_request()

    ids = await ActivityEnvironment().run(list_approved_requests)

    assert ids == [str(outcome.request.id)]


async def test_reconcile_retries_failed_fan_out_and_completes(
    session_factory, buildings_directory, approved_request, tenant_id
):
    stuck = await create_building(session_factory, tenant_id)
    buildings_directory.failing_updates.add(stuck.id)
    outcome = await approved_request()
    assert len(outcome.cascade_failures) == 1

    # The activity builds its own directories, which see no injected faults
    result = await ActivityEnvironment().run(
        reconcile_deletion_request, ReconcileInput(deletion_request_id=str(outcome.request.id))
    )

    assert result.cascade_failures == 0
    assert not result.completed
    assert result.status == "APPROVED"
    assert (await get_building(session_factory, stuck.id)).status == "PENDING_DELETION"


async def test_reconcile_completes_when_every_building_is_archived(
    session_factory, building_service, approved_request, tenant_id, operator
):
    building = await create_building(session_factory, tenant_id, active_units=1)
    outcome = await approved_request()
    await set_units_active(session_factory, building.id, active=False)
    await building_service.complete(operator, building.id)
    assert (await get_request(session_factory, outcome.request.id)).status == "APPROVED"

    result = await ActivityEnvironment().run(
        reconcile_deletion_request, ReconcileInput(deletion_request_id=str(outcome.request.id))
    )

    assert result.completed
    assert result.status == "COMPLETED"
    assert (await get_request(session_factory, outcome.request.id)).status == "COMPLETED"


async def test_reconcile_skips_requests_that_are_not_approved(deletion_service, owner, tenant_id):
    request, _ = await deletion_service.create(owner, tenant_id, "Closing down all properties")

    result = await ActivityEnvironment().run(
        reconcile_deletion_request, ReconcileInput(deletion_request_id=str(request.id))
    )

    assert result.status == "PENDING"
    assert not result.completed
