"""Tests for actor authorization rules and token claim parsing."""

from uuid import uuid4

import pytest
from fastapi import HTTPException

from src.app.api.dependencies.auth import actor_from_claims
from src.app.core.security import create_access_token, decode_token
from src.app.models import BuildingStatus, DeletionRequestStatus
from src.app.orchestration.actors import (
    SYSTEM_ACTOR,
    authorize_building_transition,
    authorize_request_creation,
    authorize_request_transition,
    authorize_view,
)
from src.app.orchestration.errors import Unauthorized

pytestmark = pytest.mark.unit


class TestRequestRules:
    def test_only_owner_creates(self, owner, operator, admin, tenant_id):
        authorize_request_creation(owner, tenant_id)
        for actor in (operator, admin):
            with pytest.raises(Unauthorized):
                authorize_request_creation(actor, tenant_id)

    def test_owner_of_other_tenant_cannot_create(self, outsider, tenant_id):
        with pytest.raises(Unauthorized):
            authorize_request_creation(outsider, tenant_id)

    @pytest.mark.parametrize(
        "target", [DeletionRequestStatus.APPROVED, DeletionRequestStatus.REJECTED]
    )
    def test_only_admin_decides(self, owner, admin, tenant_id, target):
        authorize_request_transition(admin, tenant_id, target)
        with pytest.raises(Unauthorized):
            authorize_request_transition(owner, tenant_id, target)
        with pytest.raises(Unauthorized):
            authorize_request_transition(SYSTEM_ACTOR, tenant_id, target)

    def test_owner_cancels(self, owner, admin, tenant_id):
        authorize_request_transition(owner, tenant_id, DeletionRequestStatus.CANCELED)
        with pytest.raises(Unauthorized):
            authorize_request_transition(admin, tenant_id, DeletionRequestStatus.CANCELED)

    def test_completion_by_system_or_admin(self, owner, admin, tenant_id):
        authorize_request_transition(SYSTEM_ACTOR, tenant_id, DeletionRequestStatus.COMPLETED)
        authorize_request_transition(admin, tenant_id, DeletionRequestStatus.COMPLETED)
        with pytest.raises(Unauthorized):
            authorize_request_transition(owner, tenant_id, DeletionRequestStatus.COMPLETED)

    def test_nobody_moves_back_to_pending(self, admin, tenant_id):
        with pytest.raises(Unauthorized):
            authorize_request_transition(admin, tenant_id, DeletionRequestStatus.PENDING)


class TestBuildingRules:
    def test_pending_deletion_is_system_only(self, owner, admin, tenant_id):
        authorize_building_transition(SYSTEM_ACTOR, tenant_id, BuildingStatus.PENDING_DELETION)
        for actor in (owner, admin):
            with pytest.raises(Unauthorized):
                authorize_building_transition(actor, tenant_id, BuildingStatus.PENDING_DELETION)

    def test_archive_by_tenant_staff_or_admin(self, owner, operator, admin, tenant_id):
        for actor in (owner, operator, admin):
            authorize_building_transition(actor, tenant_id, BuildingStatus.ARCHIVED)

    def test_archive_denied_to_other_tenants(self, outsider, tenant_id):
        with pytest.raises(Unauthorized):
            authorize_building_transition(outsider, tenant_id, BuildingStatus.ARCHIVED)


def test_view_rules(owner, operator, admin, outsider, tenant_id):
    for actor in (owner, operator, admin, SYSTEM_ACTOR):
        authorize_view(actor, tenant_id)
    with pytest.raises(Unauthorized):
        authorize_view(outsider, tenant_id)


class TestClaims:
    def test_round_trip_through_token(self, owner):
        token = create_access_token(owner.id, owner.roles, tenant_id=owner.tenant_id)

        actor = actor_from_claims(decode_token(token))

        assert actor == owner

    def test_system_role_is_stripped(self):
        actor = actor_from_claims(
            {"type": "access", "sub": str(uuid4()), "roles": ["system", "admin"]}
        )

        assert not actor.is_system
        assert actor.is_admin
        assert actor.tenant_id is None

    @pytest.mark.parametrize(
        "claims",
        [
            {"type": "refresh", "sub": str(uuid4())},
            {"type": "access", "sub": "not-a-uuid"},
            {"type": "access", "sub": str(uuid4()), "tenant_id": "nope"},
            {"type": "access", "sub": str(uuid4()), "roles": "admin"},
        ],
    )
    def test_malformed_claims_are_401(self, claims):
        with pytest.raises(HTTPException) as exc_info:
            actor_from_claims(claims)

        assert exc_info.value.status_code == 401

    def test_tampered_token_does_not_decode(self, owner):
        token = create_access_token(owner.id, owner.roles)

        assert decode_token(token[:-2] + "xx") is None
