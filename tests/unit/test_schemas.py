"""Tests for request schema validation and the pagination cursor."""

from uuid import uuid4

import pytest
from pydantic import ValidationError

from src.app.schemas.deletion_request import DeletionDecision, DeletionRequestCreate
from src.app.schemas.pagination import decode_cursor, encode_cursor
from src.app.services.deletion_request_service import normalize_reason

pytestmark = pytest.mark.unit


class TestDeletionRequestCreate:
    def test_reason_is_stripped(self):
        body = DeletionRequestCreate(tenant_id=uuid4(), reason="  Closing the business  ")

        assert body.reason == "Closing the business"

    def test_reason_too_short_after_strip(self):
        with pytest.raises(ValidationError, match="at least 10 characters"):
            DeletionRequestCreate(tenant_id=uuid4(), reason="   short     ")

    def test_reason_too_long(self):
        with pytest.raises(ValidationError):
            DeletionRequestCreate(tenant_id=uuid4(), reason="x" * 1001)


class TestDeletionDecision:
    def test_approval_needs_no_reason(self):
        decision = DeletionDecision(approve=True)

        assert decision.rejection_reason is None

    def test_rejection_requires_reason(self):
        with pytest.raises(ValidationError, match="rejection_reason is required"):
            DeletionDecision(approve=False)

    def test_blank_rejection_reason_counts_as_missing(self):
        with pytest.raises(ValidationError):
            DeletionDecision(approve=False, rejection_reason="   ")

    def test_blank_note_becomes_none(self):
        assert DeletionDecision(approve=True, note="  ").note is None


def test_normalize_reason():
    assert normalize_reason("  Moving to another provider ") == "Moving to another provider"
    with pytest.raises(ValueError):
        normalize_reason("tiny")


class TestCursor:
    def test_round_trip(self):
        value = f"2026-01-01T00:00:00+00:00|{uuid4()}"

        assert decode_cursor(encode_cursor(value)) == value

    def test_garbage_is_rejected(self):
        with pytest.raises(ValueError, match="Invalid cursor"):
            decode_cursor("abc")
