"""
Temporal Activities - idempotent steps of the deletion reconciliation.

Every activity routes state changes through the transition engine, so a
retried activity replays safely.
"""

from src.app.temporal.activities.reconcile import (
    ReconcileInput,
    ReconcileOutput,
    list_approved_requests,
    reconcile_deletion_request,
)

__all__ = [
    # Dataclasses
    "ReconcileInput",
    "ReconcileOutput",
    # Activities
    "list_approved_requests",
    "reconcile_deletion_request",
]
