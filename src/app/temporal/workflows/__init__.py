"""Temporal Workflows - Re-exports for worker registration."""

from src.app.temporal.workflows.deletion_reconciliation import DeletionReconciliationWorkflow

__all__ = ["DeletionReconciliationWorkflow"]
