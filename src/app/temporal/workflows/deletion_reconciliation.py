"""
Deletion Reconciliation Workflow.

Periodic pass over every APPROVED deletion request:
1. Re-run the approval fan-out (buildings left ACTIVE by a failed cascade)
2. Complete the request once every building is ARCHIVED

Designed to run on a schedule (see `reconcile_schedule`). One request failing
does not stop the others; it is picked up again on the next run.
"""

from datetime import timedelta

from temporalio import workflow
from temporalio.common import RetryPolicy
from temporalio.exceptions import ActivityError

with workflow.unsafe.imports_passed_through():
    from src.app.temporal.activities import (
        ReconcileInput,
        list_approved_requests,
        reconcile_deletion_request,
    )

ACTIVITY_RETRY = RetryPolicy(
    maximum_attempts=3,
    initial_interval=timedelta(seconds=2),
)


@workflow.defn
class DeletionReconciliationWorkflow:
    @workflow.run
    async def run(self) -> dict[str, int]:
        """
        Reconcile all APPROVED deletion requests.

        Returns:
            dict with counts: {"checked", "completed", "with_failures", "errored"}
        """
        request_ids = await workflow.execute_activity(
            list_approved_requests,
            start_to_close_timeout=timedelta(minutes=1),
            retry_policy=ACTIVITY_RETRY,
        )

        result = {"checked": len(request_ids), "completed": 0, "with_failures": 0, "errored": 0}

        for request_id in request_ids:
            try:
                outcome = await workflow.execute_activity(
                    reconcile_deletion_request,
                    ReconcileInput(deletion_request_id=request_id),
                    start_to_close_timeout=timedelta(minutes=5),
                    retry_policy=ACTIVITY_RETRY,
                )
            except ActivityError as e:
                workflow.logger.warning(f"Reconciliation of {request_id} failed: {e}")
                result["errored"] += 1
                continue

            if outcome.completed:
                result["completed"] += 1
            if outcome.cascade_failures:
                result["with_failures"] += 1

        workflow.logger.info(
            f"Reconciliation complete: {result['checked']} checked, "
            f"{result['completed']} completed, {result['with_failures']} with cascade failures, "
            f"{result['errored']} errored"
        )
        return result
