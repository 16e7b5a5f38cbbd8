"""
Temporal Worker - Separate process from API.

Run with:
    python -m src.app.temporal.worker
    python -m src.app.temporal.worker --no-schedule   # Skip schedule registration
"""

import argparse
import asyncio

import uvicorn
from fastapi import FastAPI
from temporalio.client import (
    Client,
    Schedule,
    ScheduleActionStartWorkflow,
    ScheduleAlreadyRunningError,
    ScheduleSpec,
)
from temporalio.worker import Worker

from src.app.core.config import get_settings
from src.app.core.db import dispose_engine
from src.app.core.logging import get_logger, setup_logging
from src.app.temporal.activities import list_approved_requests, reconcile_deletion_request
from src.app.temporal.workflows import DeletionReconciliationWorkflow

logger = get_logger(__name__)

WORKER_HEALTH_PORT = 8001
RECONCILE_SCHEDULE_ID = "deletion-reconciliation"


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Deletion reconciliation worker")
    parser.add_argument(
        "--no-schedule",
        action="store_true",
        help="Do not register the reconciliation schedule on startup",
    )
    return parser.parse_args()


def create_worker(client: Client, task_queue: str) -> Worker:
    """Create the worker for the reconciliation workflow and its activities."""
    return Worker(
        client,
        task_queue=task_queue,
        workflows=[DeletionReconciliationWorkflow],
        activities=[list_approved_requests, reconcile_deletion_request],
        # Reconciliation is sequential per request; a few slots suffice
        max_concurrent_activities=10,
        max_concurrent_workflow_tasks=10,
    )


async def ensure_reconcile_schedule(client: Client, cron: str, task_queue: str) -> None:
    """Register the periodic reconciliation schedule if it does not exist yet."""
    try:
        await client.create_schedule(
            RECONCILE_SCHEDULE_ID,
            Schedule(
                action=ScheduleActionStartWorkflow(
                    DeletionReconciliationWorkflow.run,
                    id=f"{RECONCILE_SCHEDULE_ID}-run",
                    task_queue=task_queue,
                ),
                spec=ScheduleSpec(cron_expressions=[cron]),
            ),
        )
        logger.info("Reconciliation schedule created", cron=cron)
    except ScheduleAlreadyRunningError:
        logger.info("Reconciliation schedule already exists", cron=cron)


async def run_health_server(task_queue: str, port: int = WORKER_HEALTH_PORT) -> None:
    """Run a lightweight health server for K8s probes."""
    health_app = FastAPI(title="Deletion Worker Health")

    @health_app.get("/health")
    async def health() -> dict[str, str]:
        return {
            "status": "healthy",
            "service": "temporal-worker",
            "task_queue": task_queue,
        }

    @health_app.get("/ready")
    async def ready() -> dict[str, str]:
        return {"status": "ready"}

    config = uvicorn.Config(
        health_app,
        host="0.0.0.0",
        port=port,
        log_level="warning",
    )
    server = uvicorn.Server(config)
    logger.info(f"Starting health server on port {port}")
    await server.serve()


async def main() -> None:
    args = parse_args()
    settings = get_settings()
    setup_logging(settings.debug)

    client = await Client.connect(
        settings.temporal_host,
        namespace=settings.temporal_namespace,
    )
    task_queue = settings.temporal_task_queue

    if settings.reconcile_schedule and not args.no_schedule:
        await ensure_reconcile_schedule(client, settings.reconcile_schedule, task_queue)

    logger.info(f"Polling task queue: {task_queue}")
    worker = create_worker(client, task_queue)
    try:
        await asyncio.gather(run_health_server(task_queue), worker.run())
    finally:
        await dispose_engine()


if __name__ == "__main__":
    asyncio.run(main())
