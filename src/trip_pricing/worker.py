"""
Temporal worker: polls the trip-quotes task queue.

Registers QuoteTripWorkflow and the three collaborator activities. Services
used by the activities are built by ServiceFactory from Settings, so the
worker needs TRIP_PRICING_OPENROUTESERVICE_API_KEY to produce real distances
and counties; without it quotes still complete with estimated/default values.

Run with:
    trip-quote-worker
    python -m trip_pricing.worker
"""

import asyncio
import logging

from temporalio.client import Client

# The same data_converter must be used on both the worker AND the client.
from temporalio.contrib.pydantic import pydantic_data_converter
from temporalio.worker import Worker

from trip_pricing.activities import classify_jurisdiction, resolve_dead_mileage, resolve_distance
from trip_pricing.services.factory import ServiceFactory
from trip_pricing.workflows import QuoteTripWorkflow


async def run_worker() -> None:
    settings = ServiceFactory.get_settings()
    logging.basicConfig(level=settings.log_level, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")
    logger = logging.getLogger(__name__)

    client = await Client.connect(settings.temporal_address, data_converter=pydantic_data_converter)
    logger.info("Connected to Temporal at %s, starting worker on queue %r", settings.temporal_address, settings.task_queue)
    if ServiceFactory.get_openrouteservice() is None:
        logger.warning("No OpenRouteService key configured; distances will be estimated")

    worker = Worker(
        client,
        task_queue=settings.task_queue,
        workflows=[QuoteTripWorkflow],
        activities=[resolve_distance, classify_jurisdiction, resolve_dead_mileage],
    )
    await worker.run()


def main() -> None:
    asyncio.run(run_worker())


if __name__ == "__main__":
    main()
