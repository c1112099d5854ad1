"""
CLI client: quotes a trip through Temporal, or in-process with --local.

Usage:
    # Start a quote workflow and print the result:
    trip-quote --pickup "123 Main St, Columbus, OH" \\
        --destination "500 E Main St, Lancaster, OH" \\
        --pickup-time 2025-12-25T19:00

    # Round trip, veteran, with a known distance, without a Temporal server:
    trip-quote --pickup A --destination B --pickup-time 2025-08-20T10:00 \\
        --round-trip --veteran --miles 10 --local
"""

import argparse
import asyncio
import hashlib
import logging
import sys

from temporalio.client import Client
from temporalio.contrib.pydantic import pydantic_data_converter

from trip_pricing.domain.errors import PricingInputError
from trip_pricing.domain.models import Quote, QuoteInput
from trip_pricing.facade import parse_trip
from trip_pricing.services.factory import ServiceFactory
from trip_pricing.workflows import QuoteTripWorkflow


def build_trip(args: argparse.Namespace) -> dict:
    return {
        "pickup_address": args.pickup,
        "destination_address": args.destination,
        "pickup_datetime": args.pickup_time,
        "is_round_trip": args.round_trip,
        "wheelchair_mode": args.wheelchair,
        "additional_passengers": args.passengers,
        "is_emergency": args.emergency,
        "client_category": args.client,
        "is_veteran": args.veteran,
        "client_weight_lbs": args.weight,
        "precomputed_distance": args.miles,
    }


async def run_client(args: argparse.Namespace) -> Quote:
    settings = ServiceFactory.get_settings()
    logging.basicConfig(level=settings.log_level, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")
    logger = logging.getLogger(__name__)

    trip = parse_trip(build_trip(args))

    if args.local:
        logger.info("Quoting in-process")
        return await ServiceFactory.get_pricing_facade().quote(trip)

    client = await Client.connect(settings.temporal_address, data_converter=pydantic_data_converter)
    digest = hashlib.sha256(trip.model_dump_json().encode()).hexdigest()[:12]
    workflow_id = args.quote_id or f"quote-{digest}"
    logger.info("Starting workflow %s", workflow_id)

    handle = await client.start_workflow(
        QuoteTripWorkflow.run,
        QuoteInput(
            trip=trip,
            rates=settings.rates,
            timezone=settings.timezone,
            dead_mileage_enabled=settings.dead_mileage_enabled,
        ),
        id=workflow_id,
        task_queue=settings.task_queue,
    )
    if args.query:
        logger.info("Query result: %s", await handle.query(QuoteTripWorkflow.get_status))
    return await handle.result()


def main() -> None:
    parser = argparse.ArgumentParser(description="Quote a medical transport trip")
    parser.add_argument("--pickup", required=True, help="Pickup address")
    parser.add_argument("--destination", required=True, help="Destination address")
    parser.add_argument("--pickup-time", required=True, help="ISO pickup datetime, e.g. 2025-08-20T10:00")
    parser.add_argument("--round-trip", action="store_true")
    parser.add_argument("--wheelchair", choices=["none", "personal", "provided"], default="none")
    parser.add_argument("--passengers", type=int, default=0, help="Additional passengers")
    parser.add_argument("--emergency", action="store_true")
    parser.add_argument("--client", choices=["individual", "facility"], default="facility")
    parser.add_argument("--veteran", action="store_true")
    parser.add_argument("--weight", type=float, default=None, help="Client weight in lbs")
    parser.add_argument("--miles", type=float, default=None, help="Known one-way distance; skips routing")
    parser.add_argument("--local", action="store_true", help="Price in-process instead of via Temporal")
    parser.add_argument("--quote-id", default=None, help="Workflow id (defaults to a hash of the trip)")
    parser.add_argument("--query", action="store_true", help="Query workflow status once after starting")
    args = parser.parse_args()

    try:
        quote = asyncio.run(run_client(args))
    except PricingInputError as e:
        sys.exit(f"error: {e}")
    print(quote.model_dump_json(indent=2))


if __name__ == "__main__":
    main()
