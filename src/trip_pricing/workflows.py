"""
Temporal workflow: QuoteTripWorkflow.

Durable counterpart of PricingFacade. The two collaborator lookups run as
activities; everything after them (holiday classification, composition,
summary) is deterministic and runs in-workflow through
domain.quote.assemble_quote, the same code PricingFacade uses.

Key constraints inside a workflow:
  - Must be deterministic: no I/O, no randomness, no system clock.
  - Rates and timezone arrive in QuoteInput; the workflow never reads
    settings or environment variables.
  - Use `workflow.logger` instead of the stdlib `logging` module.
"""

import asyncio
from datetime import timedelta

from temporalio import workflow
from temporalio.common import RetryPolicy
from temporalio.exceptions import ApplicationError

# Pydantic, zoneinfo and our own modules are passed through the sandbox's
# import interception; they are only used for modelling and pure computation.
with workflow.unsafe.imports_passed_through():
    from zoneinfo import ZoneInfo

    from trip_pricing.activities import classify_jurisdiction, resolve_dead_mileage, resolve_distance
    from trip_pricing.domain.errors import PricingInputError
    from trip_pricing.domain.holidays import CalendarRuleEngine
    from trip_pricing.domain.models import (
        DeadMileageInput,
        DistanceInput,
        JurisdictionInput,
        Quote,
        QuoteInput,
        QuoteState,
    )
    from trip_pricing.domain.pricing import FareComposer
    from trip_pricing.domain.quote import assemble_quote


@workflow.defn
class QuoteTripWorkflow:
    """Prices one trip.

    Execution flow:
        1. resolve_distance + classify_jurisdiction activities (concurrent)
        2. resolve_dead_mileage activity, only for trips 2+ counties out
        3. Holiday classification + fare composition (in-workflow)

    Supports:
        - **Query** `get_status`: which steps finished and the total so far.
    """

    def __init__(self) -> None:
        self.state = QuoteState()

    @workflow.query
    def get_status(self) -> dict:
        return self.state.model_dump()

    @workflow.run
    async def run(self, input: QuoteInput) -> Quote:
        trip = input.trip
        rates = input.rates
        # Reading the tz database touches the filesystem; the result is deterministic.
        with workflow.unsafe.sandbox_unrestricted():
            tz = ZoneInfo(input.timezone)
        composer = FareComposer(rates, tz)
        # Fail fast on inputs no retry can fix.
        try:
            composer.per_leg_cents(trip)
        except PricingInputError as e:
            raise ApplicationError(str(e), type="PricingInputError", non_retryable=True) from e

        # Collaborator outages are absorbed by the services, so retries here
        # only cover worker crashes and similar infrastructure failures.
        activity_opts = {
            "start_to_close_timeout": timedelta(seconds=30),
            "retry_policy": RetryPolicy(
                maximum_attempts=3,
                initial_interval=timedelta(seconds=1),
                backoff_coefficient=2.0,
            ),
        }

        workflow.logger.info("Quoting trip %r -> %r", trip.pickup_address, trip.destination_address)

        distance, jurisdiction = await asyncio.gather(
            workflow.execute_activity(
                resolve_distance,
                DistanceInput(
                    origin=trip.pickup_address,
                    destination=trip.destination_address,
                    precomputed=trip.precomputed_distance,
                ),
                **activity_opts,
            ),
            workflow.execute_activity(
                classify_jurisdiction,
                JurisdictionInput(origin=trip.pickup_address, destination=trip.destination_address),
                **activity_opts,
            ),
        )
        self.state.distance_resolved = True
        self.state.jurisdiction_resolved = True

        dead_mileage = 0.0
        if input.dead_mileage_enabled and jurisdiction.counties_crossed >= 2:
            dead_mileage = await workflow.execute_activity(
                resolve_dead_mileage,
                DeadMileageInput(
                    pickup=trip.pickup_address,
                    destination=trip.destination_address,
                    round_trip=trip.is_round_trip,
                    office_address=rates.office_address,
                ),
                **activity_opts,
            )
            self.state.dead_mileage_resolved = True

        quote = assemble_quote(
            trip,
            distance,
            jurisdiction,
            composer=composer,
            calendar=CalendarRuleEngine(rates.holiday_surcharge_cents),
            tz=tz,
            primary_county=rates.primary_county,
            dead_mileage_miles=dead_mileage,
        )
        self.state.total_cents = quote.breakdown.total_cents
        workflow.logger.info("Trip quoted at %s", quote.summary.estimated_total)
        return quote
