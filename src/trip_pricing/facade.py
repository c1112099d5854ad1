"""
PricingFacade: the in-process async entry point for quoting a trip.

Execution flow:
    1. Validate the request (the only step that can raise)
    2. Distance + jurisdiction, concurrently        -> collaborators
    3. Dead mileage, for trips 2+ counties out      -> routing collaborator
    4. Holiday classification + fare composition    -> pure, see domain.quote

Collaborator outages degrade to tagged defaults and never raise. The same
quote can be produced durably through QuoteTripWorkflow; both paths share
domain.quote.assemble_quote.
"""

import asyncio
import logging
from collections.abc import Mapping
from datetime import tzinfo
from typing import Any

from pydantic import ValidationError

from trip_pricing.domain.errors import PricingInputError
from trip_pricing.domain.holidays import CalendarRuleEngine
from trip_pricing.domain.models import Quote, TripRequest
from trip_pricing.domain.pricing import FareComposer, FareStrategy
from trip_pricing.domain.quote import assemble_quote
from trip_pricing.domain.rates import RateTable
from trip_pricing.services.distance import DistanceResolver
from trip_pricing.services.jurisdiction import JurisdictionClassifier

logger = logging.getLogger(__name__)


def parse_trip(trip: TripRequest | Mapping[str, Any]) -> TripRequest:
    """Validate a raw request, turning Pydantic errors into PricingInputError."""
    if isinstance(trip, TripRequest):
        return trip
    try:
        return TripRequest.model_validate(trip)
    except ValidationError as e:
        raise PricingInputError(f"Invalid trip request: {e}") from e


class PricingFacade:
    def __init__(
        self,
        distance_resolver: DistanceResolver,
        jurisdiction_classifier: JurisdictionClassifier,
        *,
        rates: RateTable,
        tz: tzinfo,
        composer: FareStrategy | None = None,
        calendar: CalendarRuleEngine | None = None,
        dead_mileage_enabled: bool = True,
    ) -> None:
        self.distance_resolver = distance_resolver
        self.jurisdiction_classifier = jurisdiction_classifier
        self.rates = rates
        self.tz = tz
        self.composer: FareStrategy = composer or FareComposer(rates, tz)
        self.calendar = calendar or CalendarRuleEngine(rates.holiday_surcharge_cents)
        self.dead_mileage_enabled = dead_mileage_enabled

    async def quote(self, trip: TripRequest | Mapping[str, Any]) -> Quote:
        trip = parse_trip(trip)
        if trip.client_weight_lbs is not None and trip.client_weight_lbs >= self.rates.max_weight_lbs:
            # Reject before spending any collaborator calls on it.
            raise PricingInputError(
                f"Client weight {trip.client_weight_lbs:g} lbs exceeds the {self.rates.max_weight_lbs:g} lbs limit"
            )

        logger.info("Quoting %r -> %r at %s", trip.pickup_address, trip.destination_address, trip.pickup_datetime)
        distance, jurisdiction = await asyncio.gather(
            self.distance_resolver.resolve(trip.pickup_address, trip.destination_address, trip.precomputed_distance),
            self.jurisdiction_classifier.classify(trip.pickup_address, trip.destination_address),
        )

        dead_mileage = 0.0
        if self.dead_mileage_enabled and jurisdiction.counties_crossed >= 2:
            dead_mileage = await self.distance_resolver.resolve_dead_mileage(
                trip.pickup_address,
                trip.destination_address,
                trip.is_round_trip,
                self.rates.office_address,
            )

        quote = assemble_quote(
            trip,
            distance,
            jurisdiction,
            composer=self.composer,
            calendar=self.calendar,
            tz=self.tz,
            primary_county=self.rates.primary_county,
            dead_mileage_miles=dead_mileage,
        )
        logger.info("Quoted %s (%s)", quote.summary.estimated_total, quote.summary.trip_type)
        return quote
