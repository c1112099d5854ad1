"""
Temporal activities: thin wrappers delegating to the service layer.

Activities are where the quote's side-effects happen (routing and geocoding
calls). They run outside the deterministic workflow sandbox, so the random
distance estimate and HTTP calls are allowed here.

None of these raise for collaborator outages: the services degrade to tagged
defaults, so Temporal retries only cover genuine worker-side failures.
"""

import logging

from temporalio import activity

from trip_pricing.domain.models import (
    DeadMileageInput,
    DistanceInput,
    DistanceResult,
    JurisdictionInfo,
    JurisdictionInput,
)
from trip_pricing.services.factory import ServiceFactory

logger = logging.getLogger(__name__)


@activity.defn
async def resolve_distance(input: DistanceInput) -> DistanceResult:
    """Miles and duration for the trip via DistanceResolver."""
    logger.info("Activity resolve_distance started for %r -> %r", input.origin, input.destination)
    result = await ServiceFactory.get_distance_resolver().resolve(input.origin, input.destination, input.precomputed)
    logger.info("Activity resolve_distance completed: %.2f mi (%s)", result.miles, result.status.value)
    return result


@activity.defn
async def classify_jurisdiction(input: JurisdictionInput) -> JurisdictionInfo:
    logger.info("Activity classify_jurisdiction started for %r -> %r", input.origin, input.destination)
    result = await ServiceFactory.get_jurisdiction_classifier().classify(input.origin, input.destination)
    logger.info("Activity classify_jurisdiction completed: %s", result.status.value)
    return result


@activity.defn
async def resolve_dead_mileage(input: DeadMileageInput) -> float:
    """Office <-> trip miles; only scheduled for trips 2+ counties out."""
    logger.info("Activity resolve_dead_mileage started for %r", input.pickup)
    return await ServiceFactory.get_distance_resolver().resolve_dead_mileage(
        input.pickup,
        input.destination,
        input.round_trip,
        input.office_address,
    )
