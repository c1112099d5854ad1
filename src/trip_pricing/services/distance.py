"""
Distance resolution service.

Resolves trip mileage from, in order of preference:
  1. a distance the caller already computed (never contacts the router),
  2. the routing collaborator,
  3. a bounded random estimate, so a quote never fails just because routing
     is down. Estimates are tagged ResolutionStatus.ESTIMATED.

Randomness is confined to this service layer; it never runs in the workflow.
"""

import asyncio
import math
import logging
import random
from collections.abc import Mapping
from numbers import Real
from typing import Any, Protocol

from trip_pricing.domain.models import DistanceResult, ResolutionStatus, Route

logger = logging.getLogger(__name__)

ESTIMATE_MIN_MILES = 5.0
ESTIMATE_MAX_MILES = 25.0
ESTIMATE_MINUTES_PER_MILE = 2.5


class Router(Protocol):
    async def route(self, origin: str, destination: str) -> Route: ...


def _field(value: Any, name: str) -> Any:
    if isinstance(value, Mapping):
        return value.get(name)
    return getattr(value, name, None)


def _as_miles(value: Any) -> float | None:
    # bool is a Real subclass but never a distance, and neither is nan or inf
    if isinstance(value, Real) and not isinstance(value, bool) and math.isfinite(value):
        return max(float(value), 0.0)
    return None


def normalize_precomputed(value: Any) -> DistanceResult:
    """Read a caller-supplied distance.

    Accepts a bare number of miles, or a mapping/object with a numeric
    `miles` or `distance` field. Anything else reads as 0 miles.
    """
    miles = _as_miles(value)
    if miles is None:
        miles = _as_miles(_field(value, "miles"))
    if miles is None:
        miles = _as_miles(_field(value, "distance"))
    if miles is None:
        logger.warning("Unrecognized precomputed distance %r; using 0 miles", value)
        miles = 0.0

    duration = _field(value, "duration_text") or _field(value, "duration")
    if isinstance(duration, Mapping):
        duration = duration.get("text")
    return DistanceResult(
        miles=miles,
        duration_text=duration if isinstance(duration, str) else "Unknown",
        status=ResolutionStatus.RESOLVED,
    )


class DistanceResolver:
    """Resolves miles and duration for an origin/destination pair.

    Router calls are bounded by `timeout` seconds; a slow router degrades to
    an estimate instead of blocking the quote.
    """

    def __init__(
        self,
        router: Router | None = None,
        timeout: float = 10.0,
        rng: random.Random | None = None,
    ) -> None:
        self.router = router
        self.timeout = timeout
        self.rng = rng or random.Random()

    def estimate(self) -> DistanceResult:
        miles = round(self.rng.uniform(ESTIMATE_MIN_MILES, ESTIMATE_MAX_MILES), 2)  # noqa: S311
        return DistanceResult(
            miles=miles,
            duration_text=f"~{round(miles * ESTIMATE_MINUTES_PER_MILE)} mins",
            status=ResolutionStatus.ESTIMATED,
        )

    async def _route(self, origin: str, destination: str) -> Route | None:
        if self.router is None:
            return None
        try:
            return await asyncio.wait_for(self.router.route(origin, destination), self.timeout)
        except Exception:
            logger.warning("Routing %r -> %r failed", origin, destination, exc_info=True)
            return None

    async def resolve(self, origin: str, destination: str, precomputed: Any = None) -> DistanceResult:
        if precomputed is not None:
            return normalize_precomputed(precomputed)

        route = await self._route(origin, destination)
        if route is None:
            result = self.estimate()
            logger.warning("Using estimated distance %.2f mi for %r -> %r", result.miles, origin, destination)
            return result
        return DistanceResult(miles=route.miles, duration_text=route.duration_text)

    async def resolve_dead_mileage(self, pickup: str, destination: str, round_trip: bool, office: str) -> float:
        """Unpaid miles driven between the office and the trip.

        One way:    office -> pickup, then destination -> office.
        Round trip: office -> pickup, and pickup -> office after the return leg.
        A segment that cannot be routed counts as 0 miles.
        """
        to_pickup = await self._route(office, pickup)
        outbound = to_pickup.miles if to_pickup else 0.0
        if round_trip:
            return round(outbound * 2, 2)
        from_destination = await self._route(destination, office)
        inbound = from_destination.miles if from_destination else 0.0
        return round(outbound + inbound, 2)
