"""
Jurisdiction classification service.

Decides which mileage rate a trip takes by resolving the county at each end
through a geocoding collaborator. A trip is "in the primary county" only if
BOTH ends are; otherwise the whole trip takes the outside rate.

When either lookup fails the trip is priced as a primary-county trip (the
cheaper outcome) and tagged ResolutionStatus.UNAVAILABLE so the masked
outage stays visible on the quote.
"""

import asyncio
import logging
from typing import Protocol

from trip_pricing.domain.models import JurisdictionInfo, ResolutionStatus

logger = logging.getLogger(__name__)


class Geocoder(Protocol):
    async def resolve_administrative_area(self, address: str) -> str | None: ...


def normalize_county(name: str) -> str:
    """'Franklin', 'franklin county' and 'Franklin County ' compare equal."""
    key = name.strip().casefold()
    if key.endswith(" county"):
        key = key[: -len(" county")].rstrip()
    return key


class JurisdictionClassifier:
    def __init__(self, primary_county: str, geocoder: Geocoder | None = None, timeout: float = 10.0) -> None:
        self.primary_county = primary_county
        self.geocoder = geocoder
        self.timeout = timeout
        self._primary_key = normalize_county(primary_county)

    def is_primary(self, county: str) -> bool:
        return normalize_county(county) == self._primary_key

    async def _lookup(self, address: str) -> str | None:
        if self.geocoder is None:
            return None
        try:
            county = await asyncio.wait_for(self.geocoder.resolve_administrative_area(address), self.timeout)
        except Exception:
            logger.warning("County lookup failed for %r", address, exc_info=True)
            return None
        return county or None

    async def classify(self, origin: str, destination: str) -> JurisdictionInfo:
        origin_county, destination_county = await asyncio.gather(
            self._lookup(origin),
            self._lookup(destination),
        )

        if origin_county is None or destination_county is None:
            logger.warning(
                "County unresolved (origin=%r, destination=%r); defaulting to %s rates",
                origin_county,
                destination_county,
                self.primary_county,
            )
            return JurisdictionInfo(
                in_primary_county=True,
                counties_crossed=0,
                origin_county=origin_county,
                destination_county=destination_county,
                status=ResolutionStatus.UNAVAILABLE,
            )

        outside = {normalize_county(c) for c in (origin_county, destination_county) if not self.is_primary(c)}
        info = JurisdictionInfo(
            in_primary_county=not outside,
            counties_crossed=len(outside),
            origin_county=origin_county,
            destination_county=destination_county,
        )
        logger.info(
            "Jurisdiction %s -> %s: in_primary=%s counties_crossed=%d",
            origin_county,
            destination_county,
            info.in_primary_county,
            info.counties_crossed,
        )
        return info
