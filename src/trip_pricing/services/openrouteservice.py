"""
OpenRouteService adapter: driving distance and county lookup over HTTP.

Implements both collaborator protocols used by the pricing core:
  - `route(origin, destination) -> Route`           (Router)
  - `resolve_administrative_area(address) -> str`   (Geocoder)

Steps for a route:
  1. Geocode both addresses via ORS /geocode/search.
  2. Request /v2/directions/driving-car for the pair.
  3. Convert meters to miles and seconds to a "N mins" string.

Errors surface as CollaboratorError; callers decide how to degrade.
"""

import logging

import httpx

from trip_pricing.domain.errors import CollaboratorError
from trip_pricing.domain.models import Route

logger = logging.getLogger(__name__)

METERS_PER_MILE = 1609.34


def _coordinates(feature: dict, address: str) -> list:
    try:
        return feature["geometry"]["coordinates"]
    except (KeyError, TypeError) as e:
        raise CollaboratorError(f"Geocoding match for {address!r} has no coordinates") from e


class OpenRouteServiceClient:
    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.openrouteservice.org",
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not api_key:
            raise ValueError("OpenRouteService API key is required")
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport  # injected in tests (httpx.MockTransport)

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout, transport=self._transport)

    async def _geocode(self, client: httpx.AsyncClient, address: str) -> dict:
        """Return the best ORS geocoding feature for an address."""
        try:
            response = await client.get(
                "/geocode/search",
                params={"api_key": self.api_key, "text": address, "boundary.country": "US", "size": 1},
            )
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise CollaboratorError(f"Error geocoding {address!r}: {e}") from e

        features = data.get("features") or []
        if not features:
            raise CollaboratorError(f"No geocoding match for {address!r}")
        return features[0]

    async def route(self, origin: str, destination: str) -> Route:
        async with self._client() as client:
            start = await self._geocode(client, origin)
            end = await self._geocode(client, destination)

            payload = {
                "coordinates": [
                    _coordinates(start, origin),  # ORS coordinates are [lon, lat]
                    _coordinates(end, destination),
                ],
                "radiuses": [5000, 5000],
            }
            try:
                response = await client.post(
                    "/v2/directions/driving-car",
                    headers={"Authorization": self.api_key, "Content-Type": "application/json"},
                    json=payload,
                )
                response.raise_for_status()
                data = response.json()
            except (httpx.HTTPError, ValueError) as e:
                raise CollaboratorError(f"OpenRouteService directions error: {e}") from e

        routes = data.get("routes")
        if not routes:
            raise CollaboratorError(f"OpenRouteService returned no route: {data}")

        try:
            summary = routes[0]["summary"]
            miles = round(float(summary["distance"]) / METERS_PER_MILE, 2)
            minutes = round(float(summary.get("duration") or 0) / 60)
            route = Route(miles=miles, duration_text=f"{minutes} mins")
        except (KeyError, IndexError, TypeError, ValueError, AttributeError, OverflowError) as e:
            raise CollaboratorError(f"Malformed OpenRouteService route: {routes!r}") from e
        logger.debug("Routed %r -> %r: %.2f mi, %d mins", origin, destination, miles, minutes)
        return route

    async def resolve_administrative_area(self, address: str) -> str | None:
        """County name for an address, or None when ORS does not know it."""
        async with self._client() as client:
            feature = await self._geocode(client, address)
        return feature.get("properties", {}).get("county")
