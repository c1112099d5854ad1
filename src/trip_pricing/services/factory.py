"""
Simple factory for service singletons.

Activities and the CLI call `ServiceFactory.get_*()` instead of building
services themselves, so collaborator wiring (API keys, timeouts) lives in one
place. Tests swap implementations by calling `ServiceFactory.reset()` and
assigning the class-level cache directly.

Without an OpenRouteService key no router or geocoder is built; distances are
then estimated and jurisdictions default, both tagged on the quote.
"""

from trip_pricing.facade import PricingFacade
from trip_pricing.services.distance import DistanceResolver
from trip_pricing.services.jurisdiction import JurisdictionClassifier
from trip_pricing.services.openrouteservice import OpenRouteServiceClient
from trip_pricing.settings import Settings, get_settings


class ServiceFactory:
    """Lazily creates and caches service instances (class-level singletons)."""

    _settings: Settings | None = None
    _ors: OpenRouteServiceClient | None = None
    _distance: DistanceResolver | None = None
    _jurisdiction: JurisdictionClassifier | None = None
    _facade: PricingFacade | None = None

    @classmethod
    def configure(cls, settings: Settings) -> None:
        cls.reset()
        cls._settings = settings

    @classmethod
    def reset(cls) -> None:
        cls._settings = None
        cls._ors = None
        cls._distance = None
        cls._jurisdiction = None
        cls._facade = None

    @classmethod
    def get_settings(cls) -> Settings:
        if cls._settings is None:
            cls._settings = get_settings()
        return cls._settings

    @classmethod
    def get_openrouteservice(cls) -> OpenRouteServiceClient | None:
        settings = cls.get_settings()
        if cls._ors is None and settings.openrouteservice_api_key:
            cls._ors = OpenRouteServiceClient(
                settings.openrouteservice_api_key,
                base_url=settings.openrouteservice_base_url,
                timeout=settings.collaborator_timeout_seconds,
            )
        return cls._ors

    @classmethod
    def get_distance_resolver(cls) -> DistanceResolver:
        if cls._distance is None:
            cls._distance = DistanceResolver(
                router=cls.get_openrouteservice(),
                timeout=cls.get_settings().collaborator_timeout_seconds,
            )
        return cls._distance

    @classmethod
    def get_jurisdiction_classifier(cls) -> JurisdictionClassifier:
        if cls._jurisdiction is None:
            settings = cls.get_settings()
            cls._jurisdiction = JurisdictionClassifier(
                settings.rates.primary_county,
                geocoder=cls.get_openrouteservice(),
                timeout=settings.collaborator_timeout_seconds,
            )
        return cls._jurisdiction

    @classmethod
    def get_pricing_facade(cls) -> PricingFacade:
        if cls._facade is None:
            settings = cls.get_settings()
            cls._facade = PricingFacade(
                cls.get_distance_resolver(),
                cls.get_jurisdiction_classifier(),
                rates=settings.rates,
                tz=settings.tz,
                dead_mileage_enabled=settings.dead_mileage_enabled,
            )
        return cls._facade
