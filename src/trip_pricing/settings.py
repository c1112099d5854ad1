"""Configuration settings for the trip pricing worker and client."""

from zoneinfo import ZoneInfo

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from trip_pricing.domain.models import known_timezone
from trip_pricing.domain.rates import RateTable


class Settings(BaseSettings):
    """Root settings container.

    Every field can be overridden from the environment with the
    TRIP_PRICING_ prefix, nested rate fields with a double underscore, e.g.
    TRIP_PRICING_RATES__HOLIDAY_SURCHARGE_CENTS=12500.
    """

    temporal_address: str = "localhost:7233"
    task_queue: str = "trip-quotes"

    timezone: str = Field(
        default="America/New_York",
        description="IANA timezone all date-dependent rules are evaluated in",
    )
    collaborator_timeout_seconds: float = Field(default=10.0, gt=0)
    dead_mileage_enabled: bool = True

    openrouteservice_api_key: str | None = None
    openrouteservice_base_url: str = "https://api.openrouteservice.org"

    rates: RateTable = Field(default_factory=RateTable)

    log_level: str = Field(default="INFO", description="Logging level")

    model_config = SettingsConfigDict(
        env_prefix="TRIP_PRICING_",
        env_nested_delimiter="__",
        env_file=".env",
        extra="ignore",
    )

    check_timezone = field_validator("timezone")(known_timezone)

    @property
    def tz(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)


def get_settings() -> Settings:
    """Get settings instance."""
    return Settings()
