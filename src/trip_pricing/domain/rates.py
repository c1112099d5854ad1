"""
Rate table and money helpers.

The rate table is an immutable value injected into FareComposer and
PricingFacade at construction. A new tariff is a new RateTable instance, so
historical quotes can be reproduced by pricing against the table that was in
force at the time.

All amounts are integer US cents. Fractional amounts (miles x rate,
subtotal x discount) are rounded half-up to whole cents exactly once, when
the line item is created.
"""

from decimal import ROUND_HALF_UP, Decimal

from pydantic import BaseModel, ConfigDict, Field, model_validator

CENT = Decimal("0.01")


def round_cents(value: Decimal) -> int:
    """Round a fractional cent amount half-up to whole cents."""
    return int(value.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def cents_to_dollars(cents: int) -> Decimal:
    return (Decimal(cents) / 100).quantize(CENT)


def format_usd(cents: int) -> str:
    """Format cents as US currency, e.g. 12345 -> "$123.45"."""
    sign = "-" if cents < 0 else ""
    return f"{sign}${cents_to_dollars(abs(cents)):,}"


def format_rate(cents: int) -> str:
    """Compact rate for labels: 5000 -> "$50", 325 -> "$3.25"."""
    if cents % 100 == 0:
        return f"${cents // 100}"
    return f"${cents_to_dollars(cents)}"


class RateTable(BaseModel):
    """Tariff for one pricing period.

    Defaults reproduce the current published rates:
        - $50 per leg ($150 bariatric, 300+ lbs; 400+ lbs not accepted)
        - $3/mile inside the primary county, $4/mile outside
        - $4/mile dead mileage when the trip is 2+ counties out
        - $40 weekend/after-hours, $40 emergency, $25 wheelchair rental
        - $50 per county beyond the first, $100 holiday surcharge
        - 20% veteran discount
    """

    model_config = ConfigDict(frozen=True)

    version: str = "2025-08"

    base_per_leg_cents: int = Field(default=5000, ge=0)
    bariatric_per_leg_cents: int = Field(default=15000, ge=0)
    bariatric_threshold_lbs: float = Field(default=300, gt=0)
    max_weight_lbs: float = Field(default=400, gt=0)

    primary_county: str = "Franklin County"
    primary_per_mile_cents: int = Field(default=300, ge=0)
    outside_per_mile_cents: int = Field(default=400, ge=0)
    dead_mileage_per_mile_cents: int = Field(default=400, ge=0)
    office_address: str = "5050 Blazer Pkwy # 100, Dublin, OH 43017"

    after_hours_cents: int = Field(default=4000, ge=0)
    emergency_cents: int = Field(default=4000, ge=0)
    wheelchair_rental_cents: int = Field(default=2500, ge=0)
    county_surcharge_cents: int = Field(default=5000, ge=0)
    holiday_surcharge_cents: int = Field(default=10000, ge=0)

    veteran_discount_rate: Decimal = Field(default=Decimal("0.20"), ge=0, le=1)

    # Business hours are [day_start_hour, day_end_hour) in the pricing timezone.
    day_start_hour: int = Field(default=8, ge=0, le=23)
    day_end_hour: int = Field(default=18, ge=1, le=24)

    @model_validator(mode="after")
    def _check_bounds(self) -> "RateTable":
        if self.day_start_hour >= self.day_end_hour:
            raise ValueError("day_start_hour must be before day_end_hour")
        if self.bariatric_threshold_lbs >= self.max_weight_lbs:
            raise ValueError("bariatric_threshold_lbs must be below max_weight_lbs")
        return self
