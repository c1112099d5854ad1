"""
Domain models for trip pricing.

All models use Pydantic v2 BaseModel for validation, serialization and
deserialization. Temporal transmits workflow/activity inputs and outputs as
JSON payloads, so every model here must round-trip cleanly through the
pydantic_data_converter configured on both the client and the worker.

Enums inherit from (str, Enum) so they serialize as plain strings in JSON
(e.g. "provided" instead of {"value": "provided"}). Their values are part of
the output contract consumed by billing and reporting, so do not rename them.

Money is always integer US cents. Dollar amounts only appear in computed
presentation fields.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, Field, computed_field, field_validator, model_validator

from trip_pricing.domain.rates import RateTable, cents_to_dollars


def known_timezone(value: str) -> str:
    """Return `value` if it names an IANA timezone, else raise ValueError."""
    try:
        ZoneInfo(value)
    except (ZoneInfoNotFoundError, ValueError, OSError) as e:
        raise ValueError(f"Unknown timezone {value!r}") from e
    return value


class WheelchairMode(str, Enum):
    """Mobility equipment for the trip. Only PROVIDED is billed."""

    NONE = "none"
    PERSONAL = "personal"   # Client brings their own chair
    PROVIDED = "provided"   # We supply a rental chair


class ClientCategory(str, Enum):
    INDIVIDUAL = "individual"
    FACILITY = "facility"


class ResolutionStatus(str, Enum):
    """How a collaborator-derived value was obtained."""

    RESOLVED = "resolved"        # Real data from the collaborator or the caller
    ESTIMATED = "estimated"      # Collaborator unavailable, value is a guess
    UNAVAILABLE = "unavailable"  # Collaborator unavailable, value is a default


class LineCategory(str, Enum):
    BASE = "base"
    CHARGE = "charge"
    PREMIUM = "premium"
    DISCOUNT = "discount"
    TOTAL = "total"


# ── Trip input ───────────────────────────────────────────────────────


class TripRequest(BaseModel):
    """A single trip to be priced.

    `pickup_datetime` may be naive (wall clock in the pricing timezone) or
    timezone-aware (converted into the pricing timezone before any
    date-dependent rule runs).
    """

    pickup_address: str = Field(..., min_length=1)
    destination_address: str = Field(..., min_length=1)
    pickup_datetime: datetime
    is_round_trip: bool = False
    wheelchair_mode: WheelchairMode = WheelchairMode.NONE
    additional_passengers: int = Field(default=0, ge=0)
    is_emergency: bool = False
    client_category: ClientCategory = ClientCategory.FACILITY
    is_veteran: bool = False
    client_weight_lbs: float | None = Field(default=None, gt=0)
    # Bare number, {"miles": ...}, {"distance": ...}; see DistanceResolver.
    precomputed_distance: Any = None

    @property
    def legs(self) -> int:
        return 2 if self.is_round_trip else 1


# ── Collaborator results ─────────────────────────────────────────────


class Route(BaseModel):
    """What a routing collaborator returns for one origin/destination pair."""

    miles: float = Field(..., ge=0, allow_inf_nan=False)
    duration_text: str = "Unknown"


class DistanceResult(BaseModel):
    miles: float = Field(..., ge=0, allow_inf_nan=False)
    duration_text: str = "Unknown"
    status: ResolutionStatus = ResolutionStatus.RESOLVED

    @computed_field
    @property
    def estimated(self) -> bool:
        return self.status is not ResolutionStatus.RESOLVED


class JurisdictionInfo(BaseModel):
    in_primary_county: bool = True
    counties_crossed: int = Field(default=0, ge=0, le=2)
    origin_county: str | None = None
    destination_county: str | None = None
    status: ResolutionStatus = ResolutionStatus.RESOLVED


class HolidayInfo(BaseModel):
    is_holiday: bool = False
    name: str | None = None
    is_federal: bool = False  # Display only; never changes the surcharge
    surcharge_cents: int = Field(default=0, ge=0)


# ── Price output ─────────────────────────────────────────────────────


class LineItem(BaseModel):
    code: str            # Stable machine key, e.g. "base_fare"
    label: str           # Human-readable, shown on invoices
    amount_cents: int
    category: LineCategory

    @computed_field
    @property
    def amount(self) -> Decimal:
        return cents_to_dollars(self.amount_cents)


class PriceBreakdown(BaseModel):
    """Ordered line items ending in exactly one TOTAL item.

    Validation enforces the invariants downstream invoicing relies on: the
    total equals the sum of every other item, and only discounts are negative.
    """

    items: list[LineItem]
    is_bariatric: bool = False
    has_holiday_surcharge: bool = False
    has_dead_mileage: bool = False

    @model_validator(mode="after")
    def _check_invariants(self) -> "PriceBreakdown":
        totals = [i for i in self.items if i.category is LineCategory.TOTAL]
        if len(totals) != 1 or self.items[-1].category is not LineCategory.TOTAL:
            raise ValueError("breakdown must end with exactly one total item")
        for item in self.items:
            if item.category is LineCategory.DISCOUNT:
                if item.amount_cents > 0:
                    raise ValueError(f"discount {item.code!r} must not be positive")
            elif item.amount_cents < 0:
                raise ValueError(f"{item.category.value} {item.code!r} must not be negative")
        if totals[0].amount_cents != self.subtotal_cents + self.discount_cents:
            raise ValueError("total does not equal the sum of the line items")
        return self

    @property
    def subtotal_cents(self) -> int:
        """Sum of everything except discounts and the total line."""
        return sum(
            i.amount_cents
            for i in self.items
            if i.category not in (LineCategory.DISCOUNT, LineCategory.TOTAL)
        )

    @property
    def discount_cents(self) -> int:
        return sum(i.amount_cents for i in self.items if i.category is LineCategory.DISCOUNT)

    @property
    def premium_cents(self) -> int:
        return sum(i.amount_cents for i in self.items if i.category is LineCategory.PREMIUM)

    @computed_field
    @property
    def total_cents(self) -> int:
        return self.items[-1].amount_cents

    @property
    def total(self) -> Decimal:
        return cents_to_dollars(self.total_cents)

    def get(self, code: str) -> LineItem | None:
        return next((i for i in self.items if i.code == code), None)


class QuoteSummary(BaseModel):
    """Human-readable companion to the breakdown, rendered as-is by the UI."""

    trip_type: str
    distance: str
    estimated_total: str
    has_discounts: bool
    has_premiums: bool
    is_bariatric: bool
    has_holiday_surcharge: bool
    holiday_name: str | None = None
    has_dead_mileage: bool
    county_location: str
    distance_estimated: bool


class Quote(BaseModel):
    breakdown: PriceBreakdown
    summary: QuoteSummary
    distance: DistanceResult
    jurisdiction: JurisdictionInfo
    holiday: HolidayInfo
    dead_mileage_miles: float = 0.0


# ── Workflow / activity payload models ───────────────────────────────
# Each activity takes a single Pydantic model as input so payloads are
# validated on both the sending (workflow) and receiving (activity) side.


class QuoteInput(BaseModel):
    """Input to QuoteTripWorkflow.

    The rate table and timezone travel with the request so the workflow never
    reads process configuration (which would break replay determinism).
    """

    trip: TripRequest
    rates: RateTable = Field(default_factory=RateTable)
    timezone: str
    dead_mileage_enabled: bool = True

    check_timezone = field_validator("timezone")(known_timezone)


class QuoteState(BaseModel):
    """Progress tracked inside the workflow, exposed via the `get_status` query."""

    distance_resolved: bool = False
    jurisdiction_resolved: bool = False
    dead_mileage_resolved: bool = False
    total_cents: int | None = None


class DistanceInput(BaseModel):
    origin: str
    destination: str
    precomputed: Any = None


class JurisdictionInput(BaseModel):
    origin: str
    destination: str


class DeadMileageInput(BaseModel):
    pickup: str
    destination: str
    round_trip: bool
    office_address: str
