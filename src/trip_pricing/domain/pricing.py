"""
Fare composition (Strategy pattern).

Callers hold a reference to `FareStrategy` (a Protocol) and call
`compose()`. A different tariff structure (e.g. a flat-rate contract for a
facility) can implement the protocol and be injected into PricingFacade or
the workflow without touching either.

IMPORTANT: Composition runs directly inside the Temporal workflow (not in an
activity), so it MUST be deterministic: no I/O, no randomness, no system
clock. Everything time-dependent comes from the trip's own pickup datetime,
interpreted in the timezone given at construction.
"""

from datetime import datetime, tzinfo
from decimal import Decimal
from typing import Protocol

from trip_pricing.domain.errors import PricingInputError
from trip_pricing.domain.models import (
    DistanceResult,
    HolidayInfo,
    JurisdictionInfo,
    LineCategory,
    LineItem,
    PriceBreakdown,
    TripRequest,
    WheelchairMode,
)
from trip_pricing.domain.rates import RateTable, format_rate, round_cents


class FareStrategy(Protocol):
    """Interface for turning resolved trip facts into an itemized price."""

    def compose(
        self,
        trip: TripRequest,
        distance: DistanceResult,
        jurisdiction: JurisdictionInfo,
        holiday: HolidayInfo,
        *,
        dead_mileage_miles: float = 0.0,
    ) -> PriceBreakdown: ...


class FareComposer:
    """Default tariff: per-leg base fare + mileage + flat premiums - veteran discount.

    Examples (default RateTable, primary county, weekday 10:00):
        - One way, 10 mi:              5000 + 3000              = 8000 cents
        - Round trip, 10 mi:           10000 + 6000             = 16000 cents
        - One way, 10 mi, Dec 25 19:00: 8000 + 4000 + 10000     = 22000 cents
        - One way, 10 mi, veteran:     8000 - 1600              = 6400 cents
    """

    def __init__(self, rates: RateTable, tz: tzinfo) -> None:
        self.rates = rates
        self.tz = tz

    def local_pickup(self, trip: TripRequest) -> datetime:
        """Pickup time as wall clock in the pricing timezone."""
        when = trip.pickup_datetime
        if when.tzinfo is not None:
            return when.astimezone(self.tz)
        return when

    def is_after_hours(self, local: datetime) -> bool:
        return local.hour < self.rates.day_start_hour or local.hour >= self.rates.day_end_hour

    @staticmethod
    def is_weekend(local: datetime) -> bool:
        return local.weekday() >= 5  # Saturday or Sunday

    def per_leg_cents(self, trip: TripRequest) -> tuple[int, bool]:
        """Per-leg base rate and whether the bariatric rate applies."""
        weight = trip.client_weight_lbs
        if weight is None:
            return self.rates.base_per_leg_cents, False
        if weight >= self.rates.max_weight_lbs:
            raise PricingInputError(
                f"Client weight {weight:g} lbs exceeds the {self.rates.max_weight_lbs:g} lbs limit"
            )
        if weight >= self.rates.bariatric_threshold_lbs:
            return self.rates.bariatric_per_leg_cents, True
        return self.rates.base_per_leg_cents, False

    def compose(
        self,
        trip: TripRequest,
        distance: DistanceResult,
        jurisdiction: JurisdictionInfo,
        holiday: HolidayInfo,
        *,
        dead_mileage_miles: float = 0.0,
    ) -> PriceBreakdown:
        r = self.rates
        legs = trip.legs
        items: list[LineItem] = []

        # 1. Base fare, one per leg
        per_leg, bariatric = self.per_leg_cents(trip)
        rate_name = f"{format_rate(per_leg)}/leg" + (" bariatric" if bariatric else "")
        items.append(
            LineItem(
                code="base_fare",
                label=f"Base fare ({legs} leg{'s' if legs > 1 else ''} @ {rate_name})",
                amount_cents=per_leg * legs,
                category=LineCategory.BASE,
            )
        )

        # 2-3. Mileage; the whole trip takes the outside rate unless both ends are primary
        effective_miles = Decimal(str(distance.miles)) * legs
        if jurisdiction.in_primary_county:
            per_mile, where = r.primary_per_mile_cents, r.primary_county
        else:
            per_mile, where = r.outside_per_mile_cents, f"outside {r.primary_county}"
        distance_cents = round_cents(effective_miles * per_mile)
        if distance_cents > 0:
            items.append(
                LineItem(
                    code="distance",
                    label=f"Distance charge ({format_rate(per_mile)}/mile, {where})",
                    amount_cents=distance_cents,
                    category=LineCategory.CHARGE,
                )
            )

        # 4. County surcharge, only from the second non-primary county on
        crossed = jurisdiction.counties_crossed
        if crossed >= 2:
            items.append(
                LineItem(
                    code="county_surcharge",
                    label=f"County surcharge ({crossed} counties @ {format_rate(r.county_surcharge_cents)}/county)",
                    amount_cents=(crossed - 1) * r.county_surcharge_cents,
                    category=LineCategory.PREMIUM,
                )
            )

        # 5. Dead mileage (office <-> trip) for far-out trips
        if crossed >= 2 and dead_mileage_miles > 0:
            items.append(
                LineItem(
                    code="dead_mileage",
                    label=f"Dead mileage ({dead_mileage_miles:.1f} mi @ {format_rate(r.dead_mileage_per_mile_cents)}/mile)",
                    amount_cents=round_cents(Decimal(str(dead_mileage_miles)) * r.dead_mileage_per_mile_cents),
                    category=LineCategory.PREMIUM,
                )
            )

        # 6. One flat premium whether after hours, weekend, or both
        local = self.local_pickup(trip)
        if self.is_after_hours(local) or self.is_weekend(local):
            items.append(
                LineItem(
                    code="after_hours",
                    label="Weekend/After-hours surcharge",
                    amount_cents=r.after_hours_cents,
                    category=LineCategory.PREMIUM,
                )
            )

        # 7. Emergency
        if trip.is_emergency:
            items.append(
                LineItem(
                    code="emergency",
                    label="Emergency fee",
                    amount_cents=r.emergency_cents,
                    category=LineCategory.PREMIUM,
                )
            )

        # 8. Wheelchair, only when we supply it
        if trip.wheelchair_mode is WheelchairMode.PROVIDED:
            items.append(
                LineItem(
                    code="wheelchair_rental",
                    label="Wheelchair rental fee",
                    amount_cents=r.wheelchair_rental_cents,
                    category=LineCategory.PREMIUM,
                )
            )

        # 9. Holiday, independent of the weekend/after-hours premium
        if holiday.is_holiday:
            items.append(
                LineItem(
                    code="holiday",
                    label=f"Holiday surcharge ({holiday.name})" if holiday.name else "Holiday surcharge",
                    amount_cents=r.holiday_surcharge_cents,
                    category=LineCategory.PREMIUM,
                )
            )

        # 10-11. Veteran discount is taken once, from the pre-discount subtotal
        subtotal = sum(item.amount_cents for item in items)
        discount = 0
        if trip.is_veteran:
            discount = round_cents(Decimal(subtotal) * r.veteran_discount_rate)
            if discount > 0:
                percent = (r.veteran_discount_rate * 100).normalize()
                items.append(
                    LineItem(
                        code="veteran_discount",
                        label=f"Veteran discount ({percent:f}%)",
                        amount_cents=-discount,
                        category=LineCategory.DISCOUNT,
                    )
                )

        # 12. Total
        items.append(
            LineItem(
                code="total",
                label="Total",
                amount_cents=subtotal - discount,
                category=LineCategory.TOTAL,
            )
        )

        return PriceBreakdown(
            items=items,
            is_bariatric=bariatric,
            has_holiday_surcharge=holiday.is_holiday,
            has_dead_mileage=any(i.code == "dead_mileage" for i in items),
        )
