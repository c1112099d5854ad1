"""
Deterministic tail of a quote: holiday classification, composition, summary.

Shared by PricingFacade (plain asyncio) and QuoteTripWorkflow (Temporal), so
both produce byte-identical quotes once distance and jurisdiction are known.
"""

from datetime import tzinfo

from trip_pricing.domain.holidays import CalendarRuleEngine
from trip_pricing.domain.models import (
    DistanceResult,
    HolidayInfo,
    JurisdictionInfo,
    PriceBreakdown,
    Quote,
    QuoteSummary,
    ResolutionStatus,
    TripRequest,
)
from trip_pricing.domain.pricing import FareStrategy
from trip_pricing.domain.rates import format_usd


def summarize(
    trip: TripRequest,
    breakdown: PriceBreakdown,
    distance: DistanceResult,
    jurisdiction: JurisdictionInfo,
    holiday: HolidayInfo,
    primary_county: str,
) -> QuoteSummary:
    miles = distance.miles * trip.legs
    if jurisdiction.status is ResolutionStatus.UNAVAILABLE:
        county_location = "Location unknown"
    elif jurisdiction.in_primary_county:
        county_location = primary_county
    else:
        county_location = f"Outside {primary_county}"

    return QuoteSummary(
        trip_type="Round Trip" if trip.is_round_trip else "One Way",
        distance=f"{miles:.1f} miles" if miles > 0 else "Distance not calculated",
        estimated_total=format_usd(breakdown.total_cents),
        has_discounts=breakdown.discount_cents < 0,
        has_premiums=breakdown.premium_cents > 0,
        is_bariatric=breakdown.is_bariatric,
        has_holiday_surcharge=breakdown.has_holiday_surcharge,
        holiday_name=holiday.name,
        has_dead_mileage=breakdown.has_dead_mileage,
        county_location=county_location,
        distance_estimated=distance.estimated,
    )


def assemble_quote(
    trip: TripRequest,
    distance: DistanceResult,
    jurisdiction: JurisdictionInfo,
    *,
    composer: FareStrategy,
    calendar: CalendarRuleEngine,
    tz: tzinfo,
    primary_county: str,
    dead_mileage_miles: float = 0.0,
) -> Quote:
    holiday = calendar.classify(trip.pickup_datetime, tz)
    breakdown = composer.compose(
        trip,
        distance,
        jurisdiction,
        holiday,
        dead_mileage_miles=dead_mileage_miles,
    )
    return Quote(
        breakdown=breakdown,
        summary=summarize(trip, breakdown, distance, jurisdiction, holiday, primary_county),
        distance=distance,
        jurisdiction=jurisdiction,
        holiday=holiday,
        dead_mileage_miles=dead_mileage_miles,
    )
