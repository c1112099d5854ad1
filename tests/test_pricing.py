"""Tests for FareComposer: rule order, premiums, discounts, rounding."""

from datetime import date, datetime, timezone
from decimal import Decimal
from zoneinfo import ZoneInfo

import pytest

from fakes import make_trip
from trip_pricing.domain.errors import PricingInputError
from trip_pricing.domain.holidays import CalendarRuleEngine
from trip_pricing.domain.models import (
    DistanceResult,
    HolidayInfo,
    JurisdictionInfo,
    LineCategory,
    PriceBreakdown,
    WheelchairMode,
)
from trip_pricing.domain.pricing import FareComposer
from trip_pricing.domain.rates import RateTable

TEN_MILES = DistanceResult(miles=10.0)
PRIMARY = JurisdictionInfo()
NO_HOLIDAY = HolidayInfo()


def codes(breakdown: PriceBreakdown) -> list[str]:
    return [item.code for item in breakdown.items]


class TestBaseline:
    def test_one_way_primary_weekday(self, composer: FareComposer) -> None:
        res = composer.compose(make_trip(), TEN_MILES, PRIMARY, NO_HOLIDAY)

        # 5000 base + 10 mi * 300
        assert res.total_cents == 8000
        assert str(res.total) == "80.00"
        assert codes(res) == ["base_fare", "distance", "total"]
        assert res.get("base_fare").label == "Base fare (1 leg @ $50/leg)"
        assert res.get("distance").label == "Distance charge ($3/mile, Franklin County)"

    def test_round_trip_doubles_legs_and_miles(self, composer: FareComposer) -> None:
        res = composer.compose(make_trip(is_round_trip=True), TEN_MILES, PRIMARY, NO_HOLIDAY)

        assert res.get("base_fare").amount_cents == 10000
        assert res.get("base_fare").label == "Base fare (2 legs @ $50/leg)"
        assert res.get("distance").amount_cents == 6000
        assert res.total_cents == 16000

    def test_zero_distance_has_no_distance_line(self, composer: FareComposer) -> None:
        res = composer.compose(make_trip(), DistanceResult(miles=0), PRIMARY, NO_HOLIDAY)
        assert codes(res) == ["base_fare", "total"]
        assert res.total_cents == 5000

    def test_composition_is_deterministic(self, composer: FareComposer) -> None:
        trip = make_trip(is_veteran=True, is_emergency=True)
        first = composer.compose(trip, TEN_MILES, PRIMARY, NO_HOLIDAY)
        assert composer.compose(trip, TEN_MILES, PRIMARY, NO_HOLIDAY) == first

    def test_injected_rate_table(self, tz: ZoneInfo) -> None:
        composer = FareComposer(RateTable(base_per_leg_cents=6000, primary_per_mile_cents=325), tz)
        res = composer.compose(make_trip(), TEN_MILES, PRIMARY, NO_HOLIDAY)
        assert res.total_cents == 6000 + 3250
        assert res.get("distance").label == "Distance charge ($3.25/mile, Franklin County)"


class TestJurisdiction:
    def test_one_outside_county_uses_outside_rate_without_surcharge(self, composer: FareComposer) -> None:
        outside = JurisdictionInfo(in_primary_county=False, counties_crossed=1)
        res = composer.compose(make_trip(), TEN_MILES, outside, NO_HOLIDAY)

        assert res.get("distance").amount_cents == 4000
        assert res.get("distance").label == "Distance charge ($4/mile, outside Franklin County)"
        assert res.get("county_surcharge") is None
        assert res.total_cents == 9000

    def test_two_counties_add_one_surcharge(self, composer: FareComposer) -> None:
        two = JurisdictionInfo(in_primary_county=False, counties_crossed=2)
        res = composer.compose(make_trip(), TEN_MILES, two, NO_HOLIDAY)

        assert res.get("county_surcharge").amount_cents == 5000
        assert res.get("county_surcharge").label == "County surcharge (2 counties @ $50/county)"
        assert res.total_cents == 5000 + 4000 + 5000

    def test_dead_mileage_needs_two_counties(self, composer: FareComposer) -> None:
        two = JurisdictionInfo(in_primary_county=False, counties_crossed=2)
        one = JurisdictionInfo(in_primary_county=False, counties_crossed=1)

        far = composer.compose(make_trip(), TEN_MILES, two, NO_HOLIDAY, dead_mileage_miles=12.5)
        near = composer.compose(make_trip(), TEN_MILES, one, NO_HOLIDAY, dead_mileage_miles=12.5)

        assert far.get("dead_mileage").amount_cents == 5000
        assert far.get("dead_mileage").label == "Dead mileage (12.5 mi @ $4/mile)"
        assert far.has_dead_mileage
        assert far.total_cents == 19000
        assert near.get("dead_mileage") is None
        assert not near.has_dead_mileage


class TestPremiums:
    @pytest.mark.parametrize(
        ("pickup", "premium"),
        [
            (datetime(2025, 8, 20, 7, 59), True),
            (datetime(2025, 8, 20, 8, 0), False),
            (datetime(2025, 8, 20, 17, 59), False),
            (datetime(2025, 8, 20, 18, 0), True),
            (datetime(2025, 8, 23, 10, 0), True),  # Saturday
            (datetime(2025, 8, 24, 12, 0), True),  # Sunday
        ],
    )
    def test_weekend_and_after_hours_boundaries(self, composer: FareComposer, pickup: datetime, premium: bool) -> None:
        res = composer.compose(make_trip(pickup_datetime=pickup), TEN_MILES, PRIMARY, NO_HOLIDAY)
        assert (res.get("after_hours") is not None) is premium

    def test_weekend_after_hours_is_a_single_fee(self, composer: FareComposer) -> None:
        saturday_night = make_trip(pickup_datetime=datetime(2025, 8, 23, 20, 0))
        res = composer.compose(saturday_night, TEN_MILES, PRIMARY, NO_HOLIDAY)
        assert res.premium_cents == 4000
        assert res.total_cents == 12000

    def test_emergency_fee(self, composer: FareComposer) -> None:
        res = composer.compose(make_trip(is_emergency=True), TEN_MILES, PRIMARY, NO_HOLIDAY)
        assert res.get("emergency").amount_cents == 4000
        assert res.total_cents == 12000

    @pytest.mark.parametrize(
        ("mode", "fee"),
        [(WheelchairMode.NONE, None), (WheelchairMode.PERSONAL, None), (WheelchairMode.PROVIDED, 2500)],
    )
    def test_wheelchair_fee_only_when_provided(self, composer: FareComposer, mode: WheelchairMode, fee) -> None:
        res = composer.compose(make_trip(wheelchair_mode=mode), TEN_MILES, PRIMARY, NO_HOLIDAY)
        item = res.get("wheelchair_rental")
        assert (item.amount_cents if item else None) == fee

    def test_holiday_and_after_hours_are_additive(
        self, composer: FareComposer, calendar_engine: CalendarRuleEngine
    ) -> None:
        trip = make_trip(pickup_datetime=datetime(2025, 12, 25, 19, 0))
        holiday = calendar_engine.classify(date(2025, 12, 25))
        res = composer.compose(trip, TEN_MILES, PRIMARY, holiday)

        assert res.get("after_hours").amount_cents == 4000
        assert res.get("holiday").amount_cents == 10000
        assert res.get("holiday").label == "Holiday surcharge (Christmas Day)"
        assert res.has_holiday_surcharge
        assert res.total_cents == 22000

    def test_aware_pickup_is_judged_in_pricing_timezone(self) -> None:
        # 21:30 UTC is 17:30 in Columbus (EDT): business hours there, not in UTC.
        trip = make_trip(pickup_datetime=datetime(2025, 8, 20, 21, 30, tzinfo=timezone.utc))
        eastern = FareComposer(RateTable(), ZoneInfo("America/New_York"))
        utc = FareComposer(RateTable(), ZoneInfo("UTC"))

        assert eastern.compose(trip, TEN_MILES, PRIMARY, NO_HOLIDAY).get("after_hours") is None
        assert utc.compose(trip, TEN_MILES, PRIMARY, NO_HOLIDAY).get("after_hours") is not None


class TestVeteranDiscount:
    def test_discount_on_baseline(self, composer: FareComposer) -> None:
        res = composer.compose(make_trip(is_veteran=True), TEN_MILES, PRIMARY, NO_HOLIDAY)

        discount = res.get("veteran_discount")
        assert discount.amount_cents == -1600
        assert discount.category is LineCategory.DISCOUNT
        assert discount.label == "Veteran discount (20%)"
        assert res.total_cents == 6400

    def test_discount_applies_once_to_full_subtotal(
        self, composer: FareComposer, calendar_engine: CalendarRuleEngine
    ) -> None:
        trip = make_trip(
            is_veteran=True,
            is_round_trip=True,
            is_emergency=True,
            pickup_datetime=datetime(2025, 12, 25, 19, 0),
        )
        res = composer.compose(trip, TEN_MILES, PRIMARY, calendar_engine.classify(date(2025, 12, 25)))

        subtotal = 10000 + 6000 + 4000 + 4000 + 10000
        assert res.subtotal_cents == subtotal
        assert [i.code for i in res.items if i.category is LineCategory.DISCOUNT] == ["veteran_discount"]
        assert res.discount_cents == -subtotal // 5
        assert res.total_cents == subtotal - subtotal // 5

    def test_full_discount_leaves_zero_total(self, tz: ZoneInfo) -> None:
        composer = FareComposer(RateTable(veteran_discount_rate=Decimal("1")), tz)
        res = composer.compose(make_trip(is_veteran=True), TEN_MILES, PRIMARY, NO_HOLIDAY)

        assert res.get("veteran_discount").amount_cents == -8000
        assert res.total_cents == 0

    def test_no_discount_for_non_veterans(self, composer: FareComposer) -> None:
        res = composer.compose(make_trip(), TEN_MILES, PRIMARY, NO_HOLIDAY)
        assert res.discount_cents == 0
        assert res.get("veteran_discount") is None


class TestBariatric:
    def test_bariatric_rate_from_threshold(self, composer: FareComposer) -> None:
        res = composer.compose(make_trip(client_weight_lbs=300), TEN_MILES, PRIMARY, NO_HOLIDAY)
        assert res.is_bariatric
        assert res.get("base_fare").amount_cents == 15000
        assert res.get("base_fare").label == "Base fare (1 leg @ $150/leg bariatric)"

    def test_below_threshold_is_regular(self, composer: FareComposer) -> None:
        res = composer.compose(make_trip(client_weight_lbs=299.5), TEN_MILES, PRIMARY, NO_HOLIDAY)
        assert not res.is_bariatric
        assert res.get("base_fare").amount_cents == 5000

    def test_maximum_weight_is_rejected(self, composer: FareComposer) -> None:
        with pytest.raises(PricingInputError):
            composer.compose(make_trip(client_weight_lbs=400), TEN_MILES, PRIMARY, NO_HOLIDAY)


class TestRounding:
    def test_mileage_rounds_half_up_to_cents(self, composer: FareComposer) -> None:
        res = composer.compose(make_trip(), DistanceResult(miles=10.555), PRIMARY, NO_HOLIDAY)
        # 10.555 * 300 = 3166.5 cents
        assert res.get("distance").amount_cents == 3167
        assert res.total_cents == 8167

    def test_total_is_sum_of_items(self, composer: FareComposer) -> None:
        trip = make_trip(is_veteran=True, wheelchair_mode="provided", pickup_datetime=datetime(2025, 8, 23, 6, 0))
        res = composer.compose(trip, DistanceResult(miles=7.333), PRIMARY, NO_HOLIDAY)
        assert res.total_cents == sum(i.amount_cents for i in res.items if i.category is not LineCategory.TOTAL)
        assert all(i.amount_cents >= 0 for i in res.items if i.category is not LineCategory.DISCOUNT)
