from zoneinfo import ZoneInfo

import pytest

from trip_pricing.domain.holidays import CalendarRuleEngine
from trip_pricing.domain.pricing import FareComposer
from trip_pricing.domain.rates import RateTable
from trip_pricing.services.factory import ServiceFactory

EASTERN = ZoneInfo("America/New_York")


@pytest.fixture
def rates() -> RateTable:
    return RateTable()


@pytest.fixture
def tz() -> ZoneInfo:
    return EASTERN


@pytest.fixture
def composer(rates: RateTable, tz: ZoneInfo) -> FareComposer:
    return FareComposer(rates, tz)


@pytest.fixture
def calendar_engine(rates: RateTable) -> CalendarRuleEngine:
    return CalendarRuleEngine(rates.holiday_surcharge_cents)


@pytest.fixture(autouse=True)
def _reset_service_factory():
    ServiceFactory.reset()
    yield
    ServiceFactory.reset()
