import asyncio

import pytest

from balloon_tracker.points import Point
from balloon_tracker.wind import OPEN_METEO_URL, WindQuery, WindQueryError, WindReport, fetch_wind, parse_forecast
from tests.fakes import FakeResponse, drain

FORECAST = {
    "current_weather": {"temperature": 12.5, "windspeed": 18.0, "winddirection": 270},
    "hourly": {"windspeed_100m": [25.1, 26.0], "winddirection_100m": [265, 268]},
}


def test_parse_forecast_takes_first_hourly_sample():
    assert parse_forecast(FORECAST) == WindReport(
        temperature_c=12.5,
        windspeed_10m=18.0,
        winddir_10m=270,
        windspeed_100m=25.1,
        winddir_100m=265,
    )


def test_parse_forecast_tolerates_missing_sections():
    assert parse_forecast({}) == WindReport()
    assert parse_forecast({"hourly": {"windspeed_100m": []}}) == WindReport()
    assert parse_forecast(None) == WindReport()


@pytest.mark.asyncio
async def test_fetch_wind_query_parameters(fake_session):
    fake_session.default = FakeResponse(200, FORECAST)

    report = await fetch_wind(fake_session, 45.0, -122.0)

    url, params = fake_session.requests[0]
    assert url == OPEN_METEO_URL
    assert params == {
        "latitude": "45.0",
        "longitude": "-122.0",
        "current_weather": "true",
        "hourly": "windspeed_100m,winddirection_100m",
        "timezone": "auto",
    }
    assert report.windspeed_100m == 25.1


@pytest.mark.asyncio
async def test_fetch_wind_http_error(fake_session):
    fake_session.default = FakeResponse(429, {"reason": "slow down"})

    with pytest.raises(WindQueryError) as exc_info:
        await fetch_wind(fake_session, 0, 0)

    assert exc_info.value.status == 429
    assert str(exc_info.value) == "Open-Meteo HTTP 429"


class GatedWind:
    def __init__(self):
        self.gates = {}

    async def __call__(self, session, lat, lon, url):
        gate = self.gates.setdefault(lat, asyncio.Event())
        await gate.wait()
        if lat < 0:
            raise WindQueryError(500)
        return WindReport(temperature_c=lat)

    def release(self, lat):
        self.gates.setdefault(lat, asyncio.Event()).set()


@pytest.mark.asyncio
async def test_new_selection_discards_previous_lookup(fake_session):
    wind = GatedWind()
    query = WindQuery(session_factory=lambda: fake_session, fetcher=wind)
    first, second = Point(10.0, 0.0), Point(20.0, 0.0)

    first_task = query.select(first)
    await drain()
    second_task = query.select(second)
    await drain()
    assert query.loading is True

    wind.release(20.0)
    await second_task
    assert query.report == WindReport(temperature_c=20.0)
    assert query.loading is False

    wind.release(10.0)
    await first_task
    assert query.selected == second
    assert query.report == WindReport(temperature_c=20.0)
    assert query.loading is False


@pytest.mark.asyncio
async def test_lookup_failure_is_reported_for_current_selection(fake_session):
    wind = GatedWind()
    query = WindQuery(session_factory=lambda: fake_session, fetcher=wind)

    task = query.select(Point(-5.0, 0.0))
    wind.release(-5.0)
    await task

    assert query.error == "Open-Meteo HTTP 500"
    assert query.report is None
    assert query.loading is False


@pytest.mark.asyncio
async def test_clearing_selection(fake_session):
    wind = GatedWind()
    query = WindQuery(session_factory=lambda: fake_session, fetcher=wind)

    task = query.select(Point(1.0, 1.0))
    assert query.select(None) is None
    wind.release(1.0)
    await task

    assert query.selected is None
    assert query.report is None
    assert query.loading is False


def test_parse_forecast_ignores_non_object_sections():
    assert parse_forecast({"current_weather": [1, 2], "hourly": "n/a"}) == WindReport()
