"""
Ground and 100m wind for a selected balloon position, from Open-Meteo.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional

import aiohttp

from .points import Point

log = logging.getLogger(__name__)

OPEN_METEO_URL = "https://api.open-meteo.com/v1/forecast"


class WindQueryError(Exception):
    """Raised when Open-Meteo answers with a non-2xx status."""

    def __init__(self, status: int):
        self.status = status
        super().__init__(f"Open-Meteo HTTP {status}")


@dataclass(frozen=True)
class WindReport:
    temperature_c: Optional[float] = None
    windspeed_10m: Optional[float] = None
    winddir_10m: Optional[float] = None
    windspeed_100m: Optional[float] = None
    winddir_100m: Optional[float] = None


def _first(values: Any) -> Optional[float]:
    if isinstance(values, list) and values:
        return values[0]
    return None


def parse_forecast(data: Any) -> WindReport:
    """Current weather plus the first hourly 100m sample of a forecast body."""
    data = data if isinstance(data, dict) else {}
    current = data.get("current_weather")
    current = current if isinstance(current, dict) else {}
    hourly = data.get("hourly")
    hourly = hourly if isinstance(hourly, dict) else {}
    return WindReport(
        temperature_c=current.get("temperature"),
        windspeed_10m=current.get("windspeed"),
        winddir_10m=current.get("winddirection"),
        windspeed_100m=_first(hourly.get("windspeed_100m")),
        winddir_100m=_first(hourly.get("winddirection_100m")),
    )


async def fetch_wind(session: aiohttp.ClientSession, lat: float, lon: float, url: str = OPEN_METEO_URL) -> WindReport:
    params = {
        "latitude": str(lat),
        "longitude": str(lon),
        "current_weather": "true",
        "hourly": "windspeed_100m,winddirection_100m",
        "timezone": "auto",
    }
    async with session.get(url, params=params) as resp:
        if not 200 <= resp.status < 300:
            raise WindQueryError(resp.status)
        data = await resp.json(content_type=None)
    return parse_forecast(data)


class _Selection:
    def __init__(self, point: Point):
        self.point = point
        self.active = True


class WindQuery:
    """
    Wind lookup for whichever point is currently selected.

    Selecting a new point detaches the previous lookup: when it settles it
    finds its selection inactive and leaves ``report``, ``error`` and
    ``loading`` alone.
    """

    def __init__(self, url: str = OPEN_METEO_URL, session_factory: Optional[Callable] = None, fetcher=fetch_wind):
        self.url = url
        self._session_factory = session_factory or aiohttp.ClientSession
        self._fetcher = fetcher
        self._selection: Optional[_Selection] = None
        self.report: Optional[WindReport] = None
        self.error = ""
        self.loading = False

    @property
    def selected(self) -> Optional[Point]:
        return self._selection.point if self._selection else None

    def cancel(self):
        if self._selection is not None:
            self._selection.active = False

    def select(self, point: Optional[Point]) -> Optional[asyncio.Task]:
        """Start a lookup for ``point``; must be called from a running loop."""
        self.cancel()
        self._selection = None
        self.report = None
        self.error = ""
        self.loading = False
        if point is None:
            return None

        selection = _Selection(point)
        self._selection = selection
        self.loading = True
        return asyncio.ensure_future(self._run(selection))

    async def _run(self, selection: _Selection):
        point = selection.point
        try:
            async with self._session_factory() as session:
                report = await self._fetcher(session, point.latitude, point.longitude, self.url)
        except Exception as e:
            log.warning("wind lookup for %.4f,%.4f failed: %s", point.latitude, point.longitude, e)
            if selection.active:
                self.error = str(e)
        else:
            if selection.active:
                self.report = report
        finally:
            if selection.active:
                self.loading = False
