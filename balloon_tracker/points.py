"""
Balloon point model and the row validator for raw snapshot records.

A raw WindBorne row looks like ``[lat, lon, alt_km]``. Latitude and
longitude are mandatory and strictly checked; altitude is best effort and
is dropped to ``None`` rather than failing the row.
"""

from dataclasses import dataclass
from typing import Any, Iterable, List, Optional

HOURS = 24

MIN_LAT, MAX_LAT = -90.0, 90.0
MIN_LON, MAX_LON = -180.0, 180.0
MIN_ALT_KM, MAX_ALT_KM = 0.0, 40.0


@dataclass(frozen=True)
class Point:
    latitude: float
    longitude: float
    altitude_km: Optional[float] = None

    def as_row(self) -> list:
        """Raw record form, accepted back by parse_row unchanged."""
        return [self.latitude, self.longitude, self.altitude_km]


def hour_label(slot: int) -> str:
    """Two-digit snapshot name for a slot, 0 is the latest hour."""
    if isinstance(slot, bool) or not isinstance(slot, int) or not (0 <= slot < HOURS):
        raise ValueError(f"hour slot must be an integer between 0 and {HOURS - 1}")
    return f"{slot:02d}"


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def parse_row(row: Any) -> Optional[Point]:
    """Turn one raw record into a Point, or None when the row is unusable."""
    if not isinstance(row, (list, tuple)) or len(row) < 2:
        return None

    lat, lon = row[0], row[1]
    if not _is_number(lat) or not _is_number(lon):
        return None
    # also rejects NaN, inf and ints too large for a float without converting them
    if not (MIN_LAT <= lat <= MAX_LAT and MIN_LON <= lon <= MAX_LON):
        return None

    alt = row[2] if len(row) > 2 else None
    if not (_is_number(alt) and MIN_ALT_KM <= alt <= MAX_ALT_KM):
        alt = None

    return Point(latitude=lat, longitude=lon, altitude_km=alt)


def parse_rows(rows: Iterable[Any]) -> List[Point]:
    return [p for p in map(parse_row, rows) if p is not None]
