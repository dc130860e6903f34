"""
Fetch one hourly WindBorne snapshot through the caching proxy.
"""

import json
import logging
from typing import Any, List

import aiohttp

from .points import Point, hour_label, parse_rows

log = logging.getLogger(__name__)


class SnapshotFetchError(Exception):
    """Raised when a snapshot request does not come back with a 2xx status."""

    def __init__(self, slot: int, status: int, message: str = ""):
        self.slot = slot
        self.status = status
        super().__init__(message or f"WB {hour_label(slot)}.json HTTP {status}")


class SnapshotDecodeError(SnapshotFetchError):
    """Raised when a 2xx snapshot body is not valid JSON."""


def snapshot_url(base_url: str, slot: int) -> str:
    return f"{base_url.rstrip('/')}/{hour_label(slot)}.json"


def extract_rows(payload: Any) -> list:
    """Rows from either a bare list or a ``{"points": [...]}`` document."""
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict) and isinstance(payload.get("points"), list):
        return payload["points"]
    return []


async def fetch_snapshot(session: aiohttp.ClientSession, slot: int, base_url: str) -> List[Point]:
    """
    Download and validate the snapshot for ``slot``.

    aiohttp keeps no response cache, so every call reaches the proxy and
    freshness is left to the proxy's own cache headers. No retries.
    """
    url = snapshot_url(base_url, slot)
    async with session.get(url) as resp:
        if not 200 <= resp.status < 300:
            raise SnapshotFetchError(slot, resp.status)
        try:
            payload = await resp.json(content_type=None)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise SnapshotDecodeError(slot, resp.status, f"WB {hour_label(slot)}.json: invalid JSON ({e})") from e

    rows = extract_rows(payload)
    points = parse_rows(rows)
    log.debug("hour %s: %d rows, %d valid points", hour_label(slot), len(rows), len(points))
    return points
