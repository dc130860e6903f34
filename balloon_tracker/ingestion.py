"""
Concurrent ingestion of the 24 hourly WindBorne snapshots.

All fetches run on one event loop. Each one owns a fixed slot index, so
settlements can land in any order without locks. Every state write goes
through the cycle's ``active`` flag so that a cancelled cycle can never
touch state again.
"""

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Tuple

import aiohttp

from .points import HOURS, Point, hour_label
from .snapshots import fetch_snapshot

log = logging.getLogger(__name__)


class SlotStatus(str, Enum):
    PENDING = "pending"
    LOADED = "loaded"
    FAILED = "failed"


@dataclass(frozen=True)
class IngestionSnapshot:
    """Read-only copy of the ingestion state at one moment."""

    slots: Tuple[Tuple[Point, ...], ...]
    statuses: Tuple[SlotStatus, ...]
    completed: int
    loading: bool
    error: Optional[str] = None

    @property
    def progress(self) -> float:
        return self.completed / HOURS

    @property
    def total_points(self) -> int:
        return sum(len(points) for points in self.slots)

    @property
    def loaded_hours(self) -> int:
        return sum(1 for status in self.statuses if status is SlotStatus.LOADED)

    @property
    def failed_hours(self) -> List[int]:
        return [slot for slot, status in enumerate(self.statuses) if status is SlotStatus.FAILED]


class _Cycle:
    def __init__(self):
        self.active = True


class BalloonIngestor:
    """
    Owns the per-hour point lists and fills them from the snapshot source.

    ``run()`` starts a new cycle (cancelling the previous one), fetches all
    hours concurrently and returns the final snapshot. A failed hour is
    logged and left empty; only a failure before the fetches are
    dispatched, such as the HTTP session not opening, ends up in
    ``error``.
    """

    def __init__(self, base_url: str, session_factory: Optional[Callable] = None, fetcher=fetch_snapshot):
        self.base_url = base_url
        self._session_factory = session_factory or aiohttp.ClientSession
        self._fetcher = fetcher
        self._listeners: List[Callable[[IngestionSnapshot], None]] = []
        self._cycle: Optional[_Cycle] = None
        self._reset()

    def _reset(self):
        self._slots: List[Tuple[Point, ...]] = [() for _ in range(HOURS)]
        self._statuses: List[SlotStatus] = [SlotStatus.PENDING] * HOURS
        self._completed = 0
        self._loading = True
        self._error: Optional[str] = None

    def snapshot(self) -> IngestionSnapshot:
        return IngestionSnapshot(
            slots=tuple(self._slots),
            statuses=tuple(self._statuses),
            completed=self._completed,
            loading=self._loading,
            error=self._error,
        )

    @property
    def progress(self) -> float:
        return self._completed / HOURS

    def subscribe(self, listener: Callable[[IngestionSnapshot], None]) -> Callable[[], None]:
        """Call ``listener`` with a fresh snapshot after every state change."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self):
        snap = self.snapshot()
        for listener in list(self._listeners):
            try:
                listener(snap)
            except Exception:
                log.exception("ingestion listener failed")

    def cancel(self):
        """Detach the running cycle; its pending fetches will not write state."""
        if self._cycle is not None:
            self._cycle.active = False
            self._cycle = None

    def _settle(self, cycle: _Cycle, slot: int, points: Tuple[Point, ...], status: SlotStatus):
        if not cycle.active:
            return
        self._slots[slot] = points
        self._statuses[slot] = status
        self._completed += 1
        self._notify()

    def _finish(self, cycle: _Cycle, error: Optional[str] = None):
        if not cycle.active:
            return
        self._loading = False
        self._error = error
        self._notify()

    async def _load_slot(self, cycle: _Cycle, session, slot: int):
        try:
            points = await self._fetcher(session, slot, self.base_url)
        except Exception as e:
            log.warning("skip hour %s: %s", hour_label(slot), e)
            self._settle(cycle, slot, (), SlotStatus.FAILED)
        else:
            self._settle(cycle, slot, tuple(points), SlotStatus.LOADED)

    async def run(self) -> IngestionSnapshot:
        self.cancel()
        cycle = _Cycle()
        self._cycle = cycle
        self._reset()
        self._notify()

        try:
            async with self._session_factory() as session:
                await asyncio.gather(*(self._load_slot(cycle, session, slot) for slot in range(HOURS)))
        except asyncio.CancelledError:
            cycle.active = False
            raise
        except Exception as e:
            log.exception("balloon ingestion failed")
            self._finish(cycle, error=str(e))
        else:
            if cycle.active:
                snap = self.snapshot()
                log.info("ingestion complete: %d/%d hours loaded, %d points", snap.loaded_hours, HOURS, snap.total_points)
            self._finish(cycle)

        if self._cycle is cycle:
            self._cycle = None
        return self.snapshot()
