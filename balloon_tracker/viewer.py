"""
Display state for a balloon map: the hour being shown and the selected
balloon. Rendering reads from here and never owns state of its own.
"""

from typing import Optional, Tuple

from .ingestion import BalloonIngestor
from .points import HOURS, Point
from .wind import WindQuery


class BalloonViewer:
    def __init__(self, ingestor: BalloonIngestor, wind: Optional[WindQuery] = None):
        self.ingestor = ingestor
        self.wind = wind or WindQuery()
        self.hour_index = 0

    def select_hour(self, index: int):
        if not 0 <= index < HOURS:
            raise ValueError(f"hour index must be between 0 and {HOURS - 1}")
        self.hour_index = index

    def back_to_current(self):
        self.hour_index = 0

    def points(self) -> Tuple[Point, ...]:
        return self.ingestor.snapshot().slots[self.hour_index]

    @property
    def selected(self) -> Optional[Point]:
        return self.wind.selected

    def select_point(self, point: Optional[Point]):
        return self.wind.select(point)

    def close(self):
        """Tear down: nothing still in flight may write state afterwards."""
        self.ingestor.cancel()
        self.wind.cancel()

    def summary(self) -> str:
        snap = self.ingestor.snapshot()
        return f"Loaded {snap.loaded_hours}/{HOURS} hours · Total {snap.total_points} points"

    def status_line(self) -> str:
        snap = self.ingestor.snapshot()
        if snap.loading:
            return f"Loading balloon data... {snap.progress:.0%}"
        if snap.error:
            return snap.error
        return "Data loading complete"
