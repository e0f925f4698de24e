"""Segmentation automaton turning a frame stream into time segments.

A segmenter is owned by a stage that aggregates over time. The stage asks,
for every frame time, whether a boundary has just been crossed
(`is_segment`) and whether the time lies inside a segment (`is_on`). Two
policies share the automaton:

- `ListSegmenter`: boundaries come from an external list of segment start
  times with optional durations.
- `RegularSegmenter`: boundaries are spaced by a fixed size after an offset.

Reporting lags the automaton: after `is_segment()` returns True,
`segment_start` and `segment_duration` describe the segment committed by the
last advance, not necessarily the one beginning at the current time.

Example:
    >>> from streamgraph.segment import RegularSegmenter
    >>> seg = RegularSegmenter(size=100.0)
    >>> [t for t in range(0, 500, 10) if seg.is_segment(t)]
    [100, 200, 300, 400]
    >>> seg.get_last_duration(500.0)
    100.0
"""

import math
from abc import ABC, abstractmethod
from typing import Iterable, Sequence


INFINITE_TIME = math.inf


class Segmenter(ABC):
    """Abstract boundary-tracking automaton.

    Attributes:
        segment_start: Start of the last reported segment (infinite if none).
        segment_duration: Duration of the last reported segment.
    """

    def __init__(self, offset: float = 0.0) -> None:
        self._offset = max(0.0, float(offset))
        self._next_time = INFINITE_TIME
        self.segment_start = INFINITE_TIME
        self.segment_duration = 0.0

    @property
    def offset(self) -> float:
        """Time offset added to every boundary; applied at the next reset."""
        return self._offset

    @offset.setter
    def offset(self, value: float) -> None:
        self._offset = max(0.0, float(value))

    @property
    def next_time(self) -> float:
        """Time of the next boundary (infinite when segmentation is over)."""
        return self._next_time

    def reset(self) -> None:
        """Go back to the first configured boundary and clear the report."""
        self.segment_start = INFINITE_TIME
        self.segment_duration = 0.0
        self._next_time = self._first_boundary()

    def is_segment(self, time: float) -> bool:
        """Return True when `time` has crossed one or more boundaries."""
        if time < self._next_time:
            if not (math.isinf(self._next_time) and self._can_activate()):
                return False
            # segmentation was switched on after the last reset
            self._next_time = time

        while time >= self._next_time:
            self._next_time = self._advance(time)

        return True

    @abstractmethod
    def is_on(self, time: float) -> bool:
        """Return True when `time` lies inside the current segment."""

    @abstractmethod
    def get_last_duration(self, end_time: float) -> float | None:
        """Return the duration of the pending segment at end of stream.

        Returns:
            Elapsed duration of the segment still open at `end_time`, or None
            when no segment is pending or it has not lasted any time yet.
        """

    @abstractmethod
    def _first_boundary(self) -> float:
        """Reset policy state and return the first boundary time."""

    @abstractmethod
    def _advance(self, time: float) -> float:
        """Commit the segment just crossed and return the next boundary."""

    def _can_activate(self) -> bool:
        return False


class ListSegmenter(Segmenter):
    """Segmenter following an external list of segment times.

    Args:
        times: Segment start times in milliseconds.
        durations: Optional segment durations; missing or non-positive
            entries default to the gap to the next start.
        offset: Time offset added to every start time.
    """

    def __init__(
        self,
        times: Iterable[float] = (),
        durations: Iterable[float] = (),
        offset: float = 0.0,
    ) -> None:
        super().__init__(offset)
        self._times: list[float] = []
        self._durations: list[float] = []
        self._index = 0
        self.set_times(times, durations)
        self.reset()

    @property
    def times(self) -> tuple[float, ...]:
        """Sanitized segment start times (without offset)."""
        return tuple(self._times)

    @property
    def durations(self) -> tuple[float, ...]:
        """Sanitized segment durations."""
        return tuple(self._durations)

    @property
    def index(self) -> int:
        """Index of the list entry the automaton is waiting on."""
        return self._index

    def set_times(self, times: Iterable[float], durations: Iterable[float] = ()) -> None:
        """Load and sanitize the segment list.

        Negative times are clipped to 0; a time that does not strictly exceed
        the previous kept time is dropped together with its duration. Kept
        durations are clipped to the gap to the next kept time so that
        segments never overlap. Takes effect at the next reset.
        """
        raw_durations: Sequence[float] = list(durations)
        kept_times: list[float] = []
        kept_durations: list[float | None] = []

        for i, raw_time in enumerate(times):
            time = max(0.0, float(raw_time))
            if kept_times and time <= kept_times[-1]:
                continue
            kept_times.append(time)
            kept_durations.append(float(raw_durations[i]) if i < len(raw_durations) else None)

        self._times = kept_times
        self._durations = []

        for i, time in enumerate(kept_times):
            gap = (kept_times[i + 1] if i + 1 < len(kept_times) else INFINITE_TIME) - time
            duration = kept_durations[i]
            if duration is None or duration <= 0 or duration > gap:
                duration = gap
            self._durations.append(duration)

    def _first_boundary(self) -> float:
        self._index = 0
        if not self._times:
            return INFINITE_TIME
        return self._times[0] + self._offset

    def _advance(self, time: float) -> float:
        self.segment_start = self._times[self._index] + self._offset
        self.segment_duration = self._durations[self._index]
        segment_end = self.segment_start + self.segment_duration

        if self.segment_start <= time < segment_end:
            # inside the segment: the next boundary is its end
            return segment_end

        self._index += 1
        if self._index < len(self._times):
            return self._times[self._index] + self._offset
        return INFINITE_TIME

    def is_on(self, time: float) -> bool:
        return self.segment_start <= time < self.segment_start + self.segment_duration

    def get_last_duration(self, end_time: float) -> float | None:
        if self._index >= len(self._times):
            return None

        start = self._times[self._index] + self._offset
        if end_time <= start:
            return None

        return min(end_time - start, self._durations[self._index])


class RegularSegmenter(Segmenter):
    """Segmenter chopping the stream into segments of a fixed size.

    Args:
        size: Segment size in milliseconds; 0 makes one segment spanning the
            whole stream.
        offset: Start time of the first segment.
    """

    def __init__(self, size: float = 0.0, offset: float = 0.0) -> None:
        super().__init__(offset)
        self._size = max(0.0, float(size))
        self._last_start = self._offset
        self.reset()

    @property
    def size(self) -> float:
        """Segment size; a change applies from the next advance on."""
        return self._size

    @size.setter
    def size(self, value: float) -> None:
        self._size = max(0.0, float(value))

    @property
    def last_start(self) -> float:
        """Start time of the pending segment."""
        return self._last_start

    def _first_boundary(self) -> float:
        self._last_start = self._offset
        if self._size > 0:
            return self._offset + self._size
        return INFINITE_TIME

    def _can_activate(self) -> bool:
        return self._size > 0

    def _advance(self, time: float) -> float:
        self.segment_start = self._last_start
        self.segment_duration = self._next_time - self._last_start
        self._last_start = self._next_time

        if self._size > 0:
            return self._next_time + self._size
        return INFINITE_TIME

    def is_on(self, time: float) -> bool:
        return self._last_start <= time < self._next_time

    def get_last_duration(self, end_time: float) -> float | None:
        if end_time <= self._last_start:
            return None
        return end_time - self._last_start
