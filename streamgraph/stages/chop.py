"""Temporal aggregation over segments.

`chop` owns a segmenter and emits one frame per segment, time-tagged at the
segment start, holding the optional segment duration followed by the
enabled per-column statistics of the frames inside the segment.

With `segtimes` set the segments follow that list (and `segdurations`);
otherwise the stream is chopped into segments of `size` ms starting at
`offset`, or into a single segment when `size` is 0. A trailing segment
still open at the end of the stream is flushed by `finalize`. Segments that
received no frame, such as those skipped over by a gap in time-tagged input,
produce no output.
"""

import logging

import numpy as np

from streamgraph.segment import ListSegmenter, RegularSegmenter, Segmenter
from streamgraph.stream import FRAME_DTYPE, ParamKind, Stage, StreamDescriptor

from .tempmod import TempModArray


logger = logging.getLogger(__name__)

STAT_FLAGS = ("min", "max", "mean", "stddev")


class Chop(Stage):
    """Segment-wise min/max/mean/stddev of the input columns."""

    name = "chop"

    def __init__(self, parent=None, receiver=None) -> None:
        super().__init__(parent=parent, receiver=receiver)
        self.params.declare("size", ParamKind.FLOAT, 242.0, "Chop size in ms (0 = one segment)")
        self.params.declare("offset", ParamKind.FLOAT, 0.0, "Time offset before segmentation starts in ms")
        self.params.declare("segtimes", ParamKind.FLOATS, (), "Segment start times in ms (overrides size)")
        self.params.declare("segdurations", ParamKind.FLOATS, (), "Segment durations in ms, used with segtimes")
        self.params.declare("duration", ParamKind.BOOL, False, "Output the segment duration", reconfigure=True)
        self.params.declare("min", ParamKind.BOOL, False, "Output the segment minimum", reconfigure=True)
        self.params.declare("max", ParamKind.BOOL, False, "Output the segment maximum", reconfigure=True)
        self.params.declare("mean", ParamKind.BOOL, True, "Output the segment mean", reconfigure=True)
        self.params.declare("stddev", ParamKind.BOOL, False, "Output the segment standard deviation", reconfigure=True)

        self.segmenter: Segmenter = RegularSegmenter()
        self.tempmod = TempModArray()
        self._report_duration = False
        self._open: tuple[float, float] | None = None
        self._rows = 0

    # ------------------------------------------------------------------
    # Negotiation
    # ------------------------------------------------------------------

    def on_configure(self, descriptor: StreamDescriptor) -> StreamDescriptor:
        flags = [self.params[flag] for flag in STAT_FLAGS]
        if not any(flags):
            self.warn("no statistic enabled, enabling mean")
            flags[STAT_FLAGS.index("mean")] = True

        self._report_duration = self.params["duration"]
        self.tempmod.resize(descriptor.width)
        self.tempmod.enable(*flags)
        self._build_segmenter()

        labels = self.tempmod.labels(descriptor.labels)
        if self._report_duration:
            labels = ["Duration", *labels]

        return self.propagate_stream(
            StreamDescriptor(
                has_time_tags=True,
                rate=descriptor.rate,
                offset=0.0,
                width=len(labels),
                height=1,
                labels=tuple(labels),
                has_var_size=False,
                domain=0.0,
                max_frames=1,
            )
        )

    def _chop_size(self) -> float:
        size = self.params["size"]
        if size < 0:
            self.warn(f"chop size {size} is negative, using 0")
            self.params["size"] = 0.0
            size = 0.0
        return size

    def _build_segmenter(self) -> None:
        segtimes = self.params["segtimes"]
        offset = self.params["offset"]

        if segtimes:
            self.segmenter = ListSegmenter(segtimes, self.params["segdurations"], offset=offset)
        else:
            self.segmenter = RegularSegmenter(size=self._chop_size(), offset=offset)

        self.segmenter.reset()
        self.tempmod.reset()
        self._open = None
        self._rows = 0

    # ------------------------------------------------------------------
    # Stream
    # ------------------------------------------------------------------

    def on_reset(self) -> None:
        self._build_segmenter()
        self.propagate_reset()

    def on_frames(self, time: float, weight: float, values: np.ndarray) -> None:
        segmenter = self.segmenter
        if isinstance(segmenter, RegularSegmenter):
            # takes effect at the next boundary
            segmenter.size = self._chop_size()

        period = self.input_descriptor.frame_period
        for i, row in enumerate(values):
            frame_time = time + i * period

            # step through skipped boundaries one at a time
            while segmenter.next_time < frame_time:
                self._cross(segmenter.next_time)
            self._cross(frame_time)

            if segmenter.is_on(frame_time):
                self.tempmod.input(row.reshape(1, -1))
                self._rows += 1

    def _cross(self, time: float) -> None:
        segmenter = self.segmenter
        if not segmenter.is_segment(time):
            return

        reported = (segmenter.segment_start, segmenter.segment_duration)
        closed = time >= reported[0] + reported[1]
        emitted = None

        if self._open is not None and (self._open != reported or closed):
            emitted = self._open
            self._emit(*self._open)
            self._open = None

        if closed:
            if reported != emitted:
                self._emit(*reported)
        else:
            self._open = reported

    def on_finalize(self, end_time: float) -> None:
        if self._open is not None:
            # started list segment, reported at its own start
            start, full = self._open
            self._open = None
            self._emit(start, min(full, max(0.0, end_time - start)))
        else:
            duration = self.segmenter.get_last_duration(end_time)
            if duration is not None:
                self._emit(end_time - duration, duration)

        self.propagate_finalize(end_time)

    def _emit(self, start: float, duration: float) -> None:
        stats = self.tempmod.values(reset=True)
        rows, self._rows = self._rows, 0
        if rows == 0:
            logger.debug("chop=%s empty segment start=%s skipped", self.instance_name, start)
            return

        if self._report_duration:
            out = np.concatenate([np.array([duration], dtype=FRAME_DTYPE), stats])
        else:
            out = stats
        logger.debug("chop=%s segment start=%s duration=%s", self.instance_name, start, duration)
        self.propagate_frames(start, 1.0, out.reshape(1, -1))
