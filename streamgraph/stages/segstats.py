"""Segment statistics driven by upstream segment calls."""

import numpy as np

from streamgraph.stream import FRAME_DTYPE, ParamKind, Stage, StreamDescriptor

from .tempmod import TempModArray


class SegStats(Stage):
    """Aggregate the frames between `segment()` calls.

    Frames are accumulated while a segment is on. A segment end, or a new
    start while a segment is on, emits one frame at the segment start with
    the duration followed by Min, Max, Mean and StdDev of each column. Input
    frames are not passed on.
    """

    name = "segstats"

    def __init__(self, parent=None, receiver=None) -> None:
        super().__init__(parent=parent, receiver=receiver)
        self.params.declare("duration", ParamKind.BOOL, True, "Output the segment duration", reconfigure=True)
        self.tempmod = TempModArray(min=True, max=True, mean=True, stddev=True)
        self._report_duration = True
        self._onset_time = 0.0
        self._is_on = False

    def on_configure(self, descriptor: StreamDescriptor) -> StreamDescriptor:
        self._report_duration = self.params["duration"]
        self.tempmod.resize(descriptor.width)
        self._onset_time = 0.0
        self._is_on = False

        labels = self.tempmod.labels(descriptor.labels)
        if self._report_duration:
            labels = ["Duration", *labels]

        return self.propagate_stream(
            StreamDescriptor(
                has_time_tags=True,
                rate=descriptor.rate,
                width=len(labels),
                height=1,
                labels=tuple(labels),
            )
        )

    def on_reset(self) -> None:
        self.tempmod.reset()
        self._onset_time = 0.0
        self._is_on = False
        self.propagate_reset()

    def on_frames(self, time: float, weight: float, values: np.ndarray) -> None:
        if self._is_on:
            self.tempmod.input(values)

    def on_segment(self, time: float, is_start: bool) -> None:
        if self._is_on:
            stats = self.tempmod.values(reset=True)
            if self._report_duration:
                stats = np.concatenate([np.array([time - self._onset_time], dtype=FRAME_DTYPE), stats])
            self.propagate_frames(self._onset_time, 1.0, stats.reshape(1, -1))
        else:
            self.tempmod.reset()

        self._onset_time = time
        self._is_on = is_start

    def on_finalize(self, end_time: float) -> None:
        self.on_segment(end_time, False)
        self.propagate_finalize(end_time)
