"""Threshold segmentation stage.

`gate` watches one input column. A segment starts when the value rises above
`threshold` (at least `mininter` ms after the previous start) and ends when
it falls below `offthresh`. Frames pass through unchanged; boundaries travel
downstream as `segment(time, is_start)` calls issued before the frame that
caused them.
"""

import numpy as np

from streamgraph.stream import ParamKind, Stage, StreamDescriptor


class Gate(Stage):
    """Emit segment boundaries from a threshold on one column."""

    name = "gate"

    def __init__(self, parent=None, receiver=None) -> None:
        super().__init__(parent=parent, receiver=receiver)
        self.params.declare("column", ParamKind.INT, 0, "Index of the watched column", reconfigure=True)
        self.params.declare("threshold", ParamKind.FLOAT, -12.0, "Segment start threshold")
        self.params.declare("offthresh", ParamKind.FLOAT, -80.0, "Segment end threshold")
        self.params.declare("mininter", ParamKind.FLOAT, 50.0, "Minimum interval between starts in ms")
        self.params.declare("offset", ParamKind.FLOAT, 0.0, "Time offset added to boundaries in ms")

        self._column = 0
        self._is_on = False
        self._onset_time = -np.inf

    def on_configure(self, descriptor: StreamDescriptor) -> StreamDescriptor:
        column = self.params["column"]
        resolved = column + descriptor.width if column < 0 else column
        if not 0 <= resolved < descriptor.width:
            self.reject(
                f"column {column} out of range for {descriptor.width} input columns",
                column=column,
                width=descriptor.width,
            )

        self._column = resolved
        self._reset_state()
        return self.propagate_stream(descriptor)

    def _reset_state(self) -> None:
        self._is_on = False
        self._onset_time = -np.inf

    def _thresholds(self) -> tuple[float, float]:
        threshold = self.params["threshold"]
        offthresh = self.params["offthresh"]
        if offthresh > threshold:
            self.warn(f"offthresh {offthresh} is above threshold {threshold}, using {threshold}")
            self.params["offthresh"] = threshold
            offthresh = threshold
        return threshold, offthresh

    def on_reset(self) -> None:
        self._reset_state()
        self.propagate_reset()

    def on_frames(self, time: float, weight: float, values: np.ndarray) -> None:
        threshold, offthresh = self._thresholds()
        mininter = self.params["mininter"]
        offset = self.params["offset"]
        period = self.input_descriptor.frame_period

        for i, row in enumerate(values):
            frame_time = time + i * period
            level = row[self._column] if self._column < row.shape[0] else 0.0

            if not self._is_on and level > threshold and frame_time >= self._onset_time + mininter:
                self._is_on = True
                self._onset_time = frame_time
                self.propagate_segment(frame_time + offset, True)
            elif self._is_on and level < offthresh:
                self._is_on = False
                self.propagate_segment(frame_time + offset, False)

            self.propagate_frames(frame_time, weight, values[i : i + 1])

    def on_finalize(self, end_time: float) -> None:
        if self._is_on:
            self._is_on = False
            self.propagate_segment(end_time + self.params["offset"], False)
        self.propagate_finalize(end_time)
