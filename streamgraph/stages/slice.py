"""Windowing stage with an internal ring buffer.

`slice` collects the first column of its input into windows of `size`
samples taken every `hop` samples. One incoming call may emit zero, one or
several windows. A window is time-tagged at its center.
"""

import logging

import numpy as np

from streamgraph.stream import FRAME_DTYPE, ParamKind, Stage, StreamDescriptor


logger = logging.getLogger(__name__)


class Slice(Stage):
    """Cut the input signal into overlapping windows.

    Output frames are column vectors (width 1, height `size`) at rate
    `rate / hop`. A hop larger than the size skips the samples in between.
    """

    name = "slice"

    def __init__(self, parent=None, receiver=None) -> None:
        super().__init__(parent=parent, receiver=receiver)
        self.params.declare("size", ParamKind.INT, 2048, "Window size in samples", reconfigure=True)
        self.params.declare("hop", ParamKind.INT, 512, "Hop size in samples", reconfigure=True)
        self._buffer = np.zeros(0, dtype=FRAME_DTYPE)
        self._hop = 1
        self._index = 0

    def on_configure(self, descriptor: StreamDescriptor) -> StreamDescriptor:
        size = self.params["size"]
        hop = self.params["hop"]

        if size < 1:
            self.warn(f"window size {size} is below 1, using 1")
            self.params["size"] = 1
            size = 1
        if hop < 1:
            self.warn(f"hop size {hop} is below 1, using 1")
            self.params["hop"] = 1
            hop = 1

        if size != self._buffer.shape[0]:
            self._buffer = np.zeros(size, dtype=FRAME_DTYPE)
            self._index = 0
        self._hop = hop

        logger.debug("slice=%s size=%d hop=%d rate=%s", self.instance_name, size, hop, descriptor.rate)
        return self.propagate_stream(
            StreamDescriptor(
                has_time_tags=False,
                rate=descriptor.rate / hop,
                offset=descriptor.offset + 500.0 * size / descriptor.rate,
                width=1,
                height=size,
                labels=descriptor.labels[:1] if descriptor.labels else None,
                has_var_size=False,
                domain=size / descriptor.rate,
                max_frames=1,
            )
        )

    def on_reset(self) -> None:
        self._index = 0
        self.propagate_reset()

    def on_frames(self, time: float, weight: float, values: np.ndarray) -> None:
        samples = values[:, 0] if values.shape[1] else np.zeros(values.shape[0], dtype=FRAME_DTYPE)
        size = self._buffer.shape[0]
        period = 1000.0 / self.input_descriptor.rate
        consumed = 0
        total = samples.shape[0]

        while consumed < total:
            if self._index < 0:
                # hop larger than size: drop the samples between windows
                skip = min(-self._index, total - consumed)
                self._index += skip
                consumed += skip
                continue

            count = min(size - self._index, total - consumed)
            self._buffer[self._index : self._index + count] = samples[consumed : consumed + count]
            self._index += count
            consumed += count

            if self._index == size:
                window_time = time + (consumed - size // 2) * period
                self.propagate_frames(window_time, weight, self._buffer.reshape(1, size).copy())

                overlap = size - self._hop
                if overlap > 0:
                    self._buffer[:overlap] = self._buffer[self._hop :]
                self._index = overlap
