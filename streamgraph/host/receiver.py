"""Terminal stage recording everything it receives."""

import numpy as np

from streamgraph.stream import (
    FRAME_DTYPE,
    ConfigurationError,
    Frame,
    FrameError,
    Stage,
    StreamDescriptor,
    as_frame_block,
)


class RecordingReceiver(Stage):
    """Final receiver of a graph, keeping copies of all delivered data.

    Attributes:
        descriptor: Last negotiated output descriptor of the graph.
        frames: Every received frame, copied out of its block.
        segments: Received `(time, is_start)` segment calls.
        finalize_times: End times of received `finalize` calls.
        configure_count: Number of negotiations received.
        reset_count: Number of resets received.
    """

    name = "receiver"

    def __init__(self, parent=None) -> None:
        super().__init__(parent=parent)
        self.descriptor: StreamDescriptor | None = None
        self.configure_count = 0
        self.clear()

    def clear(self) -> None:
        """Forget received frames, segments, and lifecycle calls."""
        self.frames: list[Frame] = []
        self.segments: list[tuple[float, bool]] = []
        self.finalize_times: list[float] = []
        self.reset_count = 0

    @property
    def times(self) -> list[float]:
        return [frame.time for frame in self.frames]

    @property
    def values(self) -> np.ndarray:
        """Received values stacked as (count, size); empty when no frames.

        Raises:
            FrameError: If the frames have different widths, as after a
                parallel graph whose branches differ. `frames` still holds
                every row in that case.
        """
        if not self.frames:
            size = self.descriptor.frame_size if self.descriptor is not None else 0
            return np.zeros((0, size), dtype=FRAME_DTYPE)

        widths = sorted({frame.values.shape[0] for frame in self.frames})
        if len(widths) > 1:
            raise FrameError(
                message=f"{self.instance_name}: received frames of widths {widths} cannot be stacked",
                code="SHAPE_MISMATCH",
                details={"stage": self.instance_name, "widths": widths},
            )
        return np.vstack([frame.values for frame in self.frames])

    def on_configure(self, descriptor: StreamDescriptor) -> StreamDescriptor:
        self.descriptor = descriptor
        self.configure_count += 1
        return self.propagate_stream(descriptor)

    def push_frames(self, time: float, weight: float, values) -> None:
        # parallel branches may deliver blocks of different widths
        if not self._configured:
            raise ConfigurationError(
                message=f"{self.instance_name}: frames received before configure_stream",
                code="NOT_CONFIGURED",
                details={"stage": self.instance_name},
            )
        self.on_frames(time, weight, as_frame_block(values))

    def on_frames(self, time: float, weight: float, values: np.ndarray) -> None:
        period = self.input_descriptor.frame_period
        for i, row in enumerate(values):
            self.frames.append(Frame(time=time + i * period, weight=weight, values=row.copy()))

    def on_reset(self) -> None:
        self.reset_count += 1

    def on_finalize(self, end_time: float) -> None:
        self.finalize_times.append(end_time)

    def on_segment(self, time: float, is_start: bool) -> None:
        self.segments.append((time, is_start))
