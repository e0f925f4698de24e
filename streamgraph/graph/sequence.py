"""Serial composite: children chained end to end."""

import numpy as np

from streamgraph.stream import StreamDescriptor

from .composite import Composite


class Sequence(Composite):
    """Chain of stages where each child receives into the next one.

    Every contract call goes to the first child; the rest of the chain runs
    through the wiring. An empty sequence forwards straight to its receiver.

    Example:
        >>> from streamgraph.stages import create_stage
        >>> seq = Sequence([create_stage("scale"), create_stage("sum")])
        >>> len(seq)
        2
    """

    name = "sequence"

    def _wire(self) -> None:
        children = self.children
        for i, child in enumerate(children):
            child.set_receiver(children[i + 1] if i + 1 < len(children) else self.receiver)

    def on_configure(self, descriptor: StreamDescriptor) -> StreamDescriptor:
        children = self.children
        if not children:
            return self.propagate_stream(descriptor)

        children[0].configure_stream(descriptor)
        self.output_descriptor = children[-1].output_descriptor
        return self.output_descriptor

    def on_frames(self, time: float, weight: float, values: np.ndarray) -> None:
        if self._handles:
            self._handles[0].stage.push_frames(time, weight, values)
        else:
            self.propagate_frames(time, weight, values)

    def on_reset(self) -> None:
        if self._handles:
            self._handles[0].stage.reset()
        else:
            self.propagate_reset()

    def on_finalize(self, end_time: float) -> None:
        if self._handles:
            self._handles[0].stage.finalize(end_time)
        else:
            self.propagate_finalize(end_time)

    def on_segment(self, time: float, is_start: bool) -> None:
        if self._handles:
            self._handles[0].stage.segment(time, is_start)
        else:
            self.propagate_segment(time, is_start)
