"""Fan-out composite: every branch sees the same input stream.

Branches are not chained to one another; they all deliver into the shared
receiver of the composite, one after the other. Reconciling differently
shaped branch outputs is up to the receiver.
"""

import logging

import numpy as np

from streamgraph.stream import StreamDescriptor, as_frame_block

from .composite import Composite


logger = logging.getLogger(__name__)


class Parallel(Composite):
    """Fan-out of independent branches sharing one receiver.

    Attributes:
        output_descriptors: Output descriptor of each branch after the last
            successful negotiation.
    """

    name = "parallel"

    def __init__(self, *args, **kwargs) -> None:
        self.output_descriptors: list[StreamDescriptor] = []
        super().__init__(*args, **kwargs)

    def _wire(self) -> None:
        for branch in self.children:
            branch.set_receiver(self.receiver)

    def on_configure(self, descriptor: StreamDescriptor) -> StreamDescriptor:
        self.output_descriptors = []
        branches = self.children
        if not branches:
            return self.propagate_stream(descriptor)

        outputs = []
        for index, branch in enumerate(branches):
            logger.debug("parallel branch=%d stage=%r configuring", index, branch)
            outputs.append(branch.configure_stream(descriptor))

        self.output_descriptors = outputs
        self.output_descriptor = outputs[-1]
        return self.output_descriptor

    def on_frames(self, time: float, weight: float, values: np.ndarray) -> None:
        if not self._handles:
            self.propagate_frames(time, weight, values)
            return

        block = as_frame_block(values, self.input_descriptor.frame_size)
        for branch in self.children:
            # each branch gets its own buffer so siblings cannot see its edits
            branch.push_frames(time, weight, block.copy())

    def on_reset(self) -> None:
        if not self._handles:
            self.propagate_reset()
        for branch in self.children:
            branch.reset()

    def on_finalize(self, end_time: float) -> None:
        if not self._handles:
            self.propagate_finalize(end_time)
        for branch in self.children:
            branch.finalize(end_time)

    def on_segment(self, time: float, is_start: bool) -> None:
        if not self._handles:
            self.propagate_segment(time, is_start)
        for branch in self.children:
            branch.segment(time, is_start)
