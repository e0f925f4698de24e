"""Column sum stage."""

import numpy as np

from streamgraph.stream import ParamKind, Stage, StreamDescriptor


class Sum(Stage):
    """Sum the columns of every row into a single column."""

    name = "sum"

    def __init__(self, parent=None, receiver=None) -> None:
        super().__init__(parent=parent, receiver=receiver)
        self.params.declare("colname", ParamKind.STRING, "Sum", "Output column name", reconfigure=True)

    def on_configure(self, descriptor: StreamDescriptor) -> StreamDescriptor:
        if descriptor.width < 1:
            self.reject("input stream has no columns to sum", width=descriptor.width)
        return self.propagate_stream(
            descriptor.replace(width=1, labels=(self.params["colname"],), has_var_size=False)
        )

    def on_frames(self, time: float, weight: float, values: np.ndarray) -> None:
        descriptor = self.input_descriptor
        width = descriptor.width
        if values.shape[1] != descriptor.frame_size:
            # variable-size frames: pad to full rows
            padded = np.zeros((values.shape[0], descriptor.frame_size), dtype=values.dtype)
            padded[:, : values.shape[1]] = values
            values = padded

        rows = values.reshape(values.shape[0], -1, width)
        self.propagate_frames(time, weight, rows.sum(axis=2))
