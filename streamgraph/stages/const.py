"""Constant column stage."""

import numpy as np

from streamgraph.stream import ParamKind, Stage, StreamDescriptor


class Const(Stage):
    """Append a constant column to every row.

    The output labels extend the input labels with `name`; unlabeled input
    columns get empty labels.
    """

    name = "const"

    def __init__(self, parent=None, receiver=None) -> None:
        super().__init__(parent=parent, receiver=receiver)
        self.params.declare("value", ParamKind.FLOAT, 0.0, "Value of the added column")
        self.params.declare("name", ParamKind.STRING, "Const", "Label of the added column", reconfigure=True)

    def on_configure(self, descriptor: StreamDescriptor) -> StreamDescriptor:
        labels = descriptor.labels if descriptor.labels is not None else ("",) * descriptor.width
        return self.propagate_stream(
            descriptor.replace(
                width=descriptor.width + 1,
                labels=(*labels, self.params["name"]),
                has_var_size=False,
            )
        )

    def on_frames(self, time: float, weight: float, values: np.ndarray) -> None:
        descriptor = self.input_descriptor
        count = values.shape[0]
        rows = np.zeros((count, descriptor.height, descriptor.width + 1), dtype=values.dtype)
        rows[:, :, : descriptor.width] = _pad(values, descriptor.frame_size).reshape(
            count, descriptor.height, descriptor.width
        )
        rows[:, :, descriptor.width] = self.params["value"]
        self.propagate_frames(time, weight, rows.reshape(count, -1))


def _pad(values: np.ndarray, size: int) -> np.ndarray:
    if values.shape[1] == size:
        return values
    padded = np.zeros((values.shape[0], size), dtype=values.dtype)
    padded[:, : values.shape[1]] = values
    return padded
