"""Column selection stage."""

import numpy as np

from streamgraph.stream import FrameError, ParamKind, Stage, StreamDescriptor


class Select(Stage):
    """Keep the listed columns of every row, in the listed order.

    An empty column list keeps every column. Negative indices count from the
    last column.
    """

    name = "select"

    def __init__(self, parent=None, receiver=None) -> None:
        super().__init__(parent=parent, receiver=receiver)
        self.params.declare("columns", ParamKind.FLOATS, (), "Indices of the columns to keep", reconfigure=True)
        self._columns: list[int] = []

    def on_configure(self, descriptor: StreamDescriptor) -> StreamDescriptor:
        width = descriptor.width
        requested = [int(index) for index in self.params["columns"]]
        if not requested:
            requested = list(range(width))

        columns = []
        for index in requested:
            resolved = index + width if index < 0 else index
            if not 0 <= resolved < width:
                self.reject(
                    f"column {index} out of range for {width} input columns",
                    column=index,
                    width=width,
                )
            columns.append(resolved)

        self._columns = columns
        labels = None
        if descriptor.labels is not None:
            labels = tuple(descriptor.labels[i] for i in columns)

        return self.propagate_stream(
            descriptor.replace(width=len(columns), labels=labels, has_var_size=False)
        )

    def on_frames(self, time: float, weight: float, values: np.ndarray) -> None:
        descriptor = self.input_descriptor
        if values.shape[1] != descriptor.frame_size:
            raise FrameError(
                message=f"{self.instance_name}: variable-size frames cannot be selected",
                code="SHAPE_MISMATCH",
                details={"stage": self.instance_name, "size": int(values.shape[1])},
            )
        rows = values.reshape(values.shape[0], descriptor.height, descriptor.width)
        self.propagate_frames(time, weight, rows[:, :, self._columns].reshape(values.shape[0], -1))
