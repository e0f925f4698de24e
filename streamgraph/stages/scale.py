"""Linear scaling stage."""

import numpy as np

from streamgraph.stream import ParamKind, Stage


class Scale(Stage):
    """Output `values * factor + offset`.

    The incoming block is never modified; a new block is propagated.
    """

    name = "scale"

    def __init__(self, parent=None, receiver=None) -> None:
        super().__init__(parent=parent, receiver=receiver)
        self.params.declare("factor", ParamKind.FLOAT, 1.0, "Scaling factor")
        self.params.declare("offset", ParamKind.FLOAT, 0.0, "Value added after scaling")

    def on_frames(self, time: float, weight: float, values: np.ndarray) -> None:
        scaled = values * self.params["factor"] + self.params["offset"]
        self.propagate_frames(time, weight, scaled)
