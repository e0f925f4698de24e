"""Running per-column statistics over a segment.

`TempModArray` accumulates min, max, mean and standard deviation for every
input column. Output values are grouped per column, in the order Min, Max,
Mean, StdDev, restricted to the enabled statistics.

Example:
    >>> import numpy as np
    >>> stats = TempModArray(width=1, mean=True, stddev=True)
    >>> stats.input(np.array([[1.0], [3.0]]))
    >>> stats.values().tolist()
    [2.0, 1.0]
    >>> stats.labels(("x",))
    ['xMean', 'xStdDev']
"""

from typing import Sequence

import numpy as np

from streamgraph.stream import FRAME_DTYPE


STAT_NAMES = ("Min", "Max", "Mean", "StdDev")


class TempModArray:
    """Per-column temporal modeling.

    Args:
        width: Number of input columns.
        min: Enable the minimum.
        max: Enable the maximum.
        mean: Enable the mean.
        stddev: Enable the standard deviation.
    """

    def __init__(
        self,
        width: int = 0,
        min: bool = False,
        max: bool = False,
        mean: bool = False,
        stddev: bool = False,
    ) -> None:
        self.enabled = (bool(min), bool(max), bool(mean), bool(stddev))
        self.resize(width)

    @property
    def width(self) -> int:
        return int(self._count.shape[0])

    @property
    def num_values(self) -> int:
        """Number of output values for all columns."""
        return self.width * sum(self.enabled)

    def enable(self, min: bool = False, max: bool = False, mean: bool = False, stddev: bool = False) -> None:
        self.enabled = (bool(min), bool(max), bool(mean), bool(stddev))

    def resize(self, width: int) -> None:
        """Set the number of columns and clear the statistics."""
        width = max(0, int(width))
        self._min = np.empty(width, dtype=FRAME_DTYPE)
        self._max = np.empty(width, dtype=FRAME_DTYPE)
        self._sum = np.empty(width, dtype=FRAME_DTYPE)
        self._sum_sq = np.empty(width, dtype=FRAME_DTYPE)
        self._count = np.empty(width, dtype=np.int64)
        self.reset()

    def reset(self) -> None:
        self._min.fill(np.inf)
        self._max.fill(-np.inf)
        self._sum.fill(0.0)
        self._sum_sq.fill(0.0)
        self._count.fill(0)

    @property
    def count(self) -> int:
        """Number of rows accumulated in the first column."""
        return int(self._count[0]) if self.width else 0

    def input(self, block: np.ndarray) -> None:
        """Accumulate rows of a (count, columns) block.

        Rows narrower than `width` update their leading columns only; extra
        columns are ignored.
        """
        block = np.atleast_2d(np.asarray(block, dtype=FRAME_DTYPE))
        if block.shape[0] == 0 or self.width == 0:
            return

        cols = min(block.shape[1], self.width)
        data = block[:, :cols]

        np.minimum(self._min[:cols], data.min(axis=0), out=self._min[:cols])
        np.maximum(self._max[:cols], data.max(axis=0), out=self._max[:cols])
        self._sum[:cols] += data.sum(axis=0)
        self._sum_sq[:cols] += np.square(data).sum(axis=0)
        self._count[:cols] += data.shape[0]

    def values(self, reset: bool = False) -> np.ndarray:
        """Return the enabled statistics, grouped per column.

        Columns that received no data report 0.0 for every statistic.
        """
        count = np.maximum(self._count, 1)
        mean = self._sum / count
        variance = self._sum_sq / count - np.square(mean)
        stddev = np.sqrt(np.maximum(variance, 0.0))
        empty = self._count == 0

        table = np.stack(
            [
                np.where(empty, 0.0, self._min),
                np.where(empty, 0.0, self._max),
                np.where(empty, 0.0, mean),
                np.where(empty, 0.0, stddev),
            ],
            axis=1,
        )
        result = table[:, list(self.enabled)].reshape(-1)

        if reset:
            self.reset()
        return result

    def labels(self, input_labels: Sequence[str] | None = None) -> list[str]:
        """Return output labels: each input label suffixed by the statistic."""
        names = [name for name, on in zip(STAT_NAMES, self.enabled) if on]
        result = []
        for i in range(self.width):
            base = input_labels[i] if input_labels is not None and i < len(input_labels) else ""
            result.extend(f"{base}{name}" for name in names)
        return result
