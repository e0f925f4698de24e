"""Frame blocks exchanged between stages."""

from dataclasses import dataclass

import numpy as np

from .errors import FrameError


FRAME_DTYPE = np.float64


@dataclass(frozen=True)
class Frame:
    """One delivered frame, copied out of the block that carried it.

    Attributes:
        time: Time tag in milliseconds.
        weight: Frame weight.
        values: Frame values (1-D copy, safe to keep).
    """

    time: float
    weight: float
    values: np.ndarray

    @property
    def size(self) -> int:
        """Number of values in the frame."""
        return int(self.values.shape[0])

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "time": round(float(self.time), 6),
            "weight": float(self.weight),
            "values": [float(v) for v in self.values],
        }


def as_frame_block(values, size: int | None = None) -> np.ndarray:
    """Coerce pushed values into a 2-D block of shape (count, size).

    A 1-D input is one frame. When `size` is given, a 1-D input holding
    several frames back to back is split into rows of that size.

    Args:
        values: Array-like frame values.
        size: Optional number of values per frame.

    Returns:
        Float64 array of shape (count, size).

    Raises:
        FrameError: If the values cannot be split into frames of `size`.

    Examples:
        >>> as_frame_block([1.0, 2.0, 3.0, 4.0], size=2).shape
        (2, 2)
    """
    block = np.asarray(values, dtype=FRAME_DTYPE)

    if block.ndim == 0:
        block = block.reshape(1, 1)
    elif block.ndim == 1:
        if size is None or size == 0 or block.shape[0] <= size:
            block = block.reshape(1, -1)
        elif block.shape[0] % size == 0:
            block = block.reshape(-1, size)
        else:
            raise FrameError(
                message=f"cannot split {block.shape[0]} values into frames of size {size}",
                code="SHAPE_MISMATCH",
                details={"num_values": int(block.shape[0]), "size": size},
            )
    elif block.ndim > 2:
        block = block.reshape(block.shape[0], -1)

    return block
