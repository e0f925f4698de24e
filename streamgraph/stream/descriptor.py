"""Stream descriptor negotiated between stages.

A descriptor is sent once from the host into the root stage; every stage
derives its own output descriptor from the one it received and propagates it
to its receiver. Descriptors are immutable: a stage that changes the shape
builds a new one with `replace()`.

Example:
    >>> from streamgraph.stream import StreamDescriptor
    >>> audio = StreamDescriptor(rate=16000.0, width=1, height=1)
    >>> audio.frame_period
    0.0625
    >>> audio.replace(width=2, labels=("left", "right")).frame_size
    2
"""

from dataclasses import dataclass, replace
from typing import Any

from .errors import ConfigurationError


@dataclass(frozen=True)
class StreamDescriptor:
    """Negotiated shape and metadata of a frame stream.

    Attributes:
        has_time_tags: Whether frames carry irregular time tags instead of
            being sampled at `rate`.
        rate: Frame rate in Hz.
        offset: Time offset of the stream in milliseconds.
        width: Number of columns per frame row.
        height: Number of rows per frame.
        labels: Optional column labels, one per column.
        has_var_size: Whether frames may carry fewer than width * height values.
        domain: Extent of the frame domain (e.g., frequency range), 0 if none.
        max_frames: Maximum number of frames delivered per push call.
    """

    has_time_tags: bool = False
    rate: float = 1000.0
    offset: float = 0.0
    width: int = 1
    height: int = 1
    labels: tuple[str, ...] | None = None
    has_var_size: bool = False
    domain: float = 0.0
    max_frames: int = 1

    def __post_init__(self) -> None:
        """Normalize labels and validate fields on initialization."""
        if self.labels is not None and not isinstance(self.labels, tuple):
            object.__setattr__(self, "labels", tuple(str(label) for label in self.labels))
        self.validate()

    def validate(self) -> None:
        """Validate descriptor fields.

        Raises:
            ConfigurationError: If any field is out of range.
        """
        if self.rate <= 0:
            raise ConfigurationError(
                message=f"rate must be positive, got {self.rate}",
                code="INVALID_DESCRIPTOR",
                details={"field": "rate", "value": self.rate},
            )

        if self.width < 0 or self.height < 0:
            raise ConfigurationError(
                message=f"width and height must be >= 0, got {self.width}x{self.height}",
                code="INVALID_DESCRIPTOR",
                details={"field": "width/height", "width": self.width, "height": self.height},
            )

        if self.max_frames < 1:
            raise ConfigurationError(
                message=f"max_frames must be >= 1, got {self.max_frames}",
                code="INVALID_DESCRIPTOR",
                details={"field": "max_frames", "value": self.max_frames},
            )

        if self.labels is not None and len(self.labels) != self.width:
            raise ConfigurationError(
                message=f"expected {self.width} labels, got {len(self.labels)}",
                code="INVALID_DESCRIPTOR",
                details={"field": "labels", "labels": list(self.labels), "width": self.width},
            )

    @property
    def frame_size(self) -> int:
        """Number of values in one full frame."""
        return self.width * self.height

    @property
    def frame_period(self) -> float:
        """Time between two successive frames in milliseconds."""
        return 1000.0 / self.rate

    def replace(self, **changes: Any) -> "StreamDescriptor":
        """Return a copy with the given fields changed."""
        return replace(self, **changes)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "has_time_tags": self.has_time_tags,
            "rate": self.rate,
            "offset": self.offset,
            "width": self.width,
            "height": self.height,
            "labels": list(self.labels) if self.labels is not None else None,
            "has_var_size": self.has_var_size,
            "domain": self.domain,
            "max_frames": self.max_frames,
        }
