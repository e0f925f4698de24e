"""The streaming contract every stage implements.

A stage receives one `configure_stream()` call describing the shape of its
input, derives the shape of its output and propagates it to its receiver, then
receives an unbounded sequence of `push_frames()` calls. Lifecycle calls
(`reset()`, `finalize()`, `segment()`) travel the same way. A stage only
calls its receiver from within its own matching call.

Diagnostics never travel through the data channel: a stage reports to its
parent with `reject()` (fatal for the current call) or `warn()` (the stage
repaired the problem and carries on).

Subclasses override the `on_*` hooks; the public methods wrap them with the
bookkeeping that is the same for every leaf.

Example:
    >>> import numpy as np
    >>> from streamgraph.stream import Stage, StreamDescriptor
    >>> class Double(Stage):
    ...     name = "double"
    ...     def on_frames(self, time, weight, values):
    ...         self.propagate_frames(time, weight, values * 2.0)
    >>> stage = Double()
    >>> stage.configure_stream(StreamDescriptor(width=2))
    StreamDescriptor(has_time_tags=False, rate=1000.0, offset=0.0, width=2, height=1, labels=None, has_var_size=False, domain=0.0, max_frames=1)
"""

import logging
import weakref
from typing import NoReturn, Protocol, runtime_checkable

import numpy as np

from .descriptor import StreamDescriptor
from .errors import ConfigurationError, FrameError
from .frames import as_frame_block
from .params import Param, ParamSet


logger = logging.getLogger(__name__)


@runtime_checkable
class Parent(Protocol):
    """Receiver of stage diagnostics (usually the host)."""

    def signal_error(self, stage: "Stage", message: str) -> None:
        """Report an unrecoverable configuration problem."""
        ...

    def signal_warning(self, stage: "Stage", message: str) -> None:
        """Report a problem the stage has repaired on its own."""
        ...


class Stage:
    """Base class for every pipeline stage, leaf or composite.

    Attributes:
        name: Registry name of the stage class.
        instance_name: Label addressing this instance inside a graph.
        receiver: Next stage downstream (not owned).
        params: Declared parameters.
        input_descriptor: Last descriptor received by `configure_stream`.
        output_descriptor: Last descriptor propagated to the receiver.
    """

    name = "stage"

    def __init__(self, parent: Parent | None = None, receiver: "Stage | None" = None) -> None:
        self._parent_ref = None
        self.parent = parent
        self.receiver = receiver
        self.instance_name = self.name
        self.params = ParamSet(on_reconfigure=self._on_param_reconfigure)
        self.input_descriptor: StreamDescriptor | None = None
        self.output_descriptor: StreamDescriptor | None = None
        self._configured = False

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(instance_name={self.instance_name!r})"

    # ------------------------------------------------------------------
    # Wiring
    # ------------------------------------------------------------------

    @property
    def parent(self) -> Parent | None:
        """Diagnostics parent, held by weak reference."""
        if self._parent_ref is None:
            return None
        return self._parent_ref()

    @parent.setter
    def parent(self, parent: Parent | None) -> None:
        self._parent_ref = weakref.ref(parent) if parent is not None else None

    def set_receiver(self, receiver: "Stage | None") -> None:
        """Set the stage that receives this stage's output."""
        self.receiver = receiver

    def close(self) -> None:
        """Detach this stage from its receiver and parent."""
        self.receiver = None
        self.parent = None
        self._configured = False

    def iter_leaves(self):
        """Yield the leaf stages below (and including) this stage."""
        yield self

    # ------------------------------------------------------------------
    # Diagnostics
    # ------------------------------------------------------------------

    def reject(self, message: str, code: str = "STREAM_REJECTED", **details) -> NoReturn:
        """Signal an unrecoverable configuration problem and abort the call.

        Raises:
            ConfigurationError: Always.
        """
        parent = self.parent
        if parent is not None:
            parent.signal_error(self, message)
        else:
            logger.error("stage=%s error=%s", self.instance_name, message)

        raise ConfigurationError(
            message=f"{self.instance_name}: {message}",
            code=code,
            details={"stage": self.instance_name, **details},
        )

    def warn(self, message: str) -> None:
        """Signal that a parameter was repaired; processing continues."""
        parent = self.parent
        if parent is not None:
            parent.signal_warning(self, message)
        else:
            logger.warning("stage=%s warning=%s", self.instance_name, message)

    # ------------------------------------------------------------------
    # Parameters
    # ------------------------------------------------------------------

    @property
    def is_configured(self) -> bool:
        """Whether the last negotiation succeeded and is still valid."""
        return self._configured

    def invalidate(self) -> None:
        """Require a new `configure_stream` before further frames."""
        self._configured = False

    def _on_param_reconfigure(self, param: Param) -> None:
        logger.debug(
            "stage=%s param=%s changed, renegotiation required",
            self.instance_name,
            param.name,
        )
        self.invalidate()

    # ------------------------------------------------------------------
    # Contract
    # ------------------------------------------------------------------

    def configure_stream(self, descriptor: StreamDescriptor) -> StreamDescriptor:
        """Negotiate the input shape and propagate the output shape.

        Returns:
            The descriptor this stage propagated to its receiver.

        Raises:
            ConfigurationError: If this stage or a downstream stage rejects
                the stream.
        """
        self._configured = False
        self.input_descriptor = descriptor
        output = self.on_configure(descriptor)
        self._configured = True
        return output

    def push_frames(self, time: float, weight: float, values) -> None:
        """Deliver a block of frames starting at `time`.

        Args:
            time: Time of the first frame in milliseconds.
            weight: Frame weight.
            values: Array of shape (count, size), or a single 1-D frame.

        Raises:
            ConfigurationError: If the stage has not been (re)configured.
            FrameError: If the block does not match the negotiated frame size.
        """
        if not self._configured:
            raise ConfigurationError(
                message=f"{self.instance_name}: frames received before configure_stream",
                code="NOT_CONFIGURED",
                details={"stage": self.instance_name},
            )

        descriptor = self.input_descriptor
        block = as_frame_block(values, descriptor.frame_size)

        if block.shape[1] > descriptor.frame_size or (
            block.shape[1] != descriptor.frame_size and not descriptor.has_var_size
        ):
            raise FrameError(
                message=(
                    f"{self.instance_name}: frame size {block.shape[1]} does not match "
                    f"negotiated size {descriptor.frame_size}"
                ),
                code="SHAPE_MISMATCH",
                details={"stage": self.instance_name, "size": int(block.shape[1])},
            )

        self.on_frames(time, weight, block)

    def reset(self) -> None:
        """Discard internal state and propagate the reset."""
        self.on_reset()

    def finalize(self, end_time: float) -> None:
        """Signal the end of the input stream at `end_time`."""
        self.on_finalize(end_time)

    def segment(self, time: float, is_start: bool) -> None:
        """Receive a segment boundary from an upstream segmenter."""
        self.on_segment(time, is_start)

    # ------------------------------------------------------------------
    # Hooks (pass-through by default)
    # ------------------------------------------------------------------

    def on_configure(self, descriptor: StreamDescriptor) -> StreamDescriptor:
        return self.propagate_stream(descriptor)

    def on_frames(self, time: float, weight: float, values: np.ndarray) -> None:
        self.propagate_frames(time, weight, values)

    def on_reset(self) -> None:
        self.propagate_reset()

    def on_finalize(self, end_time: float) -> None:
        self.propagate_finalize(end_time)

    def on_segment(self, time: float, is_start: bool) -> None:
        self.propagate_segment(time, is_start)

    # ------------------------------------------------------------------
    # Propagation to the receiver
    # ------------------------------------------------------------------

    def propagate_stream(self, descriptor: StreamDescriptor) -> StreamDescriptor:
        self.output_descriptor = descriptor
        if self.receiver is not None:
            self.receiver.configure_stream(descriptor)
        return descriptor

    def propagate_frames(self, time: float, weight: float, values: np.ndarray) -> None:
        if self.receiver is not None:
            self.receiver.push_frames(time, weight, values)

    def propagate_reset(self) -> None:
        if self.receiver is not None:
            self.receiver.reset()

    def propagate_finalize(self, end_time: float) -> None:
        if self.receiver is not None:
            self.receiver.finalize(end_time)

    def propagate_segment(self, time: float, is_start: bool) -> None:
        if self.receiver is not None:
            self.receiver.segment(time, is_start)
