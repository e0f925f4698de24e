"""Streaming contract shared by every stage.

This module provides:
- The stream descriptor negotiated once per configuration
- Frame blocks and recorded frames
- Declared, typed stage parameters
- The `Stage` base class and the `Parent` diagnostics protocol

Example:
    >>> from streamgraph.stream import Stage, StreamDescriptor
    >>> stage = Stage()
    >>> out = stage.configure_stream(StreamDescriptor(rate=100.0, width=3))
    >>> stage.push_frames(0.0, 1.0, [1.0, 2.0, 3.0])
"""

from .descriptor import StreamDescriptor
from .errors import (
    ConfigurationError,
    FrameError,
    ParameterError,
    StreamError,
)
from .frames import FRAME_DTYPE, Frame, as_frame_block
from .params import Param, ParamKind, ParamSet, coerce_value
from .stage import Parent, Stage


__all__ = [
    # Contract
    "Stage",
    "Parent",
    "StreamDescriptor",
    # Frames
    "Frame",
    "FRAME_DTYPE",
    "as_frame_block",
    # Parameters
    "Param",
    "ParamKind",
    "ParamSet",
    "coerce_value",
    # Errors
    "StreamError",
    "ConfigurationError",
    "ParameterError",
    "FrameError",
]
