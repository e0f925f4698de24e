"""streamgraph: streaming signal-analysis pipelines from a graph mini-language.

A graph expression such as "slice:<sum,scale>:chop" describes a tree of
stages chained in sequence (":") or fanned out in parallel ("<...,...>").
The compiler turns it into running stages that negotiate the stream shape
once and then exchange time-stamped frame blocks.

This module provides:
- The graph compiler and composites (`streamgraph.graph`)
- The stage contract (`streamgraph.stream`)
- Segmentation automata (`streamgraph.segment`)
- Built-in stages and their registry (`streamgraph.stages`)
- A host that drives graphs over arrays or WAV files (`streamgraph.host`)

Example:
    >>> import numpy as np
    >>> from streamgraph import Host
    >>> host = Host()
    >>> host.set_graph("chop")
    >>> host.set_param("chop.size", 100)
    >>> [f.values[0] for f in host.run(np.arange(50) * 10.0, rate=100.0).frames]
    [45.0, 145.0, 245.0, 345.0, 445.0]
"""

from .errors import StreamGraphError
from .graph import (
    Graph,
    GraphCompiler,
    GraphSpec,
    InstantiationError,
    ParseError,
    Parallel,
    Sequence,
    parse,
)
from .host import Diagnostic, Host, RecordingReceiver
from .segment import ListSegmenter, RegularSegmenter, Segmenter
from .stages import DEFAULT_REGISTRY, StageRegistry, create_stage, list_available_stages
from .stream import (
    ConfigurationError,
    Frame,
    FrameError,
    ParameterError,
    ParamKind,
    Stage,
    StreamDescriptor,
)


__version__ = "0.1.0"

__all__ = [
    # Main API
    "Host",
    "GraphCompiler",
    "Graph",
    "parse",
    "GraphSpec",
    # Contract
    "Stage",
    "StreamDescriptor",
    "Frame",
    "ParamKind",
    # Composites
    "Sequence",
    "Parallel",
    # Segmentation
    "Segmenter",
    "ListSegmenter",
    "RegularSegmenter",
    # Stages
    "StageRegistry",
    "DEFAULT_REGISTRY",
    "create_stage",
    "list_available_stages",
    # Host
    "Diagnostic",
    "RecordingReceiver",
    # Errors
    "StreamGraphError",
    "ParseError",
    "InstantiationError",
    "ConfigurationError",
    "ParameterError",
    "FrameError",
]
