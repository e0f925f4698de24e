"""Built-in stages and the stage registry.

This module provides the leaf stages available in graph expressions and the
registry the compiler uses as its module factory:

- thru / _: pass-through
- const, select, scale, sum: per-frame column operations
- slice: ring-buffer windowing
- chop: segment statistics over regular or listed segments
- gate, segstats: threshold segmentation and segment statistics

Example:
    >>> from streamgraph.stages import list_available_stages
    >>> "chop" in list_available_stages()
    True
"""

from .chop import Chop
from .const import Const
from .gate import Gate
from .registry import (
    AVAILABLE_STAGES,
    DEFAULT_REGISTRY,
    StageRegistry,
    create_stage,
    list_available_stages,
)
from .scale import Scale
from .segstats import SegStats
from .select import Select
from .slice import Slice
from .sum import Sum
from .tempmod import TempModArray
from .thru import Thru


__all__ = [
    # Registry
    "StageRegistry",
    "DEFAULT_REGISTRY",
    "AVAILABLE_STAGES",
    "create_stage",
    "list_available_stages",
    # Stages
    "Thru",
    "Const",
    "Select",
    "Scale",
    "Sum",
    "Slice",
    "Chop",
    "Gate",
    "SegStats",
    # Utilities
    "TempModArray",
]
