"""Segmentation of frame streams into time segments.

This module provides:
- The abstract `Segmenter` automaton (`is_segment`, `is_on`, `reset`)
- `ListSegmenter` for externally supplied segment lists
- `RegularSegmenter` for fixed-size chopping

Example:
    >>> from streamgraph.segment import ListSegmenter
    >>> seg = ListSegmenter(times=[0, 200, 300, 400], durations=[200, 100, 100, 100])
    >>> [t for t in range(0, 500, 10) if seg.is_segment(t)]
    [0, 200, 300, 400]
"""

from .segmenter import (
    INFINITE_TIME,
    ListSegmenter,
    RegularSegmenter,
    Segmenter,
)


__all__ = [
    # Automaton
    "Segmenter",
    "INFINITE_TIME",
    # Policies
    "ListSegmenter",
    "RegularSegmenter",
]
