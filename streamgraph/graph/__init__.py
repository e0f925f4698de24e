"""Graph compiler for the `a:b<c,d>` pipeline language.

This module provides:
- `parse()` from expression text to an immutable `GraphSpec`
- `instantiate()` and `connect()` building and wiring the stage tree
- The `Sequence` and `Parallel` composites with owned/borrowed children
- `GraphCompiler` and the compiled `Graph` with parameter addressing

Example:
    >>> from streamgraph.graph import GraphCompiler, parse
    >>> [leaf.name for leaf in parse("slice:fft:sum:scale:onseg").children]
    ['slice', 'fft', 'sum', 'scale', 'onseg']
    >>> graph = GraphCompiler().compile("<sum,scale,_>")
    >>> graph.root
    Parallel([Sum(instance_name='sum'), Scale(instance_name='scale'), Thru(instance_name='_')])
"""

from .compiler import Graph, GraphCompiler, StageFactory, connect, instantiate
from .composite import Borrowed, Composite, Owned
from .errors import GraphError, InstantiationError, ParseError
from .parallel import Parallel
from .parser import parse
from .sequence import Sequence
from .spec import GraphKind, GraphSpec


__all__ = [
    # Main API
    "GraphCompiler",
    "Graph",
    "parse",
    "instantiate",
    "connect",
    "StageFactory",
    # Graph description
    "GraphSpec",
    "GraphKind",
    # Composites
    "Composite",
    "Sequence",
    "Parallel",
    "Owned",
    "Borrowed",
    # Errors
    "GraphError",
    "ParseError",
    "InstantiationError",
]
