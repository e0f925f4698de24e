"""Pass-through stage."""

from streamgraph.stream import Stage


class Thru(Stage):
    """Forward the stream unchanged.

    Registered as "thru" and as "_", the placeholder used for an identity
    branch inside a parallel group (e.g. "<sum,_>").
    """

    name = "thru"
