"""Custom exceptions for graph parsing and instantiation."""

from streamgraph.errors import StreamGraphError


class GraphError(StreamGraphError):
    """Base exception for graph compiler errors."""
    pass


class ParseError(GraphError):
    """Raised when a graph expression cannot be parsed.

    Common codes:
        - UNBALANCED_BRACKETS: `<` and `>` do not pair up.
        - EMPTY_LEAF: A stage name is missing between separators.
        - ILLEGAL_SYNTAX: Any other malformed token.
    """
    pass


class InstantiationError(GraphError):
    """Raised when a parsed graph cannot be turned into stages.

    Common codes:
        - UNKNOWN_STAGE: The factory does not know the stage name.
        - FACTORY_FAILED: The factory raised while building the stage.
    """
    pass
