"""Custom exceptions for stream negotiation and frame delivery."""

from typing import Any

from streamgraph.errors import StreamGraphError


class StreamError(StreamGraphError):
    """Base exception for errors raised by stages at run time."""
    pass


class ConfigurationError(StreamError):
    """Raised when a stream negotiation cannot succeed.

    Common codes:
        - STREAM_REJECTED: A stage rejected the negotiated descriptor.
        - NOT_CONFIGURED: Frames arrived before a successful negotiation.
        - INVALID_DESCRIPTOR: Descriptor fields are inconsistent.
        - NO_GRAPH: A host call was made before a graph was set.
    """

    def __init__(
        self,
        message: str,
        code: str = "STREAM_REJECTED",
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize ConfigurationError.

        Args:
            message: Human-readable error description.
            code: Short error code string. Defaults to "STREAM_REJECTED".
            details: Optional dictionary with additional context.
        """
        super().__init__(message, code, details)


class ParameterError(StreamError):
    """Raised when a stage parameter cannot be addressed or set.

    Common codes:
        - UNKNOWN_PARAM: No parameter with this name is declared.
        - INVALID_PARAM: Value cannot be coerced to the declared kind.
    """
    pass


class FrameError(StreamError):
    """Raised when a pushed frame block does not match the negotiated shape.

    Common codes:
        - SHAPE_MISMATCH: Block width differs from the negotiated frame size.
    """
    pass
