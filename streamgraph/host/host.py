"""Host driving a compiled graph.

The host is the parent of every stage it compiles: stage diagnostics arrive
through `signal_error` / `signal_warning`, are recorded as `Diagnostic`
entries, and are logged. It also keeps the input descriptor so that a graph
whose reconfigure parameters changed is renegotiated before the next push.

Example:
    >>> import numpy as np
    >>> from streamgraph.host import Host
    >>> host = Host()
    >>> host.set_graph("chop")
    >>> host.set_param("chop.size", 100)
    >>> receiver = host.run(np.arange(50) * 10.0, rate=100.0)
    >>> receiver.times
    [0.0, 100.0, 200.0, 300.0, 400.0]
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Literal

import numpy as np

from streamgraph.audioio import load_wav
from streamgraph.config import Settings, get_settings
from streamgraph.graph import Graph, GraphCompiler, StageFactory
from streamgraph.logging import graph_var
from streamgraph.stream import (
    FRAME_DTYPE,
    ConfigurationError,
    Stage,
    StreamDescriptor,
)

from .receiver import RecordingReceiver


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Diagnostic:
    """One message signaled by a stage.

    Attributes:
        severity: "error" for rejected negotiations, "warning" for repaired
            parameters.
        stage: Instance name of the signaling stage.
        message: Message text.
    """

    severity: Literal["error", "warning"]
    stage: str
    message: str

    def to_dict(self) -> dict[str, str]:
        """Convert to dictionary for JSON serialization."""
        return {"severity": self.severity, "stage": self.stage, "message": self.message}


class Host:
    """Compile, configure and feed one graph.

    Args:
        factory: Stage factory; defaults to the built-in stage registry.
        receiver: Final receiver; defaults to a new `RecordingReceiver`.
        settings: Host settings; defaults to `get_settings()`.
    """

    def __init__(
        self,
        factory: StageFactory | None = None,
        receiver: Stage | None = None,
        settings: Settings | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.compiler = GraphCompiler(factory, parent=self)
        self.receiver = receiver if receiver is not None else RecordingReceiver()
        self.graph: Graph | None = None
        self.input_descriptor: StreamDescriptor | None = None
        self.diagnostics: list[Diagnostic] = []

    def __enter__(self) -> "Host":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Parent protocol
    # ------------------------------------------------------------------

    def signal_error(self, stage: Stage, message: str) -> None:
        self.diagnostics.append(Diagnostic("error", stage.instance_name, message))
        logger.error("stage=%s error=%s", stage.instance_name, message)

    def signal_warning(self, stage: Stage, message: str) -> None:
        self.diagnostics.append(Diagnostic("warning", stage.instance_name, message))
        logger.warning("stage=%s warning=%s", stage.instance_name, message)

    @property
    def errors(self) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.severity == "error"]

    @property
    def warnings(self) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.severity == "warning"]

    # ------------------------------------------------------------------
    # Graph
    # ------------------------------------------------------------------

    def set_graph(self, expression: str) -> Graph:
        """Compile `expression` and make it the current graph.

        The previous graph is closed only once the new one compiled, so a
        failed compile leaves the host as it was.

        Raises:
            ParseError: If the expression is malformed.
            InstantiationError: If a stage cannot be built.
        """
        graph = self.compiler.compile(expression, self.receiver)

        if self.graph is not None:
            self.graph.close()
        self.graph = graph
        self.input_descriptor = None
        return graph

    def _require_graph(self) -> Graph:
        if self.graph is None:
            raise ConfigurationError(
                message="no graph set, call set_graph() first",
                code="NO_GRAPH",
            )
        return self.graph

    def set_param(self, address: str, value: Any) -> None:
        """Set a stage parameter addressed as "<instance>.<param>"."""
        self._require_graph().set_param(address, value)

    def get_param(self, address: str) -> Any:
        """Return a stage parameter addressed as "<instance>.<param>"."""
        return self._require_graph().get_param(address)

    # ------------------------------------------------------------------
    # Stream
    # ------------------------------------------------------------------

    def configure(self, descriptor: StreamDescriptor | None = None, **fields: Any) -> StreamDescriptor:
        """Negotiate the graph's stream.

        Args:
            descriptor: Input descriptor; built from `fields` when omitted.
            **fields: `StreamDescriptor` fields (e.g. rate=100.0, width=2).

        Returns:
            The graph's output descriptor.

        Raises:
            ConfigurationError: If a stage rejects the stream.
        """
        graph = self._require_graph()
        if descriptor is None:
            descriptor = StreamDescriptor(**fields)
        elif fields:
            descriptor = descriptor.replace(**fields)

        self.input_descriptor = descriptor
        token = graph_var.set(graph.expression)
        try:
            output = graph.configure_stream(descriptor)
        except ConfigurationError as e:
            logger.error("configure failed code=%s message=%s", e.code, e.message)
            raise
        finally:
            graph_var.reset(token)

        logger.info(
            "configured graph=%s input_width=%d output_width=%d rate=%s",
            graph.expression,
            descriptor.width,
            output.width,
            output.rate,
        )
        return output

    def push(self, time: float, values, weight: float = 1.0) -> None:
        """Push a block of frames, renegotiating first if required.

        Raises:
            ConfigurationError: If no stream was configured yet.
            FrameError: If the block does not match the negotiated shape.
        """
        graph = self._require_graph()
        if self.input_descriptor is None:
            raise ConfigurationError(
                message="push before configure()",
                code="NOT_CONFIGURED",
            )

        if graph.needs_configure:
            logger.info("renegotiating graph=%s after parameter change", graph.expression)
            self.configure(self.input_descriptor)

        graph.push_frames(time, weight, values)

    def finalize(self, end_time: float) -> None:
        """Signal the end of the input at `end_time` (ms)."""
        self._require_graph().finalize(end_time)

    def reset(self) -> None:
        """Reset every stage's running state."""
        self._require_graph().reset()

    def run(
        self,
        samples,
        rate: float | None = None,
        block_size: int | None = None,
    ) -> Stage:
        """Feed a whole signal through the graph and finalize it.

        Args:
            samples: Array of shape (num_samples,) or (num_samples, channels).
            rate: Sample rate in Hz; defaults to `settings.default_rate`.
            block_size: Frames per push; defaults to `settings.block_size`.

        Returns:
            The final receiver.
        """
        graph = self._require_graph()
        samples = np.asarray(samples, dtype=FRAME_DTYPE)
        if samples.ndim == 1:
            samples = samples.reshape(-1, 1)

        rate = rate if rate is not None else self.settings.default_rate
        block_size = block_size if block_size is not None else self.settings.block_size
        block_size = max(1, min(block_size, self.settings.max_frames))

        self.configure(
            StreamDescriptor(rate=rate, width=samples.shape[1], max_frames=block_size)
        )

        period = 1000.0 / rate
        num_samples = samples.shape[0]
        token = graph_var.set(graph.expression)
        try:
            for start in range(0, num_samples, block_size):
                self.push(start * period, samples[start : start + block_size])
            self.finalize(num_samples * period)
        finally:
            graph_var.reset(token)

        logger.info("ran graph=%s samples=%d rate=%s", graph.expression, num_samples, rate)
        return self.receiver

    def run_file(self, path: str | Path, block_size: int | None = None) -> Stage:
        """Run the graph on a WAV file."""
        samples, sample_rate = load_wav(path)
        return self.run(samples, rate=float(sample_rate), block_size=block_size)

    def close(self) -> None:
        """Close the current graph and its owned stages."""
        if self.graph is not None:
            self.graph.close()
            self.graph = None
        self.input_descriptor = None
