"""Graph compiler: expression to running stage tree.

Compilation runs in three explicit passes:

1. `parse()` turns the expression into an immutable `GraphSpec`.
2. `instantiate()` builds stages bottom-up through a stage factory.
3. `connect()` wires receivers top-down.

Example:
    >>> from streamgraph.graph import GraphCompiler
    >>> from streamgraph.host import RecordingReceiver
    >>> receiver = RecordingReceiver()
    >>> graph = GraphCompiler().compile("scale(gain):<sum,thru>", receiver)
    >>> graph.param_names()[:2]
    ['gain.factor', 'gain.offset']
"""

import logging
from typing import Any, Protocol

from streamgraph.errors import StreamGraphError
from streamgraph.stream import ConfigurationError, ParameterError, Stage, StreamDescriptor
from streamgraph.stream.stage import Parent

from .errors import InstantiationError
from .parallel import Parallel
from .parser import parse
from .sequence import Sequence
from .spec import GraphKind, GraphSpec


logger = logging.getLogger(__name__)


class StageFactory(Protocol):
    """Builds leaf stages by name."""

    def create(self, name: str, parent: Parent | None = None) -> Stage | None:
        """Return a new stage, or None if the name is unknown."""
        ...


def instantiate(spec: GraphSpec, factory: StageFactory, parent: Parent | None = None) -> Stage:
    """Build the stage tree described by `spec`, bottom-up.

    A leaf with argument text takes that text as its instance name. If any
    node fails, every stage built so far is closed before the error
    propagates.

    Raises:
        InstantiationError: If the factory does not know a stage name
            (UNKNOWN_STAGE) or fails while building it (FACTORY_FAILED).
    """
    if spec.kind is GraphKind.LEAF:
        try:
            stage = factory.create(spec.name, parent)
        except Exception as e:
            raise InstantiationError(
                message=f"factory failed to create stage '{spec.name}': {e}",
                code="FACTORY_FAILED",
                details={"stage": spec.name, "error": str(e)},
            ) from e

        if stage is None:
            raise InstantiationError(
                message=f"unknown stage '{spec.name}'",
                code="UNKNOWN_STAGE",
                details={"stage": spec.name},
            )

        stage.instance_name = spec.instance_name
        return stage

    built: list[Stage] = []
    try:
        for node in spec.children:
            built.append(instantiate(node, factory, parent))
    except StreamGraphError:
        for stage in built:
            stage.close()
        raise

    composite_class = Sequence if spec.kind is GraphKind.SEQUENCE else Parallel
    return composite_class(built, parent=parent)


def connect(tree: Stage, final_receiver: Stage | None) -> Stage:
    """Wire `tree` top-down so that its output reaches `final_receiver`."""
    tree.set_receiver(final_receiver)
    return tree


class Graph(Stage):
    """Compiled graph: a stage that owns its root and addresses leaf params.

    Parameters are addressed as "<instance>.<param>", where the instance is
    the leaf's argument text (e.g. `scale(gain)` gives "gain") or its stage
    name. An address matching several leaves applies to all of them.

    Attributes:
        spec: Parsed graph the tree was built from.
        root: Root stage of the compiled tree.
    """

    name = "graph"

    def __init__(
        self,
        spec: GraphSpec,
        root: Stage,
        parent: Parent | None = None,
        receiver: Stage | None = None,
    ) -> None:
        super().__init__(parent=parent)
        self.spec = spec
        self.root = root
        self.instance_name = spec.to_expression()
        self.set_receiver(receiver)

    @property
    def expression(self) -> str:
        return self.spec.to_expression()

    def set_receiver(self, receiver: Stage | None) -> None:
        self.receiver = receiver
        connect(self.root, receiver)

    def iter_leaves(self):
        yield from self.root.iter_leaves()

    def leaves(self) -> list[Stage]:
        """Return the leaf stages in expression order."""
        return list(self.iter_leaves())

    def find(self, instance_name: str) -> list[Stage]:
        """Return every leaf labelled `instance_name`."""
        return [leaf for leaf in self.iter_leaves() if leaf.instance_name == instance_name]

    @property
    def needs_configure(self) -> bool:
        """Whether the graph or any leaf must renegotiate before more frames."""
        return not self._configured or any(not leaf.is_configured for leaf in self.iter_leaves())

    # ------------------------------------------------------------------
    # Parameter addressing
    # ------------------------------------------------------------------

    def _resolve(self, address: str) -> tuple[list[Stage], str]:
        instance, _, param = address.rpartition(".")
        if not instance or not param:
            raise ParameterError(
                message=f"parameter address '{address}' must read '<instance>.<param>'",
                code="UNKNOWN_PARAM",
                details={"address": address},
            )

        stages = self.find(instance)
        if not stages:
            raise ParameterError(
                message=f"no stage instance named '{instance}'",
                code="UNKNOWN_PARAM",
                details={
                    "address": address,
                    "instances": sorted({leaf.instance_name for leaf in self.iter_leaves()}),
                },
            )
        return stages, param

    def set_param(self, address: str, value: Any) -> None:
        """Set a leaf parameter by address.

        Raises:
            ParameterError: If the address matches no declared parameter or
                the value cannot be coerced.
        """
        stages, param = self._resolve(address)
        for stage in stages:
            stage.params.set(param, value)
        logger.debug("graph param=%s value=%r stages=%d", address, value, len(stages))

    def get_param(self, address: str) -> Any:
        """Return a leaf parameter value by address (first match)."""
        stages, param = self._resolve(address)
        return stages[0].params.get(param)

    def param_names(self) -> list[str]:
        """Return every parameter address in the graph."""
        names: list[str] = []
        for leaf in self.iter_leaves():
            for param in leaf.params.names():
                address = f"{leaf.instance_name}.{param}"
                if address not in names:
                    names.append(address)
        return names

    # ------------------------------------------------------------------
    # Contract
    # ------------------------------------------------------------------

    def on_configure(self, descriptor: StreamDescriptor) -> StreamDescriptor:
        output = self.root.configure_stream(descriptor)
        self.output_descriptor = output
        return output

    def push_frames(self, time: float, weight: float, values) -> None:
        if not self._configured:
            raise ConfigurationError(
                message=f"{self.instance_name}: frames received before configure_stream",
                code="NOT_CONFIGURED",
                details={"stage": self.instance_name},
            )
        self.root.push_frames(time, weight, values)

    def on_reset(self) -> None:
        self.root.reset()

    def on_finalize(self, end_time: float) -> None:
        self.root.finalize(end_time)

    def on_segment(self, time: float, is_start: bool) -> None:
        self.root.segment(time, is_start)

    def close(self) -> None:
        self.root.close()
        super().close()


class GraphCompiler:
    """Parse, instantiate and wire graph expressions.

    The compiler keeps no state between calls: a failed attempt leaves
    nothing behind that could affect the next one.

    Args:
        factory: Stage factory; defaults to the built-in stage registry.
        parent: Diagnostics parent handed to every created stage.
    """

    def __init__(self, factory: StageFactory | None = None, parent: Parent | None = None) -> None:
        if factory is None:
            from streamgraph.stages import DEFAULT_REGISTRY

            factory = DEFAULT_REGISTRY
        self.factory = factory
        self.parent = parent

    def parse(self, expression: str) -> GraphSpec:
        return parse(expression)

    def instantiate(self, spec: GraphSpec) -> Stage:
        return instantiate(spec, self.factory, self.parent)

    def connect(self, tree: Stage, final_receiver: Stage | None) -> Stage:
        return connect(tree, final_receiver)

    def compile(self, expression: str, receiver: Stage | None = None) -> Graph:
        """Compile an expression into a wired `Graph`.

        Raises:
            ParseError: If the expression is malformed.
            InstantiationError: If a stage cannot be built.
        """
        spec = self.parse(expression)
        root = self.instantiate(spec)
        graph = Graph(spec, root, parent=self.parent, receiver=receiver)
        logger.info(
            "compiled graph=%s leaves=%d",
            graph.expression,
            len(graph.leaves()),
        )
        return graph
