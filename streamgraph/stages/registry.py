"""Stage registry: the module factory used by the graph compiler.

Stage classes are registered under the names used in graph expressions.
`StageRegistry.create()` follows the factory contract of the compiler: it
returns None for an unknown name instead of raising.

Example:
    >>> from streamgraph.stages import DEFAULT_REGISTRY, create_stage
    >>> stage = create_stage("scale")
    >>> stage.params["factor"]
    1.0
    >>> DEFAULT_REGISTRY.create("nosuchstage") is None
    True
"""

import logging
from typing import Final, Mapping

from streamgraph.graph.errors import InstantiationError
from streamgraph.stream import Stage
from streamgraph.stream.stage import Parent

from .chop import Chop
from .const import Const
from .gate import Gate
from .scale import Scale
from .segstats import SegStats
from .select import Select
from .slice import Slice
from .sum import Sum
from .thru import Thru


logger = logging.getLogger(__name__)

# Built-in stage names and their implementations
AVAILABLE_STAGES: Final[dict[str, type[Stage]]] = {
    "thru": Thru,
    "_": Thru,
    "const": Const,
    "select": Select,
    "scale": Scale,
    "sum": Sum,
    "slice": Slice,
    "chop": Chop,
    "gate": Gate,
    "segstats": SegStats,
}


class StageRegistry:
    """Name to stage class mapping.

    Args:
        stages: Initial registrations; copied, so later changes do not leak
            back into the mapping passed in.
    """

    def __init__(self, stages: Mapping[str, type[Stage]] | None = None) -> None:
        self._stages: dict[str, type[Stage]] = dict(stages or {})

    def register(self, name: str, stage_class: type[Stage]) -> None:
        """Register `stage_class` under `name`, replacing any previous entry."""
        if not name:
            raise ValueError("stage name must not be empty")
        self._stages[name] = stage_class

    def create(self, name: str, parent: Parent | None = None) -> Stage | None:
        """Build a new stage, or return None if `name` is not registered."""
        stage_class = self._stages.get(name)
        if stage_class is None:
            logger.debug("unknown stage name=%s", name)
            return None
        return stage_class(parent=parent)

    def names(self) -> list[str]:
        """Return the registered stage names."""
        return list(self._stages)

    def __contains__(self, name: object) -> bool:
        return name in self._stages


DEFAULT_REGISTRY = StageRegistry(AVAILABLE_STAGES)


def create_stage(name: str, parent: Parent | None = None) -> Stage:
    """Build a built-in stage by name.

    Args:
        name: Registered stage name (see `list_available_stages()`).
        parent: Optional diagnostics parent.

    Returns:
        A new, unconfigured stage.

    Raises:
        InstantiationError: If the name is unknown.
    """
    stage = DEFAULT_REGISTRY.create(name, parent)
    if stage is None:
        raise InstantiationError(
            message=f"unknown stage '{name}'",
            code="UNKNOWN_STAGE",
            details={"stage": name, "available": DEFAULT_REGISTRY.names()},
        )
    return stage


def list_available_stages() -> list[str]:
    """List the stage names usable in graph expressions."""
    return DEFAULT_REGISTRY.names()
