"""Shared base of the Sequence and Parallel composites.

A composite holds an ordered list of child handles. A handle is either
`Owned` (the composite built the child and closes it on teardown) or
`Borrowed` (the child belongs to someone else, typically a host keeping a
long-lived stage, and is never closed by the composite).

Wiring is identity based, so composites cannot be copied.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterable, Iterator

from streamgraph.stream import ConfigurationError, Stage
from streamgraph.stream.stage import Parent


@dataclass(frozen=True)
class Owned:
    """Handle to a child stage the composite is responsible for closing."""

    stage: Stage

    @property
    def owned(self) -> bool:
        return True


@dataclass(frozen=True)
class Borrowed:
    """Handle to a child stage supplied by reference; never closed here."""

    stage: Stage

    @property
    def owned(self) -> bool:
        return False


ChildHandle = Owned | Borrowed


class Composite(Stage, ABC):
    """Stage made of child stages.

    Args:
        children: Child stages or handles. Bare stages are taken as owned.
        parent: Diagnostics parent.
        receiver: Stage receiving the composite's output.
    """

    name = "composite"

    def __init__(
        self,
        children: Iterable[Stage | ChildHandle] = (),
        parent: Parent | None = None,
        receiver: Stage | None = None,
    ) -> None:
        super().__init__(parent=parent, receiver=receiver)
        self._handles: list[ChildHandle] = []
        for child in children:
            self._handles.append(child if isinstance(child, (Owned, Borrowed)) else Owned(child))
        self._wire()

    def __copy__(self):
        raise TypeError(f"{self.__class__.__name__} cannot be copied: wiring is identity based")

    def __deepcopy__(self, memo):
        raise TypeError(f"{self.__class__.__name__} cannot be copied: wiring is identity based")

    def __len__(self) -> int:
        return len(self._handles)

    def __iter__(self) -> Iterator[Stage]:
        return iter(self.children)

    def __repr__(self) -> str:
        inner = ", ".join(repr(child) for child in self.children)
        return f"{self.__class__.__name__}([{inner}])"

    @property
    def children(self) -> list[Stage]:
        """Child stages in order."""
        return [handle.stage for handle in self._handles]

    @property
    def handles(self) -> tuple[ChildHandle, ...]:
        """Child handles in order, with their ownership tag."""
        return tuple(self._handles)

    def add(self, stage: Stage, owned: bool = True) -> None:
        """Append a child stage and rewire."""
        self._handles.append(Owned(stage) if owned else Borrowed(stage))
        self._wire()

    def add_borrowed(self, stage: Stage) -> None:
        """Append a child stage owned elsewhere."""
        self.add(stage, owned=False)

    def set_receiver(self, receiver: Stage | None) -> None:
        self.receiver = receiver
        self._wire()

    def iter_leaves(self):
        for child in self.children:
            yield from child.iter_leaves()

    def close(self) -> None:
        """Close owned children, release borrowed ones, then detach."""
        for handle in self._handles:
            if handle.owned:
                handle.stage.close()
            else:
                handle.stage.set_receiver(None)
        self._handles = []
        super().close()

    def push_frames(self, time: float, weight: float, values) -> None:
        if not self._configured:
            raise ConfigurationError(
                message=f"{self.instance_name}: frames received before configure_stream",
                code="NOT_CONFIGURED",
                details={"stage": self.instance_name},
            )
        self.on_frames(time, weight, values)

    @abstractmethod
    def _wire(self) -> None:
        """Connect children to each other and to the receiver."""
