"""Abstract graph description produced by the parser.

A `GraphSpec` is either a leaf (stage name plus optional argument text) or a
composite (ordered children tagged sequence or parallel). It holds no stage
objects; `GraphCompiler.instantiate` turns it into a running tree.
"""

from dataclasses import dataclass
from enum import Enum


class GraphKind(str, Enum):
    """Node kinds of a parsed graph."""

    LEAF = "leaf"
    SEQUENCE = "sequence"
    PARALLEL = "parallel"


@dataclass(frozen=True)
class GraphSpec:
    """Immutable node of a parsed graph expression.

    Attributes:
        kind: Node kind.
        name: Stage name (leaves only).
        args: Argument text between parentheses, or None (leaves only).
        nodes: Child nodes in order (composites only).
    """

    kind: GraphKind
    name: str = ""
    args: str | None = None
    nodes: tuple["GraphSpec", ...] = ()

    @classmethod
    def leaf(cls, name: str, args: str | None = None) -> "GraphSpec":
        return cls(kind=GraphKind.LEAF, name=name, args=args)

    @classmethod
    def sequence(cls, *nodes: "GraphSpec") -> "GraphSpec":
        return cls(kind=GraphKind.SEQUENCE, nodes=tuple(nodes))

    @classmethod
    def parallel(cls, *nodes: "GraphSpec") -> "GraphSpec":
        return cls(kind=GraphKind.PARALLEL, nodes=tuple(nodes))

    @property
    def is_leaf(self) -> bool:
        return self.kind is GraphKind.LEAF

    @property
    def children(self) -> tuple["GraphSpec", ...]:
        return self.nodes

    @property
    def instance_name(self) -> str:
        """Label of a leaf instance: its argument text, else its name."""
        return self.args if self.args else self.name

    def leaves(self) -> list["GraphSpec"]:
        """Return the leaves of this subtree in expression order."""
        if self.is_leaf:
            return [self]
        return [leaf for node in self.nodes for leaf in node.leaves()]

    def to_expression(self) -> str:
        """Print the canonical expression of this node.

        Examples:
            >>> GraphSpec.sequence(GraphSpec.leaf("a"), GraphSpec.parallel(
            ...     GraphSpec.leaf("b"), GraphSpec.leaf("c", "x"))).to_expression()
            'a:<b,c(x)>'
        """
        if self.is_leaf:
            return self.name if self.args is None else f"{self.name}({self.args})"
        if self.kind is GraphKind.SEQUENCE:
            return ":".join(node.to_expression() for node in self.nodes)
        return "<" + ",".join(node.to_expression() for node in self.nodes) + ">"

    def __str__(self) -> str:
        return self.to_expression()
