"""Declared stage parameters.

Every stage declares its parameters once, in its constructor, into a
`ParamSet`. A parameter has a fixed kind taken from a closed set, a default,
a description, and a reconfigure flag: changing a reconfigure parameter
invalidates the owning stage's negotiated stream until `configure_stream`
runs again.

Example:
    >>> from streamgraph.stream.params import ParamKind, ParamSet
    >>> params = ParamSet()
    >>> size = params.declare("size", ParamKind.INT, 4, "Window size", reconfigure=True)
    >>> params.set("size", "8")
    >>> size.value
    8
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Iterator

from .errors import ParameterError


class ParamKind(str, Enum):
    """Closed set of parameter value kinds."""

    BOOL = "bool"
    INT = "int"
    FLOAT = "float"
    STRING = "string"
    FLOATS = "floats"


_TRUE_STRINGS = {"1", "true", "yes", "on"}
_FALSE_STRINGS = {"0", "false", "no", "off", ""}


def coerce_value(kind: ParamKind, value: Any) -> Any:
    """Coerce a raw value to the Python type of a parameter kind.

    Args:
        kind: Target parameter kind.
        value: Raw value (e.g., parsed from a command line or a config file).

    Returns:
        The coerced value: bool, int, float, str, or tuple of floats.

    Raises:
        ParameterError: If the value cannot be coerced.
    """
    try:
        if kind is ParamKind.BOOL:
            if isinstance(value, str):
                lowered = value.strip().lower()
                if lowered in _TRUE_STRINGS:
                    return True
                if lowered in _FALSE_STRINGS:
                    return False
                raise ValueError(f"not a boolean: {value!r}")
            return bool(value)

        if kind is ParamKind.INT:
            if isinstance(value, float) and not value.is_integer():
                raise ValueError(f"not an integer: {value!r}")
            return int(float(value)) if isinstance(value, str) else int(value)

        if kind is ParamKind.FLOAT:
            return float(value)

        if kind is ParamKind.STRING:
            return str(value)

        if kind is ParamKind.FLOATS:
            if value is None:
                return ()
            if isinstance(value, str):
                items = [item for item in value.replace(",", " ").split() if item]
                return tuple(float(item) for item in items)
            if isinstance(value, (int, float)):
                return (float(value),)
            return tuple(float(item) for item in value)
    except (TypeError, ValueError) as e:
        raise ParameterError(
            message=f"cannot convert {value!r} to {kind.value}",
            code="INVALID_PARAM",
            details={"kind": kind.value, "value": repr(value), "error": str(e)},
        ) from e

    raise ParameterError(
        message=f"unsupported parameter kind: {kind!r}",
        code="INVALID_PARAM",
        details={"kind": str(kind)},
    )


@dataclass
class Param:
    """One declared parameter.

    Attributes:
        name: Parameter name, unique within its stage.
        kind: Value kind.
        default: Default value (coerced to `kind`).
        description: Human-readable description.
        reconfigure: Whether a change requires a new stream negotiation.
        value: Current value.
    """

    name: str
    kind: ParamKind
    default: Any
    description: str = ""
    reconfigure: bool = False
    value: Any = field(init=False)

    def __post_init__(self) -> None:
        self.default = coerce_value(self.kind, self.default)
        self.value = self.default

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        value = list(self.value) if self.kind is ParamKind.FLOATS else self.value
        default = list(self.default) if self.kind is ParamKind.FLOATS else self.default
        return {
            "name": self.name,
            "kind": self.kind.value,
            "value": value,
            "default": default,
            "description": self.description,
            "reconfigure": self.reconfigure,
        }


class ParamSet:
    """Registry of the parameters declared by one stage.

    Args:
        on_reconfigure: Called with the parameter when a reconfigure
            parameter changes value.
    """

    def __init__(self, on_reconfigure: Callable[[Param], None] | None = None) -> None:
        self._params: dict[str, Param] = {}
        self._on_reconfigure = on_reconfigure

    def declare(
        self,
        name: str,
        kind: ParamKind,
        default: Any,
        description: str = "",
        reconfigure: bool = False,
    ) -> Param:
        """Declare a new parameter and return it.

        Raises:
            ValueError: If a parameter with this name is already declared.
        """
        if name in self._params:
            raise ValueError(f"parameter '{name}' is already declared")

        param = Param(
            name=name,
            kind=ParamKind(kind),
            default=default,
            description=description,
            reconfigure=reconfigure,
        )
        self._params[name] = param
        return param

    def param(self, name: str) -> Param:
        """Return the declared parameter `name`.

        Raises:
            ParameterError: If no such parameter is declared.
        """
        try:
            return self._params[name]
        except KeyError:
            raise ParameterError(
                message=f"unknown parameter '{name}'",
                code="UNKNOWN_PARAM",
                details={"name": name, "available": list(self._params)},
            ) from None

    def get(self, name: str) -> Any:
        """Return the current value of parameter `name`."""
        return self.param(name).value

    def set(self, name: str, value: Any) -> None:
        """Set parameter `name`, coercing the value to its kind."""
        param = self.param(name)
        new_value = coerce_value(param.kind, value)
        changed = new_value != param.value
        param.value = new_value

        if changed and param.reconfigure and self._on_reconfigure is not None:
            self._on_reconfigure(param)

    def reset_defaults(self) -> None:
        """Restore every parameter to its default value."""
        for name, param in self._params.items():
            self.set(name, param.default)

    def names(self) -> list[str]:
        """Return declared parameter names in declaration order."""
        return list(self._params)

    def describe(self) -> list[dict[str, Any]]:
        """Return a serializable description of every parameter."""
        return [param.to_dict() for param in self._params.values()]

    def __getitem__(self, name: str) -> Any:
        return self.get(name)

    def __setitem__(self, name: str, value: Any) -> None:
        self.set(name, value)

    def __contains__(self, name: object) -> bool:
        return name in self._params

    def __iter__(self) -> Iterator[str]:
        return iter(self._params)

    def __len__(self) -> int:
        return len(self._params)
