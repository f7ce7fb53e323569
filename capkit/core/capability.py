"""
Capability contracts.

A capability is a named, stateless set of operations. Entities declare which
capabilities they implement; clients bind to exactly one capability kind.
Kinds are plain strings; ``str``-valued enum members are accepted anywhere a
kind is expected and normalised to their value.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Mapping, Tuple, Union

Kind = Union[str, Enum]
Postcondition = Callable[[Any], bool]


def kind_key(kind: Any) -> str:
    """Normalise a capability kind (string, enum member or Capability) to its string key."""
    if isinstance(kind, Capability):
        return kind.kind
    if isinstance(kind, Enum):
        return str(kind.value)
    if isinstance(kind, str) and kind:
        return kind
    raise ValueError(f"Invalid capability kind: {kind!r}")


def non_empty(result: Any) -> bool:
    """Default postcondition: a value was produced and, if sized, is not empty."""
    if result is None:
        return False
    if isinstance(result, (str, bytes, list, tuple, dict, set, frozenset)):
        return len(result) > 0
    return True


@dataclass(frozen=True)
class Operation:
    """One operation of a capability."""

    name: str
    sample_args: Tuple[Any, ...] = field(default=(), hash=False)
    sample_kwargs: Mapping[str, Any] = field(default_factory=dict, hash=False)
    postcondition: Postcondition = non_empty
    description: str = ""


@dataclass(frozen=True)
class Capability:
    """A named behavioural contract made of one or more operations."""

    kind: str
    operations: Tuple[Operation, ...]
    description: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "kind", kind_key(self.kind))
        if not self.operations:
            raise ValueError(f"Capability '{self.kind}' must define at least one operation")
        names = [op.name for op in self.operations]
        if len(set(names)) != len(names):
            raise ValueError(f"Capability '{self.kind}' defines duplicate operations: {names}")

    @classmethod
    def define(cls, kind: Kind, *operations: Union[str, Operation], description: str = "") -> "Capability":
        """Build a capability from operation names or ``Operation`` objects."""
        ops = tuple(op if isinstance(op, Operation) else Operation(op) for op in operations)
        return cls(kind_key(kind), ops, description)

    @property
    def operation_names(self) -> Tuple[str, ...]:
        return tuple(op.name for op in self.operations)

    def operation(self, name: str) -> Operation:
        for op in self.operations:
            if op.name == name:
                return op
        raise ValueError(
            f"Capability '{self.kind}' has no operation '{name}'. "
            f"Available: {', '.join(self.operation_names)}"
        )

    def has_operation(self, name: str) -> bool:
        return name in self.operation_names

    def bind(self, implementations: Mapping[str, Callable[..., Any]]) -> Dict[str, Callable[..., Any]]:
        """Check that every operation has a callable and return the operation table."""
        missing = [name for name in self.operation_names if name not in implementations]
        extra = [name for name in implementations if not self.has_operation(name)]
        if missing or extra:
            problems = []
            if missing:
                problems.append(f"missing {', '.join(missing)}")
            if extra:
                problems.append(f"unknown {', '.join(extra)}")
            raise ValueError(f"Invalid implementation of '{self.kind}': {'; '.join(problems)}")
        for name, impl in implementations.items():
            if not callable(impl):
                raise ValueError(f"Implementation of '{self.kind}.{name}' is not callable")
        return {name: implementations[name] for name in self.operation_names}

    def __str__(self) -> str:
        return self.kind
