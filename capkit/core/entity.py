"""
Entities and capability handles.

An entity declares a fixed set of capabilities at construction. Methods of an
``Entity`` subclass are bound to capability operations with ``@provides``;
composed entities pass an ``implementations`` table instead. Either way the
entity ends up with one operation table per declared kind.

Usage:
    LOCKABLE = Capability.define("lockable", "lock", "unlock")

    class Gate(Entity):
        @provides(LOCKABLE)
        def lock(self):
            return "locked"

        @provides(LOCKABLE)
        def unlock(self):
            return "unlocked"

    Gate("gate-1").as_capability("lockable").lock()
"""
from __future__ import annotations

import logging
import weakref
from typing import TYPE_CHECKING, Any, Callable, Dict, Iterable, Mapping, Optional, Tuple, Union

from .capability import Capability, Kind, kind_key
from .errors import UnsupportedCapability

if TYPE_CHECKING:  # pragma: no cover
    from .registry import CapabilityRegistry

logger = logging.getLogger(__name__)

_PROVIDES_ATTR = "__capkit_provides__"

# Operation table values are either a method name (resolved on the instance at
# call time) or a plain callable supplied through ``implementations``.
OperationRef = Union[str, Callable[..., Any]]


def provides(capability: Capability, operation: Optional[str] = None) -> Callable:
    """Mark a method as the implementation of ``capability.operation``.

    The operation name defaults to the method name.
    """
    def decorator(func: Callable) -> Callable:
        entries = list(getattr(func, _PROVIDES_ATTR, ()))
        entries.append((capability, operation or func.__name__))
        setattr(func, _PROVIDES_ATTR, tuple(entries))
        return func

    return decorator


def _sealed(name: str, func: Callable[..., Any]) -> Callable[..., Any]:
    """Wrap an operation so callers cannot reach the bound instance through it."""
    def operation(*args: Any, **kwargs: Any) -> Any:
        return func(*args, **kwargs)

    operation.__name__ = name
    operation.__qualname__ = name
    return operation


class CapabilityHandle:
    """Typed access to a single capability of one entity.

    Only the capability's operations are reachable through a handle; the
    entity itself and its other capabilities are not.
    """

    __slots__ = ("_entity_id", "_capability", "_operations")

    def __init__(self, entity_id: str, capability: Capability, operations: Mapping[str, Callable[..., Any]]) -> None:
        self._entity_id = entity_id
        self._capability = capability
        self._operations = {name: _sealed(name, func) for name, func in operations.items()}

    @property
    def entity_id(self) -> str:
        return self._entity_id

    @property
    def kind(self) -> str:
        return self._capability.kind

    @property
    def capability(self) -> Capability:
        return self._capability

    def invoke(self, operation: str, *args: Any, **kwargs: Any) -> Any:
        try:
            func = self._operations[operation]
        except KeyError:
            raise AttributeError(
                f"Capability '{self.kind}' has no operation '{operation}'"
            ) from None
        return func(*args, **kwargs)

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        operations = self._operations
        if name in operations:
            return operations[name]
        raise AttributeError(f"Capability '{self.kind}' has no operation '{name}'")

    def __dir__(self) -> Iterable[str]:
        return sorted(set(self._operations) | {"entity_id", "kind", "capability", "invoke"})

    def __repr__(self) -> str:
        return f"CapabilityHandle(entity_id={self._entity_id!r}, kind={self.kind!r})"


class Entity:
    """An object exposing a fixed set of capabilities.

    ``states`` lists the internal state variants an entity can be in; the first
    one is the initial state. Subclasses read ``self.state`` to vary the
    quality of their answers, never whether they answer.
    """

    states: Tuple[str, ...] = ("default",)
    _declared_methods: Dict[str, Tuple[Capability, Dict[str, str]]] = {}

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        table: Dict[str, Tuple[Capability, Dict[str, str]]] = {}
        for klass in reversed(cls.__mro__):
            for attr_name, value in vars(klass).items():
                for capability, operation in getattr(value, _PROVIDES_ATTR, ()):
                    declared, operations = table.setdefault(capability.kind, (capability, {}))
                    if declared != capability:
                        raise ValueError(
                            f"{cls.__name__} binds two different definitions of '{capability.kind}'"
                        )
                    operations[operation] = attr_name
        cls._declared_methods = table
        if not cls.states:
            raise ValueError(f"{cls.__name__}.states must list at least one state")

    def __init__(
        self,
        entity_id: str,
        implementations: Optional[Mapping[Capability, Mapping[str, Callable[..., Any]]]] = None,
    ) -> None:
        if not entity_id:
            raise ValueError("entity_id must be a non-empty string")
        self._entity_id = str(entity_id)
        self._table: Dict[str, Tuple[Capability, Dict[str, OperationRef]]] = {}

        for kind, (capability, methods) in type(self)._declared_methods.items():
            bound = {op: getattr(self, attr) for op, attr in methods.items()}
            capability.bind(bound)
            self._table[kind] = (capability, dict(methods))

        for capability, impls in (implementations or {}).items():
            if capability.kind in self._table:
                raise ValueError(f"Entity '{self._entity_id}' declares '{capability.kind}' twice")
            self._table[capability.kind] = (capability, dict(capability.bind(impls)))

        self._kinds = frozenset(self._table)
        self._state = self.states[0]
        self._registries: "weakref.WeakSet[CapabilityRegistry]" = weakref.WeakSet()

    # ------------------------------------------------------------------
    @property
    def entity_id(self) -> str:
        return self._entity_id

    @property
    def kinds(self) -> frozenset:
        return self._kinds

    @property
    def capabilities(self) -> Tuple[Capability, ...]:
        return tuple(capability for capability, _ in self._table.values())

    def implements_capability(self, kind: Kind) -> bool:
        try:
            return kind_key(kind) in self._kinds
        except ValueError:
            return False

    def capability(self, kind: Kind) -> Capability:
        key = kind_key(kind)
        if key not in self._kinds:
            raise UnsupportedCapability(self._entity_id, key)
        return self._table[key][0]

    def as_capability(self, kind: Kind) -> CapabilityHandle:
        """Return a handle restricted to ``kind``.

        Raises:
            UnsupportedCapability: If the entity never declared ``kind``.
        """
        key = kind_key(kind)
        if key not in self._kinds:
            raise UnsupportedCapability(self._entity_id, key)
        capability, operations = self._table[key]
        resolved = {
            name: getattr(self, ref) if isinstance(ref, str) else ref
            for name, ref in operations.items()
        }
        return CapabilityHandle(self._entity_id, capability, resolved)

    # ------------------------------------------------------------------
    @property
    def state(self) -> str:
        return self._state

    def enter_state(self, state: str) -> None:
        if state not in self.states:
            raise ValueError(
                f"Unknown state '{state}' for {type(self).__name__}. Available: {', '.join(self.states)}"
            )
        if state != self._state:
            logger.debug("Entity %s: %s -> %s", self._entity_id, self._state, state)
        self._state = state

    # ------------------------------------------------------------------
    def _joined(self, registry: "CapabilityRegistry") -> None:
        self._registries.add(registry)

    def _left(self, registry: "CapabilityRegistry") -> None:
        self._registries.discard(registry)

    def dispose(self) -> None:
        """Remove this entity from every registry it was registered with."""
        for registry in list(self._registries):
            registry.deregister_all(self)
        self._registries.clear()

    def __repr__(self) -> str:
        kinds = ", ".join(sorted(self._kinds))
        return f"{type(self).__name__}(entity_id={self._entity_id!r}, kinds=[{kinds}], state={self._state!r})"
