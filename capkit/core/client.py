"""Clients bound to exactly one capability kind."""
from __future__ import annotations

from typing import TYPE_CHECKING, Any, Optional, Tuple, Union

from .capability import Capability, Kind, kind_key
from .entity import CapabilityHandle, Entity

if TYPE_CHECKING:  # pragma: no cover
    from .registry import CapabilityRegistry, NotificationReport


class CapabilityChannel:
    """A view of a registry restricted to one capability kind.

    Callers only ever get ``CapabilityHandle`` objects of this kind back,
    never the entities behind them.
    """

    __slots__ = ("_registry", "_kind", "_capability")

    def __init__(self, registry: "CapabilityRegistry", kind: Union[Kind, Capability]) -> None:
        self._registry = registry
        self._kind = kind_key(kind)
        self._capability = kind if isinstance(kind, Capability) else None

    @property
    def kind(self) -> str:
        return self._kind

    def subscribe(self, entity: Entity) -> None:
        if self._capability is not None and entity.implements_capability(self._kind):
            if entity.capability(self._kind) != self._capability:
                raise ValueError(
                    f"Entity '{entity.entity_id}' defines '{self._kind}' differently from this channel"
                )
        self._registry.register(self._kind, entity)

    def unsubscribe(self, entity: Entity) -> None:
        self._registry.deregister(self._kind, entity)

    def notify(self, operation: str, *args: Any, **kwargs: Any) -> "NotificationReport":
        self._check_operation(operation)
        return self._registry.notify_all(self._kind, operation, *args, **kwargs)

    async def anotify(self, operation: str, *args: Any, **kwargs: Any) -> "NotificationReport":
        self._check_operation(operation)
        return await self._registry.anotify_all(self._kind, operation, *args, **kwargs)

    def handles(self) -> Tuple[CapabilityHandle, ...]:
        return tuple(entity.as_capability(self._kind) for entity in self._registry.list_entities(self._kind))

    def entity_ids(self) -> Tuple[str, ...]:
        return tuple(entity.entity_id for entity in self._registry.list_entities(self._kind))

    def _check_operation(self, operation: str) -> None:
        if self._capability is not None:
            self._capability.operation(operation)

    def __len__(self) -> int:
        return len(self._registry.list_entities(self._kind))

    def __repr__(self) -> str:
        return f"CapabilityChannel(kind={self._kind!r}, subscribers={len(self)})"


class CapabilityClient:
    """
    Base class for subsystems that depend on a single capability.

    Subclasses fix ``capability`` as a class attribute or receive it at
    construction. The client keeps only a channel for that kind, so it cannot
    reach any other capability of the entities it drives.
    """

    capability: Optional[Capability] = None

    def __init__(self, registry: "CapabilityRegistry", capability: Optional[Capability] = None) -> None:
        capability = capability or type(self).capability
        if capability is None:
            raise ValueError(f"{type(self).__name__} needs a capability")
        self.capability = capability
        self._channel = registry.channel(capability)

    @property
    def kind(self) -> str:
        return self._channel.kind

    def register(self, entity: Entity) -> None:
        self._channel.subscribe(entity)

    def unregister(self, entity: Entity) -> None:
        self._channel.unsubscribe(entity)

    def notify(self, operation: str, *args: Any, **kwargs: Any) -> "NotificationReport":
        return self._channel.notify(operation, *args, **kwargs)

    async def anotify(self, operation: str, *args: Any, **kwargs: Any) -> "NotificationReport":
        return await self._channel.anotify(operation, *args, **kwargs)

    def handles(self) -> Tuple[CapabilityHandle, ...]:
        return self._channel.handles()

    def __len__(self) -> int:
        return len(self._channel)
