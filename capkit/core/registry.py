"""
Capability registry.

Maps a capability kind to the ordered list of entities currently offering it
and fans operation calls out to them. Entries are weak references: an entity
that goes away drops out of every registry without explicit deregistration.

Delivery is resilient: an error raised inside one entity's operation is
wrapped in ``CapabilityInvocationFailure``, logged and collected, and the
remaining entities are still invoked.
"""
from __future__ import annotations

import inspect
import logging
import threading
import weakref
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

from .capability import Capability, Kind, kind_key
from .client import CapabilityChannel
from .entity import Entity
from .errors import CapabilityInvocationFailure, UnsupportedCapability

logger = logging.getLogger(__name__)


@dataclass
class Delivery:
    """Result of one successful invocation during fan-out."""
    entity_id: str
    result: Any


@dataclass
class NotificationReport:
    """Outcome of a fan-out over every entity registered for one kind."""

    kind: str
    operation: str
    deliveries: List[Delivery] = field(default_factory=list)
    failures: List[CapabilityInvocationFailure] = field(default_factory=list)
    order: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures

    @property
    def results(self) -> Dict[str, Any]:
        return {delivery.entity_id: delivery.result for delivery in self.deliveries}

    @property
    def failed_ids(self) -> List[str]:
        return [failure.entity_id for failure in self.failures]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind,
            "operation": self.operation,
            "order": list(self.order),
            "deliveries": [{"entity_id": d.entity_id, "result": repr(d.result)} for d in self.deliveries],
            "failures": [failure.to_dict() for failure in self.failures],
        }


class CapabilityRegistry:
    """
    Registry of entities by capability kind.

    Registration order is preserved per kind and each (kind, entity) pair is
    stored at most once. Membership changes and snapshot reads are serialised
    by a re-entrant lock, so readers always see a list from before or after a
    mutation. Entity internal state is not synchronised here.
    """

    def __init__(self, name: str = "default") -> None:
        self.name = name
        self._lock = threading.RLock()
        self._entries: Dict[str, List[weakref.ref]] = {}
        self._capabilities: Dict[str, Capability] = {}

    # ------------------------------------------------------------------
    def register(self, kind: Kind, entity: Entity) -> None:
        """
        Register ``entity`` under ``kind``. Registering the same pair twice is a no-op.

        Raises:
            UnsupportedCapability: If the entity does not declare ``kind``.
            ValueError: If the entity's definition of ``kind`` differs from the
                one already registered here.
        """
        key = kind_key(kind)
        if not entity.implements_capability(key):
            raise UnsupportedCapability(entity.entity_id, key)
        capability = entity.capability(key)

        with self._lock:
            known = self._capabilities.get(key)
            if known is not None and known != capability:
                raise ValueError(
                    f"Entity '{entity.entity_id}' defines '{key}' differently from entities "
                    f"already registered in '{self.name}'"
                )
            refs = self._entries.setdefault(key, [])
            if any(ref() is entity for ref in list(refs)):
                logger.debug("Registry %s: %s already registered for %s", self.name, entity.entity_id, key)
                return
            refs.append(weakref.ref(entity, self._reaper(key)))
            self._capabilities[key] = capability
            entity._joined(self)
        logger.debug("Registry %s: registered %s for %s", self.name, entity.entity_id, key)

    def deregister(self, kind: Kind, entity: Entity) -> None:
        """Remove the (kind, entity) association. No-op if absent."""
        key = kind_key(kind)
        with self._lock:
            refs = self._entries.get(key)
            if not refs:
                return
            remaining = [ref for ref in list(refs) if ref() is not entity]
            if len(remaining) == len(refs):
                return
            self._store(key, remaining)
            if not self._holds(entity):
                entity._left(self)
        logger.debug("Registry %s: deregistered %s from %s", self.name, entity.entity_id, key)

    def deregister_all(self, entity: Entity) -> None:
        """Remove ``entity`` from every kind it is registered under."""
        with self._lock:
            for key in list(self._entries):
                self.deregister(key, entity)

    # ------------------------------------------------------------------
    def list_entities(self, kind: Kind) -> Tuple[Entity, ...]:
        """Snapshot of the entities registered for ``kind``, in registration order."""
        key = kind_key(kind)
        with self._lock:
            return self._snapshot(key)

    def capability(self, kind: Kind) -> Optional[Capability]:
        with self._lock:
            return self._capabilities.get(kind_key(kind))

    def kinds(self) -> Tuple[str, ...]:
        with self._lock:
            return tuple(key for key in list(self._entries) if self._snapshot(key))

    def channel(self, kind: Kind) -> CapabilityChannel:
        """Return a view of this registry restricted to one capability kind."""
        return CapabilityChannel(self, kind)

    def __contains__(self, entity: object) -> bool:
        with self._lock:
            return self._holds(entity)

    def __len__(self) -> int:
        with self._lock:
            seen = {id(entity) for key in list(self._entries) for entity in self._snapshot(key)}
        return len(seen)

    # ------------------------------------------------------------------
    def notify_all(self, kind: Kind, operation: str, *args: Any, **kwargs: Any) -> NotificationReport:
        """
        Invoke ``operation`` on every entity registered for ``kind``.

        Entities are invoked in registration order over a snapshot taken when
        the call starts. Failures are collected per entity and never stop the
        fan-out.

        Raises:
            ValueError: If ``operation`` is not part of the registered capability.
        """
        key, entities = self._prepare(kind, operation)
        report = NotificationReport(key, operation)
        for entity in entities:
            report.order.append(entity.entity_id)
            try:
                result = entity.as_capability(key).invoke(operation, *args, **kwargs)
            except Exception as exc:
                self._record_failure(report, entity, exc)
            else:
                report.deliveries.append(Delivery(entity.entity_id, result))
        return report

    async def anotify_all(self, kind: Kind, operation: str, *args: Any, **kwargs: Any) -> NotificationReport:
        """Asynchronous ``notify_all``: awaitable results are awaited one entity at a time."""
        key, entities = self._prepare(kind, operation)
        report = NotificationReport(key, operation)
        for entity in entities:
            report.order.append(entity.entity_id)
            try:
                result = entity.as_capability(key).invoke(operation, *args, **kwargs)
                if inspect.isawaitable(result):
                    result = await result
            except Exception as exc:
                self._record_failure(report, entity, exc)
            else:
                report.deliveries.append(Delivery(entity.entity_id, result))
        return report

    # ------------------------------------------------------------------
    def _prepare(self, kind: Kind, operation: str) -> Tuple[str, Tuple[Entity, ...]]:
        key = kind_key(kind)
        with self._lock:
            capability = self._capabilities.get(key)
            entities = self._snapshot(key)
        if capability is not None:
            capability.operation(operation)
        return key, entities

    def _record_failure(self, report: NotificationReport, entity: Entity, exc: Exception) -> None:
        failure = CapabilityInvocationFailure(entity.entity_id, report.kind, report.operation, exc)
        logger.exception(
            "Capability failure on %s/%s.%s for %s",
            self.name, report.kind, report.operation, entity.entity_id,
        )
        report.failures.append(failure)

    def _snapshot(self, key: str) -> Tuple[Entity, ...]:
        live = []
        for ref in list(self._entries.get(key, ())):
            entity = ref()
            if entity is not None:
                live.append(entity)
        return tuple(live)

    def _holds(self, entity: object) -> bool:
        return any(ref() is entity for refs in list(self._entries.values()) for ref in list(refs))

    def _store(self, key: str, refs: List[weakref.ref]) -> None:
        if refs:
            self._entries[key] = refs
        else:
            self._entries.pop(key, None)
            self._capabilities.pop(key, None)

    def _discard_ref(self, key: str, dead: weakref.ref) -> None:
        with self._lock:
            refs = self._entries.get(key)
            if refs is None:
                return
            self._store(key, [ref for ref in refs if ref is not dead])
        logger.debug("Registry %s: dropped collected entity from %s", self.name, key)

    def _reaper(self, key: str) -> Callable[[weakref.ref], None]:
        registry_ref = weakref.ref(self)

        def reap(dead: weakref.ref) -> None:
            registry = registry_ref()
            if registry is not None:
                registry._discard_ref(key, dead)

        return reap

    def __repr__(self) -> str:
        return f"CapabilityRegistry(name={self.name!r}, kinds={list(self.kinds())!r})"
