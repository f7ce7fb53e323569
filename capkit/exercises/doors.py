"""
Doors, timers and proximity sensors.

A door is lockable and openable. Some doors also react to a timer, others
to a proximity sensor; neither kind of door has to know about the other's
notification. Each client (timer, sensor, lock controller) only sees the one
capability it drives.
"""
from __future__ import annotations

import logging

from ..core.capability import Capability, Operation
from ..core.client import CapabilityClient
from ..core.entity import Entity, provides
from ..core.registry import CapabilityRegistry, NotificationReport

logger = logging.getLogger(__name__)


def _is_bool(result) -> bool:
    return isinstance(result, bool)


LOCKABLE = Capability.define(
    "lockable",
    "lock",
    "unlock",
    Operation("is_locked", postcondition=_is_bool),
    description="Can be locked and unlocked",
)
OPENABLE = Capability.define(
    "openable",
    "open",
    "close",
    Operation("is_open", postcondition=_is_bool),
    description="Can be opened and closed",
)
TIMEOUT_NOTIFIABLE = Capability.define(
    "timeout_notifiable",
    "on_timeout",
    description="Reacts when a timer expires",
)
PROXIMITY_NOTIFIABLE = Capability.define(
    "proximity_notifiable",
    "on_proximity",
    description="Reacts when a sensor detects someone nearby",
)


class Door(Entity):
    """Lockable, openable door."""

    def __init__(self, entity_id: str) -> None:
        self._locked = False
        self._opened = False
        super().__init__(entity_id)

    @provides(LOCKABLE)
    def lock(self) -> str:
        self._locked = True
        return "locked"

    @provides(LOCKABLE)
    def unlock(self) -> str:
        self._locked = False
        return "unlocked"

    @provides(LOCKABLE)
    def is_locked(self) -> bool:
        return self._locked

    @provides(OPENABLE)
    def open(self) -> str:
        if self._locked:
            return "still locked"
        self._opened = True
        return "opened"

    @provides(OPENABLE)
    def close(self) -> str:
        self._opened = False
        return "closed"

    @provides(OPENABLE)
    def is_open(self) -> bool:
        return self._opened


class TimedDoor(Door):
    """Door that closes and locks itself when its timer expires."""

    @provides(TIMEOUT_NOTIFIABLE)
    def on_timeout(self) -> str:
        self.close()
        return self.lock()


class SensingDoor(Door):
    """Door that unlocks when someone approaches."""

    @provides(PROXIMITY_NOTIFIABLE)
    def on_proximity(self) -> str:
        return self.unlock()


class Timer(CapabilityClient):
    capability = TIMEOUT_NOTIFIABLE

    def __init__(self, registry: CapabilityRegistry, timeout: float = 0.0) -> None:
        super().__init__(registry)
        self.timeout = timeout

    def fire(self) -> NotificationReport:
        """Signal expiry to every registered door."""
        logger.debug("Timer expired after %ss, notifying %d door(s)", self.timeout, len(self))
        return self.notify("on_timeout")


class ProximitySensor(CapabilityClient):
    capability = PROXIMITY_NOTIFIABLE

    def detect(self) -> NotificationReport:
        return self.notify("on_proximity")


class DoorLockController(CapabilityClient):
    """Locks or unlocks every lockable entity at once."""

    capability = LOCKABLE

    def lock_all(self) -> NotificationReport:
        return self.notify("lock")

    def unlock_all(self) -> NotificationReport:
        return self.notify("unlock")

    def locked_ids(self):
        return [handle.entity_id for handle in self.handles() if handle.is_locked()]
