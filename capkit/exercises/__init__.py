"""SOLID exercises built on the capability core."""
from .cars import Car, CarDB, CarFormat, CarManager, CarSelector
from .doors import (
    LOCKABLE,
    OPENABLE,
    PROXIMITY_NOTIFIABLE,
    TIMEOUT_NOTIFIABLE,
    Door,
    DoorLockController,
    ProximitySensor,
    SensingDoor,
    TimedDoor,
    Timer,
)
from .ducks import QUACKABLE, SWIMMABLE, Duck, ElectronicDuck, Pool

__all__ = [
    "Car",
    "CarDB",
    "CarFormat",
    "CarManager",
    "CarSelector",
    "LOCKABLE",
    "OPENABLE",
    "PROXIMITY_NOTIFIABLE",
    "TIMEOUT_NOTIFIABLE",
    "Door",
    "DoorLockController",
    "ProximitySensor",
    "SensingDoor",
    "TimedDoor",
    "Timer",
    "QUACKABLE",
    "SWIMMABLE",
    "Duck",
    "ElectronicDuck",
    "Pool",
]
