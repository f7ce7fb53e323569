"""Ducks in a pool: every quackable can stand in for any other."""
from __future__ import annotations

from ..core.capability import Capability
from ..core.client import CapabilityClient
from ..core.entity import Entity, provides
from ..core.registry import NotificationReport

QUACKABLE = Capability.define("quackable", "quack", description="Makes a duck sound")
SWIMMABLE = Capability.define("swimmable", "swim", description="Moves through water")

QUACK = "Quack..."
SWIM = "Swim..."
SILENT = "..."


class Duck(Entity):
    @provides(QUACKABLE)
    def quack(self) -> str:
        return QUACK

    @provides(SWIMMABLE)
    def swim(self) -> str:
        return SWIM


class ElectronicDuck(Duck):
    """Battery duck. Switched off it answers with a placeholder instead of failing."""

    states = ("off", "on")

    @property
    def is_on(self) -> bool:
        return self.state == "on"

    def turn_on(self) -> None:
        self.enter_state("on")

    def turn_off(self) -> None:
        self.enter_state("off")

    def quack(self) -> str:
        return QUACK if self.is_on else SILENT

    def swim(self) -> str:
        return SWIM if self.is_on else SILENT


class Pool(CapabilityClient):
    capability = QUACKABLE

    def add(self, duck: Entity) -> None:
        self.register(duck)

    def run(self) -> NotificationReport:
        return self.notify("quack")
