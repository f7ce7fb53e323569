"""
Car management split by responsibility.

`CarDB` stores cars, `CarFormat` renders them and `CarSelector` picks one;
`CarManager` only delegates. Collaborators are injected so each can be
replaced on its own.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Car:
    car_id: str
    model: str
    brand: str


_SEED_CARS = (
    Car("1", "Golf III", "Volkswagen"),
    Car("2", "Multipla", "Fiat"),
    Car("3", "Megane", "Renault"),
)


class CarDB:
    """In-memory car store. One instance per owner, never shared implicitly."""

    def __init__(self, cars: Optional[Iterable[Car]] = None) -> None:
        self._cars: Dict[str, Car] = {}
        for car in _SEED_CARS if cars is None else cars:
            self.add(car)

    def add(self, car: Car) -> None:
        if car.car_id in self._cars:
            logger.warning("Replacing car %s in store", car.car_id)
        self._cars[car.car_id] = car

    def get_from_db(self, car_id: str) -> Optional[Car]:
        return self._cars.get(car_id)

    def get_all_cars(self) -> List[Car]:
        return list(self._cars.values())


class CarFormat:
    def get_cars_names(self, cars: Sequence[Car]) -> str:
        return ", ".join(f"{car.brand} {car.model}" for car in cars)


class CarSelector:
    def get_best_car(self, cars: Sequence[Car]) -> Optional[Car]:
        best: Optional[Car] = None
        for car in cars:
            if best is None or car.model > best.model:
                best = car
        return best


class CarManager:
    def __init__(
        self,
        car_db: Optional[CarDB] = None,
        car_format: Optional[CarFormat] = None,
        car_selector: Optional[CarSelector] = None,
    ) -> None:
        self.car_db = car_db if car_db is not None else CarDB()
        self.car_format = car_format or CarFormat()
        self.car_selector = car_selector or CarSelector()

    def get_from_db(self, car_id: str) -> Optional[Car]:
        return self.car_db.get_from_db(car_id)

    def get_cars_names(self) -> str:
        return self.car_format.get_cars_names(self.car_db.get_all_cars())

    def get_best_car(self) -> Optional[Car]:
        return self.car_selector.get_best_car(self.car_db.get_all_cars())
