from capkit.exercises import Car, CarDB, CarFormat, CarManager, CarSelector


def test_seeded_store():
    db = CarDB()
    assert [c.car_id for c in db.get_all_cars()] == ["1", "2", "3"]
    assert db.get_from_db("2") == Car("2", "Multipla", "Fiat")
    assert db.get_from_db("42") is None


def test_format_names():
    fmt = CarFormat()
    assert fmt.get_cars_names(CarDB().get_all_cars()) == "Volkswagen Golf III, Fiat Multipla, Renault Megane"
    assert fmt.get_cars_names([]) == ""


def test_best_car_has_greatest_model():
    selector = CarSelector()
    assert selector.get_best_car(CarDB().get_all_cars()).model == "Multipla"
    assert selector.get_best_car([]) is None


def test_manager_delegates_to_injected_collaborators():
    class ShoutingFormat(CarFormat):
        def get_cars_names(self, cars):
            return super().get_cars_names(cars).upper()

    db = CarDB([Car("a", "Panda", "Fiat")])
    manager = CarManager(car_db=db, car_format=ShoutingFormat())
    assert manager.get_cars_names() == "FIAT PANDA"
    assert manager.get_from_db("a").model == "Panda"
    assert manager.get_best_car() == Car("a", "Panda", "Fiat")


def test_managers_do_not_share_stores():
    first, second = CarManager(), CarManager()
    first.car_db.add(Car("4", "Clio", "Renault"))
    assert second.get_from_db("4") is None
    assert CarManager(car_db=CarDB([])).get_cars_names() == ""
