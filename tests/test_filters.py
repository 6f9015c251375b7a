from colectorpro.core.filters import CarFilter, filter_cars
from colectorpro.core.models import Car, CarCategory


def _car(car_id: str, name: str, brand: str, model: str, category: CarCategory) -> Car:
    return Car(
        id=car_id,
        name=name,
        brand=brand,
        model=model,
        category=category,
        image_url="u",
        images=["u"],
        date_added=0,
    )


CARS = [
    _car("1", "Twin Mill", "Hot Wheels", "Twin Mill III", CarCategory.FANTASY),
    _car("2", "Mustang GT", "Ford", "Mustang GT", CarCategory.MUSCLE),
    _car("3", "Bone Shaker", "Hot Wheels", "", CarCategory.FANTASY),
]


def test_empty_filter_matches_all() -> None:
    assert filter_cars(CARS, CarFilter()) == CARS


def test_substring_is_case_insensitive() -> None:
    assert [c.id for c in filter_cars(CARS, CarFilter(name="mUsT"))] == ["2"]
    assert [c.id for c in filter_cars(CARS, CarFilter(brand="hot"))] == ["1", "3"]
    assert [c.id for c in filter_cars(CARS, CarFilter(model="iii"))] == ["1"]


def test_fields_combine() -> None:
    criteria = CarFilter(brand="hot wheels", name="bone")
    assert [c.id for c in filter_cars(CARS, criteria)] == ["3"]


def test_category_exact_match() -> None:
    assert [c.id for c in filter_cars(CARS, CarFilter(category=CarCategory.FANTASY))] == ["1", "3"]
    assert filter_cars(CARS, CarFilter(category=CarCategory.TRUCK)) == []


def test_model_filter_excludes_blank_model() -> None:
    assert [c.id for c in filter_cars(CARS, CarFilter(model="m"))] == ["1", "2"]
