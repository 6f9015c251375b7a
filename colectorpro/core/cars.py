from __future__ import annotations

from typing import List, Protocol, runtime_checkable

from colectorpro.core.models import Car


@runtime_checkable
class CarRepository(Protocol):
    """CRUD contract shared by the local and remote stores."""

    def list_cars(self) -> List[Car]: ...

    def add_car(self, car: Car) -> None: ...

    def update_car(self, car: Car) -> None: ...

    def delete_car(self, car_id: str) -> None: ...

    def seed_if_empty(self) -> List[Car]: ...
