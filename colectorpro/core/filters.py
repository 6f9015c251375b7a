from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

from colectorpro.core.models import Car, CarCategory


@dataclass(frozen=True)
class CarFilter:
    """Current filter bar values. category None means "All"."""

    name: str = ""
    brand: str = ""
    model: str = ""
    category: Optional[CarCategory] = None


def filter_cars(cars: Sequence[Car], criteria: CarFilter) -> list[Car]:
    """Filter cars by name/brand/model substrings and category.

    - name, brand and model each match case-insensitively as substrings;
      an empty field matches everything
    - category (if set) must match exactly
    """

    name_q = criteria.name.lower()
    brand_q = criteria.brand.lower()
    model_q = criteria.model.lower()

    results: list[Car] = []
    for car in cars:
        if name_q not in car.name.lower():
            continue
        if brand_q not in (car.brand or "").lower():
            continue
        if model_q not in (car.model or "").lower():
            continue
        if criteria.category is not None and car.category != criteria.category:
            continue
        results.append(car)
    return results
