from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class CarCategory(str, Enum):
    MUSCLE = "Muscle"
    EXOTIC = "Exotic"
    RACE = "Race"
    TRUCK = "Truck"
    FANTASY = "Fantasy"
    CLASSIC = "Classic"
    OTHER = "Other"

    @classmethod
    def parse(cls, value: str | None) -> "CarCategory":
        """Map a stored label to a category; unknown labels become OTHER."""
        for member in cls:
            if member.value == value:
                return member
        return cls.OTHER


class ViewMode(str, Enum):
    VERTICAL_GRID = "VERTICAL_GRID"
    HORIZONTAL_SCROLL = "HORIZONTAL_SCROLL"


class StorageMode(str, Enum):
    LOCAL = "local"
    SERVER = "server"


@dataclass
class Car:
    id: str
    name: str
    category: CarCategory
    image_url: str
    date_added: int
    brand: str = ""
    model: str = ""
    images: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Wire/storage shape (camelCase keys)."""
        return {
            "id": self.id,
            "name": self.name,
            "brand": self.brand,
            "model": self.model,
            "category": self.category.value,
            "imageUrl": self.image_url,
            "images": list(self.images),
            "dateAdded": self.date_added,
        }

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "Car":
        """Build a Car from its wire shape; raises ValueError on malformed records."""
        if not isinstance(payload, dict):
            raise ValueError(f"car record must be an object, got {type(payload).__name__}")
        if payload.get("id") is None:
            raise ValueError("car record has no id")
        image_url = payload.get("imageUrl") or ""
        images = payload.get("images")
        if not isinstance(images, list) or not images:
            # legacy records carry only the cover image
            images = [image_url] if image_url else []
        return cls(
            id=str(payload["id"]),
            name=payload.get("name") or "",
            brand=payload.get("brand") or "",
            model=payload.get("model") or "",
            category=CarCategory.parse(payload.get("category")),
            image_url=image_url,
            images=[str(i) for i in images],
            date_added=int(payload.get("dateAdded") or 0),
        )
