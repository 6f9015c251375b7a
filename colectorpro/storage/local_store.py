"""SQLite-backed on-device storage for cars.

Works as an object store: one JSON document per car, keyed by id, with an
index on date_added for listing newest first.
"""

from __future__ import annotations

import json
import logging
import sqlite3
import time
from pathlib import Path
from typing import Callable, List

from colectorpro.core.models import Car, CarCategory

logger = logging.getLogger(__name__)


def _now_ms() -> int:
    return int(time.time() * 1000)


def sample_cars(now_ms: int) -> List[Car]:
    """The two records a fresh local store starts with."""
    return [
        Car(
            id="1",
            name="Twin Mill",
            brand="Hot Wheels",
            model="Twin Mill III",
            category=CarCategory.FANTASY,
            image_url="https://picsum.photos/400/300?random=1",
            images=["https://picsum.photos/400/300?random=1"],
            date_added=now_ms - 10_000_000,
        ),
        Car(
            id="2",
            name="Mustang GT",
            brand="Ford",
            model="Mustang GT",
            category=CarCategory.MUSCLE,
            image_url="https://picsum.photos/400/300?random=2",
            images=["https://picsum.photos/400/300?random=2"],
            date_added=now_ms - 5_000_000,
        ),
    ]


class LocalCarStore:
    """Car CRUD over an embedded SQLite file."""

    def __init__(self, db_path: Path | str, clock: Callable[[], int] = _now_ms) -> None:
        self._path = Path(db_path)
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._clock = clock
        # background tasks run on one worker thread, never concurrently
        self._conn = sqlite3.connect(self._path, check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self._init_schema()

    # ---------- schema ----------

    def _init_schema(self) -> None:
        cur = self._conn.cursor()
        cur.executescript(
            """
            CREATE TABLE IF NOT EXISTS cars (
                id          TEXT PRIMARY KEY,
                date_added  INTEGER NOT NULL,
                payload     TEXT NOT NULL      -- JSON document, wire shape
            );

            CREATE INDEX IF NOT EXISTS idx_cars_date_added ON cars(date_added);
            """
        )
        self._conn.commit()

    def close(self) -> None:
        self._conn.close()

    # ---------- CRUD ----------

    def list_cars(self) -> List[Car]:
        cur = self._conn.cursor()
        cur.execute("SELECT payload FROM cars ORDER BY date_added DESC, id")
        return [Car.from_dict(json.loads(row["payload"])) for row in cur.fetchall()]

    def get_car(self, car_id: str) -> Car | None:
        cur = self._conn.cursor()
        cur.execute("SELECT payload FROM cars WHERE id = ?", (car_id,))
        row = cur.fetchone()
        if row is None:
            return None
        return Car.from_dict(json.loads(row["payload"]))

    def _put(self, car: Car) -> None:
        self._conn.execute(
            """
            INSERT INTO cars(id, date_added, payload) VALUES (?, ?, ?)
            ON CONFLICT(id) DO UPDATE SET
                date_added = excluded.date_added,
                payload = excluded.payload
            """,
            (car.id, car.date_added, json.dumps(car.to_dict())),
        )

    def add_car(self, car: Car) -> None:
        self._put(car)
        self._conn.commit()

    def update_car(self, car: Car) -> None:
        # put semantics: inserts when the id is unknown
        self._put(car)
        self._conn.commit()

    def delete_car(self, car_id: str) -> None:
        self._conn.execute("DELETE FROM cars WHERE id = ?", (car_id,))
        self._conn.commit()

    def count(self) -> int:
        cur = self._conn.cursor()
        cur.execute("SELECT COUNT(*) AS n FROM cars")
        return int(cur.fetchone()["n"])

    def seed_if_empty(self) -> List[Car]:
        if self.count() == 0:
            seeds = sample_cars(self._clock())
            for car in seeds:
                self._put(car)
            self._conn.commit()
            logger.info("Seeded empty local store %s with %d sample cars", self._path, len(seeds))
        return self.list_cars()
