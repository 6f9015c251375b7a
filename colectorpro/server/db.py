"""SQLite table behind the companion server.

Columns mirror the wire shape; images is stored as JSON text.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from pathlib import Path
from typing import Any, Dict, List

logger = logging.getLogger(__name__)


def connect(db_path: Path | str) -> sqlite3.Connection:
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    return conn


def init_schema(conn: sqlite3.Connection) -> None:
    """Create the cars table and add the images column to older databases."""
    cur = conn.cursor()
    cur.execute(
        """
        CREATE TABLE IF NOT EXISTS cars (
            id         TEXT PRIMARY KEY,
            name       TEXT NOT NULL,
            brand      TEXT,
            model      TEXT,
            category   TEXT,
            imageUrl   TEXT,
            images     TEXT,        -- JSON array of strings
            dateAdded  INTEGER
        )
        """
    )
    cur.execute("PRAGMA table_info(cars)")
    cols = {row[1] for row in cur.fetchall()}
    if "images" not in cols:
        logger.warning("Upgrading database: adding 'images' column")
        cur.execute("ALTER TABLE cars ADD COLUMN images TEXT")
    conn.commit()


def _images_json(payload: Dict[str, Any]) -> str:
    images = payload.get("images")
    if not images:
        images = [payload.get("imageUrl")]
    return json.dumps(images)


def _row_to_car(row: sqlite3.Row) -> Dict[str, Any]:
    car = dict(row)
    raw = car.get("images")
    images: Any = None
    if raw:
        try:
            images = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Car %s has unreadable images column", car.get("id"))
    car["images"] = images if isinstance(images, list) else [car.get("imageUrl")]
    return car


class CarTable:
    """Single-statement CRUD over the cars table."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    def list_cars(self) -> List[Dict[str, Any]]:
        cur = self._conn.cursor()
        cur.execute("SELECT * FROM cars ORDER BY dateAdded DESC")
        return [_row_to_car(row) for row in cur.fetchall()]

    def insert_car(self, payload: Dict[str, Any]) -> None:
        self._conn.execute(
            """
            INSERT INTO cars (id, name, brand, model, category, imageUrl, images, dateAdded)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                payload.get("id"),
                payload.get("name"),
                payload.get("brand"),
                payload.get("model"),
                payload.get("category"),
                payload.get("imageUrl"),
                _images_json(payload),
                payload.get("dateAdded"),
            ),
        )
        self._conn.commit()

    def update_car(self, car_id: str, payload: Dict[str, Any]) -> int:
        cur = self._conn.execute(
            """
            UPDATE cars SET name = ?, brand = ?, model = ?, category = ?, imageUrl = ?, images = ?
            WHERE id = ?
            """,
            (
                payload.get("name"),
                payload.get("brand"),
                payload.get("model"),
                payload.get("category"),
                payload.get("imageUrl"),
                _images_json(payload),
                car_id,
            ),
        )
        self._conn.commit()
        return cur.rowcount

    def delete_car(self, car_id: str) -> int:
        cur = self._conn.execute("DELETE FROM cars WHERE id = ?", (car_id,))
        self._conn.commit()
        return cur.rowcount
