"""Companion server: REST CRUD over a SQLite cars table.

Run on any machine on the local network, then point the desktop app's
"Server URL" setting at the address printed at startup.
"""

from __future__ import annotations

import argparse
import logging
import os
import socket
import sqlite3
import sys
from pathlib import Path
from typing import Any, Dict

from flask import Flask, g, jsonify, request
from flask_cors import CORS

from colectorpro.server.db import CarTable, connect, init_schema

logger = logging.getLogger(__name__)

DEFAULT_PORT = 3001
DEFAULT_HOST = "0.0.0.0"
# photos travel inline as base64 data URIs
MAX_BODY_BYTES = 50 * 1024 * 1024


def create_app(db_path: Path | str) -> Flask:
    app = Flask(__name__)
    app.config["DB_PATH"] = str(db_path)
    app.config["MAX_CONTENT_LENGTH"] = MAX_BODY_BYTES
    CORS(app)

    conn = connect(app.config["DB_PATH"])
    try:
        init_schema(conn)
    finally:
        conn.close()
    logger.info("Connected to SQLite database %s", app.config["DB_PATH"])

    def _table() -> CarTable:
        if "db" not in g:
            g.db = connect(app.config["DB_PATH"])
        return CarTable(g.db)

    @app.teardown_appcontext
    def _close_db(_exc: BaseException | None) -> None:
        db = g.pop("db", None)
        if db is not None:
            db.close()

    def _body() -> Dict[str, Any]:
        payload = request.get_json(silent=True)
        return payload if isinstance(payload, dict) else {}

    def _db_error(exc: sqlite3.Error):
        logger.warning("%s %s failed: %s", request.method, request.path, exc)
        return jsonify({"error": str(exc)}), 400

    @app.get("/api/cars")
    def list_cars():
        try:
            cars = _table().list_cars()
        except sqlite3.Error as exc:
            return _db_error(exc)
        return jsonify({"data": cars})

    @app.post("/api/cars")
    def create_car():
        payload = _body()
        try:
            _table().insert_car(payload)
        except sqlite3.Error as exc:
            return _db_error(exc)
        return jsonify({"message": "Car saved", "data": payload})

    @app.put("/api/cars/<car_id>")
    def update_car(car_id: str):
        payload = _body()
        try:
            _table().update_car(car_id, payload)
        except sqlite3.Error as exc:
            return _db_error(exc)
        return jsonify({"message": "Car updated", "data": payload})

    @app.delete("/api/cars/<car_id>")
    def delete_car(car_id: str):
        try:
            changes = _table().delete_car(car_id)
        except sqlite3.Error as exc:
            return _db_error(exc)
        return jsonify({"message": "Car deleted", "changes": changes})

    return app


def local_network_ip() -> str:
    """Best-effort LAN IPv4 address of this machine, else 'localhost'."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    try:
        # no packet is sent; connect() only selects the outbound interface
        sock.connect(("10.255.255.255", 1))
        address = sock.getsockname()[0]
    except OSError:
        return "localhost"
    finally:
        sock.close()
    if address.startswith("127."):
        return "localhost"
    return address


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="ColectorPro companion server")
    parser.add_argument("--host", default=DEFAULT_HOST)
    parser.add_argument("--port", type=int, default=DEFAULT_PORT)
    parser.add_argument("--db", default="cars.db", help="SQLite database file")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=os.environ.get("COLECTORPRO_LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = create_app(Path(args.db).resolve())
    print("=" * 50)
    print("ColectorPro server running")
    print(f"Port: {args.port}")
    print("-" * 50)
    print("Use this address in the app's Server URL setting:")
    print(f"  http://{local_network_ip()}:{args.port}")
    print("=" * 50)
    app.run(host=args.host, port=args.port)
    return 0


if __name__ == "__main__":
    sys.exit(main())
