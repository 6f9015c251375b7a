"""HTTP client for the companion server (see colectorpro.server)."""

from __future__ import annotations

import logging
from typing import Any, List

import requests

from colectorpro.core.errors import RemoteStoreError
from colectorpro.core.models import Car

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT_S = 5


def normalize_base_url(url: str) -> str:
    return (url or "").strip().rstrip("/")


class RemoteCarStore:
    """Car CRUD over the companion server's REST API."""

    def __init__(
        self,
        base_url: str,
        session: requests.Session | None = None,
        timeout_s: float = REQUEST_TIMEOUT_S,
    ) -> None:
        self._base_url = normalize_base_url(base_url)
        self._session = session or requests.Session()
        self._timeout_s = timeout_s

    @property
    def base_url(self) -> str:
        return self._base_url

    def _request(self, method: str, path: str, payload: dict | None = None) -> Any:
        url = f"{self._base_url}{path}"
        try:
            resp = self._session.request(method, url, json=payload, timeout=self._timeout_s)
        except requests.RequestException as exc:
            logger.warning("%s %s failed: %s", method, url, exc)
            raise RemoteStoreError(f"{method} {url} failed: {exc}") from exc
        if not resp.ok:
            logger.warning("%s %s returned HTTP %s", method, url, resp.status_code)
            raise RemoteStoreError(f"{method} {url} returned HTTP {resp.status_code}")
        try:
            return resp.json()
        except ValueError as exc:
            raise RemoteStoreError(f"{method} {url} returned a non-JSON body") from exc

    def list_cars(self) -> List[Car]:
        body = self._request("GET", "/api/cars")
        if not isinstance(body, dict):
            raise RemoteStoreError(f"Unexpected car list shape from {self._base_url}")
        rows = body.get("data") or []
        if not isinstance(rows, list):
            raise RemoteStoreError(f"Unexpected car list shape from {self._base_url}")
        try:
            return [Car.from_dict(row) for row in rows]
        except (TypeError, ValueError) as exc:
            raise RemoteStoreError(f"Malformed car list from {self._base_url}") from exc

    def add_car(self, car: Car) -> None:
        self._request("POST", "/api/cars", car.to_dict())

    def update_car(self, car: Car) -> None:
        self._request("PUT", f"/api/cars/{car.id}", car.to_dict())

    def delete_car(self, car_id: str) -> None:
        self._request("DELETE", f"/api/cars/{car_id}")

    def seed_if_empty(self) -> List[Car]:
        # the server is never seeded
        return self.list_cars()
