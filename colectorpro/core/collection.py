"""Collection orchestration: active store, in-memory list, optimistic writes.

Mutations of ``cars`` always happen on the caller's (UI) thread; store calls
go through a TaskRunner and report back through callbacks.
"""

from __future__ import annotations

import logging
import sqlite3
from dataclasses import replace
from typing import Any, Callable, List, Optional, Protocol, TypeVar

from colectorpro.core.cars import CarRepository
from colectorpro.core.errors import RemoteStoreError
from colectorpro.core.filters import CarFilter, filter_cars
from colectorpro.core.models import Car, StorageMode, ViewMode
from colectorpro.core.settings import AppSettings, SettingsStore
from colectorpro.core.translations import translate
from colectorpro.storage.remote_store import RemoteCarStore, normalize_base_url

logger = logging.getLogger(__name__)

T = TypeVar("T")

# errors from opening or reading the on-device store
LOCAL_STORE_ERRORS = (sqlite3.Error, OSError, ValueError, TypeError)


class TaskRunner(Protocol):
    def submit(
        self,
        fn: Callable[[], T],
        on_success: Optional[Callable[[T], None]] = None,
        on_error: Optional[Callable[[Exception], None]] = None,
    ) -> None: ...


class ImmediateRunner:
    """Runs tasks inline on the calling thread."""

    def submit(
        self,
        fn: Callable[[], T],
        on_success: Optional[Callable[[T], None]] = None,
        on_error: Optional[Callable[[Exception], None]] = None,
    ) -> None:
        try:
            result = fn()
        except Exception as exc:
            if on_error is None:
                raise
            on_error(exc)
            return
        if on_success is not None:
            on_success(result)


class CollectionController:
    def __init__(
        self,
        settings_store: SettingsStore,
        local_factory: Callable[[], CarRepository],
        remote_factory: Callable[[str], CarRepository] = RemoteCarStore,
        runner: TaskRunner | None = None,
    ) -> None:
        self._settings_store = settings_store
        self._local_factory = local_factory
        self._remote_factory = remote_factory
        self._runner: TaskRunner = runner or ImmediateRunner()
        self.settings: AppSettings = settings_store.load()

        self._local: Optional[CarRepository] = None
        self._remote: Optional[CarRepository] = None
        self._remote_url: Optional[str] = None
        self._load_generation = 0

        self.cars: List[Car] = []
        self.loading = False
        self.connection_error: Optional[str] = None

        # wired by the UI
        self.on_changed: Callable[[], None] = lambda: None
        self.on_alert: Callable[[str], None] = lambda message: None

    # -------- helpers --------

    def t(self, key: str) -> str:
        return translate(self.settings.language, key)

    def _notify(self) -> None:
        self.on_changed()

    def _local_repository(self) -> CarRepository:
        if self._local is None:
            self._local = self._local_factory()
        return self._local

    def _remote_repository(self) -> CarRepository:
        url = normalize_base_url(self.settings.server_url)
        if self._remote is None or self._remote_url != url:
            self._remote = self._remote_factory(url)
            self._remote_url = url
        return self._remote

    @property
    def is_remote(self) -> bool:
        return self.settings.storage_mode == StorageMode.SERVER

    def repository(self) -> CarRepository:
        """The store selected by the current storage mode."""
        if self.is_remote:
            return self._remote_repository()
        return self._local_repository()

    def _update_settings(self, **changes: Any) -> bool:
        updated = replace(self.settings, **changes)
        if updated == self.settings:
            return False
        self.settings = updated
        self._settings_store.save(updated)
        return True

    # -------- loading --------

    def reload(self) -> None:
        """Fetch the whole collection from the active store."""
        self._load_generation += 1
        generation = self._load_generation
        mode = self.settings.storage_mode
        self.loading = True
        self.connection_error = None
        self._notify()

        try:
            repo = self.repository()
        except LOCAL_STORE_ERRORS as exc:
            self._on_load_failed(generation, mode, exc)
            return

        self._runner.submit(
            repo.seed_if_empty,
            on_success=lambda cars: self._on_loaded(generation, cars),
            on_error=lambda exc: self._on_load_failed(generation, mode, exc),
        )

    def _on_loaded(self, generation: int, cars: List[Car]) -> None:
        if generation != self._load_generation:
            return
        self.cars = list(cars)
        self.loading = False
        self._notify()

    def _on_load_failed(self, generation: int, mode: StorageMode, exc: Exception) -> None:
        if generation != self._load_generation:
            return
        self.cars = []
        self.loading = False
        if mode == StorageMode.SERVER and isinstance(exc, RemoteStoreError):
            logger.warning("Could not load cars from server: %s", exc)
            self.connection_error = self.t("connectionError")
        elif mode == StorageMode.LOCAL and isinstance(exc, LOCAL_STORE_ERRORS):
            logger.error("Failed to open local database: %s", exc)
        else:
            self._notify()
            raise exc
        self._notify()

    # -------- preferences --------

    def set_storage(self, mode: StorageMode, server_url: str) -> None:
        if self._update_settings(storage_mode=mode, server_url=server_url.strip()):
            self.reload()

    def switch_to_local(self) -> None:
        self.set_storage(StorageMode.LOCAL, self.settings.server_url)

    def dismiss_connection_error(self) -> None:
        self.connection_error = None
        self._notify()

    def set_language(self, language: str) -> None:
        if self._update_settings(language=language):
            if self.connection_error is not None:
                self.connection_error = self.t("connectionError")
            self._notify()

    def toggle_language(self) -> None:
        self.set_language("pt" if self.settings.language == "en" else "en")

    def set_view_mode(self, view_mode: ViewMode) -> None:
        if self._update_settings(view_mode=view_mode):
            self._notify()

    # -------- optimistic writes --------

    def save_car(self, car: Car, is_update: bool) -> None:
        """Show the change immediately, then persist it in the background.

        A failed write is reported but not rolled back; the list stays as
        shown until the next reload.
        """
        if is_update:
            self.cars = [car if c.id == car.id else c for c in self.cars]
        else:
            self.cars = [car] + self.cars
        self._notify()

        def _write(repo: CarRepository) -> None:
            if is_update:
                repo.update_car(car)
            else:
                repo.add_car(car)

        self._submit_write("save", _write)

    def delete_car(self, car_id: str) -> None:
        self.cars = [c for c in self.cars if c.id != car_id]
        self._notify()
        self._submit_write("delete", lambda repo: repo.delete_car(car_id))

    def _submit_write(self, action: str, write: Callable[[CarRepository], None]) -> None:
        mode = self.settings.storage_mode
        try:
            repo = self.repository()
        except LOCAL_STORE_ERRORS as exc:
            self._on_write_failed(mode, action, exc)
            return
        self._runner.submit(
            lambda: write(repo),
            on_error=lambda exc: self._on_write_failed(mode, action, exc),
        )

    def _on_write_failed(self, mode: StorageMode, action: str, exc: Exception) -> None:
        logger.error("Failed to %s car: %s", action, exc)
        if mode == StorageMode.SERVER:
            self.on_alert(self.t("connectionError"))

    # -------- queries --------

    def filtered(self, criteria: CarFilter) -> List[Car]:
        return filter_cars(self.cars, criteria)

    def find(self, car_id: str) -> Optional[Car]:
        return next((c for c in self.cars if c.id == car_id), None)
