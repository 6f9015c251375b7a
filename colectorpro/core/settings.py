from __future__ import annotations

from dataclasses import dataclass

from colectorpro.core.models import StorageMode, ViewMode
from colectorpro.core.translations import DEFAULT_LANGUAGE, LANGUAGES
from colectorpro.storage.json_store import JsonStore

DEFAULT_SERVER_URL = "http://localhost:3001"

KEY_VIEW_MODE = "viewMode"
KEY_LANGUAGE = "language"
KEY_STORAGE_MODE = "storageMode"
KEY_SERVER_URL = "serverUrl"


@dataclass(frozen=True)
class AppSettings:
    """UI preferences persisted between runs."""

    view_mode: ViewMode = ViewMode.VERTICAL_GRID
    language: str = DEFAULT_LANGUAGE
    storage_mode: StorageMode = StorageMode.LOCAL
    server_url: str = DEFAULT_SERVER_URL

    @staticmethod
    def defaults() -> "AppSettings":
        return AppSettings()


class SettingsStore:
    """Load-at-start / save-on-change lifecycle for AppSettings."""

    def __init__(self, backend: JsonStore) -> None:
        self._backend = backend

    def load(self) -> AppSettings:
        defaults = AppSettings.defaults()

        view_raw = self._backend.get(KEY_VIEW_MODE)
        try:
            view_mode = ViewMode(view_raw) if view_raw is not None else defaults.view_mode
        except ValueError:
            view_mode = defaults.view_mode

        language = self._backend.get(KEY_LANGUAGE)
        if language not in LANGUAGES:
            language = defaults.language

        mode_raw = self._backend.get(KEY_STORAGE_MODE)
        try:
            storage_mode = StorageMode(mode_raw) if mode_raw is not None else defaults.storage_mode
        except ValueError:
            storage_mode = defaults.storage_mode

        server_url = self._backend.get(KEY_SERVER_URL)
        if not isinstance(server_url, str) or not server_url.strip():
            server_url = defaults.server_url

        return AppSettings(
            view_mode=view_mode,
            language=language,
            storage_mode=storage_mode,
            server_url=server_url.strip(),
        )

    def save(self, settings: AppSettings) -> None:
        self._backend.set(KEY_VIEW_MODE, settings.view_mode.value)
        self._backend.set(KEY_LANGUAGE, settings.language)
        self._backend.set(KEY_STORAGE_MODE, settings.storage_mode.value)
        self._backend.set(KEY_SERVER_URL, settings.server_url)
