"""Tests for colectorpro.storage.json_store.JsonStore and settings persistence."""
import json
from pathlib import Path

from colectorpro.core.models import StorageMode, ViewMode
from colectorpro.core.settings import AppSettings, SettingsStore
from colectorpro.storage.json_store import JsonStore


def test_json_store_crud(tmp_path: Path) -> None:
    store = JsonStore(tmp_path / "settings.json")
    assert store.get("k") is None
    store.set("k", "value")
    assert store.get("k") == "value"
    store.set("n", 3)
    assert store.get("n") == 3
    store.delete("k")
    assert store.get("k") is None
    assert store.get("n") == 3


def test_json_store_values_are_json_text(tmp_path: Path) -> None:
    path = tmp_path / "settings.json"
    JsonStore(path).set("language", "en")
    raw = json.loads(path.read_text(encoding="utf-8"))
    assert raw == {"language": '"en"'}


def test_json_store_persists(tmp_path: Path) -> None:
    path = tmp_path / "settings.json"
    JsonStore(path).set("key", "v")
    assert JsonStore(path).get("key") == "v"


def test_corrupt_entry_only_affects_itself(tmp_path: Path) -> None:
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"good": '"ok"', "bad": "{not json"}), encoding="utf-8")
    store = JsonStore(path)
    assert store.get("good") == "ok"
    assert store.get("bad") is None


def test_settings_defaults_when_missing(tmp_path: Path) -> None:
    settings = SettingsStore(JsonStore(tmp_path / "settings.json")).load()
    assert settings == AppSettings.defaults()
    assert settings.view_mode == ViewMode.VERTICAL_GRID
    assert settings.language == "pt"
    assert settings.storage_mode == StorageMode.LOCAL
    assert settings.server_url == "http://localhost:3001"


def test_settings_round_trip(tmp_path: Path) -> None:
    backend = JsonStore(tmp_path / "settings.json")
    store = SettingsStore(backend)
    wanted = AppSettings(
        view_mode=ViewMode.HORIZONTAL_SCROLL,
        language="en",
        storage_mode=StorageMode.SERVER,
        server_url="http://192.168.0.15:3001",
    )
    store.save(wanted)
    assert SettingsStore(JsonStore(tmp_path / "settings.json")).load() == wanted


def test_invalid_values_fall_back_per_key(tmp_path: Path) -> None:
    backend = JsonStore(tmp_path / "settings.json")
    backend.set("viewMode", "DIAGONAL")
    backend.set("language", "fr")
    backend.set("storageMode", "server")
    backend.set("serverUrl", "")
    settings = SettingsStore(backend).load()
    assert settings.view_mode == ViewMode.VERTICAL_GRID
    assert settings.language == "pt"
    assert settings.storage_mode == StorageMode.SERVER
    assert settings.server_url == "http://localhost:3001"
