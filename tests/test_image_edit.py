import keyring
import pytest
import requests
from keyring.backend import KeyringBackend

from colectorpro.connectors.image_edit import (
    ImageEditor,
    build_prompt,
    first_inline_image,
    split_image_payload,
)
from colectorpro.core import credentials
from colectorpro.core.errors import ImageEditError, MissingCredentialError


class InMemoryKeyring(KeyringBackend):
    priority = 1

    def __init__(self) -> None:
        self._store: dict[tuple[str, str], str] = {}

    def get_password(self, service: str, username: str) -> str | None:
        return self._store.get((service, username))

    def set_password(self, service: str, username: str, password: str) -> None:
        self._store[(service, username)] = password

    def delete_password(self, service: str, username: str) -> None:
        self._store.pop((service, username), None)


@pytest.fixture(autouse=True)
def in_memory_keyring(monkeypatch: pytest.MonkeyPatch) -> None:
    backend = InMemoryKeyring()

    def _get_keyring() -> KeyringBackend:
        return backend

    monkeypatch.setattr(keyring, "get_keyring", _get_keyring)
    keyring.set_keyring(backend)
    for name in credentials.ENV_KEYS:
        monkeypatch.delenv(name, raising=False)


class _Response:
    def __init__(self, body, status: int = 200) -> None:
        self._body = body
        self.status_code = status

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"HTTP {self.status_code}")

    def json(self):
        return self._body


class _Session:
    def __init__(self, response=None, exc: Exception | None = None) -> None:
        self.response = response
        self.exc = exc
        self.calls: list[dict] = []

    def post(self, url, json=None, headers=None, timeout=None):
        self.calls.append({"url": url, "json": json, "headers": headers})
        if self.exc is not None:
            raise self.exc
        return self.response


def _image_response(data: str = "RURJVEVE") -> dict:
    return {
        "candidates": [
            {"content": {"parts": [{"text": "here you go"}, {"inlineData": {"mimeType": "image/png", "data": data}}]}}
        ]
    }


def test_api_key_lives_in_keyring() -> None:
    assert credentials.stored_api_key() is None
    credentials.set_api_key("k-123")
    assert credentials.stored_api_key() == "k-123"
    assert credentials.resolve_api_key() == "k-123"
    credentials.clear_api_key()
    assert credentials.stored_api_key() is None
    # clearing twice is fine
    credentials.clear_api_key()


def test_env_fallback(monkeypatch: pytest.MonkeyPatch) -> None:
    assert credentials.resolve_api_key() is None
    monkeypatch.setenv("API_KEY", "from-api-key")
    assert credentials.resolve_api_key() == "from-api-key"
    monkeypatch.setenv("GEMINI_API_KEY", "from-gemini")
    assert credentials.resolve_api_key() == "from-gemini"
    credentials.set_api_key("from-keyring")
    assert credentials.resolve_api_key() == "from-keyring"


def test_split_image_payload() -> None:
    assert split_image_payload("data:image/png;base64,AAA") == ("image/png", "AAA")
    assert split_image_payload("data:image/webp;base64,BBB") == ("image/webp", "BBB")
    assert split_image_payload("data:image/jpeg;base64,CCC") == ("image/jpeg", "CCC")
    assert split_image_payload("DDD") == ("image/jpeg", "DDD")


def test_build_prompt() -> None:
    assert build_prompt("make it red") == "Edit this image: make it red. Return ONLY the edited image."


def test_first_inline_image_accepts_snake_case() -> None:
    body = {"candidates": [{"content": {"parts": [{"inline_data": {"data": "XYZ"}}]}}]}
    assert first_inline_image(body) == "XYZ"
    assert first_inline_image({}) is None
    assert first_inline_image({"candidates": [{"content": {"parts": [{"text": "no"}]}}]}) is None


def test_missing_credential_fails_before_network() -> None:
    session = _Session(response=_Response(_image_response()))
    editor = ImageEditor(session=session)
    with pytest.raises(MissingCredentialError):
        editor.edit("data:image/png;base64,AAA", "add flames")
    assert session.calls == []


def test_edit_returns_png_data_uri() -> None:
    session = _Session(response=_Response(_image_response("RURJVEVE")))
    editor = ImageEditor(api_key_provider=lambda: "secret", session=session)

    result = editor.edit("data:image/webp;base64,SRC", "add flames")

    assert result == "data:image/png;base64,RURJVEVE"
    (call,) = session.calls
    assert call["url"].endswith("/models/gemini-2.5-flash-image:generateContent")
    assert call["headers"] == {"x-goog-api-key": "secret"}
    parts = call["json"]["contents"][0]["parts"]
    assert parts[0] == {"inlineData": {"mimeType": "image/webp", "data": "SRC"}}
    assert parts[1] == {"text": build_prompt("add flames")}


def test_no_image_in_response() -> None:
    session = _Session(response=_Response(_image_response(data="")))
    editor = ImageEditor(api_key_provider=lambda: "secret", session=session)
    with pytest.raises(ImageEditError, match="No image data"):
        editor.edit("data:image/png;base64,AAA", "x")


def test_transport_failure_becomes_image_edit_error() -> None:
    session = _Session(exc=requests.ConnectionError("offline"))
    editor = ImageEditor(api_key_provider=lambda: "secret", session=session)
    with pytest.raises(ImageEditError):
        editor.edit("data:image/png;base64,AAA", "x")


def test_http_error_becomes_image_edit_error() -> None:
    session = _Session(response=_Response({"error": {}}, status=403))
    editor = ImageEditor(api_key_provider=lambda: "secret", session=session)
    with pytest.raises(ImageEditError):
        editor.edit("data:image/png;base64,AAA", "x")
