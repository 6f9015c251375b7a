from pathlib import Path

import pytest

from colectorpro.connectors.image_edit import ImageEditor
from colectorpro.core.car_form import CarFormState
from colectorpro.core.collection import ImmediateRunner
from colectorpro.core.errors import FormValidationError, ImageEditError
from colectorpro.core.image_data import decode_data_uri, file_to_data_uri
from colectorpro.core.models import Car, CarCategory


class _Editor:
    def __init__(self, result: str | None = None, exc: Exception | None = None) -> None:
        self.result = result
        self.exc = exc
        self.calls: list[tuple[str, str]] = []

    def edit(self, image: str, instruction: str) -> str:
        self.calls.append((image, instruction))
        if self.exc is not None:
            raise self.exc
        return self.result


def _form(**kwargs) -> CarFormState:
    return CarFormState(clock=lambda: 1234, id_factory=lambda: "new-id", **kwargs)


def test_file_to_data_uri(tmp_path: Path) -> None:
    png = tmp_path / "a.png"
    png.write_bytes(b"\x89PNG fake")
    uri = file_to_data_uri(png)
    assert uri.startswith("data:image/png;base64,")
    assert decode_data_uri(uri) == b"\x89PNG fake"

    unknown = tmp_path / "photo.bin"
    unknown.write_bytes(b"x")
    assert file_to_data_uri(unknown).startswith("data:image/jpeg;base64,")


def test_new_car_requires_name_and_photo() -> None:
    form = _form()
    with pytest.raises(FormValidationError):
        form.build_car()
    assert form.error == "errorReq"

    form.name = "   "
    form.images = ["data:image/png;base64,AAA"]
    with pytest.raises(FormValidationError):
        form.build_car()

    form.name = "Skyline"
    form.images = []
    with pytest.raises(FormValidationError):
        form.build_car()


def test_build_new_car() -> None:
    form = _form()
    form.name = " Skyline "
    form.brand = "  Tomica "
    form.model = " R34 "
    form.category = CarCategory.EXOTIC
    form.images = ["data:image/png;base64,ONE", "data:image/png;base64,TWO"]

    car = form.build_car()

    assert car.id == "new-id"
    assert car.date_added == 1234
    assert car.name == " Skyline "
    assert car.brand == "Tomica"
    assert car.model == "R34"
    assert car.image_url == car.images[0] == "data:image/png;base64,ONE"
    assert form.error is None


def test_edit_keeps_id_and_date() -> None:
    existing = Car(
        id="42",
        name="Beetle",
        category=CarCategory.CLASSIC,
        image_url="u1",
        images=["u1", "u2"],
        date_added=99,
    )
    form = _form(initial=existing)
    assert form.is_edit
    form.remove_image(0)
    form.name = "Fusca"

    car = form.build_car()
    assert car.id == "42"
    assert car.date_added == 99
    assert car.images == ["u2"]
    assert car.image_url == "u2"


def test_legacy_car_without_images_uses_cover() -> None:
    legacy = Car(id="1", name="x", category=CarCategory.OTHER, image_url="cover", date_added=1)
    assert _form(initial=legacy).images == ["cover"]


def test_oversized_file_is_rejected(tmp_path: Path) -> None:
    small = tmp_path / "small.jpg"
    small.write_bytes(b"a" * 10)
    big = tmp_path / "big.jpg"
    big.write_bytes(b"a" * 11)

    form = _form()
    added = form.add_image_files([small, big], limit=10)

    assert added == 1
    assert len(form.images) == 1
    assert form.error == "errorFile"


def test_remove_image_clamps_selection() -> None:
    form = _form()
    form.images = ["a", "b", "c"]
    form.select(2)
    form.remove_image(2)
    assert form.selected_index == 1
    form.remove_image(0)
    form.remove_image(0)
    assert form.images == []
    assert form.selected_index == 0
    assert form.selected_image is None


class _QueueRunner:
    """Holds submitted work until settle() is called."""

    def __init__(self) -> None:
        self.queue: list = []

    def submit(self, fn, on_success=None, on_error=None) -> None:
        self.queue.append((fn, on_success, on_error))

    def settle(self) -> None:
        while self.queue:
            fn, on_success, on_error = self.queue.pop(0)
            try:
                result = fn()
            except Exception as exc:
                on_error(exc)
                continue
            on_success(result)


def test_ai_edit_replaces_selected_image() -> None:
    form = _form()
    form.images = ["a", "b"]
    form.select(1)
    editor = _Editor(result="edited")
    settled: list[bool] = []

    assert form.request_ai_edit(editor, "paint it blue", ImmediateRunner(), settled.append)
    assert form.images == ["a", "edited"]
    assert editor.calls == [("b", "paint it blue")]
    assert settled == [True]
    assert not form.generating


def test_ai_edit_failure_leaves_image_unchanged() -> None:
    form = _form()
    form.images = ["a"]
    editor = _Editor(exc=ImageEditError("No image data returned from Gemini."))
    settled: list[bool] = []

    form.request_ai_edit(editor, "paint it blue", ImmediateRunner(), settled.append)

    assert form.images == ["a"]
    assert form.error == "errorGen"
    assert form.error_detail is None
    assert settled == [False]


def test_ai_edit_unexpected_error_is_reported_not_raised() -> None:
    form = _form()
    form.images = ["a"]
    editor = _Editor(exc=RuntimeError("bug"))

    form.request_ai_edit(editor, "paint", ImmediateRunner())

    assert form.images == ["a"]
    assert form.error == "errorGen"


def test_ai_edit_without_credential_keeps_image() -> None:
    form = _form()
    form.images = ["data:image/png;base64,AAA"]
    editor = ImageEditor(api_key_provider=lambda: None)

    form.request_ai_edit(editor, "add flames", ImmediateRunner())

    assert form.images == ["data:image/png;base64,AAA"]
    assert form.error == "errorGen"
    assert "API key" in form.error_detail


def test_ai_edit_needs_image_and_instruction() -> None:
    form = _form()
    editor = _Editor(result="edited")
    assert not form.request_ai_edit(editor, "paint", ImmediateRunner())
    form.images = ["a"]
    assert not form.request_ai_edit(editor, "   ", ImmediateRunner())
    assert editor.calls == []


def test_one_ai_edit_at_a_time() -> None:
    form = _form()
    form.images = ["a"]
    runner = _QueueRunner()
    editor = _Editor(result="edited")

    assert form.request_ai_edit(editor, "paint", runner)
    assert form.generating
    assert not form.can_ai_edit("again")
    assert not form.request_ai_edit(editor, "again", runner)

    runner.settle()
    assert form.images == ["edited"]
    assert not form.generating


def test_cancelled_ai_edit_is_discarded() -> None:
    form = _form()
    form.images = ["a"]
    runner = _QueueRunner()
    settled: list[bool] = []

    form.request_ai_edit(_Editor(result="edited"), "paint", runner, settled.append)
    form.cancel_ai_edit()
    runner.settle()

    assert form.images == ["a"]
    assert settled == []


def test_ai_edit_skips_slot_removed_meanwhile() -> None:
    form = _form()
    form.images = ["a", "b"]
    runner = _QueueRunner()
    settled: list[bool] = []

    form.request_ai_edit(_Editor(result="edited"), "paint", runner, settled.append)
    form.remove_image(0)
    runner.settle()

    assert form.images == ["b"]
    assert settled == [False]


def test_unreadable_file_keeps_the_rest(tmp_path: Path) -> None:
    good = tmp_path / "good.png"
    good.write_bytes(b"png")
    missing = tmp_path / "missing.png"
    also_good = tmp_path / "also.jpg"
    also_good.write_bytes(b"jpg")

    form = _form()
    added = form.add_image_files([good, missing, also_good])

    assert added == 2
    assert len(form.images) == 2
    assert form.error == "errorRead"


def test_replace_image_skips_changed_slot() -> None:
    form = _form()
    form.images = ["a", "b"]
    assert not form.replace_image(0, "old", "new")
    assert not form.replace_image(5, "a", "new")
    assert form.images == ["a", "b"]
