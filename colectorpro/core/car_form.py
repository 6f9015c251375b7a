"""Add/edit form state, independent of the widgets that render it."""

from __future__ import annotations

import logging
import time
import uuid
from pathlib import Path
from typing import Callable, Iterable, Optional, Protocol

from colectorpro.core.collection import TaskRunner
from colectorpro.core.errors import (
    FormValidationError,
    ImageEditError,
    ImageTooLargeError,
    MissingCredentialError,
)
from colectorpro.core.image_data import MAX_UPLOAD_BYTES, file_to_data_uri
from colectorpro.core.models import Car, CarCategory

logger = logging.getLogger(__name__)


class ImageEditService(Protocol):
    def edit(self, image: str, instruction: str) -> str: ...


def _now_ms() -> int:
    return int(time.time() * 1000)


class CarFormState:
    def __init__(
        self,
        initial: Car | None = None,
        clock: Callable[[], int] = _now_ms,
        id_factory: Callable[[], str] = lambda: str(uuid.uuid4()),
    ) -> None:
        self._initial = initial
        self._clock = clock
        self._id_factory = id_factory
        self.name = ""
        self.brand = ""
        self.model = ""
        self.category = CarCategory.MUSCLE
        self.images: list[str] = []
        self.selected_index = 0
        # translation key of the message shown under the form
        self.error: Optional[str] = None
        # extra text shown after the error, e.g. how to configure the API key
        self.error_detail: Optional[str] = None
        self._edit_token = 0
        self._pending_edit: Optional[int] = None

        if initial is not None:
            self.name = initial.name
            self.brand = initial.brand or ""
            self.model = initial.model or ""
            self.category = initial.category
            if initial.images:
                self.images = list(initial.images)
            elif initial.image_url:
                self.images = [initial.image_url]

    @property
    def is_edit(self) -> bool:
        return self._initial is not None

    @property
    def selected_image(self) -> Optional[str]:
        if 0 <= self.selected_index < len(self.images):
            return self.images[self.selected_index]
        return None

    # -------- images --------

    def add_image_files(self, paths: Iterable[Path | str], limit: int = MAX_UPLOAD_BYTES) -> int:
        """Append readable files as data URIs; oversized or unreadable files are skipped."""
        added: list[str] = []
        error: Optional[str] = None
        for path in paths:
            try:
                added.append(file_to_data_uri(path, limit))
            except ImageTooLargeError as exc:
                logger.info("Rejected upload: %s", exc)
                error = "errorFile"
            except OSError as exc:
                logger.warning("Could not read %s: %s", path, exc)
                error = error or "errorRead"
        was_empty = not self.images
        self.images.extend(added)
        if error is not None:
            self.error = error
        elif added:
            self.error = None
        if was_empty and added:
            self.selected_index = 0
        return len(added)

    def select(self, index: int) -> None:
        if 0 <= index < len(self.images):
            self.selected_index = index

    def remove_image(self, index: int) -> None:
        if not 0 <= index < len(self.images):
            return
        del self.images[index]
        if self.selected_index >= len(self.images):
            self.selected_index = max(0, len(self.images) - 1)

    def replace_image(self, index: int, expected: str, replacement: str) -> bool:
        """Swap one slot, unless it changed since the edit started."""
        if not 0 <= index < len(self.images) or self.images[index] != expected:
            return False
        self.images[index] = replacement
        return True

    # -------- AI edit --------

    @property
    def generating(self) -> bool:
        return self._pending_edit is not None

    def can_ai_edit(self, instruction: str) -> bool:
        return not self.generating and self.selected_image is not None and bool(instruction.strip())

    def request_ai_edit(
        self,
        editor: ImageEditService,
        instruction: str,
        runner: TaskRunner,
        on_settled: Callable[[bool], None] = lambda applied: None,
    ) -> bool:
        """Edit the selected image in the background.

        The slot is replaced when the edit succeeds and still applies; on
        failure error becomes "errorGen" and the image is left untouched.
        on_settled(applied) runs once the edit finishes, unless it was
        cancelled first.
        """
        if not self.can_ai_edit(instruction):
            return False
        index = self.selected_index
        original = self.images[index]
        self._edit_token += 1
        token = self._edit_token
        self._pending_edit = token
        self.error = None
        self.error_detail = None

        def _done(edited: str) -> None:
            if self._pending_edit != token:
                return
            self._pending_edit = None
            on_settled(self.replace_image(index, original, edited))

        def _failed(exc: Exception) -> None:
            if self._pending_edit != token:
                return
            self._pending_edit = None
            if isinstance(exc, ImageEditError):
                logger.warning("AI edit failed: %s", exc)
            else:
                logger.error("AI edit crashed", exc_info=exc)
            self.error = "errorGen"
            if isinstance(exc, MissingCredentialError):
                self.error_detail = str(exc)
            on_settled(False)

        runner.submit(lambda: editor.edit(original, instruction), on_success=_done, on_error=_failed)
        return True

    def cancel_ai_edit(self) -> None:
        """Drop the result of an edit still in flight."""
        self._pending_edit = None

    # -------- submit --------

    def build_car(self) -> Car:
        if not self.name.strip() or not self.images:
            self.error = "errorReq"
            raise FormValidationError("errorReq")
        self.error = None
        initial = self._initial
        return Car(
            id=initial.id if initial is not None else self._id_factory(),
            name=self.name,
            brand=self.brand.strip(),
            model=self.model.strip(),
            category=self.category,
            image_url=self.images[0],
            images=list(self.images),
            date_added=initial.date_added if initial is not None else self._clock(),
        )
