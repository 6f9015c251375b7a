from __future__ import annotations


class ColectorError(Exception):
    """Base class for application errors."""


class RemoteStoreError(ColectorError):
    """Companion server unreachable, timed out or answered with an error."""


class ImageEditError(ColectorError):
    """Image generation failed or returned no image."""


class MissingCredentialError(ImageEditError):
    """No API key configured for the image-edit service."""


class ImageTooLargeError(ColectorError):
    def __init__(self, path: str, size: int, limit: int) -> None:
        super().__init__(f"{path} is {size} bytes (limit {limit})")
        self.path = path
        self.size = size
        self.limit = limit


class FormValidationError(ColectorError):
    """Form cannot be submitted; message_key names the translation to show."""

    def __init__(self, message_key: str) -> None:
        super().__init__(message_key)
        self.message_key = message_key
