from __future__ import annotations

import base64
import binascii
import mimetypes
from pathlib import Path
from typing import Optional

from colectorpro.core.errors import ImageTooLargeError

MAX_UPLOAD_BYTES = 5 * 1024 * 1024


def file_to_data_uri(path: Path | str, limit: int = MAX_UPLOAD_BYTES) -> str:
    """Read an image file into a data URI; files over limit are rejected."""
    path = Path(path)
    size = path.stat().st_size
    if size > limit:
        raise ImageTooLargeError(str(path), size, limit)
    mime_type, _ = mimetypes.guess_type(path.name)
    if not mime_type or not mime_type.startswith("image/"):
        mime_type = "image/jpeg"
    encoded = base64.b64encode(path.read_bytes()).decode("ascii")
    return f"data:{mime_type};base64,{encoded}"


def is_data_uri(payload: str) -> bool:
    return payload.startswith("data:")


def decode_data_uri(payload: str) -> Optional[bytes]:
    """Raw bytes of a base64 data URI, or None if it is not one."""
    if not is_data_uri(payload) or ";base64," not in payload:
        return None
    try:
        return base64.b64decode(payload.split(";base64,", 1)[1], validate=False)
    except (binascii.Error, ValueError):
        return None
