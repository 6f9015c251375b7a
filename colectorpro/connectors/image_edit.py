from __future__ import annotations

import logging
import re
from typing import Any, Callable, Optional

import requests

from colectorpro.core import credentials
from colectorpro.core.errors import ImageEditError, MissingCredentialError

logger = logging.getLogger(__name__)

MODEL = "gemini-2.5-flash-image"
API_ROOT = "https://generativelanguage.googleapis.com/v1beta"

_DATA_URI_PREFIX = re.compile(r"^data:image/(png|jpeg|jpg|webp);base64,")


def split_image_payload(image: str) -> tuple[str, str]:
    """Return (mime_type, base64_data) for a data URI or bare base64 string.

    The MIME type is read from the prefix; anything other than png/webp is
    sent as jpeg.
    """
    mime_type = "image/jpeg"
    if image.startswith("data:image/png"):
        mime_type = "image/png"
    elif image.startswith("data:image/webp"):
        mime_type = "image/webp"
    return mime_type, _DATA_URI_PREFIX.sub("", image, count=1)


def build_prompt(instruction: str) -> str:
    return f"Edit this image: {instruction}. Return ONLY the edited image."


def first_inline_image(response: dict[str, Any]) -> Optional[str]:
    """base64 data of the first image part of the first candidate, if any."""
    candidates = response.get("candidates") or []
    if not candidates:
        return None
    parts = ((candidates[0] or {}).get("content") or {}).get("parts") or []
    for part in parts:
        inline = part.get("inlineData") or part.get("inline_data") or {}
        data = inline.get("data")
        if data:
            return data
    return None


class ImageEditor:
    """One-shot Gemini image edit: one image and one instruction in, one image out."""

    def __init__(
        self,
        api_key_provider: Callable[[], Optional[str]] = credentials.resolve_api_key,
        session: requests.Session | None = None,
        timeout_s: float | None = None,
    ) -> None:
        self._api_key_provider = api_key_provider
        self._session = session or requests.Session()
        # None waits indefinitely
        self._timeout_s = timeout_s

    def edit(self, image: str, instruction: str) -> str:
        api_key = self._api_key_provider()
        if not api_key:
            raise MissingCredentialError(
                "API key is missing. Set GEMINI_API_KEY or store a key in Settings."
            )

        mime_type, data = split_image_payload(image)
        body = {
            "contents": [
                {
                    "parts": [
                        {"inlineData": {"mimeType": mime_type, "data": data}},
                        {"text": build_prompt(instruction)},
                    ]
                }
            ]
        }
        url = f"{API_ROOT}/models/{MODEL}:generateContent"
        try:
            resp = self._session.post(
                url,
                json=body,
                headers={"x-goog-api-key": api_key},
                timeout=self._timeout_s,
            )
            resp.raise_for_status()
            payload = resp.json()
        except (requests.RequestException, ValueError) as exc:
            logger.exception("Gemini image edit request failed")
            raise ImageEditError(f"Image edit request failed: {exc}") from exc

        result = first_inline_image(payload if isinstance(payload, dict) else {})
        if result is None:
            raise ImageEditError("No image data returned from Gemini.")
        return f"data:image/png;base64,{result}"
