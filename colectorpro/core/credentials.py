from __future__ import annotations

"""Keyring-backed storage for the image-edit API key.

The key is stored ONLY in the OS keyring (or read from the environment),
never in the preferences file.
"""

import logging
import os
from typing import Optional

import keyring
from keyring.errors import KeyringError, PasswordDeleteError

logger = logging.getLogger(__name__)

SERVICE_NAME = "colectorpro"
API_KEY_ENTRY = "gemini-api-key"
ENV_KEYS = ("GEMINI_API_KEY", "API_KEY")


def set_api_key(secret: str) -> None:
    keyring.set_password(SERVICE_NAME, API_KEY_ENTRY, secret)


def clear_api_key() -> None:
    try:
        keyring.delete_password(SERVICE_NAME, API_KEY_ENTRY)
    except PasswordDeleteError:
        # already gone
        pass


def stored_api_key() -> Optional[str]:
    try:
        return keyring.get_password(SERVICE_NAME, API_KEY_ENTRY)
    except KeyringError as exc:
        logger.warning("Keyring unavailable: %s", exc)
        return None


def resolve_api_key() -> Optional[str]:
    """Keyring entry first, then GEMINI_API_KEY / API_KEY."""
    secret = stored_api_key()
    if secret:
        return secret
    for name in ENV_KEYS:
        value = os.environ.get(name, "").strip()
        if value:
            return value
    return None
