"""Encrypted OAuth token storage.

Tokens are provisioned out of band (the host runs the OAuth consent flow) and
written here as sealed JSON documents, one per mailbox user id.

Storage location: $TOKEN_STORAGE_DIR or ~/.gmail-extension/tokens/
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any

from gmail_extension.storage.kv import EncryptedFileKeyValueStore, KeyValueStore
from gmail_extension.utils.errors import TokenError

logger = logging.getLogger(__name__)

DEFAULT_TOKEN_DIR = Path.home() / ".gmail-extension" / "tokens"


class TokenStorage:
    """Token persistence keyed by user id.

    Example:
        >>> storage = TokenStorage()
        >>> storage.save("default", {"access_token": "ya29..."})
        >>> storage.load("default")["access_token"]
        'ya29...'
    """

    def __init__(self, backend: KeyValueStore) -> None:
        self._backend = backend

    def save(self, user_id: str, token_data: dict[str, Any]) -> None:
        """Persist token fields for a user.

        Raises:
            TokenError: If the token cannot be serialized or written.
        """
        try:
            text = json.dumps(token_data)
        except (TypeError, ValueError) as e:
            raise TokenError(
                "Token data is not JSON serializable",
                details={"user_id": user_id},
            ) from e
        self._backend.put(user_id, text)
        logger.info("Saved encrypted token for user %s", user_id)

    def load(self, user_id: str) -> dict[str, Any] | None:
        """Load token fields for a user, or None if none are stored.

        Raises:
            TokenError: If the stored token is unreadable.
        """
        text = self._backend.get(user_id)
        if text is None:
            logger.debug("No token found for user %s", user_id)
            return None

        try:
            token_data = json.loads(text)
        except json.JSONDecodeError as e:
            raise TokenError(
                "Stored token is not valid JSON", details={"user_id": user_id}
            ) from e

        if not isinstance(token_data, dict):
            raise TokenError("Stored token is not an object", details={"user_id": user_id})
        return token_data

    def delete(self, user_id: str) -> bool:
        """Delete a user's token. Returns False if none existed."""
        deleted = self._backend.delete(user_id)
        if deleted:
            logger.info("Deleted token for user %s", user_id)
        return deleted

    def exists(self, user_id: str) -> bool:
        return self._backend.get(user_id) is not None


def _default_token_dir() -> Path:
    configured = os.getenv("TOKEN_STORAGE_DIR")
    return Path(configured).expanduser() if configured else DEFAULT_TOKEN_DIR


# Global singleton instance
token_storage = TokenStorage(
    EncryptedFileKeyValueStore(_default_token_dir(), suffix=".token.enc")
)


__all__ = [
    "TokenStorage",
    "token_storage",
]
