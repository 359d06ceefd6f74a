"""Key-value backends holding JSON text.

The continuation store and the token store only need a small contract:
put text under a key, read it back, delete it and enumerate keys. Two
backends implement it:

- InMemoryKeyValueStore: process-local dict, used by tests and by hosts that
  do not need state to survive a restart.
- EncryptedFileKeyValueStore: one AES-256-GCM sealed file per key, with
  owner-only permissions.

Storage layout for the file backend: {base_dir}/{sanitized_key}{suffix}
"""

from __future__ import annotations

import json
import logging
import threading
from pathlib import Path
from typing import Protocol, runtime_checkable

from gmail_extension.utils.encryption import open_json, seal_json
from gmail_extension.utils.errors import TokenError

logger = logging.getLogger(__name__)


@runtime_checkable
class KeyValueStore(Protocol):
    """Untyped durable map of string keys to JSON text."""

    def put(self, key: str, value: str) -> None: ...

    def get(self, key: str) -> str | None: ...

    def delete(self, key: str) -> bool: ...

    def keys(self) -> list[str]: ...


class InMemoryKeyValueStore:
    """Thread-safe dict-backed store."""

    def __init__(self) -> None:
        self._data: dict[str, str] = {}
        self._lock = threading.Lock()

    def put(self, key: str, value: str) -> None:
        with self._lock:
            self._data[key] = value

    def get(self, key: str) -> str | None:
        with self._lock:
            return self._data.get(key)

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._data.pop(key, None) is not None

    def keys(self) -> list[str]:
        with self._lock:
            return list(self._data)


class EncryptedFileKeyValueStore:
    """File-based store that seals every value at rest.

    Each value is encrypted with AES-256-GCM before being written, and
    file permissions are restricted to owner read/write.

    Example:
        >>> store = EncryptedFileKeyValueStore(Path("/tmp/records"))
        >>> store.put("abc", '{"To": "a@b.com"}')
        >>> store.get("abc")
        '{"To": "a@b.com"}'
    """

    def __init__(
        self,
        base_dir: Path,
        suffix: str = ".json.enc",
        key: bytes | None = None,
    ) -> None:
        """Initialize the store.

        Args:
            base_dir: Directory for the sealed files. Created if missing.
            suffix: File name suffix used to recognise this store's files.
            key: Optional explicit sealing key; defaults to the environment key.
        """
        self._base_dir = base_dir
        self._suffix = suffix
        self._key = key
        self._lock = threading.Lock()
        self._base_dir.mkdir(parents=True, exist_ok=True)
        logger.info("EncryptedFileKeyValueStore initialized at %s", self._base_dir)

    @property
    def base_dir(self) -> Path:
        return self._base_dir

    def _path(self, key: str) -> Path:
        """Get the file path for a key.

        Only alphanumerics, hyphen, underscore, dot and @ survive, so keys
        can never escape the base directory.
        """
        safe_key = "".join(c for c in key if c.isalnum() or c in "-_.@")
        safe_key = safe_key.replace("@", "_at_").lstrip(".")

        if not safe_key:
            raise TokenError(
                "Invalid key - contains no valid characters",
                details={"original_key": key[:50]},
            )

        return self._base_dir / f"{safe_key}{self._suffix}"

    def put(self, key: str, value: str) -> None:
        """Seal and write a value.

        Raises:
            TokenError: If encryption or writing fails.
        """
        path = self._path(key)

        try:
            envelope = seal_json(value, self._key)
            with self._lock:
                path.write_text(json.dumps(envelope))
                path.chmod(0o600)
            logger.debug("Stored sealed value for key %s", key)
        except TokenError:
            raise
        except OSError as e:
            logger.error("Failed to write %s: %s", path, e)
            raise TokenError(
                f"Failed to write record: {e}",
                details={"path": str(path), "error_type": type(e).__name__},
            ) from e

    def get(self, key: str) -> str | None:
        """Read and unseal a value, or None when the key is unknown.

        Raises:
            TokenError: If the file is unreadable, not JSON, or fails to decrypt.
        """
        path = self._path(key)

        with self._lock:
            if not path.exists():
                logger.debug("No record found for key %s", key)
                return None
            try:
                raw = path.read_text()
            except OSError as e:
                raise TokenError(
                    f"Failed to read record: {e}", details={"path": str(path)}
                ) from e

        try:
            envelope = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.error("Invalid JSON in record file for %s: %s", key, e)
            raise TokenError(
                "Record file contains invalid JSON", details={"key": key}
            ) from e

        value = open_json(envelope, self._key)
        if not isinstance(value, str):
            raise TokenError("Sealed record does not hold text", details={"key": key})
        return value

    def delete(self, key: str) -> bool:
        """Remove a value. Returns False if nothing was stored."""
        path = self._path(key)

        with self._lock:
            if not path.exists():
                return False
            try:
                path.unlink()
            except OSError as e:
                raise TokenError(
                    f"Failed to delete record: {e}", details={"path": str(path)}
                ) from e

        logger.debug("Deleted record for key %s", key)
        return True

    def keys(self) -> list[str]:
        """List stored keys (after sanitization)."""
        with self._lock:
            return [
                path.name[: -len(self._suffix)].replace("_at_", "@")
                for path in self._base_dir.glob(f"*{self._suffix}")
            ]


__all__ = [
    "KeyValueStore",
    "InMemoryKeyValueStore",
    "EncryptedFileKeyValueStore",
]
