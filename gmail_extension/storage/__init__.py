"""Key-value storage backends."""

from gmail_extension.storage.kv import (
    EncryptedFileKeyValueStore,
    InMemoryKeyValueStore,
    KeyValueStore,
)

__all__ = [
    "KeyValueStore",
    "InMemoryKeyValueStore",
    "EncryptedFileKeyValueStore",
]
