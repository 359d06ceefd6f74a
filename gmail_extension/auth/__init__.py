"""Credential storage for the Gmail extension.

OAuth consent flows are run by the host; this package only persists and
loads the resulting tokens (encrypted at rest with AES-256-GCM).

Usage:
    >>> from gmail_extension.auth import token_storage
    >>> token_storage.save("default", token_data)
    >>> token_storage.load("default")
"""

from gmail_extension.auth.storage import TokenStorage, token_storage

__all__ = [
    "TokenStorage",
    "token_storage",
]
