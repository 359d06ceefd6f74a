"""Utility functions and helpers for the Gmail extension.

This module provides the exception hierarchy and the AES-GCM sealing
helpers shared by token and continuation storage.
"""

from gmail_extension.utils.encryption import (
    generate_key,
    get_encryption_key,
    key_from_hex,
    open_json,
    seal_json,
)
from gmail_extension.utils.errors import (
    AuthenticationError,
    ContinuationError,
    GmailAPIError,
    GmailExtensionError,
    MustAuthorizeError,
    TokenError,
    ValidationError,
)

__all__ = [
    # Encryption utilities
    "generate_key",
    "get_encryption_key",
    "key_from_hex",
    "seal_json",
    "open_json",
    # Exception hierarchy
    "GmailExtensionError",
    "AuthenticationError",
    "MustAuthorizeError",
    "TokenError",
    "ContinuationError",
    "GmailAPIError",
    "ValidationError",
]
