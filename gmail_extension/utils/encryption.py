"""AES-256-GCM sealing of JSON documents.

Both OAuth tokens and continuation records are written to disk as sealed
envelopes: a JSON object holding a hex IV and hex ciphertext. The key comes
from the TOKEN_ENCRYPTION_KEY environment variable (64 hex characters).
"""

from __future__ import annotations

import json
import logging
import os
from typing import Any

from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from gmail_extension.utils.errors import TokenError, ValidationError

logger = logging.getLogger(__name__)

KEY_SIZE_BITS = 256
KEY_SIZE_BYTES = KEY_SIZE_BITS // 8
IV_SIZE_BYTES = 12  # 96 bits, recommended for GCM
HEX_KEY_LENGTH = KEY_SIZE_BYTES * 2
KEY_ENV_VAR = "TOKEN_ENCRYPTION_KEY"


def generate_key() -> bytes:
    """Generate a random 256-bit key."""
    return AESGCM.generate_key(bit_length=KEY_SIZE_BITS)


def key_from_hex(hex_key: str) -> bytes:
    """Convert a 64-character hexadecimal string to a key.

    Args:
        hex_key: Hex representation of a 256-bit key. Surrounding
            whitespace is ignored.

    Returns:
        A 32-byte key.

    Raises:
        ValidationError: If the string has the wrong length or is not hex.
    """
    hex_key = hex_key.strip()

    if len(hex_key) != HEX_KEY_LENGTH:
        raise ValidationError(
            f"Invalid hex key length: expected {HEX_KEY_LENGTH} characters, "
            f"got {len(hex_key)}",
            field="hex_key",
        )

    try:
        return bytes.fromhex(hex_key)
    except ValueError as e:
        raise ValidationError(
            "Invalid hex key: contains non-hexadecimal characters",
            field="hex_key",
        ) from e


def get_encryption_key() -> bytes:
    """Read the sealing key from the environment.

    Raises:
        TokenError: If the variable is missing or malformed.
    """
    hex_key = os.getenv(KEY_ENV_VAR)
    if not hex_key:
        logger.error("%s environment variable not set", KEY_ENV_VAR)
        raise TokenError(
            f"{KEY_ENV_VAR} environment variable not set",
            details={"hint": f"Set {KEY_ENV_VAR} to a 64-character hex string"},
        )

    try:
        return key_from_hex(hex_key)
    except ValidationError as e:
        logger.error("Invalid %s: %s", KEY_ENV_VAR, e)
        raise TokenError(f"Invalid {KEY_ENV_VAR} format") from e


def seal_json(payload: Any, key: bytes | None = None) -> dict[str, str]:
    """Serialize a JSON-compatible payload and encrypt it.

    Args:
        payload: Any value accepted by json.dumps.
        key: Optional explicit key; defaults to the environment key.

    Returns:
        Envelope with hex-encoded "iv" and "ciphertext".

    Raises:
        TokenError: If serialization or encryption fails.
    """
    key = key if key is not None else get_encryption_key()
    _validate_key(key)

    try:
        plaintext = json.dumps(payload).encode("utf-8")
        iv = os.urandom(IV_SIZE_BYTES)
        ciphertext = AESGCM(key).encrypt(iv, plaintext, None)
    except Exception as e:
        raise TokenError(
            "Failed to seal data",
            details={"error_type": type(e).__name__, "error_message": str(e)},
        ) from e

    return {"iv": iv.hex(), "ciphertext": ciphertext.hex()}


def open_json(envelope: dict[str, str], key: bytes | None = None) -> Any:
    """Decrypt a sealed envelope and parse the JSON payload.

    Raises:
        TokenError: If the envelope is malformed, the key is wrong, the
            ciphertext was tampered with, or the payload is not JSON.
    """
    key = key if key is not None else get_encryption_key()
    _validate_key(key)

    try:
        iv = bytes.fromhex(envelope["iv"])
        ciphertext = bytes.fromhex(envelope["ciphertext"])
    except KeyError as e:
        raise TokenError(
            "Invalid sealed envelope - missing required field",
            details={"missing_field": str(e)},
        ) from e
    except (TypeError, ValueError) as e:
        raise TokenError("Invalid sealed envelope - invalid hex encoding") from e

    if len(iv) != IV_SIZE_BYTES:
        raise TokenError(
            f"Invalid IV length: expected {IV_SIZE_BYTES} bytes, got {len(iv)}"
        )

    try:
        plaintext = AESGCM(key).decrypt(iv, ciphertext, None)
    except Exception as e:
        raise TokenError(
            "Failed to decrypt data - invalid key or corrupted ciphertext",
            details={"error_type": type(e).__name__},
        ) from e

    try:
        return json.loads(plaintext.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise TokenError("Decrypted data is not valid JSON") from e


def _validate_key(key: bytes) -> None:
    if len(key) != KEY_SIZE_BYTES:
        raise ValidationError(
            f"Invalid key length: expected {KEY_SIZE_BYTES} bytes, got {len(key)}",
            field="key",
        )


__all__ = [
    "generate_key",
    "key_from_hex",
    "get_encryption_key",
    "seal_json",
    "open_json",
]
