"""
Key provisioning
================
Setup helpers run before a cipher is built: random key generation,
portable base64 import/export of raw keys, and creation of
non-exportable keys inside a protected store.
"""

import base64
import binascii
from typing import Optional

from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from .errors import InvalidKeyLengthError, MalformedKeyEncodingError
from .keysource import VALID_KEY_SIZES
from .keystore import KeyHandle, ProtectedKeyStore, VALID_KEY_BITS, default_store

DEFAULT_KEY_BITS = 256


def generate_key(bits: int = DEFAULT_KEY_BITS) -> bytes:
    """Fresh random AES key of 128, 192 or 256 bits."""
    if bits not in VALID_KEY_BITS:
        raise InvalidKeyLengthError(
            f"Key size must be one of {VALID_KEY_BITS} bits, got {bits}."
        )
    return AESGCM.generate_key(bit_length=bits)


def encode_key(key: bytes) -> str:
    if len(key) not in VALID_KEY_SIZES:
        raise InvalidKeyLengthError(
            f"AES key must be one of {VALID_KEY_SIZES} bytes, got {len(key)}."
        )
    return base64.b64encode(key).decode("ascii")


def decode_key(encoded: str) -> bytes:
    """Inverse of encode_key(). Rejects bad base64 and bad key sizes."""
    if not isinstance(encoded, str):
        raise TypeError(f"Encoded key must be str, got {type(encoded).__name__}.")
    try:
        key = base64.b64decode(encoded.encode("ascii"), validate=True)
    except (UnicodeEncodeError, binascii.Error) as exc:
        raise MalformedKeyEncodingError("Key is not valid base64 text.") from exc
    if len(key) not in VALID_KEY_SIZES:
        raise InvalidKeyLengthError(
            f"AES key must be one of {VALID_KEY_SIZES} bytes, got {len(key)}."
        )
    return key


def generate_base64_key(bits: int = DEFAULT_KEY_BITS) -> str:
    return encode_key(generate_key(bits))


def create_keystore_key(name: str, key_size: int = DEFAULT_KEY_BITS,
                        store: Optional[ProtectedKeyStore] = None,
                        require_auth: bool = False) -> KeyHandle:
    """
    Register a new non-exportable key under `name`.
    Defaults to the process-wide store. require_auth is only passed to
    stores that support user-authentication gating.
    """
    if store is None:
        store = default_store()
    if require_auth:
        return store.register(name, key_size, require_auth=True)
    return store.register(name, key_size)
