"""
Key sources
===========
Where an AuthenticatedCipher's key lives. A KeySource is a tagged union
with exactly one variant populated:

    OPAQUE_HANDLE  : KeyHandle + the ProtectedKeyStore that owns it.
                     The store performs GCM and picks the IV.
    EXPLICIT_KEY   : raw AES key bytes in process memory.
                     The cipher generates the IV itself.

Instances are frozen; the variant is fixed for the lifetime of the cipher.
"""

from enum import Enum
from dataclasses import dataclass
from typing import Optional

from .errors import InvalidKeyLengthError, InvalidKeySourceError
from .keystore import KeyHandle, ProtectedKeyStore

VALID_KEY_SIZES = (16, 24, 32)   # AES-128 / AES-192 / AES-256, in bytes


class KeyKind(Enum):
    OPAQUE_HANDLE = "opaque-handle"
    EXPLICIT_KEY  = "explicit-key"


@dataclass(frozen=True, repr=False)
class KeySource:
    kind:   KeyKind
    handle: Optional[KeyHandle] = None
    store:  Optional[ProtectedKeyStore] = None
    key:    Optional[bytes] = None

    def __post_init__(self):
        if self.kind is KeyKind.OPAQUE_HANDLE:
            if self.handle is None or self.store is None or self.key is not None:
                raise InvalidKeySourceError(
                    "Opaque key source needs a handle and a store only."
                )
            return
        if self.kind is not KeyKind.EXPLICIT_KEY:
            raise InvalidKeySourceError(f"Unknown key kind {self.kind!r}.")
        if self.handle is not None or self.store is not None:
            raise InvalidKeySourceError("Explicit key source needs key bytes only.")
        if not isinstance(self.key, bytes):
            raise InvalidKeySourceError(
                f"Key must be bytes, got {type(self.key).__name__}."
            )
        if len(self.key) not in VALID_KEY_SIZES:
            raise InvalidKeyLengthError(
                f"AES key must be one of {VALID_KEY_SIZES} bytes, got {len(self.key)}."
            )

    @classmethod
    def opaque(cls, handle: KeyHandle, store: ProtectedKeyStore) -> "KeySource":
        return cls(KeyKind.OPAQUE_HANDLE, handle=handle, store=store)

    @classmethod
    def explicit(cls, key: bytes) -> "KeySource":
        """Wrap raw key bytes. Raises InvalidKeyLengthError on a bad size."""
        if isinstance(key, (bytearray, memoryview)):
            key = bytes(key)
        return cls(KeyKind.EXPLICIT_KEY, key=key)

    @property
    def store_selects_iv(self) -> bool:
        return self.kind is KeyKind.OPAQUE_HANDLE

    @property
    def key_bits(self) -> int:
        if self.kind is KeyKind.OPAQUE_HANDLE:
            return self.handle.key_size
        return len(self.key) * 8

    def __repr__(self):
        if self.kind is KeyKind.OPAQUE_HANDLE:
            return f"KeySource(opaque-handle, {self.handle.name!r})"
        return f"KeySource(explicit-key, {self.key_bits}-bit)"
