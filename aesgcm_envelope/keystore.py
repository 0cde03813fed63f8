"""
Protected key store
===================
Narrow boundary around a key store whose keys never leave it.

A real backend (OS keychain, TPM, HSM) only has to provide the four
operations of ProtectedKeyStore. Keys are referenced by an opaque
KeyHandle; the store, not the caller, picks the IV when encrypting and
hands it back alongside the ciphertext.

InMemoryKeyStore is the reference backend. It keeps raw keys in a
private registry, never returns them, and can gate individual keys
behind a user-authentication flag so that access refusal can be
exercised without hardware.

Decryption contract: a tag mismatch surfaces as
cryptography.exceptions.InvalidTag, exactly as the primitive raises it.

Dependencies: cryptography >= 41.0
"""

import os
import uuid
import logging
import threading
from dataclasses import dataclass
from typing import Dict, List, Optional, Protocol, Tuple

from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from .envelope import IV_SIZE
from .errors import (
    InvalidKeyLengthError,
    KeyAccessError,
    KeyExistsError,
    KeyNotFoundError,
)

logger = logging.getLogger(__name__)

VALID_KEY_BITS = (128, 192, 256)


@dataclass(frozen=True)
class KeyHandle:
    """Opaque reference to a key held inside a protected store."""
    name: str
    key_id: str
    key_size: int

    def __repr__(self):
        return f"KeyHandle({self.name!r}, {self.key_size}-bit)"


class ProtectedKeyStore(Protocol):
    """Operations a protected key store must offer."""

    def register(self, name: str, key_size: int = 256) -> KeyHandle: ...

    def lookup(self, name: str) -> KeyHandle: ...

    def encrypt_with_handle(self, handle: KeyHandle,
                            plaintext: bytes) -> Tuple[bytes, bytes]: ...

    def decrypt_with_handle(self, handle: KeyHandle, iv: bytes,
                            ciphertext: bytes) -> bytes: ...


class _Entry:
    __slots__ = ("key_id", "key_size", "aesgcm", "require_auth", "authenticated")

    def __init__(self, key: bytes, require_auth: bool):
        self.key_id        = uuid.uuid4().hex
        self.key_size      = len(key) * 8
        self.aesgcm        = AESGCM(key)
        self.require_auth  = require_auth
        self.authenticated = False


class InMemoryKeyStore:
    """Process-local protected key store. Keys are non-exportable."""

    def __init__(self):
        self._entries: Dict[str, _Entry] = {}
        self._lock = threading.Lock()

    # ── provisioning ─────────────────────────────────────────────────────────
    def register(self, name: str, key_size: int = 256,
                 require_auth: bool = False) -> KeyHandle:
        """
        Create a fresh AES-GCM key under `name`.
        key_size is in bits: 128, 192 or 256.
        require_auth gates every use of the key behind authenticate(name).
        """
        if key_size not in VALID_KEY_BITS:
            raise InvalidKeyLengthError(
                f"Key size must be one of {VALID_KEY_BITS} bits, got {key_size}."
            )
        entry = _Entry(AESGCM.generate_key(bit_length=key_size), require_auth)
        with self._lock:
            if name in self._entries:
                raise KeyExistsError(f"Key {name!r} already registered.")
            self._entries[name] = entry
        logger.info(f"Registered key {name!r} ({key_size}-bit, auth={require_auth})")
        return KeyHandle(name, entry.key_id, entry.key_size)

    def delete(self, name: str) -> None:
        with self._lock:
            if self._entries.pop(name, None) is None:
                raise KeyNotFoundError(f"No key registered under {name!r}.")
        logger.info(f"Deleted key {name!r}")

    def contains(self, name: str) -> bool:
        with self._lock:
            return name in self._entries

    def names(self) -> List[str]:
        with self._lock:
            return sorted(self._entries)

    # ── user authentication ──────────────────────────────────────────────────
    def authenticate(self, name: str) -> None:
        """Mark an auth-gated key as unlocked for this process."""
        with self._lock:
            self._get(name).authenticated = True

    def revoke(self, name: str) -> None:
        with self._lock:
            self._get(name).authenticated = False

    # ── key use ──────────────────────────────────────────────────────────────
    def lookup(self, name: str) -> KeyHandle:
        entry = self._resolve(name)
        return KeyHandle(name, entry.key_id, entry.key_size)

    def encrypt_with_handle(self, handle: KeyHandle,
                            plaintext: bytes) -> Tuple[bytes, bytes]:
        """
        Encrypt inside the store. The store selects the IV.
        Returns: (iv, ciphertext+tag)
        """
        entry = self._resolve(handle.name, handle.key_id)
        iv = os.urandom(IV_SIZE)
        return iv, entry.aesgcm.encrypt(iv, plaintext, None)

    def decrypt_with_handle(self, handle: KeyHandle, iv: bytes,
                            ciphertext: bytes) -> bytes:
        """Decrypt inside the store. Raises InvalidTag on tamper."""
        entry = self._resolve(handle.name, handle.key_id)
        return entry.aesgcm.decrypt(iv, ciphertext, None)

    # ── internals ────────────────────────────────────────────────────────────
    def _get(self, name: str) -> _Entry:
        entry = self._entries.get(name)
        if entry is None:
            raise KeyNotFoundError(f"No key registered under {name!r}.")
        return entry

    def _resolve(self, name: str, key_id: Optional[str] = None) -> _Entry:
        with self._lock:
            entry = self._get(name)
            # handle outlived its key (deleted and re-registered)
            if key_id is not None and entry.key_id != key_id:
                raise KeyNotFoundError(f"Key {name!r} was replaced.")
            if entry.require_auth and not entry.authenticated:
                raise KeyAccessError(
                    f"Key {name!r} requires user authentication."
                )
            return entry

    def __repr__(self):
        return f"InMemoryKeyStore({len(self._entries)} keys)"


_default_store = InMemoryKeyStore()


def default_store() -> InMemoryKeyStore:
    """Process-wide store used when no store is passed explicitly."""
    return _default_store
