"""
AuthenticatedCipher: AES-GCM text envelopes
===========================================
AES in Galois/Counter Mode over UTF-8 text, with one of two key
custody models behind the same encrypt/decrypt contract:

    from_opaque_handle(name)  : key lives in a protected store and never
                                leaves it; the store picks the IV.
    from_explicit_key(bytes)  : key held in process memory; a fresh
                                random IV is generated per message.

Key:      128, 192 or 256 bits.
IV:       96 bits (12 bytes), embedded in the envelope.
Tag:      128 bits (16 bytes), appended to the ciphertext by GCM.
AAD:      none.

Envelope format: base64( iv(12) || ciphertext || tag(16) )

Thread safety: the only state is the frozen KeySource and, for explicit
keys, an AESGCM object. AESGCM sets up a new OpenSSL context on every
call, so one instance can serve several threads. For opaque handles the
store's own guarantees apply; InMemoryKeyStore is lock-protected.

Dependencies: cryptography >= 41.0
"""

import os
import logging
from typing import Optional, Tuple

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from . import envelope
from .errors import (
    AuthenticationFailedError,
    CipherError,
    EncryptionError,
    InvalidUtf8Error,
)
from .keysource import VALID_KEY_SIZES, KeyKind, KeySource
from .keystore import ProtectedKeyStore, default_store
from .provisioning import decode_key

logger = logging.getLogger(__name__)


class AuthenticatedCipher:
    """AES-GCM encryption of text into self-describing envelopes."""

    IV_SIZE           = envelope.IV_SIZE            # 96-bit IV (GCM standard)
    TAG_SIZE          = envelope.TAG_SIZE           # 128-bit tag
    MIN_ENVELOPE_SIZE = envelope.MIN_ENVELOPE_SIZE
    VALID_KEY_SIZES   = VALID_KEY_SIZES

    def __init__(self, source: KeySource):
        """Prefer the from_* constructors; the source is fixed from here on."""
        if not isinstance(source, KeySource):
            raise TypeError(f"Expected KeySource, got {type(source).__name__}.")
        self._source = source
        self._aesgcm = AESGCM(source.key) if source.kind is KeyKind.EXPLICIT_KEY else None
        logger.info(f"AuthenticatedCipher {source!r}")

    @classmethod
    def from_opaque_handle(cls, name: str,
                           store: Optional[ProtectedKeyStore] = None) -> "AuthenticatedCipher":
        """
        Resolve `name` in a protected key store (default: the process store).
        Raises KeyNotFoundError or KeyAccessError from the store.
        """
        if store is None:
            store = default_store()
        handle = store.lookup(name)
        return cls(KeySource.opaque(handle, store))

    @classmethod
    def from_explicit_key(cls, key: bytes) -> "AuthenticatedCipher":
        """Wrap 16/24/32 raw key bytes. Raises InvalidKeyLengthError otherwise."""
        return cls(KeySource.explicit(key))

    @classmethod
    def from_base64_key(cls, encoded: str) -> "AuthenticatedCipher":
        """Import a key exported with provisioning.encode_key()."""
        return cls.from_explicit_key(decode_key(encoded))

    @property
    def source(self) -> KeySource:
        return self._source

    def encrypt(self, plaintext: str) -> str:
        """
        Encrypt and authenticate UTF-8 text.
        Returns: base64( iv || ciphertext+tag )
        """
        if not isinstance(plaintext, str):
            raise TypeError(f"Plaintext must be str, got {type(plaintext).__name__}.")
        iv, body = self._seal(plaintext.encode("utf-8"))
        logger.debug(f"Encrypt: pt={len(plaintext)}ch envelope={len(iv) + len(body)}B")
        return envelope.pack(iv, body)

    def decrypt(self, token: str) -> str:
        """
        Verify and decrypt an envelope produced by encrypt().
        Raises MalformedEnvelopeError, AuthenticationFailedError, InvalidUtf8Error;
        TypeError if `token` is not str.
        """
        iv, body = envelope.unpack(token)
        try:
            data = self._open(iv, body)
        except InvalidTag as exc:
            raise AuthenticationFailedError(
                "Authentication tag mismatch: data tampered or wrong key."
            ) from exc

        try:
            plaintext = data.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise InvalidUtf8Error("Decrypted bytes are not valid UTF-8.") from exc
        logger.debug(f"Decrypt: envelope={len(iv) + len(body)}B pt={len(plaintext)}ch")
        return plaintext

    # ── IV ownership dispatch ────────────────────────────────────────────────
    def _seal(self, data: bytes) -> Tuple[bytes, bytes]:
        """
        Run GCM through whoever owns the IV and check what came back.
        Store errors from the taxonomy (KeyAccessError, KeyNotFoundError)
        pass through; anything else becomes EncryptionError.
        """
        src = self._source
        try:
            if src.store_selects_iv:
                iv, body = src.store.encrypt_with_handle(src.handle, data)
            else:
                iv = os.urandom(self.IV_SIZE)
                body = self._aesgcm.encrypt(iv, data, None)
        except CipherError:
            raise
        except Exception as exc:
            raise EncryptionError(f"AES-GCM encryption failed: {exc!r}") from exc

        if not isinstance(iv, bytes) or not isinstance(body, bytes):
            raise EncryptionError(
                f"Cipher returned {type(iv).__name__}/{type(body).__name__}, expected bytes."
            )
        if len(iv) != self.IV_SIZE:
            raise EncryptionError(
                f"Cipher produced a {len(iv)}-byte IV, expected {self.IV_SIZE}."
            )
        if len(body) < self.TAG_SIZE:
            raise EncryptionError("Cipher output shorter than the GCM tag.")
        return iv, body

    def _open(self, iv: bytes, body: bytes) -> bytes:
        src = self._source
        if src.store_selects_iv:
            return src.store.decrypt_with_handle(src.handle, iv, body)
        return self._aesgcm.decrypt(iv, body, None)

    def __repr__(self):
        return f"AuthenticatedCipher({self._source!r})"
