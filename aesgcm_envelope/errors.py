"""
Error taxonomy
==============
Every failure raised by this package derives from CipherError, and most
also derive from the matching builtin so callers that already catch
ValueError / LookupError / PermissionError keep working.

Construction:  InvalidKeyLengthError, MalformedKeyEncodingError,
               InvalidKeySourceError, KeyNotFoundError, KeyAccessError
Envelope:      MalformedEnvelopeError, AuthenticationFailedError,
               InvalidUtf8Error
Defect:        EncryptionError

Passing a non-str plaintext, envelope or encoded key raises a plain
TypeError.
"""


class CipherError(Exception):
    """Base class for all aesgcm_envelope errors."""


class InvalidKeyLengthError(CipherError, ValueError):
    """Key bytes are not a valid AES key size (16, 24 or 32 bytes)."""


class MalformedKeyEncodingError(CipherError, ValueError):
    """A portable (base64) key encoding could not be decoded."""


class InvalidKeySourceError(CipherError, TypeError):
    """KeySource fields do not match its variant, or key is not bytes."""


class KeyNotFoundError(CipherError, LookupError):
    """No key is registered under the requested name."""


class KeyExistsError(CipherError):
    """A key is already registered under the requested name."""


class KeyAccessError(CipherError, PermissionError):
    """The protected key store refused access to a key."""


class MalformedEnvelopeError(CipherError, ValueError):
    """Envelope is not valid base64 or is too short to hold IV + tag."""


class AuthenticationFailedError(CipherError):
    """
    GCM tag did not verify.

    Tampered ciphertext, wrong key or wrong IV. Treat as an integrity
    violation; retrying with the same inputs will not succeed.
    """


class InvalidUtf8Error(CipherError, ValueError):
    """Authenticated plaintext is not valid UTF-8."""


class EncryptionError(CipherError, RuntimeError):
    """Unexpected failure in the underlying cipher or key store."""
