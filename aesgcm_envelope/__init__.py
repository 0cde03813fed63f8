"""
aesgcm_envelope
===============
AES-GCM authenticated encryption of text into base64 envelopes, with
two key custody models behind one cipher:

    OPAQUE_HANDLE  : non-exportable key inside a protected key store
    EXPLICIT_KEY   : raw AES key bytes held in process memory

Envelope: base64( iv(12) || ciphertext || tag(16) )

License: Apache 2.0
"""

__version__ = "1.0.0"

from .cipher        import AuthenticatedCipher
from .keysource     import KeySource, KeyKind
from .keystore      import KeyHandle, ProtectedKeyStore, InMemoryKeyStore, default_store
from .provisioning  import (
    generate_key,
    generate_base64_key,
    encode_key,
    decode_key,
    create_keystore_key,
)
from .errors        import (
    CipherError,
    InvalidKeyLengthError,
    InvalidKeySourceError,
    MalformedKeyEncodingError,
    KeyNotFoundError,
    KeyExistsError,
    KeyAccessError,
    MalformedEnvelopeError,
    AuthenticationFailedError,
    InvalidUtf8Error,
    EncryptionError,
)

__all__ = [
    "AuthenticatedCipher",
    "KeySource",
    "KeyKind",
    "KeyHandle",
    "ProtectedKeyStore",
    "InMemoryKeyStore",
    "default_store",
    "generate_key",
    "generate_base64_key",
    "encode_key",
    "decode_key",
    "create_keystore_key",
    "CipherError",
    "InvalidKeyLengthError",
    "InvalidKeySourceError",
    "MalformedKeyEncodingError",
    "KeyNotFoundError",
    "KeyExistsError",
    "KeyAccessError",
    "MalformedEnvelopeError",
    "AuthenticationFailedError",
    "InvalidUtf8Error",
    "EncryptionError",
]
