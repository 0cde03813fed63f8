"""
Envelope wire format
====================
One encrypted message, rendered as portable text:

    base64( iv(12) || ciphertext || tag(16) )

Standard base64 alphabet with padding. There is no version byte and no
algorithm identifier: both ends must agree on a 12-byte IV and a
128-bit tag.
"""

import base64
import binascii
from typing import Tuple

from .errors import MalformedEnvelopeError

IV_SIZE  = 12   # 96-bit GCM nonce
TAG_SIZE = 16   # 128-bit authentication tag
MIN_ENVELOPE_SIZE = IV_SIZE + TAG_SIZE


def pack(iv: bytes, body: bytes) -> str:
    """Join iv || ciphertext+tag and encode as base64 text."""
    return base64.b64encode(iv + body).decode("ascii")


def unpack(envelope: str) -> Tuple[bytes, bytes]:
    """
    Decode an envelope and split it into (iv, ciphertext+tag).
    Missing '=' padding is accepted; any other deviation from the
    standard alphabet is not.
    Raises TypeError for non-text input, MalformedEnvelopeError on bad
    base64 or short input.
    """
    if not isinstance(envelope, str):
        raise TypeError(f"Envelope must be str, got {type(envelope).__name__}.")
    padded = envelope + "=" * (-len(envelope) % 4)
    try:
        raw = base64.b64decode(padded.encode("ascii"), validate=True)
    except (UnicodeEncodeError, binascii.Error) as exc:
        raise MalformedEnvelopeError("Envelope is not valid base64.") from exc

    if len(raw) < MIN_ENVELOPE_SIZE:
        raise MalformedEnvelopeError(
            f"Envelope too short: {len(raw)} bytes, "
            f"need at least {MIN_ENVELOPE_SIZE}."
        )
    return raw[:IV_SIZE], raw[IV_SIZE:]
