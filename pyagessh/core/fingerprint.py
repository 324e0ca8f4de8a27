from __future__ import annotations

import base64
import hashlib
from typing import TYPE_CHECKING

from cryptography.hazmat.primitives import serialization

from pyagessh.models.keys import FINGERPRINT_SIZE
from pyagessh.models.stanza import b64encode_unpadded

if TYPE_CHECKING:
    from cryptography.hazmat.primitives.asymmetric.types import PublicKeyTypes

__all__ = ["encode_fingerprint", "fingerprint", "marshal_public_key"]


def marshal_public_key(public_key: PublicKeyTypes) -> bytes:
    """Return the SSH wire encoding of a public key.

    This is the blob found base64-encoded in ``authorized_keys`` lines, so two
    independently loaded copies of the same key always marshal identically.
    """
    line = public_key.public_bytes(
        encoding=serialization.Encoding.OpenSSH,
        format=serialization.PublicFormat.OpenSSH,
    )
    return base64.b64decode(line.split()[1])


def fingerprint(ssh_key: bytes) -> bytes:
    """Short routing and domain-separation tag for a marshalled SSH key."""
    return hashlib.sha256(ssh_key).digest()[:FINGERPRINT_SIZE]


def encode_fingerprint(tag: bytes) -> str:
    """Text form of a fingerprint as carried in the first stanza argument."""
    return b64encode_unpadded(tag)
