from __future__ import annotations

from typing import Final, Literal

__all__ = [
    "ECDSA_KEY_TYPES",
    "FILE_KEY_SIZE",
    "FINGERPRINT_SIZE",
    "SUPPORTED_KEY_TYPES",
    "VALID_FILE_KEY_SIZES",
    "CurveName",
    "KeyType",
]

FILE_KEY_SIZE: Final[int] = 16  # size used by the envelope format
VALID_FILE_KEY_SIZES: Final[tuple[int, ...]] = (16, 24, 32)
FINGERPRINT_SIZE: Final[int] = 4  # leading bytes of SHA-256 over the SSH wire key

KeyType = Literal[
    "ssh-rsa",
    "ssh-ed25519",
    "ecdsa-sha2-nistp256",
    "ecdsa-sha2-nistp384",
    "ecdsa-sha2-nistp521",
]
CurveName = Literal["secp256r1", "secp384r1", "secp521r1"]

ECDSA_KEY_TYPES: Final[dict[CurveName, KeyType]] = {
    "secp256r1": "ecdsa-sha2-nistp256",
    "secp384r1": "ecdsa-sha2-nistp384",
    "secp521r1": "ecdsa-sha2-nistp521",
}
SUPPORTED_KEY_TYPES: Final[tuple[KeyType, ...]] = (
    "ssh-rsa",
    "ssh-ed25519",
    *ECDSA_KEY_TYPES.values(),
)

