from .keys import (
    ECDSA_KEY_TYPES,
    FILE_KEY_SIZE,
    FINGERPRINT_SIZE,
    SUPPORTED_KEY_TYPES,
    VALID_FILE_KEY_SIZES,
    CurveName,
    KeyType,
)
from .stanza import Stanza, b64decode_unpadded, b64encode_unpadded

__all__ = [
    "ECDSA_KEY_TYPES",
    "FILE_KEY_SIZE",
    "FINGERPRINT_SIZE",
    "SUPPORTED_KEY_TYPES",
    "VALID_FILE_KEY_SIZES",
    "CurveName",
    "KeyType",
    "Stanza",
    "b64decode_unpadded",
    "b64encode_unpadded",
]
