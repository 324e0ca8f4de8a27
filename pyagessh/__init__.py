__version__ = "1.0.0"
__license__ = "MIT"

import logging

from .core import (
    EncryptedIdentity,
    Identity,
    Recipient,
    new_ecdsa_identity,
    new_ecdsa_recipient,
    new_ed25519_identity,
    new_ed25519_recipient,
    new_rsa_identity,
    new_rsa_recipient,
)
from .exceptions import (
    CryptographicError,
    DecryptionError,
    EncryptionError,
    KeyMismatchError,
    KeyParseError,
    KeySizeError,
    NoMatchError,
    PassphraseRequiredError,
    RandomnessUnavailableError,
    SecurityError,
    StanzaFormatError,
    UnsupportedKeyTypeError,
)
from .facade import AgeSSH
from .models import Stanza
from .utils.ssh import parse_identity, parse_recipient

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "AgeSSH",
    "CryptographicError",
    "DecryptionError",
    "EncryptedIdentity",
    "EncryptionError",
    "Identity",
    "KeyMismatchError",
    "KeyParseError",
    "KeySizeError",
    "NoMatchError",
    "PassphraseRequiredError",
    "RandomnessUnavailableError",
    "Recipient",
    "SecurityError",
    "Stanza",
    "StanzaFormatError",
    "UnsupportedKeyTypeError",
    "new_ecdsa_identity",
    "new_ecdsa_recipient",
    "new_ed25519_identity",
    "new_ed25519_recipient",
    "new_rsa_identity",
    "new_rsa_recipient",
    "parse_identity",
    "parse_recipient",
]
