from .encrypted import EncryptedIdentity
from .fingerprint import encode_fingerprint, fingerprint, marshal_public_key
from .key_wrapper import KeyWrapper
from .protocols import IdentityProtocol, RecipientProtocol
from .recipients import (
    MIN_RSA_KEY_SIZE,
    Identity,
    Recipient,
    identity_from_private_key,
    new_ecdsa_identity,
    new_ecdsa_recipient,
    new_ed25519_identity,
    new_ed25519_recipient,
    new_rsa_identity,
    new_rsa_recipient,
    recipient_from_public_key,
)

__all__ = [
    "MIN_RSA_KEY_SIZE",
    "EncryptedIdentity",
    "Identity",
    "IdentityProtocol",
    "KeyWrapper",
    "Recipient",
    "RecipientProtocol",
    "encode_fingerprint",
    "fingerprint",
    "identity_from_private_key",
    "marshal_public_key",
    "new_ecdsa_identity",
    "new_ecdsa_recipient",
    "new_ed25519_identity",
    "new_ed25519_recipient",
    "new_rsa_identity",
    "new_rsa_recipient",
    "recipient_from_public_key",
]
