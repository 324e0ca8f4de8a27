from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Final, NoReturn, final

import nacl.exceptions
import nacl.signing
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec, ed25519, rsa, x25519

from pyagessh.core.fingerprint import (
    encode_fingerprint,
    fingerprint,
    marshal_public_key,
)
from pyagessh.core.key_wrapper import KeyWrapper
from pyagessh.exceptions import (
    CryptographicError,
    KeyParseError,
    KeySizeError,
    NoMatchError,
    StanzaFormatError,
    UnsupportedKeyTypeError,
)
from pyagessh.models.keys import ECDSA_KEY_TYPES
from pyagessh.models.stanza import Stanza, b64decode_unpadded, b64encode_unpadded

if TYPE_CHECKING:
    from collections.abc import Iterable

    from cryptography.hazmat.primitives.asymmetric.types import (
        PrivateKeyTypes,
        PublicKeyTypes,
    )

    from pyagessh.models.keys import KeyType

__all__ = [
    "MIN_RSA_KEY_SIZE",
    "Identity",
    "Recipient",
    "identity_from_private_key",
    "new_ecdsa_identity",
    "new_ecdsa_recipient",
    "new_ed25519_identity",
    "new_ed25519_recipient",
    "new_rsa_identity",
    "new_rsa_recipient",
    "recipient_from_public_key",
]

logger = logging.getLogger(__name__)

MIN_RSA_KEY_SIZE: Final[int] = 2048


def _fail(
    message: str,
    exception_type: type[Exception] = CryptographicError,
) -> NoReturn:
    raise exception_type(message)


def _ed25519_raw(public_key: ed25519.Ed25519PublicKey) -> bytes:
    return public_key.public_bytes(
        encoding=serialization.Encoding.Raw,
        format=serialization.PublicFormat.Raw,
    )


def _montgomery_share(public_key: ed25519.Ed25519PublicKey) -> bytes:
    """X25519 share of the same group element as an Ed25519 public key."""
    try:
        verify_key = nacl.signing.VerifyKey(_ed25519_raw(public_key))
        return verify_key.to_curve25519_public_key().encode()
    except nacl.exceptions.CryptoError as e:
        msg = "Ed25519 public key has no X25519 equivalent"
        raise KeyParseError(msg) from e


def _montgomery_private(
    private_key: ed25519.Ed25519PrivateKey,
) -> x25519.X25519PrivateKey:
    seed = private_key.private_bytes(
        encoding=serialization.Encoding.Raw,
        format=serialization.PrivateFormat.Raw,
        encryption_algorithm=serialization.NoEncryption(),
    )
    curve_key = nacl.signing.SigningKey(seed).to_curve25519_private_key()
    return x25519.X25519PrivateKey.from_private_bytes(curve_key.encode())


@final
@dataclass(frozen=True, slots=True)
class Recipient:
    """Public half of an SSH key, able to wrap file keys into stanzas.

    Equality is structural over the key type and the SSH wire encoding, so a
    recipient derived from an identity equals one loaded from the ``.pub`` file.
    """

    key_type: KeyType
    ssh_key: bytes = field(repr=False)
    public_key: PublicKeyTypes = field(compare=False, repr=False)
    fingerprint: bytes = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "fingerprint", fingerprint(self.ssh_key))

    @property
    def tag(self) -> str:
        """Fingerprint in stanza argument form."""
        return encode_fingerprint(self.fingerprint)

    def wrap(self, file_key: bytes) -> list[Stanza]:
        """Wrap ``file_key`` into the stanzas addressed to this key."""
        public_key = self.public_key
        if self.key_type == "ssh-rsa" and isinstance(public_key, rsa.RSAPublicKey):
            body = KeyWrapper.rsa_oaep_wrap(public_key, file_key, self.fingerprint)
            return [Stanza(type=self.key_type, args=(self.tag,), body=body)]

        if self.key_type == "ssh-ed25519" and isinstance(
            public_key,
            ed25519.Ed25519PublicKey,
        ):
            share, body = KeyWrapper.x25519_wrap(
                _montgomery_share(public_key),
                file_key,
                KeyWrapper.ED25519_LABEL,
                self.fingerprint,
            )
        elif self.key_type in KeyWrapper.ECDSA_LABELS and isinstance(
            public_key,
            ec.EllipticCurvePublicKey,
        ):
            share, body = KeyWrapper.ecdh_wrap(
                public_key,
                file_key,
                KeyWrapper.ECDSA_LABELS[self.key_type],
                self.fingerprint,
            )
        else:
            _fail(f"Unsupported key type: '{self.key_type}'", UnsupportedKeyTypeError)

        return [
            Stanza(
                type=self.key_type,
                args=(self.tag, b64encode_unpadded(share)),
                body=body,
            ),
        ]

    def matches(self, stanza: Stanza) -> bool:
        """Whether ``stanza`` is addressed to this key."""
        return (
            stanza.type == self.key_type
            and bool(stanza.args)
            and stanza.args[0] == self.tag
        )


@final
@dataclass(frozen=True, slots=True)
class Identity:
    """Private half of an SSH key, able to unwrap stanzas addressed to it."""

    public: Recipient
    private_key: PrivateKeyTypes = field(compare=False, repr=False)

    def recipient(self) -> Recipient:
        return self.public

    def unwrap(self, stanzas: Iterable[Stanza]) -> bytes:
        """Recover the file key from the first stanza addressed to this key.

        Raises:
            NoMatchError: no stanza carries this key's type and fingerprint
            DecryptionError: a stanza addressed to this key failed to decrypt
        """
        for stanza in stanzas:
            if not self.public.matches(stanza):
                logger.debug(
                    "Skipping %s stanza not addressed to %s",
                    stanza.type,
                    self.public.tag,
                )
                continue
            return self._unwrap_stanza(stanza)

        msg = f"No {self.public.key_type} stanza matches fingerprint {self.public.tag}"
        raise NoMatchError(msg)

    def _unwrap_stanza(self, stanza: Stanza) -> bytes:
        key_type = self.public.key_type
        private_key = self.private_key

        if key_type == "ssh-rsa" and isinstance(private_key, rsa.RSAPrivateKey):
            if len(stanza.args) != 1:
                _fail("Invalid ssh-rsa stanza arguments", StanzaFormatError)
            return KeyWrapper.rsa_oaep_unwrap(
                private_key,
                stanza.body,
                self.public.fingerprint,
            )

        if len(stanza.args) != 2:
            _fail(f"Invalid {key_type} stanza arguments", StanzaFormatError)
        share = b64decode_unpadded(stanza.args[1])

        if key_type == "ssh-ed25519" and isinstance(
            private_key,
            ed25519.Ed25519PrivateKey,
        ):
            return KeyWrapper.x25519_unwrap(
                _montgomery_private(private_key),
                share,
                stanza.body,
                KeyWrapper.ED25519_LABEL,
                self.public.fingerprint,
            )
        if key_type in KeyWrapper.ECDSA_LABELS and isinstance(
            private_key,
            ec.EllipticCurvePrivateKey,
        ):
            return KeyWrapper.ecdh_unwrap(
                private_key,
                share,
                stanza.body,
                KeyWrapper.ECDSA_LABELS[key_type],
                self.public.fingerprint,
            )
        _fail(f"Unsupported key type: '{key_type}'", UnsupportedKeyTypeError)


def new_rsa_recipient(public_key: PublicKeyTypes) -> Recipient:
    if not isinstance(public_key, rsa.RSAPublicKey):
        _fail("RSA public key required", UnsupportedKeyTypeError)
    if public_key.key_size < MIN_RSA_KEY_SIZE:
        _fail(f"RSA key size is too small: {public_key.key_size} bits", KeySizeError)
    return Recipient("ssh-rsa", marshal_public_key(public_key), public_key)


def new_rsa_identity(private_key: PrivateKeyTypes) -> Identity:
    if not isinstance(private_key, rsa.RSAPrivateKey):
        _fail("RSA private key required", UnsupportedKeyTypeError)
    return Identity(new_rsa_recipient(private_key.public_key()), private_key)


def new_ed25519_recipient(public_key: PublicKeyTypes) -> Recipient:
    if not isinstance(public_key, ed25519.Ed25519PublicKey):
        _fail("Ed25519 public key required", UnsupportedKeyTypeError)
    # Rejects points the Montgomery conversion cannot represent.
    _montgomery_share(public_key)
    return Recipient("ssh-ed25519", marshal_public_key(public_key), public_key)


def new_ed25519_identity(private_key: PrivateKeyTypes) -> Identity:
    if not isinstance(private_key, ed25519.Ed25519PrivateKey):
        _fail("Ed25519 private key required", UnsupportedKeyTypeError)
    return Identity(new_ed25519_recipient(private_key.public_key()), private_key)


def new_ecdsa_recipient(public_key: PublicKeyTypes) -> Recipient:
    if not isinstance(public_key, ec.EllipticCurvePublicKey):
        _fail("ECDSA public key required", UnsupportedKeyTypeError)
    key_type = ECDSA_KEY_TYPES.get(public_key.curve.name)
    if key_type is None:
        _fail(f"Unsupported curve: '{public_key.curve.name}'", UnsupportedKeyTypeError)
    return Recipient(key_type, marshal_public_key(public_key), public_key)


def new_ecdsa_identity(private_key: PrivateKeyTypes) -> Identity:
    if not isinstance(private_key, ec.EllipticCurvePrivateKey):
        _fail("ECDSA private key required", UnsupportedKeyTypeError)
    return Identity(new_ecdsa_recipient(private_key.public_key()), private_key)


def recipient_from_public_key(public_key: PublicKeyTypes) -> Recipient:
    """Build the recipient matching the algorithm of ``public_key``."""
    if isinstance(public_key, rsa.RSAPublicKey):
        return new_rsa_recipient(public_key)
    if isinstance(public_key, ed25519.Ed25519PublicKey):
        return new_ed25519_recipient(public_key)
    if isinstance(public_key, ec.EllipticCurvePublicKey):
        return new_ecdsa_recipient(public_key)
    _fail(f"Unsupported key type: {type(public_key).__name__}", UnsupportedKeyTypeError)


def identity_from_private_key(private_key: PrivateKeyTypes) -> Identity:
    """Build the identity matching the algorithm of ``private_key``."""
    if isinstance(private_key, rsa.RSAPrivateKey):
        return new_rsa_identity(private_key)
    if isinstance(private_key, ed25519.Ed25519PrivateKey):
        return new_ed25519_identity(private_key)
    if isinstance(private_key, ec.EllipticCurvePrivateKey):
        return new_ecdsa_identity(private_key)
    _fail(
        f"Unsupported key type: {type(private_key).__name__}",
        UnsupportedKeyTypeError,
    )
