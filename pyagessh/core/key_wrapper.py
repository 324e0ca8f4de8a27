from __future__ import annotations

from contextlib import contextmanager
from typing import TYPE_CHECKING, Final, NoReturn

from cryptography.exceptions import InternalError, InvalidTag
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec, padding, rsa, x25519
from cryptography.hazmat.primitives.ciphers.aead import ChaCha20Poly1305
from cryptography.hazmat.primitives.kdf.hkdf import HKDF

from pyagessh.exceptions import (
    CryptographicError,
    DecryptionError,
    EncryptionError,
    RandomnessUnavailableError,
    StanzaFormatError,
)
from pyagessh.models.keys import ECDSA_KEY_TYPES, VALID_FILE_KEY_SIZES

if TYPE_CHECKING:
    from collections.abc import Iterator

__all__ = [
    "KeyWrapper",
    "ephemeral_ec_key",
    "ephemeral_x25519_key",
]

_LABEL_PREFIX: Final[bytes] = b"age-encryption.org/v1/"


@contextmanager
def ephemeral_x25519_key() -> Iterator[x25519.X25519PrivateKey]:
    """Single-use X25519 key for one wrap call."""
    try:
        key = x25519.X25519PrivateKey.generate()
    except (OSError, InternalError) as e:
        msg = "Secure randomness unavailable for ephemeral key"
        raise RandomnessUnavailableError(msg) from e
    try:
        yield key
    finally:
        del key


@contextmanager
def ephemeral_ec_key(curve: ec.EllipticCurve) -> Iterator[ec.EllipticCurvePrivateKey]:
    """Single-use key on ``curve`` for one wrap call."""
    try:
        key = ec.generate_private_key(curve)
    except (OSError, InternalError) as e:
        msg = "Secure randomness unavailable for ephemeral key"
        raise RandomnessUnavailableError(msg) from e
    try:
        yield key
    finally:
        del key


class KeyWrapper:
    """File key wrapping primitives for SSH keys.

    RSA keys use OAEP directly. Ed25519 (as X25519) and NIST-curve keys use
    ephemeral-static ECDH, HKDF-SHA256 and ChaCha20-Poly1305. Every derivation
    binds a per-algorithm label and the recipient's fingerprint, so a key used
    for SSH authentication never yields values valid in another context.
    """

    RSA_LABEL: Final[bytes] = _LABEL_PREFIX + b"ssh-rsa"
    ED25519_LABEL: Final[bytes] = _LABEL_PREFIX + b"ssh-ed25519"
    ECDSA_LABELS: Final[dict[str, bytes]] = {
        key_type: _LABEL_PREFIX + key_type.encode("ascii")
        for key_type in ECDSA_KEY_TYPES.values()
    }

    X25519_SHARE_SIZE: Final[int] = 32
    AEAD_TAG_SIZE: Final[int] = 16
    _HKDF_LENGTH: Final[int] = 32
    _AEAD_NONCE: Final[bytes] = bytes(12)  # wrap keys are never reused

    @staticmethod
    def _oaep(label: bytes) -> padding.OAEP:
        return padding.OAEP(
            mgf=padding.MGF1(hashes.SHA256()),
            algorithm=hashes.SHA256(),
            label=label,
        )

    @staticmethod
    def rsa_max_payload(public_key: rsa.RSAPublicKey) -> int:
        """Largest plaintext OAEP with SHA-256 accepts for this modulus."""
        return (public_key.key_size + 7) // 8 - 2 * hashes.SHA256.digest_size - 2

    @staticmethod
    def rsa_oaep_wrap(
        public_key: rsa.RSAPublicKey,
        file_key: bytes,
        fingerprint: bytes,
    ) -> bytes:
        """Encrypt a file key with RSA-OAEP under the fingerprint-bound label."""
        KeyWrapper._check_file_key(file_key)
        if len(file_key) > KeyWrapper.rsa_max_payload(public_key):
            KeyWrapper._fail("File key too large for RSA modulus", EncryptionError)

        try:
            return public_key.encrypt(
                file_key,
                KeyWrapper._oaep(KeyWrapper.RSA_LABEL + fingerprint),
            )
        except ValueError as e:
            KeyWrapper._fail("RSA-OAEP encryption failed", EncryptionError, e)
        except InternalError as e:
            KeyWrapper._fail(
                "Secure randomness unavailable for RSA-OAEP padding",
                RandomnessUnavailableError,
                e,
            )

    @staticmethod
    def rsa_oaep_unwrap(
        private_key: rsa.RSAPrivateKey,
        body: bytes,
        fingerprint: bytes,
    ) -> bytes:
        """Decrypt an RSA-OAEP wrapped file key."""
        if len(body) != (private_key.key_size + 7) // 8:
            KeyWrapper._fail("Invalid ssh-rsa stanza body length", StanzaFormatError)

        try:
            file_key = private_key.decrypt(
                body,
                KeyWrapper._oaep(KeyWrapper.RSA_LABEL + fingerprint),
            )
        except ValueError as e:
            KeyWrapper._fail("RSA-OAEP decryption failed", DecryptionError, e)

        if len(file_key) not in VALID_FILE_KEY_SIZES:
            KeyWrapper._fail("Unwrapped file key size mismatch", DecryptionError)
        return file_key

    @staticmethod
    def x25519_wrap(
        static_share: bytes,
        file_key: bytes,
        label: bytes,
        fingerprint: bytes,
    ) -> tuple[bytes, bytes]:
        """Wrap a file key to an X25519 share.

        Returns the ephemeral share and the AEAD ciphertext.
        """
        KeyWrapper._check_file_key(file_key)
        static_public = x25519.X25519PublicKey.from_public_bytes(static_share)

        with ephemeral_x25519_key() as ephemeral:
            ephemeral_share = ephemeral.public_key().public_bytes(
                encoding=serialization.Encoding.Raw,
                format=serialization.PublicFormat.Raw,
            )
            try:
                shared_secret = ephemeral.exchange(static_public)
            except ValueError as e:
                KeyWrapper._fail("Low order X25519 recipient", EncryptionError, e)
        del ephemeral

        wrap_key = KeyWrapper._derive(
            shared_secret,
            ephemeral_share + static_share,
            label + fingerprint,
        )
        del shared_secret
        return ephemeral_share, KeyWrapper._seal(wrap_key, file_key)

    @staticmethod
    def x25519_unwrap(
        static_private: x25519.X25519PrivateKey,
        ephemeral_share: bytes,
        body: bytes,
        label: bytes,
        fingerprint: bytes,
    ) -> bytes:
        """Recover a file key wrapped by :meth:`x25519_wrap`."""
        if len(ephemeral_share) != KeyWrapper.X25519_SHARE_SIZE:
            KeyWrapper._fail("Invalid X25519 ephemeral share", StanzaFormatError)
        KeyWrapper._check_body(body)

        static_share = static_private.public_key().public_bytes(
            encoding=serialization.Encoding.Raw,
            format=serialization.PublicFormat.Raw,
        )
        try:
            shared_secret = static_private.exchange(
                x25519.X25519PublicKey.from_public_bytes(ephemeral_share),
            )
        except ValueError as e:
            KeyWrapper._fail("Invalid X25519 ephemeral share", DecryptionError, e)

        wrap_key = KeyWrapper._derive(
            shared_secret,
            ephemeral_share + static_share,
            label + fingerprint,
        )
        del shared_secret
        return KeyWrapper._open(wrap_key, body)

    @staticmethod
    def ecdh_wrap(
        public_key: ec.EllipticCurvePublicKey,
        file_key: bytes,
        label: bytes,
        fingerprint: bytes,
    ) -> tuple[bytes, bytes]:
        """Wrap a file key to a NIST-curve public key.

        Returns the compressed ephemeral point and the AEAD ciphertext.
        """
        KeyWrapper._check_file_key(file_key)
        static_share = KeyWrapper.compressed_point(public_key)

        with ephemeral_ec_key(public_key.curve) as ephemeral:
            ephemeral_share = KeyWrapper.compressed_point(ephemeral.public_key())
            try:
                shared_secret = ephemeral.exchange(ec.ECDH(), public_key)
            except ValueError as e:
                KeyWrapper._fail("ECDH key agreement failed", EncryptionError, e)
        del ephemeral

        wrap_key = KeyWrapper._derive(
            shared_secret,
            ephemeral_share + static_share,
            label + fingerprint,
        )
        del shared_secret
        return ephemeral_share, KeyWrapper._seal(wrap_key, file_key)

    @staticmethod
    def ecdh_unwrap(
        private_key: ec.EllipticCurvePrivateKey,
        ephemeral_share: bytes,
        body: bytes,
        label: bytes,
        fingerprint: bytes,
    ) -> bytes:
        """Recover a file key wrapped by :meth:`ecdh_wrap`."""
        KeyWrapper._check_body(body)
        static_share = KeyWrapper.compressed_point(private_key.public_key())

        try:
            ephemeral_public = ec.EllipticCurvePublicKey.from_encoded_point(
                private_key.curve,
                ephemeral_share,
            )
            shared_secret = private_key.exchange(ec.ECDH(), ephemeral_public)
        except ValueError as e:
            KeyWrapper._fail("Invalid ECDH ephemeral share", DecryptionError, e)

        wrap_key = KeyWrapper._derive(
            shared_secret,
            ephemeral_share + static_share,
            label + fingerprint,
        )
        del shared_secret
        return KeyWrapper._open(wrap_key, body)

    @staticmethod
    def compressed_point(public_key: ec.EllipticCurvePublicKey) -> bytes:
        return public_key.public_bytes(
            encoding=serialization.Encoding.X962,
            format=serialization.PublicFormat.CompressedPoint,
        )

    @staticmethod
    def _derive(shared_secret: bytes, salt: bytes, info: bytes) -> bytes:
        return HKDF(
            algorithm=hashes.SHA256(),
            length=KeyWrapper._HKDF_LENGTH,
            salt=salt,
            info=info,
        ).derive(shared_secret)

    @staticmethod
    def _seal(wrap_key: bytes, file_key: bytes) -> bytes:
        return ChaCha20Poly1305(wrap_key).encrypt(
            KeyWrapper._AEAD_NONCE,
            file_key,
            None,
        )

    @staticmethod
    def _open(wrap_key: bytes, body: bytes) -> bytes:
        try:
            return ChaCha20Poly1305(wrap_key).decrypt(
                KeyWrapper._AEAD_NONCE,
                body,
                None,
            )
        except InvalidTag as e:
            KeyWrapper._fail(
                "Authentication failed - stanza may be corrupted",
                DecryptionError,
                e,
            )

    @staticmethod
    def _check_file_key(file_key: bytes) -> None:
        if len(file_key) not in VALID_FILE_KEY_SIZES:
            KeyWrapper._fail(
                f"File key must be one of {VALID_FILE_KEY_SIZES} bytes",
                EncryptionError,
            )

    @staticmethod
    def _check_body(body: bytes) -> None:
        if len(body) - KeyWrapper.AEAD_TAG_SIZE not in VALID_FILE_KEY_SIZES:
            KeyWrapper._fail("Invalid stanza body length", StanzaFormatError)

    @staticmethod
    def _fail(
        message: str,
        exception_type: type[Exception] = CryptographicError,
        cause: Exception | None = None,
    ) -> NoReturn:
        """Uniform error handling for cryptographic operations."""
        if cause:
            raise exception_type(message) from cause
        raise exception_type(message)
