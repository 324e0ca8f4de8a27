from __future__ import annotations

import logging
from typing import TYPE_CHECKING, final

from pyagessh.core.recipients import (
    Identity,
    Recipient,
    identity_from_private_key,
    recipient_from_public_key,
)
from pyagessh.exceptions import KeyMismatchError, NoMatchError
from pyagessh.utils.ssh import load_private_key

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from cryptography.hazmat.primitives.asymmetric.types import PublicKeyTypes

    from pyagessh.models.stanza import Stanza

__all__ = ["EncryptedIdentity"]

logger = logging.getLogger(__name__)


@final
class EncryptedIdentity:
    """Identity backed by a passphrase-protected private key.

    The public key is supplied separately (usually from the ``.pub`` file) so
    stanzas can be routed without the passphrase. The callback is invoked only
    when a stanza is actually addressed to this key, and the decrypted key is
    never cached.

    Args:
        public_key: Public half of the encrypted key
        pem: Encrypted private key in OpenSSH or PEM form
        passphrase: Callback returning the passphrase
    """

    __slots__ = ("_passphrase", "_pem", "_recipient")

    def __init__(
        self,
        public_key: PublicKeyTypes,
        pem: bytes,
        passphrase: Callable[[], bytes],
    ) -> None:
        self._recipient = recipient_from_public_key(public_key)
        self._pem = pem
        self._passphrase = passphrase

    def recipient(self) -> Recipient:
        return self._recipient

    def unwrap(self, stanzas: Iterable[Stanza]) -> bytes:
        stanzas = list(stanzas)
        if not any(self._recipient.matches(stanza) for stanza in stanzas):
            msg = (
                f"No {self._recipient.key_type} stanza matches "
                f"fingerprint {self._recipient.tag}"
            )
            raise NoMatchError(msg)

        logger.debug("Decrypting private key for %s", self._recipient.tag)
        return self.decrypt().unwrap(stanzas)

    def decrypt(self) -> Identity:
        """Decrypt the private key and check it against the public key."""
        private_key = load_private_key(self._pem, self._passphrase())
        identity = identity_from_private_key(private_key)
        if identity.recipient() != self._recipient:
            msg = "Decrypted private key does not match the public key"
            raise KeyMismatchError(msg)
        return identity
