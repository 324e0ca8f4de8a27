from __future__ import annotations

import logging
import secrets
from typing import TYPE_CHECKING, final

from pyagessh.core.encrypted import EncryptedIdentity
from pyagessh.exceptions import (
    EncryptionError,
    NoMatchError,
    RandomnessUnavailableError,
)
from pyagessh.models.keys import FILE_KEY_SIZE
from pyagessh.utils.ssh import parse_identity, parse_recipient

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from pyagessh.core.protocols import IdentityProtocol, RecipientProtocol
    from pyagessh.core.recipients import Identity, Recipient
    from pyagessh.models.stanza import Stanza

logger = logging.getLogger(__name__)


@final
class AgeSSH:
    """Wraps a file key to several SSH recipients and unwraps it with
    whichever SSH identity a stanza is addressed to.
    """

    __slots__ = ("_identities", "_recipients")

    def __init__(
        self,
        recipients: Iterable[RecipientProtocol] = (),
        identities: Iterable[IdentityProtocol] = (),
    ) -> None:
        self._recipients: list[RecipientProtocol] = list(recipients)
        self._identities: list[IdentityProtocol] = list(identities)

    @staticmethod
    def generate_file_key() -> bytes:
        try:
            return secrets.token_bytes(FILE_KEY_SIZE)
        except OSError as e:
            msg = "Secure randomness unavailable for file key"
            raise RandomnessUnavailableError(msg) from e

    def add_recipient(self, line: str | bytes) -> Recipient:
        recipient = parse_recipient(line)
        self._recipients.append(recipient)
        return recipient

    def add_identity(self, data: bytes, passphrase: bytes | None = None) -> Identity:
        identity = parse_identity(data, passphrase)
        self._identities.append(identity)
        return identity

    def add_encrypted_identity(
        self,
        public_line: str | bytes,
        pem: bytes,
        passphrase: Callable[[], bytes],
    ) -> EncryptedIdentity:
        identity = EncryptedIdentity(
            parse_recipient(public_line).public_key,
            pem,
            passphrase,
        )
        self._identities.append(identity)
        return identity

    def wrap(self, file_key: bytes) -> list[Stanza]:
        if not self._recipients:
            msg = "No recipients configured"
            raise EncryptionError(msg)

        stanzas: list[Stanza] = []
        for recipient in self._recipients:
            stanzas.extend(recipient.wrap(file_key))
        return stanzas

    def unwrap(self, stanzas: Iterable[Stanza]) -> bytes:
        stanzas = list(stanzas)
        for identity in self._identities:
            try:
                return identity.unwrap(stanzas)
            except NoMatchError:
                logger.debug("Identity %r matched no stanza, trying next", identity)
                continue

        msg = "No identity matched any of the stanzas"
        raise NoMatchError(msg)

    @property
    def recipients(self) -> tuple[RecipientProtocol, ...]:
        return tuple(self._recipients)

    @property
    def identities(self) -> tuple[IdentityProtocol, ...]:
        return tuple(self._identities)
