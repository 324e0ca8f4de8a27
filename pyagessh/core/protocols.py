from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Iterable

    from pyagessh.models.stanza import Stanza

__all__ = ("IdentityProtocol", "RecipientProtocol")


@runtime_checkable
class RecipientProtocol(Protocol):
    """Protocol for objects that wrap a file key into stanzas."""

    def wrap(self, file_key: bytes) -> list[Stanza]:
        """Wrap a symmetric file key for this recipient."""
        ...


@runtime_checkable
class IdentityProtocol(Protocol):
    """Protocol for objects that recover a file key from stanzas."""

    def unwrap(self, stanzas: Iterable[Stanza]) -> bytes:
        """Unwrap the file key addressed to this identity."""
        ...
