from __future__ import annotations

import base64
import binascii
from typing import Annotated, Final

from pydantic import BaseModel, ConfigDict, Field, StringConstraints, field_validator

from pyagessh.exceptions import StanzaFormatError

__all__ = [
    "COLUMNS_PER_LINE",
    "STANZA_PREFIX",
    "Stanza",
    "b64decode_unpadded",
    "b64encode_unpadded",
]

COLUMNS_PER_LINE: Final[int] = 64
STANZA_PREFIX: Final[str] = "->"

StanzaToken = Annotated[str, StringConstraints(min_length=1, pattern=r"^[\x21-\x7e]+$")]


def b64encode_unpadded(data: bytes) -> str:
    """Standard base64 without trailing padding."""
    return base64.b64encode(data).decode("ascii").rstrip("=")


def b64decode_unpadded(text: str) -> bytes:
    """Strict inverse of :func:`b64encode_unpadded`.

    Rejects padding, characters outside the standard alphabet and encodings
    whose unused trailing bits are not zero.
    """
    if "=" in text or len(text) % 4 == 1:
        msg = "Invalid unpadded base64"
        raise StanzaFormatError(msg)
    try:
        data = base64.b64decode(text + "=" * (-len(text) % 4), validate=True)
    except (binascii.Error, ValueError) as e:
        msg = "Invalid unpadded base64"
        raise StanzaFormatError(msg) from e
    if b64encode_unpadded(data) != text:
        msg = "Non-canonical base64 encoding"
        raise StanzaFormatError(msg)
    return data


class Stanza(BaseModel):
    """Labelled, argument-carrying ciphertext block exchanged by recipients
    and identities.

    Attributes:
        type: Algorithm tag identifying the producer (e.g. ``ssh-ed25519``)
        args: Ordered arguments; the first is always the key fingerprint
        body: Opaque ciphertext
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    type: StanzaToken = Field(..., description="Algorithm tag")
    args: tuple[StanzaToken, ...] = Field(
        default=(),
        description="Ordered stanza arguments",
    )
    body: bytes = Field(default=b"", strict=True, description="Opaque ciphertext")

    @field_validator("type", "args", mode="before")
    @classmethod
    def reject_non_ascii(cls, value: object) -> object:
        """Fail early on non-ASCII input so the pattern error stays readable."""
        values = value if isinstance(value, (list, tuple)) else (value,)
        for item in values:
            if isinstance(item, str) and not item.isascii():
                msg = "Stanza tokens must be ASCII"
                raise ValueError(msg)
        return value

    def to_text(self) -> str:
        """Render the stanza in the envelope header text form."""
        header = " ".join((STANZA_PREFIX, self.type, *self.args))
        encoded = b64encode_unpadded(self.body)
        lines = [
            encoded[i : i + COLUMNS_PER_LINE]
            for i in range(0, len(encoded), COLUMNS_PER_LINE)
        ]
        # The final line is always short, so a full last line gets an empty one.
        if not lines or len(lines[-1]) == COLUMNS_PER_LINE:
            lines.append("")
        return header + "\n" + "\n".join(lines) + "\n"

    @classmethod
    def from_text(cls, text: str) -> Stanza:
        """Parse a single stanza produced by :meth:`to_text`."""
        if not text.endswith("\n"):
            msg = "Stanza must end with a newline"
            raise StanzaFormatError(msg)

        header, *body_lines = text[:-1].split("\n")
        fields = header.split(" ")
        if len(fields) < 2 or fields[0] != STANZA_PREFIX:
            msg = "Malformed stanza header"
            raise StanzaFormatError(msg)
        if not body_lines:
            msg = "Missing stanza body"
            raise StanzaFormatError(msg)

        for line in body_lines[:-1]:
            if len(line) != COLUMNS_PER_LINE:
                msg = "Stanza body line has the wrong length"
                raise StanzaFormatError(msg)
        if len(body_lines[-1]) >= COLUMNS_PER_LINE:
            msg = "Stanza body is missing its final short line"
            raise StanzaFormatError(msg)

        body = b64decode_unpadded("".join(body_lines))
        try:
            return cls(type=fields[1], args=tuple(fields[2:]), body=body)
        except ValueError as e:
            msg = "Invalid stanza header tokens"
            raise StanzaFormatError(msg) from e
