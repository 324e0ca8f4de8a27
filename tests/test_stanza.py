import pytest
from pydantic import ValidationError

from pyagessh import Stanza, StanzaFormatError
from pyagessh.models import b64decode_unpadded, b64encode_unpadded


def test_stanza_equality_is_structural():
    a = Stanza(type="ssh-rsa", args=["AAAA"], body=b"\x00\x01")
    b = Stanza(type="ssh-rsa", args=("AAAA",), body=b"\x00\x01")
    c = Stanza(type="ssh-rsa", args=("AAAB",), body=b"\x00\x01")

    assert a == b
    assert a != c
    assert hash(a) == hash(b)


def test_stanza_is_immutable():
    stanza = Stanza(type="ssh-ed25519", args=("abc", "def"), body=b"x")

    with pytest.raises(ValidationError):
        stanza.body = b"y"


@pytest.mark.parametrize(
    ("label", "args"),
    [
        ("", ()),
        ("ssh rsa", ()),
        ("ssh-rsa", ("has space",)),
        ("ssh-rsa", ("",)),
        ("ssh-rsa", ("tab\there",)),
        ("ssh-ed25519", ("café",)),
    ],
)
def test_stanza_rejects_ambiguous_tokens(label, args):
    with pytest.raises(ValidationError):
        Stanza(type=label, args=args, body=b"")


def test_stanza_body_must_be_bytes():
    with pytest.raises(ValidationError):
        Stanza(type="ssh-rsa", args=(), body="text")


def test_to_text_wraps_body_at_64_columns():
    # 48 bytes encode to exactly one full line, so an empty final line follows.
    stanza = Stanza(type="X25519", args=("a", "b"), body=bytes(48))

    text = stanza.to_text()

    assert text == "-> X25519 a b\n" + "A" * 64 + "\n\n"
    assert Stanza.from_text(text) == stanza


def test_to_text_short_body():
    stanza = Stanza(type="ssh-rsa", args=("Zm9v",), body=b"hello")

    assert stanza.to_text() == "-> ssh-rsa Zm9v\naGVsbG8\n"


def test_from_text_parses_multiline_body():
    body = bytes(range(100))
    encoded = b64encode_unpadded(body)
    lines = "\n".join((encoded[:64], encoded[64:128], encoded[128:]))
    text = f"-> ssh-ed25519 tag share\n{lines}\n"

    stanza = Stanza.from_text(text)

    assert stanza.type == "ssh-ed25519"
    assert stanza.args == ("tag", "share")
    assert stanza.body == body


@pytest.mark.parametrize(
    "text",
    [
        "-> ssh-rsa tag\naGVsbG8",  # no trailing newline
        "ssh-rsa tag\naGVsbG8\n",  # missing arrow
        "->\naGVsbG8\n",  # missing type
        "-> ssh-rsa tag\naGVsbG8=\n",  # padded
        "-> ssh-rsa tag\n" + "A" * 64 + "\n",  # no final short line
        "-> ssh-rsa tag\nAAAA\nAAAA\n",  # short line before the last
        "-> ssh-rsa tag\naGV*bG8\n",  # bad alphabet
    ],
)
def test_from_text_rejects_malformed(text):
    with pytest.raises(StanzaFormatError):
        Stanza.from_text(text)


def test_unpadded_base64_is_strict():
    assert b64encode_unpadded(b"\xff") == "/w"
    assert b64decode_unpadded("/w") == b"\xff"

    # Non-zero unused trailing bits.
    with pytest.raises(StanzaFormatError):
        b64decode_unpadded("/x")
    with pytest.raises(StanzaFormatError):
        b64decode_unpadded("A")
