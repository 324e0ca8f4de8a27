import pytest
from cryptography.exceptions import InternalError
from cryptography.hazmat.primitives.asymmetric import ed25519, rsa

from pyagessh import (
    DecryptionError,
    EncryptionError,
    KeySizeError,
    NoMatchError,
    RandomnessUnavailableError,
    Stanza,
    StanzaFormatError,
    UnsupportedKeyTypeError,
    new_ed25519_identity,
    new_rsa_identity,
    new_rsa_recipient,
)
from pyagessh.core import KeyWrapper


def test_rsa_round_trip(rsa_key, file_key):
    recipient = new_rsa_recipient(rsa_key.public_key())
    identity = new_rsa_identity(rsa_key)

    assert identity.recipient() == recipient

    stanzas = recipient.wrap(file_key)

    assert identity.unwrap(stanzas) == file_key


def test_rsa_zero_file_key_scenario(rsa_key, other_rsa_key):
    recipient = new_rsa_recipient(rsa_key.public_key())
    file_key = bytes(16)

    stanzas = recipient.wrap(file_key)

    assert len(stanzas) == 1
    stanza = stanzas[0]
    assert stanza.type == "ssh-rsa"
    assert stanza.args == (recipient.tag,)
    assert len(stanza.body) == 256
    assert new_rsa_identity(rsa_key).unwrap(stanzas) == bytes(16)

    with pytest.raises(NoMatchError):
        new_rsa_identity(other_rsa_key).unwrap(stanzas)


def test_rsa_wrap_is_randomized(rsa_key, file_key):
    recipient = new_rsa_recipient(rsa_key.public_key())

    assert recipient.wrap(file_key)[0].body != recipient.wrap(file_key)[0].body


@pytest.mark.parametrize("position", [0, 1, 100, 255])
def test_rsa_tampered_body_fails(rsa_key, file_key, position):
    identity = new_rsa_identity(rsa_key)
    stanza = identity.recipient().wrap(file_key)[0]
    body = bytearray(stanza.body)
    body[position] ^= 0x01
    tampered = Stanza(type=stanza.type, args=stanza.args, body=bytes(body))

    with pytest.raises(DecryptionError):
        identity.unwrap([tampered])


class FailingRandomnessKey:
    def __init__(self, public_key):
        self.key_size = public_key.key_size

    def encrypt(self, plaintext, padding):
        raise InternalError("RAND_bytes failed", [])


def test_rsa_randomness_unavailable(rsa_key, file_key):
    failing = FailingRandomnessKey(rsa_key.public_key())

    with pytest.raises(RandomnessUnavailableError):
        KeyWrapper.rsa_oaep_wrap(failing, file_key, b"\x00" * 4)


def test_rsa_label_binds_fingerprint(rsa_key, file_key):
    # A ciphertext made under another fingerprint's label must not decrypt.
    identity = new_rsa_identity(rsa_key)
    body = KeyWrapper.rsa_oaep_wrap(rsa_key.public_key(), file_key, b"\x00" * 4)
    stanza = Stanza(type="ssh-rsa", args=(identity.recipient().tag,), body=body)

    with pytest.raises(DecryptionError):
        identity.unwrap([stanza])


def test_rsa_malformed_stanza(rsa_key, file_key):
    identity = new_rsa_identity(rsa_key)
    stanza = identity.recipient().wrap(file_key)[0]

    extra_arg = Stanza(type=stanza.type, args=(*stanza.args, "x"), body=stanza.body)
    with pytest.raises(StanzaFormatError):
        identity.unwrap([extra_arg])

    short_body = Stanza(type=stanza.type, args=stanza.args, body=stanza.body[:-1])
    with pytest.raises(StanzaFormatError):
        identity.unwrap([short_body])


def test_rsa_rejects_invalid_file_key(rsa_key):
    recipient = new_rsa_recipient(rsa_key.public_key())

    with pytest.raises(EncryptionError):
        recipient.wrap(b"short")


def test_rsa_small_key_rejected():
    small = rsa.generate_private_key(public_exponent=65537, key_size=1024)

    with pytest.raises(KeySizeError):
        new_rsa_recipient(small.public_key())
    with pytest.raises(KeySizeError):
        new_rsa_identity(small)


def test_rsa_constructor_checks_key_type():
    ed_key = ed25519.Ed25519PrivateKey.generate()

    with pytest.raises(UnsupportedKeyTypeError):
        new_rsa_recipient(ed_key.public_key())
    with pytest.raises(UnsupportedKeyTypeError):
        new_rsa_identity(ed_key)


def test_rsa_stanza_ignored_by_other_algorithm(rsa_key, file_key):
    stanzas = new_rsa_recipient(rsa_key.public_key()).wrap(file_key)
    identity = new_ed25519_identity(ed25519.Ed25519PrivateKey.generate())

    with pytest.raises(NoMatchError):
        identity.unwrap(stanzas)


def test_rsa_max_payload(rsa_key):
    assert KeyWrapper.rsa_max_payload(rsa_key.public_key()) == 256 - 66
