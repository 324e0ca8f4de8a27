import secrets

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec, ed25519, rsa

from pyagessh import (
    new_ecdsa_identity,
    new_ed25519_identity,
    new_rsa_identity,
)

CURVES = {
    "P256": ec.SECP256R1,
    "P384": ec.SECP384R1,
    "P521": ec.SECP521R1,
}


def ssh_line(public_key, comment="user@host"):
    line = public_key.public_bytes(
        encoding=serialization.Encoding.OpenSSH,
        format=serialization.PublicFormat.OpenSSH,
    )
    return line.decode("ascii") + " " + comment


def openssh_private(private_key):
    return private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.OpenSSH,
        encryption_algorithm=serialization.NoEncryption(),
    )


def encrypted_pem(private_key, passphrase):
    return private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.BestAvailableEncryption(passphrase),
    )


def encrypted_openssh(private_key, passphrase):
    return private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.OpenSSH,
        encryption_algorithm=serialization.BestAvailableEncryption(passphrase),
    )


class TrackedKey:
    """Weak-referenceable stand-in for an ephemeral private key."""

    def __init__(self, key):
        self._key = key

    def public_key(self):
        return self._key.public_key()

    def exchange(self, *args):
        return self._key.exchange(*args)


@pytest.fixture(scope="session")
def rsa_key():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def other_rsa_key():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture
def ed25519_key():
    return ed25519.Ed25519PrivateKey.generate()


@pytest.fixture(params=sorted(CURVES))
def ecdsa_key(request):
    return ec.generate_private_key(CURVES[request.param]())


@pytest.fixture(params=["rsa", "ed25519", "P256", "P384", "P521"])
def any_identity(request, rsa_key):
    if request.param == "rsa":
        return new_rsa_identity(rsa_key)
    if request.param == "ed25519":
        return new_ed25519_identity(ed25519.Ed25519PrivateKey.generate())
    return new_ecdsa_identity(ec.generate_private_key(CURVES[request.param]()))


@pytest.fixture
def file_key():
    return secrets.token_bytes(16)
