class SecurityError(Exception):
    """Base class for all security-related exceptions"""


class CryptographicError(SecurityError):
    """Cryptographic operation error"""


class UnsupportedKeyTypeError(CryptographicError):
    """SSH key algorithm or curve is not supported"""


class KeySizeError(UnsupportedKeyTypeError):
    """Invalid key size"""


class KeyParseError(CryptographicError):
    """SSH key could not be parsed"""


class PassphraseRequiredError(KeyParseError):
    """Private key is passphrase-protected and no passphrase was given"""


class KeyMismatchError(CryptographicError):
    """Private key does not match the expected public key"""


class EncryptionError(CryptographicError):
    """File key wrapping failed"""


class RandomnessUnavailableError(EncryptionError):
    """Secure random source could not be read"""


class NoMatchError(CryptographicError):
    """No stanza is addressed to this identity"""


class DecryptionError(CryptographicError):
    """A stanza addressed to this identity failed to decrypt"""


class StanzaFormatError(DecryptionError):
    """Stanza is malformed"""
