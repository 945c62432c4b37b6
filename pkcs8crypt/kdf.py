"""
Passphrase stretching with PBKDF2-HMAC-SHA256.

There are two derivation policies in this module, and they serve different
purposes:

* :func:`derive_key` takes the salt and iteration count as given.
  This is what the OpenSSL-compatible key bag decryption uses, with the
  parameters read from the bag.
* :func:`generate_aes_key` is the convenience policy used by the password
  envelope: a 16-byte salt (by default derived from the passphrase itself)
  and a fixed iteration count of :const:`DEFAULT_ITERATIONS`.
"""

import logging
from dataclasses import dataclass
from hashlib import sha256
from typing import Optional, Tuple

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from .crypt import run_primitive
from .errors import InvalidParameterError

__all__ = [
    'AESKey',
    'DEFAULT_ITERATIONS',
    'MAX_ITERATIONS',
    'SALT_SIZE',
    'IV_SIZE',
    'derive_key',
    'generate_aes_key',
    'default_salt',
    'salt_and_iv',
]

logger = logging.getLogger(__name__)

DEFAULT_ITERATIONS = 65_535
"""
PBKDF2 iteration count used by :func:`generate_aes_key`.
"""

MAX_ITERATIONS = 2**32 - 1
"""
Largest PBKDF2 iteration count :func:`derive_key` accepts.
"""

SALT_SIZE = 16
IV_SIZE = 16
AES_KEY_SIZE = 32


@dataclass(frozen=True, repr=False)
class AESKey:
    """
    An AES-256 key, usable for both encryption and decryption.
    """

    key_bytes: bytes

    def __post_init__(self):
        if len(self.key_bytes) != AES_KEY_SIZE:
            raise InvalidParameterError(
                f"AES-256 keys must be exactly {AES_KEY_SIZE} bytes in length."
            )

    def __repr__(self):
        return '<AESKey (256 bits)>'


def _check_size(value, what: str, size: int = 16):
    if len(value) != size:
        raise InvalidParameterError(
            f"{what} must be exactly {size} bytes in length."
        )


def _encode_passphrase(passphrase: Optional[str]) -> bytes:
    if passphrase is None:
        raise InvalidParameterError("A passphrase is required.")
    return passphrase.encode('utf-8')


def _pbkdf2_sha256(pw_bytes: bytes, salt: bytes, iterations: int) -> bytes:
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=AES_KEY_SIZE,
        salt=salt,
        iterations=iterations,
    )
    return kdf.derive(pw_bytes)


async def derive_key(passphrase: str, salt: bytes, iterations: int) -> AESKey:
    """
    Stretch a passphrase into an AES-256 key using PBKDF2 with HMAC-SHA256.

    :param passphrase:
        The passphrase. It is encoded as UTF-8.
    :param salt:
        The salt, of any length.
    :param iterations:
        The PBKDF2 iteration count, at most :const:`MAX_ITERATIONS`.
    :return:
        An :class:`AESKey`.
    :raises InvalidParameterError:
        if the passphrase is ``None`` or the iteration count is out of range.
    """
    pw_bytes = _encode_passphrase(passphrase)
    if not 1 <= iterations <= MAX_ITERATIONS:
        raise InvalidParameterError(
            f"Iteration count must be between 1 and {MAX_ITERATIONS}."
        )
    logger.debug(
        f"Deriving AES-256 key with PBKDF2-HMAC-SHA256, "
        f"{iterations} iterations, {len(salt)}-byte salt."
    )
    key_bytes = await run_primitive(
        _pbkdf2_sha256, pw_bytes, bytes(salt), iterations
    )
    return AESKey(key_bytes)


def default_salt(passphrase: str) -> bytes:
    """
    The first 16 bytes of the SHA-256 digest of the passphrase.
    """
    return sha256(_encode_passphrase(passphrase)).digest()[:SALT_SIZE]


async def generate_aes_key(passphrase: str,
                           salt: Optional[bytes] = None) -> AESKey:
    """
    Generate an AES key by PBKDF2-stretching a passphrase with a given (or
    default) salt. The key can be used with
    :func:`~pkcs8crypt.envelope.aes_encrypt` and
    :func:`~pkcs8crypt.envelope.aes_decrypt`.

    :param passphrase:
        The passphrase.
    :param salt:
        The salt to use, which must be 16 bytes long.
        If not provided, :func:`default_salt` is used.
    :return:
        An :class:`AESKey`.
    :raises InvalidParameterError:
        if the passphrase is ``None``, or the salt is not exactly 16 bytes
        long.
    """
    if salt is not None:
        _check_size(salt, 'Salt')
    else:
        salt = default_salt(passphrase)
    return await derive_key(passphrase, salt, DEFAULT_ITERATIONS)


def salt_and_iv(password: str, salt: Optional[bytes] = None,
                iv: Optional[bytes] = None) -> Tuple[bytes, bytes]:
    """
    Get the salt and IV to use for password-based encryption.

    Values that are not supplied are taken from the SHA-256 digest of the
    password: the first 16 bytes become the salt, the last 16 bytes the IV.

    :param password:
        The password.
    :param salt:
        The salt, or ``None`` to derive it from the password.
    :param iv:
        The IV, or ``None`` to derive it from the password.
    :return:
        A ``(salt, iv)`` tuple.
    :raises InvalidParameterError:
        if a supplied salt or IV is not exactly 16 bytes long.
    """
    if salt is None or iv is None:
        digest = sha256(_encode_passphrase(password)).digest()
        if salt is None:
            salt = digest[:SALT_SIZE]
        if iv is None:
            iv = digest[SALT_SIZE:]
    _check_size(iv, 'IV')
    _check_size(salt, 'Salt')
    return bytes(salt), bytes(iv)
