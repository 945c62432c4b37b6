"""
Encryption and decryption routines.

This module covers

* decryption of OpenSSL PBES2-encrypted PKCS#8 private keys, i.e. the format
  produced by

  .. code-block:: bash

      openssl genpkey -aes-256-cbc -algorithm rsa -out private-key.pem \\
          -pass stdin -pkeyopt rsa_keygen_bits:2048

* AES-256-CBC encryption with a caller-held key
  (output layout: ``iv[16] || ciphertext``);
* password-based AES-256-CBC encryption, equivalent to a Java
  ``PBEWithHmacSHA256AndAES_256`` cipher
  (output layout: ``salt[16] || iv[16] || ciphertext``);
* RSAES-OAEP encryption with SHA-256.

All routines that call into a cryptographic primitive are coroutines.
"""

import logging
import secrets
from typing import Optional

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.rsa import (
    RSAPrivateKey,
    RSAPublicKey,
)

from .crypt import (
    aes_cbc_decrypt,
    aes_cbc_encrypt,
    rsa_oaep_decrypt,
    rsa_oaep_encrypt,
    run_primitive,
)
from .errors import (
    DecryptionFailedError,
    InvalidParameterError,
    MalformedEncodingError,
    UnsupportedAlgorithmError,
)
from .kdf import (
    IV_SIZE,
    SALT_SIZE,
    AESKey,
    derive_key,
    generate_aes_key,
    salt_and_iv,
)
from .keybag import EncryptedKeyBag, PrivateKeyInfo, describe_oid

__all__ = [
    'decrypt_private_key',
    'import_private_key',
    'import_public_key',
    'aes_encrypt',
    'aes_decrypt',
    'aes_password_encrypt',
    'aes_password_decrypt',
    'rsa_encrypt',
    'rsa_decrypt',
]

logger = logging.getLogger(__name__)

# The same message for every failure that could be caused by a wrong
# passphrase or key.
DECRYPTION_FAILED_MSG = "Decryption failed: wrong key or corrupted data."
KEY_DECRYPTION_FAILED_MSG = (
    "Failed to decrypt private key: wrong passphrase or corrupted data."
)


def _load_rsa_private_key(data: bytes) -> RSAPrivateKey:
    key = serialization.load_der_private_key(data, password=None)
    if not isinstance(key, RSAPrivateKey):
        raise UnsupportedAlgorithmError(
            "The loaded key does not seem to be an RSA private key."
        )
    return key


def _load_rsa_public_key(data: bytes) -> RSAPublicKey:
    key = serialization.load_der_public_key(data)
    if not isinstance(key, RSAPublicKey):
        raise UnsupportedAlgorithmError(
            "The loaded key does not seem to be an RSA public key."
        )
    return key


async def import_private_key(data: bytes) -> RSAPrivateKey:
    """
    Import an unencrypted PKCS#8 RSA private key.

    :param data:
        DER-encoded ``PrivateKeyInfo``.
    :raises MalformedEncodingError:
        if the key could not be parsed.
    :raises UnsupportedAlgorithmError:
        if the key is not an RSA key.
    """
    PrivateKeyInfo.from_der(data).check_rsa()
    try:
        return await run_primitive(_load_rsa_private_key, data)
    except UnsupportedAlgorithmError:
        raise
    except ValueError as e:
        raise MalformedEncodingError(
            f"Could not import private key: {e}"
        ) from e


async def import_public_key(data: bytes) -> RSAPublicKey:
    """
    Import an RSA public key.

    :param data:
        DER-encoded ``SubjectPublicKeyInfo``.
    :raises MalformedEncodingError:
        if the key could not be parsed.
    :raises UnsupportedAlgorithmError:
        if the key is not an RSA key.
    """
    try:
        return await run_primitive(_load_rsa_public_key, data)
    except UnsupportedAlgorithmError:
        raise
    except ValueError as e:
        raise MalformedEncodingError(
            f"Could not import public key: {e}"
        ) from e


async def decrypt_private_key(data: bytes, passphrase: str) -> RSAPrivateKey:
    """
    Decrypt an OpenSSL private key in PBKDF2/HMAC-SHA256/AES-256-CBC format.

    The algorithm identifiers in the bag are checked before anything else
    happens, so a bag that uses any other combination of algorithms is
    rejected without attempting to decrypt it.

    :param data:
        DER-encoded ``EncryptedPrivateKeyInfo``.
    :param passphrase:
        The encryption passphrase.
    :return:
        The decrypted RSA private key.
    :raises MalformedEncodingError:
        if the bag is malformed.
    :raises UnsupportedAlgorithmError:
        if the bag uses unsupported algorithms, or the key is not an RSA key.
    :raises DecryptionFailedError:
        if the key could not be decrypted. The passphrase may be wrong, or the
        encrypted data may be corrupt; the two are deliberately not told
        apart.
    """
    bag = EncryptedKeyBag.from_der(data)
    bag.check_supported()
    logger.debug(
        f"Encrypted key bag uses {describe_oid(bag.cipher_oid)}, "
        f"PBKDF2 with {describe_oid(bag.prf_oid)} and "
        f"{bag.iterations} iterations."
    )

    key = await derive_key(passphrase, bag.salt, bag.iterations)
    try:
        private_key_data = await run_primitive(
            aes_cbc_decrypt, key.key_bytes, bag.encrypted_data, bag.iv
        )
        key_info = PrivateKeyInfo.from_der(private_key_data)
    except ValueError:
        # covers padding errors as well as garbage plaintext
        raise DecryptionFailedError(KEY_DECRYPTION_FAILED_MSG) from None

    key_info.check_rsa()
    try:
        return await run_primitive(_load_rsa_private_key, private_key_data)
    except UnsupportedAlgorithmError:
        raise
    except ValueError:
        raise DecryptionFailedError(KEY_DECRYPTION_FAILED_MSG) from None


async def _aes_decrypt(key_bytes: bytes, data: bytes, iv: bytes) -> bytes:
    try:
        return await run_primitive(aes_cbc_decrypt, key_bytes, data, iv)
    except ValueError:
        raise DecryptionFailedError(DECRYPTION_FAILED_MSG) from None


async def aes_decrypt(key: AESKey, iv_and_encrypted: bytes) -> bytes:
    """
    Decrypt a block of AES-encrypted data as produced by :func:`aes_encrypt`.
    The first 16 bytes of ``iv_and_encrypted`` must be the initialisation
    vector.

    :param key:
        The AES-256 key, typically generated via
        :func:`~pkcs8crypt.kdf.generate_aes_key`.
    :param iv_and_encrypted:
        The initialisation vector (16 bytes) and encrypted data.
    :raises DecryptionFailedError:
        if the data could not be decrypted.
    """
    if len(iv_and_encrypted) < IV_SIZE:
        raise DecryptionFailedError(DECRYPTION_FAILED_MSG)
    iv = bytes(iv_and_encrypted[:IV_SIZE])
    encrypted = bytes(iv_and_encrypted[IV_SIZE:])
    return await _aes_decrypt(key.key_bytes, encrypted, iv)


async def aes_encrypt(key: AESKey, data: bytes) -> bytes:
    """
    AES-encrypt a block of data. A random initialisation vector is generated
    and included in the output as its first 16 bytes.

    :param key:
        The AES-256 key, typically generated via
        :func:`~pkcs8crypt.kdf.generate_aes_key`.
    :param data:
        The data to encrypt.
    """
    iv, encrypted = await run_primitive(aes_cbc_encrypt, key.key_bytes, data)
    return iv + encrypted


async def aes_password_decrypt(password: str, encrypted: bytes) -> bytes:
    """
    Decrypt a block of data in the format produced by
    :func:`aes_password_encrypt`.

    :param password:
        The password.
    :param encrypted:
        The salt (16 bytes), IV (16 bytes) and encrypted data.
    :raises DecryptionFailedError:
        if the data could not be decrypted.
    """
    if len(encrypted) < SALT_SIZE + IV_SIZE:
        raise DecryptionFailedError(DECRYPTION_FAILED_MSG)
    salt = bytes(encrypted[:SALT_SIZE])
    iv = bytes(encrypted[SALT_SIZE:SALT_SIZE + IV_SIZE])
    key = await generate_aes_key(password, salt)
    return await _aes_decrypt(
        key.key_bytes, bytes(encrypted[SALT_SIZE + IV_SIZE:]), iv
    )


async def aes_password_encrypt(password: str, data: bytes,
                               salt: Optional[bytes] = None,
                               iv: Optional[bytes] = None) -> bytes:
    """
    Apply password-based encryption using the equivalent of a Java
    ``PBEWithHmacSHA256AndAES_256`` cipher.

    The salt and IV are included in the output. Both are 16 bytes long, with
    the salt starting at byte ``0`` and the IV at byte ``16``. The encrypted
    data starts at byte ``32``.

    :param password:
        The password to use.
    :param data:
        The data to encrypt.
    :param salt:
        The salt to use.
    :param iv:
        The IV to use. If not given, a random IV is generated.
        A missing salt is generated randomly as well, unless an IV is given,
        in which case the salt is derived from the password with
        :func:`~pkcs8crypt.kdf.salt_and_iv`.

        .. warning::
            Passing in a fixed IV makes the output deterministic.
            Never reuse an IV with the same password.
    :raises InvalidParameterError:
        if the password is ``None``, or a supplied salt or IV is not exactly
        16 bytes long.
    """
    if iv is None:
        # the IV is never derived from the password
        iv = secrets.token_bytes(IV_SIZE)
        if salt is None:
            salt = secrets.token_bytes(SALT_SIZE)
    salt, iv = salt_and_iv(password, salt, iv)
    key = await generate_aes_key(password, salt)
    _, encrypted = await run_primitive(
        aes_cbc_encrypt, key.key_bytes, data, iv
    )
    return salt + iv + encrypted


async def rsa_decrypt(private_key: RSAPrivateKey, encrypted: bytes) -> bytes:
    """
    Decrypt a block of RSA-encrypted data as produced by :func:`rsa_encrypt`.

    :param private_key:
        The private key with which to decrypt.
    :param encrypted:
        The encrypted data.
    :raises DecryptionFailedError:
        if the data could not be decrypted.
    """
    if not isinstance(private_key, RSAPrivateKey):
        raise UnsupportedAlgorithmError("An RSA private key is required.")
    try:
        return await run_primitive(rsa_oaep_decrypt, private_key, encrypted)
    except ValueError:
        raise DecryptionFailedError(DECRYPTION_FAILED_MSG) from None


async def rsa_encrypt(public_key: RSAPublicKey, data: bytes) -> bytes:
    """
    RSA-encrypt a block of data with OAEP padding and SHA-256.

    There is no chunking: the data must fit within the OAEP size limit of
    the key, which is the key size in bytes minus 66.

    :param public_key:
        The public key with which to encrypt.
    :param data:
        The data to encrypt.
    :raises InvalidParameterError:
        if the data is too long for the key.
    """
    if not isinstance(public_key, RSAPublicKey):
        raise UnsupportedAlgorithmError("An RSA public key is required.")
    try:
        return await run_primitive(rsa_oaep_encrypt, public_key, data)
    except ValueError as e:
        raise InvalidParameterError(
            f"Could not RSA-encrypt {len(data)} bytes: {e}"
        ) from e
