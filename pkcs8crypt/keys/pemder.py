import base64
import binascii
import re
from typing import List, Optional, Tuple

from asn1crypto import pem
from cryptography.hazmat.primitives.asymmetric.rsa import (
    RSAPrivateKey,
    RSAPublicKey,
)

from ..envelope import (
    decrypt_private_key,
    import_private_key,
    import_public_key,
)
from ..errors import (
    InvalidParameterError,
    MalformedEncodingError,
    SectionNotFoundError,
    UnsupportedAlgorithmError,
)

__all__ = [
    'extract_section',
    'decode_pem_body',
    'extract_private_key',
    'extract_public_key',
    'load_private_key_from_pemder',
    'load_private_key_from_pemder_data',
    'load_public_key_from_pemder',
    'load_public_key_from_pemder_data',
]

NEWLINE = re.compile(r'\r?\n')

PRIVATE_KEY_SECTION = 'PRIVATE KEY'
PUBLIC_KEY_SECTION = 'PUBLIC KEY'
ENCRYPTED_PREFIX = 'ENCRYPTED '


def extract_section(pem_text: str, name: str) -> Tuple[str, List[str]]:
    """
    Extract a section from PEM content.

    :param pem_text:
        The PEM content.
    :param name:
        The name of the section to extract, typically ``PUBLIC KEY`` or
        ``PRIVATE KEY``. Prefixed section names also match, e.g.
        ``ENCRYPTED PRIVATE KEY`` matches ``PRIVATE KEY``.
    :return:
        A tuple consisting of the full section name (the header line minus
        the ``-----BEGIN`` prefix and ``-----`` suffix) and the lines of the
        section, not including the header and footer lines.
    :raises SectionNotFoundError:
        if there is no such section.
    """
    lines = NEWLINE.split(pem_text)
    for begin_ix, line in enumerate(lines):
        if line.startswith('-----BEGIN ') and line.endswith(f' {name}-----'):
            break
    else:
        raise SectionNotFoundError(
            f"Section [{name}] not found in PEM content."
        )
    header = line[11:-5]
    footer = f'-----END {header}-----'
    try:
        end_ix = lines.index(footer, begin_ix + 1)
    except ValueError:
        raise MalformedEncodingError(
            f"Section [{header}] is not terminated by '{footer}'."
        )
    return header, lines[begin_ix + 1:end_ix]


def decode_pem_body(lines: List[str]) -> bytes:
    try:
        return base64.b64decode(
            ''.join(line.strip() for line in lines), validate=True
        )
    except binascii.Error as e:
        raise MalformedEncodingError(f"Invalid base64 in PEM body: {e}") from e


def _pem_text(key_bytes: bytes) -> str:
    try:
        return key_bytes.decode('ascii')
    except UnicodeDecodeError as e:
        raise MalformedEncodingError(
            f"PEM data is not ASCII text: {e}"
        ) from e


async def extract_private_key(pem_text: str,
                              passphrase: Optional[str] = None
                              ) -> RSAPrivateKey:
    """
    Extract the private key from PEM content, decrypting it using
    ``passphrase`` if it is encrypted.

    :param pem_text:
        The PEM content.
    :param passphrase:
        The encryption passphrase, if the key is encrypted.
    :return:
        An RSA private key.
    :raises InvalidParameterError:
        if the key is encrypted and no passphrase was supplied.
    """
    header, lines = extract_section(pem_text, PRIVATE_KEY_SECTION)
    data = decode_pem_body(lines)
    if header == PRIVATE_KEY_SECTION:
        return await import_private_key(data)
    elif header != ENCRYPTED_PREFIX + PRIVATE_KEY_SECTION:
        # e.g. traditional 'RSA PRIVATE KEY' sections
        raise UnsupportedAlgorithmError(
            f"Unsupported private key format [{header}]; "
            f"expected PKCS#8."
        )
    elif passphrase is None:
        raise InvalidParameterError(
            "Passphrase required for encrypted private key."
        )
    else:
        return await decrypt_private_key(data, passphrase)


async def extract_public_key(pem_text: str) -> RSAPublicKey:
    """
    Extract the public key from PEM content.

    :param pem_text:
        The PEM content.
    :return:
        An RSA public key.
    """
    _, lines = extract_section(pem_text, PUBLIC_KEY_SECTION)
    return await import_public_key(decode_pem_body(lines))


async def load_private_key_from_pemder(key_file,
                                       passphrase: Optional[str]
                                       ) -> RSAPrivateKey:
    """
    A convenience function to load PEM/DER-encoded keys from files.

    :param key_file:
        File to read the key from.
    :param passphrase:
        Key passphrase.
    :return:
        An RSA private key.
    """
    with open(key_file, 'rb') as f:
        key_bytes = f.read()
    return await load_private_key_from_pemder_data(
        key_bytes, passphrase=passphrase
    )


async def load_private_key_from_pemder_data(key_bytes: bytes,
                                            passphrase: Optional[str]
                                            ) -> RSAPrivateKey:
    """
    A convenience function to load PEM/DER-encoded keys from binary data.

    DER data is taken to be an encrypted key bag if a passphrase is given,
    and an unencrypted PKCS#8 key otherwise.

    :param key_bytes:
        ``bytes`` object to read the key from.
    :param passphrase:
        Key passphrase.
    :return:
        An RSA private key.
    """
    if pem.detect(key_bytes):
        return await extract_private_key(
            _pem_text(key_bytes), passphrase=passphrase
        )
    elif passphrase is not None:
        return await decrypt_private_key(key_bytes, passphrase)
    else:
        return await import_private_key(key_bytes)


async def load_public_key_from_pemder(key_file) -> RSAPublicKey:
    """
    A convenience function to load a PEM/DER-encoded public key from a file.

    :param key_file:
        File to read the key from.
    :return:
        An RSA public key.
    """
    with open(key_file, 'rb') as f:
        key_bytes = f.read()
    return await load_public_key_from_pemder_data(key_bytes)


async def load_public_key_from_pemder_data(key_bytes: bytes) -> RSAPublicKey:
    if pem.detect(key_bytes):
        return await extract_public_key(_pem_text(key_bytes))
    else:
        return await import_public_key(key_bytes)
