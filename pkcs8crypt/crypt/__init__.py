"""
Thin wrappers around the AES-CBC and RSA-OAEP primitives from
``cryptography``.

Errors raised by the primitives are passed through untouched; translating
them is up to :mod:`pkcs8crypt.envelope`.
"""

from ._util import (
    AES_BLOCK_SIZE,
    RSA_OAEP_PADDING,
    aes_cbc_decrypt,
    aes_cbc_encrypt,
    rsa_oaep_decrypt,
    rsa_oaep_encrypt,
    run_primitive,
)

__all__ = [
    'AES_BLOCK_SIZE',
    'RSA_OAEP_PADDING',
    'aes_cbc_decrypt',
    'aes_cbc_encrypt',
    'rsa_oaep_decrypt',
    'rsa_oaep_encrypt',
    'run_primitive',
]
