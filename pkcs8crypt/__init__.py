"""
Decryption of OpenSSL-encrypted PKCS#8 private keys, plus AES-256-CBC,
password-based AES and RSA-OAEP encryption helpers.
"""

from .envelope import (
    aes_decrypt,
    aes_encrypt,
    aes_password_decrypt,
    aes_password_encrypt,
    decrypt_private_key,
    rsa_decrypt,
    rsa_encrypt,
)
from .kdf import AESKey, generate_aes_key
from .keys import extract_private_key, extract_public_key
from .version import __version__

__all__ = [
    '__version__',
    'AESKey',
    'generate_aes_key',
    'aes_decrypt',
    'aes_encrypt',
    'aes_password_decrypt',
    'aes_password_encrypt',
    'decrypt_private_key',
    'rsa_decrypt',
    'rsa_encrypt',
    'extract_private_key',
    'extract_public_key',
]
