import asyncio
import secrets

from cryptography.hazmat.primitives import hashes, padding
from cryptography.hazmat.primitives.asymmetric.padding import MGF1, OAEP
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

AES_BLOCK_SIZE = 16

# RSAES-OAEP with SHA-256 for both the hash and MGF1, and no label
RSA_OAEP_PADDING = OAEP(
    mgf=MGF1(algorithm=hashes.SHA256()), algorithm=hashes.SHA256(), label=None
)


async def run_primitive(func, *args):
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, func, *args)


def aes_cbc_decrypt(key, data, iv):
    cipher = Cipher(algorithms.AES(key), modes.CBC(iv))
    decryptor = cipher.decryptor()
    plaintext = decryptor.update(data) + decryptor.finalize()
    unpadder = padding.PKCS7(128).unpadder()
    return unpadder.update(plaintext) + unpadder.finalize()


def aes_cbc_encrypt(key, data, iv=None):
    if iv is None:
        iv = secrets.token_bytes(AES_BLOCK_SIZE)
    cipher = Cipher(algorithms.AES(key), modes.CBC(iv))
    encryptor = cipher.encryptor()
    padder = padding.PKCS7(128).padder()
    data = padder.update(data) + padder.finalize()
    return iv, encryptor.update(data) + encryptor.finalize()


def rsa_oaep_encrypt(public_key, data):
    return public_key.encrypt(data, RSA_OAEP_PADDING)


def rsa_oaep_decrypt(private_key, data):
    return private_key.decrypt(data, RSA_OAEP_PADDING)
