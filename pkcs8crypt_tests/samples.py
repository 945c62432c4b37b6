from typing import Optional

from asn1crypto import algos, core, pem
from asn1crypto import keys as asn1_keys
from cryptography.hazmat.primitives import hashes, padding, serialization
from cryptography.hazmat.primitives.asymmetric import ec, rsa
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

TEST_PASSPHRASE = 'secret'
TEST_SALT = bytes(range(16))
TEST_IV = bytes(range(16, 32))
# keep the tests fast; OpenSSL defaults to 2048
TEST_ITERATIONS = 1000

RSA_KEY = rsa.generate_private_key(public_exponent=65537, key_size=2048)
OTHER_RSA_KEY = rsa.generate_private_key(public_exponent=65537, key_size=2048)
EC_KEY = ec.generate_private_key(ec.SECP256R1())


def pkcs8_der(private_key) -> bytes:
    return private_key.private_bytes(
        serialization.Encoding.DER,
        serialization.PrivateFormat.PKCS8,
        serialization.NoEncryption(),
    )


def pkcs8_pem(private_key) -> str:
    return private_key.private_bytes(
        serialization.Encoding.PEM,
        serialization.PrivateFormat.PKCS8,
        serialization.NoEncryption(),
    ).decode('ascii')


def spki_pem(public_key) -> str:
    return public_key.public_bytes(
        serialization.Encoding.PEM,
        serialization.PublicFormat.SubjectPublicKeyInfo,
    ).decode('ascii')


def spki_der(public_key) -> bytes:
    return public_key.public_bytes(
        serialization.Encoding.DER,
        serialization.PublicFormat.SubjectPublicKeyInfo,
    )


def _aes_cbc_encrypt(key, data, iv):
    padder = padding.PKCS7(128).padder()
    padded = padder.update(data) + padder.finalize()
    encryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).encryptor()
    return encryptor.update(padded) + encryptor.finalize()


def pbes2_bag(encrypted_data: bytes, salt: bytes = TEST_SALT,
              iv: bytes = TEST_IV, iterations: int = TEST_ITERATIONS,
              prf: str = 'sha256', key_length: Optional[int] = None) -> bytes:
    """
    Wrap already encrypted key data in an EncryptedPrivateKeyInfo in the
    shape that ``openssl genpkey -aes-256-cbc`` emits. The parameters are
    written as given, whether or not they make sense.
    """
    pbkdf2_params = {
        'salt': algos.Pbkdf2Salt(name='specified', value=salt),
        'iteration_count': iterations,
        'prf': algos.HmacAlgorithm(
            {'algorithm': prf, 'parameters': core.Null()}
        ),
    }
    if key_length is not None:
        pbkdf2_params['key_length'] = key_length
    encryption_algorithm = algos.EncryptionAlgorithm({
        'algorithm': 'pbes2',
        'parameters': algos.Pbes2Params({
            'key_derivation_func': algos.KdfAlgorithm({
                'algorithm': 'pbkdf2',
                'parameters': algos.Pbkdf2Params(pbkdf2_params),
            }),
            'encryption_scheme': algos.EncryptionAlgorithm({
                'algorithm': 'aes256_cbc',
                'parameters': core.OctetString(iv),
            }),
        }),
    })
    return asn1_keys.EncryptedPrivateKeyInfo({
        'encryption_algorithm': encryption_algorithm,
        'encrypted_data': encrypted_data,
    }).dump()


def encrypt_pkcs8(private_key_der: bytes, passphrase: str = TEST_PASSPHRASE,
                  salt: bytes = TEST_SALT, iv: bytes = TEST_IV,
                  iterations: int = TEST_ITERATIONS, prf: str = 'sha256',
                  key_length: Optional[int] = None) -> bytes:
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(), length=32, salt=salt, iterations=iterations
    )
    key = kdf.derive(passphrase.encode('utf-8'))
    encrypted = _aes_cbc_encrypt(key, private_key_der, iv)
    return pbes2_bag(
        encrypted, salt=salt, iv=iv, iterations=iterations, prf=prf,
        key_length=key_length,
    )


def encrypted_pkcs8_pem(private_key, passphrase: str = TEST_PASSPHRASE,
                        line_ending: str = '\n') -> str:
    der_bytes = encrypt_pkcs8(pkcs8_der(private_key), passphrase=passphrase)
    text = pem.armor('ENCRYPTED PRIVATE KEY', der_bytes).decode('ascii')
    return text.replace('\n', line_ending)


RSA_PKCS8_DER = pkcs8_der(RSA_KEY)
RSA_ENCRYPTED_BAG = encrypt_pkcs8(RSA_PKCS8_DER)
RSA_ENCRYPTED_PEM = encrypted_pkcs8_pem(RSA_KEY)
RSA_PUBLIC_PEM = spki_pem(RSA_KEY.public_key())
