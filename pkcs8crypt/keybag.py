"""
Decoders for the two PKCS#8 document shapes this library deals with.

:func:`decode` flattens any DER document into ordered lists of object
identifiers, byte strings and integers. It is useful for inspecting a
document, but the decryption pipeline relies on the typed shapes
:class:`EncryptedKeyBag` and :class:`PrivateKeyInfo` instead, which check
the tag of every element they read.

The encrypted shape is the one OpenSSL produces for PBES2 keys::

    EncryptedPrivateKeyInfo ::= SEQUENCE {
        encryptionAlgorithm SEQUENCE {
            algorithm  OBJECT IDENTIFIER,  -- id-PBES2
            parameters SEQUENCE {
                keyDerivationFunc SEQUENCE {
                    algorithm  OBJECT IDENTIFIER,  -- id-PBKDF2
                    parameters SEQUENCE {
                        salt           OCTET STRING,
                        iterationCount INTEGER,
                        keyLength      INTEGER OPTIONAL,
                        prf            SEQUENCE {
                            algorithm  OBJECT IDENTIFIER,
                            parameters NULL OPTIONAL
                        } OPTIONAL  -- hmacWithSHA1 if absent
                    }
                },
                encryptionScheme SEQUENCE {
                    algorithm  OBJECT IDENTIFIER,  -- aes256-CBC
                    iv         OCTET STRING
                }
            }
        },
        encryptedData OCTET STRING
    }
"""

import enum
from dataclasses import dataclass
from typing import List, Optional, Tuple

from asn1crypto import algos, core
from asn1crypto import keys as asn1_keys

from . import der
from .der import Tag
from .errors import MalformedEncodingError, UnsupportedAlgorithmError
from .kdf import MAX_ITERATIONS

__all__ = [
    'AlgorithmId',
    'SUPPORTED_BAG_ALGORITHMS',
    'KeyBagContents',
    'decode',
    'EncryptedKeyBag',
    'PrivateKeyInfo',
    'describe_oid',
]


@enum.unique
class AlgorithmId(enum.Enum):
    """
    Raw DER value octets of the object identifiers we know about.
    """

    PBES2 = bytes.fromhex('2a864886f70d01050d')
    PBKDF2 = bytes.fromhex('2a864886f70d01050c')
    HMAC_WITH_SHA1 = bytes.fromhex('2a864886f70d0207')
    HMAC_WITH_SHA256 = bytes.fromhex('2a864886f70d0209')
    AES_256_CBC = bytes.fromhex('60864801650304012a')
    RSA_ENCRYPTION = bytes.fromhex('2a864886f70d010101')

    @property
    def dotted(self) -> str:
        return _oid_object(self.value).dotted


SUPPORTED_BAG_ALGORITHMS: Tuple[bytes, ...] = (
    AlgorithmId.PBES2.value,
    AlgorithmId.PBKDF2.value,
    AlgorithmId.HMAC_WITH_SHA256.value,
    AlgorithmId.AES_256_CBC.value,
)
"""
The only combination of algorithms supported in encrypted key bags,
in document order: encryption scheme, key derivation function,
pseudorandom function and cipher.
"""

# used to put names on OIDs in messages; first match wins
_OID_NAME_MAPS = (
    asn1_keys.PublicKeyAlgorithmId,
    algos.EncryptionAlgorithmId,
    algos.KdfAlgorithmId,
    algos.HmacAlgorithmId,
)


def _oid_object(value: bytes) -> core.ObjectIdentifier:
    if not value or len(value) > 0x7f:
        raise MalformedEncodingError(
            f"Object identifier of length {len(value)} is not supported."
        )
    encoded = bytes((Tag.OBJECT_IDENTIFIER, len(value))) + value
    return core.ObjectIdentifier.load(encoded)


def describe_oid(value: bytes) -> str:
    """
    Render the value octets of an object identifier for humans, e.g.
    ``'pbes2 (1.2.840.113549.1.5.13)'``.
    """
    dotted = _oid_object(value).dotted
    for oid_class in _OID_NAME_MAPS:
        name = oid_class.map(dotted)
        if name != dotted:
            return f'{name} ({dotted})'
    return dotted


@dataclass(frozen=True)
class KeyBagContents:
    """
    Positional projection of a DER document.

    Each list preserves the order in which its elements appear in a
    depth-first traversal of the document.
    """

    oids: Tuple[bytes, ...]
    """Value octets of every OBJECT IDENTIFIER."""

    strings: Tuple[bytes, ...]
    """
    Values of every OCTET STRING and BIT STRING. The "unused bits" octet
    of BIT STRING values is dropped.
    """

    numbers: Tuple[int, ...]
    """Values of every INTEGER."""


def _collect(buffer, parent: der.DERElement, oids: List[bytes],
             strings: List[bytes], numbers: List[int]):
    for element in der.iter_children(buffer, parent):
        tag = element.tag
        if tag == Tag.OBJECT_IDENTIFIER:
            oids.append(element.value(buffer))
        elif tag == Tag.OCTET_STRING:
            strings.append(element.value(buffer))
        elif tag == Tag.BIT_STRING:
            strings.append(der.decode_bit_string(element.value(buffer)))
        elif tag == Tag.INTEGER:
            numbers.append(der.decode_integer(element.value(buffer)))
        elif tag in (Tag.SEQUENCE, Tag.SET):
            _collect(buffer, element, oids, strings, numbers)


def decode(data: bytes) -> KeyBagContents:
    """
    Traverse a DER document depth-first and sort its primitive values
    into a :class:`KeyBagContents` object.

    Tags other than the ones listed on :class:`KeyBagContents` are skipped,
    as are the contents of constructed elements that are not a SEQUENCE or
    a SET.

    :param data:
        A DER document whose outermost element is a SEQUENCE.
    :raises MalformedEncodingError:
        if the document is not valid DER.
    :raises TruncatedDocumentError:
        if a nested element does not fit its parent exactly.
    """
    outer = der.read_single(data)
    if outer.tag != Tag.SEQUENCE:
        raise MalformedEncodingError(
            f"Expected a SEQUENCE as outermost element, "
            f"found {der.tag_name(outer.tag)}."
        )
    oids: List[bytes] = []
    strings: List[bytes] = []
    numbers: List[int] = []
    _collect(data, outer, oids, strings, numbers)
    return KeyBagContents(
        oids=tuple(oids), strings=tuple(strings), numbers=tuple(numbers)
    )


class _ChildReader:
    # Reads the children of a constructed element one by one,
    # checking each one's tag.

    def __init__(self, buffer, parent: der.DERElement, what: str):
        if parent.tag != Tag.SEQUENCE:
            raise MalformedEncodingError(
                f"{what}: expected SEQUENCE, found {der.tag_name(parent.tag)}."
            )
        self.buffer = buffer
        self.pos = parent.value_start
        self.end = parent.value_end
        self.what = what

    def _peek_tag(self) -> Optional[int]:
        return self.buffer[self.pos] if self.pos < self.end else None

    def expect(self, tag: Tag, field: str) -> der.DERElement:
        if self.pos >= self.end:
            raise MalformedEncodingError(f"{self.what}: missing {field}.")
        element = der.read_element(self.buffer, self.pos, self.end)
        if element.tag != tag:
            raise MalformedEncodingError(
                f"{self.what}: expected {der.tag_name(tag)} for {field}, "
                f"found {der.tag_name(element.tag)}."
            )
        self.pos = element.next_offset
        return element

    def optional(self, tag: Tag, field: str) -> Optional[der.DERElement]:
        if self._peek_tag() == tag:
            return self.expect(tag, field)
        return None

    def expect_value(self, tag: Tag, field: str) -> bytes:
        return self.expect(tag, field).value(self.buffer)

    def expect_integer(self, field: str) -> int:
        return der.decode_integer(self.expect_value(Tag.INTEGER, field))

    def skip_rest(self):
        while self.pos < self.end:
            self.pos = der.read_element(
                self.buffer, self.pos, self.end
            ).next_offset

    def finish(self):
        if self.pos != self.end:
            element = der.read_element(self.buffer, self.pos, self.end)
            raise MalformedEncodingError(
                f"{self.what}: unexpected {der.tag_name(element.tag)} "
                f"at offset {element.offset}."
            )


@dataclass(frozen=True)
class EncryptedKeyBag:
    """
    A PBES2-encrypted PKCS#8 private key, as produced by
    ``openssl genpkey -aes-256-cbc``.
    """

    scheme_oid: bytes
    kdf_oid: bytes
    salt: bytes
    iterations: int
    key_length: Optional[int]
    prf_oid: bytes
    cipher_oid: bytes
    iv: bytes
    encrypted_data: bytes

    @property
    def oids(self) -> Tuple[bytes, ...]:
        """
        The algorithm identifiers of the bag, in document order.
        """
        return self.scheme_oid, self.kdf_oid, self.prf_oid, self.cipher_oid

    @classmethod
    def from_der(cls, data: bytes) -> 'EncryptedKeyBag':
        """
        Parse an encrypted key bag.

        The structure is validated, but the algorithms are not; see
        :meth:`check_supported`.

        :raises MalformedEncodingError:
            if the data does not have the shape of a PBES2 key bag.
        """
        outer = _ChildReader(data, der.read_single(data), 'Encrypted key bag')
        algo = _ChildReader(
            data, outer.expect(Tag.SEQUENCE, 'encryption algorithm'),
            'Encryption algorithm'
        )
        encrypted_data = outer.expect_value(Tag.OCTET_STRING, 'encrypted data')
        outer.finish()

        scheme_oid = algo.expect_value(Tag.OBJECT_IDENTIFIER, 'scheme')
        if scheme_oid != AlgorithmId.PBES2.value:
            # don't bother looking at the parameters of other schemes
            raise UnsupportedAlgorithmError(
                f"Unsupported key encryption scheme "
                f"{describe_oid(scheme_oid)}."
            )
        pbes2_params = _ChildReader(
            data, algo.expect(Tag.SEQUENCE, 'PBES2 parameters'),
            'PBES2 parameters'
        )
        algo.finish()

        kdf = _ChildReader(
            data, pbes2_params.expect(Tag.SEQUENCE, 'key derivation function'),
            'Key derivation function'
        )
        scheme = _ChildReader(
            data, pbes2_params.expect(Tag.SEQUENCE, 'encryption scheme'),
            'Encryption scheme'
        )
        pbes2_params.finish()

        kdf_oid = kdf.expect_value(Tag.OBJECT_IDENTIFIER, 'algorithm')
        kdf_params = _ChildReader(
            data, kdf.expect(Tag.SEQUENCE, 'parameters'), 'PBKDF2 parameters'
        )
        kdf.finish()
        salt = kdf_params.expect_value(Tag.OCTET_STRING, 'salt')
        iterations = kdf_params.expect_integer('iteration count')
        key_length_element = kdf_params.optional(Tag.INTEGER, 'key length')
        key_length = None
        if key_length_element is not None:
            key_length = der.decode_integer(key_length_element.value(data))
        prf_element = kdf_params.optional(Tag.SEQUENCE, 'PRF')
        kdf_params.finish()
        if prf_element is None:
            prf_oid = AlgorithmId.HMAC_WITH_SHA1.value
        else:
            prf = _ChildReader(data, prf_element, 'PRF')
            prf_oid = prf.expect_value(Tag.OBJECT_IDENTIFIER, 'algorithm')
            prf.optional(Tag.NULL, 'parameters')
            prf.finish()

        cipher_oid = scheme.expect_value(Tag.OBJECT_IDENTIFIER, 'algorithm')
        iv = scheme.expect_value(Tag.OCTET_STRING, 'IV')
        scheme.finish()

        return cls(
            scheme_oid=scheme_oid,
            kdf_oid=kdf_oid,
            salt=salt,
            iterations=iterations,
            key_length=key_length,
            prf_oid=prf_oid,
            cipher_oid=cipher_oid,
            iv=iv,
            encrypted_data=encrypted_data,
        )

    def check_supported(self):
        """
        Make sure that the bag uses PBES2 with PBKDF2, HMAC-SHA256 and
        AES-256-CBC.

        :raises UnsupportedAlgorithmError:
            if any of the algorithms differ.
        :raises MalformedEncodingError:
            if the parameters do not make sense for these algorithms.
        """
        if self.oids != SUPPORTED_BAG_ALGORITHMS:
            found = ', '.join(describe_oid(oid) for oid in self.oids)
            raise UnsupportedAlgorithmError(
                f"Unexpected algorithm ID(s) in encrypted private key bag: "
                f"{found}."
            )
        if self.key_length is not None and self.key_length != 32:
            raise UnsupportedAlgorithmError(
                f"Key length {self.key_length} in PBKDF2 parameters does not "
                f"match AES-256."
            )
        if not 1 <= self.iterations <= MAX_ITERATIONS:
            raise MalformedEncodingError(
                f"PBKDF2 iteration count {self.iterations} is out of range; "
                f"expected a value between 1 and {MAX_ITERATIONS}."
            )
        if len(self.iv) != 16:
            raise MalformedEncodingError(
                f"AES-CBC IV must be 16 bytes long, not {len(self.iv)}."
            )


@dataclass(frozen=True)
class PrivateKeyInfo:
    """
    An unencrypted PKCS#8 private key.
    """

    version: int
    algorithm_oid: bytes
    private_key: bytes

    @classmethod
    def from_der(cls, data: bytes) -> 'PrivateKeyInfo':
        """
        Parse a PKCS#8 ``PrivateKeyInfo`` structure.

        Algorithm parameters and trailing optional fields (attributes, public
        key) are checked for well-formedness, but otherwise ignored.

        :raises MalformedEncodingError:
            if the data does not have the shape of a PKCS#8 key.
        """
        outer = _ChildReader(data, der.read_single(data), 'Private key info')
        version = outer.expect_integer('version')
        algo = _ChildReader(
            data, outer.expect(Tag.SEQUENCE, 'algorithm'), 'Key algorithm'
        )
        private_key = outer.expect_value(Tag.OCTET_STRING, 'private key')
        outer.skip_rest()

        algorithm_oid = algo.expect_value(Tag.OBJECT_IDENTIFIER, 'algorithm')
        algo.skip_rest()
        return cls(
            version=version, algorithm_oid=algorithm_oid,
            private_key=private_key
        )

    def check_rsa(self):
        """
        :raises UnsupportedAlgorithmError:
            if this is not an RSA key.
        """
        if self.algorithm_oid != AlgorithmId.RSA_ENCRYPTION.value:
            raise UnsupportedAlgorithmError(
                f"Unexpected algorithm ID in private key: "
                f"{describe_oid(self.algorithm_oid)}."
            )
