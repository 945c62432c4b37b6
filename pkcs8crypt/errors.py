"""
Exception classes raised by the key bag decoder and the encryption routines.

All of these subclass :class:`Pkcs8CryptError`, which is itself a
:class:`ValueError`.
"""

__all__ = [
    'Pkcs8CryptError',
    'MalformedEncodingError',
    'TruncatedDocumentError',
    'UnsupportedAlgorithmError',
    'InvalidParameterError',
    'SectionNotFoundError',
    'DecryptionFailedError',
]


class Pkcs8CryptError(ValueError):
    def __init__(self, msg: str, *args):
        self.msg = msg
        super().__init__(msg, *args)


class MalformedEncodingError(Pkcs8CryptError):
    """
    DER data is structurally invalid (truncated, bad length, unexpected tag).
    """


class TruncatedDocumentError(MalformedEncodingError):
    """
    A nested element does not fit exactly inside its parent.
    """


class UnsupportedAlgorithmError(Pkcs8CryptError):
    """
    An algorithm identifier does not match the supported combination.
    """


class InvalidParameterError(Pkcs8CryptError):
    """
    A caller-supplied parameter is missing or has the wrong size.
    """


class SectionNotFoundError(Pkcs8CryptError):
    """
    The requested section is not present in the PEM content.
    """


class DecryptionFailedError(Pkcs8CryptError):
    """
    Decryption failed. Deliberately vague: the message never says whether
    the key was wrong or the data was corrupt.
    """
