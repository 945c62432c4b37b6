"""
Minimal DER scanner.

This module only knows how to split a buffer into tag/length/value triples.
It does not interpret tags beyond the handful of universal types listed in
:class:`Tag`; giving meaning to the values is the business of
:mod:`pkcs8crypt.keybag`.

Only the definite-length, low-tag-number subset of DER is supported.
"""

import enum
from dataclasses import dataclass
from typing import Iterator, Optional

from .errors import MalformedEncodingError, TruncatedDocumentError

__all__ = [
    'Tag',
    'DERElement',
    'read_element',
    'read_single',
    'iter_children',
    'decode_integer',
    'decode_bit_string',
    'tag_name',
]


MAX_LENGTH_OCTETS = 8
"""
Maximal number of octets in a long-form length.
Anything larger cannot describe a buffer we are able to address.
"""


@enum.unique
class Tag(enum.IntEnum):
    """Universal tags that the key bag decoder cares about."""

    INTEGER = 0x02
    BIT_STRING = 0x03
    OCTET_STRING = 0x04
    NULL = 0x05
    OBJECT_IDENTIFIER = 0x06
    SEQUENCE = 0x30
    SET = 0x31


def tag_name(tag: int) -> str:
    try:
        return Tag(tag).name.replace('_', ' ')
    except ValueError:
        return f'tag 0x{tag:02x}'


@dataclass(frozen=True)
class DERElement:
    """
    A single decoded DER element.

    The value is not copied out of the source buffer; only its bounds are
    recorded.
    """

    tag: int
    """The identifier octet."""

    offset: int
    """Offset of the identifier octet in the source buffer."""

    value_start: int
    """Offset of the first value octet."""

    value_end: int
    """Offset one past the last value octet."""

    @property
    def next_offset(self) -> int:
        return self.value_end

    @property
    def length(self) -> int:
        return self.value_end - self.value_start

    @property
    def constructed(self) -> bool:
        return bool(self.tag & 0x20)

    def value(self, buffer) -> bytes:
        return bytes(buffer[self.value_start:self.value_end])


def read_element(buffer, offset: int = 0,
                 end: Optional[int] = None) -> DERElement:
    """
    Read the DER element starting at ``offset``.

    :param buffer:
        The source buffer (any bytes-like object).
    :param offset:
        Offset of the identifier octet.
    :param end:
        Scan boundary, i.e. the end of the enclosing element's value.
        Defaults to the end of the buffer.
    :return:
        A :class:`DERElement`.
    :raises MalformedEncodingError:
        if the buffer runs out, the length is indefinite or not
        minimally encoded, or the value extends past the end of the buffer.
    :raises TruncatedDocumentError:
        if the value fits in the buffer, but overruns ``end``.
    """
    buf_len = len(buffer)
    if end is None:
        end = buf_len
    if offset < 0 or offset >= end:
        raise MalformedEncodingError(
            f"No DER element at offset {offset}: end of data reached."
        )
    tag = buffer[offset]
    if tag & 0x1f == 0x1f:
        raise MalformedEncodingError(
            f"Multi-octet tag at offset {offset} is not supported."
        )
    if offset + 1 >= buf_len:
        raise MalformedEncodingError(
            f"Missing length octet for element at offset {offset}."
        )

    first = buffer[offset + 1]
    pos = offset + 2
    if first < 0x80:
        length = first
    elif first == 0x80:
        raise MalformedEncodingError(
            f"Indefinite length for element at offset {offset}; "
            f"not allowed in DER."
        )
    elif first == 0xff:
        raise MalformedEncodingError(
            f"Reserved length octet 0xff for element at offset {offset}."
        )
    else:
        num_octets = first & 0x7f
        if num_octets > MAX_LENGTH_OCTETS:
            raise MalformedEncodingError(
                f"Length of element at offset {offset} is encoded in "
                f"{num_octets} octets, which is too large."
            )
        if pos + num_octets > buf_len:
            raise MalformedEncodingError(
                f"Truncated length for element at offset {offset}."
            )
        length_octets = bytes(buffer[pos:pos + num_octets])
        pos += num_octets
        length = int.from_bytes(length_octets, 'big')
        if length_octets[0] == 0 or length < 0x80:
            raise MalformedEncodingError(
                f"Length of element at offset {offset} is not minimally "
                f"encoded."
            )

    value_end = pos + length
    if value_end > buf_len:
        raise MalformedEncodingError(
            f"{tag_name(tag)} at offset {offset} declares {length} value "
            f"octets, but only {buf_len - pos} remain."
        )
    if value_end > end:
        raise TruncatedDocumentError(
            f"{tag_name(tag)} at offset {offset} extends {value_end - end} "
            f"octet(s) past the end of its enclosing element."
        )
    return DERElement(
        tag=tag, offset=offset, value_start=pos, value_end=value_end
    )


def read_single(buffer) -> DERElement:
    """
    Read a buffer that must consist of exactly one DER element.

    :raises TruncatedDocumentError:
        if there is data after the element.
    """
    element = read_element(buffer, 0)
    if element.next_offset != len(buffer):
        raise TruncatedDocumentError(
            f"{len(buffer) - element.next_offset} octet(s) of trailing data "
            f"after {tag_name(element.tag)}."
        )
    return element


def iter_children(buffer, parent: DERElement) -> Iterator[DERElement]:
    """
    Iterate over the direct children of a constructed element.

    Every child is bounded by the parent's value, and the children together
    always consume the parent's value exactly.
    """
    pos = parent.value_start
    while pos < parent.value_end:
        child = read_element(buffer, pos, parent.value_end)
        yield child
        pos = child.next_offset


def decode_integer(value: bytes) -> int:
    """
    Decode the value octets of an INTEGER. Only non-negative values are
    accepted.
    """
    if not value:
        raise MalformedEncodingError("INTEGER with empty value.")
    result = int.from_bytes(value, 'big', signed=True)
    if result < 0:
        raise MalformedEncodingError(
            f"Negative INTEGER {result} where a non-negative one is required."
        )
    return result


def decode_bit_string(value: bytes) -> bytes:
    """
    Strip the leading "unused bits" octet off the value of a BIT STRING.
    """
    if not value:
        raise MalformedEncodingError("BIT STRING with empty value.")
    unused_bits = value[0]
    if unused_bits > 7 or (unused_bits and len(value) == 1):
        raise MalformedEncodingError(
            f"Invalid unused bit count {unused_bits} in BIT STRING."
        )
    return value[1:]
