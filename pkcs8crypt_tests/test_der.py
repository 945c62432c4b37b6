import pytest

from pkcs8crypt import der
from pkcs8crypt.der import Tag
from pkcs8crypt.errors import MalformedEncodingError, TruncatedDocumentError


def test_short_form_length():
    element = der.read_element(b'\x04\x03abc')
    assert element.tag == Tag.OCTET_STRING
    assert element.offset == 0
    assert element.value_start == 2
    assert element.length == 3
    assert element.next_offset == 5
    assert element.value(b'\x04\x03abc') == b'abc'
    assert not element.constructed


@pytest.mark.parametrize('length,length_octets', [
    (0x80, b'\x81\x80'),
    (0xff, b'\x81\xff'),
    (0x100, b'\x82\x01\x00'),
    (0x10000, b'\x83\x01\x00\x00'),
])
def test_long_form_length(length, length_octets):
    data = b'\x04' + length_octets + bytes(length)
    element = der.read_element(data)
    assert element.value_start == 1 + len(length_octets)
    assert element.length == length
    assert element.next_offset == len(data)


def test_read_at_offset():
    data = b'\x05\x00\x02\x01\x2a'
    element = der.read_element(data, 2)
    assert element.tag == Tag.INTEGER
    assert der.decode_integer(element.value(data)) == 42


def test_constructed():
    element = der.read_element(b'\x30\x00')
    assert element.constructed
    assert element.length == 0


@pytest.mark.parametrize('data', [
    # indefinite length
    b'\x30\x80\x05\x00\x00\x00',
    # reserved length octet
    b'\x04\xff' + bytes(10),
    # non-minimal long form
    b'\x04\x81\x03abc',
    b'\x04\x82\x00\x03abc',
    # too many length octets
    b'\x04\x89' + bytes(9),
    # length octets missing
    b'\x04',
    b'\x04\x82\x01',
    # value runs past the buffer
    b'\x04\x05abc',
    # multi-octet tag
    b'\x1f\x81\x01\x00',
    # empty
    b'',
])
def test_malformed(data):
    with pytest.raises(MalformedEncodingError) as exc_info:
        der.read_element(data)
    assert not isinstance(exc_info.value, TruncatedDocumentError)


def test_read_past_end():
    with pytest.raises(MalformedEncodingError):
        der.read_element(b'\x05\x00', 2)


def test_child_overruns_parent():
    # inner SEQUENCE holds 3 octets, but its child claims 4
    data = b'\x30\x09\x30\x03\x04\x04abcde'
    outer = der.read_single(data)
    inner = next(der.iter_children(data, outer))
    with pytest.raises(TruncatedDocumentError):
        list(der.iter_children(data, inner))


def test_trailing_data():
    with pytest.raises(TruncatedDocumentError):
        der.read_single(b'\x30\x00\x00')


def test_iter_children():
    data = b'\x30\x08\x02\x01\x01\x05\x00\x04\x01x'
    outer = der.read_single(data)
    tags = [child.tag for child in der.iter_children(data, outer)]
    assert tags == [Tag.INTEGER, Tag.NULL, Tag.OCTET_STRING]


@pytest.mark.parametrize('value,expected', [
    (b'\x00', 0),
    (b'\x7f', 127),
    (b'\x00\x80', 128),
    (b'\x08\x00', 2048),
    (b'\x00\xff\xff', 65535),
])
def test_decode_integer(value, expected):
    assert der.decode_integer(value) == expected


@pytest.mark.parametrize('value', [b'', b'\x80', b'\xff\xff'])
def test_decode_integer_rejects(value):
    with pytest.raises(MalformedEncodingError):
        der.decode_integer(value)


def test_decode_bit_string():
    assert der.decode_bit_string(b'\x00\x01\x02') == b'\x01\x02'
    assert der.decode_bit_string(b'\x00') == b''
    with pytest.raises(MalformedEncodingError):
        der.decode_bit_string(b'')
    with pytest.raises(MalformedEncodingError):
        der.decode_bit_string(b'\x08\xff')


def test_tag_name():
    assert der.tag_name(0x04) == 'OCTET STRING'
    assert der.tag_name(0xa0) == 'tag 0xa0'
