#!/usr/bin/env python3
"""
Attribute codec tests: TLV framing, padding and per-attribute layouts
"""

import struct

from pyEAPAKA import (
    AT_MAC, AT_IDENTITY, AT_ANY_ID_REQ, AT_PADDING, AT_VERSION_LIST,
    AttributeDecodeError, FieldValidationError, FramingError,
    GenericAttribute, RandAttribute, AutnAttribute, ResAttribute, AutsAttribute,
    PaddingAttribute, NonceMtAttribute, PermanentIdReqAttribute, MacAttribute,
    NotificationAttribute, AnyIdReqAttribute, IdentityAttribute,
    VersionListAttribute, SelectedVersionAttribute, FullauthIdReqAttribute,
    CounterAttribute, CounterTooSmallAttribute, NonceSAttribute,
    ClientErrorCodeAttribute, KdfInputAttribute, KdfAttribute, IvAttribute,
    EncrDataAttribute, NextPseudonymAttribute, NextReauthIdAttribute,
    CheckcodeAttribute, ResultIndAttribute, BiddingAttribute,
    pack_attribute, decode_attribute,
)
from pyEAPAKA.attributes import unpack_attributes

RAND = bytes(range(16))


def decode(packed):
    return decode_attribute(packed[0], packed[2:])


def test_pack_attribute_padding():
    """Value is zero padded and the length counted in 4-byte words"""
    packed = pack_attribute(200, b'abc')
    assert packed == bytes([200, 2]) + b'abc' + b'\x00\x00\x00'

    packed = pack_attribute(200, b'ab')
    assert packed == bytes([200, 1]) + b'ab'


def test_pack_attribute_limits():
    packed = pack_attribute(200, bytes(1018))
    assert len(packed) == 1020
    assert packed[1] == 255

    try:
        pack_attribute(200, bytes(1019))
        assert False, "1024 byte attribute should not encode"
    except FieldValidationError as e:
        assert 'AT_UNKNOWN (200)' in str(e)

    for attr_type in (300, -1):
        try:
            GenericAttribute(attr_type, b'\x00\x00').pack()
            assert False, f"attribute type {attr_type} should not encode"
        except FieldValidationError as e:
            assert e.field == f"AT_UNKNOWN ({attr_type})"


def test_fixed_size_attributes():
    print("Testing fixed size attributes...")
    assert RandAttribute(RAND).pack() == b'\x01\x05' + RAND + b'\x00\x00'
    assert AutnAttribute(RAND).pack() == b'\x02\x05' + RAND + b'\x00\x00'
    assert NonceMtAttribute(RAND).pack() == b'\x07\x05\x00\x00' + RAND
    assert NonceSAttribute(RAND).pack() == b'\x15\x05\x00\x00' + RAND
    assert IvAttribute(RAND).pack() == b'\x81\x05\x00\x00' + RAND
    assert AutsAttribute(RAND[:14]).pack() == b'\x04\x04' + RAND[:14]

    for attr in (RandAttribute(b'short'), RandAttribute(), AutsAttribute(RAND),
                 IvAttribute(RAND + b'!')):
        try:
            attr.pack()
            assert False, f"{attr!r} should not encode"
        except FieldValidationError:
            pass

    decoded = decode_attribute(RandAttribute.attr_type, RAND + b'\x00\x00')
    assert decoded == RandAttribute(RAND)
    print("✓ Fixed size attributes passed")


def test_mac_attribute():
    assert MacAttribute().mac == bytes(16)
    assert MacAttribute().pack() == b'\x0b\x05' + bytes(18)
    assert MacAttribute(RAND).pack() == b'\x0b\x05\x00\x00' + RAND

    try:
        decode_attribute(AT_MAC, bytes(17))
        assert False, "AT_MAC with 17 bytes should not decode"
    except AttributeDecodeError as e:
        assert e.attr_type == AT_MAC
        assert 'AT_MAC' in str(e)

    try:
        MacAttribute(b'\x01' * 20).pack()
        assert False, "20 byte MAC should not encode"
    except FieldValidationError:
        pass


def test_res_attribute():
    res = b'\x11' * 8
    packed = ResAttribute(res).pack()
    assert packed == b'\x03\x03\x00\x40' + res
    assert decode(packed) == ResAttribute(res)

    # RES lengths are carried in bits and need not be byte aligned
    odd = ResAttribute(b'\xab\xcd\xe0', bit_length=20)
    packed = odd.pack()
    assert packed[2:4] == b'\x00\x14'
    assert decode(packed) == odd

    try:
        ResAttribute(b'\x01\x02', bit_length=64).pack()
        assert False, "RES shorter than its bit length should not encode"
    except FieldValidationError:
        pass

    try:
        decode_attribute(ResAttribute.attr_type, b'\x00\x40\x01\x02')
        assert False, "truncated RES should not decode"
    except AttributeDecodeError:
        pass


def test_string_attributes():
    print("\nTesting string attributes...")
    packed = IdentityAttribute('user@example.com').pack()
    assert packed == b'\x0e\x05\x00\x10' + b'user@example.com'
    assert decode(packed) == IdentityAttribute('user@example.com')

    for attr in (KdfInputAttribute('WLAN'), NextPseudonymAttribute('pseudo-1'),
                 NextReauthIdAttribute('reauth@realm'), IdentityAttribute('')):
        assert decode(attr.pack()) == attr

    try:
        decode_attribute(AT_IDENTITY, b'\x00\x02\xff\xfe')
        assert False, "invalid UTF-8 identity should not decode"
    except AttributeDecodeError as e:
        assert e.attr_type == AT_IDENTITY

    try:
        decode_attribute(AT_IDENTITY, b'\x00\x08abc\x00')
        assert False, "identity longer than the value should not decode"
    except AttributeDecodeError:
        pass
    print("✓ String attributes passed")


def test_reserved_attributes():
    assert AnyIdReqAttribute().pack() == b'\x0d\x01\x00\x00'
    for cls in (PermanentIdReqAttribute, AnyIdReqAttribute, FullauthIdReqAttribute,
                ResultIndAttribute, BiddingAttribute, CounterTooSmallAttribute):
        packed = cls().pack()
        assert len(packed) == 4
        assert decode(packed) == cls()
        # content of the reserved bytes is ignored
        assert decode_attribute(cls.attr_type, b'\xff\xff') == cls()

    try:
        decode_attribute(AT_ANY_ID_REQ, b'\x00')
        assert False, "reserved attribute needs two bytes"
    except AttributeDecodeError:
        pass


def test_integer_attributes():
    assert CounterAttribute(12345).pack() == b'\x13\x01' + struct.pack('!H', 12345)
    assert KdfAttribute(1).pack() == b'\x18\x01\x00\x01'
    for attr in (CounterAttribute(65535), KdfAttribute(1), SelectedVersionAttribute(1),
                 ClientErrorCodeAttribute(0)):
        assert decode(attr.pack()) == attr

    try:
        CounterAttribute(70000).pack()
        assert False, "counter above 16 bits should not encode"
    except FieldValidationError:
        pass


def test_notification_attribute():
    attr = NotificationAttribute(s=True, p=False, code=1026)
    assert attr.pack() == b'\x0c\x01' + struct.pack('!H', 0x8000 | 1026)
    assert decode(attr.pack()) == attr

    success = NotificationAttribute.from_value(32768)
    assert success.s and not success.p and success.code == 0
    assert success.value == 32768

    decoded = decode_attribute(NotificationAttribute.attr_type, b'\x44\x02')
    assert not decoded.s and decoded.p and decoded.code == 0x0402

    try:
        NotificationAttribute(code=0x4000).pack()
        assert False, "code wider than 14 bits should not encode"
    except FieldValidationError:
        pass


def test_version_list_attribute():
    assert VersionListAttribute([1]).pack() == b'\x0f\x02\x00\x02\x00\x01\x00\x00'
    attr = VersionListAttribute([1, 2, 3])
    assert decode(attr.pack()) == attr
    assert decode(VersionListAttribute().pack()).versions == []

    try:
        decode_attribute(AT_VERSION_LIST, b'\x00\x03\x00\x01\x00\x00')
        assert False, "odd version list length should not decode"
    except AttributeDecodeError as e:
        assert e.attr_type == AT_VERSION_LIST


def test_opaque_and_padding_attributes():
    checkcode = CheckcodeAttribute(bytes(range(20)))
    assert len(checkcode.pack()) == 24
    assert decode(checkcode.pack()) == checkcode
    assert decode(CheckcodeAttribute().pack()) == CheckcodeAttribute()

    encr = EncrDataAttribute(RAND * 2)
    assert encr.pack()[:4] == b'\x82\x09\x00\x00'
    assert decode(encr.pack()) == encr

    assert PaddingAttribute(2).pack() == b'\x06\x01\x00\x00'
    assert decode_attribute(AT_PADDING, bytes(6)).length == 6


def test_unknown_attribute():
    attr = decode_attribute(200, b'\x01\x02')
    assert isinstance(attr, GenericAttribute)
    assert attr.attr_type == 200
    assert attr.data == b'\x01\x02'
    assert attr.pack() == b'\xc8\x01\x01\x02'

    # non-skippable unknown types are kept too
    assert decode_attribute(99, b'\x00\x00') == GenericAttribute(99, b'\x00\x00')


def test_length_invariants():
    """Every attribute encodes to a multiple of 4 and decodes to the same value"""
    attrs = [
        RandAttribute(RAND), AutnAttribute(RAND), ResAttribute(b'\x01' * 4),
        AutsAttribute(RAND[:14]), PaddingAttribute(2), NonceMtAttribute(RAND),
        PermanentIdReqAttribute(), MacAttribute(RAND), NotificationAttribute(p=True, code=1031),
        AnyIdReqAttribute(), IdentityAttribute('0555444333222111'),
        VersionListAttribute([1, 2]), SelectedVersionAttribute(1), FullauthIdReqAttribute(),
        CounterAttribute(7), CounterTooSmallAttribute(), NonceSAttribute(RAND),
        ClientErrorCodeAttribute(0), KdfInputAttribute('WLAN'), KdfAttribute(1),
        IvAttribute(RAND), EncrDataAttribute(RAND), NextPseudonymAttribute('p'),
        NextReauthIdAttribute('r@realm'), CheckcodeAttribute(bytes(32)), ResultIndAttribute(),
        BiddingAttribute(), GenericAttribute(250, b'\xaa\xbb'),
    ]
    for attr in attrs:
        packed = attr.pack()
        assert len(packed) % 4 == 0, attr
        assert packed[1] * 4 == len(packed), attr
        assert decode(packed) == attr, attr


def test_unpack_attribute_stream():
    stream = AnyIdReqAttribute().pack() + CounterAttribute(3).pack()
    assert unpack_attributes(stream) == [AnyIdReqAttribute(), CounterAttribute(3)]

    for bad in (b'\x0d\x00\x00\x00',             # zero length
                AnyIdReqAttribute().pack() + b'\x0d',  # truncated header
                b'\x01\x05\x00\x00'):            # longer than the data
        try:
            unpack_attributes(bad)
            assert False, f"{bad.hex()} should not parse"
        except FramingError:
            pass


def main():
    print("pyEAPAKA Attribute Tests")
    print("========================\n")

    test_pack_attribute_padding()
    test_pack_attribute_limits()
    test_fixed_size_attributes()
    test_mac_attribute()
    test_res_attribute()
    test_string_attributes()
    test_reserved_attributes()
    test_integer_attributes()
    test_notification_attribute()
    test_version_list_attribute()
    test_opaque_and_padding_attributes()
    test_unknown_attribute()
    test_length_invariants()
    test_unpack_attribute_stream()

    print("\n✅ All attribute tests passed!")


if __name__ == "__main__":
    main()
