"""
EAP-AKA attribute codec (RFC 4187 Section 10, RFC 5448 Sections 3-4)

Every attribute is framed as Type (1 byte) | Length (1 byte, in 4-byte words)
| Value, zero padded to a 4-byte boundary. Each attribute class knows how to
build its Value and how to read it back; unknown types are carried verbatim
in GenericAttribute so that packets with newer attributes still round-trip.
"""

import logging
import struct

from .constants import (
    AT_RAND, AT_AUTN, AT_RES, AT_AUTS, AT_PADDING, AT_NONCE_MT,
    AT_PERMANENT_ID_REQ, AT_MAC, AT_NOTIFICATION, AT_ANY_ID_REQ, AT_IDENTITY,
    AT_VERSION_LIST, AT_SELECTED_VERSION, AT_FULLAUTH_ID_REQ, AT_COUNTER,
    AT_COUNTER_TOO_SMALL, AT_NONCE_S, AT_CLIENT_ERROR_CODE, AT_KDF_INPUT,
    AT_KDF, AT_IV, AT_ENCR_DATA, AT_NEXT_PSEUDONYM, AT_NEXT_REAUTH_ID,
    AT_CHECKCODE, AT_RESULT_IND, AT_BIDDING,
    ATTRIBUTE_HEADER_LENGTH, MAX_ATTRIBUTE_LENGTH,
    RAND_LENGTH, AUTN_LENGTH, AUTS_LENGTH, MAC_LENGTH, NONCE_LENGTH, IV_LENGTH,
    attribute_name,
)
from .errors import AttributeDecodeError, FieldValidationError, FramingError

logger = logging.getLogger(__name__)

RESERVED = b'\x00\x00'

# AT_NOTIFICATION bit layout
NOTIFICATION_S_BIT = 0x8000
NOTIFICATION_P_BIT = 0x4000
NOTIFICATION_CODE_MASK = 0x3FFF


def check_u8(field, value):
    """Raise FieldValidationError unless value fits in one byte"""
    if not 0 <= value <= 0xFF:
        raise FieldValidationError(field, f"value {value} does not fit in 8 bits")
    return value


def pack_attribute(attr_type, value):
    """Frame a value as Type | Length | Value | Padding"""
    check_u8(attribute_name(attr_type), attr_type)
    length = ATTRIBUTE_HEADER_LENGTH + len(value)
    padding = (4 - (length % 4)) % 4
    length += padding

    if length > MAX_ATTRIBUTE_LENGTH:
        raise FieldValidationError(
            attribute_name(attr_type),
            f"encoded length {length} exceeds {MAX_ATTRIBUTE_LENGTH} bytes")

    return struct.pack('!BB', attr_type, length // 4) + value + (b'\x00' * padding)


def _pack_u16(attr_type, value):
    if not 0 <= value <= 0xFFFF:
        raise FieldValidationError(attribute_name(attr_type),
                                   f"value {value} does not fit in 16 bits")
    return struct.pack('!H', value)


def _require(data, length):
    if len(data) < length:
        raise ValueError(f"need at least {length} bytes, got {len(data)}")


class Attribute:
    """Base class for all attributes"""
    attr_type = None

    def encode_value(self):
        """Return the Value part (without header and padding)"""
        raise NotImplementedError

    def unpack(self, data):
        """Populate this attribute from its Value part (padding included)"""
        raise NotImplementedError

    def pack(self):
        return pack_attribute(self.attr_type, self.encode_value())

    @property
    def name(self):
        return attribute_name(self.attr_type)

    def __eq__(self, other):
        if not isinstance(other, Attribute):
            return NotImplemented
        return type(self) is type(other) and vars(self) == vars(other)

    def __repr__(self):
        fields = ', '.join(f"{k}={v!r}" for k, v in vars(self).items())
        return f"{type(self).__name__}({fields})"


class _FixedAttribute(Attribute):
    """Fixed size opaque value, optionally behind two reserved bytes"""
    field = None
    length = 16
    reserved = False

    def encode_value(self):
        value = getattr(self, self.field)
        if value is None or len(value) != self.length:
            got = 'nothing' if value is None else f"{len(value)} bytes"
            raise FieldValidationError(self.name, f"must be {self.length} bytes, got {got}")
        return (RESERVED if self.reserved else b'') + bytes(value)

    def unpack(self, data):
        offset = len(RESERVED) if self.reserved else 0
        _require(data, offset + self.length)
        setattr(self, self.field, bytes(data[offset:offset + self.length]))


class RandAttribute(_FixedAttribute):
    """AT_RAND (RFC 4187 Section 10.6)"""
    attr_type = AT_RAND
    field = 'rand'
    length = RAND_LENGTH

    def __init__(self, rand=None):
        self.rand = rand


class AutnAttribute(_FixedAttribute):
    """AT_AUTN (RFC 4187 Section 10.7)"""
    attr_type = AT_AUTN
    field = 'autn'
    length = AUTN_LENGTH

    def __init__(self, autn=None):
        self.autn = autn


class AutsAttribute(_FixedAttribute):
    """AT_AUTS (RFC 4187 Section 10.9)"""
    attr_type = AT_AUTS
    field = 'auts'
    length = AUTS_LENGTH

    def __init__(self, auts=None):
        self.auts = auts


class NonceMtAttribute(_FixedAttribute):
    """AT_NONCE_MT (RFC 4186 Section 10.1)"""
    attr_type = AT_NONCE_MT
    field = 'nonce_mt'
    length = NONCE_LENGTH
    reserved = True

    def __init__(self, nonce_mt=None):
        self.nonce_mt = nonce_mt


class NonceSAttribute(_FixedAttribute):
    """AT_NONCE_S (RFC 4187 Section 10.18)"""
    attr_type = AT_NONCE_S
    field = 'nonce_s'
    length = NONCE_LENGTH
    reserved = True

    def __init__(self, nonce_s=None):
        self.nonce_s = nonce_s


class IvAttribute(_FixedAttribute):
    """AT_IV (RFC 4187 Section 10.12)"""
    attr_type = AT_IV
    field = 'iv'
    length = IV_LENGTH
    reserved = True

    def __init__(self, iv=None):
        self.iv = iv


class MacAttribute(Attribute):
    """AT_MAC (RFC 4187 Section 10.15)

    A freshly constructed AT_MAC holds 16 zero bytes, which is exactly the
    placeholder the MAC is computed over.
    """
    attr_type = AT_MAC

    def __init__(self, mac=None):
        self.mac = bytes(MAC_LENGTH) if mac is None else mac

    def encode_value(self):
        if len(self.mac) != MAC_LENGTH:
            raise FieldValidationError(self.name,
                                       f"must be {MAC_LENGTH} bytes, got {len(self.mac)} bytes")
        return RESERVED + bytes(self.mac)

    def unpack(self, data):
        _require(data, len(RESERVED) + MAC_LENGTH)
        self.mac = bytes(data[2:2 + MAC_LENGTH])


class ResAttribute(Attribute):
    """AT_RES (RFC 4187 Section 10.8), length is carried in bits"""
    attr_type = AT_RES

    def __init__(self, res=b'', bit_length=None):
        self.res = res
        self.bit_length = len(res) * 8 if bit_length is None else bit_length

    def encode_value(self):
        if len(self.res) != (self.bit_length + 7) // 8:
            raise FieldValidationError(
                self.name,
                f"{len(self.res)} bytes cannot hold a {self.bit_length} bit RES")
        return _pack_u16(self.attr_type, self.bit_length) + bytes(self.res)

    def unpack(self, data):
        _require(data, 2)
        self.bit_length = struct.unpack('!H', data[:2])[0]
        length = (self.bit_length + 7) // 8
        _require(data, 2 + length)
        self.res = bytes(data[2:2 + length])


class _StringAttribute(Attribute):
    """2 byte actual length followed by UTF-8 text"""
    field = None

    def encode_value(self):
        raw = getattr(self, self.field).encode('utf-8')
        return _pack_u16(self.attr_type, len(raw)) + raw

    def unpack(self, data):
        _require(data, 2)
        length = struct.unpack('!H', data[:2])[0]
        _require(data, 2 + length)
        setattr(self, self.field, bytes(data[2:2 + length]).decode('utf-8'))


class IdentityAttribute(_StringAttribute):
    """AT_IDENTITY (RFC 4187 Section 10.5)"""
    attr_type = AT_IDENTITY
    field = 'identity'

    def __init__(self, identity=''):
        self.identity = identity


class KdfInputAttribute(_StringAttribute):
    """AT_KDF_INPUT (RFC 5448 Section 3.1), carries the access network name"""
    attr_type = AT_KDF_INPUT
    field = 'network_name'

    def __init__(self, network_name=''):
        self.network_name = network_name


class NextPseudonymAttribute(_StringAttribute):
    """AT_NEXT_PSEUDONYM (RFC 4187 Section 10.10)"""
    attr_type = AT_NEXT_PSEUDONYM
    field = 'pseudonym'

    def __init__(self, pseudonym=''):
        self.pseudonym = pseudonym


class NextReauthIdAttribute(_StringAttribute):
    """AT_NEXT_REAUTH_ID (RFC 4187 Section 10.11)"""
    attr_type = AT_NEXT_REAUTH_ID
    field = 'identity'

    def __init__(self, identity=''):
        self.identity = identity


class _ReservedAttribute(Attribute):
    """Attributes whose presence is the message; value is two reserved bytes"""

    def encode_value(self):
        return RESERVED

    def unpack(self, data):
        _require(data, len(RESERVED))


class PermanentIdReqAttribute(_ReservedAttribute):
    attr_type = AT_PERMANENT_ID_REQ


class AnyIdReqAttribute(_ReservedAttribute):
    attr_type = AT_ANY_ID_REQ


class FullauthIdReqAttribute(_ReservedAttribute):
    attr_type = AT_FULLAUTH_ID_REQ


class ResultIndAttribute(_ReservedAttribute):
    attr_type = AT_RESULT_IND


class BiddingAttribute(_ReservedAttribute):
    attr_type = AT_BIDDING


class CounterTooSmallAttribute(_ReservedAttribute):
    attr_type = AT_COUNTER_TOO_SMALL


class _IntegerAttribute(Attribute):
    """Single 16-bit big-endian integer"""
    field = None

    def encode_value(self):
        return _pack_u16(self.attr_type, getattr(self, self.field))

    def unpack(self, data):
        _require(data, 2)
        setattr(self, self.field, struct.unpack('!H', data[:2])[0])


class KdfAttribute(_IntegerAttribute):
    """AT_KDF (RFC 5448 Section 3.2)"""
    attr_type = AT_KDF
    field = 'kdf'

    def __init__(self, kdf=0):
        self.kdf = kdf


class CounterAttribute(_IntegerAttribute):
    """AT_COUNTER (RFC 4187 Section 10.16)"""
    attr_type = AT_COUNTER
    field = 'counter'

    def __init__(self, counter=0):
        self.counter = counter


class SelectedVersionAttribute(_IntegerAttribute):
    attr_type = AT_SELECTED_VERSION
    field = 'version'

    def __init__(self, version=0):
        self.version = version


class ClientErrorCodeAttribute(_IntegerAttribute):
    """AT_CLIENT_ERROR_CODE (RFC 4187 Section 10.20)"""
    attr_type = AT_CLIENT_ERROR_CODE
    field = 'code'

    def __init__(self, code=0):
        self.code = code


class NotificationAttribute(Attribute):
    """AT_NOTIFICATION (RFC 4187 Section 10.19)

    S (success) is the most significant bit, P (phase) the next one and the
    remaining 14 bits hold the notification code.
    """
    attr_type = AT_NOTIFICATION

    def __init__(self, s=False, p=False, code=0):
        self.s = s
        self.p = p
        self.code = code

    @classmethod
    def from_value(cls, value):
        """Build from a full 16-bit notification value, e.g. 32768 (Success)"""
        return cls(s=bool(value & NOTIFICATION_S_BIT),
                   p=bool(value & NOTIFICATION_P_BIT),
                   code=value & NOTIFICATION_CODE_MASK)

    @property
    def value(self):
        value = self.code
        if self.s:
            value |= NOTIFICATION_S_BIT
        if self.p:
            value |= NOTIFICATION_P_BIT
        return value

    def encode_value(self):
        if not 0 <= self.code <= NOTIFICATION_CODE_MASK:
            raise FieldValidationError(self.name,
                                       f"code {self.code} does not fit in 14 bits")
        return struct.pack('!H', self.value)

    def unpack(self, data):
        _require(data, 2)
        value = struct.unpack('!H', data[:2])[0]
        self.s = bool(value & NOTIFICATION_S_BIT)
        self.p = bool(value & NOTIFICATION_P_BIT)
        self.code = value & NOTIFICATION_CODE_MASK


class VersionListAttribute(Attribute):
    """AT_VERSION_LIST (RFC 4186 Section 10.2)"""
    attr_type = AT_VERSION_LIST

    def __init__(self, versions=None):
        self.versions = list(versions) if versions else []

    def encode_value(self):
        body = b''.join(_pack_u16(self.attr_type, v) for v in self.versions)
        return _pack_u16(self.attr_type, len(body)) + body

    def unpack(self, data):
        _require(data, 2)
        length = struct.unpack('!H', data[:2])[0]
        if length % 2:
            raise ValueError(f"version list length {length} is not a multiple of 2")
        _require(data, 2 + length)
        self.versions = [struct.unpack_from('!H', data, 2 + i * 2)[0]
                         for i in range(length // 2)]


class _OpaqueAttribute(Attribute):
    """Two reserved bytes followed by data passed through untouched"""
    field = None

    def encode_value(self):
        return RESERVED + bytes(getattr(self, self.field))

    def unpack(self, data):
        _require(data, len(RESERVED))
        setattr(self, self.field, bytes(data[2:]))


class CheckcodeAttribute(_OpaqueAttribute):
    """AT_CHECKCODE (RFC 4187 Section 10.13)"""
    attr_type = AT_CHECKCODE
    field = 'checkcode'

    def __init__(self, checkcode=b''):
        self.checkcode = checkcode


class EncrDataAttribute(_OpaqueAttribute):
    """AT_ENCR_DATA (RFC 4187 Section 10.12)"""
    attr_type = AT_ENCR_DATA
    field = 'encrypted_data'

    def __init__(self, encrypted_data=b''):
        self.encrypted_data = encrypted_data


class PaddingAttribute(Attribute):
    """AT_PADDING (RFC 4187 Section 10.12), only valid inside AT_ENCR_DATA"""
    attr_type = AT_PADDING

    def __init__(self, length=0):
        self.length = length

    def encode_value(self):
        return bytes(self.length)

    def unpack(self, data):
        self.length = len(data)


class GenericAttribute(Attribute):
    """Attribute of a type this library does not know; value kept verbatim"""

    def __init__(self, attr_type=0, data=b''):
        self.attr_type = attr_type
        self.data = data

    def encode_value(self):
        return bytes(self.data)

    def unpack(self, data):
        self.data = bytes(data)


ATTRIBUTE_CLASSES = {
    cls.attr_type: cls for cls in (
        RandAttribute, AutnAttribute, ResAttribute, AutsAttribute,
        PaddingAttribute, NonceMtAttribute, PermanentIdReqAttribute,
        MacAttribute, NotificationAttribute, AnyIdReqAttribute,
        IdentityAttribute, VersionListAttribute, SelectedVersionAttribute,
        FullauthIdReqAttribute, CounterAttribute, CounterTooSmallAttribute,
        NonceSAttribute, ClientErrorCodeAttribute, KdfInputAttribute,
        KdfAttribute, IvAttribute, EncrDataAttribute, NextPseudonymAttribute,
        NextReauthIdAttribute, CheckcodeAttribute, ResultIndAttribute,
        BiddingAttribute,
    )
}


def is_skippable(attr_type):
    """Types 128-255 may be ignored by a peer that does not know them"""
    return attr_type >= 128


def decode_attribute(attr_type, data):
    """Decode one attribute Value; unknown types become GenericAttribute"""
    cls = ATTRIBUTE_CLASSES.get(attr_type)
    if cls is None:
        if not is_skippable(attr_type):
            logger.warning(f"Unknown non-skippable attribute type {attr_type}, keeping raw value")
        attr = GenericAttribute(attr_type)
    else:
        attr = cls()

    try:
        attr.unpack(data)
    except (ValueError, struct.error) as e:
        raise AttributeDecodeError(attr_type, str(e)) from e

    return attr


def unpack_attributes(data):
    """Parse an attribute stream into a list of attributes, in wire order"""
    attributes = []
    offset = 0
    while offset < len(data):
        if offset + ATTRIBUTE_HEADER_LENGTH > len(data):
            raise FramingError(f"Truncated attribute header at offset {offset}")

        attr_type, length_words = struct.unpack('!BB', data[offset:offset + 2])
        length = length_words * 4
        if length == 0:
            raise FramingError(f"Zero length attribute {attribute_name(attr_type)} at offset {offset}")
        if offset + length > len(data):
            raise FramingError(
                f"{attribute_name(attr_type)} length ({length}) exceeds available data "
                f"({len(data) - offset})")

        value = data[offset + ATTRIBUTE_HEADER_LENGTH:offset + length]
        attributes.append(decode_attribute(attr_type, value))
        offset += length

    return attributes


def pack_attributes(attributes):
    return b''.join(attr.pack() for attr in attributes)
