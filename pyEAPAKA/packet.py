"""
EAP packet model, parser and marshaler (RFC 3748 Section 4, RFC 4187 Section 8.1)

    EAP header:     Code (1) | Identifier (1) | Length (2)
    AKA header:     Type (1) | Subtype (1) | Reserved (2)
    Attributes:     Type (1) | Length/4 (1) | Value ... (see attributes.py)
"""

import copy
import logging
import struct

from .attributes import check_u8, pack_attributes, unpack_attributes
from .constants import (
    EAP_REQUEST, EAP_RESPONSE, EAP_SUCCESS, EAP_FAILURE, EAP_TYPE_IDENTITY,
    AKA_TYPES, EAP_HEADER_LENGTH, AKA_HEADER_LENGTH, MAX_PACKET_LENGTH,
    CODE_NAMES, SUBTYPE_NAMES,
)
from .errors import FieldValidationError, FramingError

logger = logging.getLogger(__name__)


class EAPPacket:
    """EAP packet, with the EAP-AKA/AKA' method header and attributes when present

    Success and Failure packets are header only: eap_type, subtype and
    attributes are ignored for them. For Request/Response packets of a method
    other than AKA/AKA' (e.g. Identity) the method data following the Type
    byte is kept verbatim in type_data.
    """
    def __init__(self, code=EAP_REQUEST, identifier=0, eap_type=None, subtype=None,
                 attributes=None, type_data=b''):
        self.code = code
        self.identifier = identifier
        self.eap_type = eap_type
        self.subtype = subtype
        self.attributes = list(attributes) if attributes else []
        self.type_data = type_data

    @classmethod
    def identity_response(cls, identifier, identity):
        """EAP-Response/Identity carrying an NAI"""
        return cls(EAP_RESPONSE, identifier, EAP_TYPE_IDENTITY,
                   type_data=identity.encode('utf-8'))

    @property
    def identity(self):
        """NAI of an EAP-Request/Response Identity packet, None otherwise"""
        if self.eap_type != EAP_TYPE_IDENTITY:
            return None
        return self.type_data.decode('utf-8')

    def is_aka(self):
        return self.code in (EAP_REQUEST, EAP_RESPONSE) and self.eap_type in AKA_TYPES

    def find_attribute(self, attr_type):
        """First attribute of the given type, or None"""
        for attr in self.attributes:
            if attr.attr_type == attr_type:
                return attr
        return None

    def find_attributes(self, attr_type):
        return [attr for attr in self.attributes if attr.attr_type == attr_type]

    def copy(self):
        return copy.deepcopy(self)

    def pack(self):
        """Pack packet into bytes"""
        check_u8('Code', self.code)
        check_u8('Identifier', self.identifier)

        payload = b''
        if self.code in (EAP_REQUEST, EAP_RESPONSE):
            if self.eap_type in AKA_TYPES:
                if self.subtype is None:
                    raise FieldValidationError('Subtype', 'required for EAP-AKA packets')
                check_u8('Subtype', self.subtype)
                payload = struct.pack('!BBH', self.eap_type, self.subtype, 0)
            elif self.eap_type is not None:
                check_u8('Type', self.eap_type)
                payload = bytes([self.eap_type]) + bytes(self.type_data)
            payload += pack_attributes(self.attributes)

        length = EAP_HEADER_LENGTH + len(payload)
        if length > MAX_PACKET_LENGTH:
            raise FieldValidationError('Length', f"packet length {length} exceeds {MAX_PACKET_LENGTH}")

        return struct.pack('!BBH', self.code, self.identifier, length) + payload

    def __eq__(self, other):
        if not isinstance(other, EAPPacket):
            return NotImplemented
        return (self.code == other.code and
                self.identifier == other.identifier and
                self.eap_type == other.eap_type and
                self.subtype == other.subtype and
                bytes(self.type_data) == bytes(other.type_data) and
                self.attributes == other.attributes)

    def __repr__(self):
        parts = [f"code={CODE_NAMES.get(self.code, self.code)}", f"identifier={self.identifier}"]
        if self.eap_type is not None:
            parts.append(f"eap_type={self.eap_type}")
        if self.subtype is not None:
            parts.append(f"subtype={SUBTYPE_NAMES.get(self.subtype, self.subtype)}")
        if self.type_data:
            parts.append(f"type_data={self.type_data!r}")
        if self.attributes:
            parts.append(f"attributes={self.attributes!r}")
        return f"EAPPacket({', '.join(parts)})"


def parse(data):
    """Parse an EAP packet from bytes

    Only the first Length bytes are used; anything after that (e.g. link
    layer padding) is ignored. Raises FramingError, or AttributeDecodeError
    naming the attribute that failed.
    """
    if len(data) < EAP_HEADER_LENGTH:
        raise FramingError(f"EAP packet too short: {len(data)} bytes")

    code, identifier, length = struct.unpack('!BBH', data[:EAP_HEADER_LENGTH])
    if length > len(data):
        raise FramingError(f"EAP length ({length}) exceeds available data ({len(data)})")
    if length < EAP_HEADER_LENGTH:
        raise FramingError(f"EAP length ({length}) shorter than the header")

    packet = EAPPacket(code, identifier)
    if code in (EAP_SUCCESS, EAP_FAILURE):
        logger.debug(f"Parsed EAP {CODE_NAMES[code]}: id={identifier}")
        return packet

    payload = data[EAP_HEADER_LENGTH:length]
    if not payload:
        return packet

    packet.eap_type = payload[0]
    if packet.eap_type not in AKA_TYPES:
        packet.type_data = bytes(payload[1:])
        logger.debug(f"Parsed EAP packet: code={code}, id={identifier}, type={packet.eap_type} (not AKA)")
        return packet

    if len(payload) < AKA_HEADER_LENGTH:
        raise FramingError(f"EAP-AKA header truncated: {len(payload)} bytes")

    packet.subtype = payload[1]
    packet.attributes = unpack_attributes(payload[AKA_HEADER_LENGTH:])

    logger.debug(f"Parsed EAP packet: code={code}, id={identifier}, type={packet.eap_type}, "
                 f"subtype={packet.subtype}, attributes={len(packet.attributes)}")
    return packet
