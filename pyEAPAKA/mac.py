"""
AT_MAC and AT_CHECKCODE computation

EAP-AKA:  HMAC-SHA1-128   (RFC 4187 Section 10.15)
EAP-AKA': HMAC-SHA256-128 (RFC 5448 Section 3.4.1)

The MAC covers the whole EAP packet with the AT_MAC value set to zero,
optionally followed by extra data (NONCE_S when answering a
re-authentication). It is always computed on a copy of the packet, so the
caller's packet only changes when calculate_and_set_mac() stores the result.
"""

import hashlib
import hmac
import logging

from .attributes import MacAttribute
from .constants import EAP_TYPE_AKA, EAP_TYPE_AKA_PRIME, MAC_LENGTH
from .errors import FieldValidationError, ProtocolStateError
from .packet import EAPPacket

logger = logging.getLogger(__name__)

DIGESTS = {
    EAP_TYPE_AKA: hashlib.sha1,
    EAP_TYPE_AKA_PRIME: hashlib.sha256,
}


def _digest_for(eap_type, purpose):
    try:
        return DIGESTS[eap_type]
    except KeyError:
        raise ProtocolStateError(f"Unsupported EAP type for {purpose}: {eap_type}") from None


def _find_mac(packet):
    for attr in packet.attributes:
        if isinstance(attr, MacAttribute):
            return attr
    raise ProtocolStateError("AT_MAC attribute not found")


def compute_mac(packet, k_aut, extra=b''):
    """Expected AT_MAC value for the packet, without modifying it"""
    _find_mac(packet)
    digest = _digest_for(packet.eap_type, 'MAC calculation')

    work = packet.copy()
    _find_mac(work).mac = bytes(MAC_LENGTH)
    data = work.pack()

    return hmac.new(k_aut, data + extra, digest).digest()[:MAC_LENGTH]


def calculate_and_set_mac(packet, k_aut, extra=b''):
    """Compute the MAC and store it in the packet's AT_MAC attribute"""
    mac = compute_mac(packet, k_aut, extra)
    _find_mac(packet).mac = mac
    logger.debug(f"AT_MAC set for id={packet.identifier}: {mac.hex()}")
    return mac


def verify_mac(packet, k_aut, extra=b''):
    """Check the received AT_MAC value; returns True on match

    Missing AT_MAC or an unsupported method type raise ProtocolStateError
    rather than returning False.
    """
    received = _find_mac(packet).mac
    if received is None:
        raise FieldValidationError('AT_MAC', 'no received value to verify')
    expected = compute_mac(packet, k_aut, extra)

    if hmac.compare_digest(bytes(received), expected):
        return True

    logger.warning(f"AT_MAC verification failed for id={packet.identifier}")
    return False


def compute_checkcode(messages, eap_type):
    """AT_CHECKCODE value over the AKA-Identity round trips (RFC 4187 Section 10.13)

    messages are the EAP-Request/AKA-Identity and EAP-Response/AKA-Identity
    packets in the order they were exchanged, as bytes or EAPPacket. With no
    identity round the checkcode is empty.
    """
    digest = _digest_for(eap_type, 'AT_CHECKCODE')
    if not messages:
        return b''

    h = digest()
    for message in messages:
        h.update(message.pack() if isinstance(message, EAPPacket) else bytes(message))
    return h.digest()


def verify_checkcode(checkcode, messages, eap_type):
    return hmac.compare_digest(bytes(checkcode), compute_checkcode(messages, eap_type))
