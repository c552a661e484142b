"""
pyEAPAKA - EAP-AKA (RFC 4187) and EAP-AKA' (RFC 5448) packet codec and key derivation

Parse an incoming packet:

    packet = parse(data)

Build a challenge and protect it with K_aut:

    keys = derive_keys_aka(identity, ck, ik)
    packet = EAPPacket(EAP_REQUEST, 1, EAP_TYPE_AKA, AKA_CHALLENGE, [
        RandAttribute(rand), AutnAttribute(autn), MacAttribute()])
    calculate_and_set_mac(packet, keys.k_aut)
    data = packet.pack()
"""

from .constants import *  # noqa: F401,F403
from .errors import (
    EAPAKAError, FramingError, AttributeDecodeError, FieldValidationError,
    ProtocolStateError, EntropyError,
)
from .attributes import (
    Attribute, GenericAttribute, RandAttribute, AutnAttribute, ResAttribute,
    AutsAttribute, PaddingAttribute, NonceMtAttribute, PermanentIdReqAttribute,
    MacAttribute, NotificationAttribute, AnyIdReqAttribute, IdentityAttribute,
    VersionListAttribute, SelectedVersionAttribute, FullauthIdReqAttribute,
    CounterAttribute, CounterTooSmallAttribute, NonceSAttribute,
    ClientErrorCodeAttribute, KdfInputAttribute, KdfAttribute, IvAttribute,
    EncrDataAttribute, NextPseudonymAttribute, NextReauthIdAttribute,
    CheckcodeAttribute, ResultIndAttribute, BiddingAttribute,
    ATTRIBUTE_CLASSES, pack_attribute, decode_attribute,
)
from .packet import EAPPacket, parse
from .mac import (
    compute_mac, calculate_and_set_mac, verify_mac, compute_checkcode, verify_checkcode,
)
from .kdf import (
    AkaKeys, AkaPrimeKeys, AkaReauthKeys, derive_keys_aka, derive_reauth_keys_aka,
    derive_ck_prime_ik_prime, derive_ck_prime_ik_prime_ts33402, derive_keys_aka_prime,
    derive_reauth_keys_aka_prime, sha1_chain_prf, fips186_2_prf, prf_plus,
)
from .encr import encrypt_attributes, decrypt_attributes
from .mppe import encrypt_mppe_key, decrypt_mppe_key

__version__ = '1.0.0'
